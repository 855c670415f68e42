"""Admin role verification.

The identity provider authenticates users upstream of this service and
forwards their claims as request headers. This module only decides
whether those claims grant admin access.
"""

from dataclasses import dataclass
from typing import Iterable, Optional

from fastapi import Request

ADMIN_ROLE = "admin"

USER_ID_HEADER = "X-User-Id"
USER_EMAIL_HEADER = "X-User-Email"
USER_ROLE_HEADER = "X-User-Role"


@dataclass
class AdminIdentity:
    """Claims forwarded by the identity provider."""
    user_id: Optional[str]
    email: Optional[str] = None
    role: Optional[str] = None


@dataclass
class AdminAccess:
    is_admin: bool
    user_id: str
    email: Optional[str]
    role: Optional[str]

    def to_response(self) -> dict:
        return {
            "isAdmin": self.is_admin,
            "userId": self.user_id,
            "email": self.email,
            "role": self.role,
        }


def identity_from_request(request: Request) -> AdminIdentity:
    """Read the forwarded identity claims; blank headers count as missing."""
    def header(name: str) -> Optional[str]:
        value = request.headers.get(name, "").strip()
        return value or None

    return AdminIdentity(
        user_id=header(USER_ID_HEADER),
        email=header(USER_EMAIL_HEADER),
        role=header(USER_ROLE_HEADER),
    )


def verify_admin_access(identity: AdminIdentity, admin_emails: Iterable[str] = ()) -> AdminAccess:
    """Grant admin when the role claim is "admin" or the email is allow-listed.

    Callers must check ``identity.user_id`` first; an anonymous identity
    raises ValueError.
    """
    if not identity.user_id:
        raise ValueError("identity has no user id")

    allowed = {email.lower() for email in admin_emails}
    email_is_admin = bool(identity.email) and identity.email.lower() in allowed

    return AdminAccess(
        is_admin=identity.role == ADMIN_ROLE or email_is_admin,
        user_id=identity.user_id,
        email=identity.email,
        role=identity.role,
    )
