"""Admin access verification API."""

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from nanjil.app.core.config import settings
from nanjil.app.core.logging import get_log_context, get_logger
from nanjil.app.services.admin_access import identity_from_request, verify_admin_access

router = APIRouter(prefix="/api/admin", tags=["admin"])

logger = get_logger(__name__)


@router.post("/verify-access")
async def verify_access(request: Request) -> JSONResponse:
    """Report whether the signed-in user may use the admin dashboard.

    Anonymous callers get 401 with ``isAdmin: false`` so the frontend can
    redirect to sign-in without parsing an error envelope. Failures while
    deciding are reported as 500 in the same flat shape.
    """
    try:
        identity = identity_from_request(request)
        if not identity.user_id:
            return JSONResponse(status_code=401, content={"isAdmin": False})

        access = verify_admin_access(identity, settings.admin_emails)
    except Exception:
        logger.exception("Admin access verification failed")
        return JSONResponse(
            status_code=500,
            content={"isAdmin": False, "error": "Verification failed"},
        )

    if not access.is_admin:
        logger.info("Admin access denied", extra=get_log_context(user_id=access.user_id))
    return JSONResponse(status_code=200, content=access.to_response())
