"""Success envelopes shared by the routers."""

from datetime import datetime, timezone
from typing import Any, Optional


def success_response(data: Any, message: Optional[str] = None) -> dict[str, Any]:
    """Wrap a payload as {"success": true, "data": ..., "timestamp": ...}."""
    body: dict[str, Any] = {
        "success": True,
        "data": data,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
    if message is not None:
        body["message"] = message
    return body
