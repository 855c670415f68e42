"""Error translation for the API.

Every error leaves the service in the same envelope:

    {"success": false, "error": {"code": ..., "message": ...}}

``translate_exception`` decides status, code and message; the handlers
registered by ``register_exception_handlers`` log and render it.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from nanjil.app.core.config import settings
from nanjil.app.core.logging import get_log_context, get_logger
from nanjil.app.exceptions import ServiceException

logger = get_logger(__name__)


@dataclass
class TranslatedError:
    """HTTP rendering of an exception."""
    status_code: int
    code: str
    message: str
    headers: Optional[Dict[str, str]] = None


def translate_exception(exc: Exception) -> TranslatedError:
    """Map an exception to status, machine-readable code and message.

    Database drivers report constraint violations only through their
    message text, so those are matched on substrings.
    """
    if isinstance(exc, ServiceException):
        return TranslatedError(exc.status_code, exc.code, exc.message)

    if isinstance(exc, StarletteHTTPException):
        code = "NOT_FOUND" if exc.status_code == 404 else "HTTP_EXCEPTION"
        return TranslatedError(
            exc.status_code,
            code,
            exc.detail if isinstance(exc.detail, str) else str(exc.detail),
            headers=getattr(exc, "headers", None),
        )

    text = str(exc).lower()
    if "unique constraint" in text:
        return TranslatedError(409, "DUPLICATE_ENTRY", "Record already exists")
    if "foreign key constraint" in text:
        return TranslatedError(400, "INVALID_REFERENCE", "Invalid reference in request")

    return TranslatedError(500, "INTERNAL_SERVER_ERROR", "An unexpected error occurred")


def error_body(code: str, message: str, **extra: Any) -> Dict[str, Any]:
    error: Dict[str, Any] = {"code": code, "message": message}
    error.update(extra)
    return {"success": False, "error": error}


def _render(request: Request, exc: Exception) -> JSONResponse:
    translated = translate_exception(exc)
    request_id = getattr(request.state, "request_id", None)
    context = get_log_context(
        request_id=request_id,
        path=request.url.path,
        method=request.method,
        status_code=translated.status_code,
        exception_type=type(exc).__name__,
    )

    if translated.status_code >= 500:
        logger.error(f"Application error: {exc}", exc_info=exc, extra=context)
    else:
        logger.info(f"Request failed with {translated.code}: {exc}", extra=context)

    extra: Dict[str, Any] = {}
    if translated.status_code >= 500:
        if settings.debug:
            extra["detail"] = str(exc)
        if request_id:
            extra["request_id"] = request_id

    return JSONResponse(
        status_code=translated.status_code,
        content=error_body(translated.code, translated.message, **extra),
        headers=translated.headers,
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Install the error translator on an application."""

    @app.exception_handler(ServiceException)
    async def service_exception_handler(request: Request, exc: ServiceException) -> JSONResponse:
        return _render(request, exc)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return _render(request, exc)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        errors = [
            {"loc": list(err.get("loc", ())), "msg": err.get("msg", ""), "type": err.get("type", "")}
            for err in exc.errors()
        ]
        return JSONResponse(
            status_code=422,
            content=error_body("VALIDATION_ERROR", "Request validation failed", details=errors),
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Translate anything unhandled; tracebacks stay in server logs."""
        return _render(request, exc)
