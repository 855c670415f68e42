"""Middleware package for the API."""

from nanjil.app.middleware.error_handler import register_exception_handlers, translate_exception
from nanjil.app.middleware.rate_limit import (
    FixedWindowRateLimiter,
    RateLimitMiddleware,
    get_client_id,
)
from nanjil.app.middleware.request_id import RequestIdMiddleware, get_request_id

__all__ = [
    "FixedWindowRateLimiter",
    "RateLimitMiddleware",
    "RequestIdMiddleware",
    "get_client_id",
    "get_request_id",
    "register_exception_handlers",
    "translate_exception",
]
