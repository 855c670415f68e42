import asyncio
import contextlib
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, AsyncGenerator, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from nanjil.app.api.admin import router as admin_router
from nanjil.app.api.dispatch import router as dispatch_router
from nanjil.app.api.photos import router as photos_router
from nanjil.app.core.config import settings
from nanjil.app.core.logging import get_logger, setup_logging
from nanjil.app.middleware.error_handler import register_exception_handlers
from nanjil.app.middleware.rate_limit import (
    FixedWindowRateLimiter,
    RateLimitMiddleware,
    run_periodic_sweep,
)
from nanjil.app.middleware.request_id import RequestIdMiddleware
from nanjil.app.services.dispatch import DispatchEstimator
from nanjil.app.services.photo_service import PhotoService

API_VERSION = "1.0.0"


def create_app(
    limiter: Optional[FixedWindowRateLimiter] = None,
    photo_service: Optional[PhotoService] = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        limiter: Rate limit store to use (built from settings if omitted)
        photo_service: Photo storage to use (built from settings if omitted)

    Returns:
        Configured FastAPI application instance
    """
    setup_logging()
    logger = get_logger(__name__)

    if limiter is None:
        limiter = FixedWindowRateLimiter(
            window_ms=settings.rate_limit_window_ms,
            max_requests=settings.rate_limit_max_requests,
            message=settings.rate_limit_message,
            max_entries=settings.rate_limit_max_entries,
        )
    if photo_service is None:
        photo_service = PhotoService(settings.upload_dir, settings.upload_url_prefix)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """Start the rate limit sweeper on startup and stop it on shutdown."""
        sweeper: Optional[asyncio.Task] = None
        if settings.rate_limit_enabled and settings.rate_limit_sweep_interval_seconds > 0:
            sweeper = asyncio.create_task(
                run_periodic_sweep(limiter, settings.rate_limit_sweep_interval_seconds)
            )

        logger.info(
            "Application startup complete",
            extra={
                "env": settings.app_env,
                "rate_limit_enabled": settings.rate_limit_enabled,
                "debug_mode": settings.debug,
            },
        )

        yield

        if sweeper is not None:
            sweeper.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await sweeper

        logger.info("Application shutdown complete")

    app = FastAPI(
        title="Nanjil MEP Service API",
        description="Service booking backend with dispatch estimation and photo uploads",
        version=API_VERSION,
        lifespan=lifespan,
    )

    app.state.rate_limiter = limiter
    app.state.photo_service = photo_service
    app.state.dispatch_estimator = DispatchEstimator(settings.dispatch_average_speed_kmh)

    # Add middleware (order matters: last added = first executed)
    if settings.rate_limit_enabled:
        app.add_middleware(
            RateLimitMiddleware,
            limiter=limiter,
            path_prefixes=settings.rate_limit_path_prefixes,
        )

    app.add_middleware(RequestIdMiddleware)

    # CORS middleware (outermost - handles preflight requests first)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "PATCH", "OPTIONS"],
        allow_headers=[
            "Content-Type",
            "Authorization",
            "Accept-Language",
            "X-Requested-With",
            "Accept",
            "Origin",
        ],
        expose_headers=["X-Request-ID", "X-RateLimit-Limit", "X-RateLimit-Remaining", "X-RateLimit-Reset"],
        max_age=settings.cors_max_age,
    )

    register_exception_handlers(app)

    app.include_router(dispatch_router)
    app.include_router(photos_router)
    app.include_router(admin_router)

    @app.get("/health")
    async def health() -> dict[str, Any]:
        return {
            "status": "ok",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "env": settings.app_env,
        }

    @app.get("/")
    async def root() -> dict[str, Any]:
        return {
            "message": "Nanjil MEP Service API",
            "version": API_VERSION,
            "status": "running",
        }

    return app


# Create the application instance
app = create_app()
