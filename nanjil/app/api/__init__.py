"""API endpoints package."""

from nanjil.app.api.admin import router as admin_router
from nanjil.app.api.dispatch import router as dispatch_router
from nanjil.app.api.photos import router as photos_router

__all__ = [
    "admin_router",
    "dispatch_router",
    "photos_router",
]
