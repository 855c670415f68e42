"""Core utilities for the API."""

from nanjil.app.core.config import settings
from nanjil.app.core.logging import get_logger, setup_logging

__all__ = [
    "settings",
    "get_logger",
    "setup_logging",
]
