"""Services package for the API.

This package provides:
- Dispatch distance and arrival estimation
- Booking photo storage
- Admin access verification
"""

from nanjil.app.services.admin_access import AdminAccess, AdminIdentity, verify_admin_access
from nanjil.app.services.dispatch import (
    Coordinates,
    DispatchEstimator,
    Team,
    distance_km,
    estimate_arrival,
    find_nearest_team,
)
from nanjil.app.services.photo_service import PhotoService

__all__ = [
    "AdminAccess",
    "AdminIdentity",
    "Coordinates",
    "DispatchEstimator",
    "PhotoService",
    "Team",
    "distance_km",
    "estimate_arrival",
    "find_nearest_team",
    "verify_admin_access",
]
