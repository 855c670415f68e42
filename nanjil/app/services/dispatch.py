"""Dispatch estimation for bookings.

Great-circle distance between a technician team and a customer, a
human-readable arrival estimate at an assumed city travel speed, and
selection of the nearest team able to do the job.
"""

import math
from dataclasses import dataclass, field
from typing import Iterable, Optional

from nanjil.app.exceptions import InvalidCoordinateError, InvalidDistanceError

EARTH_RADIUS_KM = 6371.0
DEFAULT_SPEED_KMH = 25.0


@dataclass(frozen=True)
class Coordinates:
    """A latitude/longitude pair in decimal degrees."""
    lat: float
    lng: float


@dataclass
class Team:
    """A technician team as seen by the dispatcher."""
    id: str
    skills: list[str] = field(default_factory=list)
    current_location: Optional[Coordinates] = None


@dataclass
class NearestTeam:
    team_id: str
    distance_km: float


@dataclass
class DispatchEstimate:
    distance_km: float
    estimated_arrival: str


def _require_finite(point: Coordinates) -> None:
    if not (math.isfinite(point.lat) and math.isfinite(point.lng)):
        raise InvalidCoordinateError(point.lat, point.lng)


def distance_km(a: Coordinates, b: Coordinates) -> float:
    """Haversine distance in kilometers between two points.

    Latitude and longitude ranges are not checked; only NaN and infinity
    are rejected.

    Raises:
        InvalidCoordinateError: If any component is not finite
    """
    _require_finite(a)
    _require_finite(b)

    d_lat = math.radians(b.lat - a.lat)
    d_lng = math.radians(b.lng - a.lng)

    h = (
        math.sin(d_lat / 2) * math.sin(d_lat / 2)
        + math.cos(math.radians(a.lat)) * math.cos(math.radians(b.lat))
        * math.sin(d_lng / 2) * math.sin(d_lng / 2)
    )
    # Rounding can push h just past 1 for near-antipodal points
    h = min(1.0, max(0.0, h))
    c = 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))
    return EARTH_RADIUS_KM * c


def estimate_arrival(distance: float, speed_kmh: float = DEFAULT_SPEED_KMH) -> str:
    """Format the travel time for ``distance`` km at ``speed_kmh``.

    Durations up to an hour read "<m> minutes". Longer ones read
    "<h> hour[s] <m> minutes"; on a whole hour the minutes segment is
    empty and the string keeps its trailing space ("2 hours ").

    Examples:
        >>> estimate_arrival(25)
        '60 minutes'
        >>> estimate_arrival(52)
        '2 hours 5 minutes'

    Raises:
        InvalidDistanceError: If distance is not finite
        ValueError: If speed_kmh is not positive
    """
    if not math.isfinite(distance):
        raise InvalidDistanceError(distance)
    if not speed_kmh > 0:
        raise ValueError("speed_kmh must be positive")

    minutes = math.ceil(distance / speed_kmh * 60)

    if minutes <= 60:
        return f"{minutes} minutes"

    hours, remainder = divmod(minutes, 60)
    suffix = "s" if hours > 1 else ""
    tail = f"{remainder} minutes" if remainder > 0 else ""
    return f"{hours} hour{suffix} {tail}"


def find_nearest_team(
    customer: Coordinates,
    teams: Iterable[Team],
    required_skill: str,
) -> Optional[NearestTeam]:
    """Pick the closest team that has ``required_skill`` and a known location.

    Distances are rounded to two decimals before comparing; on a tie the
    team listed first wins.
    """
    nearest: Optional[NearestTeam] = None
    for team in teams:
        if required_skill not in team.skills or team.current_location is None:
            continue
        distance = round(distance_km(customer, team.current_location), 2)
        if nearest is None or distance < nearest.distance_km:
            nearest = NearestTeam(team_id=team.id, distance_km=distance)
    return nearest


class DispatchEstimator:
    """Distance and arrival estimates at a fixed average speed."""

    def __init__(self, average_speed_kmh: float = DEFAULT_SPEED_KMH):
        if not average_speed_kmh > 0:
            raise ValueError("average_speed_kmh must be positive")
        self.average_speed_kmh = average_speed_kmh

    def estimate(self, origin: Coordinates, destination: Coordinates) -> DispatchEstimate:
        distance = distance_km(origin, destination)
        return DispatchEstimate(
            distance_km=distance,
            estimated_arrival=estimate_arrival(distance, self.average_speed_kmh),
        )

    def nearest_team(
        self,
        customer: Coordinates,
        teams: Iterable[Team],
        required_skill: str,
    ) -> Optional[tuple[NearestTeam, str]]:
        """Nearest eligible team together with its arrival estimate."""
        nearest = find_nearest_team(customer, teams, required_skill)
        if nearest is None:
            return None
        return nearest, estimate_arrival(nearest.distance_km, self.average_speed_kmh)
