"""Dispatch estimation API."""

from typing import Any, Optional

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel, Field

from nanjil.app.api.responses import success_response
from nanjil.app.services.dispatch import Coordinates, DispatchEstimator, Team

router = APIRouter(prefix="/api/dispatch", tags=["dispatch"])


class CoordinatesModel(BaseModel):
    """A point in decimal degrees."""

    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)

    def to_coordinates(self) -> Coordinates:
        return Coordinates(lat=self.lat, lng=self.lng)


class EstimateRequest(BaseModel):
    origin: CoordinatesModel
    destination: CoordinatesModel


class TeamModel(BaseModel):
    id: str = Field(..., min_length=1)
    skills: list[str] = []
    current_location: Optional[CoordinatesModel] = None


class NearestTeamRequest(BaseModel):
    customer_location: CoordinatesModel
    required_skill: str = Field(..., min_length=1)
    teams: list[TeamModel]


def get_dispatch_estimator(request: Request) -> DispatchEstimator:
    return request.app.state.dispatch_estimator


@router.post("/estimate")
async def estimate(
    body: EstimateRequest,
    estimator: DispatchEstimator = Depends(get_dispatch_estimator),
) -> dict[str, Any]:
    """Distance and arrival estimate between two points."""
    result = estimator.estimate(body.origin.to_coordinates(), body.destination.to_coordinates())
    return success_response({
        "distance_km": round(result.distance_km, 2),
        "estimated_arrival": result.estimated_arrival,
    })


@router.post("/nearest-team")
async def nearest_team(
    body: NearestTeamRequest,
    estimator: DispatchEstimator = Depends(get_dispatch_estimator),
) -> dict[str, Any]:
    """Closest team with the required skill, or null when none qualifies."""
    teams = [
        Team(
            id=team.id,
            skills=team.skills,
            current_location=team.current_location.to_coordinates() if team.current_location else None,
        )
        for team in body.teams
    ]
    found = estimator.nearest_team(body.customer_location.to_coordinates(), teams, body.required_skill)
    if found is None:
        return success_response(None, message="No available team has the required skill")

    nearest, arrival = found
    return success_response({
        "team_id": nearest.team_id,
        "distance_km": nearest.distance_km,
        "estimated_arrival": arrival,
    })
