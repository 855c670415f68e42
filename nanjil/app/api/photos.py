"""Booking photo upload API."""

from typing import Any

from fastapi import APIRouter, Depends, File, HTTPException, Request, UploadFile, status

from nanjil.app.api.responses import success_response
from nanjil.app.core.config import settings
from nanjil.app.services.photo_service import PhotoService

router = APIRouter(prefix="/api/bookings", tags=["photos"])


def get_photo_service(request: Request) -> PhotoService:
    return request.app.state.photo_service


@router.post("/{booking_id}/photos", status_code=status.HTTP_201_CREATED)
async def upload_photo(
    booking_id: str,
    file: UploadFile = File(...),
    photos: PhotoService = Depends(get_photo_service),
) -> dict[str, Any]:
    """Store a photo for a booking."""
    content = await file.read()
    if not content:
        raise HTTPException(status_code=400, detail="Uploaded file is empty")
    if len(content) > settings.upload_max_bytes:
        raise HTTPException(status_code=413, detail="Uploaded file is too large")

    url = await photos.upload_photo(content, file.filename, booking_id)
    return success_response({"url": url}, message="Photo uploaded successfully")
