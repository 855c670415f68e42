"""Custom exceptions for the Nanjil MEP Services API."""


class ServiceException(Exception):
    """Base class for service exceptions with HTTP status code.

    All custom exceptions should inherit from this class and define
    their specific status_code and machine-readable code so the error
    translator can render a consistent response envelope.
    """
    status_code: int = 500
    code: str = "INTERNAL_SERVER_ERROR"

    def __init__(self, message: str = "Service error"):
        self.message = message
        super().__init__(message)


class InvalidCoordinateError(ServiceException):
    """Raised when a latitude or longitude is NaN or infinite.

    Maps to HTTP 422 Unprocessable Entity.
    """
    status_code = 422
    code = "INVALID_COORDINATE"

    def __init__(self, lat: float, lng: float):
        self.lat = lat
        self.lng = lng
        super().__init__(f"Coordinates must be finite numbers, got ({lat}, {lng})")


class InvalidDistanceError(ServiceException):
    """Raised when an arrival estimate is requested for a non-finite distance."""
    status_code = 422
    code = "INVALID_DISTANCE"

    def __init__(self, distance: float):
        self.distance = distance
        super().__init__(f"Distance must be a finite number, got {distance}")


class InvalidBookingIdError(ServiceException):
    """Raised when a booking id cannot be used as part of a file name."""
    status_code = 400
    code = "INVALID_BOOKING_ID"

    def __init__(self, booking_id: str):
        self.booking_id = booking_id
        super().__init__(f"Invalid booking id: {booking_id!r}")


class InvalidPhotoFilenameError(ServiceException):
    """Raised when a photo file name would resolve outside the upload directory."""
    status_code = 400
    code = "INVALID_PHOTO_FILENAME"

    def __init__(self, filename: str):
        self.filename = filename
        super().__init__(f"Invalid photo filename: {filename!r}")


class PhotoUploadError(ServiceException):
    """Raised when a photo could not be written to storage."""
    status_code = 500
    code = "PHOTO_UPLOAD_FAILED"

    def __init__(self, message: str = "Failed to upload photo"):
        super().__init__(message)
