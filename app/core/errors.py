from __future__ import annotations

from fastapi import status


class RoomsError(Exception):
    """Base class for errors raised by services and stores.

    Each subclass carries the HTTP status the API answers with, so routers can
    let these propagate and a single handler in ``create_app`` renders them.
    """

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail: str = "Internal server error"

    def __init__(self, detail: str | None = None) -> None:
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class AuthenticationRequired(RoomsError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = "User not authenticated"


class NotAuthorized(RoomsError):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "Not authorized"


class RoomNotFound(RoomsError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Room not found"


class InvalidRating(RoomsError):
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    default_detail = "Rating must be an integer from 1 to 5"


class InvalidUpload(RoomsError):
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    default_detail = "Invalid image upload"


class StoreError(RoomsError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_detail = "Storage unavailable"


class StoreReadError(StoreError):
    default_detail = "Failed to read from storage"


class StoreWriteError(StoreError):
    default_detail = "Failed to write to storage"
