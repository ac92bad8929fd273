"""Domain errors and their HTTP rendering."""
from __future__ import annotations

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse


class HotelError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    code: str = "error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(HotelError):
    code = "validation_error"


class RoomUnavailable(HotelError):
    code = "room_unavailable"

    def __init__(self, room_id: int, message: str = "Room already booked for these dates") -> None:
        super().__init__(message)
        self.room_id = room_id


class InvalidTransition(HotelError):
    code = "invalid_transition"

    def __init__(self, current: str, target: str, terminal: bool = False) -> None:
        if terminal:
            message = f"Booking is already {current}; its status can no longer change"
        else:
            message = f"Cannot change booking status from {current} to {target}"
        super().__init__(message)
        self.current = current
        self.target = target
        self.terminal = terminal


class NotFound(HotelError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "not_found"


class RoomInUse(HotelError):
    status_code = status.HTTP_409_CONFLICT
    code = "room_in_use"


def hotel_error_handler(_: Request, exc: HotelError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message, "code": exc.code})


def request_validation_handler(_: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    message = "; ".join(
        f"{'.'.join(str(part) for part in error['loc'] if part != 'body')}: {error['msg']}" for error in errors
    )
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": message or "Invalid request", "code": ValidationError.code},
    )


def apply_error_handlers(app: FastAPI) -> None:
    """Render domain errors and request validation failures as 4xx JSON."""

    app.add_exception_handler(HotelError, hotel_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
