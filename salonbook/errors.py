# salonbook/errors.py

from fastapi import HTTPException


class BookingError(Exception):
    """Base class for failures the booking core reports to callers.

    ``reason`` is the machine-readable code the frontend localises;
    ``status_code`` is the HTTP status the API answers with.
    """

    reason = "BookingError"
    status_code = 422

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_http(self) -> HTTPException:
        return HTTPException(
            status_code=self.status_code,
            detail={"reason": self.reason, "message": self.message},
        )


class OutOfHours(BookingError):
    reason = "OutOfHours"


class Excepted(BookingError):
    reason = "Excepted"


class DoubleBooked(BookingError):
    reason = "DoubleBooked"


class InvalidTransition(BookingError):
    reason = "InvalidTransition"
    status_code = 409


class Forbidden(BookingError):
    reason = "Forbidden"
    status_code = 403


class StorageError(BookingError):
    reason = "StorageError"
    status_code = 500


class ValidationError(BookingError, ValueError):
    # also a ValueError so pydantic validators report it as a field error
    reason = "ValidationError"
