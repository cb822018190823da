"""Booking errors and their translation to API responses."""

from __future__ import annotations

from contextlib import contextmanager

from rest_framework import status  # type: ignore
from rest_framework.exceptions import APIException, ValidationError  # type: ignore


class BookingError(Exception):
    """A booking operation violated a business rule."""


class BookingConflictError(BookingError):
    """Raised when a spot is already booked for the requested interval."""


class InvalidTransitionError(BookingError):
    """Raised when a status change is not allowed from the current status."""


class BookingConflict(APIException):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Parking spot is already booked for this time."
    default_code = "booking_conflict"


@contextmanager
def translate_booking_errors():
    """Re-raise domain errors as DRF exceptions (409 for conflicts, 400 otherwise)."""
    try:
        yield
    except BookingConflictError as exc:
        raise BookingConflict(str(exc)) from exc
    except BookingError as exc:
        raise ValidationError({"detail": str(exc)}) from exc
