"""Domain services for booking workflows."""

from __future__ import annotations

import logging
import secrets
import string
from datetime import datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import TYPE_CHECKING

from django.conf import settings  # type: ignore
from django.db import transaction  # type: ignore
from django.db.utils import NotSupportedError  # type: ignore
from django.utils import timezone  # type: ignore

from apps.parking.models import ParkingSpot

from .exceptions import BookingConflictError, BookingError, InvalidTransitionError
from .models import Booking

if TYPE_CHECKING:  # pragma: no cover - type checking only
    from apps.users.models import User

logger = logging.getLogger(__name__)

TICKET_ALPHABET = string.ascii_uppercase + string.digits
CENTS = Decimal("0.01")


def _lock_queryset_if_possible(queryset):
    """Apply select_for_update when inside transaction.atomic()."""

    if not transaction.get_connection().in_atomic_block:
        return queryset

    try:
        return queryset.select_for_update()
    except NotSupportedError:
        return queryset


def _locked(booking: Booking) -> Booking:
    return _lock_queryset_if_possible(
        Booking.objects.select_related("spot", "user").filter(pk=booking.pk)
    ).get()


def _dispatch(task_name: str, booking_id: int) -> None:
    """Queue a notification task; a broker outage must not fail the request."""

    from . import tasks  # local import, tasks depend on this module

    task = getattr(tasks, task_name)
    try:
        task.delay(booking_id)
    except Exception:  # noqa: BLE001
        logger.warning(f"Could not queue {task_name} for booking {booking_id}", exc_info=True)


# ============================================================================
# PRICING & TICKETS
# ============================================================================

def calculate_fee(start: datetime, end: datetime) -> Decimal:
    """Hourly rate for the interval, never below the minimum fee."""

    config = settings.PARKING
    seconds = int((end - start).total_seconds())
    hours = Decimal(seconds) / Decimal(3600)
    fee = max(Decimal(config["MINIMUM_FEE"]), hours * Decimal(config["HOURLY_RATE"]))
    return fee.quantize(CENTS, rounding=ROUND_HALF_UP)


def generate_ticket_number() -> str:
    millis = int(timezone.now().timestamp() * 1000)
    suffix = "".join(secrets.choice(TICKET_ALPHABET) for _ in range(5))
    return f"TICKET-{millis}-{suffix}"


# ============================================================================
# AVAILABILITY
# ============================================================================

def ensure_spot_is_available(
    spot,
    start_time,
    end_time,
    *,
    exclude_booking_id=None,
) -> None:
    """Ensure no pending, approved or active booking overlaps the interval."""

    bookings_qs = Booking.objects.filter(spot=spot).blocking().overlapping(start_time, end_time)

    if exclude_booking_id is not None:
        bookings_qs = bookings_qs.exclude(pk=exclude_booking_id)

    bookings_qs = _lock_queryset_if_possible(bookings_qs)

    if bookings_qs.exists():
        raise BookingConflictError("Parking spot is already booked for this time.")


def sync_spot_status(spot_id: int) -> str | None:
    """Derive the spot status from its approved and active bookings.

    Spots under maintenance are left untouched. Returns the resulting status.
    """

    spot = _lock_queryset_if_possible(ParkingSpot.objects.filter(pk=spot_id)).first()
    if spot is None:
        return None
    if spot.in_maintenance:
        return spot.status

    bookings = Booking.objects.filter(spot_id=spot_id)
    if bookings.filter(status=Booking.Status.ACTIVE).exists():
        new_status = ParkingSpot.Status.OCCUPIED
    elif bookings.filter(status=Booking.Status.APPROVED).exists():
        new_status = ParkingSpot.Status.RESERVED
    else:
        new_status = ParkingSpot.Status.AVAILABLE

    if spot.status != new_status:
        logger.info(f"Spot {spot.spot_number}: {spot.status} -> {new_status}")
        spot.status = new_status
        spot.save(update_fields=["status", "updated_at"])
    return new_status


# ============================================================================
# LIFECYCLE
# ============================================================================

def create_booking(user: "User", spot: ParkingSpot, start_time, end_time) -> Booking:
    with transaction.atomic():
        # Serialises concurrent requests for the same spot.
        _lock_queryset_if_possible(ParkingSpot.objects.filter(pk=spot.pk)).get()
        ensure_spot_is_available(spot, start_time, end_time)
        booking = Booking.objects.create(
            user=user,
            spot=spot,
            start_time=start_time,
            end_time=end_time,
            expected_cost=calculate_fee(start_time, end_time),
        )
    logger.info(
        f"Booking {booking.pk} requested by user {user.pk} for spot {spot.spot_number} "
        f"({start_time.isoformat()} - {end_time.isoformat()})"
    )
    return booking


def approve_booking(booking: Booking) -> Booking:
    with transaction.atomic():
        booking = _locked(booking)
        if booking.status != Booking.Status.PENDING:
            raise InvalidTransitionError(f"Booking is already {booking.status}")
        ensure_spot_is_available(
            booking.spot,
            booking.start_time,
            booking.end_time,
            exclude_booking_id=booking.pk,
        )
        booking.transition_to(Booking.Status.APPROVED)
        booking.ticket_number = generate_ticket_number()
        booking.expected_cost = calculate_fee(booking.start_time, booking.end_time)
        booking.save(update_fields=["status", "ticket_number", "expected_cost", "updated_at"])

    logger.info(f"Booking {booking.pk} approved, ticket {booking.ticket_number}")
    _dispatch("notify_booking_approved", booking.pk)
    return booking


def reject_booking(booking: Booking, reason: str = "") -> Booking:
    with transaction.atomic():
        booking = _locked(booking)
        if booking.status != Booking.Status.PENDING:
            raise InvalidTransitionError(f"Booking is already {booking.status}")
        booking.transition_to(Booking.Status.REJECTED)
        booking.cancellation_reason = reason
        booking.cancelled_by = Booking.CancelledBy.ADMIN
        booking.save(update_fields=["status", "cancellation_reason", "cancelled_by", "updated_at"])

    logger.info(f"Booking {booking.pk} rejected")
    _dispatch("notify_booking_rejected", booking.pk)
    return booking


def cancel_booking(booking: Booking, actor: "User", reason: str = "") -> Booking:
    """Cancel a pending or approved booking.

    Owners cannot cancel an approved booking within the cancellation cutoff
    before its start; administrators are not bound by the cutoff.
    """

    by_admin = actor.is_admin()
    with transaction.atomic():
        booking = _locked(booking)
        if booking.status not in (Booking.Status.PENDING, Booking.Status.APPROVED):
            raise InvalidTransitionError(f"Cannot cancel a booking that is {booking.status}.")

        if not by_admin and booking.status == Booking.Status.APPROVED:
            cutoff = timedelta(minutes=settings.PARKING["CANCELLATION_CUTOFF_MINUTES"])
            if booking.start_time - timezone.now() < cutoff:
                raise BookingError(
                    f"Bookings cannot be cancelled within {settings.PARKING['CANCELLATION_CUTOFF_MINUTES']} "
                    "minutes of the start time."
                )

        booking.transition_to(Booking.Status.CANCELLED)
        booking.cancellation_reason = reason
        booking.cancelled_by = Booking.CancelledBy.ADMIN if by_admin else Booking.CancelledBy.USER
        booking.save(update_fields=["status", "cancellation_reason", "cancelled_by", "updated_at"])

    logger.info(f"Booking {booking.pk} cancelled by {booking.cancelled_by} {actor.pk}")
    _dispatch("notify_booking_cancelled", booking.pk)
    return booking


def check_in_booking(booking: Booking, now: datetime | None = None) -> Booking:
    now = now or timezone.now()
    with transaction.atomic():
        booking = _locked(booking)
        if booking.status != Booking.Status.APPROVED:
            raise InvalidTransitionError(f"Cannot check in a booking that is {booking.status}.")

        opens_at = booking.start_time - timedelta(minutes=settings.PARKING["CHECK_IN_EARLY_MINUTES"])
        if now < opens_at:
            raise BookingError("Check-in is not open yet for this booking.")
        if now > booking.end_time:
            raise BookingError("The booking period has already ended.")

        booking.transition_to(Booking.Status.ACTIVE)
        booking.actual_check_in_time = now
        booking.save(update_fields=["status", "actual_check_in_time", "updated_at"])

    logger.info(f"Booking {booking.pk} checked in at {now.isoformat()}")
    return booking


def check_out_booking(booking: Booking, now: datetime | None = None) -> Booking:
    now = now or timezone.now()
    with transaction.atomic():
        booking = _locked(booking)
        if booking.status != Booking.Status.ACTIVE:
            raise InvalidTransitionError(f"Cannot check out a booking that is {booking.status}.")

        booking.transition_to(Booking.Status.COMPLETED)
        booking.actual_check_out_time = now
        booking.actual_cost = calculate_fee(booking.actual_check_in_time or booking.start_time, now)
        booking.save(
            update_fields=["status", "actual_check_out_time", "actual_cost", "updated_at"]
        )

    logger.info(f"Booking {booking.pk} checked out, actual cost {booking.actual_cost}")
    return booking


def expire_booking(booking: Booking) -> Booking:
    """System transition for a pending booking whose start passed without approval."""

    with transaction.atomic():
        booking = _locked(booking)
        booking.transition_to(Booking.Status.EXPIRED)
        booking.cancelled_by = Booking.CancelledBy.SYSTEM
        booking.cancellation_reason = "Not approved before the start time"
        booking.save(update_fields=["status", "cancelled_by", "cancellation_reason", "updated_at"])
    return booking


def mark_no_show(booking: Booking) -> Booking:
    with transaction.atomic():
        booking = _locked(booking)
        booking.transition_to(Booking.Status.NO_SHOW)
        booking.cancelled_by = Booking.CancelledBy.SYSTEM
        booking.cancellation_reason = "Not checked in within the grace period"
        booking.save(update_fields=["status", "cancelled_by", "cancellation_reason", "updated_at"])
    _dispatch("notify_booking_no_show", booking.pk)
    return booking
