"""Celery tasks for the booking domain."""

from __future__ import annotations

import logging
from datetime import timedelta

from celery import shared_task  # type: ignore
from django.conf import settings  # type: ignore
from django.utils import timezone  # type: ignore

from .exceptions import BookingError
from .models import Booking
from .services import expire_booking, mark_no_show

logger = logging.getLogger(__name__)


# ============================================================================
# PERIODIC TASKS (scheduled by Celery Beat, see config/celery.py)
# ============================================================================

@shared_task(name="bookings.expire_stale_bookings")
def expire_stale_bookings() -> dict[str, int]:
    """
    Expire pending bookings that were never approved.

    A pending booking whose start time has passed can no longer be used,
    so it is moved to EXPIRED and its spot released.

    Returns:
        dict: {"expired": number of expired bookings}
    """
    now = timezone.now()
    expired_count = 0

    stale_bookings = Booking.objects.filter(
        status=Booking.Status.PENDING,
        start_time__lte=now,
    ).select_related("spot", "user")

    for booking in stale_bookings:
        try:
            expire_booking(booking)
        except BookingError as e:
            # Status changed concurrently (approved or cancelled meanwhile).
            logger.info(f"Skipped expiring booking {booking.pk}: {e}")
            continue
        expired_count += 1
        logger.info(f"Booking {booking.pk} expired automatically. User: {booking.user.email}")

    if expired_count > 0:
        logger.info(f"Expired {expired_count} pending bookings")

    return {"expired": expired_count}


@shared_task(name="bookings.mark_no_shows")
def mark_no_shows() -> dict[str, int]:
    """
    Release approved bookings nobody checked in to.

    Approved bookings still not checked in NO_SHOW_GRACE_MINUTES after
    their start become NO_SHOW.

    Returns:
        dict: {"no_show": number of bookings marked}
    """
    grace = timedelta(minutes=settings.PARKING["NO_SHOW_GRACE_MINUTES"])
    deadline = timezone.now() - grace
    marked_count = 0

    missed_bookings = Booking.objects.filter(
        status=Booking.Status.APPROVED,
        actual_check_in_time__isnull=True,
        start_time__lte=deadline,
    ).select_related("spot", "user")

    for booking in missed_bookings:
        try:
            mark_no_show(booking)
        except BookingError as e:
            logger.info(f"Skipped no-show for booking {booking.pk}: {e}")
            continue
        marked_count += 1
        logger.info(f"Booking {booking.pk} marked as no-show. User: {booking.user.email}")

    if marked_count > 0:
        logger.info(f"Marked {marked_count} bookings as no-show")

    return {"no_show": marked_count}


# ============================================================================
# NOTIFICATION TASKS
# ============================================================================

def _load(booking_id: int) -> Booking | None:
    try:
        return Booking.objects.select_related("user", "spot").get(id=booking_id)
    except Booking.DoesNotExist:
        logger.error(f"Booking {booking_id} not found for notification")
        return None


@shared_task(name="bookings.notify_booking_approved")
def notify_booking_approved(booking_id: int) -> bool:
    """Email and in-app message with the ticket number."""
    booking = _load(booking_id)
    if booking is None:
        return False

    from apps.notifications.services import notify_booking_approved as send

    results = send(booking)
    logger.info(f"[NOTIFICATION] Booking approved: {booking.ticket_number} to {booking.user.email} {results}")
    return all(results.values())


@shared_task(name="bookings.notify_booking_rejected")
def notify_booking_rejected(booking_id: int) -> bool:
    booking = _load(booking_id)
    if booking is None:
        return False

    from apps.notifications.services import notify_booking_rejected as send

    results = send(booking)
    logger.info(f"[NOTIFICATION] Booking rejected: {booking.pk} to {booking.user.email} {results}")
    return all(results.values())


@shared_task(name="bookings.notify_booking_cancelled")
def notify_booking_cancelled(booking_id: int) -> bool:
    booking = _load(booking_id)
    if booking is None:
        return False

    from apps.notifications.services import notify_booking_cancelled as send

    results = send(booking)
    logger.info(f"[NOTIFICATION] Booking cancelled: {booking.pk} to {booking.user.email} {results}")
    return all(results.values())


@shared_task(name="bookings.notify_booking_no_show")
def notify_booking_no_show(booking_id: int) -> bool:
    booking = _load(booking_id)
    if booking is None:
        return False

    from apps.notifications.services import notify_booking_no_show as send

    results = send(booking)
    logger.info(f"[NOTIFICATION] Booking no-show: {booking.pk} to {booking.user.email} {results}")
    return all(results.values())
