"""Tests for the periodic booking sweeps."""

from __future__ import annotations

from datetime import timedelta

import pytest
from django.core import mail
from django.utils import timezone

from apps.bookings.models import Booking
from apps.bookings.tasks import expire_stale_bookings, mark_no_shows, notify_booking_rejected
from apps.notifications.models import Notification
from apps.parking.models import ParkingSpot
from apps.users.models import User


@pytest.fixture
def driver(db) -> User:
    return User.objects.create_user(email="driver@example.com", username="driver", password="StrongPass1!")


@pytest.fixture
def spot(db) -> ParkingSpot:
    return ParkingSpot.objects.create(spot_number="C3")


def _booking(user, spot, start, status=Booking.Status.PENDING) -> Booking:
    booking = Booking.objects.create(user=user, spot=spot, start_time=start, end_time=start + timedelta(hours=2))
    Booking.objects.filter(pk=booking.pk).update(status=status)
    return booking


@pytest.mark.django_db
def test_expire_stale_bookings(driver, spot):
    now = timezone.now()
    stale = _booking(driver, spot, now - timedelta(minutes=5))
    upcoming = _booking(driver, spot, now + timedelta(hours=3))

    assert expire_stale_bookings() == {"expired": 1}

    stale.refresh_from_db()
    upcoming.refresh_from_db()
    assert stale.status == Booking.Status.EXPIRED
    assert stale.cancelled_by == Booking.CancelledBy.SYSTEM
    assert upcoming.status == Booking.Status.PENDING


@pytest.mark.django_db
def test_mark_no_shows_releases_spot(driver, spot):
    now = timezone.now()
    missed = _booking(driver, spot, now - timedelta(minutes=45), status=Booking.Status.APPROVED)
    upcoming = _booking(driver, spot, now + timedelta(hours=3), status=Booking.Status.APPROVED)
    ParkingSpot.objects.filter(pk=spot.pk).update(status=ParkingSpot.Status.RESERVED)

    assert mark_no_shows() == {"no_show": 1}

    missed.refresh_from_db()
    upcoming.refresh_from_db()
    assert missed.status == Booking.Status.NO_SHOW
    assert upcoming.status == Booking.Status.APPROVED
    spot.refresh_from_db()
    # The second approved booking still holds the spot.
    assert spot.status == ParkingSpot.Status.RESERVED
    assert Notification.objects.filter(user=driver, booking=missed).count() == 1
    assert len(mail.outbox) == 1


@pytest.mark.django_db
def test_checked_in_bookings_are_not_no_shows(driver, spot):
    now = timezone.now()
    booking = _booking(driver, spot, now - timedelta(hours=1), status=Booking.Status.ACTIVE)
    Booking.objects.filter(pk=booking.pk).update(actual_check_in_time=now - timedelta(minutes=55))

    assert mark_no_shows() == {"no_show": 0}


@pytest.mark.django_db
def test_notification_task_for_missing_booking_returns_false():
    assert notify_booking_rejected(424242) is False
