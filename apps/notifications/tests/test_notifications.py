"""Tests for notification services and the inbox API."""

from __future__ import annotations

from datetime import timedelta
from unittest import mock

import pytest
from django.core import mail
from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APIClient

from apps.bookings.models import Booking
from apps.notifications import services
from apps.notifications.models import Notification
from apps.parking.models import ParkingSpot
from apps.users.models import User


@pytest.fixture
def driver(db) -> User:
    return User.objects.create_user(email="driver@example.com", username="driver", password="StrongPass1!")


@pytest.fixture
def booking(driver) -> Booking:
    spot = ParkingSpot.objects.create(spot_number="D4")
    start = timezone.now() + timedelta(hours=5)
    return Booking.objects.create(
        user=driver,
        spot=spot,
        start_time=start,
        end_time=start + timedelta(hours=2),
        ticket_number="TICKET-1700000000000-ABCDE",
    )


@pytest.mark.django_db
def test_verification_email_contains_link(driver):
    assert services.send_verification_email(driver, "abc.def") is True

    assert len(mail.outbox) == 1
    assert mail.outbox[0].to == ["driver@example.com"]
    assert "http://testserver/api/users/verify-email/?token=abc.def" in mail.outbox[0].body


@pytest.mark.django_db
def test_send_failure_is_reported_not_raised(driver):
    with mock.patch.object(services, "send_mail", side_effect=OSError("smtp down")):
        assert services.send_password_reset_email(driver, "deadbeef") is False


@pytest.mark.django_db
def test_booking_approved_notifies_by_email_and_inbox(booking):
    results = services.notify_booking_approved(booking)

    assert results == {"email": True, "in_app": True}
    notification = Notification.objects.get(user=booking.user)
    assert notification.booking == booking
    assert "TICKET-1700000000000-ABCDE" in notification.message
    assert "D4" in mail.outbox[0].body


@pytest.mark.django_db
def test_inbox_lists_only_own_notifications(driver):
    other = User.objects.create_user(email="other@example.com", username="other", password="StrongPass1!")
    mine = Notification.objects.create(user=driver, title="Hi", message="For you")
    Notification.objects.create(user=other, title="Hi", message="Not for you")
    client = APIClient()
    client.force_authenticate(driver)

    response = client.get(reverse("notification-list"))

    assert response.status_code == status.HTTP_200_OK
    assert [row["id"] for row in response.data] == [mine.pk]


@pytest.mark.django_db
def test_mark_read(driver):
    first = Notification.objects.create(user=driver, title="One", message="1")
    Notification.objects.create(user=driver, title="Two", message="2")
    client = APIClient()
    client.force_authenticate(driver)

    response = client.post(reverse("notification-mark-read", args=[first.pk]))
    assert response.status_code == status.HTTP_200_OK
    first.refresh_from_db()
    assert first.is_read is True

    unread = client.get(reverse("notification-list"), {"is_read": "false"})
    assert len(unread.data) == 1

    response = client.post(reverse("notification-mark-all-read"))
    assert response.data["updated"] == 1
    assert not Notification.objects.filter(user=driver, is_read=False).exists()


@pytest.mark.django_db
def test_mark_all_read_only_touches_own_inbox(driver):
    other = User.objects.create_user(email="other@example.com", username="other", password="StrongPass1!")
    Notification.objects.create(user=driver, title="One", message="1")
    Notification.objects.create(user=driver, title="Two", message="2")
    theirs = Notification.objects.create(user=other, title="Three", message="3")
    client = APIClient()
    client.force_authenticate(driver)

    response = client.post(reverse("notification-mark-all-read"))

    assert response.status_code == status.HTTP_200_OK
    assert response.data["updated"] == 2
    assert not Notification.objects.filter(user=driver, is_read=False).exists()
    theirs.refresh_from_db()
    assert theirs.is_read is False


@pytest.mark.django_db
def test_email_carries_html_and_plain_text():
    assert services.send_email_notification("someone@example.com", "Hello", "<p>Spot <b>A1</b> is free</p>")

    message = mail.outbox[0]
    assert message.subject == "Hello"
    assert message.body == "Spot A1 is free"
    assert message.alternatives[0][0] == "<p>Spot <b>A1</b> is free</p>"
