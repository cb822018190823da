"""Integration tests for booking API endpoints."""

from __future__ import annotations

from datetime import timedelta
from decimal import Decimal

from django.core import mail
from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APITestCase

from apps.bookings.models import Booking
from apps.notifications.models import Notification
from apps.parking.models import ParkingSpot
from apps.users.models import User


class BookingAPITests(APITestCase):
    """Covers creation, conflicts, approval and the check-in flow."""

    def setUp(self) -> None:
        self.driver = User.objects.create_user(
            email="driver@example.com",
            username="driver",
            password="StrongPass1!",
            email_verified=True,
        )
        self.other_driver = User.objects.create_user(
            email="other@example.com",
            username="other",
            password="StrongPass1!",
            email_verified=True,
        )
        self.admin = User.objects.create_user(
            email="admin@example.com",
            username="admin",
            password="StrongPass1!",
            role=User.Role.ADMIN,
            email_verified=True,
        )
        self.spot = ParkingSpot.objects.create(spot_number="A1")
        self.client.force_authenticate(self.driver)
        self.list_url = reverse("booking-list")
        self.start = (timezone.now() + timedelta(hours=3)).replace(microsecond=0)

    def _payload(self, start, end, spot=None) -> dict[str, object]:
        return {
            "spot": (spot or self.spot).pk,
            "start_time": start.isoformat(),
            "end_time": end.isoformat(),
        }

    def _create(self, start, end, user=None) -> Booking:
        return Booking.objects.create(
            user=user or self.driver,
            spot=self.spot,
            start_time=start,
            end_time=end,
        )

    def test_user_can_create_booking(self) -> None:
        response = self.client.post(
            self.list_url, self._payload(self.start, self.start + timedelta(hours=2)), format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertEqual(response.data["status"], Booking.Status.PENDING)
        self.assertEqual(response.data["spot_number"], "A1")
        booking = Booking.objects.get()
        self.assertEqual(booking.user, self.driver)
        self.assertEqual(booking.expected_cost, Decimal("5.00"))

    def test_overlapping_request_is_a_conflict(self) -> None:
        self._create(self.start, self.start + timedelta(hours=2), user=self.other_driver)

        response = self.client.post(
            self.list_url,
            self._payload(self.start + timedelta(hours=1), self.start + timedelta(hours=3)),
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT, response.data)
        self.assertFalse(response.data["success"])
        self.assertEqual(response.data["message"], "Parking spot is already booked for this time.")
        self.assertEqual(Booking.objects.count(), 1)

    def test_back_to_back_bookings_are_allowed(self) -> None:
        first_end = self.start + timedelta(hours=2)
        first = self.client.post(self.list_url, self._payload(self.start, first_end), format="json")
        self.assertEqual(first.status_code, status.HTTP_201_CREATED, first.data)

        second = self.client.post(
            self.list_url, self._payload(first_end, first_end + timedelta(hours=1)), format="json"
        )

        self.assertEqual(second.status_code, status.HTTP_201_CREATED, second.data)
        self.assertEqual(Booking.objects.count(), 2)

    def test_finished_bookings_do_not_block(self) -> None:
        booking = self._create(self.start, self.start + timedelta(hours=2), user=self.other_driver)
        Booking.objects.filter(pk=booking.pk).update(status=Booking.Status.REJECTED)

        response = self.client.post(
            self.list_url, self._payload(self.start, self.start + timedelta(hours=2)), format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)

    def test_invalid_requests_are_rejected(self) -> None:
        past = timezone.now() - timedelta(hours=1)
        cases = [
            (self._payload(self.start, self.start), "End time must be after start time."),
            (self._payload(past, past + timedelta(hours=1)), "Booking start time cannot be in the past."),
        ]
        for payload, message in cases:
            response = self.client.post(self.list_url, payload, format="json")
            self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST, response.data)
            self.assertEqual(response.data["message"], message)

        missing = self.client.post(self.list_url, {"spot": self.spot.pk}, format="json")
        self.assertEqual(missing.status_code, status.HTTP_400_BAD_REQUEST, missing.data)
        self.assertIn("start_time", missing.data["errors"])

        unknown = self.client.post(
            self.list_url,
            {**self._payload(self.start, self.start + timedelta(hours=1)), "spot": 9999},
            format="json",
        )
        self.assertEqual(unknown.status_code, status.HTTP_400_BAD_REQUEST, unknown.data)

    def test_spot_under_maintenance_cannot_be_booked(self) -> None:
        self.spot.status = ParkingSpot.Status.MAINTENANCE
        self.spot.save()

        response = self.client.post(
            self.list_url, self._payload(self.start, self.start + timedelta(hours=1)), format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST, response.data)

    def test_booking_requires_authentication(self) -> None:
        self.client.force_authenticate(None)
        response = self.client.post(
            self.list_url, self._payload(self.start, self.start + timedelta(hours=1)), format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_my_bookings_lists_only_own_bookings(self) -> None:
        early = self._create(self.start, self.start + timedelta(hours=1))
        late = self._create(self.start + timedelta(hours=5), self.start + timedelta(hours=6))
        self._create(self.start + timedelta(hours=2), self.start + timedelta(hours=3), user=self.other_driver)

        response = self.client.get(reverse("booking-my-bookings"))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([row["id"] for row in response.data], [late.pk, early.pk])

    def test_booking_list_is_admin_only(self) -> None:
        self._create(self.start, self.start + timedelta(hours=1))
        self.assertEqual(self.client.get(self.list_url).status_code, status.HTTP_403_FORBIDDEN)

        self.client.force_authenticate(self.admin)
        response = self.client.get(self.list_url, {"status": "pending"})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)

    def test_other_users_booking_is_not_found(self) -> None:
        booking = self._create(self.start, self.start + timedelta(hours=1), user=self.other_driver)

        response = self.client.get(reverse("booking-detail", args=[booking.pk]))

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_admin_approves_booking(self) -> None:
        booking = self._create(self.start, self.start + timedelta(hours=3))
        self.client.force_authenticate(self.admin)

        response = self.client.post(reverse("booking-approve", args=[booking.pk]))

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        booking.refresh_from_db()
        self.assertEqual(booking.status, Booking.Status.APPROVED)
        self.assertRegex(booking.ticket_number, r"^TICKET-\d+-[A-Z0-9]{5}$")
        self.assertEqual(booking.expected_cost, Decimal("7.50"))
        self.spot.refresh_from_db()
        self.assertEqual(self.spot.status, ParkingSpot.Status.RESERVED)
        self.assertEqual(len(mail.outbox), 1)
        self.assertIn(booking.ticket_number, mail.outbox[0].body)
        self.assertTrue(Notification.objects.filter(user=self.driver, booking=booking).exists())

        again = self.client.post(reverse("booking-approve", args=[booking.pk]))
        self.assertEqual(again.status_code, status.HTTP_400_BAD_REQUEST, again.data)
        self.assertEqual(again.data["message"], "Booking is already approved")

    def test_regular_user_cannot_approve(self) -> None:
        booking = self._create(self.start, self.start + timedelta(hours=1))

        response = self.client.post(reverse("booking-approve", args=[booking.pk]))

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data["message"], "Require Admin Role!")

    def test_approval_rechecks_overlap(self) -> None:
        first = self._create(self.start, self.start + timedelta(hours=2))
        second = self._create(self.start + timedelta(hours=1), self.start + timedelta(hours=3), user=self.other_driver)
        Booking.objects.filter(pk=first.pk).update(status=Booking.Status.APPROVED)
        self.client.force_authenticate(self.admin)

        response = self.client.put(reverse("booking-approve", args=[second.pk]))

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT, response.data)
        second.refresh_from_db()
        self.assertEqual(second.status, Booking.Status.PENDING)

    def test_admin_rejects_booking_with_reason(self) -> None:
        booking = self._create(self.start, self.start + timedelta(hours=1))
        self.client.force_authenticate(self.admin)

        response = self.client.post(
            reverse("booking-reject", args=[booking.pk]), {"reason": "Lot closed"}, format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        booking.refresh_from_db()
        self.assertEqual(booking.status, Booking.Status.REJECTED)
        self.assertEqual(booking.cancellation_reason, "Lot closed")
        self.assertEqual(booking.cancelled_by, Booking.CancelledBy.ADMIN)

    def test_only_pending_booking_can_be_rejected(self) -> None:
        booking = self._create(self.start, self.start + timedelta(hours=1))
        Booking.objects.filter(pk=booking.pk).update(status=Booking.Status.APPROVED)
        self.client.force_authenticate(self.admin)

        response = self.client.post(
            reverse("booking-reject", args=[booking.pk]), {"reason": "Too late"}, format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST, response.data)
        self.assertEqual(response.data["message"], "Booking is already approved")
        booking.refresh_from_db()
        self.assertEqual(booking.status, Booking.Status.APPROVED)
        self.assertEqual(booking.cancellation_reason, "")

    def test_deleting_user_releases_reserved_spot(self) -> None:
        booking = self._create(self.start, self.start + timedelta(hours=1))
        self.client.force_authenticate(self.admin)
        self.client.post(reverse("booking-approve", args=[booking.pk]))
        self.spot.refresh_from_db()
        self.assertEqual(self.spot.status, ParkingSpot.Status.RESERVED)

        response = self.client.delete(reverse("users:user-detail", args=[self.driver.pk]))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(Booking.objects.filter(pk=booking.pk).exists())
        self.spot.refresh_from_db()
        self.assertEqual(self.spot.status, ParkingSpot.Status.AVAILABLE)

    def test_user_cancels_pending_booking(self) -> None:
        booking = self._create(self.start, self.start + timedelta(hours=1))

        response = self.client.post(
            reverse("booking-cancel", args=[booking.pk]), {"reason": "Plans changed"}, format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        booking.refresh_from_db()
        self.assertEqual(booking.status, Booking.Status.CANCELLED)
        self.assertEqual(booking.cancelled_by, Booking.CancelledBy.USER)

    def test_approved_booking_cannot_be_cancelled_close_to_start(self) -> None:
        soon = timezone.now() + timedelta(minutes=30)
        booking = self._create(soon, soon + timedelta(hours=1))
        Booking.objects.filter(pk=booking.pk).update(status=Booking.Status.APPROVED)

        response = self.client.post(reverse("booking-cancel", args=[booking.pk]))

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST, response.data)

        self.client.force_authenticate(self.admin)
        admin_response = self.client.post(reverse("booking-cancel", args=[booking.pk]))
        self.assertEqual(admin_response.status_code, status.HTTP_200_OK, admin_response.data)

    def test_check_in_and_out_updates_spot(self) -> None:
        booking = self._create(self.start, self.start + timedelta(hours=2))
        self.client.force_authenticate(self.admin)
        self.client.post(reverse("booking-approve", args=[booking.pk]))
        self.client.force_authenticate(self.driver)

        too_early = self.client.post(reverse("booking-check-in", args=[booking.pk]))
        self.assertEqual(too_early.status_code, status.HTTP_400_BAD_REQUEST, too_early.data)

        now = timezone.now()
        Booking.objects.filter(pk=booking.pk).update(
            start_time=now + timedelta(minutes=10), end_time=now + timedelta(hours=2)
        )
        check_in = self.client.post(reverse("booking-check-in", args=[booking.pk]))
        self.assertEqual(check_in.status_code, status.HTTP_200_OK, check_in.data)
        self.spot.refresh_from_db()
        self.assertEqual(self.spot.status, ParkingSpot.Status.OCCUPIED)

        check_out = self.client.post(reverse("booking-check-out", args=[booking.pk]))
        self.assertEqual(check_out.status_code, status.HTTP_200_OK, check_out.data)
        booking.refresh_from_db()
        self.assertEqual(booking.status, Booking.Status.COMPLETED)
        self.assertEqual(booking.actual_cost, Decimal("5.00"))
        self.spot.refresh_from_db()
        self.assertEqual(self.spot.status, ParkingSpot.Status.AVAILABLE)

    def test_parking_lot_status_shows_approved_future_bookings(self) -> None:
        approved = self._create(self.start, self.start + timedelta(hours=1), user=self.other_driver)
        Booking.objects.filter(pk=approved.pk).update(status=Booking.Status.APPROVED)
        self._create(self.start + timedelta(hours=2), self.start + timedelta(hours=3))

        response = self.client.get(reverse("booking-parking-lot-status"))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)
        self.assertEqual(
            set(response.data[0]), {"id", "spot_id", "spot_number", "start_time", "end_time", "status"}
        )
