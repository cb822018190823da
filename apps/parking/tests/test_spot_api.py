"""API tests for the parking spot inventory."""

from __future__ import annotations

from datetime import timedelta

from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APITestCase

from apps.bookings.models import Booking
from apps.parking.models import ParkingSpot
from apps.users.models import User


class ParkingSpotAPITests(APITestCase):
    def setUp(self) -> None:
        self.admin = User.objects.create_user(
            email="admin@example.com",
            username="admin",
            password="StrongPass1!",
            role=User.Role.ADMIN,
        )
        self.driver = User.objects.create_user(
            email="driver@example.com",
            username="driver",
            password="StrongPass1!",
        )
        self.a1 = ParkingSpot.objects.create(spot_number="A1")
        self.ev = ParkingSpot.objects.create(spot_number="EV05", spot_type=ParkingSpot.SpotType.EV_CHARGING)
        self.list_url = reverse("spot-list")

    def test_anyone_can_list_spots(self) -> None:
        response = self.client.get(self.list_url)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([row["spot_number"] for row in response.data], ["A1", "EV05"])

    def test_filter_by_type(self) -> None:
        response = self.client.get(self.list_url, {"spot_type": "ev_charging"})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([row["spot_number"] for row in response.data], ["EV05"])

    def test_filter_by_free_window(self) -> None:
        start = timezone.now() + timedelta(hours=2)
        Booking.objects.create(
            user=self.driver, spot=self.a1, start_time=start, end_time=start + timedelta(hours=2)
        )

        busy = self.client.get(
            self.list_url,
            {
                "available_from": (start + timedelta(hours=1)).isoformat(),
                "available_to": (start + timedelta(hours=3)).isoformat(),
            },
        )
        free = self.client.get(
            self.list_url,
            {
                "available_from": (start + timedelta(hours=2)).isoformat(),
                "available_to": (start + timedelta(hours=3)).isoformat(),
            },
        )

        self.assertEqual([row["spot_number"] for row in busy.data], ["EV05"])
        self.assertEqual([row["spot_number"] for row in free.data], ["A1", "EV05"])

    def test_window_filter_needs_both_bounds(self) -> None:
        response = self.client.get(self.list_url, {"available_from": timezone.now().isoformat()})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_admin_creates_spot(self) -> None:
        self.client.force_authenticate(self.admin)

        response = self.client.post(
            self.list_url,
            {"spot_number": "b12", "spot_type": "compact", "description": "Near the exit"},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertEqual(response.data["spot_number"], "B12")
        self.assertEqual(response.data["status"], ParkingSpot.Status.AVAILABLE)

    def test_duplicate_spot_number_is_rejected(self) -> None:
        self.client.force_authenticate(self.admin)

        response = self.client.post(self.list_url, {"spot_number": "a1"}, format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST, response.data)
        self.assertEqual(response.data["message"], "Spot number already exists.")

    def test_renaming_spot_to_existing_number_is_rejected(self) -> None:
        self.client.force_authenticate(self.admin)

        clash = self.client.patch(reverse("spot-detail", args=[self.ev.pk]), {"spot_number": "a1"}, format="json")
        same = self.client.patch(reverse("spot-detail", args=[self.a1.pk]), {"spot_number": "a1"}, format="json")

        self.assertEqual(clash.status_code, status.HTTP_400_BAD_REQUEST, clash.data)
        self.assertEqual(clash.data["message"], "Spot number already exists.")
        self.ev.refresh_from_db()
        self.assertEqual(self.ev.spot_number, "EV05")
        self.assertEqual(same.status_code, status.HTTP_200_OK, same.data)

    def test_leaving_maintenance_restores_booking_derived_status(self) -> None:
        start = timezone.now() + timedelta(hours=2)
        Booking.objects.create(
            user=self.driver,
            spot=self.a1,
            start_time=start,
            end_time=start + timedelta(hours=1),
            status=Booking.Status.APPROVED,
        )
        ParkingSpot.objects.filter(pk=self.a1.pk).update(status=ParkingSpot.Status.MAINTENANCE)
        self.client.force_authenticate(self.admin)

        response = self.client.patch(
            reverse("spot-detail", args=[self.a1.pk]), {"status": "available"}, format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(response.data["status"], ParkingSpot.Status.RESERVED)
        self.a1.refresh_from_db()
        self.assertEqual(self.a1.status, ParkingSpot.Status.RESERVED)

    def test_regular_user_cannot_manage_spots(self) -> None:
        self.client.force_authenticate(self.driver)

        create = self.client.post(self.list_url, {"spot_number": "Z9"}, format="json")
        update = self.client.patch(reverse("spot-detail", args=[self.a1.pk]), {"status": "maintenance"}, format="json")

        self.assertEqual(create.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(update.status_code, status.HTTP_403_FORBIDDEN)

    def test_admin_puts_spot_into_maintenance(self) -> None:
        self.client.force_authenticate(self.admin)

        response = self.client.patch(
            reverse("spot-detail", args=[self.a1.pk]), {"status": "maintenance"}, format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.a1.refresh_from_db()
        self.assertTrue(self.a1.in_maintenance)

    def test_spot_with_pending_booking_cannot_be_deleted(self) -> None:
        start = timezone.now() + timedelta(hours=2)
        Booking.objects.create(
            user=self.driver, spot=self.a1, start_time=start, end_time=start + timedelta(hours=1)
        )
        self.client.force_authenticate(self.admin)

        blocked = self.client.delete(reverse("spot-detail", args=[self.a1.pk]))
        allowed = self.client.delete(reverse("spot-detail", args=[self.ev.pk]))

        self.assertEqual(blocked.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(blocked.data["message"], "Cannot delete slot with active or pending bookings.")
        self.assertEqual(allowed.status_code, status.HTTP_200_OK)
        self.assertFalse(ParkingSpot.objects.filter(pk=self.ev.pk).exists())
