"""Parking spot model."""

from __future__ import annotations

from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


class ParkingSpot(models.Model):
    """A single parking space in the lot."""

    class SpotType(models.TextChoices):
        COMPACT = "compact", _("Compact")
        REGULAR = "regular", _("Regular")
        LARGE = "large", _("Large")
        EV_CHARGING = "ev_charging", _("EV charging")
        HANDICAP = "handicap", _("Handicap")

    class Status(models.TextChoices):
        AVAILABLE = "available", _("Available")
        OCCUPIED = "occupied", _("Occupied")
        RESERVED = "reserved", _("Reserved")
        MAINTENANCE = "maintenance", _("Maintenance")

    spot_number = models.CharField(max_length=20, unique=True)
    description = models.TextField(blank=True)
    spot_type = models.CharField(
        max_length=20,
        choices=SpotType.choices,
        default=SpotType.REGULAR,
    )
    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.AVAILABLE,
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Parking spot")
        verbose_name_plural = _("Parking spots")
        ordering = ["spot_number"]
        indexes = [
            models.Index(fields=["status"], name="parking_spot_status_idx"),
        ]

    def __str__(self) -> str:
        return self.spot_number

    @property
    def in_maintenance(self) -> bool:
        return self.status == self.Status.MAINTENANCE

    def has_blocking_bookings(self) -> bool:
        """True while any pending, approved or active booking holds this spot."""
        return self.bookings.blocking().exists()
