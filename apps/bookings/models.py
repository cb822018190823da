"""Booking domain models for ParkingHub."""

from __future__ import annotations

from decimal import Decimal

from django.conf import settings  # type: ignore
from django.core.exceptions import ValidationError  # type: ignore
from django.db import models, transaction  # type: ignore
from django.db.models import F, Q  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

from .exceptions import InvalidTransitionError


class BookingQuerySet(models.QuerySet):
    def blocking(self):  # type: ignore
        """Bookings that hold their spot for their interval."""
        return self.filter(status__in=Booking.BLOCKING_STATUSES)

    def overlapping(self, start, end):  # type: ignore
        """Half-open intervals: a booking ending at ``start`` does not overlap."""
        return self.filter(Q(start_time__lt=end) & Q(end_time__gt=start))

    def for_user(self, user):  # type: ignore
        return self.filter(user=user)


class Booking(models.Model):
    """A user's request to occupy a parking spot for a time interval."""

    class Status(models.TextChoices):
        PENDING = "pending", _("Pending approval")
        APPROVED = "approved", _("Approved")
        REJECTED = "rejected", _("Rejected")
        ACTIVE = "active", _("Checked in")
        COMPLETED = "completed", _("Completed")
        CANCELLED = "cancelled", _("Cancelled")
        EXPIRED = "expired", _("Expired")
        NO_SHOW = "no_show", _("No show")

    class CancelledBy(models.TextChoices):
        USER = "user", _("User")
        ADMIN = "admin", _("Admin")
        SYSTEM = "system", _("System")

    BLOCKING_STATUSES = (Status.PENDING, Status.APPROVED, Status.ACTIVE)

    TRANSITIONS: dict[str, tuple[str, ...]] = {
        Status.PENDING: (Status.APPROVED, Status.REJECTED, Status.CANCELLED, Status.EXPIRED),
        Status.APPROVED: (Status.ACTIVE, Status.CANCELLED, Status.NO_SHOW, Status.EXPIRED),
        Status.ACTIVE: (Status.COMPLETED,),
    }

    # Statuses for which the spot's own status depends on this booking.
    SPOT_HOLDING_STATUSES = (Status.APPROVED, Status.ACTIVE)

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="bookings",
    )
    spot = models.ForeignKey(
        "parking.ParkingSpot",
        on_delete=models.CASCADE,
        related_name="bookings",
    )
    start_time = models.DateTimeField()
    end_time = models.DateTimeField()
    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.PENDING,
    )
    expected_cost = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("0.00"))
    ticket_number = models.CharField(max_length=40, unique=True, null=True, blank=True)
    actual_check_in_time = models.DateTimeField(null=True, blank=True)
    actual_check_out_time = models.DateTimeField(null=True, blank=True)
    actual_cost = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    payment_id = models.CharField(
        max_length=255,
        blank=True,
        help_text=_("Reference of the external payment, if any."),
    )
    cancellation_reason = models.CharField(max_length=255, blank=True)
    cancelled_by = models.CharField(max_length=10, choices=CancelledBy.choices, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = BookingQuerySet.as_manager()

    class Meta:
        verbose_name = _("Booking")
        verbose_name_plural = _("Bookings")
        ordering = ["-created_at"]
        constraints = [
            models.CheckConstraint(
                condition=Q(end_time__gt=F("start_time")),
                name="booking_end_after_start",
            ),
        ]
        indexes = [
            models.Index(fields=["spot", "start_time", "end_time"], name="booking_spot_window_idx"),
            models.Index(fields=["status"], name="booking_status_idx"),
        ]

    def __str__(self) -> str:
        return f"Booking #{self.pk} for spot {self.spot_id} ({self.status})"

    @classmethod
    def from_db(cls, db, field_names, values):  # type: ignore
        instance = super().from_db(db, field_names, values)
        instance._loaded_status = instance.__dict__.get("status")
        return instance

    def refresh_from_db(self, *args, **kwargs):  # type: ignore
        super().refresh_from_db(*args, **kwargs)
        self._loaded_status = self.__dict__.get("status")

    @property
    def previous_status(self) -> str | None:
        return getattr(self, "_loaded_status", None)

    def clean(self) -> None:
        if self.start_time and self.end_time and self.start_time >= self.end_time:
            raise ValidationError(_("End time must be after start time."))

    def can_transition_to(self, status: str) -> bool:
        return status in self.TRANSITIONS.get(self.status, ())

    def transition_to(self, status: str) -> None:
        if not self.can_transition_to(status):
            raise InvalidTransitionError(
                f"Cannot change booking status from {self.status} to {status}."
            )
        self.status = status

    def save(self, *args, **kwargs):  # type: ignore
        with transaction.atomic():
            previous = None if self._state.adding else self.previous_status
            if previous is not None and previous != self.status:
                if self.status not in self.TRANSITIONS.get(previous, ()):
                    raise InvalidTransitionError(
                        f"Cannot change booking status from {previous} to {self.status}."
                    )
            self.clean()
            super().save(*args, **kwargs)

            if previous != self.status and (
                previous in self.SPOT_HOLDING_STATUSES or self.status in self.SPOT_HOLDING_STATUSES
            ):
                from .services import sync_spot_status  # local import to avoid circular

                sync_spot_status(self.spot_id)
            self._loaded_status = self.status

    @property
    def is_blocking(self) -> bool:
        return self.status in self.BLOCKING_STATUSES

    @property
    def duration_hours(self) -> Decimal:
        seconds = int((self.end_time - self.start_time).total_seconds())
        return (Decimal(seconds) / Decimal(3600)).quantize(Decimal("0.01"))
