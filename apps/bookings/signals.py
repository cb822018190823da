"""Model signal handlers keeping spot status in step with bookings."""

from django.db.models.signals import post_delete
from django.dispatch import receiver

from .models import Booking
from .services import sync_spot_status


@receiver(post_delete, sender=Booking)
def release_spot_on_booking_delete(sender, instance, **kwargs):
    """Recompute the spot status when a booking holding it is deleted.

    Covers cascades (user removal) and deletions from the Django admin,
    neither of which goes through ``Booking.save()``.
    """
    if instance.status in Booking.SPOT_HOLDING_STATUSES:
        sync_spot_status(instance.spot_id)
