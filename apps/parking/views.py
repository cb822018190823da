"""API views for the parking spot inventory."""

from __future__ import annotations

import logging

from django_filters.rest_framework import DjangoFilterBackend  # type: ignore
from rest_framework import permissions, status, viewsets  # type: ignore
from rest_framework.filters import OrderingFilter  # type: ignore
from rest_framework.response import Response  # type: ignore

from apps.users.permissions import IsAdminRole

from .filters import ParkingSpotFilterSet
from .models import ParkingSpot
from .serializers import ParkingSpotSerializer

logger = logging.getLogger(__name__)


class ParkingSpotViewSet(viewsets.ModelViewSet):
    """Spots are public to browse; only administrators manage them."""

    queryset = ParkingSpot.objects.all()
    serializer_class = ParkingSpotSerializer
    filter_backends = [DjangoFilterBackend, OrderingFilter]
    filterset_class = ParkingSpotFilterSet
    ordering_fields = ["spot_number", "spot_type", "created_at"]

    def get_permissions(self):  # type: ignore
        if self.action == "list":
            return [permissions.AllowAny()]
        return [permissions.IsAuthenticated(), IsAdminRole()]

    def perform_create(self, serializer):  # type: ignore
        spot = serializer.save()
        logger.info(f"Parking spot {spot.spot_number} created by {self.request.user.pk}")

    def perform_update(self, serializer):  # type: ignore
        previous_status = serializer.instance.status
        spot = serializer.save()
        if previous_status != spot.status and not spot.in_maintenance:
            # Outside maintenance the status is derived from the spot's bookings.
            from apps.bookings.services import sync_spot_status

            sync_spot_status(spot.pk)
            spot.refresh_from_db(fields=["status", "updated_at"])
        logger.info(f"Parking spot {spot.spot_number} updated by {self.request.user.pk}")

    def destroy(self, request, *args, **kwargs):  # type: ignore
        spot = self.get_object()
        if spot.has_blocking_bookings():
            return Response(
                {
                    "success": False,
                    "message": "Cannot delete slot with active or pending bookings.",
                },
                status=status.HTTP_400_BAD_REQUEST,
            )
        spot_number = spot.spot_number
        spot.delete()
        logger.info(f"Parking spot {spot_number} deleted by {request.user.pk}")
        return Response({"success": True, "message": "Parking spot deleted."}, status=status.HTTP_200_OK)
