"""API views for the booking domain."""

from __future__ import annotations

from django.utils import timezone  # type: ignore
from django_filters.rest_framework import DjangoFilterBackend  # type: ignore
from drf_spectacular.utils import extend_schema  # type: ignore
from rest_framework import mixins, permissions, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore

from apps.users.permissions import IsAdminRole, is_admin_user

from .exceptions import translate_booking_errors
from .filters import BookingFilterSet
from .models import Booking
from .serializers import (
    BookingCreateSerializer,
    BookingReasonSerializer,
    BookingSerializer,
    ParkingLotStatusSerializer,
)
from .services import (
    approve_booking,
    cancel_booking,
    check_in_booking,
    check_out_booking,
    reject_booking,
)


class BookingViewSet(
    mixins.CreateModelMixin,
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    """Booking requests and their lifecycle.

    Users create and follow their own bookings; administrators list every
    booking and approve or reject pending requests.
    """

    queryset = Booking.objects.select_related("spot", "user").all()
    filter_backends = [DjangoFilterBackend]
    filterset_class = BookingFilterSet

    admin_actions = {"list", "approve", "reject"}

    def get_permissions(self):  # type: ignore
        if self.action in self.admin_actions:
            return [permissions.IsAuthenticated(), IsAdminRole()]
        return [permissions.IsAuthenticated()]

    def get_serializer_class(self):  # type: ignore
        if self.action == "create":
            return BookingCreateSerializer
        if self.action == "parking_lot_status":
            return ParkingLotStatusSerializer
        if self.action in {"cancel", "reject"}:
            return BookingReasonSerializer
        return BookingSerializer

    def get_queryset(self):  # type: ignore
        qs = super().get_queryset()
        if is_admin_user(self.request.user):
            return qs
        # Other users' bookings are reported as not found.
        return qs.filter(user=self.request.user)

    def _reason(self, request) -> str:  # type: ignore
        serializer = BookingReasonSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        return serializer.validated_data["reason"]

    def _respond(self, booking: Booking, message: str) -> Response:
        data = BookingSerializer(booking, context=self.get_serializer_context()).data
        return Response({"success": True, "message": message, "booking": data}, status=status.HTTP_200_OK)

    @extend_schema(request=BookingCreateSerializer, responses=BookingSerializer)
    def create(self, request, *args, **kwargs):  # type: ignore
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        with translate_booking_errors():
            booking = serializer.save()
        read_serializer = BookingSerializer(booking, context=self.get_serializer_context())
        headers = self.get_success_headers(read_serializer.data)
        return Response(read_serializer.data, status=status.HTTP_201_CREATED, headers=headers)

    @extend_schema(responses=BookingSerializer(many=True))
    @action(detail=False, methods=["get"], url_path="my-bookings")
    def my_bookings(self, request):  # type: ignore
        bookings = (
            Booking.objects.select_related("spot", "user")
            .for_user(request.user)
            .order_by("-start_time")
        )
        return Response(BookingSerializer(bookings, many=True).data)

    @action(detail=False, methods=["get"], url_path="parking-lot-status")
    def parking_lot_status(self, request):  # type: ignore
        bookings = (
            Booking.objects.select_related("spot")
            .filter(status=Booking.Status.APPROVED, end_time__gte=timezone.now())
            .order_by("start_time")
        )
        return Response(ParkingLotStatusSerializer(bookings, many=True).data)

    @action(detail=True, methods=["post", "put", "patch"])
    def cancel(self, request, pk=None):  # type: ignore
        booking: Booking = self.get_object()  # type: ignore
        reason = self._reason(request)
        with translate_booking_errors():
            booking = cancel_booking(booking, request.user, reason)
        return self._respond(booking, "Booking cancelled successfully")

    @action(detail=True, methods=["post", "put"])
    def approve(self, request, pk=None):  # type: ignore
        booking: Booking = self.get_object()  # type: ignore
        with translate_booking_errors():
            booking = approve_booking(booking)
        return self._respond(booking, "Booking approved successfully")

    @action(detail=True, methods=["post", "put"])
    def reject(self, request, pk=None):  # type: ignore
        booking: Booking = self.get_object()  # type: ignore
        reason = self._reason(request)
        with translate_booking_errors():
            booking = reject_booking(booking, reason)
        return self._respond(booking, "Booking rejected successfully")

    @action(detail=True, methods=["post"], url_path="check-in")
    def check_in(self, request, pk=None):  # type: ignore
        booking: Booking = self.get_object()  # type: ignore
        with translate_booking_errors():
            booking = check_in_booking(booking)
        return self._respond(booking, "Checked in successfully")

    @action(detail=True, methods=["post"], url_path="check-out")
    def check_out(self, request, pk=None):  # type: ignore
        booking: Booking = self.get_object()  # type: ignore
        with translate_booking_errors():
            booking = check_out_booking(booking)
        return self._respond(booking, "Checked out successfully")
