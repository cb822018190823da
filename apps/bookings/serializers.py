"""Serializers for the booking domain."""

from __future__ import annotations

from django.utils import timezone  # type: ignore
from rest_framework import serializers  # type: ignore

from apps.parking.models import ParkingSpot

from .models import Booking
from .services import create_booking


class BookingCreateSerializer(serializers.ModelSerializer):
    """A user's booking request."""

    spot = serializers.PrimaryKeyRelatedField(
        queryset=ParkingSpot.objects.all(),
        error_messages={"does_not_exist": "Parking spot not found."},
    )
    start_time = serializers.DateTimeField()
    end_time = serializers.DateTimeField()

    class Meta:
        model = Booking
        fields = ["spot", "start_time", "end_time"]

    def validate(self, attrs):  # type: ignore
        start_time = attrs["start_time"]
        end_time = attrs["end_time"]
        if start_time >= end_time:
            raise serializers.ValidationError("End time must be after start time.")
        if start_time < timezone.now():
            raise serializers.ValidationError("Booking start time cannot be in the past.")
        if attrs["spot"].in_maintenance:
            raise serializers.ValidationError("Parking spot is under maintenance.")
        return attrs

    def create(self, validated_data):  # type: ignore
        # Overlap conflicts surface as BookingConflictError and are translated by the view.
        return create_booking(
            user=self.context["request"].user,
            spot=validated_data["spot"],
            start_time=validated_data["start_time"],
            end_time=validated_data["end_time"],
        )


class BookingSerializer(serializers.ModelSerializer):
    """Full booking representation for owners and administrators."""

    user_id = serializers.ReadOnlyField(source="user.id")
    username = serializers.ReadOnlyField(source="user.username")
    spot_id = serializers.ReadOnlyField(source="spot.id")
    spot_number = serializers.ReadOnlyField(source="spot.spot_number")
    spot_type = serializers.ReadOnlyField(source="spot.spot_type")

    class Meta:
        model = Booking
        fields = [
            "id",
            "user_id",
            "username",
            "spot_id",
            "spot_number",
            "spot_type",
            "start_time",
            "end_time",
            "status",
            "expected_cost",
            "ticket_number",
            "actual_check_in_time",
            "actual_check_out_time",
            "actual_cost",
            "payment_id",
            "cancellation_reason",
            "cancelled_by",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class ParkingLotStatusSerializer(serializers.ModelSerializer):
    """Anonymised view of upcoming approved bookings for the lot overview."""

    spot_id = serializers.ReadOnlyField(source="spot.id")
    spot_number = serializers.ReadOnlyField(source="spot.spot_number")

    class Meta:
        model = Booking
        fields = ["id", "spot_id", "spot_number", "start_time", "end_time", "status"]
        read_only_fields = fields


class BookingReasonSerializer(serializers.Serializer):
    reason = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")
