"""Serializers for parking spots."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore
from rest_framework.validators import UniqueValidator  # type: ignore

from .models import ParkingSpot


class ParkingSpotSerializer(serializers.ModelSerializer):
    spot_number = serializers.CharField(
        max_length=20,
        validators=[
            UniqueValidator(
                queryset=ParkingSpot.objects.all(),
                message="Spot number already exists.",
                lookup="iexact",
            )
        ],
    )

    class Meta:
        model = ParkingSpot
        fields = [
            "id",
            "spot_number",
            "description",
            "spot_type",
            "status",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "created_at", "updated_at"]

    def validate_spot_number(self, value: str) -> str:
        value = value.strip().upper()
        if not value:
            raise serializers.ValidationError("Spot number is required.")
        return value
