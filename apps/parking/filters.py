"""FilterSet for browsing parking spots."""

from __future__ import annotations

import django_filters  # type: ignore
from rest_framework.exceptions import ValidationError  # type: ignore

from .models import ParkingSpot


class ParkingSpotFilterSet(django_filters.FilterSet):
    status = django_filters.ChoiceFilter(choices=ParkingSpot.Status.choices)
    spot_type = django_filters.ChoiceFilter(choices=ParkingSpot.SpotType.choices)

    # Both bounds are applied together in filter_queryset.
    available_from = django_filters.IsoDateTimeFilter(method="filter_window")
    available_to = django_filters.IsoDateTimeFilter(method="filter_window")

    class Meta:
        model = ParkingSpot
        fields = ["status", "spot_type"]

    def filter_window(self, queryset, name, value):  # type: ignore
        return queryset

    def filter_queryset(self, queryset):  # type: ignore
        queryset = super().filter_queryset(queryset)
        start = self.form.cleaned_data.get("available_from")
        end = self.form.cleaned_data.get("available_to")
        if start is None and end is None:
            return queryset
        if start is None or end is None:
            raise ValidationError("Both available_from and available_to are required.")
        if start >= end:
            raise ValidationError("available_to must be after available_from.")

        from apps.bookings.models import Booking

        busy_spots = Booking.objects.blocking().overlapping(start, end).values("spot_id")
        return queryset.exclude(pk__in=busy_spots).exclude(status=ParkingSpot.Status.MAINTENANCE)
