"""FilterSet for the administrative booking list."""

from __future__ import annotations

import django_filters  # type: ignore

from .models import Booking


class BookingFilterSet(django_filters.FilterSet):
    status = django_filters.MultipleChoiceFilter(choices=Booking.Status.choices)
    user = django_filters.NumberFilter(field_name="user_id")
    spot = django_filters.NumberFilter(field_name="spot_id")
    start_after = django_filters.IsoDateTimeFilter(field_name="start_time", lookup_expr="gte")
    end_before = django_filters.IsoDateTimeFilter(field_name="end_time", lookup_expr="lte")

    class Meta:
        model = Booking
        fields = ["status", "user", "spot"]
