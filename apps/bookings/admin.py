"""Admin registration for bookings."""

from __future__ import annotations

from django.contrib import admin

from .models import Booking


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "ticket_number",
        "spot",
        "user",
        "status",
        "start_time",
        "end_time",
        "expected_cost",
        "created_at",
    )
    list_filter = ("status", "cancelled_by", "spot__spot_type")
    search_fields = ("ticket_number", "spot__spot_number", "user__email", "user__username")
    raw_id_fields = ("user", "spot")
    readonly_fields = (
        "ticket_number",
        "expected_cost",
        "actual_check_in_time",
        "actual_check_out_time",
        "actual_cost",
        "created_at",
        "updated_at",
    )
