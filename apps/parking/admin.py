from django.contrib import admin  # type: ignore

from .models import ParkingSpot


@admin.register(ParkingSpot)
class ParkingSpotAdmin(admin.ModelAdmin):
    list_display = ("spot_number", "spot_type", "status", "updated_at")
    list_filter = ("spot_type", "status")
    search_fields = ("spot_number", "description")
