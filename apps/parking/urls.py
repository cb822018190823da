"""URL routing for parking spots."""

from __future__ import annotations

from django.urls import include, path  # type: ignore
from rest_framework.routers import DefaultRouter  # type: ignore

from .views import ParkingSpotViewSet

router = DefaultRouter()
router.register(r"", ParkingSpotViewSet, basename="spot")

urlpatterns = [path("", include(router.urls))]
