"""URL configuration for ParkingHub.

The `urlpatterns` list routes URLs to views. It includes the Django admin,
the application routers provided by each app and the API documentation.
"""
from django.contrib import admin  # type: ignore
from django.urls import path, include  # type: ignore
from drf_spectacular.views import SpectacularAPIView, SpectacularSwaggerView  # type: ignore

urlpatterns = [
    path('admin/', admin.site.urls),
    # Application URLs
    path('api/users/', include('apps.users.urls')),
    path('api/spots/', include('apps.parking.urls')),
    path('api/bookings/', include('apps.bookings.urls')),
    path('api/notifications/', include('apps.notifications.urls')),
    # API documentation
    path('api/schema/', SpectacularAPIView.as_view(), name='schema'),
    path('api-docs/', SpectacularSwaggerView.as_view(url_name='schema'), name='swagger-ui'),
]
