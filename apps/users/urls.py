"""URL declarations for the users app."""

from __future__ import annotations

from django.urls import path, include  # type: ignore
from rest_framework.routers import DefaultRouter  # type: ignore
from rest_framework_simplejwt.views import TokenRefreshView  # type: ignore

from .auth_views import (
    ForgotPasswordView,
    LoginView,
    RegisterView,
    ResetPasswordView,
    UpdatePasswordView,
    VerifyEmailView,
)
from .views import UserViewSet

app_name = "users"

router = DefaultRouter()
router.register(r'', UserViewSet, basename='user')

# Auth routes come first so the router's detail pattern does not shadow them.
urlpatterns = [
    path('register/', RegisterView.as_view(), name='register'),
    path('verify-email/', VerifyEmailView.as_view(), name='verify-email'),
    path('login/', LoginView.as_view(), name='login'),
    path('token/refresh/', TokenRefreshView.as_view(), name='token-refresh'),
    path('forgot-password/', ForgotPasswordView.as_view(), name='forgot-password'),
    path('reset-password/', ResetPasswordView.as_view(), name='reset-password'),
    path('update-password/', UpdatePasswordView.as_view(), name='update-password'),
    path('', include(router.urls)),
]
