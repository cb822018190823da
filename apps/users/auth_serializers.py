"""Serializers for authentication flows (register, login, email verification, password reset)."""

from __future__ import annotations

import logging
import re
from datetime import date
from typing import Any

from django.conf import settings  # type: ignore
from django.contrib.auth import get_user_model  # type: ignore
from django.db import transaction  # type: ignore
from django.utils import timezone  # type: ignore
from rest_framework import exceptions, serializers  # type: ignore
from rest_framework_simplejwt.exceptions import TokenError  # type: ignore
from rest_framework_simplejwt.settings import api_settings as jwt_settings  # type: ignore

from apps.notifications.services import send_password_reset_email, send_verification_email
from .models import USERNAME_VALIDATOR, PasswordResetToken
from .tokens import EmailVerificationToken

logger = logging.getLogger(__name__)

User = get_user_model()

PASSWORD_PATTERN = re.compile(r"^(?=.*[a-z])(?=.*[A-Z])(?=.*[0-9])(?=.*[!@#$%^&*])")
PASSWORD_RULES = (
    "Password must contain at least one lowercase letter, one uppercase letter, "
    "one number, and one special character (!@#$%^&*)"
)
MINIMUM_AGE_YEARS = 18


def validate_password_strength(value: str) -> str:
    if not PASSWORD_PATTERN.match(value):
        raise serializers.ValidationError(PASSWORD_RULES)
    return value


def years_ago(years: int, today: date | None = None) -> date:
    today = today or timezone.localdate()
    try:
        return today.replace(year=today.year - years)
    except ValueError:
        # 29 February in a non-leap target year
        return today.replace(year=today.year - years, day=28)


def _password_field(**kwargs: Any) -> serializers.CharField:
    return serializers.CharField(
        min_length=8,
        max_length=30,
        write_only=True,
        validators=[validate_password_strength],
        **kwargs,
    )


class RegisterSerializer(serializers.Serializer):
    username = serializers.CharField(min_length=3, max_length=30, validators=[USERNAME_VALIDATOR])
    email = serializers.EmailField()
    password = _password_field()
    birthday = serializers.DateField()
    role = serializers.ChoiceField(choices=User.Role.choices, required=False)

    def validate_birthday(self, value: date) -> date:
        if value > years_ago(MINIMUM_AGE_YEARS):
            raise serializers.ValidationError("You must be at least 18 years old")
        return value

    def validate(self, attrs: dict[str, Any]) -> dict[str, Any]:  # type: ignore
        email = attrs["email"]
        username = attrs["username"]
        if User.objects.filter(email__iexact=email).exists() or User.objects.filter(
            username__iexact=username
        ).exists():
            raise serializers.ValidationError("User with this email or username already exists")

        # Only an authenticated admin may hand out the admin role.
        request = self.context.get("request")
        requester = getattr(request, "user", None)
        if not (requester and requester.is_authenticated and requester.is_admin()):
            attrs["role"] = User.Role.USER
        return attrs

    @transaction.atomic
    def create(self, validated_data: dict[str, Any]):  # type: ignore
        password = validated_data.pop("password")
        user = User.objects.create_user(password=password, email_verified=False, **validated_data)
        token = EmailVerificationToken.for_user(user)
        send_verification_email(user, str(token))
        logger.info(f"Registered user {user.pk} ({user.email})")
        return user


class VerifyEmailSerializer(serializers.Serializer):
    token = serializers.CharField()

    def validate(self, attrs: dict[str, Any]) -> dict[str, Any]:  # type: ignore
        try:
            token = EmailVerificationToken(attrs["token"])
        except TokenError:
            raise serializers.ValidationError({"token": "Invalid or expired token"})

        user = User.objects.filter(pk=token[jwt_settings.USER_ID_CLAIM]).first()
        if user is None:
            raise exceptions.NotFound("User not found")
        attrs["user"] = user
        return attrs

    def save(self, **kwargs: Any):  # type: ignore
        user = self.validated_data["user"]
        if not user.email_verified:
            user.mark_email_verified()
        return user


class LoginSerializer(serializers.Serializer):
    identifier = serializers.CharField(help_text="Email or username")
    password = serializers.CharField(write_only=True)

    def validate(self, attrs: dict[str, Any]) -> dict[str, Any]:  # type: ignore
        try:
            user = User.objects.get_by_identifier(attrs["identifier"])
        except User.DoesNotExist:
            raise exceptions.AuthenticationFailed("Invalid credentials")

        if not user.check_password(attrs["password"]):
            raise exceptions.AuthenticationFailed("Invalid credentials")

        if user.status != User.Status.ACTIVE:
            raise exceptions.PermissionDenied(f"Account is {user.status}.")

        if settings.PARKING["REQUIRE_EMAIL_VERIFICATION"] and not user.email_verified:
            raise exceptions.PermissionDenied("Please verify your email before logging in.")

        attrs["user"] = user
        return attrs


class ForgotPasswordSerializer(serializers.Serializer):
    email = serializers.EmailField()

    def validate_email(self, value: str) -> str:
        user = User.objects.filter(email__iexact=value).first()
        if user is None:
            raise exceptions.NotFound("No user found with this email")
        self.context["user"] = user
        return value

    def create(self, validated_data: dict[str, Any]):  # type: ignore
        user = self.context["user"]
        reset_token = PasswordResetToken.issue_for(user)
        send_password_reset_email(user, reset_token.token)
        return reset_token


class ResetPasswordSerializer(serializers.Serializer):
    token = serializers.CharField()
    new_password = _password_field()

    def validate_token(self, value: str) -> str:
        reset_token = (
            PasswordResetToken.objects.select_related("user")
            .filter(token=value, is_used=False)
            .first()
        )
        if reset_token is None or reset_token.is_expired:
            raise serializers.ValidationError("Invalid or expired reset token")
        self.context["reset_token"] = reset_token
        return value

    @transaction.atomic
    def create(self, validated_data: dict[str, Any]):  # type: ignore
        reset_token: PasswordResetToken = self.context["reset_token"]
        user = reset_token.user
        user.set_password(validated_data["new_password"])
        user.save(update_fields=["password"])
        reset_token.mark_used()
        logger.info(f"Password reset completed for user {user.pk}")
        return user


class UpdatePasswordSerializer(serializers.Serializer):
    current_password = serializers.CharField(write_only=True)
    new_password = _password_field()

    def validate_current_password(self, value: str) -> str:
        user = self.context["request"].user
        if not user.check_password(value):
            raise exceptions.AuthenticationFailed("Current password is incorrect")
        return value

    def create(self, validated_data: dict[str, Any]):  # type: ignore
        user = self.context["request"].user
        user.set_password(validated_data["new_password"])
        user.save(update_fields=["password"])
        return user
