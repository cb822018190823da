"""Serializers for user-related API endpoints."""

from __future__ import annotations

from datetime import date

from django.contrib.auth import get_user_model  # type: ignore
from django.core.validators import MinLengthValidator  # type: ignore
from rest_framework import serializers  # type: ignore
from rest_framework.validators import UniqueValidator  # type: ignore

from .auth_serializers import MINIMUM_AGE_YEARS, years_ago
from .models import USERNAME_VALIDATOR

User = get_user_model()


class UserSerializer(serializers.ModelSerializer):
    """Public profile representation; never exposes credentials."""

    # Login matches identifiers case-insensitively, so uniqueness must too.
    username = serializers.CharField(
        max_length=30,
        validators=[
            MinLengthValidator(3),
            USERNAME_VALIDATOR,
            UniqueValidator(
                queryset=User.objects.all(),
                message="A user with that username already exists.",
                lookup="iexact",
            ),
        ],
    )
    email = serializers.EmailField(
        validators=[
            UniqueValidator(
                queryset=User.objects.all(),
                message="A user with that email already exists.",
                lookup="iexact",
            )
        ],
    )

    class Meta:
        model = User
        fields = [
            "id",
            "username",
            "email",
            "first_name",
            "last_name",
            "birthday",
            "role",
            "phone_number",
            "address",
            "profile_image",
            "status",
            "email_verified",
            "last_login",
            "created_at",
            "updated_at",
        ]
        read_only_fields = [
            "id",
            "role",
            "status",
            "email_verified",
            "last_login",
            "created_at",
            "updated_at",
        ]

    def validate_birthday(self, value: date | None) -> date | None:
        if value is not None and value > years_ago(MINIMUM_AGE_YEARS):
            raise serializers.ValidationError("You must be at least 18 years old")
        return value

    def update(self, instance, validated_data):  # type: ignore
        email = validated_data.get("email")
        if email is not None and email.lower() != instance.email.lower():
            # A new address has to be confirmed again.
            validated_data["email_verified"] = False
        return super().update(instance, validated_data)


class AdminUserSerializer(UserSerializer):
    """Administrators may additionally change role and account status."""

    class Meta(UserSerializer.Meta):
        read_only_fields = [
            "id",
            "email_verified",
            "last_login",
            "created_at",
            "updated_at",
        ]

    def update(self, instance, validated_data):  # type: ignore
        status = validated_data.pop("status", None)
        if status is not None:
            instance.set_status(status)
        return super().update(instance, validated_data)
