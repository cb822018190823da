"""User domain models for ParkingHub.

Users sign in with either their email or their username. Two roles exist:
regular users who request parking bookings and administrators who manage
the spot inventory and approve or reject booking requests. Accounts also
carry a lifecycle status (active, inactive, banned) and an email
verification flag that gates login.
"""

from __future__ import annotations

import secrets
from typing import Any

from django.conf import settings  # type: ignore
from django.contrib.auth.models import AbstractUser, BaseUserManager  # type: ignore
from django.core.validators import MinLengthValidator, RegexValidator  # type: ignore
from django.db import models, transaction  # type: ignore
from django.utils import timezone  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


USERNAME_VALIDATOR = RegexValidator(
    regex=r"^[A-Za-z0-9]+$",
    message=_("Username must only contain alphanumeric characters"),
)


class UserManager(BaseUserManager):
    """Manager that uses the email address as the login field."""

    use_in_migrations = True

    def _create_user(self, email: str, password: str | None, **extra_fields: Any):
        if not email:
            raise ValueError("Email is required to create a user.")
        if not extra_fields.get("username"):
            raise ValueError("Username is required to create a user.")
        email = self.normalize_email(email)

        user = self.model(email=email, **extra_fields)
        if password:
            user.set_password(password)
        else:
            user.set_unusable_password()
        user.save(using=self._db)
        return user

    def create_user(self, email: str, password: str | None = None, **extra_fields: Any):
        extra_fields.setdefault("is_staff", False)
        extra_fields.setdefault("is_superuser", False)
        extra_fields.setdefault("role", User.Role.USER)
        return self._create_user(email, password, **extra_fields)

    def create_superuser(self, email: str, password: str | None = None, **extra_fields: Any):
        extra_fields.setdefault("is_staff", True)
        extra_fields.setdefault("is_superuser", True)
        extra_fields.setdefault("role", User.Role.ADMIN)
        extra_fields.setdefault("email_verified", True)

        if extra_fields.get("is_staff") is not True:
            raise ValueError("Superuser must have is_staff=True.")
        if extra_fields.get("is_superuser") is not True:
            raise ValueError("Superuser must have is_superuser=True.")

        return self._create_user(email, password, **extra_fields)

    def get_by_identifier(self, identifier: str):
        """Look a user up by email or username, case-insensitively."""
        if "@" in identifier:
            return self.get(email__iexact=identifier)
        return self.get(username__iexact=identifier)


class User(AbstractUser):
    """Parking user with a role and an account status."""

    class Role(models.TextChoices):
        USER = "user", _("User")
        ADMIN = "admin", _("Admin")

    class Status(models.TextChoices):
        ACTIVE = "active", _("Active")
        INACTIVE = "inactive", _("Inactive")
        BANNED = "banned", _("Banned")

    username = models.CharField(
        _("username"),
        max_length=30,
        unique=True,
        validators=[MinLengthValidator(3), USERNAME_VALIDATOR],
        error_messages={"unique": _("A user with that username already exists.")},
    )
    email = models.EmailField(_("email address"), unique=True)
    birthday = models.DateField(null=True, blank=True)
    role = models.CharField(max_length=10, choices=Role.choices, default=Role.USER)
    phone_number = models.CharField(max_length=20, blank=True)
    address = models.TextField(blank=True)
    profile_image = models.URLField(blank=True)
    status = models.CharField(max_length=10, choices=Status.choices, default=Status.ACTIVE)
    email_verified = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = UserManager()

    USERNAME_FIELD = "email"
    REQUIRED_FIELDS = ["username"]

    class Meta:
        verbose_name = _("user")
        verbose_name_plural = _("users")
        ordering = ["-created_at"]

    def __str__(self) -> str:
        return f"{self.username} <{self.email}>"

    def is_admin(self) -> bool:
        return self.role == self.Role.ADMIN or self.is_staff or self.is_superuser

    @property
    def is_banned(self) -> bool:
        return self.status == self.Status.BANNED

    def set_status(self, status: str) -> None:
        """Change the account status; only active accounts may authenticate."""
        self.status = status
        self.is_active = status == self.Status.ACTIVE

    def mark_email_verified(self) -> None:
        self.email_verified = True
        self.save(update_fields=["email_verified", "updated_at"])

    def touch_last_login(self) -> None:
        self.last_login = timezone.now()
        self.save(update_fields=["last_login"])


class PasswordResetToken(models.Model):
    """One-shot password reset token delivered by email."""

    user = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name="password_reset_tokens",
    )
    token = models.CharField(max_length=64, unique=True)
    expires_at = models.DateTimeField()
    is_used = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["token", "expires_at"], name="users_reset_token_exp_idx"),
        ]

    def __str__(self) -> str:
        return f"Reset token for {self.user_id}"

    @property
    def is_expired(self) -> bool:
        return timezone.now() >= self.expires_at

    def mark_used(self) -> None:
        self.is_used = True
        self.save(update_fields=["is_used"])

    @classmethod
    @transaction.atomic
    def issue_for(cls, user: User) -> "PasswordResetToken":
        """Invalidate outstanding tokens and issue a fresh one."""
        cls.objects.filter(user=user, is_used=False).update(is_used=True)
        return cls.objects.create(
            user=user,
            token=secrets.token_hex(32),
            expires_at=timezone.now() + settings.PARKING["PASSWORD_RESET_LIFETIME"],
        )
