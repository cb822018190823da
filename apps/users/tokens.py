"""JWT helpers for authentication and email verification."""

from __future__ import annotations

from django.conf import settings  # type: ignore
from rest_framework_simplejwt.tokens import RefreshToken, Token  # type: ignore


class EmailVerificationToken(Token):
    """Signed single-purpose token embedded in the verification link."""

    token_type = "email_verification"
    lifetime = settings.PARKING["EMAIL_VERIFICATION_LIFETIME"]

    @classmethod
    def for_user(cls, user) -> "EmailVerificationToken":  # type: ignore
        token = super().for_user(user)
        token["email"] = user.email
        return token


def tokens_for_user(user) -> dict[str, str]:
    refresh = RefreshToken.for_user(user)
    # Claims on the refresh token are copied into derived access tokens.
    refresh["role"] = user.role
    return {"refresh": str(refresh), "access": str(refresh.access_token)}
