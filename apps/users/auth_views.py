"""Views for authentication flows (register, verify email, login, password reset)."""

from __future__ import annotations

import logging

from drf_spectacular.utils import OpenApiParameter, extend_schema  # type: ignore
from rest_framework import status
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from .auth_serializers import (
    ForgotPasswordSerializer,
    LoginSerializer,
    RegisterSerializer,
    ResetPasswordSerializer,
    UpdatePasswordSerializer,
    VerifyEmailSerializer,
)
from .serializers import UserSerializer
from .tokens import tokens_for_user

logger = logging.getLogger(__name__)


class RegisterView(APIView):
    permission_classes = [AllowAny]

    @extend_schema(request=RegisterSerializer)
    def post(self, request):  # type: ignore
        serializer = RegisterSerializer(data=request.data, context={"request": request})
        serializer.is_valid(raise_exception=True)
        user = serializer.save()
        data = {
            "success": True,
            "message": "User registered successfully. Please verify your email.",
            "user": UserSerializer(user).data,
            "tokens": tokens_for_user(user),
        }
        return Response(data, status=status.HTTP_201_CREATED)


class VerifyEmailView(APIView):
    permission_classes = [AllowAny]

    @extend_schema(parameters=[OpenApiParameter("token", str, required=True)])
    def get(self, request):  # type: ignore
        serializer = VerifyEmailSerializer(data={"token": request.query_params.get("token", "")})
        serializer.is_valid(raise_exception=True)
        serializer.save()
        return Response({"success": True, "message": "Email verified successfully!"})


class LoginView(APIView):
    permission_classes = [AllowAny]

    @extend_schema(request=LoginSerializer)
    def post(self, request):  # type: ignore
        serializer = LoginSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = serializer.validated_data["user"]
        user.touch_last_login()
        logger.info(f"User {user.pk} logged in")
        data = {
            "success": True,
            "message": "Login successful",
            "user": UserSerializer(user).data,
            "tokens": tokens_for_user(user),
        }
        return Response(data, status=status.HTTP_200_OK)


class ForgotPasswordView(APIView):
    permission_classes = [AllowAny]

    @extend_schema(request=ForgotPasswordSerializer)
    def post(self, request):  # type: ignore
        serializer = ForgotPasswordSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        serializer.save()
        return Response({"success": True, "message": "Password reset link sent to your email."})


class ResetPasswordView(APIView):
    permission_classes = [AllowAny]

    @extend_schema(request=ResetPasswordSerializer)
    def post(self, request):  # type: ignore
        serializer = ResetPasswordSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        serializer.save()
        return Response(
            {
                "success": True,
                "message": "Password reset successful. You can now login with your new password.",
            }
        )


class UpdatePasswordView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(request=UpdatePasswordSerializer)
    def put(self, request):  # type: ignore
        serializer = UpdatePasswordSerializer(data=request.data, context={"request": request})
        serializer.is_valid(raise_exception=True)
        serializer.save()
        return Response({"success": True, "message": "Password updated successfully"})
