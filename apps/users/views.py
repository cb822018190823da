"""User API views."""

from __future__ import annotations

import logging

from django.contrib.auth import get_user_model  # type: ignore
from rest_framework import mixins, permissions, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore

from .permissions import IsAdminRole, IsSelfOrAdmin, is_admin_user
from .serializers import AdminUserSerializer, UserSerializer

logger = logging.getLogger(__name__)

User = get_user_model()


class UserViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    mixins.UpdateModelMixin,
    mixins.DestroyModelMixin,
    viewsets.GenericViewSet,
):
    """User management.

    - `profile` returns the caller's own profile
    - retrieve/update are open to the user themself and to administrators
    - list and delete are restricted to administrators
    """

    queryset = User.objects.all().order_by("-created_at")

    def get_permissions(self):  # type: ignore
        if self.action in {"list", "destroy"}:
            return [permissions.IsAuthenticated(), IsAdminRole()]
        return [permissions.IsAuthenticated(), IsSelfOrAdmin()]

    def get_serializer_class(self):  # type: ignore
        if is_admin_user(self.request.user):
            return AdminUserSerializer
        return UserSerializer

    def perform_destroy(self, instance):  # type: ignore
        logger.info(f"User {instance.pk} deleted by {self.request.user.pk}")
        instance.delete()

    def destroy(self, request, *args, **kwargs):  # type: ignore
        super().destroy(request, *args, **kwargs)
        return Response({"success": True, "data": {}}, status=status.HTTP_200_OK)

    @action(detail=False, methods=["get"])
    def profile(self, request):
        """Returns the profile of the authenticated user."""
        serializer = UserSerializer(request.user)
        return Response(serializer.data)
