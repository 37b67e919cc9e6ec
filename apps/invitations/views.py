"""API views for invitations."""

from __future__ import annotations

from rest_framework import mixins, permissions, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.exceptions import NotFound  # type: ignore
from rest_framework.response import Response  # type: ignore

from apps.users.permissions import IsAdmin
from apps.users.serializers import UserSerializer
from config.exceptions import BadRequest

from . import services
from .models import Invitation
from .serializers import AcceptInvitationSerializer, InvitationCreateSerializer, InvitationSerializer


class InvitationViewSet(
    mixins.ListModelMixin,
    mixins.DestroyModelMixin,
    viewsets.GenericViewSet,
):
    """Administrator invitations; ``accept`` is public and keyed by token."""

    queryset = Invitation.objects.select_related("invited_by")
    serializer_class = InvitationSerializer

    def get_permissions(self):  # type: ignore
        if self.action == "accept":
            return [permissions.AllowAny()]
        return [IsAdmin()]

    def get_queryset(self):  # type: ignore
        qs = super().get_queryset()
        if self.request.query_params.get("status"):
            qs = qs.filter(status=self.request.query_params["status"])
        return qs

    def list(self, request, *args, **kwargs):  # type: ignore
        services.expire_stale()
        return super().list(request, *args, **kwargs)

    def create(self, request, *args, **kwargs):  # type: ignore
        serializer = InvitationCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            invitation = services.create_invitation(invited_by=request.user, **serializer.validated_data)
        except services.InvitationError as exc:
            raise BadRequest(str(exc)) from exc
        return Response(InvitationSerializer(invitation).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=["post"])
    def resend(self, request, pk=None):
        invitation = self.get_object()
        try:
            services.resend_invitation(invitation)
        except services.InvitationError as exc:
            raise BadRequest(str(exc)) from exc
        return Response(InvitationSerializer(invitation).data)

    @action(detail=False, methods=["post"])
    def accept(self, request):
        serializer = AcceptInvitationSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            user = services.accept_invitation(**serializer.validated_data)
        except services.InvitationNotFound as exc:
            raise NotFound(str(exc)) from exc
        except services.InvitationError as exc:
            raise BadRequest(str(exc)) from exc
        return Response(UserSerializer(user).data, status=status.HTTP_201_CREATED)
