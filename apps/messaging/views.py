"""API views for booking messages."""

from __future__ import annotations

import logging

from django.contrib.auth import get_user_model  # type: ignore
from django.db.models import Q  # type: ignore
from django.shortcuts import get_object_or_404  # type: ignore
from django.utils import timezone  # type: ignore
from rest_framework import mixins, permissions, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.exceptions import PermissionDenied  # type: ignore
from rest_framework.response import Response  # type: ignore

from apps.bookings.models import Booking
from apps.users.permissions import is_admin_user

from .models import Message
from .serializers import MessageCreateSerializer, MessageSerializer

logger = logging.getLogger(__name__)
User = get_user_model()


def _accessible_booking(user, booking_id) -> Booking:
    booking = get_object_or_404(Booking, pk=booking_id)
    if booking.user_id != user.id and not is_admin_user(user):
        raise PermissionDenied("You do not have access to this booking.")
    return booking


class MessageViewSet(mixins.DestroyModelMixin, viewsets.GenericViewSet):
    """Send, read and delete messages attached to a booking."""

    serializer_class = MessageSerializer
    permission_classes = [permissions.IsAuthenticated]

    def get_queryset(self):  # type: ignore
        user = self.request.user
        qs = Message.objects.select_related("sender", "receiver")
        if self.action == "destroy":
            if is_admin_user(user):
                return qs
            return qs.filter(sender=user)
        if self.action == "read":
            return qs.filter(receiver=user)
        return qs.filter(Q(sender=user) | Q(receiver=user))

    def create(self, request, *args, **kwargs):  # type: ignore
        serializer = MessageCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        booking = _accessible_booking(request.user, data["booking_id"])
        receiver = get_object_or_404(User, pk=data["receiver_id"])
        message = Message.objects.create(
            booking=booking,
            sender=request.user,
            receiver=receiver,
            message=data["message"],
            attachments=data["attachments"],
        )
        logger.info("Message %s sent on booking %s", message.pk, booking.booking_reference)
        return Response(MessageSerializer(message).data, status=status.HTTP_201_CREATED)

    @action(detail=False, methods=["get"], url_path=r"booking/(?P<booking_id>\d+)")
    def booking(self, request, booking_id=None):
        booking = _accessible_booking(request.user, booking_id)
        messages = Message.objects.filter(booking=booking).select_related("sender", "receiver")
        messages.filter(receiver=request.user, is_read=False).update(is_read=True, read_at=timezone.now())
        return Response(MessageSerializer(messages.order_by("created_at"), many=True).data)

    @action(detail=True, methods=["put", "post"])
    def read(self, request, pk=None):
        message = self.get_object()
        message.mark_as_read()
        return Response(MessageSerializer(message).data)

    @action(detail=False, methods=["get"], url_path="unread-count")
    def unread_count(self, request):
        count = Message.objects.filter(receiver=request.user, is_read=False).count()
        return Response({"unread_count": count})
