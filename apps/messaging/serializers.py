"""Serializers for booking messages."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from apps.users.serializers import UserShortSerializer

from .models import Message


class MessageSerializer(serializers.ModelSerializer):
    sender = UserShortSerializer(read_only=True)
    receiver = UserShortSerializer(read_only=True)

    class Meta:
        model = Message
        fields = [
            "id",
            "booking",
            "sender",
            "receiver",
            "message",
            "attachments",
            "is_read",
            "read_at",
            "created_at",
        ]
        read_only_fields = fields


class MessageCreateSerializer(serializers.Serializer):
    booking_id = serializers.IntegerField()
    receiver_id = serializers.IntegerField()
    message = serializers.CharField(max_length=5000)
    attachments = serializers.ListField(child=serializers.URLField(), required=False, default=list)
