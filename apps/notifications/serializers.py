"""Serializers for the email audit log."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from .models import EmailLog


class EmailLogSerializer(serializers.ModelSerializer):
    class Meta:
        model = EmailLog
        fields = [
            "id",
            "user",
            "email_type",
            "recipient",
            "subject",
            "status",
            "error_message",
            "sent_at",
            "created_at",
        ]
        read_only_fields = fields
