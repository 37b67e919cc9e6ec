"""Serializers for invitations."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from apps.users.models import PHONE_VALIDATOR
from apps.users.serializers import UserShortSerializer

from .models import Invitation


class InvitationSerializer(serializers.ModelSerializer):
    invited_by = UserShortSerializer(read_only=True)

    class Meta:
        model = Invitation
        fields = ["id", "email", "role", "status", "invited_by", "expires_at", "accepted_at", "created_at"]
        read_only_fields = fields


class InvitationCreateSerializer(serializers.Serializer):
    email = serializers.EmailField()
    role = serializers.ChoiceField(choices=Invitation.Role.choices)


class AcceptInvitationSerializer(serializers.Serializer):
    token = serializers.CharField(max_length=64)
    password = serializers.CharField(min_length=8, write_only=True)
    first_name = serializers.CharField(min_length=2, max_length=50)
    last_name = serializers.CharField(min_length=2, max_length=50)
    phone_number = serializers.CharField(
        required=False,
        allow_blank=True,
        validators=[PHONE_VALIDATOR],
    )
