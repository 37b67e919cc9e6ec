"""Serializers for user-related API endpoints."""

from __future__ import annotations

from django.contrib.auth import get_user_model  # type: ignore
from rest_framework import serializers  # type: ignore

from .models import PHONE_VALIDATOR

User = get_user_model()


class UserSerializer(serializers.ModelSerializer):
    """Main user serializer."""

    class Meta:
        model = User
        fields = [
            "id",
            "email",
            "first_name",
            "last_name",
            "phone_number",
            "role",
            "profile_image",
            "is_email_verified",
            "referral_code",
            "discount_amount",
            "last_login",
            "created_at",
            "updated_at",
        ]
        read_only_fields = [
            "id",
            "email",
            "role",
            "is_email_verified",
            "referral_code",
            "discount_amount",
            "last_login",
            "created_at",
            "updated_at",
        ]


class UserShortSerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = ["id", "email", "first_name", "last_name", "role"]


class ProfileUpdateSerializer(serializers.ModelSerializer):
    """Profile fields a user may change about themselves."""

    phone_number = serializers.CharField(
        required=False,
        allow_blank=True,
        validators=[PHONE_VALIDATOR],
    )

    class Meta:
        model = User
        fields = ["first_name", "last_name", "phone_number", "profile_image"]
        extra_kwargs = {
            "first_name": {"required": False, "min_length": 2},
            "last_name": {"required": False, "min_length": 2},
            "profile_image": {"required": False},
        }
