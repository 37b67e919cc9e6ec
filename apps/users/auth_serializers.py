"""Serializers for authentication flows (register, login, password reset)."""

from __future__ import annotations

import logging
import secrets
from datetime import timedelta
from typing import Any

from django.conf import settings  # type: ignore
from django.contrib.auth import get_user_model  # type: ignore
from django.contrib.auth.models import update_last_login  # type: ignore
from django.db import transaction  # type: ignore
from django.utils import timezone  # type: ignore
from rest_framework import exceptions, serializers  # type: ignore

from apps.affiliates.services import AffiliateError, apply_referral_code, issue_shareable_code
from apps.notifications.services import send_email_verification, send_password_reset_email

from .models import PHONE_VALIDATOR, PasswordResetToken


User = get_user_model()
logger = logging.getLogger(__name__)


class RegisterSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField(min_length=8, write_only=True)
    first_name = serializers.CharField(min_length=2, max_length=50)
    last_name = serializers.CharField(min_length=2, max_length=50)
    phone_number = serializers.CharField(
        required=False,
        allow_blank=True,
        validators=[PHONE_VALIDATOR],
    )
    referral_code = serializers.CharField(required=False, allow_blank=True)

    def validate_email(self, value: str) -> str:
        value = value.lower()
        if User.objects.filter(email__iexact=value).exists():
            raise serializers.ValidationError("Email already registered.")
        return value

    @transaction.atomic
    def create(self, validated_data: dict[str, Any]):  # type: ignore
        password = validated_data.pop("password")
        referral_code = validated_data.pop("referral_code", "")
        user = User.objects.create_user(password=password, **validated_data)

        if referral_code:
            try:
                apply_referral_code(user, referral_code)
            except AffiliateError as exc:
                raise serializers.ValidationError({"referral_code": [str(exc)]})

        try:
            with transaction.atomic():
                issue_shareable_code(user)
        except Exception:
            # a missing shareable code must not block sign-up
            logger.exception("Failed to create referral code for user %s", user.pk)

        token = user.issue_email_verification_token(hours=settings.EMAIL_VERIFICATION_EXPIRE_HOURS)
        send_email_verification(user, token)
        return user


class LoginSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True)

    def validate(self, attrs: dict[str, Any]) -> dict[str, Any]:  # type: ignore
        email = attrs.get("email", "").lower()
        try:
            user = User.objects.get(email__iexact=email)
        except User.DoesNotExist:
            raise exceptions.AuthenticationFailed("Invalid email or password.")

        if not user.is_active or not user.check_password(attrs.get("password", "")):
            raise exceptions.AuthenticationFailed("Invalid email or password.")

        update_last_login(None, user)
        attrs["user"] = user
        return attrs


class LogoutSerializer(serializers.Serializer):
    refresh = serializers.CharField()


class PasswordResetRequestSerializer(serializers.Serializer):
    email = serializers.EmailField()

    @transaction.atomic
    def send_reset(self) -> PasswordResetToken | None:
        """Issue a fresh reset token and email it; unknown addresses are a silent no-op."""

        user = User.objects.filter(email__iexact=self.validated_data["email"]).first()
        if user is None:
            # no account enumeration: the caller always gets the same answer
            return None

        PasswordResetToken.objects.filter(user=user, is_used=False).update(is_used=True)
        token = PasswordResetToken.objects.create(
            user=user,
            token=secrets.token_urlsafe(32),
            expires_at=timezone.now() + timedelta(hours=settings.PASSWORD_RESET_EXPIRE_HOURS),
        )
        send_password_reset_email(user, token.token)
        return token


class PasswordResetConfirmSerializer(serializers.Serializer):
    password = serializers.CharField(min_length=8, write_only=True)

    def validate(self, attrs: dict[str, Any]) -> dict[str, Any]:  # type: ignore
        raw_token = self.context.get("token", "")
        token = (
            PasswordResetToken.objects.select_related("user")
            .filter(token=raw_token, is_used=False)
            .first()
        )
        if token is None or token.is_expired:
            raise serializers.ValidationError({"token": "Invalid or expired token."})
        attrs["reset_token"] = token
        return attrs

    @transaction.atomic
    def create(self, validated_data: dict[str, Any]):  # type: ignore
        token: PasswordResetToken = validated_data["reset_token"]
        user = token.user
        user.set_password(validated_data["password"])
        user.save(update_fields=["password"])
        token.mark_used()
        logger.info("Password reset for user %s", user.email)
        return user
