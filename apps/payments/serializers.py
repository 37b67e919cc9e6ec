"""Serializers for deposit payments."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from .models import PaymentTransaction


class CreateIntentSerializer(serializers.Serializer):
    booking_id = serializers.IntegerField()


class ConfirmPaymentSerializer(serializers.Serializer):
    booking_id = serializers.IntegerField()
    payment_intent_id = serializers.CharField(max_length=255)


class PaymentTransactionSerializer(serializers.ModelSerializer):
    class Meta:
        model = PaymentTransaction
        fields = ["id", "event", "intent_id", "status", "payload", "created_at"]
        read_only_fields = fields
