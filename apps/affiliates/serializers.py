"""Serializers for the affiliate domain."""

from __future__ import annotations

from decimal import Decimal

from rest_framework import serializers  # type: ignore

from .models import AffiliateCode, Commission, Withdrawal


class AffiliateCodeSerializer(serializers.ModelSerializer):
    affiliate_id = serializers.ReadOnlyField(source="affiliate.id")

    class Meta:
        model = AffiliateCode
        fields = [
            "id",
            "affiliate_id",
            "code",
            "commission_rate",
            "commission_type",
            "fixed_amount",
            "is_active",
            "usage_count",
            "total_earnings",
            "can_share_referral",
            "discount_percentage",
            "discount_amount",
            "referral_count",
            "created_at",
        ]
        read_only_fields = fields


class AffiliateCodeAdminUpdateSerializer(serializers.ModelSerializer):
    """Commission and referral settings an administrator may change on a code."""

    class Meta:
        model = AffiliateCode
        fields = [
            "commission_rate",
            "commission_type",
            "fixed_amount",
            "can_share_referral",
            "discount_percentage",
            "discount_amount",
        ]

    def validate(self, attrs):  # type: ignore
        commission_type = attrs.get("commission_type", getattr(self.instance, "commission_type", None))
        fixed_amount = attrs.get("fixed_amount", getattr(self.instance, "fixed_amount", None))
        if commission_type == AffiliateCode.CommissionType.FIXED and fixed_amount is None:
            raise serializers.ValidationError({"fixed_amount": "Required for fixed commissions."})
        return attrs


class ReferralSharingSerializer(serializers.ModelSerializer):
    class Meta:
        model = AffiliateCode
        fields = ["can_share_referral", "discount_percentage", "discount_amount"]
        extra_kwargs = {"can_share_referral": {"required": True}}


class ToggleActiveSerializer(serializers.Serializer):
    is_active = serializers.BooleanField()


class GenerateCodeSerializer(serializers.Serializer):
    prefix = serializers.RegexField(
        r"^[A-Za-z0-9]{1,10}$",
        required=False,
        allow_blank=True,
    )


class CommissionSerializer(serializers.ModelSerializer):
    booking_reference = serializers.ReadOnlyField(source="booking.booking_reference")
    affiliate_email = serializers.ReadOnlyField(source="affiliate.email")

    class Meta:
        model = Commission
        fields = [
            "id",
            "affiliate",
            "affiliate_email",
            "booking",
            "booking_reference",
            "affiliate_code",
            "booking_amount",
            "commission_amount",
            "commission_rate",
            "status",
            "kind",
            "paid_at",
            "payment_reference",
            "created_at",
        ]
        read_only_fields = fields


class CommissionStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=Commission.Status.choices)
    payment_reference = serializers.CharField(required=False, allow_blank=True, max_length=100)


class CommissionPaySerializer(serializers.Serializer):
    payment_reference = serializers.CharField(required=False, allow_blank=True, max_length=100)


class WithdrawalSerializer(serializers.ModelSerializer):
    affiliate_email = serializers.ReadOnlyField(source="affiliate.email")
    commission_ids = serializers.PrimaryKeyRelatedField(source="commissions", many=True, read_only=True)

    class Meta:
        model = Withdrawal
        fields = [
            "id",
            "affiliate",
            "affiliate_email",
            "amount",
            "currency",
            "status",
            "payment_method",
            "payment_details",
            "commission_ids",
            "admin_notes",
            "rejection_reason",
            "processed_at",
            "processed_by",
            "payment_reference",
            "created_at",
        ]
        read_only_fields = fields


class WithdrawalRequestSerializer(serializers.Serializer):
    amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal("0.01"))
    payment_method = serializers.ChoiceField(choices=Withdrawal.PaymentMethod.choices)
    payment_details = serializers.JSONField(required=False)


class WithdrawalProcessSerializer(serializers.Serializer):
    payment_reference = serializers.CharField(required=False, allow_blank=True, max_length=100)
    admin_notes = serializers.CharField(required=False, allow_blank=True)


class WithdrawalRejectSerializer(serializers.Serializer):
    reason = serializers.CharField()
