"""Serializers for merchant activities."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from .models import Activity, ActivityAvailability, ActivityBooking, ActivityInquiry


class ActivitySerializer(serializers.ModelSerializer):
    merchant_name = serializers.ReadOnlyField(source="merchant.full_name")

    class Meta:
        model = Activity
        fields = [
            "id",
            "merchant",
            "merchant_name",
            "title",
            "description",
            "location",
            "price",
            "currency",
            "photos",
            "status",
            "created_at",
        ]
        read_only_fields = fields


class MerchantActivitySerializer(ActivitySerializer):
    class Meta(ActivitySerializer.Meta):
        fields = ActivitySerializer.Meta.fields + ["rejection_reason", "updated_at"]
        read_only_fields = fields


class ActivityCreateSerializer(serializers.ModelSerializer):
    """Submission of a new activity; it waits for admin approval."""

    photos = serializers.ListField(
        child=serializers.URLField(max_length=500),
        min_length=1,
        max_length=3,
    )

    class Meta:
        model = Activity
        fields = ["title", "description", "location", "price", "currency", "photos"]
        extra_kwargs = {"currency": {"required": False}}

    def validate_currency(self, value: str) -> str:
        return value.upper()


class ActivityAvailabilitySerializer(serializers.ModelSerializer):
    remaining_slots = serializers.IntegerField(read_only=True)
    is_fully_booked = serializers.BooleanField(read_only=True)

    class Meta:
        model = ActivityAvailability
        fields = [
            "id",
            "date",
            "available_slots",
            "booked_slots",
            "remaining_slots",
            "is_available",
            "is_fully_booked",
            "price",
        ]
        read_only_fields = fields


class ActivityBookingSerializer(serializers.ModelSerializer):
    activity_title = serializers.ReadOnlyField(source="activity.title")
    activity_location = serializers.ReadOnlyField(source="activity.location")
    linked_booking_reference = serializers.ReadOnlyField(source="linked_booking.booking_reference")

    class Meta:
        model = ActivityBooking
        fields = [
            "id",
            "booking_reference",
            "activity",
            "activity_title",
            "activity_location",
            "selected_date",
            "number_of_participants",
            "customer_name",
            "customer_email",
            "customer_phone",
            "special_requests",
            "status",
            "amount",
            "currency",
            "platform_commission",
            "merchant_amount",
            "payment_status",
            "merchant_payout_status",
            "payout_date",
            "linked_booking",
            "linked_booking_reference",
            "is_add_on",
            "created_at",
        ]
        read_only_fields = fields


class ActivityBookRequestSerializer(serializers.Serializer):
    selected_date = serializers.DateField()
    number_of_participants = serializers.IntegerField(min_value=1)
    customer_name = serializers.CharField(max_length=200)
    customer_email = serializers.EmailField()
    customer_phone = serializers.CharField(required=False, allow_blank=True, max_length=32, default="")
    special_requests = serializers.CharField(required=False, allow_blank=True, max_length=1000, default="")


class ActivityInquirySerializer(serializers.ModelSerializer):
    class Meta:
        model = ActivityInquiry
        fields = ["id", "customer_name", "customer_email", "customer_phone", "preferred_date", "message", "created_at"]
        read_only_fields = ["id", "created_at"]


class AvailabilityWindowSerializer(serializers.Serializer):
    start_date = serializers.DateField(required=False)
    end_date = serializers.DateField(required=False)


class BlockDatesSerializer(serializers.Serializer):
    dates = serializers.ListField(child=serializers.DateField(), min_length=1)
    is_blocked = serializers.BooleanField()


class SlotsSerializer(serializers.Serializer):
    dates = serializers.ListField(child=serializers.DateField(), min_length=1)
    total_slots = serializers.IntegerField(min_value=0)


class RejectActivitySerializer(serializers.Serializer):
    reason = serializers.CharField(max_length=500)
