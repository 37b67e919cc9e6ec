"""Serializers for the booking domain."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from apps.users.serializers import UserShortSerializer

from .models import Booking


class DestinationBriefSerializer(serializers.Serializer):
    id = serializers.IntegerField()
    name = serializers.JSONField()
    slug = serializers.CharField()
    country = serializers.CharField()
    thumbnail_image = serializers.CharField()


class BookingSummarySerializer(serializers.ModelSerializer):
    destination_name = serializers.ReadOnlyField(source="destination.name_en")

    class Meta:
        model = Booking
        fields = [
            "id",
            "booking_reference",
            "destination",
            "destination_name",
            "status",
            "deposit_amount",
            "deposit_currency",
            "deposit_payment_status",
            "affiliate_code",
            "start_date",
            "end_date",
            "created_at",
        ]
        read_only_fields = fields


class ActivityAddOnSummarySerializer(serializers.Serializer):
    id = serializers.IntegerField()
    booking_reference = serializers.CharField()
    activity = serializers.IntegerField(source="activity_id")
    activity_title = serializers.CharField(source="activity.title")
    selected_date = serializers.DateField()
    number_of_participants = serializers.IntegerField()
    amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    currency = serializers.CharField()
    status = serializers.CharField()


class BookingSerializer(serializers.ModelSerializer):
    destination = DestinationBriefSerializer(read_only=True)
    user = UserShortSerializer(read_only=True)
    activity_bookings = ActivityAddOnSummarySerializer(many=True, read_only=True)

    class Meta:
        model = Booking
        fields = [
            "id",
            "booking_reference",
            "user",
            "destination",
            "status",
            "deposit_amount",
            "deposit_currency",
            "deposit_payment_method",
            "deposit_transaction_id",
            "deposit_paid_at",
            "deposit_payment_status",
            "total_amount",
            "start_date",
            "end_date",
            "is_flexible",
            "number_of_travellers",
            "special_requests",
            "affiliate_code",
            "rejection_reason",
            "cancellation_reason",
            "calendar_unlocked_until",
            "activity_bookings",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class AdminBookingSerializer(BookingSerializer):
    class Meta(BookingSerializer.Meta):
        fields = BookingSerializer.Meta.fields + ["admin_notes", "payment_intent_id"]
        read_only_fields = fields


class ActivityAddOnSerializer(serializers.Serializer):
    activity_id = serializers.IntegerField()
    date = serializers.DateField()
    participants = serializers.IntegerField(min_value=1, default=1)
    customer_name = serializers.CharField(required=False, allow_blank=True, max_length=200)
    customer_email = serializers.EmailField(required=False, allow_blank=True)
    customer_phone = serializers.CharField(required=False, allow_blank=True, max_length=32)
    special_requests = serializers.CharField(required=False, allow_blank=True, max_length=1000)


class BookingCreateSerializer(serializers.Serializer):
    destination_id = serializers.IntegerField()
    number_of_travellers = serializers.IntegerField(min_value=1, default=1)
    special_requests = serializers.CharField(required=False, allow_blank=True, max_length=1000, default="")
    affiliate_code = serializers.CharField(required=False, allow_blank=True, max_length=32, default="")
    activities = ActivityAddOnSerializer(many=True, required=False)


class DateRangeSerializer(serializers.Serializer):
    start_date = serializers.DateField()
    end_date = serializers.DateField()
    is_flexible = serializers.BooleanField(required=False, default=False)

    def validate(self, attrs):  # type: ignore
        if attrs["end_date"] < attrs["start_date"]:
            raise serializers.ValidationError({"end_date": "End date must be on or after the start date."})
        return attrs


class CancelSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, max_length=255, default="")


class RejectSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, default="")


class AdminNotesSerializer(serializers.Serializer):
    admin_notes = serializers.CharField(allow_blank=True)
