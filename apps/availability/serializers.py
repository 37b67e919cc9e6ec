"""Serializers for destination calendars."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from .models import Availability


class AvailabilitySerializer(serializers.ModelSerializer):
    is_available = serializers.BooleanField(read_only=True)
    remaining_slots = serializers.IntegerField(read_only=True)

    class Meta:
        model = Availability
        fields = [
            "id",
            "destination",
            "date",
            "available_slots",
            "booked_slots",
            "remaining_slots",
            "is_available",
            "is_blocked",
            "block_reason",
            "price_override",
            "updated_at",
        ]
        read_only_fields = fields


class AvailabilityUpsertSerializer(serializers.Serializer):
    destination_id = serializers.IntegerField()
    date = serializers.DateField()
    available_slots = serializers.IntegerField(min_value=0)
    price_override = serializers.DecimalField(
        max_digits=10, decimal_places=2, min_value=0, required=False, allow_null=True
    )


class BlockSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, max_length=255)


class BulkUpdateSerializer(serializers.Serializer):
    destination_id = serializers.IntegerField()
    start_date = serializers.DateField()
    end_date = serializers.DateField()
    available_slots = serializers.IntegerField(min_value=0)
    is_blocked = serializers.BooleanField(required=False, default=False)
    block_reason = serializers.CharField(required=False, allow_blank=True, default="", max_length=255)
    price_override = serializers.DecimalField(
        max_digits=10, decimal_places=2, min_value=0, required=False, allow_null=True
    )

    def validate(self, attrs):  # type: ignore
        if attrs["start_date"] > attrs["end_date"]:
            raise serializers.ValidationError({"end_date": "End date must not be before start date."})
        return attrs


class BulkSlotsSerializer(serializers.Serializer):
    dates = serializers.ListField(child=serializers.DateField(), allow_empty=False)
    total_slots = serializers.IntegerField(min_value=0)


class BulkBlockSerializer(serializers.Serializer):
    dates = serializers.ListField(child=serializers.DateField(), allow_empty=False)
    is_blocked = serializers.BooleanField()
    reason = serializers.CharField(required=False, allow_blank=True, default="", max_length=255)


class CalendarQuerySerializer(serializers.Serializer):
    start_date = serializers.DateField(required=False)
    end_date = serializers.DateField(required=False)
