"""Serializers for destinations."""

from __future__ import annotations

from typing import Any

from rest_framework import serializers  # type: ignore

from .models import Destination

LANGUAGES = ("en", "ar")


def _validate_localized(value: Any, *, required: bool) -> dict[str, str]:
    if not isinstance(value, dict):
        raise serializers.ValidationError("Expected an object keyed by language code.")
    unknown = set(value) - set(LANGUAGES)
    if unknown:
        raise serializers.ValidationError(f"Unsupported languages: {', '.join(sorted(unknown))}.")
    if required and not str(value.get("en", "")).strip():
        raise serializers.ValidationError("English text is required.")
    return {key: str(text) for key, text in value.items()}


def _validate_string_list(value: Any) -> list[str]:
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise serializers.ValidationError("Expected a list of strings.")
    return value


class DestinationListSerializer(serializers.ModelSerializer):
    class Meta:
        model = Destination
        fields = [
            "id",
            "name",
            "slug",
            "short_description",
            "thumbnail_image",
            "country",
            "region",
            "deposit_amount",
            "currency",
            "duration_days",
            "duration_nights",
        ]


class DestinationSerializer(serializers.ModelSerializer):
    class Meta:
        model = Destination
        fields = [
            "id",
            "name",
            "slug",
            "description",
            "short_description",
            "images",
            "thumbnail_image",
            "country",
            "region",
            "deposit_amount",
            "currency",
            "highlights",
            "inclusions",
            "exclusions",
            "duration_days",
            "duration_nights",
            "is_active",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "slug", "created_at", "updated_at"]

    def validate_name(self, value):  # type: ignore
        return _validate_localized(value, required=True)

    def validate_description(self, value):  # type: ignore
        return _validate_localized(value, required=True)

    def validate_short_description(self, value):  # type: ignore
        return _validate_localized(value, required=False)

    def validate_images(self, value):  # type: ignore
        images = _validate_string_list(value)
        url = serializers.URLField()
        for image in images:
            url.run_validation(image)
        return images

    def validate_highlights(self, value):  # type: ignore
        return _validate_string_list(value)

    def validate_inclusions(self, value):  # type: ignore
        return _validate_string_list(value)

    def validate_exclusions(self, value):  # type: ignore
        return _validate_string_list(value)

    def validate_currency(self, value: str) -> str:
        return value.upper()
