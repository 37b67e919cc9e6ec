"""Serializers for translations."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from .models import DEFAULT_LANGUAGE, Translation


class TranslationSerializer(serializers.ModelSerializer):
    class Meta:
        model = Translation
        fields = ["id", "key", "translations", "category", "created_at", "updated_at"]
        read_only_fields = ["id", "created_at", "updated_at"]

    def validate_translations(self, value):  # type: ignore
        if not isinstance(value, dict) or not value.get(DEFAULT_LANGUAGE):
            raise serializers.ValidationError("English translation is required.")
        return value


class TranslationImportSerializer(serializers.Serializer):
    translations = serializers.JSONField()
    language = serializers.CharField(required=False, allow_blank=True, max_length=10)
    category = serializers.CharField(required=False, max_length=100, default="general")
