from __future__ import annotations

from django.contrib import admin  # type: ignore

from .models import Translation


@admin.register(Translation)
class TranslationAdmin(admin.ModelAdmin):
    list_display = ("key", "category", "updated_at")
    list_filter = ("category",)
    search_fields = ("key",)
