"""Admin registration for destinations."""

from __future__ import annotations

from django.contrib import admin

from .models import Destination


@admin.register(Destination)
class DestinationAdmin(admin.ModelAdmin):
    list_display = ("__str__", "slug", "country", "region", "deposit_amount", "currency", "is_active")
    list_filter = ("is_active", "country")
    search_fields = ("slug", "country", "region")
    readonly_fields = ("created_at", "updated_at")
