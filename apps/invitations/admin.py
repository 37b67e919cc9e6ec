from __future__ import annotations

from django.contrib import admin  # type: ignore

from .models import Invitation


@admin.register(Invitation)
class InvitationAdmin(admin.ModelAdmin):
    list_display = ("email", "role", "status", "invited_by", "expires_at", "accepted_at")
    list_filter = ("role", "status")
    search_fields = ("email",)
    readonly_fields = ("token", "created_at", "updated_at")
