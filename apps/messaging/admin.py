from __future__ import annotations

from django.contrib import admin  # type: ignore

from .models import Message


@admin.register(Message)
class MessageAdmin(admin.ModelAdmin):
    list_display = ("booking", "sender", "receiver", "is_read", "created_at")
    list_filter = ("is_read",)
    search_fields = ("booking__booking_reference", "sender__email", "receiver__email", "message")
