from __future__ import annotations

from django.contrib import admin  # type: ignore

from .models import PaymentTransaction


@admin.register(PaymentTransaction)
class PaymentTransactionAdmin(admin.ModelAdmin):
    list_display = ("event", "booking", "intent_id", "status", "created_at")
    list_filter = ("event", "status")
    search_fields = ("intent_id", "booking__booking_reference")
    readonly_fields = ("booking", "event", "intent_id", "payload", "status", "created_at")
