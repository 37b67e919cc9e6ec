"""Admin registration for bookings."""

from __future__ import annotations

from django.contrib import admin  # type: ignore

from .models import Booking


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    list_display = (
        "booking_reference",
        "destination",
        "user",
        "status",
        "deposit_payment_status",
        "deposit_amount",
        "start_date",
        "end_date",
        "created_at",
    )
    list_filter = ("status", "deposit_payment_status", "destination")
    search_fields = ("booking_reference", "user__email", "affiliate_code")
    readonly_fields = (
        "booking_reference",
        "payment_intent_id",
        "deposit_transaction_id",
        "deposit_paid_at",
        "created_at",
        "updated_at",
    )
