"""Admin registration for activities."""

from __future__ import annotations

from django.contrib import admin  # type: ignore

from .models import Activity, ActivityAvailability, ActivityBooking, ActivityInquiry


class ActivityAvailabilityInline(admin.TabularInline):
    model = ActivityAvailability
    extra = 0


@admin.register(Activity)
class ActivityAdmin(admin.ModelAdmin):
    list_display = ("title", "merchant", "location", "price", "currency", "status", "created_at")
    list_filter = ("status", "currency")
    search_fields = ("title", "location", "merchant__email")
    inlines = [ActivityAvailabilityInline]


@admin.register(ActivityBooking)
class ActivityBookingAdmin(admin.ModelAdmin):
    list_display = (
        "booking_reference",
        "activity",
        "user",
        "selected_date",
        "number_of_participants",
        "amount",
        "status",
        "payment_status",
        "merchant_payout_status",
    )
    list_filter = ("status", "payment_status", "merchant_payout_status", "is_add_on")
    search_fields = ("booking_reference", "customer_email")
    readonly_fields = ("booking_reference", "platform_commission", "merchant_amount", "created_at")


@admin.register(ActivityInquiry)
class ActivityInquiryAdmin(admin.ModelAdmin):
    list_display = ("activity", "customer_name", "customer_email", "preferred_date", "created_at")
    search_fields = ("customer_email", "customer_name")
