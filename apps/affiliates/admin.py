"""Admin registration for affiliates."""

from __future__ import annotations

from django.contrib import admin

from .models import AffiliateCode, Commission, Withdrawal


@admin.register(AffiliateCode)
class AffiliateCodeAdmin(admin.ModelAdmin):
    list_display = (
        "code",
        "affiliate",
        "commission_type",
        "commission_rate",
        "is_active",
        "can_share_referral",
        "usage_count",
        "total_earnings",
    )
    list_filter = ("is_active", "commission_type", "can_share_referral")
    search_fields = ("code", "affiliate__email")
    raw_id_fields = ("affiliate",)


@admin.register(Commission)
class CommissionAdmin(admin.ModelAdmin):
    list_display = ("affiliate", "booking", "affiliate_code", "commission_amount", "status", "kind", "created_at")
    list_filter = ("status", "kind")
    search_fields = ("affiliate__email", "affiliate_code", "booking__booking_reference")
    raw_id_fields = ("affiliate", "booking")


@admin.register(Withdrawal)
class WithdrawalAdmin(admin.ModelAdmin):
    list_display = ("affiliate", "amount", "currency", "status", "payment_method", "created_at")
    list_filter = ("status", "payment_method")
    search_fields = ("affiliate__email", "payment_reference")
    raw_id_fields = ("affiliate", "processed_by")
    filter_horizontal = ("commissions",)
