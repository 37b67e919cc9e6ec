"""Affiliate, referral and commission models."""

from __future__ import annotations

import secrets
import string
from decimal import Decimal

from django.conf import settings  # type: ignore
from django.core.validators import MaxValueValidator, MinValueValidator  # type: ignore
from django.db import models  # type: ignore
from django.utils import timezone  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

CODE_ALPHABET = string.ascii_uppercase + string.digits


class AffiliateCode(models.Model):
    """Shareable code earning its owner commission on bookings that cite it."""

    class CommissionType(models.TextChoices):
        PERCENTAGE = "percentage", _("Percentage")
        FIXED = "fixed", _("Fixed amount")

    affiliate = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="affiliate_codes",
    )
    code = models.CharField(max_length=32, unique=True)
    commission_rate = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        default=Decimal("10.00"),
        validators=[MinValueValidator(0), MaxValueValidator(100)],
    )
    commission_type = models.CharField(
        max_length=20,
        choices=CommissionType.choices,
        default=CommissionType.PERCENTAGE,
    )
    fixed_amount = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        null=True,
        blank=True,
        validators=[MinValueValidator(0)],
    )
    is_active = models.BooleanField(default=True)
    usage_count = models.PositiveIntegerField(default=0)
    total_earnings = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    can_share_referral = models.BooleanField(
        default=False,
        help_text=_("Whether the code can be used at sign-up to grant a deposit discount."),
    )
    discount_percentage = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        null=True,
        blank=True,
        validators=[MinValueValidator(0), MaxValueValidator(100)],
    )
    discount_amount = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        null=True,
        blank=True,
        validators=[MinValueValidator(0)],
    )
    referral_count = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Affiliate code")
        verbose_name_plural = _("Affiliate codes")
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["affiliate"]),
            models.Index(fields=["is_active"]),
        ]

    def __str__(self) -> str:
        return self.code

    def save(self, *args, **kwargs):  # type: ignore
        self.code = self.code.upper()
        super().save(*args, **kwargs)

    @staticmethod
    def generate_code(prefix: str | None = None) -> str:
        """Return ``PREFIX-XXXXXX`` (``AFF-XXXXXX`` without a prefix)."""
        random_part = "".join(secrets.choice(CODE_ALPHABET) for _ in range(6))
        prefix = (prefix or "AFF").strip().upper() or "AFF"
        return f"{prefix}-{random_part}"

    def referral_discount(self) -> Decimal:
        """Deposit discount a referred user gets from this code."""
        if self.discount_percentage:
            base = Decimal(settings.DEFAULT_DEPOSIT_AMOUNT)
            return (base * self.discount_percentage / Decimal("100")).quantize(Decimal("0.01"))
        if self.discount_amount:
            return self.discount_amount
        return Decimal("0.00")

    def calculate_commission(self, amount: Decimal) -> Decimal:
        if self.commission_type == self.CommissionType.FIXED:
            return self.fixed_amount or Decimal("0.00")
        return (Decimal(amount) * self.commission_rate / Decimal("100")).quantize(Decimal("0.01"))


class Commission(models.Model):
    """Payable owed to an affiliate for a paid booking."""

    class Status(models.TextChoices):
        PENDING = "pending", _("Pending")
        APPROVED = "approved", _("Approved")
        PAID = "paid", _("Paid")

    class Kind(models.TextChoices):
        AFFILIATE = "affiliate", _("Affiliate code")
        REFERRAL = "referral", _("Referral")

    affiliate = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="commissions",
    )
    booking = models.ForeignKey(
        "bookings.Booking",
        on_delete=models.CASCADE,
        related_name="commissions",
    )
    affiliate_code = models.CharField(max_length=32)
    booking_amount = models.DecimalField(max_digits=12, decimal_places=2)
    commission_amount = models.DecimalField(max_digits=12, decimal_places=2)
    commission_rate = models.DecimalField(max_digits=5, decimal_places=2)
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.PENDING)
    kind = models.CharField(max_length=20, choices=Kind.choices, default=Kind.AFFILIATE)
    paid_at = models.DateTimeField(null=True, blank=True)
    payment_reference = models.CharField(max_length=100, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Commission")
        verbose_name_plural = _("Commissions")
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["affiliate", "status"]),
            models.Index(fields=["booking"]),
        ]

    def __str__(self) -> str:
        return f"{self.commission_amount} to {self.affiliate_id} ({self.status})"

    def approve(self) -> None:
        self.status = self.Status.APPROVED
        self.save(update_fields=["status", "updated_at"])

    def mark_paid(self, payment_reference: str = "") -> None:
        self.status = self.Status.PAID
        self.paid_at = timezone.now()
        if payment_reference:
            self.payment_reference = payment_reference
        self.save(update_fields=["status", "paid_at", "payment_reference", "updated_at"])


class Withdrawal(models.Model):
    """Affiliate payout request covering a set of approved commissions."""

    class Status(models.TextChoices):
        PENDING = "pending", _("Pending")
        PROCESSING = "processing", _("Processing")
        COMPLETED = "completed", _("Completed")
        REJECTED = "rejected", _("Rejected")
        CANCELLED = "cancelled", _("Cancelled")

    class PaymentMethod(models.TextChoices):
        BANK_TRANSFER = "bank_transfer", _("Bank transfer")
        PAYPAL = "paypal", _("PayPal")
        STRIPE = "stripe", _("Stripe")
        OTHER = "other", _("Other")

    OPEN_STATUSES = (Status.PENDING, Status.PROCESSING)

    affiliate = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="withdrawals",
    )
    amount = models.DecimalField(max_digits=12, decimal_places=2, validators=[MinValueValidator(0)])
    currency = models.CharField(max_length=3, default="AED")
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.PENDING)
    payment_method = models.CharField(max_length=20, choices=PaymentMethod.choices)
    payment_details = models.JSONField(default=dict, blank=True)
    commissions = models.ManyToManyField(Commission, related_name="withdrawals", blank=True)
    admin_notes = models.TextField(blank=True)
    rejection_reason = models.TextField(blank=True)
    processed_at = models.DateTimeField(null=True, blank=True)
    processed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="processed_withdrawals",
    )
    payment_reference = models.CharField(max_length=100, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Withdrawal")
        verbose_name_plural = _("Withdrawals")
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["affiliate", "status"]),
        ]

    def __str__(self) -> str:
        return f"Withdrawal {self.amount} {self.currency} ({self.status})"
