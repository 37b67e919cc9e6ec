"""Booking domain models for Triply."""

from __future__ import annotations

import secrets
import string
from decimal import Decimal

from django.conf import settings  # type: ignore
from django.core.validators import MaxLengthValidator, MinValueValidator  # type: ignore
from django.db import models  # type: ignore
from django.utils import timezone  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

REFERENCE_ALPHABET = string.ascii_uppercase + string.digits


def generate_booking_reference() -> str:
    """``TRP-YYYYMMDD-XXXXX``, e.g. ``TRP-20250624-A3B5C``."""
    random_part = "".join(secrets.choice(REFERENCE_ALPHABET) for _ in range(5))
    return f"TRP-{timezone.now():%Y%m%d}-{random_part}"


class Booking(models.Model):
    """Deposit booking of a destination.

    A booking starts in ``pending_deposit``. Paying the deposit unlocks the
    calendar for ``CALENDAR_UNLOCK_DURATION_DAYS``, during which the traveller
    picks dates; an administrator then confirms or rejects the trip.
    """

    class Status(models.TextChoices):
        PENDING_DEPOSIT = "pending_deposit", _("Pending deposit")
        DEPOSIT_PAID = "deposit_paid", _("Deposit paid")
        DATES_SELECTED = "dates_selected", _("Dates selected")
        CONFIRMED = "confirmed", _("Confirmed")
        REJECTED = "rejected", _("Rejected")
        CANCELLED = "cancelled", _("Cancelled")

    class PaymentStatus(models.TextChoices):
        PENDING = "pending", _("Pending")
        COMPLETED = "completed", _("Completed")
        FAILED = "failed", _("Failed")
        REFUNDED = "refunded", _("Refunded")

    CANCELLABLE_STATUSES = (Status.PENDING_DEPOSIT, Status.DEPOSIT_PAID, Status.DATES_SELECTED)
    FINAL_STATUSES = (Status.CONFIRMED, Status.REJECTED, Status.CANCELLED)

    booking_reference = models.CharField(max_length=20, unique=True, editable=False)
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="bookings",
    )
    destination = models.ForeignKey(
        "destinations.Destination",
        on_delete=models.PROTECT,
        related_name="bookings",
    )
    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.PENDING_DEPOSIT,
    )

    deposit_amount = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(0)],
    )
    deposit_currency = models.CharField(max_length=3, default="AED")
    deposit_payment_method = models.CharField(max_length=50, blank=True)
    deposit_transaction_id = models.CharField(max_length=255, blank=True)
    deposit_paid_at = models.DateTimeField(null=True, blank=True)
    deposit_payment_status = models.CharField(
        max_length=20,
        choices=PaymentStatus.choices,
        default=PaymentStatus.PENDING,
    )
    payment_intent_id = models.CharField(max_length=255, blank=True, db_index=True)
    total_amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal("0.00"),
        help_text=_("Deposit plus add-on activities charged in one payment."),
    )

    start_date = models.DateField(null=True, blank=True)
    end_date = models.DateField(null=True, blank=True)
    is_flexible = models.BooleanField(default=False)
    number_of_travellers = models.PositiveSmallIntegerField(default=1, validators=[MinValueValidator(1)])
    special_requests = models.TextField(blank=True, validators=[MaxLengthValidator(1000)])

    affiliate_code = models.CharField(max_length=32, blank=True)
    affiliate = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="affiliate_bookings",
    )

    admin_notes = models.TextField(blank=True)
    rejection_reason = models.TextField(blank=True)
    cancellation_reason = models.CharField(max_length=255, blank=True)
    calendar_unlocked_until = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Booking")
        verbose_name_plural = _("Bookings")
        ordering = ["-created_at"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(end_date__isnull=True)
                | models.Q(start_date__isnull=True)
                | models.Q(end_date__gte=models.F("start_date")),
                name="booking_valid_travel_dates",
            ),
        ]
        indexes = [
            models.Index(fields=["user", "status"]),
            models.Index(fields=["destination", "status"]),
            models.Index(fields=["affiliate_code"]),
            models.Index(fields=["calendar_unlocked_until"]),
        ]

    def __str__(self) -> str:
        return f"Booking {self.booking_reference} ({self.status})"

    def save(self, *args, **kwargs):  # type: ignore
        if self._state.adding and not self.booking_reference:
            self.booking_reference = self._unique_reference()
        if self.affiliate_code:
            self.affiliate_code = self.affiliate_code.upper()
        super().save(*args, **kwargs)

    @classmethod
    def _unique_reference(cls) -> str:
        reference = generate_booking_reference()
        while cls.objects.filter(booking_reference=reference).exists():
            reference = generate_booking_reference()
        return reference

    @property
    def is_cancellable(self) -> bool:
        return self.status in self.CANCELLABLE_STATUSES

    @property
    def calendar_expired(self) -> bool:
        return bool(self.calendar_unlocked_until and self.calendar_unlocked_until < timezone.now())
