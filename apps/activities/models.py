"""Merchant activity models."""

from __future__ import annotations

from decimal import Decimal

from django.conf import settings  # type: ignore
from django.core.validators import MaxLengthValidator, MinValueValidator  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

from apps.bookings.models import generate_booking_reference


class Activity(models.Model):
    """Bookable experience offered by a merchant."""

    class Status(models.TextChoices):
        PENDING = "pending", _("Pending approval")
        APPROVED = "approved", _("Approved")
        REJECTED = "rejected", _("Rejected")

    merchant = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="activities",
    )
    title = models.CharField(max_length=200)
    description = models.TextField(validators=[MaxLengthValidator(2000)])
    location = models.CharField(max_length=200)
    price = models.DecimalField(max_digits=10, decimal_places=2, validators=[MinValueValidator(0)])
    currency = models.CharField(max_length=3, default="AED")
    photos = models.JSONField(default=list)
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.PENDING)
    rejection_reason = models.CharField(max_length=500, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Activity")
        verbose_name_plural = _("Activities")
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["merchant"]),
            models.Index(fields=["status"]),
        ]

    def __str__(self) -> str:
        return self.title

    def save(self, *args, **kwargs):  # type: ignore
        self.currency = (self.currency or "AED").upper()
        super().save(*args, **kwargs)


class ActivityAvailability(models.Model):
    activity = models.ForeignKey(Activity, on_delete=models.CASCADE, related_name="availability")
    date = models.DateField()
    available_slots = models.PositiveIntegerField(default=1)
    booked_slots = models.PositiveIntegerField(default=0)
    is_available = models.BooleanField(default=True)
    price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        null=True,
        blank=True,
        validators=[MinValueValidator(0)],
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Activity availability")
        verbose_name_plural = _("Activity availability")
        ordering = ["date"]
        constraints = [
            models.UniqueConstraint(fields=["activity", "date"], name="activity_availability_unique_day"),
        ]

    def __str__(self) -> str:
        return f"{self.activity_id} @ {self.date}"

    @property
    def remaining_slots(self) -> int:
        return max(0, self.available_slots - self.booked_slots)

    @property
    def is_fully_booked(self) -> bool:
        return not self.is_available or self.booked_slots >= self.available_slots


class ActivityBooking(models.Model):
    """Booking of an activity with the platform/merchant revenue split."""

    class Status(models.TextChoices):
        PENDING_PAYMENT = "pending_payment", _("Pending payment")
        PAYMENT_COMPLETED = "payment_completed", _("Payment completed")
        CONFIRMED = "confirmed", _("Confirmed")
        CANCELLED = "cancelled", _("Cancelled")
        REFUNDED = "refunded", _("Refunded")

    class PaymentStatus(models.TextChoices):
        PENDING = "pending", _("Pending")
        COMPLETED = "completed", _("Completed")
        FAILED = "failed", _("Failed")
        REFUNDED = "refunded", _("Refunded")

    class PayoutStatus(models.TextChoices):
        PENDING = "pending", _("Pending")
        PAID = "paid", _("Paid")
        FAILED = "failed", _("Failed")

    booking_reference = models.CharField(max_length=20, unique=True, editable=False)
    activity = models.ForeignKey(Activity, on_delete=models.PROTECT, related_name="bookings")
    availability = models.ForeignKey(
        ActivityAvailability,
        on_delete=models.PROTECT,
        related_name="bookings",
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="activity_bookings",
    )
    selected_date = models.DateField()
    number_of_participants = models.PositiveSmallIntegerField(default=1, validators=[MinValueValidator(1)])
    customer_name = models.CharField(max_length=200)
    customer_email = models.EmailField()
    customer_phone = models.CharField(max_length=32, blank=True)
    special_requests = models.TextField(blank=True, validators=[MaxLengthValidator(1000)])
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.PENDING_PAYMENT)

    amount = models.DecimalField(max_digits=12, decimal_places=2, validators=[MinValueValidator(0)])
    currency = models.CharField(max_length=3, default="AED")
    platform_commission = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    merchant_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    payment_method = models.CharField(max_length=50, blank=True)
    transaction_id = models.CharField(max_length=255, blank=True)
    paid_at = models.DateTimeField(null=True, blank=True)
    payment_status = models.CharField(
        max_length=20,
        choices=PaymentStatus.choices,
        default=PaymentStatus.PENDING,
    )
    merchant_payout_status = models.CharField(
        max_length=20,
        choices=PayoutStatus.choices,
        default=PayoutStatus.PENDING,
    )
    payout_date = models.DateTimeField(null=True, blank=True)
    payout_transaction_id = models.CharField(max_length=255, blank=True)

    linked_booking = models.ForeignKey(
        "bookings.Booking",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="activity_bookings",
    )
    is_add_on = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Activity booking")
        verbose_name_plural = _("Activity bookings")
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["user"]),
            models.Index(fields=["activity", "status"]),
            models.Index(fields=["merchant_payout_status"]),
        ]

    def __str__(self) -> str:
        return f"{self.booking_reference} ({self.status})"

    def save(self, *args, **kwargs):  # type: ignore
        if self._state.adding and not self.booking_reference:
            self.booking_reference = generate_booking_reference()
            while ActivityBooking.objects.filter(booking_reference=self.booking_reference).exists():
                self.booking_reference = generate_booking_reference()
        super().save(*args, **kwargs)


class ActivityInquiry(models.Model):
    activity = models.ForeignKey(Activity, on_delete=models.CASCADE, related_name="inquiries")
    customer_name = models.CharField(max_length=200)
    customer_email = models.EmailField()
    customer_phone = models.CharField(max_length=32)
    preferred_date = models.DateField()
    message = models.TextField(blank=True, validators=[MaxLengthValidator(2000)])
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = _("Activity inquiry")
        verbose_name_plural = _("Activity inquiries")
        ordering = ["-created_at"]

    def __str__(self) -> str:
        return f"Inquiry from {self.customer_email} for {self.activity_id}"
