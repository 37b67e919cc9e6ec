"""Audit trail of transactional emails."""

from __future__ import annotations

from django.conf import settings  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


class EmailLog(models.Model):
    """One delivery attempt of a transactional email."""

    class EmailType(models.TextChoices):
        DEPOSIT_CONFIRMATION = "deposit_confirmation", _("Deposit confirmation")
        BOOKING_CONFIRMED = "booking_confirmed", _("Booking confirmed")
        BOOKING_REJECTED = "booking_rejected", _("Booking rejected")
        DATES_SELECTED = "dates_selected", _("Dates selected")
        DATE_REMINDER = "date_reminder", _("Date reminder")
        CALENDAR_EXPIRING = "calendar_expiring", _("Calendar expiring")
        PASSWORD_RESET = "password_reset", _("Password reset")
        EMAIL_VERIFICATION = "email_verification", _("Email verification")
        ACTIVITY_INQUIRY = "activity_inquiry", _("Activity inquiry")
        INVITATION = "invitation", _("Invitation")

    class Status(models.TextChoices):
        SENT = "sent", _("Sent")
        FAILED = "failed", _("Failed")
        PENDING = "pending", _("Pending")

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="email_logs",
    )
    email_type = models.CharField(max_length=32, choices=EmailType.choices)
    recipient = models.EmailField()
    subject = models.CharField(max_length=255)
    status = models.CharField(max_length=10, choices=Status.choices, default=Status.PENDING)
    error_message = models.TextField(blank=True)
    sent_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = _("Email log")
        verbose_name_plural = _("Email logs")
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["email_type", "status"]),
            models.Index(fields=["recipient"]),
        ]

    def __str__(self) -> str:
        return f"{self.email_type} to {self.recipient} ({self.status})"
