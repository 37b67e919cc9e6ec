"""Celery tasks for the booking domain."""

from __future__ import annotations

import logging
import math
from datetime import timedelta

from celery import shared_task  # type: ignore
from django.utils import timezone  # type: ignore

from apps.notifications import services as notification_services

from .models import Booking

logger = logging.getLogger(__name__)

REMINDER_DAYS_BEFORE = 30


# ============================================================================
# PERIODIC TASKS (run by Celery Beat)
# ============================================================================

@shared_task(name="bookings.send_calendar_expiry_reminders")
def send_calendar_expiry_reminders() -> dict[str, int]:
    """
    Warn travellers whose calendar access ends in about a month.

    Runs daily. Bookings that are paid but not yet confirmed are reminded
    on every run while 29 or 30 days are left, so usually on two
    consecutive days.

    Returns:
        dict: {"sent": number of reminders sent}
    """
    now = timezone.now()
    candidates = Booking.objects.filter(
        status__in=[Booking.Status.DEPOSIT_PAID, Booking.Status.DATES_SELECTED],
        calendar_unlocked_until__gte=now,
        calendar_unlocked_until__lte=now + timedelta(days=REMINDER_DAYS_BEFORE),
    ).select_related("user", "destination")

    sent_count = 0
    window = range(REMINDER_DAYS_BEFORE - 1, REMINDER_DAYS_BEFORE + 2)
    for booking in candidates:
        days_left = math.ceil((booking.calendar_unlocked_until - now).total_seconds() / 86400)
        if days_left not in window:
            continue
        if notification_services.send_calendar_expiry_reminder(booking):
            sent_count += 1
            logger.info("Calendar expiry reminder sent for %s", booking.booking_reference)

    if sent_count > 0:
        logger.info("Sent %s calendar expiry reminders", sent_count)

    return {"sent": sent_count}
