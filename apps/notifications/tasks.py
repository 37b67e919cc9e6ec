"""Celery tasks delivering booking lifecycle emails."""

from __future__ import annotations

import logging

from celery import shared_task  # type: ignore

from . import services

logger = logging.getLogger(__name__)


def _load_booking(booking_id: int):
    from apps.bookings.models import Booking

    try:
        return Booking.objects.select_related("user", "destination").get(pk=booking_id)
    except Booking.DoesNotExist:
        logger.error("Booking %s not found for notification", booking_id)
        return None


def dispatch(task, *args) -> None:
    """Queue a notification task; a broker outage must not fail the caller."""
    try:
        task.delay(*args)
    except Exception:
        logger.exception("Could not queue %s%s", task.name, args)


@shared_task(name="notifications.notify_deposit_paid")
def notify_deposit_paid(booking_id: int) -> bool:
    booking = _load_booking(booking_id)
    return bool(booking) and services.send_deposit_confirmation(booking)


@shared_task(name="notifications.notify_booking_confirmed")
def notify_booking_confirmed(booking_id: int) -> bool:
    booking = _load_booking(booking_id)
    return bool(booking) and services.send_booking_confirmation(booking)


@shared_task(name="notifications.notify_booking_rejected")
def notify_booking_rejected(booking_id: int, reason: str = "") -> bool:
    booking = _load_booking(booking_id)
    return bool(booking) and services.send_booking_rejection(booking, reason)


@shared_task(name="notifications.notify_dates_selected")
def notify_dates_selected(booking_id: int) -> bool:
    booking = _load_booking(booking_id)
    if booking is None:
        return False
    services.send_dates_selected_to_admins(booking)
    return services.send_dates_selected_to_user(booking)


@shared_task(name="notifications.notify_user_dates_updated")
def notify_user_dates_updated(booking_id: int) -> bool:
    booking = _load_booking(booking_id)
    return bool(booking) and services.send_dates_selected_to_user(booking)
