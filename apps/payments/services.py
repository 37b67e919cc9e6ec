"""Deposit payment services.

Payment success can be reported twice (client confirmation and webhook);
the success handler is idempotent so the booking, the add-ons and the
commission are only processed once.
"""

from __future__ import annotations

import json
import logging
from datetime import timedelta
from typing import Any

from django.conf import settings  # type: ignore
from django.core.serializers.json import DjangoJSONEncoder  # type: ignore
from django.db import transaction  # type: ignore
from django.utils import timezone  # type: ignore

from apps.bookings.models import Booking
from apps.notifications import tasks as notification_tasks

from .gateways import GatewayError, get_gateway
from .models import PaymentTransaction

logger = logging.getLogger(__name__)


class PaymentError(Exception):
    """Raised when a payment operation cannot be completed."""


def _record(booking: Booking | None, event: str, intent_id: str = "", payload: Any = None, status: str = "") -> None:
    PaymentTransaction.objects.create(
        booking=booking,
        event=event,
        intent_id=intent_id,
        payload=json.loads(json.dumps(payload or {}, cls=DjangoJSONEncoder)),
        status=status,
    )


def create_intent_for_booking(booking: Booking) -> dict[str, Any]:
    """Create a payment intent for the booking total and remember its id."""

    if booking.status != Booking.Status.PENDING_DEPOSIT:
        raise PaymentError("Deposit has already been paid or booking is not payable.")
    try:
        intent = get_gateway().create_payment_intent(
            booking.total_amount or booking.deposit_amount,
            booking.deposit_currency,
            {
                "booking_id": booking.pk,
                "booking_reference": booking.booking_reference,
                "user_id": booking.user_id,
                "activity_count": booking.activity_bookings.count(),
            },
        )
    except GatewayError as exc:
        raise PaymentError(str(exc)) from exc

    booking.payment_intent_id = intent["id"]
    booking.save(update_fields=["payment_intent_id", "updated_at"])
    _record(booking, PaymentTransaction.Event.INTENT_CREATED, intent["id"], status="created")
    return {
        "client_secret": intent["client_secret"],
        "payment_intent_id": intent["id"],
        "amount": booking.total_amount or booking.deposit_amount,
        "currency": booking.deposit_currency,
        "publishable_key": settings.STRIPE_PUBLISHABLE_KEY,
    }


def handle_payment_success(intent_id: str, booking_id: int, payment_method: str = "card") -> Booking:
    """Move the booking to ``deposit_paid`` and run the paid-booking side effects."""

    from apps.activities.services import mark_add_ons_paid
    from apps.affiliates.services import process_affiliate_commission

    with transaction.atomic():
        try:
            booking = Booking.objects.select_for_update().get(pk=booking_id)
        except Booking.DoesNotExist as exc:
            raise PaymentError("Booking not found.") from exc
        if booking.deposit_payment_status == Booking.PaymentStatus.COMPLETED:
            logger.info("Payment for %s already processed", booking.booking_reference)
            return booking
        if booking.status != Booking.Status.PENDING_DEPOSIT:
            raise PaymentError("Booking is not awaiting a deposit.")

        now = timezone.now()
        booking.status = Booking.Status.DEPOSIT_PAID
        booking.deposit_payment_status = Booking.PaymentStatus.COMPLETED
        booking.deposit_transaction_id = intent_id
        booking.deposit_payment_method = payment_method or "card"
        booking.deposit_paid_at = now
        booking.calendar_unlocked_until = now + timedelta(days=settings.CALENDAR_UNLOCK_DURATION_DAYS)
        booking.save(
            update_fields=[
                "status",
                "deposit_payment_status",
                "deposit_transaction_id",
                "deposit_payment_method",
                "deposit_paid_at",
                "calendar_unlocked_until",
                "updated_at",
            ]
        )
        _record(booking, PaymentTransaction.Event.PAYMENT_SUCCEEDED, intent_id, status="succeeded")
        mark_add_ons_paid(booking, intent_id)

    logger.info("Deposit paid for booking %s", booking.booking_reference)
    process_affiliate_commission(booking)
    notification_tasks.dispatch(notification_tasks.notify_deposit_paid, booking.pk)
    return booking


def handle_payment_failure(intent_id: str, booking_id: int, message: str = "") -> Booking | None:
    booking = Booking.objects.filter(pk=booking_id).first()
    if booking is None:
        logger.warning("Payment failure for unknown booking %s", booking_id)
        return None
    if booking.deposit_payment_status != Booking.PaymentStatus.COMPLETED:
        booking.deposit_payment_status = Booking.PaymentStatus.FAILED
        booking.save(update_fields=["deposit_payment_status", "updated_at"])
    _record(booking, PaymentTransaction.Event.PAYMENT_FAILED, intent_id, {"message": message}, status="failed")
    logger.warning("Payment failed for booking %s: %s", booking.booking_reference, message)
    return booking


def process_refund(booking: Booking) -> Booking:
    intent_id = booking.deposit_transaction_id or booking.payment_intent_id
    if not intent_id:
        raise PaymentError("No payment found for this booking.")
    try:
        refund = get_gateway().refund(intent_id)
    except GatewayError as exc:
        raise PaymentError(str(exc)) from exc

    _record(booking, PaymentTransaction.Event.REFUND, intent_id, refund, status=refund.get("status", ""))
    if refund.get("status") == "succeeded":
        booking.deposit_payment_status = Booking.PaymentStatus.REFUNDED
        booking.status = Booking.Status.CANCELLED
        booking.save(update_fields=["deposit_payment_status", "status", "updated_at"])
        logger.info("Deposit refunded for booking %s", booking.booking_reference)
    return booking


def confirm_payment(booking: Booking, intent_id: str) -> Booking:
    """Client-side confirmation: check the intent with the provider."""

    try:
        intent = get_gateway().retrieve(intent_id)
    except GatewayError as exc:
        raise PaymentError(str(exc)) from exc
    booking_id = (intent.get("metadata") or {}).get("booking_id")
    if intent_id != booking.payment_intent_id or str(booking_id) != str(booking.pk):
        logger.warning("Intent %s does not belong to booking %s", intent_id, booking.booking_reference)
        raise PaymentError("Payment intent does not belong to this booking.")
    if intent["status"] != "succeeded":
        raise PaymentError(f"Payment not completed (status: {intent['status']}).")
    return handle_payment_success(intent_id, booking.pk, intent.get("payment_method") or "card")


def handle_webhook_event(event: dict[str, Any]) -> None:
    event_type = event.get("type", "")
    obj = (event.get("data") or {}).get("object") or {}
    intent_id = obj.get("id", "")
    booking_id = (obj.get("metadata") or {}).get("booking_id")

    if event_type == "payment_intent.succeeded" and booking_id:
        handle_payment_success(intent_id, int(booking_id), obj.get("payment_method") or "card")
    elif event_type == "payment_intent.payment_failed" and booking_id:
        message = obj.get("last_error") or (obj.get("last_payment_error") or {}).get("message", "")
        handle_payment_failure(intent_id, int(booking_id), message)
    else:
        logger.info("Unhandled payment event %s", event_type)
        _record(None, PaymentTransaction.Event.WEBHOOK, intent_id, {"type": event_type}, status="ignored")
