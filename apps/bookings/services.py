"""Domain services for the deposit booking workflow.

Every transition runs in its own transaction. Emails are queued only after
the state change is stored, and a failed notification never undoes it.
"""

from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal
from typing import Any, Iterable

from django.conf import settings  # type: ignore
from django.db import transaction  # type: ignore

from apps.availability import services as availability_services
from apps.availability.services import lock_queryset_if_possible
from apps.notifications import tasks as notification_tasks

from .models import Booking

logger = logging.getLogger(__name__)

MINIMUM_CHARGE = Decimal("0.50")


class BookingError(Exception):
    """Raised when a booking operation violates the booking rules."""


class BookingNotFound(BookingError):
    pass


def _locked(booking: Booking) -> Booking:
    return lock_queryset_if_possible(Booking.objects.filter(pk=booking.pk)).select_related(
        "user", "destination"
    ).get()


def resolve_affiliate(code: str, user):
    """Return the active affiliate code a booking may cite."""

    from apps.affiliates.services import find_active_code

    affiliate_code = find_active_code(code)
    if affiliate_code is None:
        raise BookingError("Invalid affiliate code.")
    if affiliate_code.affiliate_id == user.pk:
        raise BookingError("You cannot use your own affiliate code.")
    return affiliate_code


def deposit_for(destination, user) -> Decimal:
    """Destination deposit minus the user's referral discount, never below zero."""
    deposit = destination.deposit_amount or Decimal(settings.DEFAULT_DEPOSIT_AMOUNT)
    discount = user.discount_amount or Decimal("0.00")
    return max(Decimal("0.00"), Decimal(deposit) - Decimal(discount))


@transaction.atomic
def create_booking(
    user,
    destination,
    *,
    number_of_travellers: int = 1,
    special_requests: str = "",
    affiliate_code: str = "",
    activities: Iterable[dict[str, Any]] | None = None,
) -> tuple[Booking, dict[str, Any]]:
    """Create a ``pending_deposit`` booking and its payment intent.

    Add-on activities are booked in the same transaction and their price is
    charged together with the deposit. Returns the booking and the payment
    intent details.
    """

    from apps.activities import services as activity_services
    from apps.activities.models import Activity
    from apps.payments import services as payment_services

    if not destination.is_active:
        raise BookingNotFound("Destination not found or not available.")

    affiliate = None
    if affiliate_code:
        affiliate = resolve_affiliate(affiliate_code, user).affiliate

    deposit = deposit_for(destination, user)
    if deposit < MINIMUM_CHARGE:
        raise BookingError(
            f"Deposit amount is too small after discount. Minimum amount is {MINIMUM_CHARGE} "
            f"{destination.currency or settings.DEFAULT_CURRENCY}."
        )

    booking = Booking.objects.create(
        user=user,
        destination=destination,
        number_of_travellers=number_of_travellers or 1,
        special_requests=special_requests or "",
        affiliate_code=(affiliate_code or "").upper(),
        affiliate=affiliate,
        deposit_amount=deposit,
        deposit_currency=destination.currency or settings.DEFAULT_CURRENCY,
        total_amount=deposit,
    )

    add_on_total = Decimal("0.00")
    for item in activities or ():
        activity = Activity.objects.filter(
            pk=item["activity_id"],
            status=Activity.Status.APPROVED,
        ).first()
        if activity is None:
            raise BookingNotFound(f"Activity {item['activity_id']} not found or not approved.")
        try:
            add_on = activity_services.book_activity(
                activity,
                user,
                selected_date=item["date"],
                number_of_participants=item.get("participants", 1),
                customer_name=item.get("customer_name", ""),
                customer_email=item.get("customer_email", ""),
                customer_phone=item.get("customer_phone", ""),
                special_requests=item.get("special_requests", ""),
                linked_booking=booking,
            )
        except activity_services.ActivityError as exc:
            raise BookingError(str(exc)) from exc
        add_on_total += add_on.amount

    if add_on_total:
        booking.total_amount = deposit + add_on_total
        booking.save(update_fields=["total_amount", "updated_at"])

    try:
        payment = payment_services.create_intent_for_booking(booking)
    except payment_services.PaymentError as exc:
        raise BookingError(str(exc)) from exc

    logger.info(
        "Booking %s created for user %s (deposit %s, add-ons %s)",
        booking.booking_reference,
        user.pk,
        deposit,
        add_on_total,
    )
    return booking, payment


def _check_range(start: date, end: date) -> None:
    if end < start:
        raise BookingError("End date must be on or after the start date.")


def select_dates(booking: Booking, start_date: date, end_date: date, is_flexible: bool = False) -> Booking:
    """Traveller picks travel dates while the calendar is unlocked.

    Days without a calendar row do not block the request. Blocked or fully
    booked days are only accepted for flexible requests, which the admin
    adjusts on confirmation.
    """

    _check_range(start_date, end_date)
    with transaction.atomic():
        booking = _locked(booking)
        if booking.status != Booking.Status.DEPOSIT_PAID:
            raise BookingError("Cannot select dates for this booking. Deposit must be paid first.")
        if booking.calendar_expired:
            raise BookingError("Calendar access has expired. Please contact support.")

        unavailable = availability_services.unavailable_days(booking.destination, start_date, end_date)
        if unavailable and not is_flexible:
            raise BookingError(
                f"Selected dates are not fully available ({len(unavailable)} unavailable day(s)). "
                "Please choose different dates or enable flexible dates."
            )
        if unavailable:
            logger.info(
                "Flexible dates with %s unavailable day(s) accepted for %s",
                len(unavailable),
                booking.booking_reference,
            )

        booking.start_date = start_date
        booking.end_date = end_date
        booking.is_flexible = is_flexible
        booking.status = Booking.Status.DATES_SELECTED
        booking.save(update_fields=["start_date", "end_date", "is_flexible", "status", "updated_at"])

    logger.info("Dates %s..%s selected for %s", start_date, end_date, booking.booking_reference)
    notification_tasks.dispatch(notification_tasks.notify_dates_selected, booking.pk)
    return booking


def cancel_booking(booking: Booking, reason: str = "") -> Booking:
    """Cancel on the traveller's request, refunding a paid deposit."""

    from apps.payments import services as payment_services

    with transaction.atomic():
        booking = _locked(booking)
        if not booking.is_cancellable:
            raise BookingError("This booking cannot be cancelled.")
        booking.status = Booking.Status.CANCELLED
        booking.cancellation_reason = reason or ""
        booking.save(update_fields=["status", "cancellation_reason", "updated_at"])

    if booking.deposit_payment_status == Booking.PaymentStatus.COMPLETED:
        try:
            payment_services.process_refund(booking)
        except payment_services.PaymentError:
            logger.exception("Refund failed for cancelled booking %s", booking.booking_reference)

    logger.info("Booking %s cancelled by user", booking.booking_reference)
    return booking


def confirm_booking(booking: Booking) -> Booking:
    with transaction.atomic():
        booking = _locked(booking)
        if booking.status != Booking.Status.DATES_SELECTED:
            raise BookingError("Booking must have dates selected before confirmation.")
        if booking.start_date and booking.end_date:
            availability_services.reserve_range(booking.destination, booking.start_date, booking.end_date)
        booking.status = Booking.Status.CONFIRMED
        booking.save(update_fields=["status", "updated_at"])

    logger.info("Booking %s confirmed", booking.booking_reference)
    notification_tasks.dispatch(notification_tasks.notify_booking_confirmed, booking.pk)
    return booking


def reject_booking(booking: Booking, reason: str = "") -> Booking:
    with transaction.atomic():
        booking = _locked(booking)
        if booking.status in (Booking.Status.CONFIRMED, Booking.Status.CANCELLED):
            raise BookingError("This booking cannot be rejected.")
        booking.status = Booking.Status.REJECTED
        booking.rejection_reason = reason or ""
        booking.save(update_fields=["status", "rejection_reason", "updated_at"])

    logger.info("Booking %s rejected", booking.booking_reference)
    notification_tasks.dispatch(notification_tasks.notify_booking_rejected, booking.pk, reason or "")
    return booking


def update_dates(booking: Booking, start_date: date, end_date: date, is_flexible: bool = False) -> Booking:
    """Administrator sets the travel dates; every day must be open."""

    _check_range(start_date, end_date)
    with transaction.atomic():
        booking = _locked(booking)
        if booking.status in Booking.FINAL_STATUSES or booking.status == Booking.Status.PENDING_DEPOSIT:
            raise BookingError("Dates cannot be changed for this booking.")
        missing = availability_services.missing_or_unavailable_days(booking.destination, start_date, end_date)
        if missing:
            raise BookingError("Selected dates are not fully available. Please choose different dates.")
        booking.start_date = start_date
        booking.end_date = end_date
        booking.is_flexible = is_flexible
        if booking.status == Booking.Status.DEPOSIT_PAID:
            booking.status = Booking.Status.DATES_SELECTED
        booking.save(update_fields=["start_date", "end_date", "is_flexible", "status", "updated_at"])

    logger.info("Dates of %s updated by admin to %s..%s", booking.booking_reference, start_date, end_date)
    notification_tasks.dispatch(notification_tasks.notify_user_dates_updated, booking.pk)
    return booking


def set_admin_notes(booking: Booking, notes: str) -> Booking:
    booking.admin_notes = notes
    booking.save(update_fields=["admin_notes", "updated_at"])
    return booking


def bookings_report(queryset) -> list[dict[str, Any]]:
    rows = []
    for booking in queryset.select_related("user", "destination"):
        rows.append(
            {
                "booking_reference": booking.booking_reference,
                "customer_name": booking.user.full_name,
                "customer_email": booking.user.email,
                "destination": booking.destination.name_en,
                "status": booking.status,
                "deposit_amount": booking.deposit_amount,
                "currency": booking.deposit_currency,
                "payment_status": booking.deposit_payment_status,
                "travel_start_date": booking.start_date,
                "travel_end_date": booking.end_date,
                "affiliate_code": booking.affiliate_code,
                "created_at": booking.created_at,
            }
        )
    return rows
