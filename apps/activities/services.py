"""Activity booking, moderation and merchant calendar services."""

from __future__ import annotations

import logging
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Iterable

from django.conf import settings  # type: ignore
from django.db import transaction  # type: ignore
from django.db.models import Count, F, Q, Sum  # type: ignore
from django.utils import timezone  # type: ignore

from apps.availability.services import lock_queryset_if_possible

from .models import Activity, ActivityAvailability, ActivityBooking, ActivityInquiry

logger = logging.getLogger(__name__)

UNLIMITED_SLOTS = 999
CENT = Decimal("0.01")

# Searching for a country also matches activities listed under its cities.
LOCATION_ALIASES: dict[str, tuple[str, ...]] = {
    "uae": ("Dubai", "Abu Dhabi", "Sharjah", "Ajman", "Fujairah", "Ras Al Khaimah", "Umm Al Quwain"),
    "united arab emirates": (
        "Dubai",
        "Abu Dhabi",
        "Sharjah",
        "Ajman",
        "Fujairah",
        "Ras Al Khaimah",
        "Umm Al Quwain",
    ),
}


class ActivityError(Exception):
    """Raised when an activity operation violates a business rule."""


def location_query(location: str) -> Q:
    terms = (location, *LOCATION_ALIASES.get(location.strip().lower(), ()))
    query = Q()
    for term in terms:
        query |= Q(location__icontains=term)
    return query


def search_query(term: str) -> Q:
    return Q(title__icontains=term) | Q(description__icontains=term) | Q(location__icontains=term)


def split_amount(amount: Decimal) -> tuple[Decimal, Decimal]:
    """Return ``(platform_commission, merchant_amount)`` rounded to cents."""
    rate = Decimal(str(settings.PLATFORM_COMMISSION_RATE))
    commission = (amount * rate).quantize(CENT, rounding=ROUND_HALF_UP)
    merchant = (amount * (Decimal("1") - rate)).quantize(CENT, rounding=ROUND_HALF_UP)
    return commission, merchant


# ----------------------------------------------------------------------------
# Booking
# ----------------------------------------------------------------------------

def _day_for_booking(activity: Activity, day: date) -> ActivityAvailability:
    availability = lock_queryset_if_possible(
        ActivityAvailability.objects.filter(activity=activity, date=day)
    ).first()
    if availability is None:
        availability = ActivityAvailability.objects.create(
            activity=activity,
            date=day,
            available_slots=UNLIMITED_SLOTS,
        )
    return availability


@transaction.atomic
def book_activity(
    activity: Activity,
    user,
    *,
    selected_date: date,
    number_of_participants: int,
    customer_name: str = "",
    customer_email: str = "",
    customer_phone: str = "",
    special_requests: str = "",
    linked_booking=None,
) -> ActivityBooking:
    """Reserve slots on a day of an approved activity.

    Days without a calendar row are opened with unlimited capacity. The
    price per participant is the day's price when set, else the activity's.
    """

    if activity.status != Activity.Status.APPROVED:
        raise ActivityError("Activity not found or not available.")
    if selected_date < timezone.localdate():
        raise ActivityError("Cannot book activities in the past.")

    availability = _day_for_booking(activity, selected_date)
    if not availability.is_available:
        raise ActivityError("This date is not available for booking.")
    remaining = availability.remaining_slots
    if number_of_participants > remaining:
        raise ActivityError(
            f"Only {remaining} slot(s) available. You requested {number_of_participants}."
        )

    unit_price = availability.price if availability.price is not None else activity.price
    amount = (unit_price * number_of_participants).quantize(CENT)
    commission, merchant_amount = split_amount(amount)

    booking = ActivityBooking.objects.create(
        activity=activity,
        availability=availability,
        user=user,
        selected_date=selected_date,
        number_of_participants=number_of_participants,
        customer_name=customer_name or user.full_name,
        customer_email=customer_email or user.email,
        customer_phone=customer_phone or user.phone_number,
        special_requests=special_requests,
        amount=amount,
        currency=activity.currency,
        platform_commission=commission,
        merchant_amount=merchant_amount,
        linked_booking=linked_booking,
        is_add_on=linked_booking is not None,
    )
    ActivityAvailability.objects.filter(pk=availability.pk).update(
        booked_slots=F("booked_slots") + number_of_participants
    )
    logger.info(
        "Activity booking %s created for activity %s (%s participants)",
        booking.booking_reference,
        activity.pk,
        number_of_participants,
    )
    return booking


def mark_add_ons_paid(booking, transaction_id: str = "") -> int:
    """Mark add-on activity bookings of a paid destination booking as paid."""
    return ActivityBooking.objects.filter(
        linked_booking=booking,
        payment_status=ActivityBooking.PaymentStatus.PENDING,
    ).update(
        status=ActivityBooking.Status.PAYMENT_COMPLETED,
        payment_status=ActivityBooking.PaymentStatus.COMPLETED,
        transaction_id=transaction_id,
        paid_at=timezone.now(),
        updated_at=timezone.now(),
    )


def submit_inquiry(activity: Activity, **data: Any) -> ActivityInquiry:
    if activity.status != Activity.Status.APPROVED:
        raise ActivityError("Activity not found or not available.")
    inquiry = ActivityInquiry.objects.create(activity=activity, **data)

    from apps.notifications.services import send_activity_inquiry_emails

    try:
        send_activity_inquiry_emails(activity, inquiry)
    except Exception:
        logger.exception("Inquiry emails failed for inquiry %s", inquiry.pk)
    return inquiry


# ----------------------------------------------------------------------------
# Merchants
# ----------------------------------------------------------------------------

def register_merchant(user) -> None:
    if user.is_merchant():
        raise ActivityError("You are already registered as a merchant.")
    if user.is_admin():
        raise ActivityError("Admins cannot register as merchants.")
    user.role = user.RoleChoices.MERCHANT
    user.save(update_fields=["role", "updated_at"])
    logger.info("User %s registered as merchant", user.pk)


@transaction.atomic
def block_dates(activity: Activity, dates: Iterable[date], is_blocked: bool) -> int:
    count = 0
    for day in set(dates):
        availability, _ = ActivityAvailability.objects.get_or_create(
            activity=activity,
            date=day,
            defaults={"available_slots": UNLIMITED_SLOTS},
        )
        availability.is_available = not is_blocked
        availability.save(update_fields=["is_available", "updated_at"])
        count += 1
    return count


@transaction.atomic
def set_slots(activity: Activity, dates: Iterable[date], total_slots: int) -> int:
    count = 0
    for day in set(dates):
        availability, created = ActivityAvailability.objects.get_or_create(
            activity=activity,
            date=day,
            defaults={"available_slots": total_slots},
        )
        if not created:
            availability.available_slots = total_slots
            availability.save(update_fields=["available_slots", "updated_at"])
        count += 1
    return count


def merchant_dashboard(merchant) -> dict[str, Any]:
    activities = Activity.objects.filter(merchant=merchant)
    paid = ActivityBooking.objects.filter(
        activity__merchant=merchant,
        payment_status=ActivityBooking.PaymentStatus.COMPLETED,
    )
    totals = paid.aggregate(
        total_earnings=Sum("merchant_amount"),
        pending_payouts=Sum(
            "merchant_amount",
            filter=Q(merchant_payout_status=ActivityBooking.PayoutStatus.PENDING),
        ),
        paid_out=Sum("merchant_amount", filter=Q(merchant_payout_status=ActivityBooking.PayoutStatus.PAID)),
        total_bookings=Count("id"),
        completed_bookings=Count(
            "id",
            filter=Q(status__in=[ActivityBooking.Status.PAYMENT_COMPLETED, ActivityBooking.Status.CONFIRMED]),
        ),
    )
    per_activity = {
        row["activity"]: row
        for row in paid.values("activity").annotate(bookings_count=Count("id"), revenue=Sum("merchant_amount"))
    }
    zero = Decimal("0.00")
    return {
        "stats": {
            "total_earnings": totals["total_earnings"] or zero,
            "pending_payouts": totals["pending_payouts"] or zero,
            "paid_out": totals["paid_out"] or zero,
            "total_bookings": totals["total_bookings"],
            "completed_bookings": totals["completed_bookings"],
            "total_activities": activities.count(),
            "approved_activities": activities.filter(status=Activity.Status.APPROVED).count(),
        },
        "activities": [
            {
                "id": activity.id,
                "title": activity.title,
                "status": activity.status,
                "bookings_count": per_activity.get(activity.id, {}).get("bookings_count", 0),
                "revenue": per_activity.get(activity.id, {}).get("revenue") or zero,
            }
            for activity in activities
        ],
    }


# ----------------------------------------------------------------------------
# Moderation
# ----------------------------------------------------------------------------

def approve_activity(activity: Activity) -> Activity:
    if activity.status != Activity.Status.PENDING:
        raise ActivityError("Activity is not pending approval.")
    activity.status = Activity.Status.APPROVED
    activity.rejection_reason = ""
    activity.save(update_fields=["status", "rejection_reason", "updated_at"])
    logger.info("Activity %s approved", activity.pk)
    return activity


def reject_activity(activity: Activity, reason: str) -> Activity:
    if activity.status != Activity.Status.PENDING:
        raise ActivityError("Activity is not pending approval.")
    activity.status = Activity.Status.REJECTED
    activity.rejection_reason = reason
    activity.save(update_fields=["status", "rejection_reason", "updated_at"])
    logger.info("Activity %s rejected", activity.pk)
    return activity
