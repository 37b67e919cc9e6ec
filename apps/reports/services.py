"""Aggregations behind the admin dashboard."""

from __future__ import annotations

from datetime import date, timedelta
from decimal import Decimal
from typing import Any

from django.contrib.auth import get_user_model  # type: ignore
from django.db.models import Count, Q, Sum  # type: ignore
from django.db.models.functions import TruncDate, TruncMonth  # type: ignore
from django.utils import timezone  # type: ignore

from apps.affiliates.models import Commission
from apps.availability.services import add_months
from apps.bookings.models import Booking

PERIODS = ("week", "month", "year")
POPULAR_STATUSES = (
    Booking.Status.DEPOSIT_PAID,
    Booking.Status.DATES_SELECTED,
    Booking.Status.CONFIRMED,
)
ZERO = Decimal("0.00")


def period_start(period: str, today: date | None = None) -> date:
    """First day covered by ``period``; unknown periods count as a month."""
    today = today or timezone.localdate()
    if period == "week":
        return today - timedelta(days=7)
    if period == "year":
        return add_months(today, -12)
    return add_months(today, -1)


def _bucket(period: str):
    return TruncMonth if period == "year" else TruncDate


def _label(value, period: str) -> str:
    return value.strftime("%Y-%m") if period == "year" else value.strftime("%Y-%m-%d")


def dashboard_stats() -> dict[str, Any]:
    User = get_user_model()
    status_counts = dict(Booking.objects.order_by().values_list("status").annotate(count=Count("id")))
    total_bookings = sum(status_counts.values())

    commissions = Commission.objects.aggregate(
        pending=Sum(
            "commission_amount",
            filter=Q(status__in=[Commission.Status.PENDING, Commission.Status.APPROVED]),
        ),
        paid=Sum("commission_amount", filter=Q(status=Commission.Status.PAID)),
    )
    pending = commissions["pending"] or ZERO
    paid = commissions["paid"] or ZERO
    revenue = (
        Booking.objects.filter(deposit_payment_status=Booking.PaymentStatus.COMPLETED).aggregate(
            total=Sum("deposit_amount")
        )["total"]
        or ZERO
    )

    return {
        "overview": {
            "total_bookings": total_bookings,
            "total_revenue": revenue,
            "total_users": User.objects.filter(role=User.RoleChoices.USER).count(),
            "total_affiliates": User.objects.filter(role=User.RoleChoices.AFFILIATE).count(),
        },
        "bookings": {
            "total": total_bookings,
            **{choice: status_counts.get(choice, 0) for choice in Booking.Status.values},
        },
        "commissions": {
            "pending": pending,
            "paid": paid,
            "total": pending + paid,
        },
    }


def revenue_report(period: str) -> dict[str, Any]:
    start = period_start(period)
    rows = (
        Booking.objects.filter(
            deposit_payment_status=Booking.PaymentStatus.COMPLETED,
            deposit_paid_at__date__gte=start,
        )
        .annotate(bucket=_bucket(period)("deposit_paid_at"))
        .values("bucket")
        .annotate(revenue=Sum("deposit_amount"), count=Count("id"))
        .order_by("bucket")
    )
    data = [{"date": _label(row["bucket"], period), "revenue": row["revenue"], "count": row["count"]} for row in rows]
    total = sum((row["revenue"] for row in data), ZERO)
    count = sum(row["count"] for row in data)
    return {
        "period": period,
        "data": data,
        "summary": {
            "total_revenue": total,
            "total_bookings": count,
            "average_per_booking": (total / count).quantize(Decimal("0.01")) if count else ZERO,
        },
    }


def popular_destinations(limit: int) -> list[dict[str, Any]]:
    rows = (
        Booking.objects.filter(status__in=POPULAR_STATUSES)
        .values(
            "destination_id",
            "destination__name",
            "destination__thumbnail_image",
            "destination__country",
        )
        .annotate(booking_count=Count("id"), revenue=Sum("deposit_amount"))
        .order_by("-booking_count", "destination_id")[:limit]
    )
    return [
        {
            "destination_id": row["destination_id"],
            "name": row["destination__name"],
            "thumbnail_image": row["destination__thumbnail_image"],
            "country": row["destination__country"],
            "booking_count": row["booking_count"],
            "revenue": row["revenue"] or ZERO,
        }
        for row in rows
    ]


def user_growth(period: str) -> dict[str, Any]:
    User = get_user_model()
    rows = (
        User.objects.filter(created_at__date__gte=period_start(period))
        .annotate(bucket=_bucket(period)("created_at"))
        .values("bucket", "role")
        .annotate(count=Count("id"))
        .order_by("bucket", "role")
    )
    return {
        "period": period,
        "data": [{"date": _label(row["bucket"], period), "role": row["role"], "count": row["count"]} for row in rows],
    }
