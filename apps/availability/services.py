"""Calendar services shared by destination availability and booking flows."""

from __future__ import annotations

import calendar
import logging
from datetime import date, timedelta
from decimal import Decimal
from typing import Iterable, Iterator

from django.db import transaction  # type: ignore
from django.db.models import F  # type: ignore
from django.db.utils import NotSupportedError  # type: ignore
from django.utils import timezone  # type: ignore

from .models import Availability

logger = logging.getLogger(__name__)

BLOCK_DEFAULT_SLOTS = 999


class AvailabilityError(Exception):
    """Raised when a calendar operation cannot be applied."""


def lock_queryset_if_possible(queryset):
    """Apply select_for_update when inside transaction.atomic()."""

    if not transaction.get_connection().in_atomic_block:
        return queryset

    try:
        return queryset.select_for_update()
    except NotSupportedError:
        return queryset


def date_range(start: date, end: date) -> Iterator[date]:
    """Every day from ``start`` to ``end`` inclusive."""
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


def add_months(value: date, months: int) -> date:
    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def default_window(start: date | None = None, end: date | None = None) -> tuple[date, date]:
    """Missing bounds default to today and six months from the start."""
    start = start or timezone.localdate()
    end = end or add_months(start, 6)
    return start, end


def calendar_for(destination, start: date | None = None, end: date | None = None):
    start, end = default_window(start, end)
    return Availability.objects.filter(destination=destination, date__gte=start, date__lte=end).order_by("date")


@transaction.atomic
def upsert_day(
    destination,
    day: date,
    *,
    available_slots: int,
    price_override: Decimal | None = None,
) -> Availability:
    availability, _ = Availability.objects.update_or_create(
        destination=destination,
        date=day,
        defaults={"available_slots": available_slots, "price_override": price_override},
    )
    return availability


@transaction.atomic
def bulk_update_range(
    destination,
    start: date,
    end: date,
    *,
    available_slots: int,
    is_blocked: bool = False,
    block_reason: str = "",
    price_override: Decimal | None = None,
) -> int:
    if start > end:
        raise AvailabilityError("Start date must be before end date.")

    count = 0
    for day in date_range(start, end):
        Availability.objects.update_or_create(
            destination=destination,
            date=day,
            defaults={
                "available_slots": available_slots,
                "is_blocked": is_blocked,
                "block_reason": block_reason if is_blocked else "",
                "price_override": price_override,
            },
        )
        count += 1
    logger.info("Availability updated for %s days of destination %s", count, destination.pk)
    return count


@transaction.atomic
def bulk_set_slots(destination, days: Iterable[date], total_slots: int) -> int:
    count = 0
    for day in set(days):
        availability, created = Availability.objects.get_or_create(
            destination=destination,
            date=day,
            defaults={"available_slots": total_slots},
        )
        if not created:
            availability.available_slots = total_slots
            availability.save(update_fields=["available_slots", "updated_at"])
        count += 1
    return count


@transaction.atomic
def bulk_block(destination, days: Iterable[date], is_blocked: bool, reason: str = "") -> int:
    count = 0
    for day in set(days):
        availability, _ = Availability.objects.get_or_create(
            destination=destination,
            date=day,
            defaults={"available_slots": BLOCK_DEFAULT_SLOTS},
        )
        availability.is_blocked = is_blocked
        availability.block_reason = reason if is_blocked else ""
        availability.save(update_fields=["is_blocked", "block_reason", "updated_at"])
        count += 1
    return count


def unavailable_days(destination, start: date, end: date) -> list[date]:
    """Days in the range that are blocked or fully booked.

    Days without a calendar row are considered open.
    """

    rows = lock_queryset_if_possible(
        Availability.objects.filter(destination=destination, date__gte=start, date__lte=end)
    )
    return [row.date for row in rows if not row.is_available]


def missing_or_unavailable_days(destination, start: date, end: date) -> list[date]:
    """Strict variant: every day in the range must have an open calendar row."""

    rows = {
        row.date: row
        for row in lock_queryset_if_possible(
            Availability.objects.filter(destination=destination, date__gte=start, date__lte=end)
        )
    }
    return [day for day in date_range(start, end) if day not in rows or not rows[day].is_available]


@transaction.atomic
def reserve_range(destination, start: date, end: date, travellers: int = 1) -> int:
    """Count the travellers against every calendar day of the range."""

    updated = Availability.objects.filter(
        destination=destination,
        date__gte=start,
        date__lte=end,
    ).update(booked_slots=F("booked_slots") + travellers)
    logger.info("Reserved %s slot(s) on %s day(s) for destination %s", travellers, updated, destination.pk)
    return updated
