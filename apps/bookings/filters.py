"""FilterSet definitions for the administrator booking list."""

from __future__ import annotations

import django_filters  # type: ignore

from .models import Booking


class BookingFilterSet(django_filters.FilterSet):
    status = django_filters.ChoiceFilter(choices=Booking.Status.choices)
    destination = django_filters.NumberFilter(field_name="destination_id")
    user = django_filters.NumberFilter(field_name="user_id")
    date_from = django_filters.DateFilter(field_name="created_at", lookup_expr="date__gte")
    date_to = django_filters.DateFilter(field_name="created_at", lookup_expr="date__lte")
    affiliate_code = django_filters.CharFilter(method="filter_affiliate_code")

    class Meta:
        model = Booking
        fields = ["status", "destination", "user", "affiliate_code"]

    def filter_affiliate_code(self, queryset, name, value):  # type: ignore
        if not value:
            return queryset
        return queryset.filter(affiliate_code=value.strip().upper())
