"""FilterSet definitions for the destination catalogue."""

from __future__ import annotations

import django_filters  # type: ignore
from django.db.models import Q  # type: ignore

from .models import Destination


class DestinationFilterSet(django_filters.FilterSet):
    country = django_filters.CharFilter(field_name="country", lookup_expr="iexact")
    region = django_filters.CharFilter(field_name="region", lookup_expr="iexact")
    search = django_filters.CharFilter(method="filter_search")

    class Meta:
        model = Destination
        fields = ["country", "region"]

    def filter_search(self, queryset, name, value):  # type: ignore
        if not value:
            return queryset
        return queryset.filter(
            Q(name__en__icontains=value)
            | Q(name__ar__icontains=value)
            | Q(description__en__icontains=value)
            | Q(country__icontains=value)
        )
