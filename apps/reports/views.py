"""Admin dashboard reports.

Every endpoint is read-only and restricted to administrators. Periods are
``week``, ``month`` (default) or ``year``.
"""

from __future__ import annotations

from rest_framework.response import Response  # type: ignore
from rest_framework.views import APIView  # type: ignore

from apps.bookings.models import Booking
from apps.bookings.serializers import BookingSerializer
from apps.users.permissions import IsAdmin

from . import services


def _limit(request, default: int, maximum: int) -> int:
    try:
        value = int(request.query_params.get("limit", default))
    except (TypeError, ValueError):
        value = default
    return max(1, min(value, maximum))


def _period(request) -> str:
    period = request.query_params.get("period", "month")
    return period if period in services.PERIODS else "month"


class DashboardStatsView(APIView):
    """Booking counts per status, users, affiliates, commissions and revenue."""

    permission_classes = [IsAdmin]

    def get(self, request, format=None):  # type: ignore
        return Response(services.dashboard_stats())


class RecentBookingsView(APIView):
    permission_classes = [IsAdmin]

    def get(self, request, format=None):  # type: ignore
        bookings = Booking.objects.select_related("user", "destination").order_by("-created_at")
        limit = _limit(request, 10, 50)
        return Response(BookingSerializer(bookings[:limit], many=True).data)


class RevenueView(APIView):
    permission_classes = [IsAdmin]

    def get(self, request, format=None):  # type: ignore
        return Response(services.revenue_report(_period(request)))


class PopularDestinationsView(APIView):
    permission_classes = [IsAdmin]

    def get(self, request, format=None):  # type: ignore
        return Response(services.popular_destinations(_limit(request, 10, 20)))


class UserGrowthView(APIView):
    permission_classes = [IsAdmin]

    def get(self, request, format=None):  # type: ignore
        return Response(services.user_growth(_period(request)))
