"""URL routing for destination calendars."""

from __future__ import annotations

from django.urls import include, path  # type: ignore
from rest_framework.routers import DefaultRouter  # type: ignore

from .views import AvailabilityViewSet, DestinationAvailabilityViewSet

router = DefaultRouter()
router.register(r"", AvailabilityViewSet, basename="availability")

destination_calendar = DestinationAvailabilityViewSet.as_view({"get": "list"})
destination_bulk_slots = DestinationAvailabilityViewSet.as_view({"post": "bulk_slots", "put": "bulk_slots"})
destination_bulk_block = DestinationAvailabilityViewSet.as_view({"post": "bulk_block", "put": "bulk_block"})

urlpatterns = [
    path(
        "destination/<int:destination_id>/",
        destination_calendar,
        name="destination-calendar",
    ),
    path(
        "destination/<int:destination_id>/bulk/",
        destination_bulk_slots,
        name="destination-calendar-bulk-slots",
    ),
    path(
        "destination/<int:destination_id>/block/",
        destination_bulk_block,
        name="destination-calendar-bulk-block",
    ),
    path("", include(router.urls)),
]
