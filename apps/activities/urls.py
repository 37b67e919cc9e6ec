"""URL routing for public and admin activity endpoints."""

from __future__ import annotations

from django.urls import include, path  # type: ignore
from rest_framework.routers import DefaultRouter  # type: ignore

from .views import ActivityBookingViewSet, ActivityViewSet, AdminActivityViewSet

router = DefaultRouter()
router.register(r"admin", AdminActivityViewSet, basename="admin-activity")
router.register(r"bookings", ActivityBookingViewSet, basename="activity-booking")
router.register(r"", ActivityViewSet, basename="activity")

urlpatterns = [
    path("", include(router.urls)),
]
