"""URL routing for the destination catalogue."""

from __future__ import annotations

from django.urls import include, path  # type: ignore
from rest_framework.routers import DefaultRouter  # type: ignore

from .views import DestinationViewSet

router = DefaultRouter()
router.register(r"", DestinationViewSet, basename="destination")

urlpatterns = [
    path("", include(router.urls)),
]
