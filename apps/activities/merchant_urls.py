"""URL routing for merchant self-service endpoints."""

from __future__ import annotations

from django.urls import include, path  # type: ignore
from rest_framework.routers import DefaultRouter  # type: ignore

from .views import MerchantViewSet

router = DefaultRouter()
router.register(r"", MerchantViewSet, basename="merchant")

urlpatterns = [
    path("", include(router.urls)),
]
