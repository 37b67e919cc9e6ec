"""URL routing for booking messages."""

from __future__ import annotations

from django.urls import include, path  # type: ignore
from rest_framework.routers import DefaultRouter  # type: ignore

from .views import MessageViewSet

router = DefaultRouter()
router.register(r"", MessageViewSet, basename="message")

urlpatterns = [
    path("", include(router.urls)),
]
