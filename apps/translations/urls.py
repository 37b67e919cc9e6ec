"""URL routing for translations."""

from __future__ import annotations

from django.urls import include, path  # type: ignore
from rest_framework.routers import DefaultRouter  # type: ignore

from .views import TranslationViewSet

router = DefaultRouter()
router.register(r"", TranslationViewSet, basename="translation")

urlpatterns = [
    path("", include(router.urls)),
]
