"""URL routing for invitations."""

from __future__ import annotations

from django.urls import include, path  # type: ignore
from rest_framework.routers import DefaultRouter  # type: ignore

from .views import InvitationViewSet

router = DefaultRouter()
router.register(r"", InvitationViewSet, basename="invitation")

urlpatterns = [
    path("", include(router.urls)),
]
