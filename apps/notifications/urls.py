"""URL routing for the email audit log."""

from django.urls import include, path  # type: ignore
from rest_framework.routers import DefaultRouter  # type: ignore

from .views import EmailLogViewSet

router = DefaultRouter()
router.register(r"email-logs", EmailLogViewSet, basename="email-log")

urlpatterns = [path("", include(router.urls))]
