"""URL routing for the affiliate domain."""

from __future__ import annotations

from django.urls import include, path  # type: ignore
from rest_framework.routers import DefaultRouter  # type: ignore

from .views import AdminAffiliateViewSet, AdminCommissionViewSet, AdminWithdrawalViewSet, AffiliateViewSet

router = DefaultRouter()
router.register(r"admin/commissions", AdminCommissionViewSet, basename="admin-commission")
router.register(r"admin/withdrawals", AdminWithdrawalViewSet, basename="admin-withdrawal")
router.register(r"admin", AdminAffiliateViewSet, basename="admin-affiliate")
router.register(r"", AffiliateViewSet, basename="affiliate")

urlpatterns = [
    path("", include(router.urls)),
]
