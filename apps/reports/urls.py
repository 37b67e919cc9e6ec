"""URL routing for admin dashboard reports."""

from django.urls import path  # type: ignore

from .views import (
    DashboardStatsView,
    PopularDestinationsView,
    RecentBookingsView,
    RevenueView,
    UserGrowthView,
)


urlpatterns = [
    # Mounted under 'admin/' in config.urls
    path('stats/', DashboardStatsView.as_view(), name='admin-stats'),
    path('recent-bookings/', RecentBookingsView.as_view(), name='admin-recent-bookings'),
    path('revenue/', RevenueView.as_view(), name='admin-revenue'),
    path('popular-destinations/', PopularDestinationsView.as_view(), name='admin-popular-destinations'),
    path('user-growth/', UserGrowthView.as_view(), name='admin-user-growth'),
]
