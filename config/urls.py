"""URL configuration for the Triply project.

The `urlpatterns` list routes URLs to views. It includes both Django admin
and application‑level routers provided by Django Rest Framework and each app.
"""
from django.contrib import admin  # type: ignore
from django.urls import path, include  # type: ignore
from drf_spectacular.views import SpectacularAPIView, SpectacularSwaggerView  # type: ignore

# API versioning. v1 is our initial version; future versions can be added here.

urlpatterns = [
    path('admin/', admin.site.urls),
    # Application URLs
    path('api/v1/auth/', include(('apps.users.auth_urls', 'auth'), namespace='auth')),
    path('api/v1/users/', include('apps.users.urls')),
    path('api/v1/destinations/', include('apps.destinations.urls')),
    path('api/v1/availability/', include('apps.availability.urls')),
    path('api/v1/bookings/', include('apps.bookings.urls')),
    path('api/v1/payments/', include('apps.payments.urls')),
    path('api/v1/affiliates/', include('apps.affiliates.urls')),
    path('api/v1/activities/', include('apps.activities.urls')),
    path('api/v1/merchant/', include('apps.activities.merchant_urls')),
    path('api/v1/messages/', include('apps.messaging.urls')),
    path('api/v1/translations/', include('apps.translations.urls')),
    path('api/v1/invitations/', include('apps.invitations.urls')),
    path('api/v1/notifications/', include('apps.notifications.urls')),
    # Admin dashboard API
    path('api/v1/admin/', include('apps.reports.urls')),
    # API schema
    path('api/schema/', SpectacularAPIView.as_view(), name='schema'),
    path('api/docs/', SpectacularSwaggerView.as_view(url_name='schema'), name='swagger-ui'),
]
