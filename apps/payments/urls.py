"""URL routing for deposit payments."""

from __future__ import annotations

from django.urls import path  # type: ignore

from .views import BookingPaymentView, ConfirmPaymentView, CreatePaymentIntentView, PaymentWebhookView

urlpatterns = [
    path("create-intent/", CreatePaymentIntentView.as_view(), name="payment-create-intent"),
    path("confirm/", ConfirmPaymentView.as_view(), name="payment-confirm"),
    path("webhook/", PaymentWebhookView.as_view(), name="payment-webhook"),
    path("booking/<int:booking_id>/", BookingPaymentView.as_view(), name="payment-booking"),
]
