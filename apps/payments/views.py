"""Payment endpoints: intent creation, client confirmation and the provider webhook."""

from __future__ import annotations

import logging

from django.shortcuts import get_object_or_404  # type: ignore
from rest_framework import permissions  # type: ignore
from rest_framework.exceptions import NotFound  # type: ignore
from rest_framework.response import Response  # type: ignore
from rest_framework.views import APIView  # type: ignore

from apps.bookings.models import Booking
from apps.bookings.serializers import BookingSerializer
from apps.users.permissions import is_admin_user
from config.exceptions import BadRequest

from . import services
from .gateways import GatewayError, InvalidSignature, get_gateway
from .serializers import ConfirmPaymentSerializer, CreateIntentSerializer, PaymentTransactionSerializer

logger = logging.getLogger(__name__)


class CreatePaymentIntentView(APIView):
    """Issue a fresh payment intent for a booking still awaiting its deposit."""

    permission_classes = [permissions.IsAuthenticated]

    def post(self, request):
        serializer = CreateIntentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        booking = get_object_or_404(Booking, pk=serializer.validated_data["booking_id"], user=request.user)
        try:
            payment = services.create_intent_for_booking(booking)
        except services.PaymentError as exc:
            raise BadRequest(str(exc)) from exc
        return Response(payment)


class ConfirmPaymentView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def post(self, request):
        serializer = ConfirmPaymentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        booking = get_object_or_404(Booking, pk=serializer.validated_data["booking_id"], user=request.user)
        try:
            booking = services.confirm_payment(booking, serializer.validated_data["payment_intent_id"])
        except services.PaymentError as exc:
            raise BadRequest(str(exc)) from exc
        return Response(
            {
                "message": "Deposit payment confirmed.",
                "booking": BookingSerializer(booking).data,
            }
        )


class PaymentWebhookView(APIView):
    """Provider callback. Authenticated by the signature header only."""

    authentication_classes: list = []
    permission_classes = [permissions.AllowAny]

    def post(self, request):
        signature = request.META.get("HTTP_STRIPE_SIGNATURE", "")
        if not signature:
            raise BadRequest("Missing signature.")
        try:
            event = get_gateway().verify_webhook(request.body, signature)
        except InvalidSignature as exc:
            logger.warning("Rejected payment webhook: %s", exc)
            raise BadRequest(str(exc)) from exc
        except GatewayError as exc:
            logger.error("Payment webhook could not be verified: %s", exc)
            raise BadRequest(str(exc)) from exc

        try:
            services.handle_webhook_event(event)
        except services.PaymentError:
            logger.exception("Payment webhook %s could not be applied", event.get("type"))
        return Response({"received": True})


class BookingPaymentView(APIView):
    """Deposit state and provider history of one booking."""

    permission_classes = [permissions.IsAuthenticated]

    def get(self, request, booking_id: int):
        booking = get_object_or_404(Booking, pk=booking_id)
        if booking.user_id != request.user.id and not is_admin_user(request.user):
            raise NotFound()
        return Response(
            {
                "booking_reference": booking.booking_reference,
                "deposit_amount": booking.deposit_amount,
                "total_amount": booking.total_amount,
                "currency": booking.deposit_currency,
                "payment_status": booking.deposit_payment_status,
                "payment_method": booking.deposit_payment_method,
                "transaction_id": booking.deposit_transaction_id,
                "paid_at": booking.deposit_paid_at,
                "transactions": PaymentTransactionSerializer(booking.transactions.all(), many=True).data,
            }
        )
