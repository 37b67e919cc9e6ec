"""API views for the booking domain."""

from __future__ import annotations

import logging

from django.shortcuts import get_object_or_404  # type: ignore
from django_filters.rest_framework import DjangoFilterBackend  # type: ignore
from rest_framework import mixins, permissions, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.exceptions import APIException, NotFound  # type: ignore
from rest_framework.response import Response  # type: ignore

from apps.destinations.models import Destination
from apps.users.permissions import IsAdmin, is_admin_user
from config.exceptions import BadRequest

from . import services
from .filters import BookingFilterSet
from .models import Booking
from .serializers import (
    AdminBookingSerializer,
    AdminNotesSerializer,
    BookingCreateSerializer,
    BookingSerializer,
    CancelSerializer,
    DateRangeSerializer,
    RejectSerializer,
)

logger = logging.getLogger(__name__)


def _api_error(exc: services.BookingError) -> APIException:
    if isinstance(exc, services.BookingNotFound):
        return NotFound(str(exc))
    return BadRequest(str(exc))


class IsBookingOwnerOrAdmin(permissions.BasePermission):
    """Travellers reach their own bookings, administrators reach all of them."""

    def has_object_permission(self, request, view, obj: Booking):  # type: ignore
        return obj.user_id == request.user.id or is_admin_user(request.user)


class BookingViewSet(mixins.RetrieveModelMixin, viewsets.GenericViewSet):
    """Traveller side of the booking workflow."""

    queryset = Booking.objects.select_related("destination", "user").prefetch_related(
        "activity_bookings__activity"
    )
    serializer_class = BookingSerializer
    permission_classes = [permissions.IsAuthenticated, IsBookingOwnerOrAdmin]

    def get_queryset(self):  # type: ignore
        qs = super().get_queryset()
        if is_admin_user(self.request.user):
            return qs
        return qs.filter(user=self.request.user)

    def create(self, request, *args, **kwargs):  # type: ignore
        serializer = BookingCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        destination = Destination.objects.filter(pk=data["destination_id"]).first()
        if destination is None:
            raise NotFound("Destination not found or not available.")
        try:
            booking, payment = services.create_booking(
                request.user,
                destination,
                number_of_travellers=data["number_of_travellers"],
                special_requests=data["special_requests"],
                affiliate_code=data["affiliate_code"],
                activities=data.get("activities"),
            )
        except services.BookingError as exc:
            raise _api_error(exc) from exc
        return Response(
            {
                "booking": BookingSerializer(booking, context=self.get_serializer_context()).data,
                "payment": payment,
            },
            status=status.HTTP_201_CREATED,
        )

    @action(detail=False, methods=["get"], url_path="my-bookings")
    def my_bookings(self, request):
        qs = Booking.objects.filter(user=request.user).select_related("destination", "user")
        status_filter = request.query_params.get("status")
        if status_filter:
            qs = qs.filter(status=status_filter)
        page = self.paginate_queryset(qs)
        if page is not None:
            return self.get_paginated_response(BookingSerializer(page, many=True).data)
        return Response(BookingSerializer(qs, many=True).data)

    @action(detail=True, methods=["put", "post"], url_path="select-dates")
    def select_dates(self, request, pk=None):
        booking = get_object_or_404(Booking, pk=pk, user=request.user)
        serializer = DateRangeSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        try:
            booking = services.select_dates(
                booking,
                start_date=data["start_date"],
                end_date=data["end_date"],
                is_flexible=data["is_flexible"],
            )
        except services.BookingError as exc:
            raise _api_error(exc) from exc
        return Response(BookingSerializer(booking).data)

    @action(detail=True, methods=["put", "post"])
    def cancel(self, request, pk=None):
        booking = get_object_or_404(Booking, pk=pk, user=request.user)
        serializer = CancelSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            booking = services.cancel_booking(booking, serializer.validated_data["reason"])
        except services.BookingError as exc:
            raise _api_error(exc) from exc
        return Response(
            {
                "booking_reference": booking.booking_reference,
                "status": booking.status,
                "deposit_payment_status": booking.deposit_payment_status,
            }
        )


class AdminBookingViewSet(viewsets.ReadOnlyModelViewSet):
    """Administrator review of bookings."""

    queryset = Booking.objects.select_related("destination", "user").prefetch_related(
        "activity_bookings__activity"
    )
    serializer_class = AdminBookingSerializer
    permission_classes = [IsAdmin]
    filter_backends = [DjangoFilterBackend]
    filterset_class = BookingFilterSet

    @action(detail=True, methods=["put", "post"])
    def confirm(self, request, pk=None):
        booking = self.get_object()
        try:
            booking = services.confirm_booking(booking)
        except services.BookingError as exc:
            raise _api_error(exc) from exc
        return Response(AdminBookingSerializer(booking).data)

    @action(detail=True, methods=["put", "post"])
    def reject(self, request, pk=None):
        booking = self.get_object()
        serializer = RejectSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            booking = services.reject_booking(booking, serializer.validated_data["reason"])
        except services.BookingError as exc:
            raise _api_error(exc) from exc
        return Response(AdminBookingSerializer(booking).data)

    @action(detail=True, methods=["put", "patch"], url_path="update-dates")
    def update_dates(self, request, pk=None):
        booking = self.get_object()
        serializer = DateRangeSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        try:
            booking = services.update_dates(
                booking,
                start_date=data["start_date"],
                end_date=data["end_date"],
                is_flexible=data["is_flexible"],
            )
        except services.BookingError as exc:
            raise _api_error(exc) from exc
        return Response(AdminBookingSerializer(booking).data)

    @action(detail=True, methods=["put", "patch"])
    def notes(self, request, pk=None):
        booking = self.get_object()
        serializer = AdminNotesSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        services.set_admin_notes(booking, serializer.validated_data["admin_notes"])
        return Response({"booking_reference": booking.booking_reference, "admin_notes": booking.admin_notes})

    @action(detail=False, methods=["get"])
    def export(self, request):
        rows = services.bookings_report(self.filter_queryset(self.get_queryset()))
        return Response({"count": len(rows), "results": rows})
