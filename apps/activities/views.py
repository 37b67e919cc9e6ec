"""Public, merchant and admin endpoints for activities."""

from __future__ import annotations

import logging
from datetime import timedelta

from django.shortcuts import get_object_or_404  # type: ignore
from django.utils import timezone  # type: ignore
from rest_framework import mixins, permissions, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore

from apps.users.permissions import IsAdmin, IsMerchant, is_admin_user
from config.exceptions import BadRequest

from . import services
from .models import Activity, ActivityBooking
from .serializers import (
    ActivityAvailabilitySerializer,
    ActivityBookingSerializer,
    ActivityBookRequestSerializer,
    ActivityCreateSerializer,
    ActivityInquirySerializer,
    ActivitySerializer,
    AvailabilityWindowSerializer,
    BlockDatesSerializer,
    MerchantActivitySerializer,
    RejectActivitySerializer,
    SlotsSerializer,
)

logger = logging.getLogger(__name__)

DEFAULT_WINDOW_DAYS = 90


def _bad_request(exc: Exception) -> BadRequest:
    return BadRequest(str(exc))


def _window(params) -> tuple:
    serializer = AvailabilityWindowSerializer(data=params)
    serializer.is_valid(raise_exception=True)
    start = serializer.validated_data.get("start_date") or timezone.localdate()
    end = serializer.validated_data.get("end_date") or start + timedelta(days=DEFAULT_WINDOW_DAYS)
    return start, end


class ActivityViewSet(viewsets.ReadOnlyModelViewSet):
    """Approved activities, open to everyone; booking requires a login."""

    serializer_class = ActivitySerializer

    def get_permissions(self):  # type: ignore
        if self.action == "book":
            return [permissions.IsAuthenticated()]
        return [permissions.AllowAny()]

    def get_queryset(self):  # type: ignore
        qs = Activity.objects.filter(status=Activity.Status.APPROVED).select_related("merchant")
        params = self.request.query_params
        if params.get("location"):
            qs = qs.filter(services.location_query(params["location"]))
        if params.get("search"):
            qs = qs.filter(services.search_query(params["search"]))
        return qs

    @action(detail=True, methods=["get"])
    def availability(self, request, pk=None):
        activity = self.get_object()
        start, end = _window(request.query_params)
        rows = activity.availability.filter(date__gte=start, date__lte=end)
        return Response(
            {
                "activity_id": activity.pk,
                "start_date": start,
                "end_date": end,
                "availability": ActivityAvailabilitySerializer(rows, many=True).data,
            }
        )

    @action(detail=True, methods=["post"])
    def inquire(self, request, pk=None):
        activity = self.get_object()
        serializer = ActivityInquirySerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        inquiry = services.submit_inquiry(activity, **serializer.validated_data)
        return Response(ActivityInquirySerializer(inquiry).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=["post"])
    def book(self, request, pk=None):
        activity = self.get_object()
        serializer = ActivityBookRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            booking = services.book_activity(activity, request.user, **serializer.validated_data)
        except services.ActivityError as exc:
            raise _bad_request(exc) from exc
        return Response(ActivityBookingSerializer(booking).data, status=status.HTTP_201_CREATED)


class ActivityBookingViewSet(mixins.RetrieveModelMixin, viewsets.GenericViewSet):
    serializer_class = ActivityBookingSerializer
    permission_classes = [permissions.IsAuthenticated]

    def get_queryset(self):  # type: ignore
        qs = ActivityBooking.objects.select_related("activity", "linked_booking")
        if is_admin_user(self.request.user):
            return qs
        return qs.filter(user=self.request.user)


class MerchantViewSet(viewsets.GenericViewSet):
    """Merchant self-service. Registration is open to any signed-in user."""

    queryset = Activity.objects.all()
    serializer_class = MerchantActivitySerializer

    def get_permissions(self):  # type: ignore
        if self.action == "register":
            return [permissions.IsAuthenticated()]
        return [IsMerchant()]

    def _own_activity(self, activity_id) -> Activity:
        return get_object_or_404(Activity, pk=activity_id, merchant=self.request.user)

    @action(detail=False, methods=["post"])
    def register(self, request):
        try:
            services.register_merchant(request.user)
        except services.ActivityError as exc:
            raise _bad_request(exc) from exc
        return Response({"role": request.user.role}, status=status.HTTP_201_CREATED)

    @action(detail=False, methods=["get", "post"])
    def activities(self, request):
        if request.method == "GET":
            qs = Activity.objects.filter(merchant=request.user)
            page = self.paginate_queryset(qs)
            if page is not None:
                return self.get_paginated_response(MerchantActivitySerializer(page, many=True).data)
            return Response(MerchantActivitySerializer(qs, many=True).data)

        serializer = ActivityCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        activity = serializer.save(merchant=request.user, status=Activity.Status.PENDING)
        logger.info("Activity %s submitted by merchant %s", activity.pk, request.user.pk)
        return Response(MerchantActivitySerializer(activity).data, status=status.HTTP_201_CREATED)

    @action(detail=False, methods=["get"])
    def dashboard(self, request):
        return Response(services.merchant_dashboard(request.user))

    @action(detail=False, methods=["get"])
    def bookings(self, request):
        qs = ActivityBooking.objects.filter(activity__merchant=request.user).select_related("activity")
        if request.query_params.get("status"):
            qs = qs.filter(status=request.query_params["status"])
        page = self.paginate_queryset(qs)
        if page is not None:
            return self.get_paginated_response(ActivityBookingSerializer(page, many=True).data)
        return Response(ActivityBookingSerializer(qs, many=True).data)

    @action(detail=False, methods=["get"], url_path=r"activities/(?P<activity_id>\d+)/availability")
    def availability(self, request, activity_id=None):
        activity = self._own_activity(activity_id)
        start, end = _window(request.query_params)
        rows = activity.availability.filter(date__gte=start, date__lte=end)
        return Response(ActivityAvailabilitySerializer(rows, many=True).data)

    @action(detail=False, methods=["put"], url_path=r"activities/(?P<activity_id>\d+)/availability/block")
    def block(self, request, activity_id=None):
        activity = self._own_activity(activity_id)
        serializer = BlockDatesSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        updated = services.block_dates(activity, **serializer.validated_data)
        return Response({"updated": updated})

    @action(detail=False, methods=["put"], url_path=r"activities/(?P<activity_id>\d+)/availability/slots")
    def slots(self, request, activity_id=None):
        activity = self._own_activity(activity_id)
        serializer = SlotsSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        updated = services.set_slots(activity, **serializer.validated_data)
        return Response({"updated": updated})


class AdminActivityViewSet(viewsets.ReadOnlyModelViewSet):
    """Moderation queue for submitted activities."""

    queryset = Activity.objects.select_related("merchant")
    serializer_class = MerchantActivitySerializer
    permission_classes = [IsAdmin]

    def get_queryset(self):  # type: ignore
        qs = super().get_queryset()
        if self.request.query_params.get("status"):
            qs = qs.filter(status=self.request.query_params["status"])
        return qs

    @action(detail=False, methods=["get"])
    def pending(self, request):
        qs = self.get_queryset().filter(status=Activity.Status.PENDING)
        page = self.paginate_queryset(qs)
        if page is not None:
            return self.get_paginated_response(self.get_serializer(page, many=True).data)
        return Response(self.get_serializer(qs, many=True).data)

    @action(detail=True, methods=["put", "post"])
    def approve(self, request, pk=None):
        activity = self.get_object()
        try:
            services.approve_activity(activity)
        except services.ActivityError as exc:
            raise _bad_request(exc) from exc
        return Response(self.get_serializer(activity).data)

    @action(detail=True, methods=["put", "post"])
    def reject(self, request, pk=None):
        activity = self.get_object()
        serializer = RejectActivitySerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            services.reject_activity(activity, serializer.validated_data["reason"])
        except services.ActivityError as exc:
            raise _bad_request(exc) from exc
        return Response(self.get_serializer(activity).data)
