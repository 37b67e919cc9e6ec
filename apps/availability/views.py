"""Calendar endpoints: public reads per destination, admin writes."""

from __future__ import annotations

import logging

from django.shortcuts import get_object_or_404  # type: ignore
from rest_framework import permissions, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore

from apps.destinations.models import Destination
from apps.users.permissions import IsAdmin
from config.exceptions import BadRequest

from . import services
from .models import Availability
from .serializers import (
    AvailabilitySerializer,
    AvailabilityUpsertSerializer,
    BlockSerializer,
    BulkBlockSerializer,
    BulkSlotsSerializer,
    BulkUpdateSerializer,
    CalendarQuerySerializer,
)

logger = logging.getLogger(__name__)


class DestinationCalendarMixin:
    """Loads the destination named in the URL before the handler runs."""

    destination_lookup_url_kwarg = "destination_id"

    def initial(self, request, *args, **kwargs):  # type: ignore
        super().initial(request, *args, **kwargs)
        destination_id = kwargs.get(self.destination_lookup_url_kwarg)
        self.destination = get_object_or_404(Destination, pk=destination_id)

    def get_destination(self) -> Destination:
        return self.destination


class DestinationAvailabilityViewSet(DestinationCalendarMixin, viewsets.GenericViewSet):
    serializer_class = AvailabilitySerializer
    queryset = Availability.objects.all()
    pagination_class = None

    def get_permissions(self):  # type: ignore
        if self.action == "list":
            return [permissions.AllowAny()]
        return [IsAdmin()]

    def list(self, request, *args, **kwargs):
        query = CalendarQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        rows = services.calendar_for(
            self.get_destination(),
            query.validated_data.get("start_date"),
            query.validated_data.get("end_date"),
        )
        return Response(AvailabilitySerializer(rows, many=True).data)

    def bulk_slots(self, request, *args, **kwargs):
        serializer = BulkSlotsSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        count = services.bulk_set_slots(
            self.get_destination(),
            serializer.validated_data["dates"],
            serializer.validated_data["total_slots"],
        )
        return Response({"updated": count})

    def bulk_block(self, request, *args, **kwargs):
        serializer = BulkBlockSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        count = services.bulk_block(self.get_destination(), data["dates"], data["is_blocked"], data["reason"])
        return Response({"updated": count})


class AvailabilityViewSet(viewsets.GenericViewSet):
    """Administrator edits of single calendar days and ranges."""

    serializer_class = AvailabilitySerializer
    queryset = Availability.objects.select_related("destination").all()
    permission_classes = [IsAdmin]

    def create(self, request, *args, **kwargs):
        serializer = AvailabilityUpsertSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        destination = get_object_or_404(Destination, pk=data["destination_id"])
        availability = services.upsert_day(
            destination,
            data["date"],
            available_slots=data["available_slots"],
            price_override=data.get("price_override"),
        )
        return Response(AvailabilitySerializer(availability).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=["put", "post"])
    def block(self, request, pk=None):
        availability = self.get_object()
        serializer = BlockSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        availability.is_blocked = True
        availability.block_reason = serializer.validated_data.get("reason", "")
        availability.save(update_fields=["is_blocked", "block_reason", "updated_at"])
        return Response(AvailabilitySerializer(availability).data)

    @action(detail=True, methods=["put", "post"])
    def unblock(self, request, pk=None):
        availability = self.get_object()
        availability.is_blocked = False
        availability.block_reason = ""
        availability.save(update_fields=["is_blocked", "block_reason", "updated_at"])
        return Response(AvailabilitySerializer(availability).data)

    @action(detail=False, methods=["post"], url_path="bulk-update")
    def bulk_update(self, request):
        serializer = BulkUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = dict(serializer.validated_data)
        destination = get_object_or_404(Destination, pk=data.pop("destination_id"))
        try:
            count = services.bulk_update_range(
                destination,
                data.pop("start_date"),
                data.pop("end_date"),
                **data,
            )
        except services.AvailabilityError as exc:
            raise BadRequest(str(exc)) from exc
        return Response({"updated": count})
