"""Destination catalogue API views."""

from __future__ import annotations

import logging

from django.shortcuts import get_object_or_404  # type: ignore
from django_filters.rest_framework import DjangoFilterBackend  # type: ignore
from rest_framework import permissions, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.filters import OrderingFilter  # type: ignore
from rest_framework.response import Response  # type: ignore

from apps.availability import services as availability_services
from apps.availability.serializers import AvailabilitySerializer, CalendarQuerySerializer
from apps.users.permissions import IsAdmin, is_admin_user

from .filters import DestinationFilterSet
from .models import Destination
from .serializers import DestinationListSerializer, DestinationSerializer

logger = logging.getLogger(__name__)


class DestinationViewSet(viewsets.ModelViewSet):
    """Public catalogue reads; administrators create, edit and deactivate.

    Detail routes accept the slug, and administrators may also use the
    numeric id.
    """

    queryset = Destination.objects.all()
    lookup_field = "slug"
    lookup_value_regex = "[^/]+"
    filter_backends = [DjangoFilterBackend, OrderingFilter]
    filterset_class = DestinationFilterSet
    ordering_fields = ["created_at", "deposit_amount", "country"]

    def get_permissions(self):  # type: ignore
        if self.action in {"list", "retrieve", "availability"}:
            return [permissions.AllowAny()]
        return [IsAdmin()]

    def get_queryset(self):  # type: ignore
        qs = super().get_queryset()
        if self.action in {"list", "retrieve", "availability"} and not is_admin_user(self.request.user):
            return qs.filter(is_active=True)
        if self.action == "list" and self.request.query_params.get("include_inactive") != "true":
            return qs.filter(is_active=True)
        return qs

    def get_object(self):  # type: ignore
        queryset = self.filter_queryset(self.get_queryset())
        value = self.kwargs[self.lookup_field]
        if value.isdigit() and is_admin_user(self.request.user):
            obj = get_object_or_404(queryset, pk=int(value))
        else:
            obj = get_object_or_404(queryset, slug=value)
        self.check_object_permissions(self.request, obj)
        return obj

    def get_serializer_class(self):  # type: ignore
        if self.action == "list":
            return DestinationListSerializer
        return DestinationSerializer

    def perform_create(self, serializer):  # type: ignore
        destination = serializer.save()
        logger.info("Destination %s created by %s", destination.slug, self.request.user.pk)

    def perform_destroy(self, instance):  # type: ignore
        instance.is_active = False
        instance.save(update_fields=["is_active", "updated_at"])
        logger.info("Destination %s deactivated by %s", instance.slug, self.request.user.pk)

    @action(detail=True, methods=["get"])
    def availability(self, request, slug=None):
        destination = self.get_object()
        query = CalendarQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        rows = availability_services.calendar_for(
            destination,
            query.validated_data.get("start_date"),
            query.validated_data.get("end_date"),
        )
        return Response(AvailabilitySerializer(rows, many=True).data)
