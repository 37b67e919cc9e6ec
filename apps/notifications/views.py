"""Administrator access to the email audit log."""

from __future__ import annotations

from rest_framework import viewsets  # type: ignore
from rest_framework.filters import SearchFilter  # type: ignore

from apps.users.permissions import IsAdmin

from .models import EmailLog
from .serializers import EmailLogSerializer


class EmailLogViewSet(viewsets.ReadOnlyModelViewSet):
    serializer_class = EmailLogSerializer
    permission_classes = [IsAdmin]
    filter_backends = [SearchFilter]
    search_fields = ["recipient", "subject"]

    def get_queryset(self):  # type: ignore
        qs = EmailLog.objects.select_related("user").all()
        params = self.request.query_params
        if params.get("email_type"):
            qs = qs.filter(email_type=params["email_type"])
        if params.get("status"):
            qs = qs.filter(status=params["status"])
        return qs
