"""API views for translations."""

from __future__ import annotations

from rest_framework import permissions, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore

from apps.users.permissions import IsAdmin
from config.exceptions import BadRequest

from . import services
from .models import DEFAULT_LANGUAGE, Translation
from .serializers import TranslationImportSerializer, TranslationSerializer


class TranslationViewSet(viewsets.ModelViewSet):
    """Public key/value lookup plus administrator CRUD, export and import."""

    queryset = Translation.objects.all()
    serializer_class = TranslationSerializer

    def get_permissions(self):  # type: ignore
        if self.action == "list":
            return [permissions.AllowAny()]
        return [IsAdmin()]

    def list(self, request, *args, **kwargs):  # type: ignore
        language = request.query_params.get("language") or DEFAULT_LANGUAGE
        category = request.query_params.get("category")
        return Response(services.translations_for(language, category))

    @action(detail=False, methods=["get"], url_path="all")
    def all(self, request):
        qs = self.get_queryset()
        if request.query_params.get("category"):
            qs = qs.filter(category=request.query_params["category"])
        page = self.paginate_queryset(qs)
        if page is not None:
            return self.get_paginated_response(self.get_serializer(page, many=True).data)
        return Response(self.get_serializer(qs, many=True).data)

    @action(detail=False, methods=["get"], url_path=r"export/(?P<language>[A-Za-z-]+)")
    def export(self, request, language=None):
        response = Response(services.translations_for(language or DEFAULT_LANGUAGE))
        response["Content-Disposition"] = f"attachment; filename=translations-{language}.json"
        return response

    @action(detail=False, methods=["post"], url_path="import")
    def import_translations(self, request):
        serializer = TranslationImportSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        try:
            result = services.import_translations(
                data["translations"],
                language=data.get("language") or None,
                category=data["category"],
            )
        except services.TranslationImportError as exc:
            raise BadRequest(str(exc)) from exc
        return Response(result)
