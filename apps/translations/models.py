"""Interface translation strings."""

from __future__ import annotations

from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

DEFAULT_LANGUAGE = "en"


class Translation(models.Model):
    """A UI string with its text per language code. English is mandatory."""

    key = models.CharField(max_length=255, unique=True)
    translations = models.JSONField(default=dict)
    category = models.CharField(max_length=100, default="general", db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Translation")
        verbose_name_plural = _("Translations")
        ordering = ["key"]

    def __str__(self) -> str:
        return self.key

    def text(self, language: str = DEFAULT_LANGUAGE) -> str:
        return self.translations.get(language) or self.translations.get(DEFAULT_LANGUAGE, "")
