"""Destination catalogue models."""

from __future__ import annotations

from decimal import Decimal

from django.conf import settings  # type: ignore
from django.core.validators import MinValueValidator  # type: ignore
from django.db import models  # type: ignore
from django.utils.text import slugify  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


def default_deposit() -> Decimal:
    return Decimal(settings.DEFAULT_DEPOSIT_AMOUNT)


def default_currency() -> str:
    return settings.DEFAULT_CURRENCY


class Destination(models.Model):
    """Travel package users reserve with a deposit.

    Text fields are stored per language, e.g. ``{"en": "...", "ar": "..."}``;
    English is mandatory.
    """

    name = models.JSONField()
    slug = models.SlugField(max_length=255, unique=True, blank=True)
    description = models.JSONField(default=dict)
    short_description = models.JSONField(default=dict, blank=True)
    images = models.JSONField(default=list, blank=True)
    thumbnail_image = models.URLField(blank=True)
    country = models.CharField(max_length=100)
    region = models.CharField(max_length=100, blank=True)
    deposit_amount = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=default_deposit,
        validators=[MinValueValidator(0)],
    )
    currency = models.CharField(max_length=3, default=default_currency)
    highlights = models.JSONField(default=list, blank=True)
    inclusions = models.JSONField(default=list, blank=True)
    exclusions = models.JSONField(default=list, blank=True)
    duration_days = models.PositiveSmallIntegerField(null=True, blank=True)
    duration_nights = models.PositiveSmallIntegerField(null=True, blank=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Destination")
        verbose_name_plural = _("Destinations")
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["country", "region"]),
            models.Index(fields=["is_active"]),
        ]

    def __str__(self) -> str:
        return self.name_en or self.slug

    @property
    def name_en(self) -> str:
        if isinstance(self.name, dict):
            return self.name.get("en", "")
        return str(self.name or "")

    def localized(self, field: str, language: str = "en") -> str:
        value = getattr(self, field) or {}
        return value.get(language) or value.get("en", "")

    def save(self, *args, **kwargs):  # type: ignore
        if not self.slug:
            self.slug = self._unique_slug()
        super().save(*args, **kwargs)

    def _unique_slug(self) -> str:
        base = slugify(self.name_en)[:240] or "destination"
        slug = base
        suffix = 2
        while Destination.objects.filter(slug=slug).exclude(pk=self.pk).exists():
            slug = f"{base}-{suffix}"
            suffix += 1
        return slug
