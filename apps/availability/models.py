"""Per-day capacity calendar for destinations."""

from __future__ import annotations

from django.core.validators import MinValueValidator  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


class Availability(models.Model):
    """Slots for one destination on one calendar day."""

    destination = models.ForeignKey(
        "destinations.Destination",
        on_delete=models.CASCADE,
        related_name="availability",
    )
    date = models.DateField()
    available_slots = models.PositiveIntegerField(default=0)
    booked_slots = models.PositiveIntegerField(default=0)
    is_blocked = models.BooleanField(default=False)
    block_reason = models.CharField(max_length=255, blank=True)
    price_override = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        null=True,
        blank=True,
        validators=[MinValueValidator(0)],
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Availability")
        verbose_name_plural = _("Availability")
        ordering = ["date"]
        constraints = [
            models.UniqueConstraint(fields=["destination", "date"], name="availability_unique_day"),
        ]
        indexes = [
            models.Index(fields=["destination", "date"]),
        ]

    def __str__(self) -> str:
        return f"{self.destination_id} @ {self.date}: {self.booked_slots}/{self.available_slots}"

    @property
    def is_available(self) -> bool:
        return not self.is_blocked and self.booked_slots < self.available_slots

    @property
    def remaining_slots(self) -> int:
        return max(0, self.available_slots - self.booked_slots)
