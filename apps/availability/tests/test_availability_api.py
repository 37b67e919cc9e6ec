"""Tests for the destination availability calendar API."""

from __future__ import annotations

from datetime import timedelta
from decimal import Decimal

from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APITestCase

from apps.availability.models import Availability
from apps.availability.services import BLOCK_DEFAULT_SLOTS, add_months
from apps.destinations.models import Destination
from apps.users.models import User


class AvailabilityAPITests(APITestCase):
    def setUp(self) -> None:
        self.admin = User.objects.create_user(
            email="calendar-admin@example.com",
            password="StrongPass123",
            first_name="Calendar",
            last_name="Admin",
            role=User.RoleChoices.ADMIN,
        )
        self.user = User.objects.create_user(
            email="calendar-user@example.com",
            password="StrongPass123",
            first_name="Casual",
            last_name="User",
        )
        self.destination = Destination.objects.create(
            name={"en": "Maldives Escape"},
            description={"en": "Seven nights on the atolls."},
            country="Maldives",
        )
        self.today = timezone.localdate()

    def _calendar_url(self):
        return reverse("destination-calendar", kwargs={"destination_id": self.destination.id})

    def test_public_calendar_defaults_to_six_month_window(self) -> None:
        Availability.objects.create(destination=self.destination, date=self.today, available_slots=4)
        Availability.objects.create(
            destination=self.destination,
            date=add_months(self.today, 7),
            available_slots=4,
        )
        response = self.client.get(self._calendar_url())
        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(len(response.data), 1)
        self.assertTrue(response.data[0]["is_available"])
        self.assertEqual(response.data[0]["remaining_slots"], 4)

    def test_calendar_for_unknown_destination_is_404(self) -> None:
        url = reverse("destination-calendar", kwargs={"destination_id": 9999})
        response = self.client.get(url)
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_upsert_requires_admin(self) -> None:
        self.client.force_authenticate(self.user)
        payload = {
            "destination_id": self.destination.id,
            "date": str(self.today),
            "available_slots": 5,
        }
        response = self.client.post(reverse("availability-list"), payload, format="json")
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_upsert_updates_existing_day(self) -> None:
        self.client.force_authenticate(self.admin)
        url = reverse("availability-list")
        payload = {
            "destination_id": self.destination.id,
            "date": str(self.today),
            "available_slots": 5,
        }
        self.client.post(url, payload, format="json")
        payload.update(available_slots=8, price_override="250.00")
        response = self.client.post(url, payload, format="json")
        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        row = Availability.objects.get(destination=self.destination, date=self.today)
        self.assertEqual(row.available_slots, 8)
        self.assertEqual(row.price_override, Decimal("250.00"))
        self.assertEqual(Availability.objects.count(), 1)

    def test_block_and_unblock_single_day(self) -> None:
        row = Availability.objects.create(destination=self.destination, date=self.today, available_slots=3)
        self.client.force_authenticate(self.admin)
        response = self.client.put(
            reverse("availability-block", kwargs={"pk": row.id}),
            {"reason": "Maintenance"},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        row.refresh_from_db()
        self.assertTrue(row.is_blocked)
        self.assertEqual(row.block_reason, "Maintenance")
        self.assertFalse(row.is_available)

        response = self.client.put(reverse("availability-unblock", kwargs={"pk": row.id}))
        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        row.refresh_from_db()
        self.assertFalse(row.is_blocked)
        self.assertEqual(row.block_reason, "")

    def test_bulk_update_creates_rows_for_range(self) -> None:
        self.client.force_authenticate(self.admin)
        payload = {
            "destination_id": self.destination.id,
            "start_date": str(self.today),
            "end_date": str(self.today + timedelta(days=4)),
            "available_slots": 10,
        }
        response = self.client.post(reverse("availability-bulk-update"), payload, format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(response.data["updated"], 5)
        self.assertEqual(
            Availability.objects.filter(destination=self.destination, available_slots=10).count(),
            5,
        )

    def test_bulk_update_rejects_inverted_range(self) -> None:
        self.client.force_authenticate(self.admin)
        payload = {
            "destination_id": self.destination.id,
            "start_date": str(self.today + timedelta(days=3)),
            "end_date": str(self.today),
            "available_slots": 10,
        }
        response = self.client.post(reverse("availability-bulk-update"), payload, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_bulk_block_creates_missing_rows_with_default_slots(self) -> None:
        existing = Availability.objects.create(destination=self.destination, date=self.today, available_slots=2)
        self.client.force_authenticate(self.admin)
        url = reverse("destination-calendar-bulk-block", kwargs={"destination_id": self.destination.id})
        payload = {
            "dates": [str(self.today), str(self.today + timedelta(days=1))],
            "is_blocked": True,
            "reason": "Holiday",
        }
        response = self.client.post(url, payload, format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        existing.refresh_from_db()
        self.assertTrue(existing.is_blocked)
        self.assertEqual(existing.available_slots, 2)
        created = Availability.objects.get(destination=self.destination, date=self.today + timedelta(days=1))
        self.assertTrue(created.is_blocked)
        self.assertEqual(created.available_slots, BLOCK_DEFAULT_SLOTS)

    def test_bulk_slots_sets_capacity(self) -> None:
        self.client.force_authenticate(self.admin)
        url = reverse("destination-calendar-bulk-slots", kwargs={"destination_id": self.destination.id})
        payload = {"dates": [str(self.today), str(self.today + timedelta(days=2))], "total_slots": 6}
        response = self.client.post(url, payload, format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(response.data["updated"], 2)
        self.assertEqual(
            set(Availability.objects.values_list("available_slots", flat=True)),
            {6},
        )
