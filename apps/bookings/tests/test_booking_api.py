"""Integration tests for the deposit booking workflow."""

from __future__ import annotations

from datetime import timedelta
from decimal import Decimal

from django.core import mail
from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APITestCase

from apps.activities.models import Activity
from apps.affiliates.models import AffiliateCode, Commission
from apps.availability.models import Availability
from apps.bookings.models import Booking
from apps.bookings.tasks import send_calendar_expiry_reminders
from apps.destinations.models import Destination
from apps.payments import services as payment_services
from apps.users.models import User


class BookingAPITests(APITestCase):
    """Covers creation, date selection, cancellation and admin review."""

    def setUp(self) -> None:
        self.traveller = User.objects.create_user(
            email="traveller@example.com",
            password="TravelPass123",
            first_name="Sara",
            last_name="Traveller",
        )
        self.other = User.objects.create_user(
            email="other@example.com",
            password="OtherPass123",
            first_name="Omar",
            last_name="Other",
        )
        self.admin = User.objects.create_user(
            email="ops@example.com",
            password="AdminPass123",
            first_name="Ops",
            last_name="Admin",
            role=User.RoleChoices.ADMIN,
        )
        self.destination = Destination.objects.create(
            name={"en": "Maldives Escape"},
            description={"en": "Overwater villas."},
            country="Maldives",
            deposit_amount=Decimal("199.00"),
            currency="AED",
        )
        self.client.force_authenticate(self.traveller)
        self.list_url = reverse("booking-list")
        self.start = timezone.localdate() + timedelta(days=30)
        self.end = self.start + timedelta(days=2)

    def _create(self, **overrides):
        payload = {"destination_id": self.destination.pk, "number_of_travellers": 2}
        payload.update(overrides)
        return self.client.post(self.list_url, payload, format="json")

    def _paid_booking(self, user=None) -> Booking:
        booking = Booking.objects.create(
            user=user or self.traveller,
            destination=self.destination,
            deposit_amount=Decimal("199.00"),
            total_amount=Decimal("199.00"),
        )
        return payment_services.handle_payment_success("pi_test_paid", booking.pk)

    def _open_calendar(self, available_slots: int = 5) -> None:
        day = self.start
        while day <= self.end:
            Availability.objects.create(destination=self.destination, date=day, available_slots=available_slots)
            day += timedelta(days=1)

    def test_create_booking_returns_payment_intent(self) -> None:
        response = self._create(special_requests="Sea view please")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        booking = Booking.objects.get()
        self.assertEqual(booking.user, self.traveller)
        self.assertEqual(booking.status, Booking.Status.PENDING_DEPOSIT)
        self.assertEqual(booking.deposit_amount, Decimal("199.00"))
        self.assertEqual(booking.deposit_currency, "AED")
        self.assertTrue(booking.booking_reference.startswith("TRP-"))
        self.assertTrue(booking.payment_intent_id)
        self.assertIn("client_secret", response.data["payment"])
        self.assertEqual(response.data["booking"]["booking_reference"], booking.booking_reference)

    def test_referral_discount_reduces_deposit(self) -> None:
        self.traveller.discount_amount = Decimal("19.90")
        self.traveller.save(update_fields=["discount_amount"])

        response = self._create()

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertEqual(Booking.objects.get().deposit_amount, Decimal("179.10"))

    def test_inactive_destination_is_not_bookable(self) -> None:
        self.destination.is_active = False
        self.destination.save(update_fields=["is_active"])

        response = self._create()

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertFalse(Booking.objects.exists())

    def test_invalid_affiliate_code_is_rejected(self) -> None:
        response = self._create(affiliate_code="NOPE-000000")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["message"], "Invalid affiliate code.")
        self.assertFalse(Booking.objects.exists())

    def test_own_affiliate_code_is_rejected(self) -> None:
        AffiliateCode.objects.create(affiliate=self.traveller, code="SELF-123456")

        response = self._create(affiliate_code="self-123456")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["message"], "You cannot use your own affiliate code.")

    def test_affiliate_code_earns_commission_once_paid(self) -> None:
        AffiliateCode.objects.create(affiliate=self.other, code="OMAR-ABC123")

        response = self._create(affiliate_code="omar-abc123")
        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        booking = Booking.objects.get()
        self.assertEqual(booking.affiliate_code, "OMAR-ABC123")
        self.assertEqual(booking.affiliate, self.other)

        payment_services.handle_payment_success(booking.payment_intent_id, booking.pk)
        payment_services.handle_payment_success(booking.payment_intent_id, booking.pk)

        commission = Commission.objects.get()
        self.assertEqual(commission.affiliate, self.other)
        self.assertEqual(commission.commission_amount, Decimal("19.90"))

    def test_booking_with_activity_add_on(self) -> None:
        merchant = User.objects.create_user(
            email="merchant@example.com",
            password="MerchantPass123",
            first_name="Mina",
            last_name="Merchant",
            role=User.RoleChoices.MERCHANT,
        )
        activity = Activity.objects.create(
            merchant=merchant,
            title="Sunset Cruise",
            description="Two hours on a dhow.",
            location="Male",
            price=Decimal("50.00"),
            currency="AED",
            status=Activity.Status.APPROVED,
        )

        response = self._create(
            activities=[{"activity_id": activity.pk, "date": str(self.start), "participants": 2}],
        )

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        booking = Booking.objects.get()
        self.assertEqual(booking.total_amount, Decimal("299.00"))
        add_on = booking.activity_bookings.get()
        self.assertTrue(add_on.is_add_on)
        self.assertEqual(add_on.amount, Decimal("100.00"))

    def test_my_bookings_lists_only_own(self) -> None:
        self._paid_booking()
        self._paid_booking(user=self.other)

        response = self.client.get(reverse("booking-my-bookings"))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["count"], 1)

        response = self.client.get(reverse("booking-my-bookings"), {"status": Booking.Status.CONFIRMED})
        self.assertEqual(response.data["count"], 0)

    def test_retrieve_foreign_booking_is_hidden(self) -> None:
        booking = self._paid_booking(user=self.other)

        response = self.client.get(reverse("booking-detail", args=[booking.pk]))

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_payment_success_unlocks_calendar(self) -> None:
        booking = self._paid_booking()

        self.assertEqual(booking.status, Booking.Status.DEPOSIT_PAID)
        self.assertEqual(booking.deposit_payment_status, Booking.PaymentStatus.COMPLETED)
        self.assertIsNotNone(booking.calendar_unlocked_until)
        self.assertTrue(any("Deposit Confirmed" in message.subject for message in mail.outbox))

    def test_select_dates_moves_to_dates_selected(self) -> None:
        booking = self._paid_booking()
        self._open_calendar()
        mail.outbox.clear()

        response = self.client.put(
            reverse("booking-select-dates", args=[booking.pk]),
            {"start_date": str(self.start), "end_date": str(self.end)},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        booking.refresh_from_db()
        self.assertEqual(booking.status, Booking.Status.DATES_SELECTED)
        self.assertEqual(booking.start_date, self.start)
        self.assertTrue(any("Travel Dates Selected" in message.subject for message in mail.outbox))

    def test_select_dates_requires_paid_deposit(self) -> None:
        booking = Booking.objects.create(
            user=self.traveller,
            destination=self.destination,
            deposit_amount=Decimal("199.00"),
        )

        response = self.client.put(
            reverse("booking-select-dates", args=[booking.pk]),
            {"start_date": str(self.start), "end_date": str(self.end)},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_select_dates_after_calendar_expiry(self) -> None:
        booking = self._paid_booking()
        Booking.objects.filter(pk=booking.pk).update(calendar_unlocked_until=timezone.now() - timedelta(days=1))

        response = self.client.put(
            reverse("booking-select-dates", args=[booking.pk]),
            {"start_date": str(self.start), "end_date": str(self.end)},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("expired", response.data["message"])

    def test_blocked_day_needs_flexible_request(self) -> None:
        booking = self._paid_booking()
        Availability.objects.create(destination=self.destination, date=self.start, is_blocked=True)
        url = reverse("booking-select-dates", args=[booking.pk])
        payload = {"start_date": str(self.start), "end_date": str(self.end)}

        rejected = self.client.put(url, payload, format="json")
        self.assertEqual(rejected.status_code, status.HTTP_400_BAD_REQUEST)

        accepted = self.client.put(url, {**payload, "is_flexible": True}, format="json")
        self.assertEqual(accepted.status_code, status.HTTP_200_OK, accepted.data)
        booking.refresh_from_db()
        self.assertTrue(booking.is_flexible)

    def test_end_before_start_is_invalid(self) -> None:
        booking = self._paid_booking()

        response = self.client.put(
            reverse("booking-select-dates", args=[booking.pk]),
            {"start_date": str(self.end), "end_date": str(self.start)},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_cancel_paid_booking_refunds_deposit(self) -> None:
        response = self._create()
        booking = Booking.objects.get()
        payment_services.handle_payment_success(booking.payment_intent_id, booking.pk)

        response = self.client.put(
            reverse("booking-cancel", args=[booking.pk]),
            {"reason": "Change of plans"},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        booking.refresh_from_db()
        self.assertEqual(booking.status, Booking.Status.CANCELLED)
        self.assertEqual(booking.deposit_payment_status, Booking.PaymentStatus.REFUNDED)
        self.assertEqual(booking.cancellation_reason, "Change of plans")

    def test_cancel_twice_fails(self) -> None:
        self._create()
        booking = Booking.objects.get()
        url = reverse("booking-cancel", args=[booking.pk])

        self.assertEqual(self.client.post(url, {}, format="json").status_code, status.HTTP_200_OK)
        self.assertEqual(self.client.post(url, {}, format="json").status_code, status.HTTP_400_BAD_REQUEST)

    def test_admin_confirm_reserves_calendar(self) -> None:
        booking = self._paid_booking()
        self._open_calendar(available_slots=1)
        self.client.put(
            reverse("booking-select-dates", args=[booking.pk]),
            {"start_date": str(self.start), "end_date": str(self.end)},
            format="json",
        )
        self.client.force_authenticate(self.admin)
        mail.outbox.clear()

        response = self.client.put(reverse("admin-booking-confirm", args=[booking.pk]))

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        booking.refresh_from_db()
        self.assertEqual(booking.status, Booking.Status.CONFIRMED)
        self.assertEqual(
            list(Availability.objects.filter(destination=self.destination).values_list("booked_slots", flat=True)),
            [1, 1, 1],
        )
        self.assertTrue(any("Booking Confirmed" in message.subject for message in mail.outbox))

    def test_confirm_without_dates_fails(self) -> None:
        booking = self._paid_booking()
        self.client.force_authenticate(self.admin)

        response = self.client.put(reverse("admin-booking-confirm", args=[booking.pk]))

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_admin_reject_sends_email(self) -> None:
        booking = self._paid_booking()
        self.client.force_authenticate(self.admin)
        mail.outbox.clear()

        response = self.client.put(
            reverse("admin-booking-reject", args=[booking.pk]),
            {"reason": "Fully booked season"},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        booking.refresh_from_db()
        self.assertEqual(booking.status, Booking.Status.REJECTED)
        self.assertEqual(booking.rejection_reason, "Fully booked season")
        self.assertEqual(mail.outbox[0].subject, f"Booking Update - {booking.booking_reference}")

    def test_admin_update_dates_requires_open_calendar(self) -> None:
        booking = self._paid_booking()
        self.client.force_authenticate(self.admin)
        url = reverse("admin-booking-update-dates", args=[booking.pk])
        payload = {"start_date": str(self.start), "end_date": str(self.end)}

        missing = self.client.put(url, payload, format="json")
        self.assertEqual(missing.status_code, status.HTTP_400_BAD_REQUEST)

        self._open_calendar()
        response = self.client.put(url, payload, format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        booking.refresh_from_db()
        self.assertEqual(booking.status, Booking.Status.DATES_SELECTED)
        self.assertEqual(booking.end_date, self.end)

    def test_admin_notes_and_list_filters(self) -> None:
        booking = self._paid_booking()
        self._paid_booking(user=self.other)
        self.client.force_authenticate(self.admin)

        notes = self.client.patch(
            reverse("admin-booking-notes", args=[booking.pk]),
            {"admin_notes": "VIP guest"},
            format="json",
        )
        self.assertEqual(notes.status_code, status.HTTP_200_OK)

        response = self.client.get(reverse("admin-booking-list"), {"user": self.traveller.pk})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["count"], 1)
        self.assertEqual(response.data["results"][0]["admin_notes"], "VIP guest")

    def test_admin_list_filters_by_status_and_destination(self) -> None:
        self._paid_booking()
        self._create()
        self.client.force_authenticate(self.admin)
        url = reverse("admin-booking-list")

        paid = self.client.get(url, {"status": Booking.Status.DEPOSIT_PAID, "destination": self.destination.pk})
        self.assertEqual(paid.status_code, status.HTTP_200_OK)
        self.assertEqual(paid.data["count"], 1)

        other = self.client.get(url, {"destination": self.destination.pk + 1})
        self.assertEqual(other.data["count"], 0)

    def test_admin_list_rejects_malformed_filters(self) -> None:
        self.client.force_authenticate(self.admin)
        url = reverse("admin-booking-list")

        response = self.client.get(url, {"destination": "abc"})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("destination", response.data["errors"])

        response = self.client.get(url, {"date_from": "not-a-date"})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("date_from", response.data["errors"])

    def test_admin_export(self) -> None:
        self._paid_booking()
        self.client.force_authenticate(self.admin)

        response = self.client.get(reverse("admin-booking-export"))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["count"], 1)
        self.assertEqual(response.data["results"][0]["customer_email"], "traveller@example.com")

    def test_traveller_cannot_reach_admin_routes(self) -> None:
        response = self.client.get(reverse("admin-booking-list"))

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_calendar_expiry_reminder_window(self) -> None:
        due = self._paid_booking()
        later = self._paid_booking(user=self.other)
        now = timezone.now()
        Booking.objects.filter(pk=due.pk).update(calendar_unlocked_until=now + timedelta(days=30))
        Booking.objects.filter(pk=later.pk).update(calendar_unlocked_until=now + timedelta(days=200))
        mail.outbox.clear()

        result = send_calendar_expiry_reminders()

        self.assertEqual(result, {"sent": 1})
        self.assertEqual(mail.outbox[0].to, ["traveller@example.com"])
