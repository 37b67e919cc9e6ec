"""Tests for public, merchant and admin activity endpoints."""

from __future__ import annotations

from datetime import timedelta
from decimal import Decimal

from django.core import mail
from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APITestCase

from apps.activities.models import Activity, ActivityAvailability, ActivityBooking, ActivityInquiry
from apps.users.models import User


class ActivityTestMixin:
    def setUp(self) -> None:
        self.merchant = User.objects.create_user(
            email="desert-tours@example.com",
            password="MerchantPass123",
            first_name="Khalid",
            last_name="Tours",
            role=User.RoleChoices.MERCHANT,
        )
        self.traveller = User.objects.create_user(
            email="explorer@example.com",
            password="ExplorerPass123",
            first_name="Eva",
            last_name="Explorer",
        )
        self.admin = User.objects.create_user(
            email="moderator@example.com",
            password="ModeratorPass123",
            first_name="Mod",
            last_name="Erator",
            role=User.RoleChoices.ADMIN,
        )
        self.safari = Activity.objects.create(
            merchant=self.merchant,
            title="Desert Safari",
            description="Dune bashing and dinner.",
            location="Dubai",
            price=Decimal("150.00"),
            photos=["https://cdn.example.com/safari.jpg"],
            status=Activity.Status.APPROVED,
        )
        self.pending = Activity.objects.create(
            merchant=self.merchant,
            title="Hot Air Balloon",
            description="Sunrise flight.",
            location="Abu Dhabi",
            price=Decimal("900.00"),
            photos=["https://cdn.example.com/balloon.jpg"],
        )
        self.day = timezone.localdate() + timedelta(days=10)


class PublicActivityAPITests(ActivityTestMixin, APITestCase):
    def test_list_shows_only_approved(self) -> None:
        response = self.client.get(reverse("activity-list"))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([row["title"] for row in response.data["results"]], ["Desert Safari"])

    def test_country_location_matches_cities(self) -> None:
        response = self.client.get(reverse("activity-list"), {"location": "UAE"})

        self.assertEqual(response.data["count"], 1)

    def test_search_by_description(self) -> None:
        response = self.client.get(reverse("activity-list"), {"search": "dune"})
        self.assertEqual(response.data["count"], 1)

        response = self.client.get(reverse("activity-list"), {"search": "snorkel"})
        self.assertEqual(response.data["count"], 0)

    def test_pending_activity_detail_is_404(self) -> None:
        response = self.client.get(reverse("activity-detail", args=[self.pending.pk]))

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_availability_defaults_to_ninety_days(self) -> None:
        ActivityAvailability.objects.create(activity=self.safari, date=self.day, available_slots=4)
        ActivityAvailability.objects.create(
            activity=self.safari, date=timezone.localdate() + timedelta(days=120), available_slots=4
        )

        response = self.client.get(reverse("activity-availability", args=[self.safari.pk]))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data["availability"]), 1)
        self.assertEqual(response.data["availability"][0]["remaining_slots"], 4)

    def test_inquiry_emails_merchant_admin_and_customer(self) -> None:
        response = self.client.post(
            reverse("activity-inquire", args=[self.safari.pk]),
            {
                "customer_name": "Eva Explorer",
                "customer_email": "eva@example.com",
                "customer_phone": "+971500000000",
                "preferred_date": str(self.day),
                "message": "Is pickup included?",
            },
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertEqual(ActivityInquiry.objects.count(), 1)
        subjects = {message.subject for message in mail.outbox}
        self.assertIn("New Inquiry for Desert Safari", subjects)
        self.assertIn("New Activity Inquiry - Desert Safari", subjects)
        self.assertIn("Inquiry Confirmation - Desert Safari", subjects)

    def test_book_requires_authentication(self) -> None:
        response = self.client.post(reverse("activity-book", args=[self.safari.pk]), {}, format="json")

        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_book_splits_revenue_and_reserves_slots(self) -> None:
        self.client.force_authenticate(self.traveller)

        response = self.client.post(
            reverse("activity-book", args=[self.safari.pk]),
            {
                "selected_date": str(self.day),
                "number_of_participants": 3,
                "customer_name": "Eva Explorer",
                "customer_email": "eva@example.com",
            },
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        booking = ActivityBooking.objects.get()
        self.assertEqual(booking.amount, Decimal("450.00"))
        self.assertEqual(booking.platform_commission, Decimal("90.00"))
        self.assertEqual(booking.merchant_amount, Decimal("360.00"))
        self.assertEqual(booking.status, ActivityBooking.Status.PENDING_PAYMENT)
        availability = ActivityAvailability.objects.get(activity=self.safari, date=self.day)
        self.assertEqual(availability.available_slots, 999)
        self.assertEqual(availability.booked_slots, 3)

    def test_book_uses_day_price_and_checks_slots(self) -> None:
        ActivityAvailability.objects.create(
            activity=self.safari, date=self.day, available_slots=2, price=Decimal("100.00")
        )
        self.client.force_authenticate(self.traveller)
        url = reverse("activity-book", args=[self.safari.pk])
        payload = {
            "selected_date": str(self.day),
            "number_of_participants": 3,
            "customer_name": "Eva Explorer",
            "customer_email": "eva@example.com",
        }

        too_many = self.client.post(url, payload, format="json")
        self.assertEqual(too_many.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(too_many.data["message"], "Only 2 slot(s) available. You requested 3.")

        response = self.client.post(url, {**payload, "number_of_participants": 2}, format="json")
        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertEqual(response.data["amount"], "200.00")

    def test_book_past_date_fails(self) -> None:
        self.client.force_authenticate(self.traveller)

        response = self.client.post(
            reverse("activity-book", args=[self.safari.pk]),
            {
                "selected_date": str(timezone.localdate() - timedelta(days=1)),
                "number_of_participants": 1,
                "customer_name": "Eva Explorer",
                "customer_email": "eva@example.com",
            },
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["message"], "Cannot book activities in the past.")

    def test_book_blocked_day_fails(self) -> None:
        ActivityAvailability.objects.create(activity=self.safari, date=self.day, is_available=False)
        self.client.force_authenticate(self.traveller)

        response = self.client.post(
            reverse("activity-book", args=[self.safari.pk]),
            {
                "selected_date": str(self.day),
                "number_of_participants": 1,
                "customer_name": "Eva Explorer",
                "customer_email": "eva@example.com",
            },
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_activity_booking_detail_is_owner_only(self) -> None:
        self.client.force_authenticate(self.traveller)
        self.client.post(
            reverse("activity-book", args=[self.safari.pk]),
            {
                "selected_date": str(self.day),
                "number_of_participants": 1,
                "customer_name": "Eva Explorer",
                "customer_email": "eva@example.com",
            },
            format="json",
        )
        booking = ActivityBooking.objects.get()

        response = self.client.get(reverse("activity-booking-detail", args=[booking.pk]))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["activity_title"], "Desert Safari")

        self.client.force_authenticate(self.merchant)
        response = self.client.get(reverse("activity-booking-detail", args=[booking.pk]))
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)


class MerchantAPITests(ActivityTestMixin, APITestCase):
    def test_register_as_merchant(self) -> None:
        self.client.force_authenticate(self.traveller)

        response = self.client.post(reverse("merchant-register"))

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.traveller.refresh_from_db()
        self.assertEqual(self.traveller.role, User.RoleChoices.MERCHANT)

    def test_register_twice_or_as_admin_fails(self) -> None:
        self.client.force_authenticate(self.merchant)
        self.assertEqual(self.client.post(reverse("merchant-register")).status_code, status.HTTP_400_BAD_REQUEST)

        self.client.force_authenticate(self.admin)
        self.assertEqual(self.client.post(reverse("merchant-register")).status_code, status.HTTP_400_BAD_REQUEST)

    def test_submit_activity_starts_pending(self) -> None:
        self.client.force_authenticate(self.merchant)

        response = self.client.post(
            reverse("merchant-activities"),
            {
                "title": "Mangrove Kayaking",
                "description": "Paddle through the mangroves.",
                "location": "Abu Dhabi",
                "price": "120.00",
                "currency": "aed",
                "photos": ["https://cdn.example.com/kayak.jpg"],
            },
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        activity = Activity.objects.get(title="Mangrove Kayaking")
        self.assertEqual(activity.status, Activity.Status.PENDING)
        self.assertEqual(activity.currency, "AED")
        self.assertEqual(activity.merchant, self.merchant)

    def test_submit_activity_limits_photos(self) -> None:
        self.client.force_authenticate(self.merchant)
        payload = {
            "title": "City Tour",
            "description": "Old town walk.",
            "location": "Dubai",
            "price": "80.00",
        }

        no_photos = self.client.post(reverse("merchant-activities"), {**payload, "photos": []}, format="json")
        self.assertEqual(no_photos.status_code, status.HTTP_400_BAD_REQUEST)

        photos = [f"https://cdn.example.com/{index}.jpg" for index in range(4)]
        too_many = self.client.post(reverse("merchant-activities"), {**payload, "photos": photos}, format="json")
        self.assertEqual(too_many.status_code, status.HTTP_400_BAD_REQUEST)

    def test_traveller_cannot_use_merchant_routes(self) -> None:
        self.client.force_authenticate(self.traveller)

        response = self.client.get(reverse("merchant-dashboard"))

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_dashboard_totals_paid_bookings(self) -> None:
        ActivityBooking.objects.create(
            activity=self.safari,
            availability=ActivityAvailability.objects.create(activity=self.safari, date=self.day, available_slots=5),
            user=self.traveller,
            selected_date=self.day,
            customer_name="Eva Explorer",
            customer_email="eva@example.com",
            amount=Decimal("150.00"),
            platform_commission=Decimal("30.00"),
            merchant_amount=Decimal("120.00"),
            status=ActivityBooking.Status.PAYMENT_COMPLETED,
            payment_status=ActivityBooking.PaymentStatus.COMPLETED,
        )
        self.client.force_authenticate(self.merchant)

        response = self.client.get(reverse("merchant-dashboard"))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        stats = response.data["stats"]
        self.assertEqual(stats["total_earnings"], Decimal("120.00"))
        self.assertEqual(stats["pending_payouts"], Decimal("120.00"))
        self.assertEqual(stats["total_activities"], 2)
        self.assertEqual(stats["approved_activities"], 1)

    def test_block_and_slots_on_own_activity(self) -> None:
        self.client.force_authenticate(self.merchant)
        dates = [str(self.day), str(self.day + timedelta(days=1))]

        block = self.client.put(
            reverse("merchant-block", kwargs={"activity_id": self.safari.pk}),
            {"dates": dates, "is_blocked": True},
            format="json",
        )
        self.assertEqual(block.status_code, status.HTTP_200_OK, block.data)
        self.assertFalse(ActivityAvailability.objects.get(activity=self.safari, date=self.day).is_available)

        slots = self.client.put(
            reverse("merchant-slots", kwargs={"activity_id": self.safari.pk}),
            {"dates": dates, "total_slots": 8},
            format="json",
        )
        self.assertEqual(slots.data, {"updated": 2})

        listing = self.client.get(reverse("merchant-availability", kwargs={"activity_id": self.safari.pk}))
        self.assertEqual([row["available_slots"] for row in listing.data], [8, 8])

    def test_foreign_activity_calendar_is_404(self) -> None:
        other = User.objects.create_user(
            email="rival@example.com",
            password="RivalPass123",
            first_name="Rival",
            last_name="Merchant",
            role=User.RoleChoices.MERCHANT,
        )
        self.client.force_authenticate(other)

        response = self.client.get(reverse("merchant-availability", kwargs={"activity_id": self.safari.pk}))

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)


class AdminActivityAPITests(ActivityTestMixin, APITestCase):
    def setUp(self) -> None:
        super().setUp()
        self.client.force_authenticate(self.admin)

    def test_pending_queue(self) -> None:
        response = self.client.get(reverse("admin-activity-pending"))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([row["title"] for row in response.data["results"]], ["Hot Air Balloon"])

    def test_approve_then_approve_again(self) -> None:
        url = reverse("admin-activity-approve", args=[self.pending.pk])

        self.assertEqual(self.client.put(url).status_code, status.HTTP_200_OK)
        self.pending.refresh_from_db()
        self.assertEqual(self.pending.status, Activity.Status.APPROVED)
        self.assertEqual(self.client.put(url).status_code, status.HTTP_400_BAD_REQUEST)

    def test_reject_requires_reason(self) -> None:
        url = reverse("admin-activity-reject", args=[self.pending.pk])

        self.assertEqual(self.client.put(url, {}, format="json").status_code, status.HTTP_400_BAD_REQUEST)

        response = self.client.put(url, {"reason": "Photos are blurry"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.pending.refresh_from_db()
        self.assertEqual(self.pending.status, Activity.Status.REJECTED)
        self.assertEqual(self.pending.rejection_reason, "Photos are blurry")

    def test_non_admin_is_forbidden(self) -> None:
        self.client.force_authenticate(self.merchant)

        response = self.client.get(reverse("admin-activity-list"))

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
