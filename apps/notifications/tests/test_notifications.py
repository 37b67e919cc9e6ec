"""Tests for email delivery, the email audit log and notification tasks."""

from __future__ import annotations

from datetime import timedelta
from decimal import Decimal
from unittest import mock

from django.core import mail
from django.test import override_settings
from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APITestCase

from apps.activities.models import Activity, ActivityInquiry
from apps.bookings.models import Booking
from apps.destinations.models import Destination
from apps.notifications import services, tasks
from apps.notifications.models import EmailLog
from apps.users.models import User


class EmailDeliveryTests(APITestCase):
    def setUp(self) -> None:
        self.user = User.objects.create_user(
            email="layla@example.com",
            password="LaylaPass1",
            first_name="Layla",
            last_name="Guest",
        )
        destination = Destination.objects.create(
            name={"en": "Santorini"},
            description={"en": "Cliffside sunsets."},
            country="Greece",
            deposit_amount=Decimal("199.00"),
        )
        self.booking = Booking.objects.create(
            user=self.user,
            destination=destination,
            deposit_amount=Decimal("199.00"),
            total_amount=Decimal("199.00"),
        )

    def test_successful_send_is_logged(self) -> None:
        self.assertTrue(services.send_booking_confirmation(self.booking))

        self.assertEqual(len(mail.outbox), 1)
        self.assertIn(self.booking.booking_reference, mail.outbox[0].subject)
        log = EmailLog.objects.get()
        self.assertEqual(log.status, EmailLog.Status.SENT)
        self.assertEqual(log.email_type, EmailLog.EmailType.BOOKING_CONFIRMED)
        self.assertEqual(log.user, self.user)
        self.assertIsNotNone(log.sent_at)

    def test_failed_send_is_logged_and_not_raised(self) -> None:
        with mock.patch.object(services, "send_mail", side_effect=OSError("SMTP down")):
            sent = services.send_booking_rejection(self.booking, "Fully booked")

        self.assertFalse(sent)
        log = EmailLog.objects.get()
        self.assertEqual(log.status, EmailLog.Status.FAILED)
        self.assertEqual(log.error_message, "SMTP down")

    @override_settings(ADMIN_NOTIFICATION_EMAIL="desk@example.com")
    def test_dates_selected_task_notifies_admins_and_user(self) -> None:
        User.objects.create_user(
            email="admin@example.com",
            password="AdminPass1",
            first_name="Ada",
            last_name="Admin",
            role=User.RoleChoices.ADMIN,
        )

        self.assertTrue(tasks.notify_dates_selected(self.booking.pk))

        recipients = sorted(message.to[0] for message in mail.outbox)
        self.assertEqual(recipients, ["admin@example.com", "desk@example.com", "layla@example.com"])

    def test_task_for_missing_booking_returns_false(self) -> None:
        self.assertFalse(tasks.notify_deposit_paid(999999))
        self.assertEqual(len(mail.outbox), 0)

    def test_inquiry_text_is_escaped_in_html(self) -> None:
        merchant = User.objects.create_user(
            email="merchant@example.com",
            password="MerchantPass1",
            first_name="Desert",
            last_name="Tours",
            role=User.RoleChoices.MERCHANT,
        )
        activity = Activity.objects.create(
            merchant=merchant,
            title="Desert Safari",
            description="Dune bashing and dinner.",
            location="Dubai",
            price=Decimal("150.00"),
            status=Activity.Status.APPROVED,
        )
        inquiry = ActivityInquiry.objects.create(
            activity=activity,
            customer_name="Eva <b>Explorer</b>",
            customer_email="eva@example.com",
            customer_phone="+971500000000",
            preferred_date=timezone.localdate() + timedelta(days=10),
            message="<script>alert('x')</script>",
        )

        services.send_activity_inquiry_emails(activity, inquiry)

        merchant_mail = next(message for message in mail.outbox if message.to == ["merchant@example.com"])
        html = merchant_mail.alternatives[0][0]
        self.assertNotIn("<script>", html)
        self.assertIn("&lt;script&gt;", html)
        self.assertIn("Eva &lt;b&gt;Explorer&lt;/b&gt;", html)

    def test_dispatch_swallows_broker_errors(self) -> None:
        task = mock.Mock()
        task.name = "notifications.notify_deposit_paid"
        task.delay.side_effect = ConnectionError("broker unreachable")

        tasks.dispatch(task, self.booking.pk)

        task.delay.assert_called_once_with(self.booking.pk)


class EmailLogAPITests(APITestCase):
    def setUp(self) -> None:
        self.admin = User.objects.create_user(
            email="ops@example.com",
            password="AdminPass1",
            first_name="Ops",
            last_name="Admin",
            role=User.RoleChoices.ADMIN,
        )
        self.user = User.objects.create_user(
            email="guest@example.com",
            password="GuestPass1",
            first_name="Guest",
            last_name="User",
        )
        EmailLog.objects.create(
            email_type=EmailLog.EmailType.PASSWORD_RESET,
            recipient="guest@example.com",
            subject="Reset Your Password",
            status=EmailLog.Status.SENT,
        )
        EmailLog.objects.create(
            email_type=EmailLog.EmailType.INVITATION,
            recipient="new@example.com",
            subject="Invitation to Join as Merchant",
            status=EmailLog.Status.FAILED,
            error_message="timeout",
        )

    def test_admin_filters_email_logs(self) -> None:
        self.client.force_authenticate(self.admin)

        response = self.client.get(reverse("email-log-list"), {"status": "failed"})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["count"], 1)
        self.assertEqual(response.data["results"][0]["recipient"], "new@example.com")

        search = self.client.get(reverse("email-log-list"), {"search": "guest@"})
        self.assertEqual(search.data["count"], 1)

    def test_regular_user_cannot_read_email_logs(self) -> None:
        self.client.force_authenticate(self.user)
        response = self.client.get(reverse("email-log-list"))
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
