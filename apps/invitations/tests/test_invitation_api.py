"""Tests for role invitations."""

from __future__ import annotations

from datetime import timedelta

from django.core import mail
from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APITestCase

from apps.invitations.models import Invitation
from apps.invitations.tasks import expire_stale_invitations
from apps.users.models import User


class InvitationAPITests(APITestCase):
    def setUp(self) -> None:
        self.admin = User.objects.create_user(
            email="owner@example.com",
            password="OwnerPass123",
            first_name="Nora",
            last_name="Owner",
            role=User.RoleChoices.ADMIN,
        )
        self.client.force_authenticate(self.admin)

    def _invite(self, email="partner@example.com", role=Invitation.Role.AFFILIATE):
        return self.client.post(reverse("invitation-list"), {"email": email, "role": role}, format="json")

    def test_create_sends_email(self) -> None:
        response = self._invite(email="Partner@Example.com")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        invitation = Invitation.objects.get()
        self.assertEqual(invitation.email, "partner@example.com")
        self.assertEqual(invitation.status, Invitation.Status.PENDING)
        self.assertEqual(invitation.invited_by, self.admin)
        self.assertGreater(invitation.expires_at, timezone.now() + timedelta(days=6))
        self.assertEqual(mail.outbox[0].subject, "Invitation to Join as Affiliate")
        self.assertIn(invitation.token, mail.outbox[0].alternatives[0][0])

    def test_existing_user_or_live_invitation_is_rejected(self) -> None:
        self.assertEqual(self._invite(email="owner@example.com").status_code, status.HTTP_400_BAD_REQUEST)

        self._invite()
        self.assertEqual(self._invite().status_code, status.HTTP_400_BAD_REQUEST)

    def test_expired_invitation_can_be_reissued(self) -> None:
        Invitation.objects.create(
            email="partner@example.com",
            role=Invitation.Role.MERCHANT,
            expires_at=timezone.now() - timedelta(days=1),
        )

        self.assertEqual(self._invite().status_code, status.HTTP_201_CREATED)

    def test_list_flips_expired(self) -> None:
        stale = Invitation.objects.create(
            email="late@example.com",
            role=Invitation.Role.MERCHANT,
            expires_at=timezone.now() - timedelta(hours=1),
        )

        response = self.client.get(reverse("invitation-list"))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["results"][0]["status"], Invitation.Status.EXPIRED)
        stale.refresh_from_db()
        self.assertEqual(stale.status, Invitation.Status.EXPIRED)

    def test_resend_issues_new_token(self) -> None:
        self._invite()
        invitation = Invitation.objects.get()
        old_token = invitation.token
        mail.outbox.clear()

        response = self.client.post(reverse("invitation-resend", args=[invitation.pk]))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        invitation.refresh_from_db()
        self.assertNotEqual(invitation.token, old_token)
        self.assertEqual(len(mail.outbox), 1)

    def test_resend_accepted_fails(self) -> None:
        invitation = Invitation.objects.create(
            email="done@example.com",
            role=Invitation.Role.ADMIN,
            status=Invitation.Status.ACCEPTED,
        )

        response = self.client.post(reverse("invitation-resend", args=[invitation.pk]))

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_cancel_deletes(self) -> None:
        self._invite()
        invitation = Invitation.objects.get()

        response = self.client.delete(reverse("invitation-detail", args=[invitation.pk]))

        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(Invitation.objects.exists())

    def test_non_admin_cannot_invite(self) -> None:
        user = User.objects.create_user(
            email="plain@example.com",
            password="PlainPass123",
            first_name="Plain",
            last_name="User",
        )
        self.client.force_authenticate(user)

        self.assertEqual(self._invite().status_code, status.HTTP_403_FORBIDDEN)

    def test_accept_creates_user_with_role(self) -> None:
        self._invite(email="shop@example.com", role=Invitation.Role.MERCHANT)
        invitation = Invitation.objects.get()
        self.client.force_authenticate(None)

        response = self.client.post(
            reverse("invitation-accept"),
            {
                "token": invitation.token,
                "password": "ShopPass1234",
                "first_name": "Shop",
                "last_name": "Keeper",
            },
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        user = User.objects.get(email="shop@example.com")
        self.assertEqual(user.role, User.RoleChoices.MERCHANT)
        self.assertTrue(user.is_email_verified)
        self.assertTrue(user.check_password("ShopPass1234"))
        invitation.refresh_from_db()
        self.assertEqual(invitation.status, Invitation.Status.ACCEPTED)
        self.assertIsNotNone(invitation.accepted_at)

    def test_accept_expired_or_unknown_token(self) -> None:
        invitation = Invitation.objects.create(
            email="slow@example.com",
            role=Invitation.Role.AFFILIATE,
            expires_at=timezone.now() - timedelta(minutes=5),
        )
        self.client.force_authenticate(None)
        payload = {"password": "SlowPass1234", "first_name": "Slow", "last_name": "Poke"}

        expired = self.client.post(reverse("invitation-accept"), {**payload, "token": invitation.token}, format="json")
        self.assertEqual(expired.status_code, status.HTTP_400_BAD_REQUEST)
        invitation.refresh_from_db()
        self.assertEqual(invitation.status, Invitation.Status.EXPIRED)

        unknown = self.client.post(reverse("invitation-accept"), {**payload, "token": "missing"}, format="json")
        self.assertEqual(unknown.status_code, status.HTTP_404_NOT_FOUND)

    def test_hourly_task_expires_stale(self) -> None:
        Invitation.objects.create(
            email="old@example.com",
            role=Invitation.Role.AFFILIATE,
            expires_at=timezone.now() - timedelta(days=2),
        )
        Invitation.objects.create(email="fresh@example.com", role=Invitation.Role.AFFILIATE)

        self.assertEqual(expire_stale_invitations(), {"expired": 1})
