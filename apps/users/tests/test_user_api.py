"""API tests for the user directory."""

from __future__ import annotations

from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from apps.users.models import User


class UserDirectoryTests(APITestCase):
    def setUp(self) -> None:
        self.admin = User.objects.create_user(
            email="ops@example.com", password="AdminPass1", first_name="Ops", last_name="Admin", is_staff=True
        )
        self.merchant = User.objects.create_user(
            email="desert@example.com",
            password="MerchantPass1",
            first_name="Desert",
            last_name="Tours",
            role=User.RoleChoices.MERCHANT,
        )

    def test_admin_filters_users_by_role(self) -> None:
        self.client.force_authenticate(self.admin)

        response = self.client.get(reverse("user-list"), {"role": "merchant"})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([row["email"] for row in response.data["results"]], [self.merchant.email])

    def test_non_admin_only_sees_own_profile(self) -> None:
        self.client.force_authenticate(self.merchant)

        self.assertEqual(self.client.get(reverse("user-list")).status_code, status.HTTP_403_FORBIDDEN)
        me = self.client.get(reverse("user-me"))
        self.assertEqual(me.status_code, status.HTTP_200_OK)
        self.assertEqual(me.data["role"], User.RoleChoices.MERCHANT)

    def test_staff_flag_counts_as_admin(self) -> None:
        self.assertTrue(self.admin.is_admin())
        self.assertFalse(self.merchant.is_admin())
