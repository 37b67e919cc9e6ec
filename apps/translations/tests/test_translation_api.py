"""Tests for the translations catalogue."""

from __future__ import annotations

from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from apps.translations.models import Translation
from apps.users.models import User


class TranslationAPITests(APITestCase):
    def setUp(self) -> None:
        self.admin = User.objects.create_user(
            email="i18n@example.com",
            password="I18nPass123",
            first_name="Lin",
            last_name="Guist",
            role=User.RoleChoices.ADMIN,
        )
        Translation.objects.create(key="nav.home", translations={"en": "Home", "ar": "الرئيسية"}, category="nav")
        Translation.objects.create(key="cta.book", translations={"en": "Book now"}, category="buttons")

    def test_public_lookup_falls_back_to_english(self) -> None:
        response = self.client.get(reverse("translation-list"), {"language": "ar"})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data, {"cta.book": "Book now", "nav.home": "الرئيسية"})

    def test_public_lookup_by_category(self) -> None:
        response = self.client.get(reverse("translation-list"), {"category": "nav"})

        self.assertEqual(response.data, {"nav.home": "Home"})

    def test_create_requires_admin_and_english(self) -> None:
        payload = {"key": "footer.about", "translations": {"ar": "حول"}, "category": "footer"}

        self.assertEqual(
            self.client.post(reverse("translation-list"), payload, format="json").status_code,
            status.HTTP_401_UNAUTHORIZED,
        )

        self.client.force_authenticate(self.admin)
        missing_en = self.client.post(reverse("translation-list"), payload, format="json")
        self.assertEqual(missing_en.status_code, status.HTTP_400_BAD_REQUEST)

        payload["translations"]["en"] = "About"
        created = self.client.post(reverse("translation-list"), payload, format="json")
        self.assertEqual(created.status_code, status.HTTP_201_CREATED, created.data)

        duplicate = self.client.post(reverse("translation-list"), payload, format="json")
        self.assertEqual(duplicate.status_code, status.HTTP_400_BAD_REQUEST)

    def test_admin_update_and_delete(self) -> None:
        self.client.force_authenticate(self.admin)
        translation = Translation.objects.get(key="cta.book")

        response = self.client.patch(
            reverse("translation-detail", args=[translation.pk]),
            {"translations": {"en": "Book today", "ar": "احجز الآن"}},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        translation.refresh_from_db()
        self.assertEqual(translation.translations["ar"], "احجز الآن")

        response = self.client.delete(reverse("translation-detail", args=[translation.pk]))
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)

    def test_export_language(self) -> None:
        self.client.force_authenticate(self.admin)

        response = self.client.get(reverse("translation-export", kwargs={"language": "ar"}))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["nav.home"], "الرئيسية")
        self.assertIn("translations-ar.json", response["Content-Disposition"])

    def test_import_nested_object(self) -> None:
        self.client.force_authenticate(self.admin)

        response = self.client.post(
            reverse("translation-import-translations"),
            {
                "translations": {
                    "nav.home": {"fr": "Accueil"},
                    "nav.deals": {"en": "Deals", "fr": "Offres"},
                },
                "category": "nav",
            },
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(response.data, {"imported": 1, "updated": 1, "total": 2})
        home = Translation.objects.get(key="nav.home")
        self.assertEqual(home.translations, {"en": "Home", "ar": "الرئيسية", "fr": "Accueil"})
        self.assertEqual(Translation.objects.get(key="nav.deals").category, "nav")

    def test_import_list_and_flat_language(self) -> None:
        self.client.force_authenticate(self.admin)

        listed = self.client.post(
            reverse("translation-import-translations"),
            {"translations": [{"key": "hero.title", "translations": {"en": "Travel more"}, "category": "hero"}]},
            format="json",
        )
        self.assertEqual(listed.data["imported"], 1)

        flat = self.client.post(
            reverse("translation-import-translations"),
            {"translations": {"hero.title": "سافر أكثر"}, "language": "ar"},
            format="json",
        )
        self.assertEqual(flat.data, {"imported": 0, "updated": 1, "total": 1})
        self.assertEqual(Translation.objects.get(key="hero.title").translations["ar"], "سافر أكثر")

    def test_import_rejects_text_without_language(self) -> None:
        self.client.force_authenticate(self.admin)

        response = self.client.post(
            reverse("translation-import-translations"),
            {"translations": {"hero.title": "Text"}},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
