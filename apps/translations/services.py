"""Lookup, export and bulk import of translations."""

from __future__ import annotations

import logging
from typing import Any

from django.db import transaction  # type: ignore

from .models import DEFAULT_LANGUAGE, Translation

logger = logging.getLogger(__name__)


class TranslationImportError(Exception):
    pass


def translations_for(language: str = DEFAULT_LANGUAGE, category: str | None = None) -> dict[str, str]:
    """``{key: text}`` in ``language``, falling back to English per key."""

    qs = Translation.objects.all()
    if category:
        qs = qs.filter(category=category)
    return {translation.key: translation.text(language) for translation in qs}


def _normalise(payload: Any, language: str | None) -> list[tuple[str, dict[str, str], str | None]]:
    if isinstance(payload, list):
        rows = []
        for item in payload:
            if not isinstance(item, dict) or not item.get("key") or not isinstance(item.get("translations"), dict):
                raise TranslationImportError("Each item needs a key and a translations object.")
            rows.append((item["key"], item["translations"], item.get("category")))
        return rows
    if isinstance(payload, dict):
        rows = []
        for key, value in payload.items():
            if isinstance(value, dict):
                rows.append((key, value, None))
            elif isinstance(value, str) and language:
                rows.append((key, {language: value}, None))
            else:
                raise TranslationImportError(
                    f"Translation for {key!r} must be an object of languages, or text with a language."
                )
        return rows
    raise TranslationImportError("Translations must be an object or a list.")


@transaction.atomic
def import_translations(
    payload: Any,
    *,
    language: str | None = None,
    category: str = "general",
) -> dict[str, int]:
    """Merge translations into the catalogue.

    Accepts ``{key: {lang: text}}``, ``{key: text}`` together with a
    language, or a list of ``{key, translations, category}`` items. Existing
    keys keep their other languages.
    """

    imported = updated = 0
    for key, texts, row_category in _normalise(payload, language):
        translation = Translation.objects.filter(key=key).first()
        if translation is None:
            texts = dict(texts)
            texts.setdefault(DEFAULT_LANGUAGE, "")
            Translation.objects.create(key=key, translations=texts, category=row_category or category)
            imported += 1
        else:
            translation.translations = {**translation.translations, **texts}
            if row_category:
                translation.category = row_category
            translation.save(update_fields=["translations", "category", "updated_at"])
            updated += 1

    logger.info("Translations imported: %s new, %s updated", imported, updated)
    return {"imported": imported, "updated": updated, "total": imported + updated}
