"""Translations app package: UI strings keyed by language, managed by admins."""
