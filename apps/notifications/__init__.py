"""Notifications app package.

Composes the transactional emails of the booking lifecycle, delivers them
through Django's mail backend (directly or from Celery tasks) and keeps an
``EmailLog`` row per delivery attempt.
"""
