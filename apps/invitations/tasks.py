"""Celery tasks for invitations."""

from __future__ import annotations

import logging

from celery import shared_task  # type: ignore

from .services import expire_stale

logger = logging.getLogger(__name__)


@shared_task(name="invitations.expire_stale_invitations")
def expire_stale_invitations() -> dict[str, int]:
    """Mark pending invitations past their expiry as expired. Runs hourly."""
    expired = expire_stale()
    if expired:
        logger.info("Expired %s invitations", expired)
    return {"expired": expired}
