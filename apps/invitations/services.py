"""Invitation lifecycle: create, resend, accept and expire."""

from __future__ import annotations

import logging
from typing import Any

from django.contrib.auth import get_user_model  # type: ignore
from django.db import transaction  # type: ignore
from django.utils import timezone  # type: ignore

from apps.notifications.services import send_invitation_email

from .models import Invitation, default_expiry, new_token

logger = logging.getLogger(__name__)


class InvitationError(Exception):
    """Raised when an invitation cannot be issued or used."""


class InvitationNotFound(InvitationError):
    pass


def _send(invitation: Invitation) -> None:
    if not send_invitation_email(invitation):
        logger.warning("Invitation email to %s was not delivered", invitation.email)


def create_invitation(email: str, role: str, invited_by) -> Invitation:
    User = get_user_model()
    email = email.lower()
    if User.objects.filter(email__iexact=email).exists():
        raise InvitationError("User with this email already exists.")
    if Invitation.objects.filter(
        email=email,
        status=Invitation.Status.PENDING,
        expires_at__gt=timezone.now(),
    ).exists():
        raise InvitationError("An invitation has already been sent to this email.")

    invitation = Invitation.objects.create(email=email, role=role, invited_by=invited_by)
    logger.info("Invitation %s created for %s as %s", invitation.pk, email, role)
    _send(invitation)
    return invitation


def resend_invitation(invitation: Invitation) -> Invitation:
    if invitation.status == Invitation.Status.ACCEPTED:
        raise InvitationError("Invitation has already been accepted.")
    invitation.token = new_token()
    invitation.expires_at = default_expiry()
    invitation.status = Invitation.Status.PENDING
    invitation.save(update_fields=["token", "expires_at", "status", "updated_at"])
    _send(invitation)
    return invitation


def expire_stale(queryset=None) -> int:
    """Flip pending invitations past their expiry to ``expired``."""

    qs = queryset if queryset is not None else Invitation.objects.all()
    return qs.filter(status=Invitation.Status.PENDING, expires_at__lte=timezone.now()).update(
        status=Invitation.Status.EXPIRED,
        updated_at=timezone.now(),
    )


def accept_invitation(token: str, **profile: Any):
    """Create the invited account. Returns the new user.

    A stale pending invitation is marked expired before the error is raised,
    outside the transaction that creates the account.
    """

    User = get_user_model()
    expire_stale(Invitation.objects.filter(token=token))

    with transaction.atomic():
        invitation = Invitation.objects.select_for_update().filter(token=token).first()
        if invitation is None:
            raise InvitationNotFound("Invitation not found.")
        if invitation.status == Invitation.Status.ACCEPTED:
            raise InvitationError("Invitation has already been accepted.")
        if invitation.status == Invitation.Status.EXPIRED or invitation.is_expired:
            raise InvitationError("Invitation has expired.")
        if User.objects.filter(email__iexact=invitation.email).exists():
            raise InvitationError("User with this email already exists.")

        password = profile.pop("password")
        extra = {"is_staff": True} if invitation.role == Invitation.Role.ADMIN else {}
        user = User.objects.create_user(
            email=invitation.email,
            password=password,
            role=invitation.role,
            is_email_verified=True,
            **profile,
            **extra,
        )
        invitation.status = Invitation.Status.ACCEPTED
        invitation.accepted_at = timezone.now()
        invitation.save(update_fields=["status", "accepted_at", "updated_at"])
    logger.info("Invitation %s accepted, user %s created", invitation.pk, user.pk)
    return user
