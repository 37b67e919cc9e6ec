"""Transactional email composition and delivery."""

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import TYPE_CHECKING, Iterable

from django.conf import settings  # type: ignore
from django.contrib.auth import get_user_model  # type: ignore
from django.core.mail import send_mail  # type: ignore
from django.db.models import Q  # type: ignore
from django.utils import timezone  # type: ignore
from django.utils.html import format_html, strip_tags  # type: ignore

from .models import EmailLog

if TYPE_CHECKING:  # pragma: no cover
    from apps.activities.models import Activity, ActivityInquiry
    from apps.bookings.models import Booking
    from apps.invitations.models import Invitation
    from apps.users.models import CustomUser

logger = logging.getLogger(__name__)

BRAND = "Triply"


def send_email_notification(
    recipient_email: str,
    subject: str,
    html_message: str,
    *,
    email_type: str,
    user: "CustomUser | None" = None,
) -> bool:
    """Send one HTML email and record the attempt in ``EmailLog``.

    Delivery failures are logged and reported through the return value;
    they never propagate to the caller.
    """

    log = EmailLog.objects.create(
        user=user,
        email_type=email_type,
        recipient=recipient_email,
        subject=subject,
    )
    try:
        send_mail(
            subject=subject,
            message=strip_tags(html_message),
            from_email=settings.DEFAULT_FROM_EMAIL,
            recipient_list=[recipient_email],
            html_message=html_message,
            fail_silently=False,
        )
    except Exception as exc:
        logger.error("Failed to send email to %s: %s", recipient_email, exc, exc_info=True)
        log.status = EmailLog.Status.FAILED
        log.error_message = str(exc)
        log.save(update_fields=["status", "error_message"])
        return False

    log.status = EmailLog.Status.SENT
    log.sent_at = timezone.now()
    log.save(update_fields=["status", "sent_at"])
    logger.info("Email sent to %s: %s", recipient_email, subject)
    return True


def _wrap(title: str, body: str) -> str:
    """Frame an already escaped body; the title is escaped here."""

    return format_html(
        "<html><body><h2>{}</h2>{}<p>{} - Your Travel Partner</p></body></html>",
        title,
        body,
        BRAND,
    )


def _format_date(value: date | datetime | None) -> str:
    if value is None:
        return "-"
    return value.strftime("%d %b %Y")


def _admin_recipients() -> list[str]:
    User = get_user_model()
    emails = list(
        User.objects.filter(
            Q(role=User.RoleChoices.ADMIN) | Q(is_staff=True),
            is_active=True,
        ).values_list("email", flat=True)
    )
    fallback = getattr(settings, "ADMIN_NOTIFICATION_EMAIL", "")
    if fallback and fallback not in emails:
        emails.append(fallback)
    return emails


# ----------------------------------------------------------------------------
# Account emails
# ----------------------------------------------------------------------------

def send_email_verification(user: "CustomUser", token: str) -> bool:
    link = f"{settings.FRONTEND_URL}/verify-email?token={token}"
    html = _wrap(
        "Verify Your Email",
        format_html(
            "<p>Dear {},</p>"
            "<p>Welcome to {}! Please confirm your email address.</p>"
            '<p><a href="{}">Verify email</a></p>'
            "<p>This link expires in {} hours.</p>",
            user.first_name,
            BRAND,
            link,
            settings.EMAIL_VERIFICATION_EXPIRE_HOURS,
        ),
    )
    return send_email_notification(
        user.email,
        "Verify Your Email",
        html,
        email_type=EmailLog.EmailType.EMAIL_VERIFICATION,
        user=user,
    )


def send_password_reset_email(user: "CustomUser", token: str) -> bool:
    link = f"{settings.FRONTEND_URL}/reset-password?token={token}"
    html = _wrap(
        "Reset Your Password",
        format_html(
            "<p>Dear {},</p>"
            "<p>We received a request to reset your password.</p>"
            '<p><a href="{}">Choose a new password</a></p>'
            "<p>The link is valid for {} hour(s). "
            "If you did not request it, ignore this email.</p>",
            user.first_name,
            link,
            settings.PASSWORD_RESET_EXPIRE_HOURS,
        ),
    )
    return send_email_notification(
        user.email,
        "Reset Your Password",
        html,
        email_type=EmailLog.EmailType.PASSWORD_RESET,
        user=user,
    )


# ----------------------------------------------------------------------------
# Booking lifecycle emails
# ----------------------------------------------------------------------------

def send_deposit_confirmation(booking: "Booking") -> bool:
    user = booking.user
    html = _wrap(
        "Deposit Confirmed!",
        format_html(
            "<p>Dear {},</p>"
            "<p>Thank you for your deposit! Your booking is now secured.</p>"
            "<ul>"
            "<li><strong>Booking Reference:</strong> {}</li>"
            "<li><strong>Destination:</strong> {}</li>"
            "<li><strong>Deposit Amount:</strong> {} {}</li>"
            "</ul>"
            "<p>Your calendar is unlocked until {}. "
            "You can select your travel dates at any time.</p>"
            '<p><a href="{}/bookings">Select your dates</a></p>',
            user.first_name,
            booking.booking_reference,
            booking.destination.name_en,
            booking.deposit_currency,
            booking.deposit_amount,
            _format_date(booking.calendar_unlocked_until),
            settings.FRONTEND_URL,
        ),
    )
    return send_email_notification(
        user.email,
        f"Deposit Confirmed - {booking.booking_reference}",
        html,
        email_type=EmailLog.EmailType.DEPOSIT_CONFIRMATION,
        user=user,
    )


def send_booking_confirmation(booking: "Booking") -> bool:
    user = booking.user
    html = _wrap(
        "Your Trip is Confirmed!",
        format_html(
            "<p>Dear {},</p>"
            "<ul>"
            "<li><strong>Booking Reference:</strong> {}</li>"
            "<li><strong>Destination:</strong> {}</li>"
            "<li><strong>Travel Dates:</strong> {} - {}</li>"
            "</ul>"
            "<p>Our team will contact you with the final itinerary.</p>",
            user.first_name,
            booking.booking_reference,
            booking.destination.name_en,
            _format_date(booking.start_date),
            _format_date(booking.end_date),
        ),
    )
    return send_email_notification(
        user.email,
        f"Booking Confirmed - {booking.booking_reference}",
        html,
        email_type=EmailLog.EmailType.BOOKING_CONFIRMED,
        user=user,
    )


def send_booking_rejection(booking: "Booking", reason: str = "") -> bool:
    user = booking.user
    reason_html = format_html("<p><strong>Reason:</strong> {}</p>", reason) if reason else ""
    html = _wrap(
        "Booking Update",
        format_html(
            "<p>Dear {},</p>"
            "<p>Unfortunately we could not confirm booking {} for {}.</p>"
            "{}"
            "<p>Your deposit will be refunded to your original payment method within 5-7 business days.</p>",
            user.first_name,
            booking.booking_reference,
            booking.destination.name_en,
            reason_html,
        ),
    )
    return send_email_notification(
        user.email,
        f"Booking Update - {booking.booking_reference}",
        html,
        email_type=EmailLog.EmailType.BOOKING_REJECTED,
        user=user,
    )


def send_dates_selected_to_user(booking: "Booking") -> bool:
    user = booking.user
    flexible = " (flexible)" if booking.is_flexible else ""
    html = _wrap(
        "Travel Dates Received",
        format_html(
            "<p>Dear {},</p>"
            "<p>We received your travel dates for {}: {} - {}{}.</p>"
            "<p>Our team will review availability and confirm shortly.</p>",
            user.first_name,
            booking.destination.name_en,
            _format_date(booking.start_date),
            _format_date(booking.end_date),
            flexible,
        ),
    )
    return send_email_notification(
        user.email,
        f"Travel Dates Selected - {booking.booking_reference}",
        html,
        email_type=EmailLog.EmailType.DATES_SELECTED,
        user=user,
    )


def send_dates_selected_to_admins(booking: "Booking") -> int:
    html = _wrap(
        "Dates Selected - Action Required",
        format_html(
            "<ul>"
            "<li><strong>Booking Reference:</strong> {}</li>"
            "<li><strong>Customer:</strong> {} ({})</li>"
            "<li><strong>Destination:</strong> {}</li>"
            "<li><strong>Dates:</strong> {} - {}</li>"
            "<li><strong>Flexible:</strong> {}</li>"
            "<li><strong>Travellers:</strong> {}</li>"
            "</ul>",
            booking.booking_reference,
            booking.user.full_name,
            booking.user.email,
            booking.destination.name_en,
            _format_date(booking.start_date),
            _format_date(booking.end_date),
            "yes" if booking.is_flexible else "no",
            booking.number_of_travellers,
        ),
    )
    subject = f"Travel Dates Selected - {booking.booking_reference}"
    return _send_many(_admin_recipients(), subject, html, EmailLog.EmailType.DATES_SELECTED)


def send_calendar_expiry_reminder(booking: "Booking") -> bool:
    user = booking.user
    html = _wrap(
        "Calendar Access Expiring Soon",
        format_html(
            "<p>Dear {},</p>"
            "<p>Your calendar access for booking {} ({}) expires on {}.</p>"
            "<p>You have <strong>30 days</strong> remaining to select your travel dates.</p>"
            '<p><a href="{}/bookings">Select your dates</a></p>',
            user.first_name,
            booking.booking_reference,
            booking.destination.name_en,
            _format_date(booking.calendar_unlocked_until),
            settings.FRONTEND_URL,
        ),
    )
    return send_email_notification(
        user.email,
        f"Calendar Access Expiring Soon - {booking.booking_reference}",
        html,
        email_type=EmailLog.EmailType.CALENDAR_EXPIRING,
        user=user,
    )


# ----------------------------------------------------------------------------
# Activities and invitations
# ----------------------------------------------------------------------------

def send_activity_inquiry_emails(activity: "Activity", inquiry: "ActivityInquiry") -> int:
    """Notify the merchant, every admin and the customer of a new inquiry."""

    message = format_html("<li><strong>Message:</strong> {}</li>", inquiry.message) if inquiry.message else ""
    customer_block = format_html(
        "<ul>"
        "<li><strong>Name:</strong> {}</li>"
        "<li><strong>Email:</strong> {}</li>"
        "<li><strong>Phone:</strong> {}</li>"
        "<li><strong>Preferred Date:</strong> {}</li>"
        "{}"
        "</ul>",
        inquiry.customer_name,
        inquiry.customer_email,
        inquiry.customer_phone,
        _format_date(inquiry.preferred_date),
        message,
    )
    sent = 0
    merchant_html = _wrap(
        "New Activity Inquiry",
        format_html(
            "<p>You have received a new inquiry for <strong>{}</strong>.</p>"
            "{}"
            "<p>Please contact the customer to confirm the booking.</p>",
            activity.title,
            customer_block,
        ),
    )
    if send_email_notification(
        activity.merchant.email,
        f"New Inquiry for {activity.title}",
        merchant_html,
        email_type=EmailLog.EmailType.ACTIVITY_INQUIRY,
        user=activity.merchant,
    ):
        sent += 1

    admin_html = _wrap(
        "New Activity Inquiry Notification",
        format_html(
            "<p>Activity: <strong>{}</strong> ({}, {} {}), merchant {}.</p>{}",
            activity.title,
            activity.location,
            activity.currency,
            activity.price,
            activity.merchant.full_name,
            customer_block,
        ),
    )
    sent += _send_many(
        _admin_recipients(),
        f"New Activity Inquiry - {activity.title}",
        admin_html,
        EmailLog.EmailType.ACTIVITY_INQUIRY,
    )

    customer_html = _wrap(
        "Thank you for your inquiry!",
        format_html(
            "<p>We have received your inquiry for <strong>{}</strong> in {} on {}.</p>"
            "<p>The activity operator will contact you shortly to confirm your booking.</p>",
            activity.title,
            activity.location,
            _format_date(inquiry.preferred_date),
        ),
    )
    if send_email_notification(
        inquiry.customer_email,
        f"Inquiry Confirmation - {activity.title}",
        customer_html,
        email_type=EmailLog.EmailType.ACTIVITY_INQUIRY,
    ):
        sent += 1
    return sent


def send_invitation_email(invitation: "Invitation") -> bool:
    role = invitation.get_role_display()
    link = f"{settings.FRONTEND_URL}/accept-invitation?token={invitation.token}"
    inviter = invitation.invited_by.full_name if invitation.invited_by else BRAND
    html = _wrap(
        f"You're invited to join {BRAND}",
        format_html(
            "<p>{} invited you to join {} as <strong>{}</strong>.</p>"
            '<p><a href="{}">Accept invitation</a></p>'
            "<p>This invitation expires on {}.</p>",
            inviter,
            BRAND,
            role,
            link,
            _format_date(invitation.expires_at),
        ),
    )
    return send_email_notification(
        invitation.email,
        f"Invitation to Join as {role}",
        html,
        email_type=EmailLog.EmailType.INVITATION,
    )


def _send_many(recipients: Iterable[str], subject: str, html: str, email_type: str) -> int:
    return sum(
        1 for recipient in recipients if send_email_notification(recipient, subject, html, email_type=email_type)
    )
