"""Domain services for affiliate codes, referrals, commissions and payouts."""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import TYPE_CHECKING, Any

from django.conf import settings  # type: ignore
from django.contrib.auth import get_user_model  # type: ignore
from django.db import transaction  # type: ignore
from django.db.models import Count, F, Q, Sum  # type: ignore
from django.utils import timezone  # type: ignore

from .models import AffiliateCode, Commission, Withdrawal

if TYPE_CHECKING:  # pragma: no cover - type checking only
    from apps.bookings.models import Booking

logger = logging.getLogger(__name__)


class AffiliateError(Exception):
    """Raised when an affiliate operation violates a business rule."""


def unique_code(prefix: str | None = None) -> str:
    code = AffiliateCode.generate_code(prefix)
    while AffiliateCode.objects.filter(code=code).exists():
        code = AffiliateCode.generate_code(prefix)
    return code


def find_active_code(code: str) -> AffiliateCode | None:
    if not code:
        return None
    return (
        AffiliateCode.objects.select_related("affiliate")
        .filter(code=code.strip().upper(), is_active=True)
        .first()
    )


# ---------------------------------------------------------------------------
# Referrals
# ---------------------------------------------------------------------------

@transaction.atomic
def apply_referral_code(user, code: str) -> Decimal:
    """Attach a sign-up referral to ``user`` and return the granted discount."""

    referral = find_active_code(code)
    if referral is None or not referral.can_share_referral:
        raise AffiliateError("Invalid or inactive referral code.")
    if referral.affiliate_id == user.pk:
        raise AffiliateError("You cannot use your own referral code.")

    discount = referral.referral_discount()
    user.referred_by = referral.affiliate
    user.referral_code = referral.code
    user.discount_amount = discount
    user.save(update_fields=["referred_by", "referral_code", "discount_amount"])

    AffiliateCode.objects.filter(pk=referral.pk).update(referral_count=F("referral_count") + 1)
    logger.info("User %s referred by code %s (discount %s)", user.pk, referral.code, discount)
    return discount


def issue_shareable_code(user) -> AffiliateCode:
    """Every account gets its own code to invite friends with."""

    code = AffiliateCode.objects.create(
        affiliate=user,
        code=unique_code((user.first_name or "")[:3] or None),
        commission_rate=Decimal("10.00"),
        commission_type=AffiliateCode.CommissionType.PERCENTAGE,
        can_share_referral=True,
        discount_percentage=Decimal("10.00"),
        is_active=True,
    )
    logger.info("Referral code %s created for user %s", code.code, user.pk)
    return code


def shareable_code_for(user) -> AffiliateCode | None:
    return (
        AffiliateCode.objects.filter(affiliate=user, can_share_referral=True)
        .order_by("created_at")
        .first()
    )


# ---------------------------------------------------------------------------
# Affiliate registration and codes
# ---------------------------------------------------------------------------

@transaction.atomic
def register_affiliate(user) -> AffiliateCode:
    User = get_user_model()
    if user.role == User.RoleChoices.AFFILIATE:
        raise AffiliateError("You are already registered as an affiliate.")
    if user.is_admin():
        raise AffiliateError("Admins cannot register as affiliates.")

    user.role = User.RoleChoices.AFFILIATE
    user.save(update_fields=["role"])
    return AffiliateCode.objects.create(
        affiliate=user,
        code=unique_code((user.first_name or "")[:10] or None),
        commission_rate=Decimal("10.00"),
        commission_type=AffiliateCode.CommissionType.PERCENTAGE,
    )


@transaction.atomic
def generate_affiliate_code(user, prefix: str | None = None) -> AffiliateCode:
    limit = settings.MAX_AFFILIATE_CODES
    if AffiliateCode.objects.filter(affiliate=user).count() >= limit:
        raise AffiliateError(f"Maximum number of affiliate codes reached ({limit}).")
    return AffiliateCode.objects.create(
        affiliate=user,
        code=unique_code(prefix),
        commission_rate=Decimal("10.00"),
        commission_type=AffiliateCode.CommissionType.PERCENTAGE,
    )


def validate_code(code: str) -> dict[str, Any]:
    """Public lookup used by the checkout and sign-up forms."""

    affiliate_code = find_active_code(code)
    if affiliate_code is None:
        raise AffiliateError("Invalid or inactive affiliate code.")
    can_refer = affiliate_code.can_share_referral
    return {
        "code": affiliate_code.code,
        "affiliate_name": affiliate_code.affiliate.first_name,
        "is_valid": True,
        "can_use_for_referral": can_refer,
        "discount_amount": affiliate_code.referral_discount() if can_refer else Decimal("0.00"),
    }


# ---------------------------------------------------------------------------
# Commissions
# ---------------------------------------------------------------------------

def _create_commission(booking: "Booking", code: AffiliateCode, kind: str) -> Commission:
    amount = booking.deposit_amount
    commission_amount = code.calculate_commission(amount)
    commission = Commission.objects.create(
        affiliate=code.affiliate,
        booking=booking,
        affiliate_code=code.code,
        booking_amount=amount,
        commission_amount=commission_amount,
        commission_rate=code.commission_rate,
        status=Commission.Status.PENDING,
        kind=kind,
    )
    AffiliateCode.objects.filter(pk=code.pk).update(
        usage_count=F("usage_count") + 1,
        total_earnings=F("total_earnings") + commission_amount,
    )
    logger.info(
        "Commission %s (%s) created for code %s on booking %s",
        commission_amount,
        kind,
        code.code,
        booking.booking_reference,
    )
    return commission


def process_affiliate_commission(booking: "Booking") -> Commission | None:
    """Record the commission earned on a paid booking.

    An explicit affiliate code on the booking wins; otherwise the code the
    booking user signed up with earns a referral commission. Failures are
    logged and never propagate to the payment flow.
    """

    try:
        with transaction.atomic():
            if Commission.objects.filter(booking=booking).exists():
                return None

            if booking.affiliate_code:
                code = find_active_code(booking.affiliate_code)
                if code is None:
                    logger.warning("Affiliate code %s not found or inactive", booking.affiliate_code)
                    return None
                return _create_commission(booking, code, Commission.Kind.AFFILIATE)

            user = booking.user
            if user.referred_by_id and user.referral_code:
                code = find_active_code(user.referral_code)
                if code is not None and code.affiliate_id != user.pk:
                    return _create_commission(booking, code, Commission.Kind.REFERRAL)
    except Exception:
        logger.exception("Failed to process affiliate commission for booking %s", booking.pk)
    return None


def commission_totals(user) -> dict[str, Any]:
    """Totals by commission status; pending and approved both count as pending earnings."""

    rows = (
        Commission.objects.filter(affiliate=user)
        .values("status")
        .annotate(total=Sum("commission_amount"), count=Count("id"))
    )
    totals = {
        "total_bookings": 0,
        "total_earnings": Decimal("0.00"),
        "pending_earnings": Decimal("0.00"),
        "paid_earnings": Decimal("0.00"),
    }
    for row in rows:
        total = row["total"] or Decimal("0.00")
        totals["total_bookings"] += row["count"]
        totals["total_earnings"] += total
        if row["status"] in (Commission.Status.PENDING, Commission.Status.APPROVED):
            totals["pending_earnings"] += total
        elif row["status"] == Commission.Status.PAID:
            totals["paid_earnings"] += total
    return totals


@transaction.atomic
def approve_commission(commission: Commission) -> Commission:
    if commission.status != Commission.Status.PENDING:
        raise AffiliateError("Only pending commissions can be approved.")
    commission.approve()
    return commission


@transaction.atomic
def pay_commission(commission: Commission, payment_reference: str = "") -> Commission:
    if commission.status == Commission.Status.PAID:
        raise AffiliateError("Commission is already paid.")
    commission.mark_paid(payment_reference)
    return commission


@transaction.atomic
def set_commission_status(commission: Commission, new_status: str, payment_reference: str = "") -> Commission:
    if new_status not in Commission.Status.values:
        raise AffiliateError("Invalid commission status.")
    if new_status == Commission.Status.PAID:
        commission.mark_paid(payment_reference)
        return commission
    commission.status = new_status
    commission.paid_at = None
    commission.save(update_fields=["status", "paid_at", "updated_at"])
    return commission


# ---------------------------------------------------------------------------
# Withdrawals
# ---------------------------------------------------------------------------

def withdrawable_commissions(user):
    """Approved, unpaid commissions not reserved by another withdrawal."""

    reserved = Q(withdrawals__status__in=[*Withdrawal.OPEN_STATUSES, Withdrawal.Status.COMPLETED])
    return (
        Commission.objects.filter(affiliate=user, status=Commission.Status.APPROVED)
        .exclude(reserved)
        .order_by("created_at")
    )


def available_balance(user) -> Decimal:
    total = withdrawable_commissions(user).aggregate(total=Sum("commission_amount"))["total"]
    return total or Decimal("0.00")


@transaction.atomic
def request_withdrawal(
    user,
    amount: Decimal,
    payment_method: str,
    payment_details: dict[str, Any] | None = None,
    currency: str | None = None,
) -> Withdrawal:
    amount = Decimal(amount)
    if amount <= 0:
        raise AffiliateError("Withdrawal amount must be positive.")

    balance = available_balance(user)
    if amount > balance:
        raise AffiliateError(f"Insufficient balance. Available: {balance}.")

    # commissions are paid out whole, oldest first
    covered = Decimal("0.00")
    reserved = []
    for commission in withdrawable_commissions(user):
        if covered + commission.commission_amount <= amount:
            reserved.append(commission)
            covered += commission.commission_amount
    if covered != amount:
        raise AffiliateError(
            "Withdrawal amount must match whole approved commissions. "
            f"Closest amount available: {covered}."
        )

    withdrawal = Withdrawal.objects.create(
        affiliate=user,
        amount=amount,
        currency=currency or settings.DEFAULT_CURRENCY,
        payment_method=payment_method,
        payment_details=payment_details or {},
    )
    withdrawal.commissions.set(reserved)

    logger.info("Withdrawal %s of %s requested by %s", withdrawal.pk, amount, user.pk)
    return withdrawal


@transaction.atomic
def process_withdrawal(
    withdrawal: Withdrawal,
    admin,
    payment_reference: str = "",
    admin_notes: str = "",
) -> Withdrawal:
    if withdrawal.status not in Withdrawal.OPEN_STATUSES:
        raise AffiliateError("Only pending withdrawals can be processed.")

    now = timezone.now()
    withdrawal.status = Withdrawal.Status.COMPLETED
    withdrawal.processed_at = now
    withdrawal.processed_by = admin
    withdrawal.payment_reference = payment_reference
    if admin_notes:
        withdrawal.admin_notes = admin_notes
    withdrawal.save()

    withdrawal.commissions.update(
        status=Commission.Status.PAID,
        paid_at=now,
        payment_reference=payment_reference,
    )
    logger.info("Withdrawal %s completed by %s", withdrawal.pk, admin.pk)
    return withdrawal


@transaction.atomic
def reject_withdrawal(withdrawal: Withdrawal, admin, reason: str) -> Withdrawal:
    if not reason:
        raise AffiliateError("Rejection reason is required.")
    if withdrawal.status not in Withdrawal.OPEN_STATUSES:
        raise AffiliateError("Only pending withdrawals can be rejected.")

    withdrawal.status = Withdrawal.Status.REJECTED
    withdrawal.rejection_reason = reason
    withdrawal.processed_at = timezone.now()
    withdrawal.processed_by = admin
    withdrawal.save()
    # rejected requests release their commissions
    withdrawal.commissions.clear()
    return withdrawal


# ---------------------------------------------------------------------------
# Reports
# ---------------------------------------------------------------------------

def affiliate_report(
    *,
    start_date=None,
    end_date=None,
    affiliate_id=None,
    status: str | None = None,
) -> list[dict[str, Any]]:
    qs = Commission.objects.select_related("affiliate", "booking")
    if start_date:
        qs = qs.filter(created_at__date__gte=start_date)
    if end_date:
        qs = qs.filter(created_at__date__lte=end_date)
    if affiliate_id:
        qs = qs.filter(affiliate_id=affiliate_id)
    if status:
        qs = qs.filter(status=status)

    return [
        {
            "affiliate_name": c.affiliate.full_name,
            "affiliate_email": c.affiliate.email,
            "code": c.affiliate_code,
            "booking_reference": c.booking.booking_reference,
            "booking_amount": c.booking_amount,
            "commission_amount": c.commission_amount,
            "commission_status": c.status,
            "kind": c.kind,
            "created_at": c.created_at,
        }
        for c in qs
    ]
