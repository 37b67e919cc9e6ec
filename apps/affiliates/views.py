"""API views for affiliates, referrals, commissions and withdrawals."""

from __future__ import annotations

import logging
from decimal import Decimal

from django.contrib.auth import get_user_model  # type: ignore
from django.db.models import Count, Sum  # type: ignore
from django.shortcuts import get_object_or_404  # type: ignore
from rest_framework import permissions, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.exceptions import NotFound  # type: ignore
from rest_framework.response import Response  # type: ignore

from apps.bookings.models import Booking
from apps.bookings.serializers import BookingSummarySerializer
from apps.users.permissions import IsAdmin, IsAffiliate
from apps.users.serializers import UserShortSerializer
from config.exceptions import BadRequest

from . import services
from .models import AffiliateCode, Commission, Withdrawal
from .serializers import (
    AffiliateCodeAdminUpdateSerializer,
    AffiliateCodeSerializer,
    CommissionPaySerializer,
    CommissionSerializer,
    CommissionStatusSerializer,
    GenerateCodeSerializer,
    ReferralSharingSerializer,
    ToggleActiveSerializer,
    WithdrawalProcessSerializer,
    WithdrawalRejectSerializer,
    WithdrawalRequestSerializer,
    WithdrawalSerializer,
)

logger = logging.getLogger(__name__)
User = get_user_model()


def _bad_request(exc: Exception) -> BadRequest:
    return BadRequest(str(exc))


class AffiliateViewSet(viewsets.GenericViewSet):
    """Self-service endpoints for affiliates and for users sharing referral codes.

    Affiliate-only actions are gated by ``IsAffiliate``; the referral actions
    only need an authenticated user because every account owns a shareable
    code. ``validate`` is public.
    """

    queryset = AffiliateCode.objects.all()
    serializer_class = AffiliateCodeSerializer

    affiliate_actions = {
        "dashboard",
        "my_codes",
        "generate_code",
        "bookings",
        "referral_bookings",
        "commissions",
        "withdrawals",
    }

    def get_permissions(self):  # type: ignore
        if self.action == "validate":
            return [permissions.AllowAny()]
        if self.action in self.affiliate_actions:
            return [IsAffiliate()]
        return [permissions.IsAuthenticated()]

    def _paginated(self, queryset, serializer_class):
        page = self.paginate_queryset(queryset)
        if page is not None:
            return self.get_paginated_response(serializer_class(page, many=True).data)
        return Response(serializer_class(queryset, many=True).data)

    @action(detail=False, methods=["post"])
    def register(self, request):
        try:
            code = services.register_affiliate(request.user)
        except services.AffiliateError as exc:
            raise _bad_request(exc) from exc
        return Response(
            {"affiliate_code": code.code, "commission_rate": code.commission_rate},
            status=status.HTTP_201_CREATED,
        )

    @action(detail=False, methods=["get"])
    def dashboard(self, request):
        user = request.user
        codes = AffiliateCode.objects.filter(affiliate=user)
        recent = Booking.objects.filter(affiliate=user).select_related("destination")[:5]
        return Response(
            {
                "stats": services.commission_totals(user),
                "available_balance": services.available_balance(user),
                "codes": AffiliateCodeSerializer(codes, many=True).data,
                "recent_bookings": BookingSummarySerializer(recent, many=True).data,
            }
        )

    @action(detail=False, methods=["get"], url_path="my-codes")
    def my_codes(self, request):
        codes = AffiliateCode.objects.filter(affiliate=request.user)
        return Response(AffiliateCodeSerializer(codes, many=True).data)

    @action(detail=False, methods=["post"], url_path="generate-code")
    def generate_code(self, request):
        serializer = GenerateCodeSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            code = services.generate_affiliate_code(request.user, serializer.validated_data.get("prefix") or None)
        except services.AffiliateError as exc:
            raise _bad_request(exc) from exc
        return Response(AffiliateCodeSerializer(code).data, status=status.HTTP_201_CREATED)

    @action(detail=False, methods=["get"], url_path=r"validate/(?P<code>[^/]+)")
    def validate(self, request, code=None):
        try:
            data = services.validate_code(code or "")
        except services.AffiliateError as exc:
            raise NotFound(str(exc)) from exc
        return Response(data)

    @action(detail=False, methods=["get"])
    def bookings(self, request):
        qs = Booking.objects.filter(affiliate=request.user).select_related("destination")
        return self._paginated(qs, BookingSummarySerializer)

    @action(detail=False, methods=["get"], url_path="referral-bookings")
    def referral_bookings(self, request):
        qs = Booking.objects.filter(
            user__referred_by=request.user,
            commissions__kind=Commission.Kind.REFERRAL,
        ).select_related("destination").distinct()
        return self._paginated(qs, BookingSummarySerializer)

    @action(detail=False, methods=["get"])
    def commissions(self, request):
        qs = Commission.objects.filter(affiliate=request.user).select_related("booking", "affiliate")
        status_filter = request.query_params.get("status")
        if status_filter:
            qs = qs.filter(status=status_filter)
        return self._paginated(qs, CommissionSerializer)

    @action(detail=False, methods=["get"], url_path="my-referral")
    def my_referral(self, request):
        code = services.shareable_code_for(request.user)
        if code is None:
            raise NotFound("No referral code found.")
        return Response(AffiliateCodeSerializer(code).data)

    @action(detail=False, methods=["get"], url_path="my-referrals")
    def my_referrals(self, request):
        qs = User.objects.filter(referred_by=request.user).order_by("-created_at")
        return self._paginated(qs, UserShortSerializer)

    @action(detail=False, methods=["get"], url_path="my-referral-commissions")
    def my_referral_commissions(self, request):
        qs = Commission.objects.filter(
            affiliate=request.user,
            kind=Commission.Kind.REFERRAL,
        ).select_related("booking", "affiliate")
        return self._paginated(qs, CommissionSerializer)

    @action(detail=False, methods=["get", "post"])
    def withdrawals(self, request):
        if request.method == "GET":
            qs = Withdrawal.objects.filter(affiliate=request.user).prefetch_related("commissions")
            return self._paginated(qs, WithdrawalSerializer)

        serializer = WithdrawalRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            withdrawal = services.request_withdrawal(request.user, **serializer.validated_data)
        except services.AffiliateError as exc:
            raise _bad_request(exc) from exc
        return Response(WithdrawalSerializer(withdrawal).data, status=status.HTTP_201_CREATED)


class AdminAffiliateViewSet(viewsets.GenericViewSet):
    """Administrator management of affiliate users and their codes."""

    queryset = AffiliateCode.objects.select_related("affiliate").all()
    serializer_class = AffiliateCodeSerializer
    permission_classes = [IsAdmin]

    @action(detail=False, methods=["get"], url_path="all")
    def list_all(self, request):
        affiliates = (
            User.objects.filter(role=User.RoleChoices.AFFILIATE)
            .annotate(
                total_earnings=Sum("affiliate_codes__total_earnings"),
                total_usage=Sum("affiliate_codes__usage_count"),
                codes_count=Count("affiliate_codes"),
            )
            .order_by("-created_at")
        )
        page = self.paginate_queryset(affiliates)
        rows = page if page is not None else affiliates
        data = [
            {
                **UserShortSerializer(affiliate).data,
                "codes": AffiliateCodeSerializer(affiliate.affiliate_codes.all(), many=True).data,
                "total_earnings": affiliate.total_earnings or Decimal("0.00"),
                "total_usage": affiliate.total_usage or 0,
            }
            for affiliate in rows
        ]
        if page is not None:
            return self.get_paginated_response(data)
        return Response(data)

    @action(detail=True, methods=["put", "patch"], url_path="commission-rate")
    def commission_rate(self, request, pk=None):
        code = self.get_object()
        serializer = AffiliateCodeAdminUpdateSerializer(code, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        serializer.save()
        logger.info("Commission settings of %s updated by %s", code.code, request.user.pk)
        return Response(AffiliateCodeSerializer(code).data)

    @action(detail=True, methods=["put", "patch"])
    def activate(self, request, pk=None):
        code = self.get_object()
        serializer = ToggleActiveSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        code.is_active = serializer.validated_data["is_active"]
        code.save(update_fields=["is_active", "updated_at"])
        return Response(AffiliateCodeSerializer(code).data)

    @action(detail=True, methods=["put", "patch"], url_path="enable-referral")
    def enable_referral(self, request, pk=None):
        code = self.get_object()
        serializer = ReferralSharingSerializer(code, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        serializer.save()
        return Response(AffiliateCodeSerializer(code).data)

    @action(detail=False, methods=["get"])
    def export(self, request):
        params = request.query_params
        rows = services.affiliate_report(
            start_date=params.get("start_date"),
            end_date=params.get("end_date"),
            affiliate_id=params.get("affiliate"),
            status=params.get("status"),
        )
        return Response({"count": len(rows), "results": rows})


class AdminCommissionViewSet(viewsets.ReadOnlyModelViewSet):
    queryset = Commission.objects.select_related("affiliate", "booking").all()
    serializer_class = CommissionSerializer
    permission_classes = [IsAdmin]

    def get_queryset(self):  # type: ignore
        qs = super().get_queryset()
        status_filter = self.request.query_params.get("status")
        if status_filter:
            qs = qs.filter(status=status_filter)
        return qs

    @action(detail=True, methods=["put", "post"])
    def approve(self, request, pk=None):
        commission = self.get_object()
        try:
            services.approve_commission(commission)
        except services.AffiliateError as exc:
            raise _bad_request(exc) from exc
        return Response(CommissionSerializer(commission).data)

    @action(detail=True, methods=["put", "post"])
    def pay(self, request, pk=None):
        commission = self.get_object()
        serializer = CommissionPaySerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            services.pay_commission(commission, serializer.validated_data.get("payment_reference", ""))
        except services.AffiliateError as exc:
            raise _bad_request(exc) from exc
        return Response(CommissionSerializer(commission).data)

    @action(detail=True, methods=["put", "patch"], url_path="status")
    def set_status(self, request, pk=None):
        commission = self.get_object()
        serializer = CommissionStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        services.set_commission_status(
            commission,
            serializer.validated_data["status"],
            serializer.validated_data.get("payment_reference", ""),
        )
        return Response(CommissionSerializer(commission).data)


class AdminWithdrawalViewSet(viewsets.ReadOnlyModelViewSet):
    queryset = Withdrawal.objects.select_related("affiliate", "processed_by").prefetch_related("commissions")
    serializer_class = WithdrawalSerializer
    permission_classes = [IsAdmin]

    def get_queryset(self):  # type: ignore
        qs = super().get_queryset()
        status_filter = self.request.query_params.get("status")
        if status_filter:
            qs = qs.filter(status=status_filter)
        return qs

    @action(detail=True, methods=["put", "post"])
    def process(self, request, pk=None):
        withdrawal = get_object_or_404(Withdrawal, pk=pk)
        serializer = WithdrawalProcessSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            services.process_withdrawal(withdrawal, request.user, **serializer.validated_data)
        except services.AffiliateError as exc:
            raise _bad_request(exc) from exc
        return Response(WithdrawalSerializer(withdrawal).data)

    @action(detail=True, methods=["put", "post"])
    def reject(self, request, pk=None):
        withdrawal = get_object_or_404(Withdrawal, pk=pk)
        serializer = WithdrawalRejectSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            services.reject_withdrawal(withdrawal, request.user, serializer.validated_data["reason"])
        except services.AffiliateError as exc:
            raise _bad_request(exc) from exc
        return Response(WithdrawalSerializer(withdrawal).data)
