# accounting/api/views/fiscal_years.py

"""
======================================================
PATH: accounting/api/views/fiscal_years.py
======================================================
PERIOD ADMINISTRATION API

GET  /api/accounting/fiscal-years/
POST /api/accounting/fiscal-years/                        {"year": 2027}
GET  /api/accounting/fiscal-years/can-post/?date=YYYY-MM-DD
POST /api/accounting/fiscal-years/<year>/temporary-open/  {"reason": "..."}
POST /api/accounting/fiscal-years/<year>/temporary-close/
POST /api/accounting/fiscal-years/<year>/close/           {"successor_year": 2027}
GET  /api/accounting/fiscal-years/activity/
POST /api/accounting/periods/close/                       {"period": "2026-01"}
POST /api/accounting/periods/open/                        {"period": "2026-01"}

Rules:
- Every write requires accounting.change_fiscalyear (creation: add_fiscalyear)
- Every transition is audited by the period guard (FiscalYearActivity)
"""

from __future__ import annotations

from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status
from rest_framework.generics import GenericAPIView
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from accounting.api.errors import (
    BadQueryParam,
    bad_param_response,
    date_param,
    forbidden,
    service_error_response,
)
from accounting.api.serializers.fiscal_years import (
    AccountingPeriodSerializer,
    CloseYearSerializer,
    FiscalYearActivitySerializer,
    FiscalYearCreateSerializer,
    FiscalYearSerializer,
    MonthActionSerializer,
    TemporaryOpenSerializer,
)
from accounting.models.fiscal_year import FiscalYear, FiscalYearActivity
from accounting.services import period_guard
from accounting.services.exceptions import AccountingServiceError

ADMIN_PERMISSION = "accounting.change_fiscalyear"
ADMIN_DENIED = "You do not have permission to administer accounting periods."


class FiscalYearListCreateView(GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = FiscalYearCreateSerializer

    @extend_schema(tags=["accounting"], responses=FiscalYearSerializer(many=True))
    def get(self, request, *args, **kwargs):
        if not request.user.has_perm("accounting.view_fiscalyear"):
            return forbidden("You do not have permission to view fiscal years.")
        qs = FiscalYear.objects.order_by("-year")
        return Response(FiscalYearSerializer(qs, many=True).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["accounting"], request=FiscalYearCreateSerializer, responses={201: FiscalYearSerializer})
    def post(self, request, *args, **kwargs):
        if not request.user.has_perm("accounting.add_fiscalyear"):
            return forbidden("You do not have permission to create fiscal years.")

        s = self.get_serializer(data=request.data)
        s.is_valid(raise_exception=True)

        try:
            fiscal_year = period_guard.create_fiscal_year(actor_id=request.user.pk, **s.validated_data)
        except AccountingServiceError as exc:
            return service_error_response(exc)

        return Response(FiscalYearSerializer(fiscal_year).data, status=status.HTTP_201_CREATED)


class CanPostView(GenericAPIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(
        tags=["accounting"],
        parameters=[OpenApiParameter(name="date", type=str, required=False, description="YYYY-MM-DD (default today)")],
        responses={200: dict},
    )
    def get(self, request, *args, **kwargs):
        try:
            day = date_param(request, "date")
        except BadQueryParam as exc:
            return bad_param_response(exc)

        check = period_guard.can_post(day)
        return Response(
            {
                "allowed": check.allowed,
                "reason": check.reason,
                "fiscal_year": check.fiscal_year.year if check.fiscal_year else None,
            },
            status=status.HTTP_200_OK,
        )


class TemporaryOpenView(GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = TemporaryOpenSerializer

    @extend_schema(tags=["accounting"], request=TemporaryOpenSerializer, responses=FiscalYearSerializer)
    def post(self, request, year, *args, **kwargs):
        if not request.user.has_perm(ADMIN_PERMISSION):
            return forbidden(ADMIN_DENIED)

        s = self.get_serializer(data=request.data)
        s.is_valid(raise_exception=True)

        try:
            fiscal_year = period_guard.open_temporarily(
                year=year,
                actor_id=request.user.pk,
                reason=s.validated_data["reason"],
            )
        except AccountingServiceError as exc:
            return service_error_response(exc)

        return Response(FiscalYearSerializer(fiscal_year).data, status=status.HTTP_200_OK)


class TemporaryCloseView(GenericAPIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(tags=["accounting"], request=None, responses=FiscalYearSerializer)
    def post(self, request, year, *args, **kwargs):
        if not request.user.has_perm(ADMIN_PERMISSION):
            return forbidden(ADMIN_DENIED)

        try:
            fiscal_year = period_guard.close_temporary(
                year=year,
                actor_id=request.user.pk,
                reason=str(request.data.get("reason") or ""),
            )
        except AccountingServiceError as exc:
            return service_error_response(exc)

        return Response(FiscalYearSerializer(fiscal_year).data, status=status.HTTP_200_OK)


class CloseYearView(GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = CloseYearSerializer

    @extend_schema(tags=["accounting"], request=CloseYearSerializer, responses=FiscalYearSerializer)
    def post(self, request, year, *args, **kwargs):
        if not request.user.has_perm(ADMIN_PERMISSION):
            return forbidden(ADMIN_DENIED)

        s = self.get_serializer(data=request.data)
        s.is_valid(raise_exception=True)

        try:
            fiscal_year = period_guard.close_year(
                year=year,
                actor_id=request.user.pk,
                successor_year=s.validated_data.get("successor_year"),
                reason=s.validated_data.get("reason", ""),
            )
        except AccountingServiceError as exc:
            return service_error_response(exc)

        return Response(FiscalYearSerializer(fiscal_year).data, status=status.HTTP_200_OK)


class FiscalYearActivityView(GenericAPIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(tags=["accounting"], responses=FiscalYearActivitySerializer(many=True))
    def get(self, request, *args, **kwargs):
        if not request.user.has_perm("accounting.view_fiscalyear"):
            return forbidden("You do not have permission to view fiscal years.")
        qs = FiscalYearActivity.objects.select_related("fiscal_year").order_by("-created_at")[:200]
        return Response(FiscalYearActivitySerializer(qs, many=True).data, status=status.HTTP_200_OK)


class _MonthActionView(GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = MonthActionSerializer
    action_name = ""

    def post(self, request, *args, **kwargs):
        if not request.user.has_perm(ADMIN_PERMISSION):
            return forbidden(ADMIN_DENIED)

        s = self.get_serializer(data=request.data)
        s.is_valid(raise_exception=True)

        handler = getattr(period_guard, self.action_name)
        try:
            row = handler(
                period=s.validated_data["period"],
                actor_id=request.user.pk,
                reason=s.validated_data.get("reason", ""),
            )
        except AccountingServiceError as exc:
            return service_error_response(exc)

        return Response(AccountingPeriodSerializer(row).data, status=status.HTTP_200_OK)


@extend_schema(tags=["accounting"], request=MonthActionSerializer, responses=AccountingPeriodSerializer)
class CloseMonthView(_MonthActionView):
    action_name = "close_month"


@extend_schema(tags=["accounting"], request=MonthActionSerializer, responses=AccountingPeriodSerializer)
class OpenMonthView(_MonthActionView):
    action_name = "open_month"
