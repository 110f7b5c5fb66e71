"""
PATH: accounting/api/views/trial_balance.py

TRIAL BALANCE + ACCOUNT TREE API VIEWS (READ-ONLY)

GET /api/accounting/trial-balance/?date_from=YYYY-MM-DD&date_to=YYYY-MM-DD
GET /api/accounting/account-tree/?date_from=YYYY-MM-DD&date_to=YYYY-MM-DD

- Permission-gated: requires accounting.view_journalposting
- Amounts are returned as decimals (debit-positive beginning/ending)
"""

from __future__ import annotations

from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from accounting.api.errors import (
    BadQueryParam,
    bad_param_response,
    date_param,
    forbidden,
    service_error_response,
)
from accounting.services.balance_service import account_tree_with_balances, trial_balance
from accounting.services.exceptions import AccountingServiceError

REPORT_PERMISSION = "accounting.view_journalposting"

RANGE_PARAMETERS = [
    OpenApiParameter(
        name="date_from",
        type=str,
        location=OpenApiParameter.QUERY,
        required=False,
        description="First day of the period (YYYY-MM-DD). Earlier postings form the beginning balance.",
    ),
    OpenApiParameter(
        name="date_to",
        type=str,
        location=OpenApiParameter.QUERY,
        required=False,
        description="Last day of the period (YYYY-MM-DD).",
    ),
]


def _range(request):
    return date_param(request, "date_from"), date_param(request, "date_to")


@extend_schema(tags=["accounting"], parameters=RANGE_PARAMETERS, responses={200: dict})
class TrialBalanceView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        if not request.user.has_perm(REPORT_PERMISSION):
            return forbidden("You do not have permission to view trial balance.")

        try:
            date_from, date_to = _range(request)
        except BadQueryParam as exc:
            return bad_param_response(exc)

        try:
            data = trial_balance(date_from=date_from, date_to=date_to)
        except AccountingServiceError as exc:
            return service_error_response(exc)

        return Response(data, status=status.HTTP_200_OK)


@extend_schema(tags=["accounting"], parameters=RANGE_PARAMETERS, responses={200: dict})
class AccountTreeView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        if not request.user.has_perm(REPORT_PERMISSION):
            return forbidden("You do not have permission to view balances.")

        try:
            date_from, date_to = _range(request)
        except BadQueryParam as exc:
            return bad_param_response(exc)

        try:
            data = account_tree_with_balances(date_from=date_from, date_to=date_to)
        except AccountingServiceError as exc:
            return service_error_response(exc)

        return Response(data, status=status.HTTP_200_OK)
