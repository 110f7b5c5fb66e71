# PATH: accounting/api/views/expenses.py

"""
PATH: accounting/api/views/expenses.py

EXPENSES API

GET  /api/accounting/expenses/               requires accounting.view_expense
POST /api/accounting/expenses/               requires accounting.add_expense
     creates the expense + posts it to the ledger (atomic)
POST /api/accounting/expenses/<id>/reverse/  requires accounting.change_expense

Notes:
- Group/user permissions honored via has_perm (no is_staff checks)
- Service errors map to 400 / 404 / 409 with a stable "code"
"""

from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.generics import GenericAPIView
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from accounting.api.errors import forbidden, service_error_response
from accounting.api.serializers.expenses import ExpenseCreateSerializer, ExpenseSerializer
from accounting.api.serializers.journal_entries import ReverseEntrySerializer
from accounting.models.expense import Expense
from accounting.services.exceptions import AccountingServiceError
from accounting.services.expense_service import post_expense, reverse_expense

EXPENSE_VIEW_PERMISSION = "accounting.view_expense"
EXPENSE_POST_PERMISSION = "accounting.add_expense"
EXPENSE_REVERSE_PERMISSION = "accounting.change_expense"


class ExpenseListCreateView(GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = ExpenseCreateSerializer

    @extend_schema(
        tags=["accounting"],
        responses=ExpenseSerializer(many=True),
    )
    def get(self, request, *args, **kwargs):
        if not request.user.has_perm(EXPENSE_VIEW_PERMISSION):
            return forbidden("You do not have permission to view expenses.")

        qs = (
            Expense.objects.select_related("journal_entry")
            .prefetch_related("lines__account")
            .order_by("-expense_date", "-created_at")
        )

        status_filter = (request.query_params.get("status") or "").strip()
        if status_filter:
            qs = qs.filter(status=status_filter)

        return Response(ExpenseSerializer(qs, many=True).data, status=status.HTTP_200_OK)

    @extend_schema(
        tags=["accounting"],
        request=ExpenseCreateSerializer,
        responses={201: ExpenseSerializer, 400: dict, 403: dict},
    )
    def post(self, request, *args, **kwargs):
        if not request.user.has_perm(EXPENSE_POST_PERMISSION):
            return forbidden("You do not have permission to post expenses.")

        s = self.get_serializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data

        try:
            expense = post_expense(
                expense_date=data.get("expense_date"),
                payment_method=data["payment_method"],
                lines=[dict(line) for line in data["lines"]],
                tax_amount=data.get("tax_amount", 0),
                vendor=data.get("vendor", ""),
                description=data.get("description", ""),
                branch=data.get("branch", ""),
                actor_id=request.user.pk,
            )
        except AccountingServiceError as exc:
            return service_error_response(exc)

        return Response(ExpenseSerializer(expense).data, status=status.HTTP_201_CREATED)


class ExpenseReverseView(GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = ReverseEntrySerializer

    @extend_schema(tags=["accounting"], request=ReverseEntrySerializer, responses={200: ExpenseSerializer})
    def post(self, request, pk, *args, **kwargs):
        if not request.user.has_perm(EXPENSE_REVERSE_PERMISSION):
            return forbidden("You do not have permission to reverse expenses.")

        s = self.get_serializer(data=request.data)
        s.is_valid(raise_exception=True)

        try:
            expense = reverse_expense(
                expense_id=pk,
                actor_id=request.user.pk,
                entry_date=s.validated_data.get("entry_date"),
            )
        except AccountingServiceError as exc:
            return service_error_response(exc)

        return Response(ExpenseSerializer(expense).data, status=status.HTTP_200_OK)
