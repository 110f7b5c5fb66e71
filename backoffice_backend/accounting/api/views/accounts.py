# accounting/api/views/accounts.py

"""
PATH: accounting/api/views/accounts.py

ACCOUNT DIRECTORY API

GET    /api/accounting/accounts/                 flat list (?tree=1 for the forest)
POST   /api/accounting/accounts/                 create (code generated under parent when omitted)
GET    /api/accounting/accounts/<id>/
PATCH  /api/accounting/accounts/<id>/            name / name_en / opening balance / flags
DELETE /api/accounting/accounts/<id>/?cascade=1  refused while referenced unless cascade
GET    /api/accounting/accounts/<id>/balance/?date_from=&date_to=

Permissions: accounting.view_account / add_account / change_account / delete_account
"""

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
from accounting.api.serializers.accounts import (
    AccountCreateSerializer,
    AccountListSerializer,
    AccountUpdateSerializer,
)
from accounting.models.account import Account
from accounting.services import account_directory
from accounting.services.balance_service import account_balance
from accounting.services.exceptions import AccountingServiceError

TRUTHY = {"1", "true", "yes"}


class AccountListCreateView(GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = AccountCreateSerializer

    @extend_schema(
        tags=["accounting"],
        parameters=[OpenApiParameter(name="tree", type=bool, required=False)],
        responses=AccountListSerializer(many=True),
    )
    def get(self, request, *args, **kwargs):
        if not request.user.has_perm("accounting.view_account"):
            return forbidden("You do not have permission to view accounts.")

        qs = Account.objects.select_related("parent").order_by("code")

        if (request.query_params.get("tree") or "").lower() in TRUTHY:
            return Response(account_directory.tree(qs), status=status.HTTP_200_OK)

        return Response(AccountListSerializer(qs, many=True).data, status=status.HTTP_200_OK)

    @extend_schema(
        tags=["accounting"],
        request=AccountCreateSerializer,
        responses={201: AccountListSerializer},
    )
    def post(self, request, *args, **kwargs):
        if not request.user.has_perm("accounting.add_account"):
            return forbidden("You do not have permission to create accounts.")

        s = self.get_serializer(data=request.data)
        s.is_valid(raise_exception=True)

        try:
            account = account_directory.create_account(**s.validated_data)
        except AccountingServiceError as exc:
            return service_error_response(exc)

        return Response(AccountListSerializer(account).data, status=status.HTTP_201_CREATED)


class AccountDetailView(GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = AccountUpdateSerializer

    @extend_schema(tags=["accounting"], responses=AccountListSerializer)
    def get(self, request, pk, *args, **kwargs):
        if not request.user.has_perm("accounting.view_account"):
            return forbidden("You do not have permission to view accounts.")

        try:
            account = account_directory.get_account(int(pk))
        except AccountingServiceError as exc:
            return service_error_response(exc)

        return Response(AccountListSerializer(account).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["accounting"], request=AccountUpdateSerializer, responses=AccountListSerializer)
    def patch(self, request, pk, *args, **kwargs):
        if not request.user.has_perm("accounting.change_account"):
            return forbidden("You do not have permission to change accounts.")

        s = self.get_serializer(data=request.data, partial=True)
        s.is_valid(raise_exception=True)

        try:
            account = account_directory.update_account(account_id=int(pk), **s.validated_data)
        except AccountingServiceError as exc:
            return service_error_response(exc)

        return Response(AccountListSerializer(account).data, status=status.HTTP_200_OK)

    @extend_schema(
        tags=["accounting"],
        parameters=[OpenApiParameter(name="cascade", type=bool, required=False)],
        responses={200: dict, 409: dict},
    )
    def delete(self, request, pk, *args, **kwargs):
        if not request.user.has_perm("accounting.delete_account"):
            return forbidden("You do not have permission to delete accounts.")

        cascade = (request.query_params.get("cascade") or "").lower() in TRUTHY

        try:
            result = account_directory.delete_account(
                account_id=int(pk),
                cascade=cascade,
                actor_id=request.user.pk,
            )
        except AccountingServiceError as exc:
            return service_error_response(exc)

        return Response(result, status=status.HTTP_200_OK)


class AccountBalanceView(GenericAPIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(
        tags=["accounting"],
        parameters=[
            OpenApiParameter(name="date_from", type=str, required=False, description="YYYY-MM-DD"),
            OpenApiParameter(name="date_to", type=str, required=False, description="YYYY-MM-DD"),
        ],
        responses={200: dict},
    )
    def get(self, request, pk, *args, **kwargs):
        if not request.user.has_perm("accounting.view_journalposting"):
            return forbidden("You do not have permission to view balances.")

        try:
            date_from = date_param(request, "date_from")
            date_to = date_param(request, "date_to")
        except BadQueryParam as exc:
            return bad_param_response(exc)

        try:
            balance = account_balance(int(pk), date_from=date_from, date_to=date_to)
        except AccountingServiceError as exc:
            return service_error_response(exc)

        return Response({"account_id": int(pk), **balance}, status=status.HTTP_200_OK)
