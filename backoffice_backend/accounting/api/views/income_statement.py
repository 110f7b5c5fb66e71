# accounting/api/views/income_statement.py

from drf_spectacular.utils import extend_schema
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
from accounting.api.views.trial_balance import RANGE_PARAMETERS, REPORT_PERMISSION
from accounting.services.balance_service import income_statement
from accounting.services.exceptions import AccountingServiceError


@extend_schema(tags=["accounting"], parameters=RANGE_PARAMETERS, responses={200: dict})
class IncomeStatementView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        if not request.user.has_perm(REPORT_PERMISSION):
            return forbidden("You do not have permission to view the income statement.")

        try:
            date_from = date_param(request, "date_from")
            date_to = date_param(request, "date_to")
        except BadQueryParam as exc:
            return bad_param_response(exc)

        try:
            data = income_statement(date_from=date_from, date_to=date_to)
        except AccountingServiceError as exc:
            return service_error_response(exc)

        return Response(data, status=status.HTTP_200_OK)
