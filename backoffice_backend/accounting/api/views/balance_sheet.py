# accounting/api/views/balance_sheet.py

from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from accounting.api.errors import BadQueryParam, bad_param_response, date_param, forbidden
from accounting.api.views.trial_balance import REPORT_PERMISSION
from accounting.services.balance_service import balance_sheet


@extend_schema(
    tags=["accounting"],
    parameters=[
        OpenApiParameter(
            name="as_of",
            type=str,
            location=OpenApiParameter.QUERY,
            required=False,
            description="Snapshot date (YYYY-MM-DD). Omit for all postings to date.",
        ),
    ],
    responses={200: dict},
)
class BalanceSheetView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        if not request.user.has_perm(REPORT_PERMISSION):
            return forbidden("You do not have permission to view the balance sheet.")

        try:
            as_of = date_param(request, "as_of")
        except BadQueryParam as exc:
            return bad_param_response(exc)

        return Response(balance_sheet(as_of=as_of), status=status.HTTP_200_OK)
