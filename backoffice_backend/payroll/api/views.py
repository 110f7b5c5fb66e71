# payroll/api/views.py

"""
GET  /api/payroll/runs/                 payroll.view_payrollrun
POST /api/payroll/runs/                 payroll.add_payrollrun (create + accrue)
POST /api/payroll/runs/<id>/reverse/    payroll.change_payrollrun
"""

from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.generics import GenericAPIView
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from accounting.api.errors import forbidden, service_error_response
from accounting.api.serializers.journal_entries import ReverseEntrySerializer
from accounting.services.exceptions import AccountingServiceError
from payroll.api.serializers import PayrollRunCreateSerializer, PayrollRunSerializer
from payroll.models import PayrollRun
from payroll.services.payroll_service import post_payroll_run, reverse_payroll_run


class PayrollRunListCreateView(GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = PayrollRunCreateSerializer

    @extend_schema(tags=["payroll"], responses=PayrollRunSerializer(many=True))
    def get(self, request):
        if not request.user.has_perm("payroll.view_payrollrun"):
            return forbidden("You do not have permission to view payroll runs.")
        qs = PayrollRun.objects.prefetch_related("items").order_by("-period", "-created_at")
        return Response(PayrollRunSerializer(qs, many=True).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["payroll"], request=PayrollRunCreateSerializer, responses={201: PayrollRunSerializer})
    def post(self, request):
        if not request.user.has_perm("payroll.add_payrollrun"):
            return forbidden("You do not have permission to post payroll runs.")

        s = self.get_serializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data

        try:
            run = post_payroll_run(
                period=data["period"],
                items=[dict(item) for item in data["items"]],
                branch=data.get("branch", ""),
                run_date=data.get("run_date"),
                actor_id=request.user.pk,
            )
        except AccountingServiceError as exc:
            return service_error_response(exc)

        return Response(PayrollRunSerializer(run).data, status=status.HTTP_201_CREATED)


class PayrollRunReverseView(GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = ReverseEntrySerializer

    @extend_schema(tags=["payroll"], request=ReverseEntrySerializer, responses=PayrollRunSerializer)
    def post(self, request, run_id):
        if not request.user.has_perm("payroll.change_payrollrun"):
            return forbidden("You do not have permission to reverse payroll runs.")

        s = self.get_serializer(data=request.data)
        s.is_valid(raise_exception=True)

        try:
            run = reverse_payroll_run(
                payroll_run_id=run_id,
                actor_id=request.user.pk,
                entry_date=s.validated_data.get("entry_date"),
            )
        except AccountingServiceError as exc:
            return service_error_response(exc)

        return Response(PayrollRunSerializer(run).data, status=status.HTTP_200_OK)
