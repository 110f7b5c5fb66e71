# sales/api/viewsets/invoice.py

"""
======================================================
PATH: sales/api/viewsets/invoice.py
======================================================
INVOICE VIEWSET (STAFF)

Purpose:
- List + retrieve invoices with basic filters
- Issue an invoice (create + post to ledger, atomic)
- Reverse an issued invoice (reversing journal entry, then status flip)

Security:
- list / retrieve: sales.view_invoice
- issue:           sales.add_invoice
- reverse:         sales.change_invoice
======================================================
"""

from __future__ import annotations

from django_filters.rest_framework import DjangoFilterBackend
from drf_spectacular.utils import extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import PermissionDenied
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from accounting.api.errors import forbidden, service_error_response
from accounting.api.serializers.journal_entries import ReverseEntrySerializer
from accounting.services.exceptions import AccountingServiceError
from sales.api.serializers import InvoiceCreateSerializer, InvoiceSerializer
from sales.models import Invoice
from sales.services.invoice_service import issue_invoice, reverse_invoice


@extend_schema(tags=["sales"])
class InvoiceViewSet(viewsets.ReadOnlyModelViewSet):
    permission_classes = [IsAuthenticated]
    serializer_class = InvoiceSerializer
    http_method_names = ["get", "post", "head", "options"]
    filter_backends = [DjangoFilterBackend]
    filterset_fields = ["status", "branch", "payment_method", "customer_id", "invoice_date"]

    queryset = (
        Invoice.objects.select_related("journal_entry")
        .prefetch_related("lines")
        .order_by("-invoice_date", "-created_at")
    )

    def get_queryset(self):
        if not self.request.user.has_perm("sales.view_invoice"):
            raise PermissionDenied("You do not have permission to view invoices.")
        return super().get_queryset()

    @extend_schema(request=InvoiceCreateSerializer, responses={201: InvoiceSerializer})
    def create(self, request, *args, **kwargs):
        if not request.user.has_perm("sales.add_invoice"):
            return forbidden("You do not have permission to issue invoices.")

        s = InvoiceCreateSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data

        try:
            invoice = issue_invoice(
                lines=[dict(line) for line in data["lines"]],
                payment_method=data["payment_method"],
                branch=data.get("branch", ""),
                invoice_date=data.get("invoice_date"),
                discount_amount=data.get("discount_amount", 0),
                tax_amount=data.get("tax_amount", 0),
                customer_id=data.get("customer_id"),
                customer_name=data.get("customer_name", ""),
                actor_id=request.user.pk,
            )
        except AccountingServiceError as exc:
            return service_error_response(exc)

        return Response(InvoiceSerializer(invoice).data, status=status.HTTP_201_CREATED)

    @extend_schema(request=ReverseEntrySerializer, responses={200: InvoiceSerializer})
    @action(detail=True, methods=["post"])
    def reverse(self, request, pk=None):
        if not request.user.has_perm("sales.change_invoice"):
            return forbidden("You do not have permission to reverse invoices.")

        s = ReverseEntrySerializer(data=request.data)
        s.is_valid(raise_exception=True)

        try:
            invoice = reverse_invoice(
                invoice_id=pk,
                actor_id=request.user.pk,
                entry_date=s.validated_data.get("entry_date"),
            )
        except AccountingServiceError as exc:
            return service_error_response(exc)

        return Response(InvoiceSerializer(invoice).data, status=status.HTTP_200_OK)
