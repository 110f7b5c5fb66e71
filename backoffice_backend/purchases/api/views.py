# purchases/api/views.py

from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.generics import GenericAPIView
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from accounting.api.errors import forbidden, service_error_response
from accounting.api.serializers.journal_entries import ReverseEntrySerializer
from accounting.services.exceptions import AccountingServiceError
from purchases.api.serializers import (
    SupplierInvoiceCreateSerializer,
    SupplierInvoiceSerializer,
    SupplierSerializer,
)
from purchases.models import Supplier, SupplierInvoice
from purchases.services.supplier_invoice_service import (
    post_supplier_invoice,
    reverse_supplier_invoice,
)


class SupplierListCreateView(GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = SupplierSerializer

    @extend_schema(tags=["purchases"], responses=SupplierSerializer(many=True))
    def get(self, request):
        if not request.user.has_perm("purchases.view_supplier"):
            return forbidden("You do not have permission to view suppliers.")
        qs = Supplier.objects.filter(is_active=True).order_by("name")
        return Response(SupplierSerializer(qs, many=True).data, status=status.HTTP_200_OK)

    @extend_schema(
        tags=["purchases"],
        request=SupplierSerializer,
        responses={201: SupplierSerializer},
    )
    def post(self, request):
        if not request.user.has_perm("purchases.add_supplier"):
            return forbidden("You do not have permission to create suppliers.")
        s = SupplierSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        supplier = s.save()
        return Response(SupplierSerializer(supplier).data, status=status.HTTP_201_CREATED)


class SupplierInvoiceListCreateView(GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = SupplierInvoiceCreateSerializer

    @extend_schema(tags=["purchases"], responses=SupplierInvoiceSerializer(many=True))
    def get(self, request):
        if not request.user.has_perm("purchases.view_supplierinvoice"):
            return forbidden("You do not have permission to view supplier invoices.")

        qs = (
            SupplierInvoice.objects.select_related("supplier")
            .prefetch_related("lines")
            .order_by("-invoice_date", "-created_at")
        )
        supplier_id = request.query_params.get("supplier")
        if supplier_id and supplier_id.isdigit():
            qs = qs.filter(supplier_id=int(supplier_id))

        return Response(SupplierInvoiceSerializer(qs, many=True).data, status=status.HTTP_200_OK)

    @extend_schema(
        tags=["purchases"],
        request=SupplierInvoiceCreateSerializer,
        responses={201: SupplierInvoiceSerializer},
    )
    def post(self, request):
        if not request.user.has_perm("purchases.add_supplierinvoice"):
            return forbidden("You do not have permission to post supplier invoices.")

        s = self.get_serializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data

        try:
            invoice = post_supplier_invoice(
                invoice_number=data["invoice_number"],
                lines=[dict(line) for line in data["lines"]],
                supplier_id=data.get("supplier_id"),
                payment_method=data["payment_method"],
                branch=data.get("branch", ""),
                invoice_date=data.get("invoice_date"),
                discount_amount=data.get("discount_amount", 0),
                tax_amount=data.get("tax_amount", 0),
                actor_id=request.user.pk,
            )
        except AccountingServiceError as exc:
            return service_error_response(exc)

        return Response(SupplierInvoiceSerializer(invoice).data, status=status.HTTP_201_CREATED)


class SupplierInvoiceReverseView(GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = ReverseEntrySerializer

    @extend_schema(tags=["purchases"], request=ReverseEntrySerializer, responses=SupplierInvoiceSerializer)
    def post(self, request, invoice_id):
        if not request.user.has_perm("purchases.change_supplierinvoice"):
            return forbidden("You do not have permission to reverse supplier invoices.")

        s = self.get_serializer(data=request.data)
        s.is_valid(raise_exception=True)

        try:
            invoice = reverse_supplier_invoice(
                supplier_invoice_id=invoice_id,
                actor_id=request.user.pk,
                entry_date=s.validated_data.get("entry_date"),
            )
        except AccountingServiceError as exc:
            return service_error_response(exc)

        return Response(SupplierInvoiceSerializer(invoice).data, status=status.HTTP_200_OK)
