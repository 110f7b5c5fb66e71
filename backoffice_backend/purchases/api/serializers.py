# purchases/api/serializers.py

from rest_framework import serializers

from purchases.models import Supplier, SupplierInvoice, SupplierInvoiceLine


class SupplierSerializer(serializers.ModelSerializer):
    class Meta:
        model = Supplier
        fields = "__all__"
        read_only_fields = ("id", "created_at")


class SupplierInvoiceLineSerializer(serializers.ModelSerializer):
    class Meta:
        model = SupplierInvoiceLine
        fields = ("id", "description", "quantity", "unit_cost", "line_total")
        read_only_fields = fields


class SupplierInvoiceSerializer(serializers.ModelSerializer):
    supplier_name = serializers.CharField(source="supplier.name", read_only=True, default="")
    lines = SupplierInvoiceLineSerializer(many=True, read_only=True)

    class Meta:
        model = SupplierInvoice
        fields = (
            "id",
            "supplier",
            "supplier_name",
            "invoice_number",
            "invoice_date",
            "branch",
            "payment_method",
            "subtotal",
            "discount_amount",
            "tax_amount",
            "total",
            "status",
            "journal_entry_id",
            "created_at",
            "lines",
        )
        read_only_fields = fields


class SupplierInvoiceLineCreateSerializer(serializers.Serializer):
    description = serializers.CharField(max_length=255)
    quantity = serializers.DecimalField(max_digits=12, decimal_places=3, required=False, default=1)
    unit_cost = serializers.DecimalField(max_digits=14, decimal_places=2)


class SupplierInvoiceCreateSerializer(serializers.Serializer):
    supplier_id = serializers.IntegerField(required=False, allow_null=True)
    invoice_number = serializers.CharField(max_length=64)
    invoice_date = serializers.DateField(required=False)
    payment_method = serializers.ChoiceField(choices=["cash", "bank", "credit"], default="credit")
    branch = serializers.CharField(max_length=50, required=False, allow_blank=True, default="")
    discount_amount = serializers.DecimalField(max_digits=14, decimal_places=2, required=False, default=0)
    tax_amount = serializers.DecimalField(max_digits=14, decimal_places=2, required=False, default=0)
    lines = SupplierInvoiceLineCreateSerializer(many=True)
