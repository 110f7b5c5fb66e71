# sales/api/serializers.py

from rest_framework import serializers

from sales.models import Invoice, InvoiceLine


class InvoiceLineSerializer(serializers.ModelSerializer):
    class Meta:
        model = InvoiceLine
        fields = ("id", "description", "quantity", "unit_price", "line_total")
        read_only_fields = fields


class InvoiceSerializer(serializers.ModelSerializer):
    lines = InvoiceLineSerializer(many=True, read_only=True)
    journal_entry_number = serializers.IntegerField(
        source="journal_entry.entry_number", read_only=True, default=None
    )

    class Meta:
        model = Invoice
        fields = (
            "id",
            "invoice_number",
            "invoice_date",
            "branch",
            "customer_id",
            "customer_name",
            "payment_method",
            "subtotal",
            "discount_amount",
            "tax_amount",
            "total",
            "status",
            "journal_entry_id",
            "journal_entry_number",
            "created_at",
            "lines",
        )
        read_only_fields = fields


class InvoiceLineInputSerializer(serializers.Serializer):
    description = serializers.CharField(max_length=255)
    quantity = serializers.DecimalField(max_digits=12, decimal_places=3, required=False, default=1)
    unit_price = serializers.DecimalField(max_digits=14, decimal_places=2)


class InvoiceCreateSerializer(serializers.Serializer):
    invoice_date = serializers.DateField(required=False)
    payment_method = serializers.ChoiceField(choices=["cash", "bank", "credit"])
    branch = serializers.CharField(max_length=50, required=False, allow_blank=True, default="")
    customer_id = serializers.IntegerField(required=False, allow_null=True, min_value=1)
    customer_name = serializers.CharField(max_length=150, required=False, allow_blank=True, default="")
    discount_amount = serializers.DecimalField(max_digits=14, decimal_places=2, required=False, default=0)
    tax_amount = serializers.DecimalField(max_digits=14, decimal_places=2, required=False, default=0)
    lines = InvoiceLineInputSerializer(many=True)

    def validate(self, attrs):
        if attrs["payment_method"] == "credit" and not attrs.get("customer_id"):
            raise serializers.ValidationError({"customer_id": "Credit invoices require a customer"})
        if not attrs.get("lines"):
            raise serializers.ValidationError({"lines": "At least one line is required"})
        return attrs
