# accounting/api/serializers/expenses.py

from rest_framework import serializers

from accounting.models.expense import Expense, ExpenseLine


class ExpenseLineSerializer(serializers.ModelSerializer):
    account_code = serializers.CharField(source="account.code", read_only=True)
    account_name = serializers.CharField(source="account.name", read_only=True)

    class Meta:
        model = ExpenseLine
        fields = ("id", "account_code", "account_name", "amount", "description")
        read_only_fields = fields


class ExpenseSerializer(serializers.ModelSerializer):
    """
    Output serializer (DB truth) - clean, stable contract.
    """

    lines = ExpenseLineSerializer(many=True, read_only=True)
    journal_entry_number = serializers.IntegerField(
        source="journal_entry.entry_number", read_only=True, default=None
    )

    class Meta:
        model = Expense
        fields = [
            "id",
            "expense_date",
            "branch",
            "payment_method",
            "vendor",
            "description",
            "subtotal",
            "tax_amount",
            "total",
            "status",
            "journal_entry_id",
            "journal_entry_number",
            "created_at",
            "lines",
        ]
        read_only_fields = fields


class ExpenseLineInputSerializer(serializers.Serializer):
    account_code = serializers.CharField()
    amount = serializers.DecimalField(max_digits=14, decimal_places=2)
    description = serializers.CharField(required=False, allow_blank=True, default="")

    def validate_amount(self, value):
        if value <= 0:
            raise serializers.ValidationError("amount must be > 0")
        return value


class ExpenseCreateSerializer(serializers.Serializer):
    """
    Input serializer (Swagger-visible).
    """

    expense_date = serializers.DateField(required=False)
    payment_method = serializers.ChoiceField(choices=["cash", "bank", "credit"])
    branch = serializers.CharField(required=False, allow_blank=True, default="")
    tax_amount = serializers.DecimalField(max_digits=14, decimal_places=2, required=False, default=0)
    vendor = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    description = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    lines = ExpenseLineInputSerializer(many=True)

    def validate(self, attrs):
        for k in ("vendor", "description"):
            if k in attrs and attrs[k] is not None:
                attrs[k] = str(attrs[k]).strip()
            else:
                attrs[k] = ""

        if not attrs.get("lines"):
            raise serializers.ValidationError({"lines": "At least one line is required"})
        return attrs
