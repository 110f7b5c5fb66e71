# accounting/api/serializers/accounts.py

from rest_framework import serializers

from accounting.models.account import Account


class AccountListSerializer(serializers.ModelSerializer):
    """
    Read-only account row. Balances are never stored on Account; see
    /api/accounting/accounts/<id>/balance/.
    """

    parent_code = serializers.CharField(source="parent.code", read_only=True, default=None)

    class Meta:
        model = Account
        fields = (
            "id",
            "code",
            "name",
            "name_en",
            "account_type",
            "nature",
            "parent_code",
            "opening_balance",
            "allow_manual_entry",
            "is_active",
        )
        read_only_fields = fields


class AccountCreateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=200)
    name_en = serializers.CharField(max_length=200, required=False, allow_blank=True, default="")
    account_type = serializers.ChoiceField(choices=[t for t, _label in Account.ACCOUNT_TYPES])
    parent_code = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    code = serializers.CharField(max_length=20, required=False, allow_blank=True, allow_null=True)
    nature = serializers.ChoiceField(choices=[Account.DEBIT, Account.CREDIT], required=False, allow_null=True)
    opening_balance = serializers.DecimalField(max_digits=14, decimal_places=2, required=False, default=0)
    allow_manual_entry = serializers.BooleanField(required=False, default=True)


class AccountUpdateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=200, required=False)
    name_en = serializers.CharField(max_length=200, required=False, allow_blank=True)
    opening_balance = serializers.DecimalField(max_digits=14, decimal_places=2, required=False)
    allow_manual_entry = serializers.BooleanField(required=False)
    is_active = serializers.BooleanField(required=False)
