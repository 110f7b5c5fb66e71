# payroll/api/serializers.py

from rest_framework import serializers

from accounting.services.period_guard import PERIOD_KEY_RE
from payroll.models import PayrollItem, PayrollRun


class PayrollItemSerializer(serializers.ModelSerializer):
    class Meta:
        model = PayrollItem
        fields = ("id", "employee_id", "employee_name", "gross", "deductions", "net")
        read_only_fields = fields


class PayrollRunSerializer(serializers.ModelSerializer):
    items = PayrollItemSerializer(many=True, read_only=True)

    class Meta:
        model = PayrollRun
        fields = (
            "id",
            "period",
            "run_date",
            "branch",
            "gross_total",
            "deductions_total",
            "net_total",
            "status",
            "journal_entry_id",
            "created_at",
            "items",
        )
        read_only_fields = fields


class PayrollItemCreateSerializer(serializers.Serializer):
    employee_id = serializers.IntegerField(required=False, allow_null=True)
    employee_name = serializers.CharField(max_length=150)
    gross = serializers.DecimalField(max_digits=14, decimal_places=2)
    deductions = serializers.DecimalField(max_digits=14, decimal_places=2, required=False, default=0)


class PayrollRunCreateSerializer(serializers.Serializer):
    period = serializers.CharField(max_length=7)
    run_date = serializers.DateField(required=False)
    branch = serializers.CharField(max_length=50, required=False, allow_blank=True, default="")
    items = PayrollItemCreateSerializer(many=True)

    def validate_period(self, value):
        value = (value or "").strip()
        if not PERIOD_KEY_RE.match(value):
            raise serializers.ValidationError("period must be YYYY-MM")
        return value
