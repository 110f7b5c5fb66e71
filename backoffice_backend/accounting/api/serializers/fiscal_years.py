# accounting/api/serializers/fiscal_years.py

"""
======================================================
PATH: accounting/api/serializers/fiscal_years.py
======================================================
PERIOD ADMINISTRATION SERIALIZERS

Rules:
- temporary open requires a non-blank reason
- month keys are YYYY-MM
- end_date must be >= start_date when both are given
"""

from rest_framework import serializers

from accounting.models.fiscal_year import AccountingPeriod, FiscalYear, FiscalYearActivity
from accounting.services.period_guard import PERIOD_KEY_RE


class FiscalYearSerializer(serializers.ModelSerializer):
    accepts_postings = serializers.BooleanField(read_only=True)

    class Meta:
        model = FiscalYear
        fields = (
            "id",
            "year",
            "start_date",
            "end_date",
            "status",
            "temporary_open",
            "temporary_opened_by_id",
            "temporary_opened_at",
            "temporary_open_reason",
            "closed_by_id",
            "closed_at",
            "accepts_postings",
        )
        read_only_fields = fields


class FiscalYearCreateSerializer(serializers.Serializer):
    year = serializers.IntegerField(min_value=1900, max_value=9999)
    start_date = serializers.DateField(required=False)
    end_date = serializers.DateField(required=False)

    def validate(self, attrs):
        start = attrs.get("start_date")
        end = attrs.get("end_date")
        if start and end and start > end:
            raise serializers.ValidationError({"end_date": "end_date must be >= start_date"})
        return attrs


class TemporaryOpenSerializer(serializers.Serializer):
    reason = serializers.CharField(max_length=255)

    def validate_reason(self, value):
        value = (value or "").strip()
        if not value:
            raise serializers.ValidationError("A reason is required")
        return value


class CloseYearSerializer(serializers.Serializer):
    successor_year = serializers.IntegerField(required=False, allow_null=True, min_value=1900, max_value=9999)
    reason = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")


class MonthActionSerializer(serializers.Serializer):
    period = serializers.CharField(max_length=7, help_text="YYYY-MM")
    reason = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")

    def validate_period(self, value):
        value = (value or "").strip()
        if not PERIOD_KEY_RE.match(value):
            raise serializers.ValidationError("period must be YYYY-MM")
        return value


class AccountingPeriodSerializer(serializers.ModelSerializer):
    class Meta:
        model = AccountingPeriod
        fields = ("id", "period", "status", "closed_by_id", "closed_at")
        read_only_fields = fields


class FiscalYearActivitySerializer(serializers.ModelSerializer):
    fiscal_year = serializers.IntegerField(source="fiscal_year.year", read_only=True, default=None)

    class Meta:
        model = FiscalYearActivity
        fields = ("id", "fiscal_year", "period", "action", "actor_id", "reason", "created_at")
        read_only_fields = fields
