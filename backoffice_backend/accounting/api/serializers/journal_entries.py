# accounting/api/serializers/journal_entries.py

from rest_framework import serializers

from accounting.models.journal import JournalEntry
from accounting.models.posting import JournalPosting


class JournalPostingSerializer(serializers.ModelSerializer):
    account_code = serializers.CharField(source="account.code", read_only=True)
    account_name = serializers.CharField(source="account.name", read_only=True)

    class Meta:
        model = JournalPosting
        fields = ("id", "account", "account_code", "account_name", "debit", "credit", "memo")
        read_only_fields = fields


class JournalEntrySerializer(serializers.ModelSerializer):
    postings = JournalPostingSerializer(many=True, read_only=True)
    is_manual = serializers.BooleanField(read_only=True)

    class Meta:
        model = JournalEntry
        fields = (
            "id",
            "entry_number",
            "description",
            "entry_date",
            "period",
            "reference_type",
            "reference_id",
            "branch",
            "status",
            "reversal_of",
            "is_manual",
            "created_by_id",
            "created_at",
            "postings",
        )
        read_only_fields = fields


class PostingInputSerializer(serializers.Serializer):
    account = serializers.CharField(help_text="Account code")
    debit = serializers.DecimalField(max_digits=14, decimal_places=2, required=False, default=0)
    credit = serializers.DecimalField(max_digits=14, decimal_places=2, required=False, default=0)
    memo = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")


class ManualJournalEntryCreateSerializer(serializers.Serializer):
    """
    Manual entries only; document entries are created by their services.
    Balance and account rules are enforced by the engine.
    """

    description = serializers.CharField(max_length=255)
    entry_date = serializers.DateField(required=False)
    branch = serializers.CharField(max_length=50, required=False, allow_blank=True, default="")
    postings = PostingInputSerializer(many=True)

    def validate_postings(self, value):
        if not value:
            raise serializers.ValidationError("At least one posting is required")
        return value


class ReverseEntrySerializer(serializers.Serializer):
    entry_date = serializers.DateField(required=False, allow_null=True)
