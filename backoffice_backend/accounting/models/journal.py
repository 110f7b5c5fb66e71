# accounting/models/journal.py

"""
======================================================
PATH: accounting/models/journal.py
======================================================
JOURNAL ENTRY MODEL

Represents a single accounting transaction (journal header).

Guarantees:
- Created only through journal_entry_service
- Immutable once created, except the one-way posted -> reversed flip
- entry_number is unique; numbers freed by corrective deletes are recycled
- (reference_type, reference_id) identifies at most one entry
- period is always the YYYY-MM key of entry_date
"""

from __future__ import annotations

from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q


def period_key(value) -> str:
    return f"{value.year:04d}-{value.month:02d}"


class JournalEntry(models.Model):
    STATUS_POSTED = "posted"
    STATUS_REVERSED = "reversed"

    STATUSES = [
        (STATUS_POSTED, "Posted"),
        (STATUS_REVERSED, "Reversed"),
    ]

    REFERENCE_REVERSAL = "reversal"

    entry_number = models.PositiveIntegerField(unique=True)

    description = models.TextField(help_text="Narrative description of the journal entry")

    entry_date = models.DateField(help_text="Accounting effective date")
    period = models.CharField(max_length=7, editable=False)

    reference_type = models.CharField(max_length=40, blank=True, null=True)
    reference_id = models.CharField(max_length=64, blank=True, null=True)

    branch = models.CharField(max_length=50, blank=True, default="")

    status = models.CharField(max_length=10, choices=STATUSES, default=STATUS_POSTED)

    reversal_of = models.ForeignKey(
        "self",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="reversals",
    )

    created_by_id = models.PositiveIntegerField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-entry_date", "-entry_number"]
        indexes = [
            models.Index(fields=["entry_date"]),
            models.Index(fields=["period"]),
            models.Index(fields=["status"]),
            models.Index(fields=["reference_type", "reference_id"]),
            models.Index(fields=["branch"]),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["reference_type", "reference_id"],
                condition=Q(reference_type__isnull=False, reference_id__isnull=False),
                name="uniq_journal_reference",
            ),
            models.CheckConstraint(
                condition=Q(entry_number__gte=1),
                name="chk_journal_entry_number_positive",
            ),
        ]
        verbose_name = "Journal Entry"
        verbose_name_plural = "Journal Entries"

    def __str__(self):
        return f"JournalEntry #{self.entry_number} - {self.entry_date}"

    @property
    def is_manual(self) -> bool:
        return not self.reference_type

    def clean(self):
        for attr in ("reference_type", "reference_id"):
            value = getattr(self, attr)
            if value is not None:
                setattr(self, attr, str(value).strip() or None)

        self.description = (self.description or "").strip()
        if not self.description:
            raise ValidationError("Journal entry description is required")

        if self.entry_date:
            self.period = period_key(self.entry_date)

    def save(self, *args, **kwargs):
        if self.pk:
            update_fields = set(kwargs.get("update_fields") or ())
            if update_fields != {"status"} or self.status != self.STATUS_REVERSED:
                raise ValidationError("JournalEntry records are immutable once created")
            return super().save(*args, **kwargs)

        if self.entry_date:
            self.period = period_key(self.entry_date)

        self.full_clean()
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError(
            "JournalEntry records can only be removed through journal_entry_service.delete_entry"
        )
