# accounting/models/document.py

"""
======================================================
PATH: accounting/models/document.py
======================================================
POSTABLE SOURCE DOCUMENT (ABSTRACT)

Shared shape of every business document that the ledger posts:
expenses, sales invoices, supplier invoices and payroll runs.

Rules:
- Concrete models declare COMMITTED_STATUSES and a CheckConstraint
  `status NOT IN committed OR journal_entry IS NOT NULL`.
- journal_entry is a soft reference (no DB foreign key) so a corrective
  journal delete can leave a dangling id behind; the integrity service
  detects those as orphans.
- Once committed in the DB, only the status may change.
"""

from __future__ import annotations

from django.core.exceptions import ValidationError
from django.db import models

from accounting.models.journal import JournalEntry


def committed_requires_journal(statuses):
    """Condition for the per-table orphan CHECK constraint."""
    return ~models.Q(status__in=list(statuses)) | models.Q(journal_entry__isnull=False)


class PostableDocument(models.Model):
    STATUS_DRAFT = "draft"
    STATUS_POSTED = "posted"
    STATUS_REVERSED = "reversed"

    COMMITTED_STATUSES: tuple[str, ...] = (STATUS_POSTED, STATUS_REVERSED)

    PAYMENT_CASH = "cash"
    PAYMENT_BANK = "bank"
    PAYMENT_CREDIT = "credit"

    PAYMENT_METHODS = [
        (PAYMENT_CASH, "Cash"),
        (PAYMENT_BANK, "Bank / Card"),
        (PAYMENT_CREDIT, "Credit"),
    ]

    branch = models.CharField(max_length=50, blank=True, default="")

    journal_entry = models.ForeignKey(
        JournalEntry,
        on_delete=models.DO_NOTHING,
        db_constraint=False,
        null=True,
        blank=True,
        related_name="+",
    )

    created_by_id = models.PositiveIntegerField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        abstract = True

    @property
    def is_committed(self) -> bool:
        return self.status in self.COMMITTED_STATUSES

    def save(self, *args, **kwargs):
        if self.pk:
            stored = type(self).objects.filter(pk=self.pk).values_list("status", flat=True).first()
            if stored in self.COMMITTED_STATUSES:
                update_fields = set(kwargs.get("update_fields") or ())
                if not update_fields or not update_fields <= {"status"}:
                    raise ValidationError(
                        f"{type(self).__name__} is committed; only its status may change"
                    )
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        if self.pk and type(self).objects.filter(
            pk=self.pk, status__in=self.COMMITTED_STATUSES
        ).exists():
            raise ValidationError(f"Committed {type(self).__name__} records cannot be deleted")
        return super().delete(*args, **kwargs)
