# accounting/models/posting.py

"""
======================================================
PATH: accounting/models/posting.py
======================================================
JOURNAL POSTING MODEL

A single debit-or-credit line of a journal entry, tied to one account.

Guarantees:
- Immutable once created (no updates, no model deletes)
- Exactly one of debit / credit is strictly positive, neither is negative
- The entry-level debit == credit rule is enforced by journal_entry_service
"""

from __future__ import annotations

from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q

from accounting.models.account import Account
from accounting.models.journal import JournalEntry


class JournalPosting(models.Model):
    journal_entry = models.ForeignKey(
        JournalEntry,
        on_delete=models.PROTECT,
        related_name="postings",
    )

    account = models.ForeignKey(
        Account,
        on_delete=models.PROTECT,
        related_name="postings",
    )

    debit = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    credit = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))

    memo = models.CharField(max_length=255, blank=True, default="")

    class Meta:
        verbose_name = "Journal Posting"
        verbose_name_plural = "Journal Postings"
        ordering = ["id"]
        indexes = [
            models.Index(fields=["account"]),
            models.Index(fields=["journal_entry"]),
            models.Index(fields=["account", "journal_entry"]),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(debit__gte=0) & Q(credit__gte=0),
                name="chk_posting_amounts_not_negative",
            ),
            models.CheckConstraint(
                condition=(Q(debit__gt=0) & Q(credit=0)) | (Q(debit=0) & Q(credit__gt=0)),
                name="chk_posting_single_side",
            ),
        ]

    def __str__(self):
        side = "Dr" if self.debit > 0 else "Cr"
        amount = self.debit if self.debit > 0 else self.credit
        return f"{side} {amount} -> {self.account}"

    @property
    def signed_amount(self) -> Decimal:
        return (self.debit or Decimal("0.00")) - (self.credit or Decimal("0.00"))

    def save(self, *args, **kwargs):
        if self.pk:
            raise ValidationError("JournalPosting records are immutable and cannot be modified")
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError("JournalPosting records cannot be deleted directly")
