# accounting/models/sequence.py

"""
======================================================
PATH: accounting/models/sequence.py
======================================================
ENTRY NUMBER SEQUENCE (WITH RECYCLING)

- EntryNumberSequence: one locked row per sequence key holding the
  high-water mark (next never-used number).
- ReleasedEntryNumber: free list of numbers returned by corrective deletes.
  Allocation always takes the smallest released number first.

Both are written only by journal_entry_service while the sequence row is
held with SELECT ... FOR UPDATE.
"""

from __future__ import annotations

from django.db import models
from django.db.models import Q


class EntryNumberSequence(models.Model):
    JOURNAL_ENTRIES = "journal_entries"

    key = models.CharField(max_length=50, unique=True)
    next_value = models.PositiveIntegerField(default=1)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Entry Number Sequence"
        verbose_name_plural = "Entry Number Sequences"
        constraints = [
            models.CheckConstraint(
                condition=Q(next_value__gte=1),
                name="chk_entry_sequence_next_positive",
            ),
        ]

    def __str__(self):
        return f"{self.key} -> {self.next_value}"


class ReleasedEntryNumber(models.Model):
    number = models.PositiveIntegerField(unique=True)
    released_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["number"]
        verbose_name = "Released Entry Number"
        verbose_name_plural = "Released Entry Numbers"

    def __str__(self):
        return str(self.number)
