# accounting/services/document_posting.py

"""
======================================================
PATH: accounting/services/document_posting.py
======================================================
DOCUMENT <-> JOURNAL GLUE

Shared steps of every document creator (expense, invoice, supplier
invoice, payroll run):

- attach_entry(): store the entry id on the draft and flip it to its
  committed status in the caller's transaction
- reverse_document(): reverse the document's entry, then flip the document

Guarantees:
- A document is never committed without an existing entry
  (assert_document_posted runs before the save; the DB CHECK backs it up)
- Reversal flips the document only after the reversing entry exists
"""

from __future__ import annotations

import logging

from django.db import transaction

from accounting.models.journal import JournalEntry
from accounting.services.exceptions import (
    AlreadyReversedError,
    ConflictError,
    NotFoundError,
    OrphanIntegrityError,
)
from accounting.services.integrity_service import assert_document_posted
from accounting.services.journal_entry_service import reverse_entry

logger = logging.getLogger(__name__)


def attach_entry(document, entry: JournalEntry, *, status: str, kind: str):
    document.journal_entry = entry
    document.status = status
    assert_document_posted(document, kind=kind)
    document.save(update_fields=["journal_entry", "status"])

    logger.info("%s #%s %s with journal entry #%s", kind, document.pk, status, entry.entry_number)
    return document


@transaction.atomic
def reverse_document(model, *, document_id, kind: str, actor_id=None, entry_date=None):
    try:
        document = model.objects.select_for_update().get(pk=document_id)
    except (model.DoesNotExist, ValueError, TypeError) as exc:
        raise NotFoundError(f"{kind} {document_id} not found") from exc

    if document.status == model.STATUS_REVERSED:
        raise AlreadyReversedError(f"{kind} #{document.pk} is already reversed")
    if not document.is_committed:
        raise ConflictError(f"{kind} #{document.pk} is {document.status} and has no journal entry to reverse")
    if document.journal_entry_id is None or not JournalEntry.objects.filter(pk=document.journal_entry_id).exists():
        raise OrphanIntegrityError(f"{kind} #{document.pk} references a missing journal entry")

    reversal = reverse_entry(entry_id=document.journal_entry_id, actor_id=actor_id, entry_date=entry_date)

    document.status = model.STATUS_REVERSED
    document.save(update_fields=["status"])

    logger.info("%s #%s reversed by journal entry #%s", kind, document.pk, reversal.entry_number)
    return document
