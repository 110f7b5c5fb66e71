# accounting/services/integrity_service.py

"""
======================================================
PATH: accounting/services/integrity_service.py
======================================================
INTEGRITY ENFORCER

Rule:
A document in a committed status (posted, open, paid, approved, reversed...)
MUST reference an existing journal entry.

Layers:
1. DB CHECK per document table (status NOT IN committed OR journal_entry IS NOT NULL)
2. assert_document_posted() at the service layer
3. find_orphans() / delete_orphans() for rows left dangling by a corrective
   journal delete (journal_entry id present, entry gone)

Maintenance is dry-run by default.
"""

from __future__ import annotations

import logging
from decimal import Decimal

from django.apps import apps
from django.conf import settings
from django.db import transaction
from django.db.models import Exists, OuterRef, Q, Sum
from django.db.models.functions import Coalesce

from accounting.models.journal import JournalEntry
from accounting.services.exceptions import OrphanIntegrityError

logger = logging.getLogger(__name__)

# report key -> (app_label.ModelName, reverse name of the line rows)
ORPHAN_RULES = {
    "expenses": ("accounting.Expense", "lines"),
    "invoices": ("sales.Invoice", "lines"),
    "supplier_invoices": ("purchases.SupplierInvoice", "lines"),
    "payroll_runs": ("payroll.PayrollRun", "items"),
}


def _model(kind: str):
    label, _lines = ORPHAN_RULES[kind]
    return apps.get_model(label)


def _orphan_queryset(kind: str):
    model = _model(kind)
    entry_exists = JournalEntry.objects.filter(pk=OuterRef("journal_entry_id"))
    return model.objects.filter(status__in=list(model.COMMITTED_STATUSES)).filter(
        Q(journal_entry_id__isnull=True) | ~Exists(entry_exists)
    )


def find_orphans() -> dict[str, list[dict]]:
    """
    Committed documents whose journal reference is null or points at a
    missing entry, grouped by document kind.
    """
    report: dict[str, list[dict]] = {}
    for kind in ORPHAN_RULES:
        rows = list(
            _orphan_queryset(kind)
            .order_by("id")
            .values("id", "status", "journal_entry_id")
        )
        report[kind] = rows
        if rows:
            logger.warning("Found %s orphan %s: %s", len(rows), kind, [r["id"] for r in rows])
    return report


def delete_orphans(*, dry_run: bool = True) -> dict[str, int]:
    """
    Count (dry run) or delete orphan documents and their lines.

    Deletion runs in one transaction; queryset deletes bypass the model-level
    guard on committed rows, which is the point of this repair path.
    """
    if dry_run:
        return {kind: _orphan_queryset(kind).count() for kind in ORPHAN_RULES}

    counts: dict[str, int] = {}
    with transaction.atomic():
        for kind, (_label, lines_name) in ORPHAN_RULES.items():
            model = _model(kind)
            ids = list(_orphan_queryset(kind).values_list("id", flat=True))
            if ids:
                line_model = model._meta.get_field(lines_name).related_model
                fk_name = model._meta.get_field(lines_name).field.name
                line_model.objects.filter(**{f"{fk_name}_id__in": ids}).delete()
                model.objects.filter(id__in=ids).delete()
                logger.warning("Deleted %s orphan %s: %s", len(ids), kind, ids)
            counts[kind] = len(ids)
    return counts


def assert_document_posted(document, *, kind: str) -> None:
    """
    Service-layer mirror of the DB constraint; call before saving a
    document in a committed status.
    """
    if document.status not in type(document).COMMITTED_STATUSES:
        return

    entry_id = document.journal_entry_id
    if entry_id is None or not JournalEntry.objects.filter(pk=entry_id).exists():
        raise OrphanIntegrityError(
            f"{kind} #{document.pk or '<new>'} cannot be {document.status} without a journal entry"
        )


def find_unbalanced_entries() -> list[dict]:
    tolerance = Decimal(str(getattr(settings, "ACCOUNTING_BALANCE_TOLERANCE", "0.01")))
    rows = JournalEntry.objects.annotate(
        total_debit=Coalesce(Sum("postings__debit"), Decimal("0.00")),
        total_credit=Coalesce(Sum("postings__credit"), Decimal("0.00")),
    ).values("id", "entry_number", "total_debit", "total_credit")

    unbalanced = []
    for row in rows:
        diff = row["total_debit"] - row["total_credit"]
        if abs(diff) > tolerance:
            unbalanced.append({**row, "difference": diff})
    return unbalanced
