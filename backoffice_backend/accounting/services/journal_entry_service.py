# accounting/services/journal_entry_service.py

"""
======================================================
PATH: accounting/services/journal_entry_service.py
======================================================
JOURNAL ENTRY SERVICE (ACCOUNTING ENGINE)

This module is the ONLY place allowed to:
- Create / reverse / delete JournalEntry
- Create JournalPosting
- Allocate entry numbers (recycling numbers freed by deletes)
- Enforce debit == credit (tolerance 0.01)
- Enforce period locks (no posting into closed years / months)
- Enforce one entry per source document reference

Everything else (invoices, expenses, supplier invoices, payroll) must pass
through here, usually via entry_builders.

Concurrency:
- Entry numbers are allocated under SELECT ... FOR UPDATE on the
  EntryNumberSequence row; entry_number is also UNIQUE in the DB.
- Only the allocation step is retried on OperationalError (bounded).
  Posting inserts are never retried.
"""

from __future__ import annotations

import logging
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from django.conf import settings
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import IntegrityError, OperationalError, transaction
from django.utils import timezone

from accounting.models.account import Account
from accounting.models.journal import JournalEntry
from accounting.models.posting import JournalPosting
from accounting.models.sequence import EntryNumberSequence, ReleasedEntryNumber
from accounting.services.account_directory import get_account
from accounting.services.exceptions import (
    AlreadyReversedError,
    ConflictError,
    IdempotencyError,
    LedgerValidationError,
    NotFoundError,
    ReferencedError,
    UnbalancedEntryError,
)
from accounting.services.period_guard import assert_can_post

logger = logging.getLogger(__name__)

TWOPLACES = Decimal("0.01")
ZERO = Decimal("0.00")
MAX_AMOUNT = Decimal("1000000000000")


def _tolerance() -> Decimal:
    return Decimal(str(getattr(settings, "ACCOUNTING_BALANCE_TOLERANCE", "0.01")))


def _allocation_retries() -> int:
    return max(1, int(getattr(settings, "ACCOUNTING_ENTRY_NUMBER_RETRIES", 3)))


def money(value) -> Decimal:
    if value is None or value == "":
        return ZERO

    if isinstance(value, Decimal):
        amt = value
    else:
        try:
            amt = Decimal(str(value))
        except (InvalidOperation, ValueError, TypeError) as exc:
            raise LedgerValidationError(f"Invalid money value: {value!r}") from exc

    if not amt.is_finite():
        raise LedgerValidationError(f"Invalid money value: {value!r}")

    try:
        amt = amt.quantize(TWOPLACES, rounding=ROUND_HALF_UP)
    except InvalidOperation as exc:
        raise LedgerValidationError(f"Money value out of range: {value!r}") from exc

    # Fits DecimalField(max_digits=14, decimal_places=2)
    if abs(amt) >= MAX_AMOUNT:
        raise LedgerValidationError(f"Money value out of range: {value!r}")

    return amt


def _as_date(value) -> date:
    if value is None:
        return timezone.localdate()
    if isinstance(value, datetime):
        if timezone.is_naive(value):
            value = timezone.make_aware(value, timezone.get_current_timezone())
        return timezone.localtime(value).date()
    if isinstance(value, date):
        return value
    raise LedgerValidationError(f"Invalid entry date: {value!r}")


# ------------------------------------------------------------
# ENTRY NUMBERS
# ------------------------------------------------------------


def _scan_numbers() -> tuple[int, list[int]]:
    """High-water mark and gaps (ascending) from the current entry numbers."""
    used = set(JournalEntry.objects.values_list("entry_number", flat=True))
    high_water = (max(used) + 1) if used else 1
    gaps = [n for n in range(1, high_water) if n not in used]
    return high_water, gaps


def next_entry_number() -> int:
    """
    Smallest positive integer not currently used by a journal entry.

    Read-only preview; create_entry allocates under a lock.
    """
    released = ReleasedEntryNumber.objects.order_by("number").values_list("number", flat=True).first()
    seq = EntryNumberSequence.objects.filter(key=EntryNumberSequence.JOURNAL_ENTRIES).first()

    if seq is None:
        high_water, gaps = _scan_numbers()
        return gaps[0] if gaps else high_water

    if released is not None and released < seq.next_value:
        return released
    return seq.next_value


def _locked_sequence() -> EntryNumberSequence:
    key = EntryNumberSequence.JOURNAL_ENTRIES
    try:
        return EntryNumberSequence.objects.select_for_update().get(key=key)
    except EntryNumberSequence.DoesNotExist:
        high_water, gaps = _scan_numbers()
        try:
            with transaction.atomic():
                EntryNumberSequence.objects.create(key=key, next_value=high_water)
                ReleasedEntryNumber.objects.bulk_create(
                    [ReleasedEntryNumber(number=n) for n in gaps],
                    ignore_conflicts=True,
                )
        except IntegrityError:
            pass
        return EntryNumberSequence.objects.select_for_update().get(key=key)


def _allocate_once() -> int:
    seq = _locked_sequence()

    released = (
        ReleasedEntryNumber.objects.select_for_update()
        .filter(number__lt=seq.next_value)
        .order_by("number")
        .first()
    )
    if released is not None:
        number = released.number
        ReleasedEntryNumber.objects.filter(pk=released.pk).delete()
        return number

    number = seq.next_value
    seq.next_value = number + 1
    seq.save(update_fields=["next_value", "updated_at"])
    return number


def _allocate_entry_number() -> int:
    attempts = _allocation_retries()
    for attempt in range(1, attempts + 1):
        try:
            with transaction.atomic():
                return _allocate_once()
        except OperationalError:
            if attempt >= attempts:
                raise
            logger.warning("Entry number allocation failed (attempt %s/%s), retrying", attempt, attempts)
    raise ConflictError("Could not allocate an entry number")


def _release_entry_number(number: int) -> None:
    seq = _locked_sequence()
    if number >= seq.next_value:
        return
    ReleasedEntryNumber.objects.get_or_create(number=number)


@transaction.atomic
def rebuild_entry_number_sequence(*, dry_run: bool = True) -> dict:
    """
    Rebuild the high-water mark and free list from a scan of journal entries.
    """
    high_water, gaps = _scan_numbers()
    seq = EntryNumberSequence.objects.select_for_update().filter(key=EntryNumberSequence.JOURNAL_ENTRIES).first()
    current_free = sorted(ReleasedEntryNumber.objects.values_list("number", flat=True))

    result = {
        "next_value_before": seq.next_value if seq else None,
        "next_value_after": high_water,
        "released_before": current_free,
        "released_after": gaps,
        "changed": seq is None or seq.next_value != high_water or current_free != gaps,
        "dry_run": dry_run,
    }

    if dry_run or not result["changed"]:
        return result

    if seq is None:
        EntryNumberSequence.objects.create(key=EntryNumberSequence.JOURNAL_ENTRIES, next_value=high_water)
    else:
        seq.next_value = high_water
        seq.save(update_fields=["next_value", "updated_at"])

    ReleasedEntryNumber.objects.all().delete()
    ReleasedEntryNumber.objects.bulk_create([ReleasedEntryNumber(number=n) for n in gaps])

    logger.warning("Entry number sequence rebuilt: next=%s, %s released numbers", high_water, len(gaps))
    return result


# ------------------------------------------------------------
# CREATE
# ------------------------------------------------------------


def _normalize_reference(reference_type, reference_id) -> tuple[str | None, str | None]:
    rt = str(reference_type).strip() if reference_type is not None else ""
    rid = str(reference_id).strip() if reference_id is not None else ""

    if not rt and not rid:
        return None, None
    if not rt or not rid:
        raise LedgerValidationError("reference_type and reference_id must be provided together")
    return rt, rid


def _resolve_posting_account(raw) -> Account:
    if raw is None or raw == "":
        raise LedgerValidationError("Posting missing account")
    try:
        return get_account(raw)
    except NotFoundError as exc:
        raise LedgerValidationError(str(exc)) from exc


@transaction.atomic
def create_entry(
    *,
    description: str,
    entry_date=None,
    postings: list,
    reference_type: str | None = None,
    reference_id=None,
    branch: str = "",
    actor_id=None,
    reversal_of: JournalEntry | None = None,
) -> JournalEntry:
    """
    Create a posted journal entry with its postings.

    postings: [{"account": Account | id | code, "debit": ..., "credit": ..., "memo": ""}]
    """
    if not postings:
        raise LedgerValidationError("Journal entry must contain at least one posting")

    total_debits = ZERO
    total_credits = ZERO
    amounts: list[tuple[dict, Decimal, Decimal]] = []

    for line in postings:
        if not isinstance(line, dict):
            raise LedgerValidationError("Each posting must be an object/dict")

        debit = money(line.get("debit"))
        credit = money(line.get("credit"))
        total_debits += debit
        total_credits += credit
        amounts.append((line, debit, credit))

    if abs(total_debits - total_credits) > _tolerance():
        raise UnbalancedEntryError(
            f"Journal entry not balanced: debits={total_debits} credits={total_credits}"
        )

    description = (description or "").strip()
    if not description:
        raise LedgerValidationError("Journal entry description is required")

    reference_type, reference_id = _normalize_reference(reference_type, reference_id)
    is_manual = reference_type is None

    normalized: list[dict] = []
    for line, debit, credit in amounts:
        account = _resolve_posting_account(line.get("account"))

        if debit < 0 or credit < 0:
            raise LedgerValidationError("Debit or credit cannot be negative")
        if debit > 0 and credit > 0:
            raise LedgerValidationError("A posting cannot have both debit and credit")
        if debit == 0 and credit == 0:
            raise LedgerValidationError("A posting must have either debit or credit")
        if not account.is_active and reversal_of is None:
            raise LedgerValidationError(f"Account {account.code} is inactive")
        if is_manual and not account.allow_manual_entry:
            raise LedgerValidationError(f"Account {account.code} does not accept manual entries")

        normalized.append(
            {
                "account": account,
                "debit": debit,
                "credit": credit,
                "memo": str(line.get("memo") or "")[:255],
            }
        )

    entry_date = _as_date(entry_date)

    # Period lock enforcement (engine choke-point)
    assert_can_post(entry_date)

    if reference_type and JournalEntry.objects.filter(
        reference_type=reference_type, reference_id=reference_id
    ).exists():
        raise IdempotencyError(
            f"Journal entry already exists for {reference_type}:{reference_id}"
        )

    number = _allocate_entry_number()

    try:
        with transaction.atomic():
            entry = JournalEntry.objects.create(
                entry_number=number,
                description=description,
                entry_date=entry_date,
                reference_type=reference_type,
                reference_id=reference_id,
                branch=(branch or "").strip(),
                status=JournalEntry.STATUS_POSTED,
                reversal_of=reversal_of,
                created_by_id=actor_id,
            )
    except (IntegrityError, DjangoValidationError) as exc:
        if reference_type and JournalEntry.objects.filter(
            reference_type=reference_type, reference_id=reference_id
        ).exists():
            raise IdempotencyError(
                f"Journal entry already exists for {reference_type}:{reference_id}"
            ) from exc
        raise ConflictError(f"Failed to create journal entry #{number}: {exc}") from exc

    JournalPosting.objects.bulk_create(
        [
            JournalPosting(
                journal_entry=entry,
                account=line["account"],
                debit=line["debit"],
                credit=line["credit"],
                memo=line["memo"],
            )
            for line in normalized
        ]
    )

    logger.info(
        "Journal entry #%s posted (%s, debit=%s credit=%s, ref=%s:%s)",
        entry.entry_number,
        entry.entry_date,
        total_debits,
        total_credits,
        reference_type,
        reference_id,
    )
    return entry


# ------------------------------------------------------------
# REVERSE
# ------------------------------------------------------------


@transaction.atomic
def reverse_entry(*, entry_id, actor_id=None, entry_date=None) -> JournalEntry:
    """
    Create the mirror entry of `entry_id` and flip the original to reversed.

    The reversing entry is dated today unless entry_date is passed, and goes
    through the same period guard as any other entry.
    """
    try:
        original = JournalEntry.objects.select_for_update().get(pk=entry_id)
    except (JournalEntry.DoesNotExist, ValueError, TypeError) as exc:
        raise NotFoundError(f"Journal entry {entry_id} not found") from exc

    if original.status == JournalEntry.STATUS_REVERSED:
        raise AlreadyReversedError(f"Journal entry #{original.entry_number} is already reversed")

    mirrored = [
        {
            "account": p.account,
            "debit": p.credit,
            "credit": p.debit,
            "memo": p.memo,
        }
        for p in original.postings.select_related("account").order_by("id")
    ]

    reversal = create_entry(
        description=f"Reversal of entry #{original.entry_number} - {original.description}",
        entry_date=entry_date or timezone.localdate(),
        postings=mirrored,
        reference_type=JournalEntry.REFERENCE_REVERSAL,
        reference_id=str(original.id),
        branch=original.branch,
        actor_id=actor_id,
        reversal_of=original,
    )

    original.status = JournalEntry.STATUS_REVERSED
    original.save(update_fields=["status"])

    logger.info(
        "Journal entry #%s reversed by #%s (actor=%s)",
        original.entry_number,
        reversal.entry_number,
        actor_id,
    )
    return reversal


# ------------------------------------------------------------
# CORRECTIVE DELETE
# ------------------------------------------------------------


@transaction.atomic
def delete_entry(*, entry_id, actor_id=None) -> int:
    """
    Remove an entry and its postings, returning its number to the free list.

    - Refused while a reversing entry points at it (delete the reversal first).
    - Deleting a reversing entry puts its original back to posted.
    - Refused when the entry date is in a locked period.

    Documents that referenced the entry become orphans; the integrity
    service reports and repairs them.
    """
    try:
        entry = JournalEntry.objects.select_for_update().get(pk=entry_id)
    except (JournalEntry.DoesNotExist, ValueError, TypeError) as exc:
        raise NotFoundError(f"Journal entry {entry_id} not found") from exc

    if JournalEntry.objects.filter(reversal_of=entry).exists():
        raise ReferencedError(
            f"Journal entry #{entry.entry_number} has a reversing entry; delete that first"
        )

    assert_can_post(entry.entry_date)

    number = entry.entry_number
    original_id = entry.reversal_of_id

    JournalPosting.objects.filter(journal_entry=entry).delete()
    JournalEntry.objects.filter(pk=entry.pk).delete()

    if original_id is not None:
        JournalEntry.objects.filter(pk=original_id).update(status=JournalEntry.STATUS_POSTED)

    _release_entry_number(number)

    logger.warning("Journal entry #%s deleted (actor=%s)", number, actor_id)
    return number


def get_entry(entry_id) -> JournalEntry:
    try:
        return JournalEntry.objects.prefetch_related("postings__account").get(pk=entry_id)
    except (JournalEntry.DoesNotExist, ValueError, TypeError) as exc:
        raise NotFoundError(f"Journal entry {entry_id} not found") from exc
