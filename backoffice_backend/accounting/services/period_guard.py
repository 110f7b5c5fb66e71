# accounting/services/period_guard.py

"""
======================================================
PATH: accounting/services/period_guard.py
======================================================
PERIOD GUARD

Purpose:
- Decide whether postings dated on a given day are currently permitted.
- Administer fiscal-year and month locks (audited).

Rules:
- A date is postable when its fiscal year is open OR temporarily opened,
  AND its month (AccountingPeriod) is not closed.
- No fiscal year covering the date -> not postable.
- Exactly one fiscal year is open at any time once the books are set up.
  close_year() refuses to leave zero open years unless a successor is
  opened in the same transaction.
- temporary_open never changes status.
- Every transition writes FiscalYearActivity and logs.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import date, datetime

from django.db import IntegrityError, transaction
from django.utils import timezone

from accounting.models.fiscal_year import AccountingPeriod, FiscalYear, FiscalYearActivity
from accounting.models.journal import period_key
from accounting.services.exceptions import (
    ConflictError,
    LedgerValidationError,
    NotFoundError,
    PeriodClosedError,
)

logger = logging.getLogger(__name__)

NO_FISCAL_YEAR_REASON = "no fiscal year for date"
PERIOD_KEY_RE = re.compile(r"^\d{4}-(0[1-9]|1[0-2])$")


@dataclass(frozen=True)
class PostingCheck:
    allowed: bool
    reason: str | None = None
    fiscal_year: FiscalYear | None = None


def _to_date(value: datetime | date | None) -> date:
    if value is None:
        return timezone.localdate()
    if isinstance(value, datetime):
        if timezone.is_naive(value):
            value = timezone.make_aware(value, timezone.get_current_timezone())
        return timezone.localtime(value).date()
    if isinstance(value, date):
        return value
    raise LedgerValidationError(f"Invalid date: {value!r}")


def resolve_fiscal_year(value: datetime | date | None) -> FiscalYear | None:
    d = _to_date(value)
    return FiscalYear.objects.filter(start_date__lte=d, end_date__gte=d).first()


def can_post(value: datetime | date | None) -> PostingCheck:
    """
    Year lock first, then month lock. Either can deny on its own.
    """
    d = _to_date(value)
    fiscal_year = resolve_fiscal_year(d)

    if fiscal_year is None:
        return PostingCheck(allowed=False, reason=NO_FISCAL_YEAR_REASON)

    if not fiscal_year.accepts_postings:
        return PostingCheck(
            allowed=False,
            reason=f"fiscal year {fiscal_year.year} is closed",
            fiscal_year=fiscal_year,
        )

    month = period_key(d)
    if AccountingPeriod.objects.filter(period=month, status=AccountingPeriod.STATUS_CLOSED).exists():
        return PostingCheck(
            allowed=False,
            reason=f"accounting period {month} is closed",
            fiscal_year=fiscal_year,
        )

    return PostingCheck(allowed=True, fiscal_year=fiscal_year)


def assert_can_post(value: datetime | date | None) -> FiscalYear:
    check = can_post(value)
    if not check.allowed:
        raise PeriodClosedError(f"Posting blocked for {_to_date(value)}: {check.reason}")
    return check.fiscal_year


# ------------------------------------------------------------
# ADMINISTRATION
# ------------------------------------------------------------


def _log_activity(*, action: str, actor_id=None, reason: str = "", fiscal_year=None, period: str = ""):
    FiscalYearActivity.objects.create(
        fiscal_year=fiscal_year,
        period=period,
        action=action,
        actor_id=actor_id,
        reason=reason or "",
    )
    target = fiscal_year.year if fiscal_year is not None else period
    logger.info("Period activity %s on %s by actor=%s", action, target, actor_id)


def _lock_year(year: int) -> FiscalYear:
    try:
        return FiscalYear.objects.select_for_update().get(year=int(year))
    except FiscalYear.DoesNotExist as exc:
        raise NotFoundError(f"Fiscal year {year} not found") from exc


@transaction.atomic
def create_fiscal_year(
    *,
    year: int,
    actor_id=None,
    start_date: date | None = None,
    end_date: date | None = None,
) -> FiscalYear:
    """
    Create a calendar fiscal year. It starts open only when no other year is
    open, so the single-open-year rule holds from the first setup onwards.
    """
    year = int(year)
    if FiscalYear.objects.filter(year=year).exists():
        raise ConflictError(f"Fiscal year {year} already exists")

    start_date = start_date or date(year, 1, 1)
    end_date = end_date or date(year, 12, 31)
    if end_date < start_date:
        raise LedgerValidationError("end_date must be >= start_date")

    if FiscalYear.objects.filter(start_date__lte=end_date, end_date__gte=start_date).exists():
        raise ConflictError(f"Fiscal year {year} overlaps an existing fiscal year")

    has_open = FiscalYear.objects.filter(status=FiscalYear.STATUS_OPEN).exists()
    fiscal_year = FiscalYear.objects.create(
        year=year,
        start_date=start_date,
        end_date=end_date,
        status=FiscalYear.STATUS_CLOSED if has_open else FiscalYear.STATUS_OPEN,
    )
    _log_activity(action=FiscalYearActivity.ACTION_CREATED, actor_id=actor_id, fiscal_year=fiscal_year)
    return fiscal_year


@transaction.atomic
def open_temporarily(*, year: int, actor_id, reason: str) -> FiscalYear:
    reason = (reason or "").strip()
    if not reason:
        raise LedgerValidationError("A reason is required to temporarily open a fiscal year")

    fiscal_year = _lock_year(year)
    if fiscal_year.status != FiscalYear.STATUS_CLOSED:
        raise ConflictError(f"Fiscal year {fiscal_year.year} is not closed")
    if fiscal_year.temporary_open:
        raise ConflictError(f"Fiscal year {fiscal_year.year} is already temporarily open")

    fiscal_year.temporary_open = True
    fiscal_year.temporary_opened_by_id = actor_id
    fiscal_year.temporary_opened_at = timezone.now()
    fiscal_year.temporary_open_reason = reason
    fiscal_year.save(
        update_fields=[
            "temporary_open",
            "temporary_opened_by_id",
            "temporary_opened_at",
            "temporary_open_reason",
            "updated_at",
        ]
    )

    _log_activity(
        action=FiscalYearActivity.ACTION_TEMPORARY_OPEN,
        actor_id=actor_id,
        reason=reason,
        fiscal_year=fiscal_year,
    )
    return fiscal_year


@transaction.atomic
def close_temporary(*, year: int, actor_id=None, reason: str = "") -> FiscalYear:
    fiscal_year = _lock_year(year)
    if not fiscal_year.temporary_open:
        raise ConflictError(f"Fiscal year {fiscal_year.year} is not temporarily open")

    fiscal_year.temporary_open = False
    fiscal_year.save(update_fields=["temporary_open", "updated_at"])

    _log_activity(
        action=FiscalYearActivity.ACTION_TEMPORARY_CLOSE,
        actor_id=actor_id,
        reason=reason,
        fiscal_year=fiscal_year,
    )
    return fiscal_year


@transaction.atomic
def close_year(*, year: int, actor_id, successor_year: int | None = None, reason: str = "") -> FiscalYear:
    """
    Close an open fiscal year and, when given, open successor_year in the
    same transaction (created as a calendar year if missing).
    """
    fiscal_year = _lock_year(year)
    if fiscal_year.status == FiscalYear.STATUS_CLOSED:
        raise ConflictError(f"Fiscal year {fiscal_year.year} is already closed")

    other_open = FiscalYear.objects.filter(status=FiscalYear.STATUS_OPEN).exclude(pk=fiscal_year.pk)
    if successor_year is None and not other_open.exists():
        raise ConflictError(
            f"Closing fiscal year {fiscal_year.year} would leave no open fiscal year; "
            "open a successor year in the same operation"
        )
    if successor_year is not None and int(successor_year) == fiscal_year.year:
        raise LedgerValidationError("The successor year must differ from the year being closed")

    fiscal_year.status = FiscalYear.STATUS_CLOSED
    fiscal_year.temporary_open = False
    fiscal_year.closed_by_id = actor_id
    fiscal_year.closed_at = timezone.now()
    fiscal_year.save(update_fields=["status", "temporary_open", "closed_by_id", "closed_at", "updated_at"])

    _log_activity(
        action=FiscalYearActivity.ACTION_CLOSED,
        actor_id=actor_id,
        reason=reason,
        fiscal_year=fiscal_year,
    )

    if successor_year is not None:
        _open_successor(year=int(successor_year), actor_id=actor_id)

    return fiscal_year


def _open_successor(*, year: int, actor_id) -> FiscalYear:
    successor = FiscalYear.objects.select_for_update().filter(year=year).first()
    if successor is None:
        return create_fiscal_year(year=year, actor_id=actor_id)

    if successor.status == FiscalYear.STATUS_OPEN:
        return successor

    successor.status = FiscalYear.STATUS_OPEN
    successor.temporary_open = False
    try:
        with transaction.atomic():
            successor.save(update_fields=["status", "temporary_open", "updated_at"])
    except IntegrityError as exc:
        raise ConflictError("Another fiscal year is already open") from exc

    _log_activity(action=FiscalYearActivity.ACTION_OPENED, actor_id=actor_id, fiscal_year=successor)
    return successor


def _normalize_period(period) -> str:
    if isinstance(period, (date, datetime)):
        return period_key(period)
    value = str(period or "").strip()
    if not PERIOD_KEY_RE.match(value):
        raise LedgerValidationError(f"Invalid accounting period {period!r} (expected YYYY-MM)")
    return value


@transaction.atomic
def close_month(*, period, actor_id, reason: str = "") -> AccountingPeriod:
    key = _normalize_period(period)
    row, _created = AccountingPeriod.objects.select_for_update().get_or_create(period=key)
    if row.status == AccountingPeriod.STATUS_CLOSED:
        raise ConflictError(f"Accounting period {key} is already closed")

    row.status = AccountingPeriod.STATUS_CLOSED
    row.closed_by_id = actor_id
    row.closed_at = timezone.now()
    row.save(update_fields=["status", "closed_by_id", "closed_at", "updated_at"])

    _log_activity(
        action=FiscalYearActivity.ACTION_MONTH_CLOSED,
        actor_id=actor_id,
        reason=reason,
        period=key,
        fiscal_year=resolve_fiscal_year(date(int(key[:4]), int(key[5:]), 1)),
    )
    return row


@transaction.atomic
def open_month(*, period, actor_id, reason: str = "") -> AccountingPeriod:
    key = _normalize_period(period)
    row, _created = AccountingPeriod.objects.select_for_update().get_or_create(period=key)
    if row.status == AccountingPeriod.STATUS_OPEN:
        raise ConflictError(f"Accounting period {key} is already open")

    row.status = AccountingPeriod.STATUS_OPEN
    row.save(update_fields=["status", "updated_at"])

    _log_activity(
        action=FiscalYearActivity.ACTION_MONTH_OPENED,
        actor_id=actor_id,
        reason=reason,
        period=key,
        fiscal_year=resolve_fiscal_year(date(int(key[:4]), int(key[5:]), 1)),
    )
    return row
