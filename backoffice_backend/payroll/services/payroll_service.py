# payroll/services/payroll_service.py

"""
======================================================
PATH: payroll/services/payroll_service.py
======================================================
PAYROLL RUN SERVICE

post_payroll_run(): insert the run + items, accrue it in the ledger and
mark it approved, all in one transaction.

Rules:
- net = gross - deductions per item (rejected otherwise)
- one live run per (period, branch); reversed runs free the slot
"""

from __future__ import annotations

from decimal import Decimal

from django.db import transaction
from django.utils import timezone

from accounting.services.document_posting import attach_entry, reverse_document
from accounting.services.entry_builders import create_payroll_entry
from accounting.services.exceptions import ConflictError, LedgerValidationError
from accounting.services.journal_entry_service import money
from accounting.services.period_guard import PERIOD_KEY_RE
from payroll.models.payroll_run import PayrollItem, PayrollRun

KIND = "payroll_run"


def _build_items(items) -> list[dict]:
    if not items:
        raise LedgerValidationError("Payroll run must have at least one item")

    built = []
    for raw in items:
        name = str(raw.get("employee_name") or "").strip()
        if not name:
            raise LedgerValidationError("employee_name is required")

        gross = money(raw.get("gross"))
        deductions = money(raw.get("deductions"))
        if gross <= 0:
            raise LedgerValidationError(f"Gross pay for {name} must be > 0")
        if deductions < 0 or deductions > gross:
            raise LedgerValidationError(f"Deductions for {name} must be between 0 and gross")

        built.append(
            {
                "employee_id": raw.get("employee_id"),
                "employee_name": name,
                "gross": gross,
                "deductions": deductions,
                "net": gross - deductions,
            }
        )
    return built


@transaction.atomic
def post_payroll_run(
    *,
    period: str,
    items: list[dict],
    branch: str = "",
    run_date=None,
    actor_id=None,
) -> PayrollRun:
    """
    items: [{"employee_name": "...", "gross": "3000.00", "deductions": "250.00"}]
    """
    period = str(period or "").strip()
    if not PERIOD_KEY_RE.match(period):
        raise LedgerValidationError(f"Invalid payroll period {period!r} (expected YYYY-MM)")

    branch = (branch or "").strip().lower()
    if PayrollRun.objects.filter(period=period, branch=branch).exclude(
        status=PayrollRun.STATUS_REVERSED
    ).exists():
        raise ConflictError(f"A payroll run for {period} already exists")

    built = _build_items(items)
    gross = sum((i["gross"] for i in built), Decimal("0.00"))
    deductions = sum((i["deductions"] for i in built), Decimal("0.00"))
    net = gross - deductions

    run = PayrollRun.objects.create(
        period=period,
        run_date=run_date or timezone.localdate(),
        branch=branch,
        gross_total=gross,
        deductions_total=deductions,
        net_total=net,
        status=PayrollRun.STATUS_DRAFT,
        created_by_id=actor_id,
    )
    PayrollItem.objects.bulk_create([PayrollItem(run=run, **i) for i in built])

    entry = create_payroll_entry(
        payroll_run_id=run.pk,
        period=period,
        entry_date=run.run_date,
        branch=branch,
        gross=gross,
        deductions=deductions,
        net=net,
        actor_id=actor_id,
    )

    return attach_entry(run, entry, status=PayrollRun.STATUS_APPROVED, kind=KIND)


def reverse_payroll_run(*, payroll_run_id, actor_id=None, entry_date=None) -> PayrollRun:
    return reverse_document(
        PayrollRun,
        document_id=payroll_run_id,
        kind=KIND,
        actor_id=actor_id,
        entry_date=entry_date,
    )
