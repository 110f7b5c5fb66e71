# PATH: accounting/services/expense_service.py

"""
EXPENSE POSTING SERVICE

Responsibilities:
- Validate expense payload (lines, tax, payment method)
- Create Expense + ExpenseLine business records
- Post the JournalEntry through entry_builders (atomic + idempotent)
- Reverse a posted expense

Rule:
- Create, post and attach happen in ONE transaction; any failure
  (unbalanced, closed period, missing mapping) leaves no Expense row.

Accounting Effect:
- Dr Expense line accounts
- Dr VAT input (tax)
- Cr Cash / Bank / Accrued expenses (total)
"""

from __future__ import annotations

import logging
from datetime import date as date_type
from decimal import Decimal

from django.db import transaction
from django.utils import timezone

from accounting.models.expense import Expense, ExpenseLine
from accounting.services.account_resolver import resolve_account_code
from accounting.services.document_posting import attach_entry, reverse_document
from accounting.services.entry_builders import create_expense_entry
from accounting.services.exceptions import LedgerValidationError
from accounting.services.journal_entry_service import money

logger = logging.getLogger(__name__)

KIND = "expense"
VALID_METHODS = {value for value, _label in Expense.PAYMENT_METHODS}


def _normalize_expense_date(expense_date) -> date_type:
    if expense_date is None:
        return timezone.localdate()
    if isinstance(expense_date, date_type):
        return expense_date
    raise LedgerValidationError("expense_date must be a date")


def _normalize_lines(lines) -> list[dict]:
    if not lines:
        raise LedgerValidationError("Expense must have at least one line")

    normalized = []
    for raw in lines:
        amount = money(raw.get("amount"))
        if amount <= Decimal("0.00"):
            raise LedgerValidationError("Expense line amount must be > 0")
        normalized.append(
            {
                "account": resolve_account_code(raw.get("account_code"), purpose="expense line"),
                "amount": amount,
                "description": str(raw.get("description") or "").strip(),
            }
        )
    return normalized


@transaction.atomic
def post_expense(
    *,
    payment_method: str,
    lines: list[dict],
    expense_date=None,
    tax_amount=0,
    vendor: str = "",
    description: str = "",
    branch: str = "",
    actor_id=None,
) -> Expense:
    """
    lines: [{"account_code": "5120", "amount": "100.00", "description": ""}]
    """
    method = (payment_method or Expense.PAYMENT_CASH).strip().lower()
    if method not in VALID_METHODS:
        raise LedgerValidationError("Invalid payment_method. Use 'cash', 'bank', or 'credit'.")

    expense_date = _normalize_expense_date(expense_date)
    normalized = _normalize_lines(lines)

    tax = money(tax_amount)
    if tax < Decimal("0.00"):
        raise LedgerValidationError("tax_amount cannot be negative")

    subtotal = sum((ln["amount"] for ln in normalized), Decimal("0.00"))
    total = subtotal + tax

    expense = Expense.objects.create(
        expense_date=expense_date,
        payment_method=method,
        vendor=(vendor or "").strip(),
        description=(description or "").strip(),
        subtotal=subtotal,
        tax_amount=tax,
        total=total,
        branch=(branch or "").strip().lower(),
        status=Expense.STATUS_DRAFT,
        created_by_id=actor_id,
    )
    ExpenseLine.objects.bulk_create(
        [
            ExpenseLine(
                expense=expense,
                account=ln["account"],
                amount=ln["amount"],
                description=ln["description"],
            )
            for ln in normalized
        ]
    )

    entry = create_expense_entry(
        expense_id=expense.id,
        entry_date=expense.expense_date,
        branch=expense.branch,
        payment_method=method,
        lines=[(ln["account"].code, ln["amount"], ln["description"]) for ln in normalized],
        tax=tax,
        total=total,
        description=expense.description or expense.vendor or f"Expense #{expense.id}",
        actor_id=actor_id,
    )

    return attach_entry(expense, entry, status=Expense.STATUS_POSTED, kind=KIND)


def reverse_expense(*, expense_id, actor_id=None, entry_date=None) -> Expense:
    return reverse_document(
        Expense,
        document_id=expense_id,
        kind=KIND,
        actor_id=actor_id,
        entry_date=entry_date,
    )
