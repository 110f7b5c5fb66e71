# accounting/services/entry_builders.py

"""
======================================================
PATH: accounting/services/entry_builders.py
======================================================
DOCUMENT ENTRY BUILDERS

Thin orchestrators over journal_entry_service.create_entry:
- resolve which accounts participate (via account_resolver mappings)
- build the postings list
- call the engine with (reference_type, reference_id) of the document

They never decide whether a document may be posted; the engine does that
(balance, period lock, idempotency). A missing mapped account raises
ConfigurationError, it is never skipped.

Accounting effects:
- Invoice:          Dr cash/bank or customer sub-account (total)
                    Cr sales (subtotal - discount), Cr VAT output (tax)
- Expense:          Dr expense line accounts, Dr VAT input (tax)
                    Cr cash/bank/accrued (total)
- Supplier invoice: Dr purchases (subtotal - discount), Dr VAT input (tax)
                    Cr cash/bank or supplier sub-account (total)
- Payroll run:      Dr salaries expense (gross)
                    Cr salaries payable (net), Cr deductions (deductions)
"""

from __future__ import annotations

from decimal import Decimal

from accounting.models.account_mapping import AccountMapping
from accounting.models.journal import JournalEntry
from accounting.services import account_resolver as resolver
from accounting.services.account_directory import get_or_create_partner_account
from accounting.services.exceptions import ConfigurationError, LedgerValidationError, NotFoundError
from accounting.services.journal_entry_service import create_entry, money

REF_INVOICE = "invoice"
REF_EXPENSE = "expense"
REF_SUPPLIER_INVOICE = "supplier_invoice"
REF_PAYROLL_RUN = "payroll_run"

CREDIT_METHOD = "credit"
ZERO = Decimal("0.00")


def _debit(account, amount, memo: str = "") -> dict:
    return {"account": account, "debit": amount, "credit": ZERO, "memo": memo}


def _credit(account, amount, memo: str = "") -> dict:
    return {"account": account, "debit": ZERO, "credit": amount, "memo": memo}


def _positive_lines(lines: list[dict]) -> list[dict]:
    """Drop zero-amount lines (e.g. no VAT) so the engine never sees empty postings."""
    return [ln for ln in lines if ln["debit"] > 0 or ln["credit"] > 0]


def _method(payment_method: str) -> str:
    return str(payment_method or "").strip().lower()


def create_invoice_entry(
    *,
    invoice_id,
    invoice_number: str,
    entry_date,
    branch: str,
    payment_method: str,
    subtotal,
    discount,
    tax,
    total,
    customer_id=None,
    customer_name: str = "",
    actor_id=None,
) -> JournalEntry:
    method = _method(payment_method)
    subtotal, discount, tax, total = money(subtotal), money(discount), money(tax), money(total)
    doc = AccountMapping.DOC_INVOICE

    if method == CREDIT_METHOD:
        if customer_id in (None, ""):
            raise LedgerValidationError("Credit invoices require a customer")
        control_code = resolver.mapped_account_code(
            document_type=doc, role=resolver.ROLE_RECEIVABLE, branch=branch, payment_method=method
        )
        debit_account = _partner_account(control_code, customer_id, customer_name)
    else:
        debit_account = resolver.resolve_account(
            document_type=doc, role=resolver.ROLE_RECEIPT, branch=branch, payment_method=method
        )

    revenue_account = resolver.resolve_account(
        document_type=doc, role=resolver.ROLE_REVENUE, branch=branch, payment_method=method
    )

    lines = [
        _debit(debit_account, total),
        _credit(revenue_account, subtotal - discount),
    ]
    if tax > 0:
        vat_account = resolver.resolve_account(
            document_type=doc, role=resolver.ROLE_VAT_OUTPUT, branch=branch, payment_method=method
        )
        lines.append(_credit(vat_account, tax, "VAT output"))

    return create_entry(
        description=f"Sales invoice {invoice_number}",
        entry_date=entry_date,
        postings=_positive_lines(lines),
        reference_type=REF_INVOICE,
        reference_id=invoice_id,
        branch=branch,
        actor_id=actor_id,
    )


def create_expense_entry(
    *,
    expense_id,
    entry_date,
    branch: str,
    payment_method: str,
    lines: list[tuple],
    tax,
    total,
    description: str = "",
    actor_id=None,
) -> JournalEntry:
    """
    lines: [(account_code, amount, memo), ...]; one debit per line.
    """
    if not lines:
        raise LedgerValidationError("Expense must have at least one line")

    method = _method(payment_method)
    tax, total = money(tax), money(total)
    doc = AccountMapping.DOC_EXPENSE

    postings = []
    for line in lines:
        code, amount = line[0], line[1]
        memo = line[2] if len(line) > 2 else ""
        account = resolver.resolve_account_code(code, purpose="expense line")
        postings.append(_debit(account, money(amount), memo))

    if tax > 0:
        vat_account = resolver.resolve_account(
            document_type=doc, role=resolver.ROLE_VAT_INPUT, branch=branch, payment_method=method
        )
        postings.append(_debit(vat_account, tax, "VAT input"))

    payment_account = resolver.resolve_account(
        document_type=doc, role=resolver.ROLE_PAYMENT, branch=branch, payment_method=method
    )
    postings.append(_credit(payment_account, total))

    return create_entry(
        description=description or f"Expense #{expense_id}",
        entry_date=entry_date,
        postings=_positive_lines(postings),
        reference_type=REF_EXPENSE,
        reference_id=expense_id,
        branch=branch,
        actor_id=actor_id,
    )


def create_supplier_invoice_entry(
    *,
    supplier_invoice_id,
    invoice_number: str,
    entry_date,
    branch: str,
    payment_method: str,
    subtotal,
    discount,
    tax,
    total,
    supplier_id=None,
    supplier_name: str = "",
    actor_id=None,
) -> JournalEntry:
    method = _method(payment_method)
    subtotal, discount, tax, total = money(subtotal), money(discount), money(tax), money(total)
    doc = AccountMapping.DOC_SUPPLIER_INVOICE

    purchases_account = resolver.resolve_account(
        document_type=doc, role=resolver.ROLE_PURCHASES, branch=branch, payment_method=method
    )
    postings = [_debit(purchases_account, subtotal - discount)]

    if tax > 0:
        vat_account = resolver.resolve_account(
            document_type=doc, role=resolver.ROLE_VAT_INPUT, branch=branch, payment_method=method
        )
        postings.append(_debit(vat_account, tax, "VAT input"))

    if method == CREDIT_METHOD:
        if supplier_id in (None, ""):
            raise LedgerValidationError("Credit supplier invoices require a supplier")
        control_code = resolver.mapped_account_code(
            document_type=doc, role=resolver.ROLE_PAYABLE, branch=branch, payment_method=method
        )
        credit_account = _partner_account(control_code, supplier_id, supplier_name)
    else:
        credit_account = resolver.resolve_account(
            document_type=doc, role=resolver.ROLE_PAYMENT, branch=branch, payment_method=method
        )
    postings.append(_credit(credit_account, total))

    return create_entry(
        description=f"Supplier invoice {invoice_number}",
        entry_date=entry_date,
        postings=_positive_lines(postings),
        reference_type=REF_SUPPLIER_INVOICE,
        reference_id=supplier_invoice_id,
        branch=branch,
        actor_id=actor_id,
    )


def create_payroll_entry(
    *,
    payroll_run_id,
    period: str,
    entry_date,
    branch: str,
    gross,
    deductions,
    net,
    actor_id=None,
) -> JournalEntry:
    gross, deductions, net = money(gross), money(deductions), money(net)
    doc = AccountMapping.DOC_PAYROLL

    expense_account = resolver.resolve_account(
        document_type=doc, role=resolver.ROLE_SALARIES_EXPENSE, branch=branch
    )
    payable_account = resolver.resolve_account(
        document_type=doc, role=resolver.ROLE_SALARIES_PAYABLE, branch=branch
    )

    postings = [
        _debit(expense_account, gross),
        _credit(payable_account, net),
    ]
    if deductions > 0:
        deductions_account = resolver.resolve_account(
            document_type=doc, role=resolver.ROLE_PAYROLL_DEDUCTIONS, branch=branch
        )
        postings.append(_credit(deductions_account, deductions, "Payroll deductions"))

    return create_entry(
        description=f"Payroll run {period}",
        entry_date=entry_date,
        postings=_positive_lines(postings),
        reference_type=REF_PAYROLL_RUN,
        reference_id=payroll_run_id,
        branch=branch,
        actor_id=actor_id,
    )


def _partner_account(control_code: str, partner_id, partner_name: str):
    try:
        return get_or_create_partner_account(
            parent_code=control_code,
            partner_id=partner_id,
            name=partner_name,
        )
    except NotFoundError as exc:
        raise ConfigurationError(str(exc)) from exc
