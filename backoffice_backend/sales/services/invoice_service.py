# sales/services/invoice_service.py

"""
======================================================
PATH: sales/services/invoice_service.py
======================================================
INVOICE SERVICE (DOCUMENT CREATOR)

Flow (ONE transaction):
1. Insert draft Invoice + InvoiceLines
2. Build the journal entry (entry_builders.create_invoice_entry)
3. Store the entry id and flip status (paid for cash/bank, open for credit)

Any failure (closed period, missing account mapping, unbalanced amounts)
rolls back the whole business action: no invoice row survives.
"""

from __future__ import annotations

from decimal import Decimal

from django.db import transaction
from django.utils import timezone

from accounting.services.document_posting import attach_entry, reverse_document
from accounting.services.entry_builders import create_invoice_entry
from accounting.services.exceptions import LedgerValidationError
from accounting.services.journal_entry_service import money
from sales.models.invoice import Invoice, InvoiceLine

KIND = "invoice"
VALID_METHODS = {value for value, _label in Invoice.PAYMENT_METHODS}


def _quantity(value) -> Decimal:
    try:
        qty = Decimal(str(value if value not in (None, "") else "1"))
    except ArithmeticError as exc:
        raise LedgerValidationError(f"Invalid quantity: {value!r}") from exc
    if not qty.is_finite() or qty <= 0:
        raise LedgerValidationError("Invoice line quantity must be > 0")
    return qty.quantize(Decimal("0.001"))


def _build_lines(lines) -> list[dict]:
    if not lines:
        raise LedgerValidationError("Invoice must have at least one line")

    built = []
    for raw in lines:
        description = str(raw.get("description") or "").strip()
        if not description:
            raise LedgerValidationError("Invoice line description is required")

        quantity = _quantity(raw.get("quantity"))
        unit_price = money(raw.get("unit_price"))
        if unit_price < 0:
            raise LedgerValidationError("Invoice line unit_price cannot be negative")

        built.append(
            {
                "description": description,
                "quantity": quantity,
                "unit_price": unit_price,
                "line_total": money(quantity * unit_price),
            }
        )
    return built


@transaction.atomic
def issue_invoice(
    *,
    lines: list[dict],
    payment_method: str = Invoice.PAYMENT_CASH,
    branch: str = "",
    invoice_date=None,
    discount_amount=0,
    tax_amount=0,
    customer_id=None,
    customer_name: str = "",
    actor_id=None,
) -> Invoice:
    """
    lines: [{"description": "Meal", "quantity": 2, "unit_price": "100.00"}]

    tax_amount is supplied by the caller; no tax policy lives here.
    """
    method = (payment_method or "").strip().lower()
    if method not in VALID_METHODS:
        raise LedgerValidationError("Invalid payment_method. Use 'cash', 'bank', or 'credit'.")

    built = _build_lines(lines)
    subtotal = sum((ln["line_total"] for ln in built), Decimal("0.00"))
    discount = money(discount_amount)
    tax = money(tax_amount)

    if discount < 0 or tax < 0:
        raise LedgerValidationError("discount_amount and tax_amount cannot be negative")
    if discount > subtotal:
        raise LedgerValidationError("discount_amount cannot exceed the subtotal")

    total = subtotal - discount + tax
    if total <= 0:
        raise LedgerValidationError("Invoice total must be > 0")

    invoice = Invoice.objects.create(
        invoice_date=invoice_date or timezone.localdate(),
        customer_id=customer_id,
        customer_name=(customer_name or "").strip(),
        payment_method=method,
        subtotal=subtotal,
        discount_amount=discount,
        tax_amount=tax,
        total=total,
        branch=(branch or "").strip().lower(),
        status=Invoice.STATUS_DRAFT,
        created_by_id=actor_id,
    )
    invoice.invoice_number = f"INV-{invoice.pk:06d}"
    invoice.save(update_fields=["invoice_number"])

    InvoiceLine.objects.bulk_create([InvoiceLine(invoice=invoice, **ln) for ln in built])

    entry = create_invoice_entry(
        invoice_id=invoice.pk,
        invoice_number=invoice.invoice_number,
        entry_date=invoice.invoice_date,
        branch=invoice.branch,
        payment_method=method,
        subtotal=subtotal,
        discount=discount,
        tax=tax,
        total=total,
        customer_id=customer_id,
        customer_name=invoice.customer_name,
        actor_id=actor_id,
    )

    status = Invoice.STATUS_OPEN if method == Invoice.PAYMENT_CREDIT else Invoice.STATUS_PAID
    return attach_entry(invoice, entry, status=status, kind=KIND)


def reverse_invoice(*, invoice_id, actor_id=None, entry_date=None) -> Invoice:
    return reverse_document(
        Invoice,
        document_id=invoice_id,
        kind=KIND,
        actor_id=actor_id,
        entry_date=entry_date,
    )
