# purchases/services/supplier_invoice_service.py

"""
======================================================
PATH: purchases/services/supplier_invoice_service.py
======================================================
SUPPLIER INVOICE SERVICE

Canonical flow (ONE transaction):
1) Validate supplier + lines
2) Insert draft SupplierInvoice + lines
3) Post ledger (entry_builders.create_supplier_invoice_entry)
4) Attach entry + mark posted

Credit purchases credit the supplier's own sub-account under the
payables control account; cash/bank purchases credit the mapped
payment account.
"""

from __future__ import annotations

from decimal import Decimal

from django.db import transaction
from django.utils import timezone

from accounting.services.document_posting import attach_entry, reverse_document
from accounting.services.entry_builders import create_supplier_invoice_entry
from accounting.services.exceptions import ConflictError, LedgerValidationError, NotFoundError
from accounting.services.journal_entry_service import money
from purchases.models import Supplier, SupplierInvoice, SupplierInvoiceLine

KIND = "supplier_invoice"
VALID_METHODS = {value for value, _label in SupplierInvoice.PAYMENT_METHODS}


def _resolve_supplier(supplier_id) -> Supplier | None:
    if supplier_id in (None, ""):
        return None
    supplier = Supplier.objects.filter(pk=supplier_id).first()
    if supplier is None:
        raise NotFoundError(f"Supplier {supplier_id} not found")
    if not supplier.is_active:
        raise LedgerValidationError(f"Supplier {supplier.name} is inactive")
    return supplier


def _build_lines(lines) -> list[dict]:
    if not lines:
        raise LedgerValidationError("Supplier invoice must have at least one line")

    built = []
    for raw in lines:
        description = str(raw.get("description") or "").strip()
        if not description:
            raise LedgerValidationError("Supplier invoice line description is required")

        try:
            quantity = Decimal(str(raw.get("quantity") or "1")).quantize(Decimal("0.001"))
        except ArithmeticError as exc:
            raise LedgerValidationError(f"Invalid quantity: {raw.get('quantity')!r}") from exc
        unit_cost = money(raw.get("unit_cost"))

        if quantity <= 0:
            raise LedgerValidationError("Supplier invoice line quantity must be > 0")
        if unit_cost < 0:
            raise LedgerValidationError("Supplier invoice line unit_cost cannot be negative")

        built.append(
            {
                "description": description,
                "quantity": quantity,
                "unit_cost": unit_cost,
                "line_total": money(quantity * unit_cost),
            }
        )
    return built


@transaction.atomic
def post_supplier_invoice(
    *,
    invoice_number: str,
    lines: list[dict],
    supplier_id=None,
    payment_method: str = SupplierInvoice.PAYMENT_CREDIT,
    branch: str = "",
    invoice_date=None,
    discount_amount=0,
    tax_amount=0,
    actor_id=None,
) -> SupplierInvoice:
    method = (payment_method or "").strip().lower()
    if method not in VALID_METHODS:
        raise LedgerValidationError("Invalid payment_method. Use 'cash', 'bank', or 'credit'.")

    invoice_number = (invoice_number or "").strip()
    if not invoice_number:
        raise LedgerValidationError("invoice_number is required")

    supplier = _resolve_supplier(supplier_id)
    if method == SupplierInvoice.PAYMENT_CREDIT and supplier is None:
        raise LedgerValidationError("Credit supplier invoices require a supplier")

    if supplier is not None and SupplierInvoice.objects.filter(
        supplier=supplier, invoice_number=invoice_number
    ).exists():
        raise ConflictError(f"Supplier invoice {invoice_number} already recorded for {supplier.name}")

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
        raise LedgerValidationError("Supplier invoice total must be > 0")

    invoice = SupplierInvoice.objects.create(
        supplier=supplier,
        invoice_number=invoice_number,
        invoice_date=invoice_date or timezone.localdate(),
        payment_method=method,
        subtotal=subtotal,
        discount_amount=discount,
        tax_amount=tax,
        total=total,
        branch=(branch or "").strip().lower(),
        status=SupplierInvoice.STATUS_DRAFT,
        created_by_id=actor_id,
    )
    SupplierInvoiceLine.objects.bulk_create(
        [SupplierInvoiceLine(invoice=invoice, **ln) for ln in built]
    )

    entry = create_supplier_invoice_entry(
        supplier_invoice_id=invoice.pk,
        invoice_number=invoice.invoice_number,
        entry_date=invoice.invoice_date,
        branch=invoice.branch,
        payment_method=method,
        subtotal=subtotal,
        discount=discount,
        tax=tax,
        total=total,
        supplier_id=supplier.pk if supplier else None,
        supplier_name=supplier.name if supplier else "",
        actor_id=actor_id,
    )

    return attach_entry(invoice, entry, status=SupplierInvoice.STATUS_POSTED, kind=KIND)


def reverse_supplier_invoice(*, supplier_invoice_id, actor_id=None, entry_date=None) -> SupplierInvoice:
    return reverse_document(
        SupplierInvoice,
        document_id=supplier_invoice_id,
        kind=KIND,
        actor_id=actor_id,
        entry_date=entry_date,
    )
