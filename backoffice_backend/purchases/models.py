# purchases/models.py

from decimal import Decimal

from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone

from accounting.models.document import PostableDocument, committed_requires_journal

SUPPLIER_INVOICE_COMMITTED_STATUSES = (
    PostableDocument.STATUS_POSTED,
    PostableDocument.STATUS_REVERSED,
)


class Supplier(models.Model):
    """
    Supplier master.

    Credit purchases post to a per-supplier sub-account under the payables
    control account (code = control code + zero-padded supplier id).
    """

    name = models.CharField(max_length=200)
    phone = models.CharField(max_length=50, blank=True, default="")
    email = models.EmailField(blank=True, default="")
    vat_number = models.CharField(max_length=30, blank=True, default="")

    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["name"]
        indexes = [
            models.Index(fields=["name"]),
            models.Index(fields=["is_active"]),
        ]

    def __str__(self):
        return self.name


class SupplierInvoice(PostableDocument):
    """
    Supplier invoice header, posted to the ledger on creation.

    - posted / reversed invoices must reference a journal entry
    - financial fields are frozen once posted
    """

    STATUSES = [
        (PostableDocument.STATUS_DRAFT, "Draft"),
        (PostableDocument.STATUS_POSTED, "Posted"),
        (PostableDocument.STATUS_REVERSED, "Reversed"),
    ]

    COMMITTED_STATUSES = SUPPLIER_INVOICE_COMMITTED_STATUSES

    supplier = models.ForeignKey(
        Supplier,
        on_delete=models.PROTECT,
        related_name="invoices",
        null=True,
        blank=True,
    )

    invoice_number = models.CharField(max_length=64, help_text="Supplier's own invoice number")
    invoice_date = models.DateField(default=timezone.localdate)

    payment_method = models.CharField(
        max_length=10,
        choices=PostableDocument.PAYMENT_METHODS,
        default=PostableDocument.PAYMENT_CREDIT,
    )

    subtotal = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    discount_amount = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    tax_amount = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    total = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))

    status = models.CharField(
        max_length=10,
        choices=STATUSES,
        default=PostableDocument.STATUS_DRAFT,
    )

    class Meta:
        ordering = ["-invoice_date", "-created_at"]
        indexes = [
            models.Index(fields=["invoice_date"]),
            models.Index(fields=["status"]),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["supplier", "invoice_number"],
                name="uniq_supplier_invoice_number",
            ),
            models.CheckConstraint(
                condition=committed_requires_journal(SUPPLIER_INVOICE_COMMITTED_STATUSES),
                name="check_supplier_invoice_journal_entry",
            ),
        ]

    def __str__(self):
        return f"{self.invoice_number} ({self.supplier or 'cash purchase'}) - {self.total}"


class SupplierInvoiceLine(models.Model):
    invoice = models.ForeignKey(SupplierInvoice, on_delete=models.CASCADE, related_name="lines")

    description = models.CharField(max_length=255)
    quantity = models.DecimalField(
        max_digits=12,
        decimal_places=3,
        default=Decimal("1.000"),
        validators=[MinValueValidator(Decimal("0.001"))],
    )
    unit_cost = models.DecimalField(max_digits=14, decimal_places=2)
    line_total = models.DecimalField(max_digits=14, decimal_places=2)

    class Meta:
        ordering = ["id"]

    def __str__(self):
        return f"{self.description} x{self.quantity}"
