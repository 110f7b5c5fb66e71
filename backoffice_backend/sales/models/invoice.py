# sales/models/invoice.py

from decimal import Decimal

from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone

from accounting.models.document import PostableDocument, committed_requires_journal

STATUS_OPEN = "open"
STATUS_PARTIAL = "partial"
STATUS_PAID = "paid"
STATUS_CANCELLED = "cancelled"

INVOICE_COMMITTED_STATUSES = (
    PostableDocument.STATUS_POSTED,
    STATUS_OPEN,
    STATUS_PARTIAL,
    STATUS_PAID,
    PostableDocument.STATUS_REVERSED,
)


class Invoice(PostableDocument):
    """
    Customer sales invoice.

    GUARANTEES:
    - Issued (posted/open/partial/paid) and reversed invoices always
      reference a journal entry (DB CHECK + service assertion)
    - Financial fields are frozen once committed; only status moves
    - Cash/bank invoices are issued as "paid", credit invoices as "open"
    """

    STATUS_OPEN = STATUS_OPEN
    STATUS_PARTIAL = STATUS_PARTIAL
    STATUS_PAID = STATUS_PAID
    STATUS_CANCELLED = STATUS_CANCELLED

    STATUS_CHOICES = [
        (PostableDocument.STATUS_DRAFT, "Draft"),
        (PostableDocument.STATUS_POSTED, "Posted"),
        (STATUS_OPEN, "Open"),
        (STATUS_PARTIAL, "Partially paid"),
        (STATUS_PAID, "Paid"),
        (PostableDocument.STATUS_REVERSED, "Reversed"),
        (STATUS_CANCELLED, "Cancelled"),
    ]

    COMMITTED_STATUSES = INVOICE_COMMITTED_STATUSES

    invoice_number = models.CharField(
        max_length=32,
        unique=True,
        null=True,
        blank=True,
        help_text="System-generated invoice number (INV-000001)",
    )

    invoice_date = models.DateField(default=timezone.localdate)

    customer_id = models.PositiveIntegerField(null=True, blank=True)
    customer_name = models.CharField(max_length=150, blank=True, default="")

    payment_method = models.CharField(
        max_length=10,
        choices=PostableDocument.PAYMENT_METHODS,
        default=PostableDocument.PAYMENT_CASH,
    )

    subtotal = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    discount_amount = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    tax_amount = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    total = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))

    status = models.CharField(
        max_length=16,
        choices=STATUS_CHOICES,
        default=PostableDocument.STATUS_DRAFT,
    )

    class Meta:
        ordering = ["-invoice_date", "-created_at"]
        indexes = [
            models.Index(fields=["invoice_date"]),
            models.Index(fields=["status"]),
            models.Index(fields=["customer_id"]),
        ]
        constraints = [
            models.CheckConstraint(
                condition=committed_requires_journal(INVOICE_COMMITTED_STATUSES),
                name="check_invoice_journal_entry",
            )
        ]

    def __str__(self):
        return f"{self.invoice_number or f'Invoice #{self.pk}'} - {self.total}"


class InvoiceLine(models.Model):
    invoice = models.ForeignKey(Invoice, on_delete=models.CASCADE, related_name="lines")

    description = models.CharField(max_length=255)
    quantity = models.DecimalField(
        max_digits=12,
        decimal_places=3,
        default=Decimal("1.000"),
        validators=[MinValueValidator(Decimal("0.001"))],
    )
    unit_price = models.DecimalField(max_digits=14, decimal_places=2)
    line_total = models.DecimalField(max_digits=14, decimal_places=2)

    class Meta:
        ordering = ["id"]

    def __str__(self):
        return f"{self.description} x{self.quantity}"
