# accounting/models/expense.py

from __future__ import annotations

from decimal import Decimal

from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone

from accounting.models.account import Account
from accounting.models.document import PostableDocument, committed_requires_journal


EXPENSE_COMMITTED_STATUSES = (PostableDocument.STATUS_POSTED, PostableDocument.STATUS_REVERSED)


class Expense(PostableDocument):
    """
    Expense transaction (business event), posted to the ledger via the engine.

    Rule:
    - Created and posted in one transaction by expense_service.post_expense
    - posted / reversed expenses must reference a journal entry
    - One ExpenseLine per debited expense account
    """

    STATUSES = [
        (PostableDocument.STATUS_DRAFT, "Draft"),
        (PostableDocument.STATUS_POSTED, "Posted"),
        (PostableDocument.STATUS_REVERSED, "Reversed"),
    ]

    COMMITTED_STATUSES = EXPENSE_COMMITTED_STATUSES

    expense_date = models.DateField(default=timezone.localdate)

    payment_method = models.CharField(
        max_length=10,
        choices=PostableDocument.PAYMENT_METHODS,
        default=PostableDocument.PAYMENT_CASH,
    )

    vendor = models.CharField(max_length=150, blank=True, default="")
    description = models.CharField(max_length=255, blank=True, default="")

    subtotal = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    tax_amount = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    total = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))

    status = models.CharField(
        max_length=10,
        choices=STATUSES,
        default=PostableDocument.STATUS_DRAFT,
    )

    class Meta:
        ordering = ["-expense_date", "-created_at"]
        verbose_name = "Expense"
        verbose_name_plural = "Expenses"
        indexes = [
            models.Index(fields=["expense_date"]),
            models.Index(fields=["status"]),
        ]
        constraints = [
            models.CheckConstraint(
                condition=committed_requires_journal(EXPENSE_COMMITTED_STATUSES),
                name="check_expense_journal_entry",
            )
        ]

    def __str__(self):
        return f"Expense #{self.id} - {self.total} ({self.expense_date})"


class ExpenseLine(models.Model):
    expense = models.ForeignKey(Expense, on_delete=models.CASCADE, related_name="lines")

    account = models.ForeignKey(
        Account,
        on_delete=models.PROTECT,
        related_name="expense_lines",
    )

    amount = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.01"))],
    )
    description = models.CharField(max_length=255, blank=True, default="")

    class Meta:
        ordering = ["id"]

    def __str__(self):
        return f"{self.account.code} {self.amount}"
