# accounting/models/account.py

from __future__ import annotations

from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q


class Account(models.Model):
    """
    A node in the chart of accounts forest.

    Guarantees:
    - Account codes are unique and numeric
    - Code + names are normalized (trimmed)
    - Nature defaults from the account type (asset/expense -> debit)
    - Parents cannot be deleted from under their children (PROTECT)
    """

    ASSET = "asset"
    LIABILITY = "liability"
    EQUITY = "equity"
    REVENUE = "revenue"
    EXPENSE = "expense"

    ACCOUNT_TYPES = [
        (ASSET, "Asset"),
        (LIABILITY, "Liability"),
        (EQUITY, "Equity"),
        (REVENUE, "Revenue"),
        (EXPENSE, "Expense"),
    ]

    DEBIT = "debit"
    CREDIT = "credit"

    NATURES = [
        (DEBIT, "Debit"),
        (CREDIT, "Credit"),
    ]

    DEBIT_NATURED_TYPES = (ASSET, EXPENSE)

    code = models.CharField(max_length=20, unique=True)
    name = models.CharField(max_length=150)
    name_en = models.CharField(max_length=150, blank=True, default="")

    account_type = models.CharField(max_length=20, choices=ACCOUNT_TYPES)
    nature = models.CharField(max_length=6, choices=NATURES, blank=True, default="")

    parent = models.ForeignKey(
        "self",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="children",
    )

    opening_balance = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        default=Decimal("0.00"),
        help_text="Opening balance on the account's natural side",
    )

    allow_manual_entry = models.BooleanField(default=True)
    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["code"]
        verbose_name = "Account"
        verbose_name_plural = "Accounts"
        indexes = [
            models.Index(fields=["account_type"]),
            models.Index(fields=["parent"]),
            models.Index(fields=["is_active"]),
        ]
        constraints = [
            models.CheckConstraint(
                condition=~Q(code=""),
                name="chk_account_code_not_blank",
            ),
            models.CheckConstraint(
                condition=~Q(name=""),
                name="chk_account_name_not_blank",
            ),
        ]

    def __str__(self):
        return f"{self.code} - {self.name}"

    @classmethod
    def default_nature_for(cls, account_type: str) -> str:
        return cls.DEBIT if account_type in cls.DEBIT_NATURED_TYPES else cls.CREDIT

    @property
    def signed_opening_balance(self) -> Decimal:
        """Opening balance in the debit-positive convention used by reports."""
        opening = self.opening_balance or Decimal("0.00")
        return opening if self.nature == self.DEBIT else -opening

    def clean(self):
        self.code = (self.code or "").strip()
        self.name = (self.name or "").strip()
        self.name_en = (self.name_en or "").strip()

        if not self.code:
            raise ValidationError({"code": "Account code is required"})
        if not self.code.isdigit():
            raise ValidationError({"code": "Account code must be numeric"})
        if not self.name:
            raise ValidationError({"name": "Account name is required"})

        if not self.nature:
            self.nature = self.default_nature_for(self.account_type)

        if self.pk and self.parent_id == self.pk:
            raise ValidationError({"parent": "An account cannot be its own parent"})

    def save(self, *args, **kwargs):
        self.full_clean()
        return super().save(*args, **kwargs)
