# accounting/models/account_mapping.py

"""
======================================================
PATH: accounting/models/account_mapping.py
======================================================
ACCOUNT MAPPING (CONFIGURATION DATA)

Answers: "which account code does <role> of <document_type> use for
<branch> / <payment_method>?"

Blank branch or payment_method act as wildcards. The resolver picks the
most specific row:
    (branch, payment_method) > (branch, *) > (*, payment_method) > (*, *)
"""

from __future__ import annotations

from django.db import models


class AccountMapping(models.Model):
    DOC_INVOICE = "invoice"
    DOC_EXPENSE = "expense"
    DOC_SUPPLIER_INVOICE = "supplier_invoice"
    DOC_PAYROLL = "payroll"

    DOCUMENT_TYPES = [
        (DOC_INVOICE, "Sales invoice"),
        (DOC_EXPENSE, "Expense"),
        (DOC_SUPPLIER_INVOICE, "Supplier invoice"),
        (DOC_PAYROLL, "Payroll run"),
    ]

    document_type = models.CharField(max_length=30, choices=DOCUMENT_TYPES)
    role = models.CharField(max_length=40)
    branch = models.CharField(max_length=50, blank=True, default="")
    payment_method = models.CharField(max_length=20, blank=True, default="")

    account_code = models.CharField(max_length=20)

    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["document_type", "role", "branch", "payment_method"]
        verbose_name = "Account Mapping"
        verbose_name_plural = "Account Mappings"
        constraints = [
            models.UniqueConstraint(
                fields=["document_type", "role", "branch", "payment_method"],
                name="uniq_account_mapping_key",
            ),
        ]

    def __str__(self):
        branch = self.branch or "*"
        method = self.payment_method or "*"
        return f"{self.document_type}.{self.role} [{branch}/{method}] -> {self.account_code}"
