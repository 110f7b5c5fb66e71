# payroll/models/payroll_run.py

from decimal import Decimal

from django.db import models
from django.utils import timezone

from accounting.models.document import PostableDocument, committed_requires_journal

STATUS_APPROVED = "approved"

PAYROLL_COMMITTED_STATUSES = (
    STATUS_APPROVED,
    PostableDocument.STATUS_POSTED,
    PostableDocument.STATUS_REVERSED,
)


class PayrollRun(PostableDocument):
    """
    Monthly payroll run for one branch.

    Approval accrues the run: Dr salaries expense / Cr salaries payable
    (net) and payroll deductions. approved / posted / reversed runs must
    reference a journal entry.
    """

    STATUS_APPROVED = STATUS_APPROVED

    STATUSES = [
        (PostableDocument.STATUS_DRAFT, "Draft"),
        (STATUS_APPROVED, "Approved"),
        (PostableDocument.STATUS_POSTED, "Posted"),
        (PostableDocument.STATUS_REVERSED, "Reversed"),
    ]

    COMMITTED_STATUSES = PAYROLL_COMMITTED_STATUSES

    period = models.CharField(max_length=7, help_text="YYYY-MM")
    run_date = models.DateField(default=timezone.localdate)

    gross_total = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    deductions_total = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    net_total = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))

    status = models.CharField(
        max_length=10,
        choices=STATUSES,
        default=PostableDocument.STATUS_DRAFT,
    )

    class Meta:
        ordering = ["-period", "-created_at"]
        indexes = [
            models.Index(fields=["period"]),
            models.Index(fields=["status"]),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["period", "branch"],
                condition=~models.Q(status=PostableDocument.STATUS_REVERSED),
                name="uniq_payroll_run_period_branch",
            ),
            models.CheckConstraint(
                condition=committed_requires_journal(PAYROLL_COMMITTED_STATUSES),
                name="check_payroll_run_journal_entry",
            ),
        ]

    def __str__(self):
        return f"Payroll {self.period} {self.branch or ''} - {self.net_total}".strip()


class PayrollItem(models.Model):
    run = models.ForeignKey(PayrollRun, on_delete=models.CASCADE, related_name="items")

    employee_id = models.PositiveIntegerField(null=True, blank=True)
    employee_name = models.CharField(max_length=150)

    gross = models.DecimalField(max_digits=14, decimal_places=2)
    deductions = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    net = models.DecimalField(max_digits=14, decimal_places=2)

    class Meta:
        ordering = ["id"]

    def __str__(self):
        return f"{self.employee_name}: {self.net}"
