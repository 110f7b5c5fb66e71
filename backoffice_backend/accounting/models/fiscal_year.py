# accounting/models/fiscal_year.py

"""
======================================================
PATH: accounting/models/fiscal_year.py
======================================================
FISCAL YEAR + ACCOUNTING PERIOD MODELS

Hard rules:
- At most ONE fiscal year may have status=open (partial unique constraint).
- temporary_open is independent of status and only meaningful on closed years.
- A month (YYYY-MM) can be locked on its own through AccountingPeriod.
  A missing AccountingPeriod row means the month is open.
- Every administrative transition leaves a FiscalYearActivity row.
"""

from __future__ import annotations

from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import F, Q


class FiscalYear(models.Model):
    STATUS_OPEN = "open"
    STATUS_CLOSED = "closed"

    STATUSES = [
        (STATUS_OPEN, "Open"),
        (STATUS_CLOSED, "Closed"),
    ]

    year = models.PositiveIntegerField(unique=True)
    start_date = models.DateField()
    end_date = models.DateField()

    status = models.CharField(max_length=10, choices=STATUSES, default=STATUS_CLOSED)

    temporary_open = models.BooleanField(default=False)
    temporary_opened_by_id = models.PositiveIntegerField(null=True, blank=True)
    temporary_opened_at = models.DateTimeField(null=True, blank=True)
    temporary_open_reason = models.TextField(blank=True, default="")

    closed_by_id = models.PositiveIntegerField(null=True, blank=True)
    closed_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-year"]
        verbose_name = "Fiscal Year"
        verbose_name_plural = "Fiscal Years"
        indexes = [
            models.Index(fields=["start_date", "end_date"]),
            models.Index(fields=["status"]),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["status"],
                condition=Q(status="open"),
                name="uniq_fiscal_year_single_open",
            ),
            models.CheckConstraint(
                condition=Q(end_date__gte=F("start_date")),
                name="chk_fiscal_year_end_gte_start",
            ),
        ]

    def __str__(self):
        flag = " (temporarily open)" if self.temporary_open else ""
        return f"FY {self.year} [{self.status}]{flag}"

    @property
    def accepts_postings(self) -> bool:
        return self.status == self.STATUS_OPEN or self.temporary_open

    def clean(self):
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValidationError({"end_date": "end_date must be >= start_date"})

        if self.start_date and self.end_date:
            overlapping = FiscalYear.objects.filter(
                start_date__lte=self.end_date,
                end_date__gte=self.start_date,
            )
            if self.pk:
                overlapping = overlapping.exclude(pk=self.pk)
            if overlapping.exists():
                raise ValidationError("Fiscal years cannot overlap")


class AccountingPeriod(models.Model):
    STATUS_OPEN = "open"
    STATUS_CLOSED = "closed"

    STATUSES = [
        (STATUS_OPEN, "Open"),
        (STATUS_CLOSED, "Closed"),
    ]

    period = models.CharField(max_length=7, unique=True, help_text="YYYY-MM")
    status = models.CharField(max_length=10, choices=STATUSES, default=STATUS_OPEN)

    closed_by_id = models.PositiveIntegerField(null=True, blank=True)
    closed_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-period"]
        verbose_name = "Accounting Period"
        verbose_name_plural = "Accounting Periods"

    def __str__(self):
        return f"{self.period} [{self.status}]"


class FiscalYearActivity(models.Model):
    ACTION_CREATED = "created"
    ACTION_OPENED = "opened"
    ACTION_CLOSED = "closed"
    ACTION_TEMPORARY_OPEN = "temporary_open"
    ACTION_TEMPORARY_CLOSE = "temporary_close"
    ACTION_MONTH_CLOSED = "month_closed"
    ACTION_MONTH_OPENED = "month_opened"

    ACTIONS = [
        (ACTION_CREATED, "Created"),
        (ACTION_OPENED, "Opened"),
        (ACTION_CLOSED, "Closed"),
        (ACTION_TEMPORARY_OPEN, "Temporarily opened"),
        (ACTION_TEMPORARY_CLOSE, "Temporary open revoked"),
        (ACTION_MONTH_CLOSED, "Month closed"),
        (ACTION_MONTH_OPENED, "Month opened"),
    ]

    fiscal_year = models.ForeignKey(
        FiscalYear,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="activities",
    )
    period = models.CharField(max_length=7, blank=True, default="")

    action = models.CharField(max_length=20, choices=ACTIONS)
    actor_id = models.PositiveIntegerField(null=True, blank=True)
    reason = models.TextField(blank=True, default="")

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at", "-id"]
        verbose_name = "Fiscal Year Activity"
        verbose_name_plural = "Fiscal Year Activities"
        indexes = [
            models.Index(fields=["fiscal_year", "created_at"]),
            models.Index(fields=["action"]),
        ]

    def __str__(self):
        target = self.fiscal_year.year if self.fiscal_year_id else self.period
        return f"{self.action} {target} by {self.actor_id}"

    def save(self, *args, **kwargs):
        if self.pk:
            raise ValidationError("Fiscal year activity records are immutable")
        return super().save(*args, **kwargs)
