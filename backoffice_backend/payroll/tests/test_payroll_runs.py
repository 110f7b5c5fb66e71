# payroll/tests/test_payroll_runs.py

from __future__ import annotations

from datetime import date
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.test import TestCase
from rest_framework.test import APIClient

from accounting.services.chart_seed_service import seed_backoffice_books
from accounting.services.exceptions import ConflictError, LedgerValidationError, PeriodClosedError
from accounting.services.period_guard import close_month
from payroll.models.payroll_run import PayrollItem, PayrollRun
from payroll.services.payroll_service import post_payroll_run, reverse_payroll_run

User = get_user_model()

RUN_DATE = date(2026, 3, 31)
STAFF = [
    {"employee_name": "Head chef", "gross": "3000.00", "deductions": "250.00"},
    {"employee_name": "Waiter", "gross": "1500.00"},
]


def _postings(entry):
    return {
        p.account.code: (p.debit, p.credit)
        for p in entry.postings.select_related("account")
    }


class PayrollRunTests(TestCase):
    """
    GUARANTEES:
    - Gross is expensed, net owed to staff, deductions recovered
    - One live run per period and branch
    """

    @classmethod
    def setUpTestData(cls):
        seed_backoffice_books(year=2026)

    def test_run_accrues_salaries(self):
        run = post_payroll_run(period="2026-03", items=STAFF, run_date=RUN_DATE, actor_id=6)

        self.assertEqual(run.status, PayrollRun.STATUS_APPROVED)
        self.assertEqual(run.gross_total, Decimal("4500.00"))
        self.assertEqual(run.deductions_total, Decimal("250.00"))
        self.assertEqual(run.net_total, Decimal("4250.00"))
        self.assertEqual(PayrollItem.objects.filter(run=run).count(), 2)

        entry = run.journal_entry
        self.assertEqual(entry.reference_type, "payroll_run")
        self.assertEqual(entry.entry_date, RUN_DATE)
        self.assertEqual(
            _postings(entry),
            {
                "5210": (Decimal("4500.00"), Decimal("0.00")),
                "2121": (Decimal("0.00"), Decimal("4250.00")),
                "1151": (Decimal("0.00"), Decimal("250.00")),
            },
        )

    def test_invalid_runs_are_rejected(self):
        with self.assertRaises(LedgerValidationError):
            post_payroll_run(period="March", items=STAFF, run_date=RUN_DATE)
        with self.assertRaises(LedgerValidationError):
            post_payroll_run(period="2026-03", items=[], run_date=RUN_DATE)
        with self.assertRaises(LedgerValidationError):
            post_payroll_run(
                period="2026-03",
                items=[{"employee_name": "Porter", "gross": "100.00", "deductions": "150.00"}],
                run_date=RUN_DATE,
            )

        self.assertFalse(PayrollRun.objects.exists())

    def test_one_live_run_per_period(self):
        first = post_payroll_run(period="2026-03", items=STAFF, run_date=RUN_DATE)

        with self.assertRaises(ConflictError):
            post_payroll_run(period="2026-03", items=STAFF, run_date=RUN_DATE)

        # Another branch has its own run.
        post_payroll_run(period="2026-03", items=STAFF, run_date=RUN_DATE, branch="place_india")

        reverse_payroll_run(payroll_run_id=first.pk, entry_date=RUN_DATE)
        rerun = post_payroll_run(period="2026-03", items=STAFF[:1], run_date=RUN_DATE)

        self.assertEqual(rerun.status, PayrollRun.STATUS_APPROVED)
        self.assertEqual(PayrollRun.objects.filter(period="2026-03", branch="").count(), 2)

    def test_closed_period_leaves_nothing(self):
        close_month(period="2026-03", actor_id=1)

        with self.assertRaises(PeriodClosedError):
            post_payroll_run(period="2026-03", items=STAFF, run_date=RUN_DATE)

        self.assertFalse(PayrollRun.objects.exists())
        self.assertFalse(PayrollItem.objects.exists())


class PayrollApiTests(TestCase):
    @classmethod
    def setUpTestData(cls):
        seed_backoffice_books(year=2026)
        cls.admin = User.objects.create_superuser("admin", "admin@example.com", "pass")
        cls.clerk = User.objects.create_user("clerk", "clerk@example.com", "pass")

    def setUp(self):
        self.client = APIClient()
        self.client.force_authenticate(user=self.admin)

    def test_post_and_reverse_run(self):
        res = self.client.post(
            "/api/payroll/runs/",
            {"period": "2026-03", "run_date": "2026-03-31", "items": STAFF},
            format="json",
        )
        self.assertEqual(res.status_code, 201, res.data)
        self.assertEqual(res.data["status"], "approved")

        res = self.client.post(
            f"/api/payroll/runs/{res.data['id']}/reverse/", {"entry_date": "2026-03-31"}, format="json"
        )
        self.assertEqual(res.status_code, 200, res.data)
        self.assertEqual(res.data["status"], "reversed")

    def test_duplicate_period_is_conflict(self):
        payload = {"period": "2026-03", "run_date": "2026-03-31", "items": STAFF}
        self.client.post("/api/payroll/runs/", payload, format="json")

        res = self.client.post("/api/payroll/runs/", payload, format="json")

        self.assertEqual(res.status_code, 409)
        self.assertEqual(res.data["code"], "conflict")

    def test_clerk_without_permission_is_forbidden(self):
        self.client.force_authenticate(user=self.clerk)

        self.assertEqual(self.client.get("/api/payroll/runs/").status_code, 403)
