# accounting/tests/test_integrity.py

"""
Integrity enforcer: no committed document without an existing journal entry.

Covered layers:
- DB CHECK constraint on the document table
- assert_document_posted() at the service layer
- find_orphans() / delete_orphans() after a corrective journal delete
- validate_ledger / delete_orphans / resync_entry_numbers commands
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from io import StringIO

from django.core.exceptions import ValidationError
from django.core.management import call_command
from django.db import IntegrityError, transaction
from django.test import TestCase

from accounting.models.account import Account
from accounting.models.expense import Expense, ExpenseLine
from accounting.models.posting import JournalPosting
from accounting.models.sequence import ReleasedEntryNumber
from accounting.services.chart_seed_service import seed_backoffice_books
from accounting.services.exceptions import OrphanIntegrityError
from accounting.services.expense_service import post_expense, reverse_expense
from accounting.services.integrity_service import (
    assert_document_posted,
    delete_orphans,
    find_orphans,
    find_unbalanced_entries,
)
from accounting.services.journal_entry_service import create_entry, delete_entry

MARCH = date(2026, 3, 10)


def _expense(amount="150.00"):
    return post_expense(
        payment_method="cash",
        lines=[{"account_code": "5120", "amount": amount, "description": "March bill"}],
        expense_date=MARCH,
        vendor="City Power",
    )


class DocumentConstraintTests(TestCase):
    @classmethod
    def setUpTestData(cls):
        seed_backoffice_books(year=2026)

    def test_db_rejects_committed_expense_without_entry(self):
        with self.assertRaises(IntegrityError):
            with transaction.atomic():
                Expense.objects.create(
                    expense_date=MARCH,
                    total=Decimal("10.00"),
                    status=Expense.STATUS_POSTED,
                )

    def test_draft_without_entry_is_allowed(self):
        draft = Expense.objects.create(expense_date=MARCH, total=Decimal("10.00"))
        self.assertEqual(draft.status, Expense.STATUS_DRAFT)
        assert_document_posted(draft, kind="expense")

    def test_service_layer_check(self):
        draft = Expense.objects.create(expense_date=MARCH, total=Decimal("10.00"))
        draft.status = Expense.STATUS_POSTED

        with self.assertRaises(OrphanIntegrityError):
            assert_document_posted(draft, kind="expense")

        draft.journal_entry_id = 987654
        with self.assertRaises(OrphanIntegrityError):
            assert_document_posted(draft, kind="expense")

    def test_committed_expense_is_frozen(self):
        expense = _expense()

        expense.vendor = "Someone else"
        with self.assertRaises(ValidationError):
            expense.save()

        with self.assertRaises(ValidationError):
            expense.delete()

        self.assertTrue(Expense.objects.filter(pk=expense.pk, vendor="City Power").exists())


class OrphanRepairTests(TestCase):
    @classmethod
    def setUpTestData(cls):
        seed_backoffice_books(year=2026)

    def test_clean_books_have_no_orphans(self):
        _expense()

        report = find_orphans()
        self.assertEqual(set(report), {"expenses", "invoices", "supplier_invoices", "payroll_runs"})
        self.assertTrue(all(rows == [] for rows in report.values()))

    def test_deleted_entry_leaves_orphan_document(self):
        expense = _expense()
        entry_id = expense.journal_entry_id

        delete_entry(entry_id=entry_id)

        report = find_orphans()
        self.assertEqual(
            report["expenses"],
            [{"id": expense.id, "status": Expense.STATUS_POSTED, "journal_entry_id": entry_id}],
        )

        # Reversing an orphan is refused rather than posting half a correction.
        with self.assertRaises(OrphanIntegrityError):
            reverse_expense(expense_id=expense.id, entry_date=MARCH)

    def test_delete_orphans_dry_run_then_apply(self):
        keep = _expense("40.00")
        orphan = _expense("60.00")
        delete_entry(entry_id=orphan.journal_entry_id)

        counts = delete_orphans(dry_run=True)
        self.assertEqual(counts["expenses"], 1)
        self.assertTrue(Expense.objects.filter(pk=orphan.pk).exists())

        counts = delete_orphans(dry_run=False)
        self.assertEqual(counts, {"expenses": 1, "invoices": 0, "supplier_invoices": 0, "payroll_runs": 0})
        self.assertFalse(Expense.objects.filter(pk=orphan.pk).exists())
        self.assertFalse(ExpenseLine.objects.filter(expense_id=orphan.pk).exists())
        self.assertTrue(Expense.objects.filter(pk=keep.pk).exists())

        self.assertEqual(find_orphans()["expenses"], [])


class UnbalancedEntryTests(TestCase):
    @classmethod
    def setUpTestData(cls):
        seed_backoffice_books(year=2026)

    def test_engine_entries_are_balanced(self):
        _expense()
        self.assertEqual(find_unbalanced_entries(), [])

    def test_rows_written_around_the_engine_are_reported(self):
        entry = create_entry(
            description="Float top-up",
            entry_date=MARCH,
            postings=[
                {"account": "1112", "debit": "50.00"},
                {"account": "1111", "credit": "50.00"},
            ],
        )
        JournalPosting.objects.create(
            journal_entry=entry,
            account=Account.objects.get(code="1112"),
            debit=Decimal("5.00"),
        )

        rows = find_unbalanced_entries()
        self.assertEqual(len(rows), 1)
        self.assertEqual(rows[0]["entry_number"], entry.entry_number)
        self.assertEqual(rows[0]["difference"], Decimal("5.00"))


class MaintenanceCommandTests(TestCase):
    @classmethod
    def setUpTestData(cls):
        seed_backoffice_books(year=2026)

    def _call(self, *args, **kwargs):
        out, err = StringIO(), StringIO()
        call_command(*args, stdout=out, stderr=err, **kwargs)
        return out.getvalue(), err.getvalue()

    def test_validate_ledger_passes_on_clean_books(self):
        _expense()

        out, _err = self._call("validate_ledger", "--strict")
        self.assertIn("VALIDATION PASSED", out)

    def test_validate_ledger_strict_fails_on_orphans(self):
        expense = _expense()
        delete_entry(entry_id=expense.journal_entry_id)

        with self.assertRaises(SystemExit):
            self._call("validate_ledger", "--strict")

        # Without --strict the report is printed and the command returns.
        _out, err = self._call("validate_ledger")
        self.assertIn("Orphan documents: 1", err)

    def test_delete_orphans_command_is_dry_run_by_default(self):
        expense = _expense()
        delete_entry(entry_id=expense.journal_entry_id)

        out, _err = self._call("delete_orphans")
        self.assertIn("DRY RUN", out)
        self.assertTrue(Expense.objects.filter(pk=expense.pk).exists())

        self._call("delete_orphans", "--apply")
        self.assertFalse(Expense.objects.filter(pk=expense.pk).exists())

    def test_resync_entry_numbers_command(self):
        first = _expense("10.00")
        _expense("20.00")
        delete_entry(entry_id=first.journal_entry_id)
        ReleasedEntryNumber.objects.all().delete()

        out, _err = self._call("resync_entry_numbers")
        self.assertIn("DRY RUN", out)
        self.assertFalse(ReleasedEntryNumber.objects.exists())

        self._call("resync_entry_numbers", "--apply")
        self.assertEqual(list(ReleasedEntryNumber.objects.values_list("number", flat=True)), [1])

    def test_seed_command_is_idempotent(self):
        accounts = Account.objects.count()

        out, _err = self._call("seed_backoffice_chart", "--year", "2026")

        self.assertIn("Back-office books ready", out)
        self.assertIn("Fiscal year 2026: exists", out)
        self.assertEqual(Account.objects.count(), accounts)
