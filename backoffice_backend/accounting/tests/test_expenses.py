# accounting/tests/test_expenses.py

from __future__ import annotations

from datetime import date
from decimal import Decimal

from django.test import TestCase

from accounting.models.expense import Expense, ExpenseLine
from accounting.models.journal import JournalEntry
from accounting.services.chart_seed_service import seed_backoffice_books
from accounting.services.exceptions import (
    AlreadyReversedError,
    ConfigurationError,
    ConflictError,
    LedgerValidationError,
    NotFoundError,
    PeriodClosedError,
)
from accounting.services.expense_service import post_expense, reverse_expense
from accounting.services.period_guard import close_month

MARCH = date(2026, 3, 10)


def _postings(entry):
    return {
        p.account.code: (p.debit, p.credit)
        for p in entry.postings.select_related("account")
    }


class PostExpenseTests(TestCase):
    """
    GUARANTEES:
    - Expense, lines and journal entry are written together or not at all
    - Payment method selects the credited account
    """

    @classmethod
    def setUpTestData(cls):
        seed_backoffice_books(year=2026)

    def test_cash_expense_with_vat(self):
        expense = post_expense(
            payment_method="cash",
            lines=[
                {"account_code": "5120", "amount": "100.00", "description": "Electricity"},
                {"account_code": "5130", "amount": "40.00", "description": "Water"},
            ],
            tax_amount="21.00",
            expense_date=MARCH,
            vendor="Utilities Co",
            branch="China_Town",
            actor_id=3,
        )

        self.assertEqual(expense.status, Expense.STATUS_POSTED)
        self.assertEqual(expense.subtotal, Decimal("140.00"))
        self.assertEqual(expense.total, Decimal("161.00"))
        self.assertEqual(expense.branch, "china_town")
        self.assertEqual(ExpenseLine.objects.filter(expense=expense).count(), 2)

        entry = expense.journal_entry
        self.assertEqual(entry.reference_type, "expense")
        self.assertEqual(entry.reference_id, str(expense.id))
        self.assertEqual(entry.entry_date, MARCH)
        self.assertFalse(entry.is_manual)
        self.assertEqual(
            _postings(entry),
            {
                "5120": (Decimal("100.00"), Decimal("0.00")),
                "5130": (Decimal("40.00"), Decimal("0.00")),
                "1170": (Decimal("21.00"), Decimal("0.00")),
                "1111": (Decimal("0.00"), Decimal("161.00")),
            },
        )

    def test_payment_method_selects_credit_account(self):
        bank = post_expense(
            payment_method="bank",
            lines=[{"account_code": "5140", "amount": "75.00"}],
            expense_date=MARCH,
        )
        accrued = post_expense(
            payment_method="credit",
            lines=[{"account_code": "5140", "amount": "75.00"}],
            expense_date=MARCH,
        )

        self.assertEqual(_postings(bank.journal_entry)["1121"], (Decimal("0.00"), Decimal("75.00")))
        self.assertEqual(_postings(accrued.journal_entry)["2150"], (Decimal("0.00"), Decimal("75.00")))

    def test_invalid_payload_is_rejected(self):
        with self.assertRaises(LedgerValidationError):
            post_expense(payment_method="voucher", lines=[{"account_code": "5120", "amount": "1.00"}])
        with self.assertRaises(LedgerValidationError):
            post_expense(payment_method="cash", lines=[], expense_date=MARCH)
        with self.assertRaises(LedgerValidationError):
            post_expense(payment_method="cash", lines=[{"account_code": "5120", "amount": "0"}], expense_date=MARCH)
        with self.assertRaises(LedgerValidationError):
            post_expense(
                payment_method="cash",
                lines=[{"account_code": "5120", "amount": "5.00"}],
                tax_amount="-1.00",
                expense_date=MARCH,
            )

        self.assertFalse(Expense.objects.exists())

    def test_unknown_line_account_is_a_configuration_error(self):
        with self.assertRaises(ConfigurationError):
            post_expense(
                payment_method="cash",
                lines=[{"account_code": "5999", "amount": "10.00"}],
                expense_date=MARCH,
            )

    def test_closed_month_leaves_no_expense_behind(self):
        close_month(period="2026-03", actor_id=1)

        with self.assertRaises(PeriodClosedError):
            post_expense(
                payment_method="cash",
                lines=[{"account_code": "5120", "amount": "10.00"}],
                expense_date=MARCH,
            )

        self.assertFalse(Expense.objects.exists())
        self.assertFalse(ExpenseLine.objects.exists())
        self.assertFalse(JournalEntry.objects.exists())


class ReverseExpenseTests(TestCase):
    @classmethod
    def setUpTestData(cls):
        seed_backoffice_books(year=2026)

    def _expense(self):
        return post_expense(
            payment_method="cash",
            lines=[{"account_code": "5260", "amount": "30.00"}],
            expense_date=MARCH,
        )

    def test_reverse_flips_document_and_entry(self):
        expense = self._expense()

        reversed_expense = reverse_expense(expense_id=expense.id, actor_id=2, entry_date=date(2026, 3, 12))

        self.assertEqual(reversed_expense.status, Expense.STATUS_REVERSED)
        original = JournalEntry.objects.get(pk=expense.journal_entry_id)
        self.assertEqual(original.status, JournalEntry.STATUS_REVERSED)

        reversal = JournalEntry.objects.get(reversal_of=original)
        self.assertEqual(_postings(reversal)["5260"], (Decimal("0.00"), Decimal("30.00")))

    def test_reverse_twice_and_missing(self):
        expense = self._expense()
        reverse_expense(expense_id=expense.id, entry_date=MARCH)

        with self.assertRaises(AlreadyReversedError):
            reverse_expense(expense_id=expense.id, entry_date=MARCH)
        with self.assertRaises(NotFoundError):
            reverse_expense(expense_id=424242, entry_date=MARCH)

    def test_draft_cannot_be_reversed(self):
        draft = Expense.objects.create(expense_date=MARCH, total=Decimal("5.00"))

        with self.assertRaises(ConflictError):
            reverse_expense(expense_id=draft.id, entry_date=MARCH)
