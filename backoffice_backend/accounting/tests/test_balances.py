# accounting/tests/test_balances.py

from __future__ import annotations

from datetime import date
from decimal import Decimal

from django.test import SimpleTestCase, TestCase

from accounting.services.account_directory import update_account
from accounting.services.balance_service import (
    account_balance,
    account_tree_with_balances,
    balance_sheet,
    income_statement,
    roll_up,
    trial_balance,
)
from accounting.services.chart_seed_service import seed_backoffice_books
from accounting.services.exceptions import LedgerValidationError
from accounting.services.expense_service import post_expense
from accounting.services.journal_entry_service import create_entry, reverse_entry
from sales.services.invoice_service import issue_invoice

YEAR = 2026
MARCH_1 = date(YEAR, 3, 1)
MARCH_10 = date(YEAR, 3, 10)
MARCH_31 = date(YEAR, 3, 31)

D = Decimal


def _cash_sale():
    """230.00 cash sale: subtotal 200.00 + VAT 30.00."""
    return issue_invoice(
        lines=[{"description": "Dinner for two", "quantity": 2, "unit_price": "100.00"}],
        payment_method="cash",
        branch="china_town",
        tax_amount="30.00",
        invoice_date=MARCH_10,
    )


def _rows_by_code(report):
    return {row["code"]: row for row in report["accounts"]}


def _find(nodes, code):
    for node in nodes:
        if node["code"] == code:
            return node
        found = _find(node["children"], code)
        if found is not None:
            return found
    return None


class TrialBalanceTests(TestCase):
    @classmethod
    def setUpTestData(cls):
        seed_backoffice_books(year=YEAR)

    def test_cash_sale_trial_balance(self):
        _cash_sale()

        report = trial_balance(date_from=MARCH_1, date_to=MARCH_31)
        rows = _rows_by_code(report)

        self.assertEqual(set(rows), {"1111", "4111", "2141"})
        self.assertEqual(rows["1111"]["debit"], D("230.00"))
        self.assertEqual(rows["1111"]["ending"], D("230.00"))
        self.assertEqual(rows["4111"]["credit"], D("200.00"))
        self.assertEqual(rows["4111"]["ending"], D("-200.00"))
        self.assertEqual(rows["2141"]["credit"], D("30.00"))

        totals = report["totals"]
        self.assertEqual(totals["debit"], D("230.00"))
        self.assertEqual(totals["credit"], D("230.00"))
        self.assertEqual(totals["ending"], D("0.00"))
        self.assertTrue(totals["balanced"])

    def test_earlier_postings_move_into_beginning(self):
        _cash_sale()

        report = trial_balance(date_from=date(YEAR, 4, 1), date_to=date(YEAR, 4, 30))
        cash = _rows_by_code(report)["1111"]

        self.assertEqual(cash["beginning"], D("230.00"))
        self.assertEqual(cash["debit"], D("0.00"))
        self.assertEqual(cash["ending"], D("230.00"))
        self.assertTrue(report["totals"]["balanced"])

    def test_inverted_range_is_rejected(self):
        with self.assertRaises(LedgerValidationError):
            trial_balance(date_from=MARCH_31, date_to=MARCH_1)

    def test_deactivated_account_stays_in_totals(self):
        create_entry(
            description="Petty cash float",
            entry_date=MARCH_10,
            postings=[{"account": "1112", "debit": "100.00"}, {"account": "3100", "credit": "100.00"}],
        )
        update_account(account_id="1112", is_active=False)

        report = trial_balance(date_from=MARCH_1, date_to=MARCH_31)

        self.assertEqual(set(_rows_by_code(report)), {"1112", "3100"})
        self.assertEqual(report["totals"]["debit"], D("100.00"))
        self.assertEqual(report["totals"]["credit"], D("100.00"))
        self.assertTrue(report["totals"]["balanced"])


class AccountBalanceTests(TestCase):
    @classmethod
    def setUpTestData(cls):
        seed_backoffice_books(year=YEAR)

    def _capital(self, amount, entry_date=MARCH_10):
        return create_entry(
            description="Capital injection",
            entry_date=entry_date,
            postings=[
                {"account": "1121", "debit": amount},
                {"account": "3100", "credit": amount},
            ],
        )

    def test_opening_balance_is_signed_by_nature(self):
        update_account(account_id="3100", opening_balance="1000.00")
        update_account(account_id="1121", opening_balance="1000.00")

        self.assertEqual(account_balance("3100")["beginning"], D("-1000.00"))
        self.assertEqual(account_balance("1121")["beginning"], D("1000.00"))

    def test_beginning_plus_movement_equals_ending(self):
        update_account(account_id="3100", opening_balance="1000.00")
        self._capital("500.00")

        march = account_balance("3100", date_from=MARCH_1, date_to=MARCH_31)
        self.assertEqual(march["beginning"], D("-1000.00"))
        self.assertEqual(march["credit"], D("500.00"))
        self.assertEqual(march["ending"], D("-1500.00"))

        april = account_balance("3100", date_from=date(YEAR, 4, 1))
        self.assertEqual(april["beginning"], D("-1500.00"))
        self.assertEqual(april["ending"], D("-1500.00"))

    def test_reversed_entries_net_to_zero(self):
        entry = self._capital("300.00")
        reverse_entry(entry_id=entry.id, entry_date=MARCH_31)

        bank = account_balance("1121")
        self.assertEqual(bank["debit"], D("300.00"))
        self.assertEqual(bank["credit"], D("300.00"))
        self.assertEqual(bank["ending"], D("0.00"))

    def test_postings_after_range_are_ignored(self):
        self._capital("120.00", entry_date=date(YEAR, 5, 2))

        self.assertEqual(account_balance("1121", date_to=MARCH_31)["ending"], D("0.00"))


class RollUpTests(SimpleTestCase):
    def _bal(self, debit, credit):
        debit, credit = D(debit), D(credit)
        return {"beginning": D("0.00"), "debit": debit, "credit": credit, "ending": debit - credit}

    def setUp(self):
        self.nodes = [
            {
                "id": 1,
                "code": "1100",
                "children": [
                    {"id": 2, "code": "1110", "children": []},
                    {"id": 3, "code": "1120", "children": [{"id": 4, "code": "1121", "children": []}]},
                ],
            }
        ]
        self.balances = {
            1: self._bal("5.00", "0"),
            2: self._bal("100.00", "40.00"),
            4: self._bal("60.00", "0"),
        }

    def test_parent_includes_children(self):
        root = roll_up(self.nodes, self.balances)[0]

        self.assertEqual(root["debit"], D("165.00"))
        self.assertEqual(root["credit"], D("40.00"))
        self.assertEqual(root["ending"], D("125.00"))
        self.assertEqual(root["children"][1]["ending"], D("60.00"))

    def test_roll_up_is_idempotent(self):
        once = roll_up(self.nodes, self.balances)
        twice = roll_up(once, self.balances)

        self.assertEqual(once, twice)
        self.assertNotIn("ending", self.nodes[0])


class StatementTests(TestCase):
    @classmethod
    def setUpTestData(cls):
        seed_backoffice_books(year=YEAR)

    def _electricity(self):
        return post_expense(
            payment_method="cash",
            lines=[{"account_code": "5120", "amount": "150.00"}],
            expense_date=MARCH_10,
        )

    def test_account_tree_rolls_up_to_roots(self):
        _cash_sale()

        roots = account_tree_with_balances(date_from=MARCH_1, date_to=MARCH_31)

        self.assertEqual(_find(roots, "0001")["ending"], D("230.00"))
        self.assertEqual(_find(roots, "0002")["ending"], D("-30.00"))
        self.assertEqual(_find(roots, "0004")["ending"], D("-200.00"))
        self.assertEqual(_find(roots, "4100")["credit"], D("200.00"))
        self.assertEqual(sum((r["ending"] for r in roots), D("0.00")), D("0.00"))

    def test_income_statement(self):
        _cash_sale()
        self._electricity()

        report = income_statement(date_from=MARCH_1, date_to=MARCH_31)

        self.assertEqual(report["revenue"]["total"], D("200.00"))
        self.assertEqual(report["expenses"]["total"], D("150.00"))
        self.assertEqual(report["net_income"], D("50.00"))
        self.assertEqual([ln["code"] for ln in report["expenses"]["lines"]], ["5120"])

    def test_balance_sheet_balances(self):
        _cash_sale()
        self._electricity()

        sheet = balance_sheet(as_of=MARCH_31)

        self.assertEqual(sheet["assets"]["total"], D("80.00"))
        self.assertEqual(sheet["liabilities"]["total"], D("30.00"))
        self.assertEqual(sheet["equity"]["current_earnings"], D("50.00"))
        self.assertEqual(sheet["equity"]["total"], D("50.00"))
        self.assertTrue(sheet["balanced"])
