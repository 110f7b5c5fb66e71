# accounting/tests/test_account_directory.py

from __future__ import annotations

from datetime import date
from decimal import Decimal

from django.test import TestCase

from accounting.models.account import Account
from accounting.models.journal import JournalEntry
from accounting.models.posting import JournalPosting
from accounting.services.account_directory import (
    create_account,
    delete_account,
    get_account,
    get_or_create_partner_account,
    tree,
    update_account,
)
from accounting.services.chart_seed_service import seed_backoffice_books
from accounting.services.exceptions import (
    LedgerValidationError,
    NotFoundError,
    ReferencedError,
)
from accounting.services.journal_entry_service import create_entry, reverse_entry

MARCH = date(2026, 3, 10)


class AccountLookupTests(TestCase):
    @classmethod
    def setUpTestData(cls):
        seed_backoffice_books(year=2026)

    def test_lookup_by_code_id_or_instance(self):
        cash = Account.objects.get(code="1111")

        self.assertEqual(get_account("1111"), cash)
        self.assertEqual(get_account(cash.id), cash)
        self.assertIs(get_account(cash), cash)

    def test_missing_account_hard_fails(self):
        with self.assertRaises(NotFoundError):
            get_account("0000")
        with self.assertRaises(NotFoundError):
            get_account(None)

    def test_tree_is_a_forest_ordered_by_code(self):
        roots = tree()

        self.assertEqual([r["code"] for r in roots], ["0001", "0002", "0003", "0004", "0005", "0006"])

        assets = roots[0]
        current = next(c for c in assets["children"] if c["code"] == "1100")
        cash = next(c for c in current["children"] if c["code"] == "1110")
        self.assertEqual([c["code"] for c in cash["children"]], ["1111", "1112"])

    def test_tree_of_subset_promotes_orphaned_nodes_to_roots(self):
        subset = Account.objects.filter(code__in=["1110", "1111", "2141"])
        roots = tree(subset)

        self.assertEqual([r["code"] for r in roots], ["1110", "2141"])
        self.assertEqual([c["code"] for c in roots[0]["children"]], ["1111"])


class AccountAdministrationTests(TestCase):
    @classmethod
    def setUpTestData(cls):
        seed_backoffice_books(year=2026)

    def test_child_code_is_generated_under_parent(self):
        account = create_account(name="Gas Expense", account_type="expense", parent_code="5100")

        self.assertEqual(account.code, "51005")
        self.assertEqual(account.parent.code, "5100")
        self.assertEqual(account.nature, Account.DEBIT)

    def test_nature_defaults_from_type(self):
        account = create_account(code="2160", name="Customer Deposits", account_type="liability", parent_code="2100")
        self.assertEqual(account.nature, Account.CREDIT)

    def test_invalid_accounts_are_rejected(self):
        with self.assertRaises(LedgerValidationError):
            create_account(name="No code root", account_type="asset")
        with self.assertRaises(LedgerValidationError):
            create_account(code="7000", name="Bad type", account_type="income")
        with self.assertRaises(LedgerValidationError):
            create_account(code="1111", name="Duplicate", account_type="asset")
        with self.assertRaises(LedgerValidationError):
            create_account(code="ABC", name="Letters", account_type="asset")
        with self.assertRaises(LedgerValidationError):
            create_account(code="1190", name="Orphan", account_type="asset", parent_code="8888")

    def test_update_limited_fields(self):
        cash = Account.objects.get(code="1111")

        updated = update_account(account_id=cash.id, name="Front Cash", opening_balance="500.00")
        self.assertEqual(updated.name, "Front Cash")
        self.assertEqual(updated.opening_balance, Decimal("500.00"))

        with self.assertRaises(LedgerValidationError):
            update_account(account_id=cash.id, code="1119")

    def test_partner_account_is_created_once(self):
        first = get_or_create_partner_account(parent_code="1141", partner_id=7, name="Hotel Group")
        again = get_or_create_partner_account(parent_code="1141", partner_id=7, name="Ignored")

        self.assertEqual(first.pk, again.pk)
        self.assertEqual(first.code, "114100007")
        self.assertEqual(first.parent.code, "1141")
        self.assertEqual(first.account_type, Account.ASSET)
        self.assertFalse(first.allow_manual_entry)

        with self.assertRaises(NotFoundError):
            get_or_create_partner_account(parent_code="9999", partner_id=1)


class AccountDeleteTests(TestCase):
    @classmethod
    def setUpTestData(cls):
        seed_backoffice_books(year=2026)

    def _post_to(self, code, amount="80.00"):
        return create_entry(
            description="Delivery fees",
            entry_date=MARCH,
            postings=[
                {"account": code, "debit": amount},
                {"account": "1111", "credit": amount},
            ],
        )

    def test_unused_leaf_is_deleted(self):
        account = create_account(code="5270", name="Subscriptions", account_type="expense", parent_code="5200")

        self.assertEqual(delete_account(account_id=account.id), {"accounts": 1, "entries": 0})
        self.assertFalse(Account.objects.filter(code="5270").exists())

    def test_account_with_children_is_refused(self):
        with self.assertRaises(ReferencedError):
            delete_account(account_id="1110")

    def test_account_with_postings_is_refused(self):
        account = create_account(code="5270", name="Delivery", account_type="expense", parent_code="5200")
        self._post_to("5270")

        with self.assertRaises(ReferencedError):
            delete_account(account_id=account.id)

        self.assertTrue(Account.objects.filter(code="5270").exists())

    def test_cascade_removes_whole_entries_and_subtree(self):
        parent = create_account(code="5280", name="Delivery", account_type="expense", parent_code="5200")
        create_account(code="5281", name="Delivery - Riders", account_type="expense", parent_code="5280")
        first = self._post_to("5281")
        reverse_entry(entry_id=first.id, entry_date=MARCH)
        self._post_to("5280", "15.00")

        result = delete_account(account_id=parent.id, cascade=True, actor_id=1)

        self.assertEqual(result, {"accounts": 2, "entries": 3})
        self.assertFalse(Account.objects.filter(code__in=["5280", "5281"]).exists())
        self.assertFalse(JournalEntry.objects.exists())
        # The cash side of those entries went with them.
        self.assertFalse(JournalPosting.objects.filter(account__code="1111").exists())

    def test_cascade_handles_reversal_chains(self):
        account = create_account(code="5290", name="Linen", account_type="expense", parent_code="5200")
        entry = self._post_to("5290")
        first = reverse_entry(entry_id=entry.id, entry_date=MARCH)
        reverse_entry(entry_id=first.id, entry_date=MARCH)

        result = delete_account(account_id=account.id, cascade=True)

        self.assertEqual(result, {"accounts": 1, "entries": 3})
        self.assertFalse(JournalEntry.objects.exists())
