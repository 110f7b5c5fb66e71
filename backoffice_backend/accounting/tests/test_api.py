# accounting/tests/test_api.py

from __future__ import annotations

from datetime import date

from django.contrib.auth import get_user_model
from django.contrib.auth.models import Permission
from django.test import TestCase
from rest_framework.test import APIClient

from accounting.models.account import Account
from accounting.models.journal import JournalEntry
from accounting.services.chart_seed_service import seed_backoffice_books
from accounting.services.journal_entry_service import create_entry, reverse_entry
from accounting.services.period_guard import close_month

User = get_user_model()

BASE = "/api/accounting"
MARCH = date(2026, 3, 10)


def _manual_payload(debit="100.00", credit="100.00", entry_date="2026-03-10"):
    return {
        "description": "Owner contribution",
        "entry_date": entry_date,
        "postings": [
            {"account": "1121", "debit": debit},
            {"account": "3100", "credit": credit},
        ],
    }


class AccountingApiTestCase(TestCase):
    @classmethod
    def setUpTestData(cls):
        seed_backoffice_books(year=2026)
        cls.admin = User.objects.create_superuser("admin", "admin@example.com", "pass")
        cls.clerk = User.objects.create_user("clerk", "clerk@example.com", "pass")

    def setUp(self):
        self.client = APIClient()
        self.client.force_authenticate(user=self.admin)

    def _as(self, user):
        self.client.force_authenticate(user=user)

    def _grant(self, user, codename):
        user.user_permissions.add(
            Permission.objects.get(codename=codename, content_type__app_label="accounting")
        )
        # has_perm caches permissions on the instance
        return User.objects.get(pk=user.pk)


class JournalEntryApiTests(AccountingApiTestCase):
    """
    GUARANTEES:
    - Writes go through the engine and map its errors to stable codes
    - Every action is permission-gated
    """

    def test_manual_entry_is_created(self):
        res = self.client.post(f"{BASE}/journal-entries/", _manual_payload(), format="json")

        self.assertEqual(res.status_code, 201, res.data)
        self.assertEqual(res.data["entry_number"], 1)
        self.assertEqual(res.data["status"], "posted")
        self.assertTrue(res.data["is_manual"])
        self.assertEqual(res.data["created_by_id"], self.admin.pk)
        self.assertEqual(len(res.data["postings"]), 2)

    def test_unbalanced_entry_returns_stable_code(self):
        res = self.client.post(
            f"{BASE}/journal-entries/",
            _manual_payload(debit="100.00", credit="90.00"),
            format="json",
        )

        self.assertEqual(res.status_code, 400)
        self.assertEqual(res.data["code"], "unbalanced_entry")
        self.assertFalse(JournalEntry.objects.exists())

    def test_closed_period_returns_period_closed(self):
        close_month(period="2026-03", actor_id=self.admin.pk)

        res = self.client.post(f"{BASE}/journal-entries/", _manual_payload(), format="json")

        self.assertEqual(res.status_code, 400)
        self.assertEqual(res.data["code"], "period_closed")

    def test_permissions_are_enforced(self):
        self._as(self.clerk)

        self.assertEqual(
            self.client.post(f"{BASE}/journal-entries/", _manual_payload(), format="json").status_code,
            403,
        )
        self.assertEqual(self.client.get(f"{BASE}/journal-entries/").status_code, 403)

        self.client.force_authenticate(user=None)
        self.assertEqual(self.client.get(f"{BASE}/journal-entries/").status_code, 401)

    def test_single_permission_grants_single_action(self):
        viewer = self._grant(self.clerk, "view_journalentry")
        self._as(viewer)

        self.assertEqual(self.client.get(f"{BASE}/journal-entries/").status_code, 200)
        self.assertEqual(
            self.client.post(f"{BASE}/journal-entries/", _manual_payload(), format="json").status_code,
            403,
        )

    def test_list_filters_by_account(self):
        create_entry(
            description="Float",
            entry_date=MARCH,
            postings=[{"account": "1112", "debit": "20.00"}, {"account": "1111", "credit": "20.00"}],
        )
        create_entry(
            description="Capital",
            entry_date=MARCH,
            postings=[{"account": "1121", "debit": "500.00"}, {"account": "3100", "credit": "500.00"}],
        )

        res = self.client.get(f"{BASE}/journal-entries/", {"account": "3100"})

        self.assertEqual(res.status_code, 200)
        self.assertEqual([row["description"] for row in res.data["results"]], ["Capital"])

    def test_reverse_and_delete(self):
        entry = create_entry(description="Capital", entry_date=MARCH, postings=_manual_payload()["postings"])

        res = self.client.post(
            f"{BASE}/journal-entries/{entry.id}/reverse/", {"entry_date": "2026-03-11"}, format="json"
        )
        self.assertEqual(res.status_code, 201, res.data)
        self.assertEqual(res.data["reversal_of"], entry.id)
        reversal_id = res.data["id"]

        res = self.client.post(f"{BASE}/journal-entries/{entry.id}/reverse/", {"entry_date": "2026-03-11"}, format="json")
        self.assertEqual(res.status_code, 409)
        self.assertEqual(res.data["code"], "already_reversed")

        res = self.client.delete(f"{BASE}/journal-entries/{entry.id}/")
        self.assertEqual(res.status_code, 409)
        self.assertEqual(res.data["code"], "referenced")

        res = self.client.delete(f"{BASE}/journal-entries/{reversal_id}/")
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["deleted_entry_number"], 2)

        res = self.client.get(f"{BASE}/journal-entries/next-number/")
        self.assertEqual(res.data["next_entry_number"], 2)

    def test_missing_entry_is_404(self):
        res = self.client.post(f"{BASE}/journal-entries/999999/reverse/", {}, format="json")
        self.assertEqual(res.status_code, 404)
        self.assertEqual(res.data["code"], "not_found")


class AccountApiTests(AccountingApiTestCase):
    def test_tree_listing(self):
        res = self.client.get(f"{BASE}/accounts/", {"tree": "1"})

        self.assertEqual(res.status_code, 200)
        self.assertEqual([node["code"] for node in res.data][:2], ["0001", "0002"])
        self.assertIn("children", res.data[0])

    def test_create_under_parent(self):
        res = self.client.post(
            f"{BASE}/accounts/",
            {"name": "Gas Expense", "account_type": "expense", "parent_code": "5100"},
            format="json",
        )

        self.assertEqual(res.status_code, 201, res.data)
        self.assertEqual(res.data["code"], "51005")
        self.assertEqual(res.data["parent_code"], "5100")

    def test_delete_with_children_is_conflict(self):
        parent = Account.objects.get(code="1110")

        res = self.client.delete(f"{BASE}/accounts/{parent.id}/")

        self.assertEqual(res.status_code, 409)
        self.assertEqual(res.data["code"], "referenced")
        self.assertTrue(Account.objects.filter(code="1110").exists())

    def test_account_balance(self):
        create_entry(description="Capital", entry_date=MARCH, postings=_manual_payload()["postings"])
        bank = Account.objects.get(code="1121")

        res = self.client.get(f"{BASE}/accounts/{bank.id}/balance/", {"date_from": "2026-03-01"})

        self.assertEqual(res.status_code, 200)
        self.assertEqual(str(res.data["ending"]), "100.00")


class ReportApiTests(AccountingApiTestCase):
    def test_trial_balance(self):
        create_entry(description="Capital", entry_date=MARCH, postings=_manual_payload()["postings"])

        res = self.client.get(f"{BASE}/trial-balance/", {"date_from": "2026-03-01", "date_to": "2026-03-31"})

        self.assertEqual(res.status_code, 200)
        self.assertTrue(res.data["totals"]["balanced"])
        self.assertEqual([row["code"] for row in res.data["accounts"]], ["1121", "3100"])

    def test_bad_range_is_rejected(self):
        res = self.client.get(f"{BASE}/trial-balance/", {"date_from": "2026-04-01", "date_to": "2026-03-01"})
        self.assertEqual(res.status_code, 400)
        self.assertEqual(res.data["code"], "validation_error")

        res = self.client.get(f"{BASE}/trial-balance/", {"date_from": "01/03/2026"})
        self.assertEqual(res.status_code, 400)
        self.assertEqual(res.data["code"], "validation_error")

    def test_reports_need_report_permission(self):
        self._as(self.clerk)
        self.assertEqual(self.client.get(f"{BASE}/trial-balance/").status_code, 403)

        self._as(self._grant(self.clerk, "view_journalposting"))
        self.assertEqual(self.client.get(f"{BASE}/trial-balance/").status_code, 200)
        self.assertEqual(self.client.get(f"{BASE}/income-statement/").status_code, 200)
        self.assertEqual(self.client.get(f"{BASE}/balance-sheet/").status_code, 200)

    def test_reversed_entry_nets_out_of_account_tree(self):
        entry = create_entry(description="Capital", entry_date=MARCH, postings=_manual_payload()["postings"])
        reverse_entry(entry_id=entry.id, entry_date=MARCH)

        res = self.client.get(f"{BASE}/account-tree/")

        self.assertEqual(res.status_code, 200)
        assets = res.data[0]
        self.assertEqual(str(assets["debit"]), "100.00")
        self.assertEqual(str(assets["ending"]), "0.00")


class PeriodApiTests(AccountingApiTestCase):
    def test_close_year_without_successor_is_conflict(self):
        res = self.client.post(f"{BASE}/fiscal-years/2026/close/", {}, format="json")

        self.assertEqual(res.status_code, 409)
        self.assertEqual(res.data["code"], "conflict")

    def test_temporary_open_of_previous_year(self):
        res = self.client.post(f"{BASE}/fiscal-years/", {"year": 2025}, format="json")
        self.assertEqual(res.status_code, 201, res.data)
        self.assertEqual(res.data["status"], "closed")

        res = self.client.post(
            f"{BASE}/fiscal-years/2025/temporary-open/", {"reason": "Late invoices"}, format="json"
        )
        self.assertEqual(res.status_code, 200, res.data)
        self.assertTrue(res.data["temporary_open"])

        res = self.client.get(f"{BASE}/fiscal-years/can-post/", {"date": "2025-12-31"})
        self.assertTrue(res.data["allowed"])

    def test_month_close_and_reopen(self):
        res = self.client.post(f"{BASE}/periods/close/", {"period": "2026-03"}, format="json")
        self.assertEqual(res.status_code, 200, res.data)

        res = self.client.get(f"{BASE}/fiscal-years/can-post/", {"date": "2026-03-15"})
        self.assertFalse(res.data["allowed"])

        res = self.client.post(f"{BASE}/periods/open/", {"period": "2026-03"}, format="json")
        self.assertEqual(res.status_code, 200)

    def test_administration_needs_change_permission(self):
        self._as(self._grant(self.clerk, "view_fiscalyear"))

        self.assertEqual(self.client.get(f"{BASE}/fiscal-years/").status_code, 200)
        res = self.client.post(f"{BASE}/periods/close/", {"period": "2026-03"}, format="json")
        self.assertEqual(res.status_code, 403)


class ExpenseApiTests(AccountingApiTestCase):
    def test_post_and_reverse_expense(self):
        res = self.client.post(
            f"{BASE}/expenses/",
            {
                "expense_date": "2026-03-10",
                "payment_method": "bank",
                "lines": [{"account_code": "5120", "amount": "90.00"}],
            },
            format="json",
        )
        self.assertEqual(res.status_code, 201, res.data)
        self.assertEqual(res.data["status"], "posted")
        self.assertEqual(res.data["journal_entry_number"], 1)

        res = self.client.post(
            f"{BASE}/expenses/{res.data['id']}/reverse/", {"entry_date": "2026-03-12"}, format="json"
        )
        self.assertEqual(res.status_code, 200, res.data)
        self.assertEqual(res.data["status"], "reversed")

    def test_unknown_account_is_configuration_error(self):
        res = self.client.post(
            f"{BASE}/expenses/",
            {
                "expense_date": "2026-03-10",
                "payment_method": "cash",
                "lines": [{"account_code": "5999", "amount": "90.00"}],
            },
            format="json",
        )
        self.assertEqual(res.status_code, 400)
        self.assertEqual(res.data["code"], "configuration_error")
