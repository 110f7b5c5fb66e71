# sales/tests/test_invoices.py

from __future__ import annotations

from datetime import date
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError
from django.db import IntegrityError, transaction
from django.test import TestCase
from rest_framework.test import APIClient

from accounting.models.account import Account
from accounting.models.account_mapping import AccountMapping
from accounting.models.journal import JournalEntry
from accounting.services.chart_seed_service import seed_backoffice_books
from accounting.services.exceptions import (
    AlreadyReversedError,
    ConfigurationError,
    ConflictError,
    LedgerValidationError,
    PeriodClosedError,
)
from accounting.services.integrity_service import find_orphans
from accounting.services.journal_entry_service import delete_entry
from accounting.services.period_guard import close_month
from sales.models import Invoice, InvoiceLine
from sales.services.invoice_service import issue_invoice, reverse_invoice

User = get_user_model()

MARCH = date(2026, 3, 10)
DINNER = [{"description": "Dinner for two", "quantity": 2, "unit_price": "100.00"}]


def _postings(entry):
    return {
        p.account.code: (p.debit, p.credit)
        for p in entry.postings.select_related("account")
    }


def _cash_sale(**overrides):
    kwargs = {
        "lines": DINNER,
        "payment_method": "cash",
        "branch": "china_town",
        "tax_amount": "30.00",
        "invoice_date": MARCH,
    }
    kwargs.update(overrides)
    return issue_invoice(**kwargs)


class IssueInvoiceTests(TestCase):
    """
    GUARANTEES:
    - Invoice, lines and journal entry commit together
    - Nothing survives a failed posting
    """

    @classmethod
    def setUpTestData(cls):
        seed_backoffice_books(year=2026)

    def test_cash_sale_posts_receipt_revenue_and_vat(self):
        invoice = _cash_sale(actor_id=4)

        self.assertEqual(invoice.status, Invoice.STATUS_PAID)
        self.assertEqual(invoice.invoice_number, f"INV-{invoice.pk:06d}")
        self.assertEqual(invoice.subtotal, Decimal("200.00"))
        self.assertEqual(invoice.total, Decimal("230.00"))
        self.assertEqual(InvoiceLine.objects.filter(invoice=invoice).count(), 1)

        entry = invoice.journal_entry
        self.assertEqual(entry.reference_type, "invoice")
        self.assertEqual(entry.reference_id, str(invoice.pk))
        self.assertEqual(entry.created_by_id, 4)
        self.assertEqual(
            _postings(entry),
            {
                "1111": (Decimal("230.00"), Decimal("0.00")),
                "4111": (Decimal("0.00"), Decimal("200.00")),
                "2141": (Decimal("0.00"), Decimal("30.00")),
            },
        )

    def test_no_tax_means_no_vat_posting(self):
        invoice = _cash_sale(tax_amount="0", payment_method="bank")

        self.assertEqual(
            _postings(invoice.journal_entry),
            {
                "1121": (Decimal("200.00"), Decimal("0.00")),
                "4111": (Decimal("0.00"), Decimal("200.00")),
            },
        )

    def test_discount_reduces_revenue(self):
        invoice = _cash_sale(discount_amount="20.00", tax_amount="27.00")

        self.assertEqual(invoice.total, Decimal("207.00"))
        postings = _postings(invoice.journal_entry)
        self.assertEqual(postings["4111"], (Decimal("0.00"), Decimal("180.00")))
        self.assertEqual(postings["1111"], (Decimal("207.00"), Decimal("0.00")))

    def test_credit_sale_uses_customer_sub_account(self):
        invoice = _cash_sale(
            payment_method="credit",
            branch="place_india",
            customer_id=42,
            customer_name="Hotel Group",
        )

        self.assertEqual(invoice.status, Invoice.STATUS_OPEN)

        customer = Account.objects.get(code="114100042")
        self.assertEqual(customer.parent.code, "1141")

        postings = _postings(invoice.journal_entry)
        self.assertEqual(postings["114100042"], (Decimal("230.00"), Decimal("0.00")))
        self.assertEqual(postings["4122"], (Decimal("0.00"), Decimal("200.00")))

    def test_credit_sale_without_customer_leaves_nothing(self):
        with self.assertRaises(LedgerValidationError):
            _cash_sale(payment_method="credit")

        self.assertFalse(Invoice.objects.exists())
        self.assertFalse(InvoiceLine.objects.exists())
        self.assertFalse(JournalEntry.objects.exists())

    def test_closed_period_leaves_nothing(self):
        close_month(period="2026-03", actor_id=1)

        with self.assertRaises(PeriodClosedError):
            _cash_sale()

        self.assertFalse(Invoice.objects.exists())
        self.assertFalse(InvoiceLine.objects.exists())

    def test_missing_vat_mapping_is_configuration_error(self):
        AccountMapping.objects.filter(
            document_type=AccountMapping.DOC_INVOICE, role="vat_output"
        ).delete()

        with self.assertRaises(ConfigurationError):
            _cash_sale()

        self.assertFalse(Invoice.objects.exists())

    def test_invalid_lines_are_rejected(self):
        with self.assertRaises(LedgerValidationError):
            _cash_sale(lines=[])
        with self.assertRaises(LedgerValidationError):
            _cash_sale(lines=[{"description": "Tea", "quantity": 0, "unit_price": "5.00"}])
        with self.assertRaises(LedgerValidationError):
            _cash_sale(lines=[{"description": "", "quantity": 1, "unit_price": "5.00"}])
        with self.assertRaises(LedgerValidationError):
            _cash_sale(discount_amount="500.00")


class InvoiceLifecycleTests(TestCase):
    @classmethod
    def setUpTestData(cls):
        seed_backoffice_books(year=2026)

    def test_reverse_invoice(self):
        invoice = _cash_sale()

        reversed_invoice = reverse_invoice(invoice_id=invoice.pk, actor_id=2, entry_date=date(2026, 3, 11))

        self.assertEqual(reversed_invoice.status, Invoice.STATUS_REVERSED)
        original = JournalEntry.objects.get(pk=invoice.journal_entry_id)
        self.assertEqual(original.status, JournalEntry.STATUS_REVERSED)
        reversal = JournalEntry.objects.get(reversal_of=original)
        self.assertEqual(_postings(reversal)["1111"], (Decimal("0.00"), Decimal("230.00")))

        with self.assertRaises(AlreadyReversedError):
            reverse_invoice(invoice_id=invoice.pk, entry_date=date(2026, 3, 11))

    def test_draft_invoice_cannot_be_reversed(self):
        draft = Invoice.objects.create(invoice_date=MARCH, total=Decimal("10.00"))

        with self.assertRaises(ConflictError):
            reverse_invoice(invoice_id=draft.pk, entry_date=MARCH)

    def test_deleted_entry_makes_invoice_an_orphan(self):
        invoice = _cash_sale()
        delete_entry(entry_id=invoice.journal_entry_id)

        self.assertEqual([row["id"] for row in find_orphans()["invoices"]], [invoice.pk])

    def test_db_rejects_paid_invoice_without_entry(self):
        with self.assertRaises(IntegrityError):
            with transaction.atomic():
                Invoice.objects.create(
                    invoice_date=MARCH,
                    total=Decimal("10.00"),
                    status=Invoice.STATUS_PAID,
                )

    def test_issued_invoice_is_frozen(self):
        invoice = _cash_sale()

        invoice.total = Decimal("1.00")
        with self.assertRaises(ValidationError):
            invoice.save()
        with self.assertRaises(ValidationError):
            invoice.delete()


class InvoiceApiTests(TestCase):
    @classmethod
    def setUpTestData(cls):
        seed_backoffice_books(year=2026)
        cls.admin = User.objects.create_superuser("admin", "admin@example.com", "pass")
        cls.clerk = User.objects.create_user("clerk", "clerk@example.com", "pass")

    def setUp(self):
        self.client = APIClient()
        self.client.force_authenticate(user=self.admin)

    def _payload(self, **overrides):
        payload = {
            "invoice_date": "2026-03-10",
            "payment_method": "cash",
            "branch": "china_town",
            "tax_amount": "30.00",
            "lines": [{"description": "Dinner for two", "quantity": "2", "unit_price": "100.00"}],
        }
        payload.update(overrides)
        return payload

    def test_issue_and_reverse(self):
        res = self.client.post("/api/sales/invoices/", self._payload(), format="json")

        self.assertEqual(res.status_code, 201, res.data)
        self.assertEqual(res.data["status"], "paid")
        self.assertEqual(res.data["total"], "230.00")
        self.assertEqual(res.data["journal_entry_number"], 1)

        res = self.client.post(
            f"/api/sales/invoices/{res.data['id']}/reverse/", {"entry_date": "2026-03-11"}, format="json"
        )
        self.assertEqual(res.status_code, 200, res.data)
        self.assertEqual(res.data["status"], "reversed")

    def test_credit_invoice_requires_customer(self):
        res = self.client.post("/api/sales/invoices/", self._payload(payment_method="credit"), format="json")

        self.assertEqual(res.status_code, 400)
        self.assertIn("customer_id", res.data)

    def test_closed_period_maps_to_period_closed(self):
        close_month(period="2026-03", actor_id=self.admin.pk)

        res = self.client.post("/api/sales/invoices/", self._payload(), format="json")

        self.assertEqual(res.status_code, 400)
        self.assertEqual(res.data["code"], "period_closed")
        self.assertFalse(Invoice.objects.exists())

    def test_clerk_without_permission_is_forbidden(self):
        self.client.force_authenticate(user=self.clerk)

        self.assertEqual(self.client.post("/api/sales/invoices/", self._payload(), format="json").status_code, 403)
        self.assertEqual(self.client.get("/api/sales/invoices/").status_code, 403)
