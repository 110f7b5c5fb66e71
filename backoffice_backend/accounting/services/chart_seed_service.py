# accounting/services/chart_seed_service.py

"""
======================================================
PATH: accounting/services/chart_seed_service.py
======================================================
RESTAURANT CHART + ACCOUNT MAPPING SEED

Idempotent setup used by the seed management command and by tests:
- chart of accounts (roots 0001-0006 with their standard children)
- AccountMapping rows consumed by entry_builders
- current fiscal year (open when no year is open yet)

Re-running never duplicates rows and never changes codes already in use.
"""

from __future__ import annotations

import logging

from django.db import transaction
from django.utils import timezone

from accounting.models.account import Account
from accounting.models.account_mapping import AccountMapping
from accounting.models.fiscal_year import FiscalYear
from accounting.services import account_resolver as roles
from accounting.services.period_guard import create_fiscal_year

logger = logging.getLogger(__name__)

A, L, E, R, X = (
    Account.ASSET,
    Account.LIABILITY,
    Account.EQUITY,
    Account.REVENUE,
    Account.EXPENSE,
)

# (code, name, type, parent_code, nature override)
DEFAULT_CHART = [
    ("0001", "Assets", A, None, None),
    ("1100", "Current Assets", A, "0001", None),
    ("1110", "Cash and Cash Equivalents", A, "1100", None),
    ("1111", "Main Cash", A, "1110", None),
    ("1112", "Sub Cash", A, "1110", None),
    ("1120", "Banks", A, "1100", None),
    ("1121", "Main Bank", A, "1120", None),
    ("1140", "Accounts Receivable", A, "1100", None),
    ("1141", "Customers", A, "1140", None),
    ("1142", "Other Receivables", A, "1140", None),
    ("1150", "Advances and Deposits", A, "1100", None),
    ("1151", "Employee Advances", A, "1150", None),
    ("1160", "Inventory", A, "1100", None),
    ("1161", "Merchandise Inventory", A, "1160", None),
    ("1170", "VAT Input", A, "1100", None),
    ("1200", "Non-Current Assets", A, "0001", None),
    ("1210", "Property and Equipment", A, "1200", None),
    ("1220", "Accumulated Depreciation", A, "1200", Account.CREDIT),
    ("0002", "Liabilities", L, None, None),
    ("2100", "Current Liabilities", L, "0002", None),
    ("2110", "Accounts Payable", L, "2100", None),
    ("2111", "Suppliers", L, "2110", None),
    ("2120", "Employee Payables", L, "2100", None),
    ("2121", "Salaries Payable", L, "2120", None),
    ("2130", "Government Payables", L, "2100", None),
    ("2131", "GOSI Payable", L, "2130", None),
    ("2140", "Tax Payables", L, "2100", None),
    ("2141", "VAT Output", L, "2140", None),
    ("2150", "Accrued Expenses", L, "2100", None),
    ("2200", "Non-Current Liabilities", L, "0002", None),
    ("2210", "Long-term Loans", L, "2200", None),
    ("0003", "Equity", E, None, None),
    ("3100", "Capital", E, "0003", None),
    ("3200", "Retained Earnings", E, "0003", None),
    ("3300", "Owner Current Account", E, "0003", None),
    ("0004", "Revenue", R, None, None),
    ("4100", "Operating Revenue", R, "0004", None),
    ("4111", "Cash Sales - China Town", R, "4100", None),
    ("4112", "Credit Sales - China Town", R, "4100", None),
    ("4121", "Cash Sales - Place India", R, "4100", None),
    ("4122", "Credit Sales - Place India", R, "4100", None),
    ("4200", "Other Revenue", R, "0004", None),
    ("4210", "Non-Operating Revenue", R, "4200", None),
    ("0005", "Expenses", X, None, None),
    ("5100", "Operating Expenses", X, "0005", None),
    ("5110", "Cost of Goods Sold", X, "5100", None),
    ("5120", "Electricity Expense", X, "5100", None),
    ("5130", "Water Expense", X, "5100", None),
    ("5140", "Telecom Expense", X, "5100", None),
    ("5200", "Administrative and General Expenses", X, "0005", None),
    ("5210", "Salaries and Wages", X, "5200", None),
    ("5220", "Allowances", X, "5200", None),
    ("5250", "Bank Expenses", X, "5200", None),
    ("5260", "Miscellaneous Expenses", X, "5200", None),
    ("0006", "System/Control Accounts", A, None, None),
    ("6100", "Inventory Differences", A, "0006", None),
    ("6200", "Cash Differences", A, "0006", None),
]

# Control accounts and system accounts are posted by builders only.
NON_MANUAL_CODES = {"1141", "2111", "1170", "2141"}

INV = AccountMapping.DOC_INVOICE
EXP = AccountMapping.DOC_EXPENSE
SUP = AccountMapping.DOC_SUPPLIER_INVOICE
PAY = AccountMapping.DOC_PAYROLL

# (document_type, role, branch, payment_method, account_code)
DEFAULT_ACCOUNT_MAPPINGS = [
    (INV, roles.ROLE_RECEIPT, "", "cash", "1111"),
    (INV, roles.ROLE_RECEIPT, "", "bank", "1121"),
    (INV, roles.ROLE_RECEIVABLE, "", "", "1141"),
    (INV, roles.ROLE_REVENUE, "china_town", "", "4111"),
    (INV, roles.ROLE_REVENUE, "china_town", "credit", "4112"),
    (INV, roles.ROLE_REVENUE, "place_india", "", "4121"),
    (INV, roles.ROLE_REVENUE, "place_india", "credit", "4122"),
    (INV, roles.ROLE_REVENUE, "", "", "4111"),
    (INV, roles.ROLE_VAT_OUTPUT, "", "", "2141"),
    (EXP, roles.ROLE_PAYMENT, "", "cash", "1111"),
    (EXP, roles.ROLE_PAYMENT, "", "bank", "1121"),
    (EXP, roles.ROLE_PAYMENT, "", "credit", "2150"),
    (EXP, roles.ROLE_VAT_INPUT, "", "", "1170"),
    (SUP, roles.ROLE_PAYMENT, "", "cash", "1111"),
    (SUP, roles.ROLE_PAYMENT, "", "bank", "1121"),
    (SUP, roles.ROLE_PAYABLE, "", "", "2111"),
    (SUP, roles.ROLE_PURCHASES, "", "", "5110"),
    (SUP, roles.ROLE_VAT_INPUT, "", "", "1170"),
    (PAY, roles.ROLE_SALARIES_EXPENSE, "", "", "5210"),
    (PAY, roles.ROLE_SALARIES_PAYABLE, "", "", "2121"),
    (PAY, roles.ROLE_PAYROLL_DEDUCTIONS, "", "", "1151"),
]


@transaction.atomic
def seed_chart_of_accounts() -> dict:
    created = 0
    existing = {a.code: a for a in Account.objects.all()}

    for code, name, account_type, parent_code, nature in DEFAULT_CHART:
        if code in existing:
            continue
        account = Account.objects.create(
            code=code,
            name=name,
            name_en=name,
            account_type=account_type,
            nature=nature or Account.default_nature_for(account_type),
            parent=existing.get(parent_code) if parent_code else None,
            allow_manual_entry=code not in NON_MANUAL_CODES,
        )
        existing[code] = account
        created += 1

    return {"created": created, "total": len(existing)}


@transaction.atomic
def seed_account_mappings() -> dict:
    created = 0
    for document_type, role, branch, payment_method, code in DEFAULT_ACCOUNT_MAPPINGS:
        _obj, was_created = AccountMapping.objects.get_or_create(
            document_type=document_type,
            role=role,
            branch=branch,
            payment_method=payment_method,
            defaults={"account_code": code},
        )
        created += int(was_created)
    return {"created": created, "total": len(DEFAULT_ACCOUNT_MAPPINGS)}


@transaction.atomic
def seed_backoffice_books(*, year: int | None = None, actor_id=None) -> dict:
    chart = seed_chart_of_accounts()
    mappings = seed_account_mappings()

    year = year or timezone.localdate().year
    fiscal_year = FiscalYear.objects.filter(year=year).first()
    fiscal_year_created = False
    if fiscal_year is None:
        fiscal_year = create_fiscal_year(year=year, actor_id=actor_id)
        fiscal_year_created = True

    logger.info(
        "Books seeded: %s accounts created, %s mappings created, fiscal year %s",
        chart["created"],
        mappings["created"],
        fiscal_year.year,
    )
    return {
        "accounts": chart,
        "mappings": mappings,
        "fiscal_year": fiscal_year,
        "fiscal_year_created": fiscal_year_created,
    }
