# PATH: accounting/services/account_resolver.py

"""
PATH: accounting/services/account_resolver.py

ACCOUNT RESOLVER (AUTHORITATIVE)

This module answers ONE question:
"Which account should <role> of <document_type> use for this branch and
payment method?"

The answer is configuration data (AccountMapping rows), never inline
conditionals in the entry builders.

Design goals:
- deterministic: most specific mapping wins
- hard-fail on missing setup (ConfigurationError) so we never post to the
  wrong account or silently skip a line
"""

from __future__ import annotations

import logging

from accounting.models.account import Account
from accounting.models.account_mapping import AccountMapping
from accounting.services.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

# ------------------------------------------------------------
# ROLES
# ------------------------------------------------------------

ROLE_RECEIPT = "receipt"  # cash / bank debited by a paid sale
ROLE_RECEIVABLE = "receivable"  # customers control account (credit sales)
ROLE_REVENUE = "revenue"
ROLE_VAT_OUTPUT = "vat_output"
ROLE_VAT_INPUT = "vat_input"
ROLE_PAYMENT = "payment"  # cash / bank credited by a paid purchase or expense
ROLE_PAYABLE = "payable"  # suppliers control account (credit purchases)
ROLE_PURCHASES = "purchases"
ROLE_SALARIES_EXPENSE = "salaries_expense"
ROLE_SALARIES_PAYABLE = "salaries_payable"
ROLE_PAYROLL_DEDUCTIONS = "payroll_deductions"


def _norm(value) -> str:
    return str(value or "").strip().lower()


def mapped_account_code(
    *,
    document_type: str,
    role: str,
    branch: str = "",
    payment_method: str = "",
) -> str:
    branch = _norm(branch)
    payment_method = _norm(payment_method)

    candidates = list(
        AccountMapping.objects.filter(
            document_type=document_type,
            role=role,
            branch__in=[branch, ""],
            payment_method__in=[payment_method, ""],
        ).values_list("branch", "payment_method", "account_code")
    )

    def specificity(row):
        return (row[0] == branch and branch != "", row[1] == payment_method and payment_method != "")

    if not candidates:
        raise ConfigurationError(
            f"No account mapping for {document_type}.{role} "
            f"(branch={branch or '*'}, payment_method={payment_method or '*'})"
        )

    best = max(candidates, key=specificity)
    return best[2]


def resolve_account(
    *,
    document_type: str,
    role: str,
    branch: str = "",
    payment_method: str = "",
) -> Account:
    code = mapped_account_code(
        document_type=document_type,
        role=role,
        branch=branch,
        payment_method=payment_method,
    )
    account = Account.objects.filter(code=code).first()
    if account is None:
        raise ConfigurationError(
            f"Account {code} mapped for {document_type}.{role} does not exist in the chart of accounts"
        )
    if not account.is_active:
        raise ConfigurationError(f"Account {code} mapped for {document_type}.{role} is inactive")
    return account


def resolve_account_code(code: str, *, purpose: str = "") -> Account:
    """
    Resolve an explicitly chosen account code (e.g. an expense line account).
    A missing code is a configuration problem, not a malformed posting.
    """
    code = str(code or "").strip()
    account = Account.objects.filter(code=code).first() if code else None
    if account is None:
        label = f" for {purpose}" if purpose else ""
        raise ConfigurationError(f"Account {code or '<blank>'}{label} does not exist in the chart of accounts")
    return account
