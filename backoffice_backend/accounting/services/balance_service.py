# accounting/services/balance_service.py

"""
BALANCE & REPORTING SERVICE (AUTHORITATIVE)

Read-only ledger aggregation helpers.

RULES:
- READ-ONLY: no writes, ever
- JournalPosting is the single source of truth
- Accounting timeline is JournalEntry.entry_date
- Posted AND reversed entries both count (a reversal nets its original out)
- Debit-positive convention: beginning/ending are debit - credit, with the
  opening balance signed by the account nature
- Aggregates are computed, never stored on Account
"""

from __future__ import annotations

import copy
from datetime import date
from decimal import ROUND_HALF_UP, Decimal

from django.db.models import Sum
from django.db.models.functions import Coalesce

from accounting.models.account import Account
from accounting.models.posting import JournalPosting
from accounting.services.account_directory import get_account, tree
from accounting.services.exceptions import LedgerValidationError

TWOPLACES = Decimal("0.01")
ZERO = Decimal("0.00")
BALANCE_FIELDS = ("beginning", "debit", "credit", "ending")


def _q2(v) -> Decimal:
    return Decimal(str(v or "0.00")).quantize(TWOPLACES, rounding=ROUND_HALF_UP)


def _to_minor_int(amount: Decimal) -> int:
    return int((_q2(amount) * 100).to_integral_value(rounding=ROUND_HALF_UP))


def _check_range(date_from: date | None, date_to: date | None) -> None:
    if date_from and date_to and date_from > date_to:
        raise LedgerValidationError("date_from must be on or before date_to")


def _totals_by_account(*, date_from=None, date_to=None, before=None, account_ids=None) -> dict:
    """
    {account_id: (debit, credit)} in one grouped query.

    `before` selects postings strictly earlier than that date (beginning balance).
    """
    qs = JournalPosting.objects.all()
    if account_ids is not None:
        qs = qs.filter(account_id__in=account_ids)
    if before is not None:
        qs = qs.filter(journal_entry__entry_date__lt=before)
    if date_from is not None:
        qs = qs.filter(journal_entry__entry_date__gte=date_from)
    if date_to is not None:
        qs = qs.filter(journal_entry__entry_date__lte=date_to)

    rows = qs.values("account_id").annotate(
        debit_total=Coalesce(Sum("debit"), ZERO),
        credit_total=Coalesce(Sum("credit"), ZERO),
    )
    return {r["account_id"]: (_q2(r["debit_total"]), _q2(r["credit_total"])) for r in rows}


def _balances_for(accounts, *, date_from=None, date_to=None) -> dict[int, dict]:
    account_ids = [a.id for a in accounts]
    period = _totals_by_account(date_from=date_from, date_to=date_to, account_ids=account_ids)
    prior = (
        _totals_by_account(before=date_from, account_ids=account_ids)
        if date_from is not None
        else {}
    )

    balances = {}
    for acc in accounts:
        prior_debit, prior_credit = prior.get(acc.id, (ZERO, ZERO))
        debit, credit = period.get(acc.id, (ZERO, ZERO))
        beginning = _q2(acc.signed_opening_balance + prior_debit - prior_credit)
        balances[acc.id] = {
            "beginning": beginning,
            "debit": debit,
            "credit": credit,
            "ending": _q2(beginning + debit - credit),
        }
    return balances


def account_balance(account, *, date_from: date | None = None, date_to: date | None = None) -> dict:
    """
    Beginning / period debit / period credit / ending for one account.

    beginning = signed opening balance + net postings before date_from
    ending    = beginning + debit - credit
    """
    _check_range(date_from, date_to)
    account = get_account(account)
    return _balances_for([account], date_from=date_from, date_to=date_to)[account.id]


def trial_balance(*, date_from: date | None = None, date_to: date | None = None) -> dict:
    """
    Bulk trial balance (no N+1). Accounts with nothing to show are skipped.
    """
    _check_range(date_from, date_to)
    accounts = list(
        Account.objects.only("id", "code", "name", "account_type", "nature", "opening_balance")
        .order_by("code")
    )
    balances = _balances_for(accounts, date_from=date_from, date_to=date_to)

    totals = {field: ZERO for field in BALANCE_FIELDS}
    rows = []
    for acc in accounts:
        bal = balances[acc.id]
        if all(bal[field] == ZERO for field in BALANCE_FIELDS):
            continue

        rows.append(
            {
                "account_id": acc.id,
                "code": acc.code,
                "name": acc.name,
                "account_type": acc.account_type,
                **bal,
            }
        )
        for field in BALANCE_FIELDS:
            totals[field] = _q2(totals[field] + bal[field])

    totals["balanced"] = _to_minor_int(totals["debit"]) == _to_minor_int(totals["credit"])

    return {
        "date_from": date_from,
        "date_to": date_to,
        "accounts": rows,
        "totals": totals,
    }


def roll_up(nodes: list[dict], balances: dict) -> list[dict]:
    """
    Annotate an account tree with aggregated balances.

    Each node gets beginning/debit/credit/ending = its own balance plus the
    sum of its children. Works on a deep copy; any aggregate already present
    on the input is ignored, so rolling up twice gives the same tree.
    """
    result = copy.deepcopy(nodes)

    def visit(node: dict) -> dict:
        own = balances.get(node["id"]) or {}
        totals = {field: _q2(own.get(field, ZERO)) for field in BALANCE_FIELDS}
        for child in node.get("children", []):
            child_totals = visit(child)
            for field in BALANCE_FIELDS:
                totals[field] = _q2(totals[field] + child_totals[field])
        node.update(totals)
        return totals

    for root in result:
        visit(root)
    return result


def account_tree_with_balances(*, date_from: date | None = None, date_to: date | None = None) -> list[dict]:
    _check_range(date_from, date_to)
    accounts = list(Account.objects.all().order_by("code"))
    balances = _balances_for(accounts, date_from=date_from, date_to=date_to)
    return roll_up(tree(accounts), balances)


def _section(accounts, balances, *, sign: int) -> tuple[list[dict], Decimal]:
    lines = []
    total = ZERO
    for acc in accounts:
        bal = balances[acc.id]
        amount = _q2(sign * bal["ending"])
        if amount == ZERO:
            continue
        lines.append({"account_id": acc.id, "code": acc.code, "name": acc.name, "amount": amount})
        total = _q2(total + amount)
    return lines, total


def income_statement(*, date_from: date | None = None, date_to: date | None = None) -> dict:
    """
    revenue = credit - debit, expense = debit - credit, for postings in range.
    Opening balances are not part of the period result.
    """
    _check_range(date_from, date_to)
    revenue_accounts = list(Account.objects.filter(account_type=Account.REVENUE).order_by("code"))
    expense_accounts = list(Account.objects.filter(account_type=Account.EXPENSE).order_by("code"))

    period = _totals_by_account(
        date_from=date_from,
        date_to=date_to,
        account_ids=[a.id for a in revenue_accounts + expense_accounts],
    )
    balances = {}
    for acc in revenue_accounts + expense_accounts:
        debit, credit = period.get(acc.id, (ZERO, ZERO))
        balances[acc.id] = {"ending": _q2(debit - credit)}

    revenue_lines, revenue_total = _section(revenue_accounts, balances, sign=-1)
    expense_lines, expense_total = _section(expense_accounts, balances, sign=1)

    return {
        "date_from": date_from,
        "date_to": date_to,
        "revenue": {"lines": revenue_lines, "total": revenue_total},
        "expenses": {"lines": expense_lines, "total": expense_total},
        "net_income": _q2(revenue_total - expense_total),
    }


def balance_sheet(*, as_of: date | None = None) -> dict:
    """
    Cumulative position at as_of. Liabilities and equity are shown credit-positive;
    revenue and expenses to date appear as current earnings inside equity.
    """
    accounts = list(Account.objects.all().order_by("code"))
    balances = _balances_for(accounts, date_to=as_of)

    by_type: dict[str, list[Account]] = {t: [] for t, _label in Account.ACCOUNT_TYPES}
    for acc in accounts:
        by_type[acc.account_type].append(acc)

    asset_lines, assets_total = _section(by_type[Account.ASSET], balances, sign=1)
    liability_lines, liabilities_total = _section(by_type[Account.LIABILITY], balances, sign=-1)
    equity_lines, equity_total = _section(by_type[Account.EQUITY], balances, sign=-1)

    current_earnings = _q2(
        -sum((balances[a.id]["ending"] for a in by_type[Account.REVENUE] + by_type[Account.EXPENSE]), ZERO)
    )
    equity_total = _q2(equity_total + current_earnings)

    return {
        "as_of": as_of,
        "assets": {"lines": asset_lines, "total": assets_total},
        "liabilities": {"lines": liability_lines, "total": liabilities_total},
        "equity": {
            "lines": equity_lines,
            "current_earnings": current_earnings,
            "total": equity_total,
        },
        "balanced": _to_minor_int(assets_total) == _to_minor_int(liabilities_total + equity_total),
    }
