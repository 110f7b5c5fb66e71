# PATH: accounting/services/account_directory.py

"""
======================================================
PATH: accounting/services/account_directory.py
======================================================
ACCOUNT DIRECTORY

Read-mostly access to the chart of accounts forest, plus the
administrative create / update / delete paths.

Rules:
- Lookups hard-fail (NotFoundError) instead of guessing.
- Accounts with postings or children are never deleted silently;
  cascade=True is the explicit corrective path and removes every journal
  entry touching the subtree through journal_entry_service.
- tree() returns plain dict nodes; balances are attached by
  balance_service.roll_up, never stored on Account.
"""

from __future__ import annotations

import logging
from decimal import Decimal

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import transaction
from django.db.models import ProtectedError

from accounting.models.account import Account
from accounting.models.journal import JournalEntry
from accounting.models.posting import JournalPosting
from accounting.services.exceptions import (
    LedgerValidationError,
    NotFoundError,
    ReferencedError,
)

logger = logging.getLogger(__name__)

VALID_ACCOUNT_TYPES = {value for value, _label in Account.ACCOUNT_TYPES}
UPDATABLE_FIELDS = ("name", "name_en", "opening_balance", "allow_manual_entry", "is_active")


def get_account(code_or_id) -> Account:
    """
    Resolve an account from an Account instance, an integer id or a code string.
    """
    if isinstance(code_or_id, Account):
        return code_or_id

    if code_or_id is None or code_or_id == "":
        raise NotFoundError("Account reference is required")

    if isinstance(code_or_id, int) and not isinstance(code_or_id, bool):
        account = Account.objects.filter(pk=code_or_id).first()
    else:
        account = Account.objects.filter(code=str(code_or_id).strip()).first()

    if account is None:
        raise NotFoundError(f"Account {code_or_id!r} not found")
    return account


def _node(account: Account) -> dict:
    return {
        "id": account.id,
        "code": account.code,
        "name": account.name,
        "name_en": account.name_en,
        "account_type": account.account_type,
        "nature": account.nature,
        "parent_id": account.parent_id,
        "opening_balance": account.opening_balance,
        "is_active": account.is_active,
        "children": [],
    }


def tree(accounts=None) -> list[dict]:
    """
    Build the account forest ordered by code.

    Accounts whose parent is not part of `accounts` become roots.
    """
    if accounts is None:
        accounts = Account.objects.all().order_by("code")

    nodes = {a.id: _node(a) for a in accounts}
    roots: list[dict] = []

    for node in sorted(nodes.values(), key=lambda n: n["code"]):
        parent = nodes.get(node["parent_id"])
        if parent is None:
            roots.append(node)
        else:
            parent["children"].append(node)

    return roots


def _next_child_code(parent: Account) -> str:
    existing = set(
        Account.objects.filter(code__startswith=parent.code).values_list("code", flat=True)
    )
    suffix = Account.objects.filter(parent=parent).count() + 1
    while True:
        candidate = f"{parent.code}{suffix}"
        if candidate not in existing:
            return candidate
        suffix += 1


@transaction.atomic
def create_account(
    *,
    name: str,
    account_type: str,
    parent_code: str | None = None,
    code: str | None = None,
    opening_balance=Decimal("0.00"),
    nature: str | None = None,
    name_en: str = "",
    allow_manual_entry: bool = True,
) -> Account:
    account_type = (account_type or "").strip().lower()
    if account_type not in VALID_ACCOUNT_TYPES:
        raise LedgerValidationError(
            f"Unknown account type {account_type!r}. Use one of: {', '.join(sorted(VALID_ACCOUNT_TYPES))}"
        )

    parent = None
    if parent_code not in (None, ""):
        parent = Account.objects.filter(code=str(parent_code).strip()).first()
        if parent is None:
            raise LedgerValidationError(f"Parent account {parent_code!r} does not exist")

    code = (code or "").strip()
    if not code:
        if parent is None:
            raise LedgerValidationError("Account code is required for root accounts")
        code = _next_child_code(parent)

    if Account.objects.filter(code=code).exists():
        raise LedgerValidationError(f"Account code {code} already exists")

    if nature and nature not in (Account.DEBIT, Account.CREDIT):
        raise LedgerValidationError("nature must be 'debit' or 'credit'")

    try:
        account = Account.objects.create(
            code=code,
            name=name,
            name_en=name_en or "",
            account_type=account_type,
            nature=nature or Account.default_nature_for(account_type),
            parent=parent,
            opening_balance=Decimal(str(opening_balance or "0.00")),
            allow_manual_entry=allow_manual_entry,
        )
    except DjangoValidationError as exc:
        raise LedgerValidationError("; ".join(exc.messages)) from exc

    logger.info("Account %s created (%s)", account.code, account.account_type)
    return account


@transaction.atomic
def update_account(*, account_id, **changes) -> Account:
    account = get_account(account_id)

    unknown = set(changes) - set(UPDATABLE_FIELDS)
    if unknown:
        raise LedgerValidationError(f"Fields cannot be updated: {', '.join(sorted(unknown))}")

    for field, value in changes.items():
        if field == "opening_balance":
            value = Decimal(str(value or "0.00"))
        setattr(account, field, value)

    try:
        account.save()
    except DjangoValidationError as exc:
        raise LedgerValidationError("; ".join(exc.messages)) from exc
    return account


def _subtree_ids(account: Account) -> list[int]:
    """Ids of the account and all descendants, parents before children."""
    ordered = [account.id]
    frontier = [account.id]
    while frontier:
        child_ids = list(
            Account.objects.filter(parent_id__in=frontier).values_list("id", flat=True)
        )
        ordered.extend(child_ids)
        frontier = child_ids
    return ordered


def _delete_accounts(account_ids: list[int]) -> None:
    for acc_id in account_ids:
        try:
            Account.objects.filter(pk=acc_id).delete()
        except ProtectedError as exc:
            raise ReferencedError(
                f"Account id={acc_id} is still referenced by business documents"
            ) from exc


@transaction.atomic
def delete_account(*, account_id, cascade: bool = False, actor_id=None) -> dict:
    """
    Delete an account.

    Without cascade, refuses (ReferencedError) when the account has children
    or postings. With cascade, deletes every journal entry that touches the
    subtree (all of their postings, so the books stay balanced), then the
    subtree itself, deepest accounts first.
    """
    account = get_account(account_id)

    if not cascade:
        if Account.objects.filter(parent=account).exists():
            raise ReferencedError(f"Account {account.code} has child accounts")
        if JournalPosting.objects.filter(account=account).exists():
            raise ReferencedError(f"Account {account.code} has postings")
        _delete_accounts([account.pk])
        logger.info("Account %s deleted", account.code)
        return {"accounts": 1, "entries": 0}

    from accounting.services.journal_entry_service import delete_entry

    subtree = _subtree_ids(account)
    entry_ids = list(
        JournalPosting.objects.filter(account_id__in=subtree)
        .order_by()
        .values_list("journal_entry_id", flat=True)
        .distinct()
    )

    # A reversal always has a higher id than the entry it reverses.
    ordered_entries = list(JournalEntry.objects.filter(pk__in=entry_ids).order_by("-id"))
    for entry in ordered_entries:
        delete_entry(entry_id=entry.id, actor_id=actor_id)

    _delete_accounts(list(reversed(subtree)))

    logger.warning(
        "Cascade delete of account %s removed %s accounts and %s journal entries (actor=%s)",
        account.code,
        len(subtree),
        len(ordered_entries),
        actor_id,
    )
    return {"accounts": len(subtree), "entries": len(ordered_entries)}


@transaction.atomic
def get_or_create_partner_account(*, parent_code: str, partner_id, name: str = "") -> Account:
    """
    Customer / supplier sub-account under a control account
    (e.g. customers under 1141, suppliers under 2111).
    """
    parent = Account.objects.filter(code=str(parent_code)).first()
    if parent is None:
        raise NotFoundError(f"Control account {parent_code} not found")

    try:
        partner_number = int(partner_id)
    except (TypeError, ValueError) as exc:
        raise LedgerValidationError(f"Invalid partner id {partner_id!r}") from exc

    code = f"{parent.code}{partner_number:05d}"
    account = Account.objects.filter(code=code).first()
    if account is not None:
        return account

    return Account.objects.create(
        code=code,
        name=(name or f"{parent.name} #{partner_number}").strip(),
        name_en=parent.name_en,
        account_type=parent.account_type,
        nature=parent.nature,
        parent=parent,
        allow_manual_entry=False,
    )
