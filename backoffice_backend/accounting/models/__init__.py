# accounting/models/__init__.py

"""
ACCOUNTING MODELS PACKAGE EXPORTS

Note:
- Keep this file *imports-only* (no business logic).
- Do NOT import services from models anywhere (models must stay pure).
"""

from accounting.models.account import Account
from accounting.models.account_mapping import AccountMapping
from accounting.models.document import PostableDocument
from accounting.models.expense import Expense, ExpenseLine
from accounting.models.fiscal_year import AccountingPeriod, FiscalYear, FiscalYearActivity
from accounting.models.journal import JournalEntry
from accounting.models.posting import JournalPosting
from accounting.models.sequence import EntryNumberSequence, ReleasedEntryNumber

__all__ = [
    "Account",
    "AccountMapping",
    "AccountingPeriod",
    "EntryNumberSequence",
    "Expense",
    "ExpenseLine",
    "FiscalYear",
    "FiscalYearActivity",
    "JournalEntry",
    "JournalPosting",
    "PostableDocument",
    "ReleasedEntryNumber",
]
