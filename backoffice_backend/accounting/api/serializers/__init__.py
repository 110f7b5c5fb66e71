# accounting/api/serializers/__init__.py

from accounting.api.serializers.accounts import (
    AccountCreateSerializer,
    AccountListSerializer,
    AccountUpdateSerializer,
)
from accounting.api.serializers.expenses import (
    ExpenseCreateSerializer,
    ExpenseSerializer,
)
from accounting.api.serializers.fiscal_years import (
    AccountingPeriodSerializer,
    CloseYearSerializer,
    FiscalYearActivitySerializer,
    FiscalYearCreateSerializer,
    FiscalYearSerializer,
    MonthActionSerializer,
    TemporaryOpenSerializer,
)
from accounting.api.serializers.journal_entries import (
    JournalEntrySerializer,
    ManualJournalEntryCreateSerializer,
    ReverseEntrySerializer,
)

__all__ = [
    "AccountListSerializer",
    "AccountCreateSerializer",
    "AccountUpdateSerializer",
    "JournalEntrySerializer",
    "ManualJournalEntryCreateSerializer",
    "ReverseEntrySerializer",
    "FiscalYearSerializer",
    "FiscalYearCreateSerializer",
    "TemporaryOpenSerializer",
    "CloseYearSerializer",
    "MonthActionSerializer",
    "AccountingPeriodSerializer",
    "FiscalYearActivitySerializer",
    "ExpenseSerializer",
    "ExpenseCreateSerializer",
]
