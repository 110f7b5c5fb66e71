# accounting/api/views/__init__.py

"""
accounting.api.views package

Expose public API views cleanly without making routing/imports fragile.

Important:
- The JournalEntryViewSet is defined in accounting.api.view (singular).
- Do NOT import accounting.api.urls from here to avoid circular imports.
"""

from accounting.api.views.accounts import (
    AccountBalanceView,
    AccountDetailView,
    AccountListCreateView,
)
from accounting.api.views.balance_sheet import BalanceSheetView
from accounting.api.views.expenses import ExpenseListCreateView, ExpenseReverseView
from accounting.api.views.fiscal_years import (
    CanPostView,
    CloseMonthView,
    CloseYearView,
    FiscalYearActivityView,
    FiscalYearListCreateView,
    OpenMonthView,
    TemporaryCloseView,
    TemporaryOpenView,
)
from accounting.api.views.income_statement import IncomeStatementView
from accounting.api.views.integrity import OrphanReportView
from accounting.api.views.trial_balance import AccountTreeView, TrialBalanceView

__all__ = [
    "AccountListCreateView",
    "AccountDetailView",
    "AccountBalanceView",
    "TrialBalanceView",
    "AccountTreeView",
    "IncomeStatementView",
    "BalanceSheetView",
    "OrphanReportView",
    "FiscalYearListCreateView",
    "CanPostView",
    "TemporaryOpenView",
    "TemporaryCloseView",
    "CloseYearView",
    "FiscalYearActivityView",
    "CloseMonthView",
    "OpenMonthView",
    "ExpenseListCreateView",
    "ExpenseReverseView",
]
