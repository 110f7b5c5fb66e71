# accounting/api/urls.py

from django.urls import include, path
from rest_framework.routers import DefaultRouter

# The journal entry ViewSet lives in accounting/api/view.py (singular).
# We import directly to avoid circular imports through views/__init__.py.
from accounting.api.view import JournalEntryViewSet
from accounting.api.views import (
    AccountBalanceView,
    AccountDetailView,
    AccountListCreateView,
    AccountTreeView,
    BalanceSheetView,
    CanPostView,
    CloseMonthView,
    CloseYearView,
    ExpenseListCreateView,
    ExpenseReverseView,
    FiscalYearActivityView,
    FiscalYearListCreateView,
    IncomeStatementView,
    OpenMonthView,
    OrphanReportView,
    TemporaryCloseView,
    TemporaryOpenView,
    TrialBalanceView,
)

router = DefaultRouter()
router.register("journal-entries", JournalEntryViewSet, basename="journal-entry")

urlpatterns = [
    # Router endpoints
    path("", include(router.urls)),
    # Account directory
    path("accounts/", AccountListCreateView.as_view(), name="accounts"),
    path("accounts/<int:pk>/", AccountDetailView.as_view(), name="account-detail"),
    path("accounts/<int:pk>/balance/", AccountBalanceView.as_view(), name="account-balance"),
    # Reports
    path("trial-balance/", TrialBalanceView.as_view(), name="trial-balance"),
    path("account-tree/", AccountTreeView.as_view(), name="account-tree"),
    path("income-statement/", IncomeStatementView.as_view(), name="income-statement"),
    path("balance-sheet/", BalanceSheetView.as_view(), name="balance-sheet"),
    path("integrity/orphans/", OrphanReportView.as_view(), name="integrity-orphans"),
    # Period administration
    path("fiscal-years/", FiscalYearListCreateView.as_view(), name="fiscal-years"),
    path("fiscal-years/can-post/", CanPostView.as_view(), name="fiscal-years-can-post"),
    path("fiscal-years/activity/", FiscalYearActivityView.as_view(), name="fiscal-years-activity"),
    path(
        "fiscal-years/<int:year>/temporary-open/",
        TemporaryOpenView.as_view(),
        name="fiscal-year-temporary-open",
    ),
    path(
        "fiscal-years/<int:year>/temporary-close/",
        TemporaryCloseView.as_view(),
        name="fiscal-year-temporary-close",
    ),
    path("fiscal-years/<int:year>/close/", CloseYearView.as_view(), name="fiscal-year-close"),
    path("periods/close/", CloseMonthView.as_view(), name="period-close"),
    path("periods/open/", OpenMonthView.as_view(), name="period-open"),
    # Expenses
    path("expenses/", ExpenseListCreateView.as_view(), name="expenses"),
    path("expenses/<int:pk>/reverse/", ExpenseReverseView.as_view(), name="expense-reverse"),
]
