# accounting/admin.py

from django.contrib import admin

from accounting.models.account import Account
from accounting.models.account_mapping import AccountMapping
from accounting.models.expense import Expense, ExpenseLine
from accounting.models.fiscal_year import AccountingPeriod, FiscalYear, FiscalYearActivity
from accounting.models.journal import JournalEntry
from accounting.models.posting import JournalPosting


class ReadOnlyAdmin(admin.ModelAdmin):
    """Ledger and audit rows change only through services."""

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


# ============================================================
# ACCOUNT
# ============================================================


@admin.register(Account)
class AccountAdmin(admin.ModelAdmin):
    list_display = (
        "code",
        "name",
        "account_type",
        "nature",
        "parent",
        "allow_manual_entry",
        "is_active",
    )
    list_filter = ("account_type", "nature", "is_active", "allow_manual_entry")
    search_fields = ("code", "name", "name_en")
    ordering = ("code",)
    readonly_fields = ("created_at", "updated_at")

    fieldsets = (
        (
            "Account Identity",
            {
                "fields": ("code", "name", "name_en", "account_type", "nature", "parent"),
            },
        ),
        (
            "Balances & Posting",
            {
                "fields": ("opening_balance", "allow_manual_entry", "is_active"),
            },
        ),
        (
            "System Fields",
            {
                "fields": ("created_at", "updated_at"),
            },
        ),
    )

    def has_delete_permission(self, request, obj=None):
        # Deletes go through account_directory.delete_account
        return False


@admin.register(AccountMapping)
class AccountMappingAdmin(admin.ModelAdmin):
    list_display = ("document_type", "role", "branch", "payment_method", "account_code", "updated_at")
    list_filter = ("document_type", "role", "branch")
    search_fields = ("account_code", "role")


# ============================================================
# JOURNAL (STRICTLY IMMUTABLE)
# ============================================================


class JournalPostingInline(admin.TabularInline):
    model = JournalPosting
    extra = 0
    can_delete = False
    readonly_fields = ("account", "debit", "credit", "memo")

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(JournalEntry)
class JournalEntryAdmin(ReadOnlyAdmin):
    list_display = (
        "entry_number",
        "entry_date",
        "description",
        "reference_type",
        "reference_id",
        "branch",
        "status",
    )
    list_filter = ("status", "reference_type", "branch", "period")
    search_fields = ("description", "reference_id", "entry_number")
    ordering = ("-entry_date", "-entry_number")
    inlines = [JournalPostingInline]


@admin.register(JournalPosting)
class JournalPostingAdmin(ReadOnlyAdmin):
    list_display = ("journal_entry", "account", "debit", "credit", "memo")
    list_filter = ("account__account_type",)
    search_fields = ("account__code", "memo")


# ============================================================
# PERIODS
# ============================================================


@admin.register(FiscalYear)
class FiscalYearAdmin(ReadOnlyAdmin):
    list_display = ("year", "start_date", "end_date", "status", "temporary_open", "closed_at")
    list_filter = ("status", "temporary_open")


@admin.register(AccountingPeriod)
class AccountingPeriodAdmin(ReadOnlyAdmin):
    list_display = ("period", "status", "closed_by_id", "closed_at")
    list_filter = ("status",)


@admin.register(FiscalYearActivity)
class FiscalYearActivityAdmin(ReadOnlyAdmin):
    list_display = ("created_at", "action", "fiscal_year", "period", "actor_id", "reason")
    list_filter = ("action",)


# ============================================================
# EXPENSES
# ============================================================


class ExpenseLineInline(admin.TabularInline):
    model = ExpenseLine
    extra = 0
    can_delete = False
    readonly_fields = ("account", "amount", "description")


@admin.register(Expense)
class ExpenseAdmin(admin.ModelAdmin):
    list_display = ("id", "expense_date", "vendor", "payment_method", "total", "status", "journal_entry")
    list_filter = ("status", "payment_method", "branch")
    search_fields = ("vendor", "description")
    readonly_fields = ("subtotal", "tax_amount", "total", "status", "journal_entry", "created_at")
    inlines = [ExpenseLineInline]

    def has_delete_permission(self, request, obj=None):
        return obj is None or not obj.is_committed
