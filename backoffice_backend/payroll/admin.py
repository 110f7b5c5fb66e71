# payroll/admin.py

from django.contrib import admin

from payroll.models import PayrollItem, PayrollRun


class PayrollItemInline(admin.TabularInline):
    model = PayrollItem
    extra = 0
    readonly_fields = ("employee_id", "employee_name", "gross", "deductions", "net")
    can_delete = False


@admin.register(PayrollRun)
class PayrollRunAdmin(admin.ModelAdmin):
    list_display = ("period", "branch", "gross_total", "net_total", "status", "journal_entry")
    readonly_fields = ("gross_total", "deductions_total", "net_total", "status", "journal_entry", "created_at")
    list_filter = ("status", "branch")
    inlines = [PayrollItemInline]

    def has_delete_permission(self, request, obj=None):
        return obj is None or not obj.is_committed
