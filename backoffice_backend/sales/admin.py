# sales/admin.py

from django.contrib import admin

from sales.models import Invoice, InvoiceLine


# ======================================================
# INVOICE ADMIN (READ-MOSTLY)
# ======================================================


class InvoiceLineInline(admin.TabularInline):
    model = InvoiceLine
    extra = 0
    readonly_fields = ("description", "quantity", "unit_price", "line_total")
    can_delete = False


@admin.register(Invoice)
class InvoiceAdmin(admin.ModelAdmin):
    list_display = (
        "invoice_number",
        "invoice_date",
        "branch",
        "payment_method",
        "total",
        "status",
        "journal_entry",
    )
    readonly_fields = (
        "invoice_number",
        "subtotal",
        "discount_amount",
        "tax_amount",
        "total",
        "status",
        "journal_entry",
        "created_by_id",
        "created_at",
    )
    search_fields = ("invoice_number", "customer_name")
    list_filter = ("status", "branch", "payment_method", "invoice_date")
    inlines = [InvoiceLineInline]

    def has_delete_permission(self, request, obj=None):
        return obj is None or not obj.is_committed
