# purchases/admin.py

from django.contrib import admin

from purchases.models import Supplier, SupplierInvoice, SupplierInvoiceLine


@admin.register(Supplier)
class SupplierAdmin(admin.ModelAdmin):
    list_display = ("name", "phone", "vat_number", "is_active")
    search_fields = ("name", "vat_number")
    list_filter = ("is_active",)


class SupplierInvoiceLineInline(admin.TabularInline):
    model = SupplierInvoiceLine
    extra = 0
    readonly_fields = ("description", "quantity", "unit_cost", "line_total")
    can_delete = False


@admin.register(SupplierInvoice)
class SupplierInvoiceAdmin(admin.ModelAdmin):
    list_display = ("invoice_number", "supplier", "invoice_date", "total", "status", "journal_entry")
    readonly_fields = ("subtotal", "discount_amount", "tax_amount", "total", "status", "journal_entry", "created_at")
    search_fields = ("invoice_number", "supplier__name")
    list_filter = ("status", "payment_method", "invoice_date")
    inlines = [SupplierInvoiceLineInline]

    def has_delete_permission(self, request, obj=None):
        return obj is None or not obj.is_committed
