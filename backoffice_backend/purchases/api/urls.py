# purchases/api/urls.py

from django.urls import path

from purchases.api.views import (
    SupplierInvoiceListCreateView,
    SupplierInvoiceReverseView,
    SupplierListCreateView,
)

urlpatterns = [
    path("suppliers/", SupplierListCreateView.as_view(), name="purchase-suppliers"),
    path(
        "invoices/", SupplierInvoiceListCreateView.as_view(), name="supplier-invoices"
    ),
    path(
        "invoices/<int:invoice_id>/reverse/",
        SupplierInvoiceReverseView.as_view(),
        name="supplier-invoice-reverse",
    ),
]
