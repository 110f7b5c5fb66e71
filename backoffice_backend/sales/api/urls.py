# sales/api/urls.py

"""
SALES API URLS (CANONICAL)

Provides:
    GET  /api/sales/invoices/
    POST /api/sales/invoices/                 issue (create + post)
    GET  /api/sales/invoices/<id>/
    POST /api/sales/invoices/<id>/reverse/
"""

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from sales.api.viewsets.invoice import InvoiceViewSet

router = DefaultRouter()
router.register(r"invoices", InvoiceViewSet, basename="invoices")

urlpatterns = [
    path("", include(router.urls)),
]
