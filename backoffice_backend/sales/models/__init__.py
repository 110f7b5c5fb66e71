# sales/models/__init__.py

"""
SALES MODELS PACKAGE EXPORTS

Purpose:
- Central export surface for sales app models.
"""

from .invoice import Invoice, InvoiceLine

__all__ = [
    "Invoice",
    "InvoiceLine",
]
