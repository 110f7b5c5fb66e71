# accounting/tests/test_settings.py

from __future__ import annotations

import importlib
import os
import sys
from unittest import mock

from django.conf import settings
from django.core.exceptions import ImproperlyConfigured
from django.test import SimpleTestCase

from accounting.services.journal_entry_service import _allocation_retries

PROD_ENV = {
    "SECRET_KEY": "a-long-production-secret",
    "ALLOWED_HOSTS": "books.example.com",
    "DATABASE_URL": "postgres://ledger:pw@db:5432/ledger",
    "CORS_ALLOWED_ORIGINS": "https://books.example.com",
}


class LedgerSettingsTests(SimpleTestCase):
    def test_entry_number_retries_default(self):
        self.assertEqual(settings.ACCOUNTING_ENTRY_NUMBER_RETRIES, 3)
        self.assertEqual(_allocation_retries(), 3)


class ProductionSettingsTests(SimpleTestCase):
    """
    GUARANTEES:
    - Production refuses to start without its required environment
    - Production runs the ledger on Postgres with DEBUG off
    """

    def _load(self, environ):
        from backend.settings import base

        sys.modules.pop("backend.settings.prod", None)
        self.addCleanup(sys.modules.pop, "backend.settings.prod", None)
        with mock.patch.dict(os.environ, environ), mock.patch.object(
            base, "MIDDLEWARE", list(base.MIDDLEWARE)
        ):
            return importlib.import_module("backend.settings.prod")

    def test_full_environment_loads(self):
        prod = self._load(PROD_ENV)

        self.assertFalse(prod.DEBUG)
        self.assertEqual(prod.DATABASES["default"]["ENGINE"], "django.db.backends.postgresql")
        self.assertFalse(prod.CORS_ALLOW_CREDENTIALS)
        self.assertIn("whitenoise.middleware.WhiteNoiseMiddleware", prod.MIDDLEWARE)

    def test_missing_requirements_fail_closed(self):
        for key in ("SECRET_KEY", "ALLOWED_HOSTS", "CORS_ALLOWED_ORIGINS"):
            with self.subTest(missing=key):
                with self.assertRaises(ImproperlyConfigured):
                    self._load({**PROD_ENV, key: ""})

    def test_sqlite_is_refused(self):
        with self.assertRaises(ImproperlyConfigured):
            self._load({**PROD_ENV, "DATABASE_URL": "sqlite:///ledger.db"})
