"""Unit tests for the SQLite connection options."""

from __future__ import annotations

import pytest
from django.conf import settings
from django.db import connection

pytestmark = pytest.mark.unit

SQLITE = settings.DATABASES["default"]["ENGINE"] == "django.db.backends.sqlite3"


@pytest.mark.skipif(not SQLITE, reason="SQLite-only connection options")
class TestSqliteOptions:
    def test_transactions_begin_immediate(self):
        options = settings.DATABASES["default"]["OPTIONS"]
        assert options["transaction_mode"] == "IMMEDIATE"
        assert options["timeout"] > 0

    def test_connection_uses_immediate_mode(self):
        connection.ensure_connection()
        assert connection.transaction_mode == "IMMEDIATE"

    def test_test_database_is_file_backed(self):
        assert not connection.is_in_memory_db()
