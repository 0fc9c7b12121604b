# tests/test_connectivity.py
"""Unit tests for the connectivity monitor and the backing-store probe."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from unittest.mock import MagicMock
from sqlalchemy.exc import OperationalError
from smartwash.services.connectivity import ConnectivityMonitor, database_probe


class TestConnectivityMonitor:
    def test_online_without_probe(self):
        assert ConnectivityMonitor().is_online() is True

    def test_forced_offline_skips_probe(self):
        probe = MagicMock(return_value=True)
        monitor = ConnectivityMonitor(probe=probe, force_offline=True)
        assert monitor.is_online() is False
        probe.assert_not_called()

    def test_toggle(self):
        monitor = ConnectivityMonitor(probe=lambda: True)
        monitor.set_forced_offline(True)
        assert monitor.forced_offline is True
        monitor.set_forced_offline(False)
        assert monitor.is_online() is True

    def test_probe_result_used(self):
        assert ConnectivityMonitor(probe=lambda: False).is_online() is False


class TestDatabaseProbe:
    def test_reachable_sqlite(self, sql_db):
        assert database_probe(sql_db.engine)() is True

    def test_unreachable_database(self):
        engine = MagicMock()
        engine.connect.side_effect = OperationalError("SELECT 1", {}, Exception("connection refused"))
        assert database_probe(engine)() is False
