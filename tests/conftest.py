# tests/conftest.py
"""Shared fixtures: in-memory stores, a wired workflow engine, and throwaway SQLite databases."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest
from types import SimpleNamespace
from unittest.mock import MagicMock, AsyncMock

from smartwash.database import create_tables, make_engine, make_session_factory
from smartwash.schemas.user import UserProfile, UserRole
from smartwash.services.connectivity import ConnectivityMonitor
from smartwash.services.notification_service import NotificationSender
from smartwash.services.ocr_service import PlateScanner
from smartwash.services.workflow_engine import WorkflowEngine
from smartwash.stores.memory import InMemoryRepository
from smartwash.stores.offline_queue import OfflineQueue
from smartwash.stores.service_catalog import ServiceCatalog
from smartwash.stores.transaction_ledger import TransactionLedger
from smartwash.stores.vehicle_registry import VehicleRegistry


def make_stores():
    catalog = ServiceCatalog(InMemoryRepository())
    catalog.seed_defaults()
    return SimpleNamespace(
        registry=VehicleRegistry(InMemoryRepository()),
        ledger=TransactionLedger(InMemoryRepository(order_key=lambda t: t.timestamp, descending=True)),
        queue=OfflineQueue(InMemoryRepository()),
        catalog=catalog,
    )


@pytest.fixture
def attendant():
    return UserProfile(uid="user-2", name="John Doe", email="attendant@smartwash.com", role=UserRole.ATTENDANT)


@pytest.fixture
def stores():
    return make_stores()


@pytest.fixture
def scanner():
    s = MagicMock(spec=PlateScanner)
    s.scan = AsyncMock(return_value="")
    return s


@pytest.fixture
def notifier():
    n = MagicMock(spec=NotificationSender)
    n.send.return_value = "https://wa.me/260977123456?text=receipt"
    return n


@pytest.fixture
def connectivity():
    return ConnectivityMonitor()


@pytest.fixture
def engine(attendant, stores, scanner, notifier, connectivity):
    return WorkflowEngine(
        attendant=attendant,
        registry=stores.registry,
        ledger=stores.ledger,
        queue=stores.queue,
        catalog=stores.catalog,
        scanner=scanner,
        notifier=notifier,
        connectivity=connectivity,
        business_name="Spillway Car Wash",
    )


@pytest.fixture
def sql_db():
    """Fresh in-memory backing store and local store, tables created."""
    backing = make_engine("sqlite:///:memory:")
    local = make_engine("sqlite:///:memory:")
    create_tables(backing, local)
    yield SimpleNamespace(
        engine=backing,
        local_engine=local,
        session=make_session_factory(backing),
        local_session=make_session_factory(local),
    )
    backing.dispose()
    local.dispose()
