# smartwash/database.py
"""
Database connections, session management, and table creation.

Two SQLAlchemy databases are used:
  - the backing store (catalog, vehicles, transactions, users)
  - the device-local store (offline transaction queue)
All models are auto-imported in create_tables() so every table exists after one call.
"""

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from smartwash.config import settings


def make_engine(url: str) -> Engine:
    """Build an engine with pool settings that fit the dialect."""
    if url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if ":memory:" in url or url.rstrip("/") == "sqlite:":
            kwargs["poolclass"] = StaticPool   # one shared in-memory DB for all sessions
        return create_engine(url, echo=False, **kwargs)
    return create_engine(
        url,
        pool_pre_ping=True,          # Auto-reconnect if DB connection drops
        pool_size=10,
        max_overflow=20,
        echo=False,                  # Set True to log all SQL queries (debug only)
    )


def make_session_factory(bind: Engine):
    return sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=bind)


engine = make_engine(settings.DATABASE_URL)
local_engine = make_engine(settings.LOCAL_STORE_URL)

SessionLocal = make_session_factory(engine)
LocalSession = make_session_factory(local_engine)

Base = declarative_base()        # backing-store tables
LocalBase = declarative_base()   # device-local tables


def create_tables(bind: Engine = None, local_bind: Engine = None):
    """
    Creates all DB tables on startup. Safe to call multiple times.
    Import all models here so SQLAlchemy knows about them.
    """
    from smartwash.models.service import ServiceRow                  # noqa
    from smartwash.models.vehicle import VehicleRow                  # noqa
    from smartwash.models.transaction import TransactionRow          # noqa
    from smartwash.models.user import UserCredential, UserProfileRow # noqa
    from smartwash.models.offline_queue import QueuedTransactionRow  # noqa

    Base.metadata.create_all(bind=bind or engine)
    LocalBase.metadata.create_all(bind=local_bind or local_engine)
