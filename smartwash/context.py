# smartwash/context.py
"""
Process-scoped application context.

Built once at startup (build_context), initialised with init() and torn down
with close(). Routers reach it through app.state.context; nothing else holds
stores, collaborators or per-attendant workflows as globals.
"""

from typing import Optional

from sqlalchemy.engine import Engine

from smartwash.config import Settings, settings
from smartwash.schemas.user import UserProfile, UserRole
from smartwash.services.auth_service import AuthService
from smartwash.services.connectivity import ConnectivityMonitor, database_probe
from smartwash.services.notification_service import NotificationSender, build_sender
from smartwash.services.ocr_service import GeminiPlateScanner, PlateScanner
from smartwash.services.user_service import UserService
from smartwash.services.workflow_engine import WorkflowEngine
from smartwash.stores.offline_queue import OfflineQueue
from smartwash.stores.service_catalog import ServiceCatalog
from smartwash.stores.transaction_ledger import TransactionLedger
from smartwash.stores.vehicle_registry import VehicleRegistry
from smartwash.utils.logger import get_logger

logger = get_logger(__name__)


class AppContext:

    def __init__(self, registry: VehicleRegistry, ledger: TransactionLedger, queue: OfflineQueue,
                 catalog: ServiceCatalog, scanner: PlateScanner, notifier: NotificationSender,
                 connectivity: ConnectivityMonitor, auth: AuthService, users: UserService,
                 config: Settings = settings, engine: Optional[Engine] = None,
                 local_engine: Optional[Engine] = None):
        self.registry = registry
        self.ledger = ledger
        self.queue = queue
        self.catalog = catalog
        self.scanner = scanner
        self.notifier = notifier
        self.connectivity = connectivity
        self.auth = auth
        self.users = users
        self.config = config
        self._engine = engine
        self._local_engine = local_engine
        self._workflows: dict[str, WorkflowEngine] = {}
        self._initialised = False

    def init(self, seed: bool = True):
        """Create tables (SQL-backed contexts) and seed the default catalog."""
        if self._initialised:
            return
        if self._engine is not None:
            from smartwash.database import create_tables
            create_tables(self._engine, self._local_engine)
        if seed:
            self.catalog.seed_defaults()
        self._initialised = True
        logger.info(f"[CONTEXT] Ready: {len(self.catalog.list())} services, {len(self.queue)} queued offline")

    def close(self):
        pending = len(self._workflows)
        self._workflows.clear()
        for eng in (self._engine, self._local_engine):
            if eng is not None:
                eng.dispose()
        self._initialised = False
        logger.info(f"[CONTEXT] Closed ({pending} open workflow(s) discarded)")

    def workflow_for(self, attendant: UserProfile) -> WorkflowEngine:
        """One workflow per signed-in user, created on first use."""
        engine = self._workflows.get(attendant.uid)
        if engine is None:
            engine = WorkflowEngine(
                attendant=attendant,
                registry=self.registry,
                ledger=self.ledger,
                queue=self.queue,
                catalog=self.catalog,
                scanner=self.scanner,
                notifier=self.notifier,
                connectivity=self.connectivity,
                business_name=self.config.BUSINESS_NAME,
                currency=self.config.CURRENCY_SYMBOL,
            )
            self._workflows[attendant.uid] = engine
        else:
            engine.attendant = attendant
        return engine

    def end_workflow(self, uid: str):
        self._workflows.pop(uid, None)

    def seed_accounts(self) -> int:
        created = 0
        created += self.users.ensure_user(self.config.SEED_ADMIN_EMAIL, self.config.SEED_ADMIN_PASSWORD,
                                          "Admin User", UserRole.ADMIN)
        created += self.users.ensure_user(self.config.SEED_ATTENDANT_EMAIL, self.config.SEED_ATTENDANT_PASSWORD,
                                          "Attendant", UserRole.ATTENDANT)
        return created


def build_context(config: Settings = settings) -> AppContext:
    """Wire the SQLAlchemy-backed stores and the configured collaborators."""
    from smartwash import database
    from smartwash.models.offline_queue import QueuedTransactionRow
    from smartwash.models.service import ServiceRow
    from smartwash.models.transaction import TransactionRow
    from smartwash.models.vehicle import VehicleRow
    from smartwash.stores.sql import SqlRepository

    if config is settings:
        engine, local_engine = database.engine, database.local_engine
        session_factory, local_factory = database.SessionLocal, database.LocalSession
    else:
        engine = database.make_engine(config.DATABASE_URL)
        local_engine = database.make_engine(config.LOCAL_STORE_URL)
        session_factory = database.make_session_factory(engine)
        local_factory = database.make_session_factory(local_engine)

    return AppContext(
        registry=VehicleRegistry(SqlRepository(session_factory, VehicleRow, "license_plate")),
        ledger=TransactionLedger(SqlRepository(session_factory, TransactionRow, "id",
                                               order_by="timestamp", descending=True)),
        queue=OfflineQueue(SqlRepository(local_factory, QueuedTransactionRow, "transaction_id",
                                         order_by="seq")),
        catalog=ServiceCatalog(SqlRepository(session_factory, ServiceRow, "id")),
        scanner=GeminiPlateScanner(
            api_key=config.OCR_API_KEY, model=config.OCR_MODEL,
            api_base=config.OCR_API_BASE, timeout=config.OCR_TIMEOUT_SECONDS,
        ),
        notifier=build_sender(config),
        connectivity=ConnectivityMonitor(probe=database_probe(engine), force_offline=config.FORCE_OFFLINE),
        auth=AuthService(session_factory, config.SESSION_TOKEN_TTL_MINUTES),
        users=UserService(session_factory),
        config=config,
        engine=engine,
        local_engine=local_engine,
    )
