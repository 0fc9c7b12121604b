# smartwash/services/connectivity.py
"""
Decides whether completed transactions go to the ledger or the offline queue.
Online means: not forced offline, and the backing store answers SELECT 1.
"""

from typing import Callable, Optional

from sqlalchemy import text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from smartwash.utils.logger import get_logger

logger = get_logger(__name__)


def database_probe(engine: Engine) -> Callable[[], bool]:
    def probe() -> bool:
        try:
            with engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            return True
        except SQLAlchemyError as e:
            logger.warning(f"[CONNECTIVITY] Backing store unreachable: {e}")
            return False
    return probe


class ConnectivityMonitor:

    def __init__(self, probe: Optional[Callable[[], bool]] = None, force_offline: bool = False):
        self._probe = probe
        self._forced_offline = force_offline

    @property
    def forced_offline(self) -> bool:
        return self._forced_offline

    def set_forced_offline(self, flag: bool):
        if flag != self._forced_offline:
            logger.info(f"[CONNECTIVITY] Forced offline {'on' if flag else 'off'}")
        self._forced_offline = flag

    def is_online(self) -> bool:
        if self._forced_offline:
            return False
        if self._probe is None:
            return True
        return self._probe()
