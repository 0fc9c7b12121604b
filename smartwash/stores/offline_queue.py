# smartwash/stores/offline_queue.py
"""
Offline Queue: transactions completed while the backing store is unreachable.

drain() delivers entries oldest first and removes each one only after the
ledger has confirmed it. A failure stops the drain: delivered entries stay
removed, the rest stay queued for the next user-initiated sync.
Only one drain may run at a time.
"""

import asyncio

from smartwash.exceptions import PersistenceError, SyncError, SyncInProgressError
from smartwash.schemas.transaction import QueuedTransactionOut, Transaction
from smartwash.stores.base import Repository
from smartwash.stores.transaction_ledger import TransactionLedger
from smartwash.utils.clock import utcnow
from smartwash.utils.logger import get_logger

logger = get_logger(__name__)


class OfflineQueue:

    def __init__(self, repository: Repository[QueuedTransactionOut]):
        self._repo = repository
        self._syncing = False

    @property
    def is_syncing(self) -> bool:
        return self._syncing

    def enqueue(self, txn: Transaction) -> QueuedTransactionOut:
        entry = QueuedTransactionOut(queued_at=utcnow(), transaction=txn)
        self._repo.add(txn.id, entry)
        logger.info(f"[SYNC] Queued {txn.id} offline ({len(self)} pending)")
        return entry

    def entries(self) -> list[QueuedTransactionOut]:
        return self._repo.list()

    def pending(self) -> list[Transaction]:
        return [e.transaction for e in self._repo.list()]

    def __len__(self) -> int:
        return len(self._repo)

    async def drain(self, ledger: TransactionLedger) -> int:
        """Deliver every queued transaction to ledger. Returns how many were delivered."""
        if self._syncing:
            raise SyncInProgressError()
        self._syncing = True
        delivered = 0
        try:
            entries = self._repo.list()
            if not entries:
                return 0
            logger.info(f"[SYNC] Draining {len(entries)} queued transaction(s)")
            for entry in entries:
                txn = entry.transaction
                try:
                    await asyncio.to_thread(ledger.add_transaction, txn)
                except PersistenceError as e:
                    remaining = len(entries) - delivered
                    logger.error(f"[SYNC] Delivery of {txn.id} failed after {delivered} delivered: {e}")
                    raise SyncError(f"Sync stopped at {txn.id}: {e}", delivered=delivered,
                                    remaining=remaining) from e
                self._repo.delete(txn.id)
                delivered += 1
            logger.info(f"[SYNC] Sync complete, {delivered} transaction(s) delivered")
            return delivered
        finally:
            self._syncing = False
