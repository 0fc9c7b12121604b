# smartwash/stores/transaction_ledger.py
"""
Transaction Ledger: append-only record of completed transactions, newest first.
Adding an id that is already present is a no-op, so a queued transaction
redelivered after an interrupted sync never appears twice.
"""

from datetime import datetime
from typing import Optional

from smartwash.exceptions import DuplicateKeyError
from smartwash.schemas.transaction import Transaction
from smartwash.stores.base import Repository
from smartwash.utils.logger import get_logger

logger = get_logger(__name__)


class TransactionLedger:

    def __init__(self, repository: Repository[Transaction]):
        self._repo = repository

    def add_transaction(self, txn: Transaction) -> bool:
        """Append txn. Returns False if it was already recorded."""
        try:
            self._repo.add(txn.id, txn)
        except DuplicateKeyError:
            logger.info(f"[LEDGER] {txn.id} already recorded, skipped")
            return False
        logger.info(f"[LEDGER] Recorded {txn.id} plate={txn.license_plate} total={txn.total_amount} "
                    f"via {txn.payment.method.value}")
        return True

    def get(self, txn_id: str) -> Optional[Transaction]:
        return self._repo.get(txn_id)

    def list(self, since: Optional[datetime] = None) -> list[Transaction]:
        """All transactions (or those at/after since), newest first."""
        return self._repo.list(lower_bound=since)

    def __len__(self) -> int:
        return len(self._repo)
