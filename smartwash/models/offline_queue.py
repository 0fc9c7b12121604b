# smartwash/models/offline_queue.py
"""
Offline queue table, kept in the device-local database.
seq gives FIFO delivery order; a row is deleted only once its
transaction has been confirmed by the ledger.
"""

from sqlalchemy import Column, Integer, String, DateTime, JSON
from smartwash.database import LocalBase
from smartwash.schemas.transaction import QueuedTransactionOut, Transaction
from smartwash.utils.clock import utcnow


class QueuedTransactionRow(LocalBase):
    __tablename__ = "offline_queue"

    seq = Column(Integer, primary_key=True, autoincrement=True)
    transaction_id = Column(String(64), unique=True, nullable=False, index=True)
    payload = Column(JSON, nullable=False)
    queued_at = Column(DateTime, nullable=False)

    def to_schema(self) -> QueuedTransactionOut:
        return QueuedTransactionOut(
            queued_at=self.queued_at,
            transaction=Transaction.model_validate(self.payload),
        )

    @classmethod
    def from_schema(cls, entry: QueuedTransactionOut) -> "QueuedTransactionRow":
        return cls(
            transaction_id=entry.transaction.id,
            payload=entry.transaction.model_dump(mode="json"),
            queued_at=entry.queued_at or utcnow(),
        )

    def update_from(self, entry: QueuedTransactionOut):
        self.payload = entry.transaction.model_dump(mode="json")

    def __repr__(self):
        return f"<QueuedTransaction {self.seq} txn={self.transaction_id}>"
