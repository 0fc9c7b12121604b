# smartwash/models/transaction.py
"""
Completed transactions table (Transaction Ledger backing store).
Service snapshots are embedded as JSON so later catalog edits never
change a historical receipt. Rows are never updated or deleted.
"""

from sqlalchemy import Column, String, DateTime, Numeric, JSON
from smartwash.database import Base
from smartwash.schemas.transaction import Transaction


class TransactionRow(Base):
    __tablename__ = "transactions"

    id = Column(String(64), primary_key=True)
    timestamp = Column(DateTime, nullable=False, index=True)
    license_plate = Column(String(50), nullable=False, index=True)
    services = Column(JSON, nullable=False)            # [{id, name, price}, ...]
    total_amount = Column(Numeric(12, 2), nullable=False)
    payment_method = Column(String(30), nullable=False)
    payment_reference = Column(String(100))
    payment_amount = Column(Numeric(12, 2), nullable=False)
    attendant_id = Column(String(64), nullable=False, index=True)
    attendant_name = Column(String(200))

    def to_schema(self) -> Transaction:
        return Transaction(
            id=self.id,
            timestamp=self.timestamp,
            license_plate=self.license_plate,
            services=self.services,
            total_amount=self.total_amount,
            payment={
                "method": self.payment_method,
                "reference": self.payment_reference,
                "amount": self.payment_amount,
            },
            attendant_id=self.attendant_id,
            attendant_name=self.attendant_name or "",
        )

    @classmethod
    def from_schema(cls, txn: Transaction) -> "TransactionRow":
        return cls(
            id=txn.id,
            timestamp=txn.timestamp,
            license_plate=txn.license_plate,
            services=[s.model_dump(mode="json") for s in txn.services],
            total_amount=txn.total_amount,
            payment_method=txn.payment.method.value,
            payment_reference=txn.payment.reference,
            payment_amount=txn.payment.amount,
            attendant_id=txn.attendant_id,
            attendant_name=txn.attendant_name,
        )

    def __repr__(self):
        return f"<Transaction {self.id} plate={self.license_plate} total={self.total_amount}>"
