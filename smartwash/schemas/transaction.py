# smartwash/schemas/transaction.py
"""
Transaction and Payment models.

A Transaction is immutable once built, and its invariants are checked on
construction so an invalid one can never reach the ledger or the queue:
  - at least one service snapshot
  - total_amount == sum(services[].price)
  - payment.amount == total_amount
  - Mobile Money needs a non-empty reference
  - prices and amounts carry at most two decimal places, as stored
"""

import uuid
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional, Sequence

from pydantic import BaseModel, Field, field_validator, model_validator

from smartwash.schemas.service import Service
from smartwash.utils.clock import utcnow


class PaymentMethod(str, Enum):
    CASH = "Cash"
    MOBILE_MONEY = "Mobile Money"
    CORPORATE_ACCOUNT = "Corporate Account"


class Payment(BaseModel):
    method: PaymentMethod
    reference: Optional[str] = None
    amount: Decimal = Field(decimal_places=2)

    class Config:
        frozen = True

    @field_validator("reference")
    @classmethod
    def _strip_reference(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        return v.strip() or None

    @model_validator(mode="after")
    def _reference_required_for_mobile_money(self):
        if self.method == PaymentMethod.MOBILE_MONEY and not self.reference:
            raise ValueError("Transaction reference is required for Mobile Money")
        return self


def services_total(services: Sequence[Service]) -> Decimal:
    return sum((s.price for s in services), Decimal("0"))


def new_transaction_id() -> str:
    return f"txn-{uuid.uuid4().hex}"


class Transaction(BaseModel):
    id: str
    timestamp: datetime
    license_plate: str
    services: list[Service]
    total_amount: Decimal = Field(decimal_places=2)
    payment: Payment
    attendant_id: str
    attendant_name: str

    class Config:
        frozen = True
        from_attributes = True

    @model_validator(mode="after")
    def _check_amounts(self):
        if not self.services:
            raise ValueError("A transaction needs at least one service")
        expected = services_total(self.services)
        if self.total_amount != expected:
            raise ValueError(f"total_amount {self.total_amount} does not match services sum {expected}")
        if self.payment.amount != self.total_amount:
            raise ValueError(f"payment.amount {self.payment.amount} does not match total_amount {self.total_amount}")
        return self

    @classmethod
    def build(cls, license_plate: str, services: Sequence[Service], method: PaymentMethod,
              reference: Optional[str], attendant_id: str, attendant_name: str) -> "Transaction":
        """Snapshot the services and derive both amounts from them."""
        snapshots = [Service(id=s.id, name=s.name, price=s.price) for s in services]
        total = services_total(snapshots)
        return cls(
            id=new_transaction_id(),
            timestamp=utcnow(),
            license_plate=license_plate,
            services=snapshots,
            total_amount=total,
            payment=Payment(method=method, reference=reference, amount=total),
            attendant_id=attendant_id,
            attendant_name=attendant_name,
        )


class QueuedTransactionOut(BaseModel):
    queued_at: datetime
    transaction: Transaction


class SyncResultOut(BaseModel):
    delivered: int
    remaining: int
    status: str
