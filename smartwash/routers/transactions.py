# smartwash/routers/transactions.py
"""Transaction Ledger: history, receipts, and delivery of transactions queued on other devices."""

from datetime import datetime

from fastapi import APIRouter, Depends, Query
from fastapi.responses import PlainTextResponse

from smartwash.context import AppContext
from smartwash.exceptions import NotFoundError
from smartwash.routers.deps import get_context, get_current_user
from smartwash.schemas.transaction import Transaction
from smartwash.services.receipt_service import format_receipt_text

router = APIRouter(dependencies=[Depends(get_current_user)])


@router.get("/transactions", response_model=list[Transaction], summary="Transactions, newest first")
def list_transactions(since: datetime = None, limit: int = Query(50, ge=1, le=500),
                      ctx: AppContext = Depends(get_context)):
    return ctx.ledger.list(since=since)[:limit]


@router.get("/transactions/{txn_id}", response_model=Transaction, summary="One transaction")
def get_transaction(txn_id: str, ctx: AppContext = Depends(get_context)):
    txn = ctx.ledger.get(txn_id)
    if not txn:
        raise NotFoundError(f"Transaction not found: {txn_id}")
    return txn


@router.get("/transactions/{txn_id}/receipt", response_class=PlainTextResponse, summary="Receipt text")
def get_receipt(txn_id: str, ctx: AppContext = Depends(get_context)):
    txn = ctx.ledger.get(txn_id)
    if not txn:
        raise NotFoundError(f"Transaction not found: {txn_id}")
    return format_receipt_text(txn, ctx.config.BUSINESS_NAME, ctx.config.CURRENCY_SYMBOL)


@router.post("/transactions", summary="Deliver a completed transaction (idempotent)")
def deliver_transaction(body: Transaction, ctx: AppContext = Depends(get_context)):
    """Used by devices draining their offline queue into this backing store."""
    created = ctx.ledger.add_transaction(body)
    return {"status": "recorded" if created else "duplicate", "id": body.id}
