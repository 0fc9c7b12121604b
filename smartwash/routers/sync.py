# smartwash/routers/sync.py
"""Offline queue inspection, user-initiated sync, and the manual offline switch."""

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from smartwash.context import AppContext
from smartwash.routers.deps import get_context, get_current_user
from smartwash.schemas.transaction import QueuedTransactionOut, SyncResultOut
from smartwash.utils.logger import get_logger

router = APIRouter(dependencies=[Depends(get_current_user)])
logger = get_logger(__name__)


class ConnectivityIn(BaseModel):
    force_offline: bool


@router.get("/sync/queue", response_model=list[QueuedTransactionOut], summary="Transactions waiting to sync")
def get_queue(ctx: AppContext = Depends(get_context)):
    return ctx.queue.entries()


@router.post("/sync", response_model=SyncResultOut, summary="Deliver queued transactions to the ledger")
async def sync_now(ctx: AppContext = Depends(get_context)):
    """
    Delivers oldest first. On failure the response is 502 with the delivered
    and remaining counts; delivered entries are not sent again.
    """
    delivered = await ctx.queue.drain(ctx.ledger)
    return SyncResultOut(delivered=delivered, remaining=len(ctx.queue), status="ok")


@router.get("/sync/status", summary="Connectivity and queue status")
def sync_status(ctx: AppContext = Depends(get_context)):
    return {
        "online": ctx.connectivity.is_online(),
        "force_offline": ctx.connectivity.forced_offline,
        "pending": len(ctx.queue),
        "is_syncing": ctx.queue.is_syncing,
    }


@router.post("/sync/connectivity", summary="Force offline mode on or off")
def set_connectivity(body: ConnectivityIn, ctx: AppContext = Depends(get_context)):
    ctx.connectivity.set_forced_offline(body.force_offline)
    return sync_status(ctx)
