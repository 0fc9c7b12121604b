# smartwash/routers/health.py
"""
System health check endpoint.
Returns status of backend + backing store + offline queue.
"""

from fastapi import APIRouter, Depends

from smartwash.context import AppContext
from smartwash.routers.deps import get_context
from smartwash.utils.clock import utcnow

router = APIRouter()


@router.get("/health", summary="System health check")
def health_check(ctx: AppContext = Depends(get_context)):
    """
    Returns:
    - Backend status
    - Backing-store reachability (degraded when offline)
    - Offline queue depth
    """
    online = ctx.connectivity.is_online()
    return {
        "status": "ok" if online else "degraded",
        "timestamp": utcnow().isoformat(),
        "backend": "ok",
        "database": "ok" if online else "offline",
        "offline_queue": len(ctx.queue),
        "is_syncing": ctx.queue.is_syncing,
    }
