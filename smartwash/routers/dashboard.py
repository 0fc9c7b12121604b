# smartwash/routers/dashboard.py
"""Admin dashboard: revenue, payment split and service popularity for a period."""

from fastapi import APIRouter, Depends

from smartwash.context import AppContext
from smartwash.routers.deps import get_context, require_admin
from smartwash.schemas.dashboard import DashboardOut, TimeFilter
from smartwash.services.dashboard_service import build_dashboard

router = APIRouter(dependencies=[Depends(require_admin)])


@router.get("/dashboard", response_model=DashboardOut, summary="Aggregates for today, this week or this month")
def get_dashboard(period: TimeFilter = TimeFilter.TODAY, ctx: AppContext = Depends(get_context)):
    return build_dashboard(ctx.ledger, period)
