# smartwash/schemas/dashboard.py
from datetime import datetime
from decimal import Decimal
from enum import Enum

from pydantic import BaseModel

from smartwash.schemas.transaction import Transaction


class TimeFilter(str, Enum):
    TODAY = "today"
    WEEK = "week"
    MONTH = "month"


class ServicePerformance(BaseModel):
    name: str
    count: int


class DashboardOut(BaseModel):
    period: TimeFilter
    since: datetime
    total_revenue: Decimal
    total_vehicles: int
    cash_total: Decimal
    mobile_money_total: Decimal
    corporate_total: Decimal
    service_performance: list[ServicePerformance]
    recent_transactions: list[Transaction]
