# smartwash/services/dashboard_service.py
"""
Admin dashboard aggregates over the ledger.
Periods start at UTC midnight: today, 7 days back, or the same day last month.
"""

import calendar
from collections import Counter
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Optional

from smartwash.schemas.dashboard import DashboardOut, ServicePerformance, TimeFilter
from smartwash.schemas.transaction import PaymentMethod
from smartwash.stores.transaction_ledger import TransactionLedger
from smartwash.utils.clock import utcnow

RECENT_LIMIT = 5


def period_start(period: TimeFilter, now: Optional[datetime] = None) -> datetime:
    now = now or utcnow()
    today = now.replace(hour=0, minute=0, second=0, microsecond=0)
    if period == TimeFilter.WEEK:
        return today - timedelta(days=7)
    if period == TimeFilter.MONTH:
        year, month = (today.year, today.month - 1) if today.month > 1 else (today.year - 1, 12)
        day = min(today.day, calendar.monthrange(year, month)[1])
        return today.replace(year=year, month=month, day=day)
    return today


def build_dashboard(ledger: TransactionLedger, period: TimeFilter = TimeFilter.TODAY,
                    now: Optional[datetime] = None) -> DashboardOut:
    since = period_start(period, now)
    txns = ledger.list(since=since)

    by_method = {m: Decimal("0") for m in PaymentMethod}
    counts = Counter()
    for t in txns:
        by_method[t.payment.method] += t.total_amount
        for s in t.services:
            counts[s.name] += 1

    performance = sorted(counts.items(), key=lambda kv: (-kv[1], kv[0]))
    return DashboardOut(
        period=period,
        since=since,
        total_revenue=sum(by_method.values(), Decimal("0")),
        total_vehicles=len(txns),
        cash_total=by_method[PaymentMethod.CASH],
        mobile_money_total=by_method[PaymentMethod.MOBILE_MONEY],
        corporate_total=by_method[PaymentMethod.CORPORATE_ACCOUNT],
        service_performance=[ServicePerformance(name=n, count=c) for n, c in performance],
        recent_transactions=txns[:RECENT_LIMIT],
    )
