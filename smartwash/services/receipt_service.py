# smartwash/services/receipt_service.py
"""Plain-text receipt used for the chat hand-off and the receipt endpoint."""

from decimal import Decimal

from smartwash.config import settings
from smartwash.schemas.transaction import Transaction


def format_currency(amount: Decimal, symbol: str = None) -> str:
    symbol = settings.CURRENCY_SYMBOL if symbol is None else symbol
    return f"{symbol}{Decimal(amount):,.2f}"


def format_receipt_text(txn: Transaction, business_name: str = None, currency: str = None) -> str:
    business_name = business_name or settings.BUSINESS_NAME
    lines = [
        f"*{business_name} Receipt*",
        "",
        f"Receipt ID: {txn.id}",
        f"Date: {txn.timestamp.strftime('%Y-%m-%d %H:%M')} UTC",
        f"Plate: {txn.license_plate}",
        "",
        "Services:",
    ]
    lines += [f"- {s.name}: {format_currency(s.price, currency)}" for s in txn.services]
    lines += [
        "",
        f"*Total: {format_currency(txn.total_amount, currency)}*",
        f"Paid via: {txn.payment.method.value}",
    ]
    if txn.payment.reference:
        lines.append(f"Reference: {txn.payment.reference}")
    lines += ["", f"Thank you for choosing {business_name}!"]
    return "\n".join(lines)
