# =============================================================================
# GIGA WMS v1.0 - UTILS/CONVERSIONS
# =============================================================================
# Conversione dei valori letti dal database nei campi dei record
# =============================================================================

from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Optional


def as_int(value: Any, default: int = 0) -> int:
    """Intero, `default` per NULL o valori non numerici."""
    if value is None:
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def as_decimal(value: Any) -> Decimal:
    """Decimal, 0 per NULL."""
    if value is None:
        return Decimal('0')
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value))
    except InvalidOperation:
        return Decimal('0')


def as_text(value: Any) -> str:
    """Stringa, vuota per NULL."""
    return "" if value is None else str(value)


def as_date(value: Any) -> Optional[date]:
    """Data o None per NULL. I timestamp vengono ridotti alla data."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])
