"""Shared utilities for money handling and timestamps."""
from datetime import datetime, timezone
from decimal import ROUND_HALF_EVEN, Decimal

MONEY_PLACES = 8
_QUANTUM = Decimal(1).scaleb(-MONEY_PLACES)


def to_decimal(value: Decimal | int | float | str) -> Decimal:
    """Convert a number to Decimal; floats go through str() to avoid binary noise."""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    return Decimal(value)


def quantize(value: Decimal) -> Decimal:
    """Round to the stored precision (8 places, banker's rounding)."""
    return value.quantize(_QUANTUM, rounding=ROUND_HALF_EVEN)


def round_price(value: Decimal) -> Decimal:
    """Round a display price: 2 places at or above 1, 4 places below."""
    places = Decimal("0.01") if value >= 1 else Decimal("0.0001")
    return value.quantize(places, rounding=ROUND_HALF_EVEN)


def utcnow() -> datetime:
    """Timezone-aware UTC now; timestamp columns are DateTime(timezone=True)."""
    return datetime.now(timezone.utc)


def normalize_symbol(symbol: str) -> str:
    """Normalize an asset symbol (trimmed, upper-case)."""
    return symbol.strip().upper()
