"""Shared polling-based stream helper for quote providers."""
import asyncio
from collections.abc import AsyncIterator, Awaitable, Callable
from decimal import Decimal
from typing import Protocol

from meditrade.schemas import Quote


class PollingStreamable(Protocol):
    """Provider exposing a mutable streaming flag so polling can be stopped on close()."""

    streaming: bool


async def stream_by_polling(
    provider: PollingStreamable,
    symbols: list[str],
    poll_interval_seconds: float,
    fetch_quotes: Callable[[list[str]], Awaitable[list[Quote]]],
    *,
    dedup_by_price: bool = True,
    stop_event: asyncio.Event | None = None,
) -> AsyncIterator[Quote]:
    """Poll at interval, fetch quotes via fetch_quotes(symbols), yield with optional dedup.

    Uses stop_event when provided (per-stream, safe for concurrent clients). When
    stop_event is None, uses provider.streaming so close() can stop the loop.

    Args:
        provider: Object implementing PollingStreamable (streaming flag).
        symbols: List of symbols to poll.
        poll_interval_seconds: Seconds to sleep between poll rounds.
        fetch_quotes: Async callable(symbols) -> list[Quote].
        dedup_by_price: If True, skip yielding when the price is unchanged for a symbol.
        stop_event: When set, the loop exits.
    """
    if not symbols:
        return
    use_stop_event = stop_event is not None
    if not use_stop_event:
        provider.streaming = True
    last_prices: dict[str, Decimal] = {}
    try:
        while (use_stop_event and not stop_event.is_set()) or (
            not use_stop_event and provider.streaming
        ):
            quotes = await fetch_quotes(symbols)
            for q in quotes:
                if dedup_by_price and last_prices.get(q.symbol) == q.price:
                    continue
                last_prices[q.symbol] = q.price
                yield q
            await asyncio.sleep(poll_interval_seconds)
    finally:
        if not use_stop_event:
            provider.streaming = False
