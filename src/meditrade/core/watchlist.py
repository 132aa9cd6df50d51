"""Ordered watchlist operations over plain symbol lists."""
from collections.abc import Iterable

from meditrade.core.exceptions import (AlreadyInWatchlist, NotInWatchlist,
                                       ValidationError, WatchlistFull)
from meditrade.utils import normalize_symbol

MAX_WATCHLIST_SYMBOLS = 20


def _require(symbol: str) -> str:
    if not symbol or not symbol.strip():
        raise ValidationError("Please provide a symbol")
    return normalize_symbol(symbol)


def add(symbols: list[str], symbol: str) -> list[str]:
    symbol = _require(symbol)
    if symbol in symbols:
        raise AlreadyInWatchlist(f"{symbol} is already in your watchlist")
    if len(symbols) >= MAX_WATCHLIST_SYMBOLS:
        raise WatchlistFull(
            f"Watchlist limit reached ({MAX_WATCHLIST_SYMBOLS} items). Remove some to add more."
        )
    return [*symbols, symbol]


def remove(symbols: list[str], symbol: str) -> list[str]:
    symbol = _require(symbol)
    if symbol not in symbols:
        raise NotInWatchlist(f"{symbol} is not in your watchlist")
    return [s for s in symbols if s != symbol]


def toggle(symbols: list[str], symbol: str) -> tuple[list[str], str]:
    """Add if absent, remove if present. Returns (symbols, "added" | "removed")."""
    symbol = _require(symbol)
    if symbol in symbols:
        return remove(symbols, symbol), "removed"
    return add(symbols, symbol), "added"


def reorder(new_order: Iterable[str]) -> list[str]:
    """Normalize a caller-supplied order: upper-case, first occurrence wins."""
    result: list[str] = []
    for raw in new_order:
        symbol = _require(raw)
        if symbol not in result:
            result.append(symbol)
    if len(result) > MAX_WATCHLIST_SYMBOLS:
        raise WatchlistFull(f"Watchlist limit reached ({MAX_WATCHLIST_SYMBOLS} items)")
    return result
