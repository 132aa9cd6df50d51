"""Leaderboard ranking by net worth at live quotes."""
import math
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from meditrade.core.exceptions import ValidationError
from meditrade.core.ledger import AccountSnapshot

QuoteSource = Callable[[str], Decimal | None]


@dataclass(frozen=True)
class Trader:
    """An account as seen by the leaderboard."""

    account: AccountSnapshot
    name: str
    role: str = "user"
    joined_at: datetime | None = None


@dataclass(frozen=True)
class LeaderboardEntry:
    user_id: int
    name: str
    total_value: Decimal
    profit_loss: Decimal
    profit_loss_percent: Decimal
    holdings_count: int
    joined_at: datetime | None
    rank: int


@dataclass(frozen=True)
class LeaderboardStats:
    total_traders: int
    total_volume: Decimal
    avg_profit: Decimal
    profitable_traders: int


@dataclass(frozen=True)
class Pagination:
    page: int
    limit: int
    total_pages: int
    total_traders: int


@dataclass(frozen=True)
class LeaderboardPage:
    entries: list[LeaderboardEntry]
    stats: LeaderboardStats
    pagination: Pagination


def net_worth(account: AccountSnapshot, quote_source: QuoteSource) -> Decimal:
    """Cash plus holdings marked to quote. Unknown symbols are worth 0."""
    value = account.balance
    for h in account.holdings:
        price = quote_source(h.symbol)
        if price is not None:
            value += h.quantity * price
    return value


def rank_all(
    traders: Iterable[Trader],
    quote_source: QuoteSource,
    starting_balance: Decimal,
) -> list[LeaderboardEntry]:
    """Rank every user-role trader; admins are excluded.

    Sorted by total value descending, ties by ascending user id, so equal
    values still get distinct consecutive ranks.
    """
    if starting_balance <= 0:
        raise ValidationError("starting_balance must be > 0")
    rows = []
    for t in traders:
        if t.role != "user":
            continue
        total = net_worth(t.account, quote_source)
        rows.append((t, total))
    rows.sort(key=lambda r: (-r[1], r[0].account.user_id))

    entries = []
    for index, (t, total) in enumerate(rows):
        profit_loss = total - starting_balance
        entries.append(
            LeaderboardEntry(
                user_id=t.account.user_id,
                name=t.name,
                total_value=total,
                profit_loss=profit_loss,
                profit_loss_percent=profit_loss / starting_balance * 100,
                holdings_count=len(t.account.holdings),
                joined_at=t.joined_at,
                rank=index + 1,
            )
        )
    return entries


def summarize(entries: list[LeaderboardEntry]) -> LeaderboardStats:
    count = len(entries)
    avg = (
        sum((e.profit_loss_percent for e in entries), Decimal(0)) / count
        if count
        else Decimal(0)
    )
    return LeaderboardStats(
        total_traders=count,
        total_volume=sum((e.total_value for e in entries), Decimal(0)),
        avg_profit=avg,
        profitable_traders=sum(1 for e in entries if e.profit_loss > 0),
    )


def rank(
    traders: Iterable[Trader],
    quote_source: QuoteSource,
    starting_balance: Decimal,
    page: int = 1,
    page_size: int = 10,
) -> LeaderboardPage:
    """Rank all traders and return one 1-based page plus stats over everyone.

    Pure and read-only; recomputed on every call.
    """
    if page < 1 or page_size < 1:
        raise ValidationError("page and page_size must be >= 1")
    entries = rank_all(traders, quote_source, starting_balance)
    skip = (page - 1) * page_size
    total = len(entries)
    return LeaderboardPage(
        entries=entries[skip:skip + page_size],
        stats=summarize(entries),
        pagination=Pagination(
            page=page,
            limit=page_size,
            total_pages=math.ceil(total / page_size),
            total_traders=total,
        ),
    )
