"""Leaderboard service: loads every account, prices holdings, ranks."""
from collections import defaultdict
from decimal import Decimal

from fastapi.concurrency import run_in_threadpool
from sqlalchemy.engine import Engine
from sqlmodel import select

from meditrade.core import leaderboard
from meditrade.core.leaderboard import LeaderboardEntry, LeaderboardPage, Trader
from meditrade.db.models import Account, AccountHolding
from meditrade.db.sessions import get_session
from meditrade.providers import QuoteProviderABC


class LeaderboardService:
    """Recomputes the ranking from current balances and live quotes on every call."""

    def __init__(
        self,
        engine: Engine,
        quote_provider: QuoteProviderABC,
        starting_balance: Decimal,
    ) -> None:
        self._engine = engine
        self._quotes = quote_provider
        self._starting_balance = starting_balance

    def load_traders(self) -> list[Trader]:
        with get_session(self._engine) as session:
            accounts = session.exec(select(Account)).all()
            holdings = session.exec(select(AccountHolding)).all()
        by_account: dict[int, list[AccountHolding]] = defaultdict(list)
        for h in holdings:
            by_account[h.account_id].append(h)
        return [
            Trader(
                account=a.snapshot(by_account.get(a.id, [])),
                name=a.name,
                role=a.role,
                joined_at=a.created_at,
            )
            for a in accounts
        ]

    async def _traders_and_prices(self) -> tuple[list[Trader], dict[str, Decimal]]:
        traders = await run_in_threadpool(self.load_traders)
        symbols = sorted({h.symbol for t in traders for h in t.account.holdings})
        return traders, await self._quotes.get_prices(symbols)

    async def page(self, page: int = 1, limit: int = 10) -> LeaderboardPage:
        traders, prices = await self._traders_and_prices()
        return leaderboard.rank(traders, prices.get, self._starting_balance, page, limit)

    async def top(self, n: int = 3) -> list[LeaderboardEntry]:
        traders, prices = await self._traders_and_prices()
        return leaderboard.rank_all(traders, prices.get, self._starting_balance)[:n]
