"""Trading service: price resolution, atomic trade execution, trade history."""
import logging
from decimal import Decimal

from fastapi.concurrency import run_in_threadpool
from sqlalchemy.engine import Engine
from sqlmodel import col, select

from meditrade.core.exceptions import BusinessRuleViolation, NotFound
from meditrade.core.ledger import Side, execute_trade
from meditrade.db.models import Trade
from meditrade.db.sessions import get_session
from meditrade.providers import QuoteProviderABC
from meditrade.services.repository import (AccountLocks, apply_snapshot,
                                           load_account, load_holdings)
from meditrade.utils import normalize_symbol

logger = logging.getLogger(__name__)


class TradingService:
    """Executes buys and sells against the account ledger.

    Each trade runs under the account's lock and inside a single database
    transaction: the balance update, the holding change and the trade record
    commit together or not at all.
    """

    def __init__(
        self,
        engine: Engine,
        quote_provider: QuoteProviderABC,
        locks: AccountLocks,
    ) -> None:
        self._engine = engine
        self._quotes = quote_provider
        self._locks = locks

    async def _resolve_price(self, symbol: str, price: Decimal | None) -> Decimal:
        if price is not None:
            return price
        try:
            quote = await self._quotes.get_quote(symbol)
        except ValueError as exc:
            raise NotFound(f"Asset '{symbol}' not found") from exc
        return quote.price

    async def buy(
        self, user_id: int, symbol: str, quantity: Decimal, price: Decimal | None = None
    ) -> tuple[Trade, Decimal]:
        """Buy `quantity` of `symbol`. Returns (trade, new balance)."""
        return await self.trade(user_id, symbol, quantity, Side.BUY, price)

    async def sell(
        self, user_id: int, symbol: str, quantity: Decimal, price: Decimal | None = None
    ) -> tuple[Trade, Decimal]:
        """Sell `quantity` of `symbol`. Returns (trade, new balance)."""
        return await self.trade(user_id, symbol, quantity, Side.SELL, price)

    async def trade(
        self,
        user_id: int,
        symbol: str,
        quantity: Decimal,
        side: Side | str,
        price: Decimal | None = None,
    ) -> tuple[Trade, Decimal]:
        """Resolve the quote (caller price wins) and execute in the threadpool."""
        symbol = normalize_symbol(symbol)
        quote_price = await self._resolve_price(symbol, price)
        return await run_in_threadpool(
            self.execute, user_id, symbol, quantity, side, quote_price
        )

    def execute(
        self,
        user_id: int,
        symbol: str,
        quantity: Decimal,
        side: Side | str,
        quote_price: Decimal,
    ) -> tuple[Trade, Decimal]:
        """Apply one trade atomically. Blocking; call from a worker thread."""
        with self._locks.hold(user_id):
            try:
                with get_session(self._engine) as session:
                    account = load_account(session, user_id, for_update=True)
                    rows = load_holdings(session, account.id)
                    outcome = execute_trade(
                        account.snapshot(rows), symbol, quantity, side, quote_price
                    )
                    apply_snapshot(session, account, rows, outcome.account)
                    trade = Trade.from_record(outcome.trade)
                    session.add(trade)
            except BusinessRuleViolation as exc:
                logger.info("Trade rejected for user %s: %s", user_id, exc.message)
                raise
        logger.info(
            "Trade %s: user=%s %s %s %s @ %s total=%s",
            trade.id, user_id, trade.side, trade.quantity, trade.symbol,
            trade.price, trade.total,
        )
        return trade, outcome.account.balance

    def history(self, user_id: int, limit: int | None = None) -> list[Trade]:
        """Trades for a user, newest first."""
        with get_session(self._engine) as session:
            load_account(session, user_id)
            stmt = (
                select(Trade)
                .where(Trade.user_id == user_id)
                .order_by(col(Trade.created_at).desc(), col(Trade.id).desc())
            )
            if limit is not None:
                stmt = stmt.limit(limit)
            return list(session.exec(stmt).all())
