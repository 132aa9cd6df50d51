"""Price alert service: create, delete, list, and trigger alerts."""
import logging
from decimal import Decimal

from fastapi.concurrency import run_in_threadpool
from sqlalchemy.engine import Engine
from sqlmodel import col, func, select

from meditrade.core.alerts import (MAX_ACTIVE_ALERTS, parse_condition,
                                   should_trigger)
from meditrade.core.exceptions import (AlertLimitReached, DuplicateAlert,
                                       Forbidden, InvalidPrice, NotFound)
from meditrade.db.models import PriceAlert
from meditrade.db.sessions import get_session
from meditrade.providers import QuoteProviderABC
from meditrade.services.repository import load_account
from meditrade.utils import normalize_symbol, quantize, utcnow

logger = logging.getLogger(__name__)


class AlertService:
    def __init__(self, engine: Engine, quote_provider: QuoteProviderABC) -> None:
        self._engine = engine
        self._quotes = quote_provider

    def list_alerts(self, user_id: int, *, triggered_only: bool = False) -> list[PriceAlert]:
        """User's alerts, newest first (by trigger time when triggered_only)."""
        with get_session(self._engine) as session:
            load_account(session, user_id)
            stmt = select(PriceAlert).where(PriceAlert.user_id == user_id)
            if triggered_only:
                stmt = stmt.where(col(PriceAlert.is_triggered).is_(True)).order_by(
                    col(PriceAlert.triggered_at).desc()
                )
            else:
                stmt = stmt.order_by(col(PriceAlert.created_at).desc(), col(PriceAlert.id).desc())
            return list(session.exec(stmt).all())

    async def create(
        self,
        user_id: int,
        symbol: str,
        target_price: Decimal,
        condition: str,
        current_price: Decimal | None = None,
    ) -> PriceAlert:
        """Create an alert. current_price defaults to the live quote."""
        symbol = normalize_symbol(symbol)
        cond = parse_condition(condition)
        target_price = quantize(target_price)
        if target_price <= 0:
            raise InvalidPrice("Target price must be greater than 0")
        if current_price is None:
            try:
                current_price = (await self._quotes.get_quote(symbol)).price
            except ValueError as exc:
                raise NotFound(f"Asset '{symbol}' not found") from exc
        current_price = quantize(current_price)
        return await run_in_threadpool(
            self._insert, user_id, symbol, target_price, cond.value, current_price
        )

    def _insert(
        self,
        user_id: int,
        symbol: str,
        target_price: Decimal,
        condition: str,
        current_price: Decimal,
    ) -> PriceAlert:
        with get_session(self._engine) as session:
            load_account(session, user_id)
            active = (PriceAlert.user_id == user_id, col(PriceAlert.is_triggered).is_(False))
            duplicate = session.exec(
                select(PriceAlert).where(
                    *active, PriceAlert.symbol == symbol, PriceAlert.condition == condition
                )
            ).first()
            if duplicate is not None:
                raise DuplicateAlert(f"You already have a {condition} alert for {symbol}")
            count = session.exec(
                select(func.count()).select_from(PriceAlert).where(*active)
            ).one()
            if count >= MAX_ACTIVE_ALERTS:
                raise AlertLimitReached(
                    f"Maximum {MAX_ACTIVE_ALERTS} active alerts allowed. Delete some to add more."
                )
            alert = PriceAlert(
                user_id=user_id,
                symbol=symbol,
                target_price=target_price,
                condition=condition,
                price_at_creation=current_price,
            )
            session.add(alert)
        return alert

    def delete(self, user_id: int, alert_id: int) -> None:
        with get_session(self._engine) as session:
            alert = session.get(PriceAlert, alert_id)
            if alert is None:
                raise NotFound("Alert not found")
            if alert.user_id != user_id:
                raise Forbidden("Not authorized to delete this alert")
            session.delete(alert)

    async def check(
        self, prices: list[tuple[str, Decimal]] | None = None
    ) -> list[tuple[PriceAlert, Decimal]]:
        """Trigger every active alert whose condition holds at the given prices.

        Without explicit prices, every symbol with an active alert is checked
        at its live quote. Returns (alert, price that triggered it) pairs.
        """
        if prices is None:
            symbols = await run_in_threadpool(self._active_symbols)
            live = await self._quotes.get_prices(symbols)
            prices = list(live.items())
        return await run_in_threadpool(self._trigger, prices)

    def _active_symbols(self) -> list[str]:
        with get_session(self._engine) as session:
            stmt = (
                select(PriceAlert.symbol)
                .where(col(PriceAlert.is_triggered).is_(False))
                .distinct()
            )
            return list(session.exec(stmt).all())

    def _trigger(self, prices: list[tuple[str, Decimal]]) -> list[tuple[PriceAlert, Decimal]]:
        triggered: list[tuple[PriceAlert, Decimal]] = []
        with get_session(self._engine) as session:
            for symbol, price in prices:
                symbol = normalize_symbol(symbol)
                stmt = select(PriceAlert).where(
                    PriceAlert.symbol == symbol, col(PriceAlert.is_triggered).is_(False)
                )
                for alert in session.exec(stmt).all():
                    if not should_trigger(alert.condition, Decimal(alert.target_price), price):
                        continue
                    alert.is_triggered = True
                    alert.triggered_at = utcnow()
                    session.add(alert)
                    triggered.append((alert, price))
        for alert, price in triggered:
            logger.info("Alert %s triggered: %s %s %s (price %s)",
                        alert.id, alert.symbol, alert.condition, alert.target_price, price)
        return triggered
