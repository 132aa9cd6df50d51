"""Watchlist service: one ordered symbol list per user."""
from collections.abc import Callable

from sqlalchemy.engine import Engine
from sqlmodel import Session, select

from meditrade.core import watchlist
from meditrade.core.exceptions import NotFound
from meditrade.db.models import Watchlist
from meditrade.db.sessions import get_session
from meditrade.services.repository import load_account
from meditrade.utils import utcnow


class WatchlistService:
    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    @staticmethod
    def _find(session: Session, user_id: int) -> Watchlist | None:
        return session.exec(select(Watchlist).where(Watchlist.user_id == user_id)).first()

    def _get_or_create(self, session: Session, user_id: int) -> Watchlist:
        load_account(session, user_id)
        wl = self._find(session, user_id)
        if wl is None:
            wl = Watchlist(user_id=user_id, symbols=[])
            session.add(wl)
        return wl

    @staticmethod
    def _save(session: Session, wl: Watchlist, symbols: list[str]) -> list[str]:
        # New list object so the JSON column is flagged dirty.
        wl.symbols = list(symbols)
        wl.updated_at = utcnow()
        session.add(wl)
        return wl.symbols

    def get(self, user_id: int) -> list[str]:
        """Symbols in order; an empty watchlist is created on first read."""
        with get_session(self._engine) as session:
            return list(self._get_or_create(session, user_id).symbols)

    def add(self, user_id: int, symbol: str) -> list[str]:
        return self._update(user_id, lambda s: watchlist.add(s, symbol))

    def toggle(self, user_id: int, symbol: str) -> tuple[list[str], str]:
        with get_session(self._engine) as session:
            wl = self._get_or_create(session, user_id)
            symbols, action = watchlist.toggle(list(wl.symbols), symbol)
            return self._save(session, wl, symbols), action

    def remove(self, user_id: int, symbol: str) -> list[str]:
        return self._update(user_id, lambda s: watchlist.remove(s, symbol), create=False)

    def reorder(self, user_id: int, symbols: list[str]) -> list[str]:
        return self._update(user_id, lambda _: watchlist.reorder(symbols), create=False)

    def _update(
        self,
        user_id: int,
        change: Callable[[list[str]], list[str]],
        *,
        create: bool = True,
    ) -> list[str]:
        with get_session(self._engine) as session:
            if create:
                wl = self._get_or_create(session, user_id)
            else:
                load_account(session, user_id)
                wl = self._find(session, user_id)
                if wl is None:
                    raise NotFound("Watchlist not found")
            return self._save(session, wl, change(list(wl.symbols)))
