"""Account persistence helpers shared by the trading and wallet services."""
import threading
from collections.abc import Iterator
from contextlib import contextmanager

from sqlmodel import Session, select

from meditrade.core.exceptions import NotFound
from meditrade.core.ledger import AccountSnapshot
from meditrade.db.models import Account, AccountHolding


class AccountLocks:
    """Per-account mutex registry.

    Balance-changing operations hold the account's lock for the whole
    read-compute-write cycle, so two concurrent requests for the same user
    cannot interleave and lose an update. Different accounts never contend.
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[int, threading.Lock] = {}

    def get(self, user_id: int) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(user_id)
            if lock is None:
                lock = self._locks[user_id] = threading.Lock()
            return lock

    @contextmanager
    def hold(self, user_id: int) -> Iterator[None]:
        with self.get(user_id):
            yield


def load_account(session: Session, user_id: int, *, for_update: bool = False) -> Account:
    """Load an account or raise NotFound. `for_update` takes a row lock where supported."""
    stmt = select(Account).where(Account.id == user_id)
    if for_update:
        stmt = stmt.with_for_update()
    account = session.exec(stmt).first()
    if account is None:
        raise NotFound(f"User {user_id} not found")
    return account


def load_holdings(session: Session, account_id: int) -> list[AccountHolding]:
    stmt = (
        select(AccountHolding)
        .where(AccountHolding.account_id == account_id)
        .order_by(AccountHolding.id)
    )
    return list(session.exec(stmt).all())


def apply_snapshot(
    session: Session,
    account: Account,
    rows: list[AccountHolding],
    snapshot: AccountSnapshot,
) -> list[AccountHolding]:
    """Write a computed snapshot back: balance, changed holdings, removed holdings."""
    account.balance = snapshot.balance
    session.add(account)
    by_symbol = {r.symbol: r for r in rows}
    kept: list[AccountHolding] = []
    for holding in snapshot.holdings:
        row = by_symbol.pop(holding.symbol, None)
        if row is None:
            row = AccountHolding(account_id=account.id, symbol=holding.symbol,
                                 quantity=holding.quantity, average_cost=holding.average_cost)
        else:
            row.quantity = holding.quantity
            row.average_cost = holding.average_cost
        session.add(row)
        kept.append(row)
    for stale in by_symbol.values():
        session.delete(stale)
    return kept
