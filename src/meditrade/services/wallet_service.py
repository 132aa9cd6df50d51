"""Wallet service: cash deposits and withdrawals with a transaction log."""
import logging
from collections.abc import Callable
from decimal import Decimal

from sqlalchemy.engine import Engine
from sqlmodel import col, select

from meditrade.core import ledger
from meditrade.core.ledger import AccountSnapshot
from meditrade.db.models import AccountHolding, WalletTransaction
from meditrade.db.sessions import get_session
from meditrade.services.repository import (AccountLocks, load_account,
                                           load_holdings)

logger = logging.getLogger(__name__)

RECENT_TRANSACTIONS = 10


class WalletService:
    """Deposits and withdrawals, serialized per account like trades."""

    def __init__(self, engine: Engine, locks: AccountLocks) -> None:
        self._engine = engine
        self._locks = locks

    def get_wallet(
        self, user_id: int
    ) -> tuple[Decimal, list[AccountHolding], list[WalletTransaction]]:
        """Balance, holdings and the most recent wallet transactions."""
        with get_session(self._engine) as session:
            account = load_account(session, user_id)
            holdings = load_holdings(session, account.id)
            stmt = (
                select(WalletTransaction)
                .where(WalletTransaction.user_id == user_id)
                .order_by(col(WalletTransaction.created_at).desc(),
                          col(WalletTransaction.id).desc())
                .limit(RECENT_TRANSACTIONS)
            )
            transactions = list(session.exec(stmt).all())
            return Decimal(account.balance), holdings, transactions

    def deposit(self, user_id: int, amount: Decimal) -> tuple[WalletTransaction, Decimal]:
        return self._move(user_id, amount, "deposit", ledger.deposit,
                          "Virtual wallet deposit")

    def withdraw(self, user_id: int, amount: Decimal) -> tuple[WalletTransaction, Decimal]:
        return self._move(user_id, amount, "withdraw", ledger.withdraw,
                          "Virtual wallet withdrawal")

    def _move(
        self,
        user_id: int,
        amount: Decimal,
        kind: str,
        apply: Callable[[AccountSnapshot, Decimal], AccountSnapshot],
        description: str,
    ) -> tuple[WalletTransaction, Decimal]:
        with self._locks.hold(user_id), get_session(self._engine) as session:
            account = load_account(session, user_id, for_update=True)
            updated = apply(account.snapshot([]), amount)
            account.balance = updated.balance
            session.add(account)
            transaction = WalletTransaction(
                user_id=user_id, type=kind, amount=amount, description=description
            )
            session.add(transaction)
        logger.info("Wallet %s: user=%s amount=%s balance=%s",
                    kind, user_id, amount, updated.balance)
        return transaction, updated.balance
