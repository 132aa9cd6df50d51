"""Database models for the trading platform.

Accounts, holdings and the append-only trade / wallet logs are persisted.
Quotes are never stored; they come from the quote provider on demand.
"""
from datetime import datetime
from decimal import Decimal

from sqlalchemy import JSON, Column, DateTime, UniqueConstraint
from sqlmodel import Field, SQLModel

from meditrade.core.ledger import AccountSnapshot, Holding, Side, TradeRecord
from meditrade.utils import utcnow

# NUMERIC(28, 8) for every money / quantity column
_MONEY = {"max_digits": 28, "decimal_places": 8}
# timezone-aware UTC for every timestamp column
_TIMESTAMP = {"sa_type": DateTime(timezone=True)}


class Account(SQLModel, table=True):
    """User account: identity, role and cash balance."""

    id: int | None = Field(default=None, primary_key=True)
    name: str
    email: str = Field(unique=True, index=True)
    role: str = Field(default="user")  # user | admin
    balance: Decimal = Field(default=Decimal(0), **_MONEY)
    created_at: datetime = Field(default_factory=utcnow, **_TIMESTAMP)

    def snapshot(self, holdings: list["AccountHolding"]) -> AccountSnapshot:
        return AccountSnapshot(
            user_id=self.id,
            balance=Decimal(self.balance),
            holdings=tuple(h.to_holding() for h in holdings),
        )


class AccountHolding(SQLModel, table=True):
    """Position in one symbol. Rows with zero quantity are deleted."""

    __tablename__ = "holding"
    __table_args__ = (UniqueConstraint("account_id", "symbol"),)

    id: int | None = Field(default=None, primary_key=True)
    account_id: int = Field(foreign_key="account.id", index=True)
    symbol: str
    quantity: Decimal = Field(**_MONEY)
    average_cost: Decimal = Field(**_MONEY)

    def to_holding(self) -> Holding:
        return Holding(self.symbol, Decimal(self.quantity), Decimal(self.average_cost))


class Trade(SQLModel, table=True):
    """Executed buy or sell. Never updated after insert."""

    id: int | None = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="account.id", index=True)
    symbol: str
    side: str  # buy | sell
    quantity: Decimal = Field(**_MONEY)
    price: Decimal = Field(**_MONEY)
    total: Decimal = Field(**_MONEY)
    created_at: datetime = Field(default_factory=utcnow, index=True, **_TIMESTAMP)

    @classmethod
    def from_record(cls, record: TradeRecord) -> "Trade":
        return cls(
            user_id=record.user_id,
            symbol=record.symbol,
            side=record.side.value,
            quantity=record.quantity,
            price=record.price,
            total=record.total,
            created_at=record.created_at,
        )

    def to_record(self) -> TradeRecord:
        return TradeRecord(
            user_id=self.user_id,
            symbol=self.symbol,
            side=Side(self.side),
            quantity=Decimal(self.quantity),
            price=Decimal(self.price),
            total=Decimal(self.total),
            created_at=self.created_at,
        )


class WalletTransaction(SQLModel, table=True):
    """Cash deposit or withdrawal."""

    __tablename__ = "wallet_transaction"

    id: int | None = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="account.id", index=True)
    type: str  # deposit | withdraw
    amount: Decimal = Field(**_MONEY)
    status: str = Field(default="completed")
    description: str | None = None
    created_at: datetime = Field(default_factory=utcnow, **_TIMESTAMP)


class AchievementUnlock(SQLModel, table=True):
    """One row per (user, achievement); the unique constraint makes unlocks idempotent."""

    __tablename__ = "achievement_unlock"
    __table_args__ = (UniqueConstraint("user_id", "achievement_id"),)

    id: int | None = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="account.id", index=True)
    achievement_id: str
    unlocked_at: datetime = Field(default_factory=utcnow, **_TIMESTAMP)


class PriceAlert(SQLModel, table=True):
    """One-shot alert when a symbol crosses a target price."""

    __tablename__ = "price_alert"

    id: int | None = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="account.id", index=True)
    symbol: str = Field(index=True)
    target_price: Decimal = Field(**_MONEY)
    condition: str  # above | below
    price_at_creation: Decimal = Field(**_MONEY)
    is_triggered: bool = Field(default=False)
    triggered_at: datetime | None = Field(default=None, **_TIMESTAMP)
    created_at: datetime = Field(default_factory=utcnow, **_TIMESTAMP)


class Watchlist(SQLModel, table=True):
    """Ordered list of symbols a user follows."""

    id: int | None = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="account.id", unique=True)
    symbols: list[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    updated_at: datetime = Field(default_factory=utcnow, **_TIMESTAMP)
