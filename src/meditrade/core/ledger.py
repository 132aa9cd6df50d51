"""Account ledger: trade execution and cash movements over immutable snapshots.

Functions here never touch storage. They take an AccountSnapshot and return a
new one (plus the trade record to append); TradingService and WalletService
persist the result atomically.
"""
from dataclasses import dataclass, field, replace
from datetime import datetime
from decimal import Decimal, InvalidOperation
from enum import Enum

from meditrade.core.exceptions import (InsufficientFunds,
                                       InsufficientHoldings, InvalidAmount,
                                       InvalidPrice, InvalidQuantity,
                                       ValidationError)
from meditrade.utils import normalize_symbol, quantize, utcnow


class Side(str, Enum):
    """Trade direction."""

    BUY = "buy"
    SELL = "sell"


@dataclass(frozen=True)
class Holding:
    """A position in one symbol. quantity is always > 0."""

    symbol: str
    quantity: Decimal
    average_cost: Decimal


@dataclass(frozen=True)
class AccountSnapshot:
    """Cash balance and holdings of one account at a point in time."""

    user_id: int
    balance: Decimal
    holdings: tuple[Holding, ...] = ()

    def holding(self, symbol: str) -> Holding | None:
        for h in self.holdings:
            if h.symbol == symbol:
                return h
        return None

    def with_holding(self, symbol: str, holding: Holding | None) -> tuple[Holding, ...]:
        """Holdings with `symbol` replaced by `holding` (or dropped when None)."""
        kept = tuple(h for h in self.holdings if h.symbol != symbol)
        if holding is None:
            return kept
        if self.holding(symbol) is None:
            return kept + (holding,)
        return tuple(holding if h.symbol == symbol else h for h in self.holdings)


@dataclass(frozen=True)
class TradeRecord:
    """Immutable log entry of one executed trade."""

    user_id: int
    symbol: str
    side: Side
    quantity: Decimal
    price: Decimal
    total: Decimal
    created_at: datetime = field(default_factory=utcnow)


@dataclass(frozen=True)
class TradeOutcome:
    """Result of a successful trade: the new account state and the record to append."""

    account: AccountSnapshot
    trade: TradeRecord

    @property
    def holding(self) -> Holding | None:
        """Position in the traded symbol after the trade; None when fully sold."""
        return self.account.holding(self.trade.symbol)


def _stored(value: Decimal, error: type[ValidationError], label: str) -> Decimal:
    """Return value unchanged if the NUMERIC(28, 8) columns can store it exactly."""
    try:
        stored = quantize(value)
    except InvalidOperation as exc:
        raise error(f"{label} is out of range, got {value}") from exc
    if stored != value:
        raise error(f"{label} supports at most 8 decimal places, got {value}")
    return stored


def _parse_side(side: Side | str) -> Side:
    try:
        return Side(side)
    except ValueError as exc:
        raise ValidationError(f"Invalid side '{side}'. Expected 'buy' or 'sell'") from exc


def execute_trade(
    account: AccountSnapshot,
    symbol: str,
    quantity: Decimal,
    side: Side | str,
    quote_price: Decimal,
) -> TradeOutcome:
    """Apply a buy or sell to an account snapshot.

    All-or-nothing: validation and business-rule failures raise before any new
    state is built, so the caller's snapshot is never half-applied.

    Args:
        account: Current account state.
        symbol: Asset symbol (normalized to upper case).
        quantity: Units to trade; must be > 0 with at most 8 decimal places.
        side: "buy" or "sell".
        quote_price: Price per unit at execution, rounded to 8 places; must be > 0.

    Returns:
        TradeOutcome with the updated snapshot and the trade record.

    Raises:
        InvalidQuantity, InvalidPrice, ValidationError: bad input.
        InsufficientFunds: buy total exceeds the balance.
        InsufficientHoldings: sell quantity exceeds the position.
    """
    side = _parse_side(side)
    if quantity <= 0:
        raise InvalidQuantity(f"Quantity must be greater than 0, got {quantity}")
    quantity = _stored(quantity, InvalidQuantity, "Quantity")
    # Quotes are rounded to the stored precision; a price that rounds to 0 is rejected.
    try:
        price = quantize(quote_price)
    except InvalidOperation as exc:
        raise InvalidPrice(f"Price is out of range, got {quote_price}") from exc
    if price <= 0:
        raise InvalidPrice(f"Price must be greater than 0, got {quote_price}")
    quote_price = price
    symbol = normalize_symbol(symbol)
    total = quantize(quantity * quote_price)
    existing = account.holding(symbol)

    if side is Side.BUY:
        if account.balance < total:
            raise InsufficientFunds(
                f"Insufficient balance: need {total}, have {account.balance}"
            )
        balance = account.balance - total
        if existing is None:
            position = Holding(symbol, quantity, quote_price)
        else:
            # Blend cost basis with the trade total, not the quote price.
            new_quantity = existing.quantity + quantity
            new_cost = quantize(
                (existing.quantity * existing.average_cost + total) / new_quantity
            )
            position = Holding(symbol, new_quantity, new_cost)
    else:
        if existing is None or existing.quantity < quantity:
            held = existing.quantity if existing else Decimal(0)
            raise InsufficientHoldings(
                f"Insufficient {symbol}: want to sell {quantity}, hold {held}"
            )
        balance = account.balance + total
        remaining = existing.quantity - quantity
        # A fully closed position is dropped; re-buying starts a fresh average.
        position = None if remaining == 0 else replace(existing, quantity=remaining)

    updated = AccountSnapshot(
        user_id=account.user_id,
        balance=balance,
        holdings=account.with_holding(symbol, position),
    )
    trade = TradeRecord(
        user_id=account.user_id,
        symbol=symbol,
        side=side,
        quantity=quantity,
        price=quote_price,
        total=total,
    )
    return TradeOutcome(account=updated, trade=trade)


def deposit(account: AccountSnapshot, amount: Decimal) -> AccountSnapshot:
    """Credit cash to the account."""
    if amount <= 0:
        raise InvalidAmount("Please provide a valid amount")
    amount = _stored(amount, InvalidAmount, "Amount")
    return replace(account, balance=account.balance + amount)


def withdraw(account: AccountSnapshot, amount: Decimal) -> AccountSnapshot:
    """Debit cash from the account; the balance never goes negative."""
    if amount <= 0:
        raise InvalidAmount("Please provide a valid amount")
    amount = _stored(amount, InvalidAmount, "Amount")
    if account.balance < amount:
        raise InsufficientFunds(
            f"Insufficient balance: need {amount}, have {account.balance}"
        )
    return replace(account, balance=account.balance - amount)
