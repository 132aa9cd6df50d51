"""Pydantic schemas for API requests and responses. Not persisted to DB."""
from datetime import datetime
from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from meditrade.utils import utcnow


class Quote(BaseModel):
    """Current price of one asset from the configured quote provider."""

    symbol: str
    name: str | None = None
    price: Decimal
    change_24h: float | None = None
    volume_24h: float | None = None
    market_cap: float | None = None
    source: str = "mock"  # mock | coingecko
    timestamp: datetime = Field(default_factory=utcnow)


# ---- Accounts ----
class AccountCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    email: str = Field(min_length=3, max_length=254)
    role: Literal["user", "admin"] = "user"


class HoldingOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    symbol: str
    quantity: Decimal
    average_cost: Decimal


class AccountOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str
    role: str
    balance: Decimal
    created_at: datetime
    holdings: list[HoldingOut] = []


# ---- Trades ----
class TradeRequest(BaseModel):
    """Buy/sell payload. `amount` is the quantity; `price` defaults to the live quote."""

    symbol: str = Field(min_length=1, max_length=20)
    amount: Decimal
    price: Decimal | None = None


class TradeOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int | None = None
    user_id: int
    symbol: str
    side: str
    quantity: Decimal
    price: Decimal
    total: Decimal
    created_at: datetime


class TradeResponse(BaseModel):
    trade: TradeOut
    balance: Decimal


class TradeHistory(BaseModel):
    count: int
    data: list[TradeOut]


# ---- Wallet ----
class AmountRequest(BaseModel):
    amount: Decimal


class TransactionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    type: str
    amount: Decimal
    status: str
    description: str | None = None
    created_at: datetime


class TransactionResponse(BaseModel):
    transaction: TransactionOut
    balance: Decimal


class WalletOut(BaseModel):
    balance: Decimal
    holdings: list[HoldingOut]
    recent_transactions: list[TransactionOut]


# ---- Achievements ----
class AchievementOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    description: str
    icon: str
    category: str
    rarity: str
    unlocked: bool = False
    unlocked_at: datetime | None = None


class AchievementStats(BaseModel):
    total: int
    unlocked: int
    percentage: int


class AchievementsOverview(BaseModel):
    stats: AchievementStats
    achievements: dict[str, list[AchievementOut]]


class AchievementCheckResponse(BaseModel):
    new_achievements: list[AchievementOut]
    message: str


class AchievementLeader(BaseModel):
    user_id: int
    name: str
    count: int
    percentage: float


# ---- Leaderboard ----
class LeaderboardEntryOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    rank: int
    user_id: int
    name: str
    total_value: Decimal
    profit_loss: Decimal
    profit_loss_percent: Decimal
    holdings_count: int
    joined_at: datetime | None = None


class LeaderboardStatsOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    total_traders: int
    total_volume: Decimal
    avg_profit: Decimal
    profitable_traders: int


class PaginationOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    page: int
    limit: int
    total_pages: int
    total_traders: int


class LeaderboardResponse(BaseModel):
    data: list[LeaderboardEntryOut]
    stats: LeaderboardStatsOut
    pagination: PaginationOut


# ---- Alerts ----
class AlertCreate(BaseModel):
    symbol: str = Field(min_length=1, max_length=20)
    target_price: Decimal
    condition: str
    current_price: Decimal | None = None


class AlertOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    symbol: str
    target_price: Decimal
    condition: str
    price_at_creation: Decimal
    is_triggered: bool
    triggered_at: datetime | None = None
    created_at: datetime


class PricePoint(BaseModel):
    symbol: str
    price: Decimal


class AlertCheckRequest(BaseModel):
    """Prices to check against; when omitted, live quotes are used."""

    prices: list[PricePoint] | None = None


class TriggeredAlert(AlertOut):
    user_id: int
    current_price: Decimal


class AlertCheckResponse(BaseModel):
    triggered_count: int
    data: list[TriggeredAlert]


# ---- Watchlist ----
class WatchlistSymbol(BaseModel):
    symbol: str


class WatchlistReorder(BaseModel):
    symbols: list[str]


class WatchlistResponse(BaseModel):
    data: list[str]
    message: str | None = None
    action: Literal["added", "removed"] | None = None


__all__ = [
    "AccountCreate",
    "AccountOut",
    "AchievementCheckResponse",
    "AchievementLeader",
    "AchievementOut",
    "AchievementsOverview",
    "AchievementStats",
    "AlertCheckRequest",
    "AlertCheckResponse",
    "AlertCreate",
    "AlertOut",
    "AmountRequest",
    "HoldingOut",
    "LeaderboardEntryOut",
    "LeaderboardResponse",
    "LeaderboardStatsOut",
    "PaginationOut",
    "PricePoint",
    "Quote",
    "TradeHistory",
    "TradeOut",
    "TradeRequest",
    "TradeResponse",
    "TransactionOut",
    "TransactionResponse",
    "TriggeredAlert",
    "WalletOut",
    "WatchlistReorder",
    "WatchlistResponse",
    "WatchlistSymbol",
]
