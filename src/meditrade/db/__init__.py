"""Database package: models and session management."""
from meditrade.db.models import (Account, AccountHolding, AchievementUnlock,
                                 PriceAlert, Trade, WalletTransaction,
                                 Watchlist)

__all__ = [
    "Account",
    "AccountHolding",
    "AchievementUnlock",
    "PriceAlert",
    "Trade",
    "WalletTransaction",
    "Watchlist",
]
