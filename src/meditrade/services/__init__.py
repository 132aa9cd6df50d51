"""Application services: persistence, locking and provider access around the core."""
from meditrade.services.account_service import AccountService
from meditrade.services.achievement_service import AchievementService
from meditrade.services.alert_service import AlertService
from meditrade.services.leaderboard_service import LeaderboardService
from meditrade.services.market_service import MarketService
from meditrade.services.repository import AccountLocks
from meditrade.services.trading_service import TradingService
from meditrade.services.wallet_service import WalletService
from meditrade.services.watchlist_service import WatchlistService

__all__ = [
    "AccountLocks",
    "AccountService",
    "AchievementService",
    "AlertService",
    "LeaderboardService",
    "MarketService",
    "TradingService",
    "WalletService",
    "WatchlistService",
]
