"""API routers.

Includes routes for:
- /accounts - Registration and the caller's account
- /prices - Quotes from the configured provider, plus /prices/stream (WebSocket)
- /trades - Buy, sell and trade history
- /wallet - Cash deposits and withdrawals
- /achievements - Catalog, unlock checks and achievement leaders
- /leaderboard - Net-worth ranking
- /alerts - Price alerts
- /watchlist - Ordered symbol watchlist

Routes acting for a user read the caller id from the X-User-Id header.
"""
from meditrade.routers.accounts import router as accounts_router
from meditrade.routers.achievements import router as achievements_router
from meditrade.routers.alerts import router as alerts_router
from meditrade.routers.leaderboard import router as leaderboard_router
from meditrade.routers.prices import router as prices_router
from meditrade.routers.trades import router as trades_router
from meditrade.routers.wallet import router as wallet_router
from meditrade.routers.watchlist import router as watchlist_router

__all__ = [
    "accounts_router",
    "achievements_router",
    "alerts_router",
    "leaderboard_router",
    "prices_router",
    "trades_router",
    "wallet_router",
    "watchlist_router",
]
