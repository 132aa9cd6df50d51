"""FastAPI dependency injection: app.state holds singletons; Depends() resolves them.

No external DI container. Lifespan (main.py) creates the provider and services
once and attaches them to app.state; these getters are used by Depends().
"""
from typing import Annotated

from fastapi import Depends, Header, Request, WebSocket

from meditrade.core.exceptions import Unauthorized
from meditrade.services import (AccountService, AchievementService,
                                AlertService, LeaderboardService,
                                MarketService, TradingService, WalletService,
                                WatchlistService)


def get_market_service(request: Request) -> MarketService:
    return request.app.state.market_service


def get_market_service_ws(websocket: WebSocket) -> MarketService:
    """Resolve MarketService for WebSocket routes (no Request object there)."""
    return websocket.scope["app"].state.market_service


def get_account_service(request: Request) -> AccountService:
    return request.app.state.account_service


def get_trading_service(request: Request) -> TradingService:
    return request.app.state.trading_service


def get_wallet_service(request: Request) -> WalletService:
    return request.app.state.wallet_service


def get_achievement_service(request: Request) -> AchievementService:
    return request.app.state.achievement_service


def get_leaderboard_service(request: Request) -> LeaderboardService:
    return request.app.state.leaderboard_service


def get_alert_service(request: Request) -> AlertService:
    return request.app.state.alert_service


def get_watchlist_service(request: Request) -> WatchlistService:
    return request.app.state.watchlist_service


def get_current_user_id(
    x_user_id: Annotated[str | None, Header()] = None,
) -> int:
    """Caller identity from the X-User-Id header."""
    if not x_user_id:
        raise Unauthorized("X-User-Id header required")
    try:
        user_id = int(x_user_id)
    except ValueError as exc:
        raise Unauthorized("X-User-Id must be an integer") from exc
    if user_id < 1:
        raise Unauthorized("X-User-Id must be positive")
    return user_id


# Type aliases for route injection
MarketServiceDep = Annotated[MarketService, Depends(get_market_service)]
MarketServiceWs = Annotated[MarketService, Depends(get_market_service_ws)]
AccountServiceDep = Annotated[AccountService, Depends(get_account_service)]
TradingServiceDep = Annotated[TradingService, Depends(get_trading_service)]
WalletServiceDep = Annotated[WalletService, Depends(get_wallet_service)]
AchievementServiceDep = Annotated[AchievementService, Depends(get_achievement_service)]
LeaderboardServiceDep = Annotated[LeaderboardService, Depends(get_leaderboard_service)]
AlertServiceDep = Annotated[AlertService, Depends(get_alert_service)]
WatchlistServiceDep = Annotated[WatchlistService, Depends(get_watchlist_service)]
CurrentUser = Annotated[int, Depends(get_current_user_id)]
