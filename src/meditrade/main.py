"""Main module for the MediTrade paper-trading service."""
import logging
import subprocess
import sys
from contextlib import asynccontextmanager
from pathlib import Path

import httpx
import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy.engine import Engine

from meditrade.config import Settings, get_settings
from meditrade.core.error_mapper import ErrorMapper
from meditrade.core.exceptions import MediTradeError
from meditrade.db.sessions import get_engine, init_db
from meditrade.providers import QuoteProviderABC, create_quote_provider
from meditrade.routers import (accounts_router, achievements_router,
                               alerts_router, leaderboard_router,
                               prices_router, trades_router, wallet_router,
                               watchlist_router)
from meditrade.services import (AccountLocks, AccountService,
                                AchievementService, AlertService,
                                LeaderboardService, MarketService,
                                TradingService, WalletService,
                                WatchlistService)

logger = logging.getLogger(__name__)


def create_app(
    *,
    engine: Engine | None = None,
    quote_provider: QuoteProviderABC | None = None,
    settings: Settings | None = None,
) -> FastAPI:
    """Build the application. Tests pass their own engine and provider."""
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(fastapi_app: FastAPI):
        """Create tables, provider and services at startup; close the provider on shutdown."""
        db_engine = engine if engine is not None else get_engine()
        init_db(db_engine)
        provider = quote_provider or create_quote_provider(settings)
        locks = AccountLocks()

        fastapi_app.state.settings = settings
        fastapi_app.state.market_service = MarketService(
            provider, ErrorMapper(resource_name="Asset", api_name=provider.name)
        )
        fastapi_app.state.account_service = AccountService(
            db_engine, settings.starting_balance
        )
        fastapi_app.state.trading_service = TradingService(db_engine, provider, locks)
        fastapi_app.state.wallet_service = WalletService(db_engine, locks)
        fastapi_app.state.achievement_service = AchievementService(db_engine)
        fastapi_app.state.leaderboard_service = LeaderboardService(
            db_engine, provider, settings.starting_balance
        )
        fastapi_app.state.alert_service = AlertService(db_engine, provider)
        fastapi_app.state.watchlist_service = WatchlistService(db_engine)
        logger.info("MediTrade started with %s", provider.name)

        yield

        try:
            await provider.close()
        except Exception as exc:  # pylint: disable=broad-except
            logger.warning("Error closing provider %s: %s", provider.name, exc)

    fastapi_app = FastAPI(
        title="MediTrade",
        description="Paper-trading API: virtual balances, trades, leaderboard, achievements",
        version="0.1.0",
        lifespan=lifespan,
    )
    error_mapper = ErrorMapper(resource_name="Asset", api_name="Quote provider")

    @fastapi_app.exception_handler(MediTradeError)
    async def handle_domain_error(request: Request, exc: MediTradeError) -> JSONResponse:
        status_code, detail = error_mapper.to_http(exc)
        return JSONResponse(status_code=status_code, content={"detail": detail})

    @fastapi_app.exception_handler(httpx.HTTPError)
    async def handle_upstream_error(request: Request, exc: httpx.HTTPError) -> JSONResponse:
        logger.warning("Quote provider request failed: %s", exc)
        status_code, detail = error_mapper.to_http(exc)
        if status_code == 500:
            status_code, detail = 502, {"kind": "UpstreamError", "message": "Quote provider error"}
        return JSONResponse(status_code=status_code, content={"detail": detail})

    @fastapi_app.get("/")
    def health():
        """Return health check status."""
        return {"status": "ok"}

    fastapi_app.include_router(accounts_router)
    fastapi_app.include_router(prices_router)
    fastapi_app.include_router(trades_router)
    fastapi_app.include_router(wallet_router)
    fastapi_app.include_router(achievements_router)
    fastapi_app.include_router(leaderboard_router)
    fastapi_app.include_router(alerts_router)
    fastapi_app.include_router(watchlist_router)
    return fastapi_app


app = create_app()


def run():
    """Run the server (uvicorn). Use for `poetry run start`."""
    logging.basicConfig(level=logging.INFO)
    uvicorn.run("meditrade.main:app", host="127.0.0.1", port=8001)


def run_dev():
    """Run the development server with Postgres running via Docker."""
    project_root = Path(__file__).resolve().parent.parent.parent
    try:
        subprocess.run(
            ["docker", "compose", "up", "-d", "postgres"],
            cwd=project_root,
            capture_output=True,
            text=True,
            check=True,
        )
    except subprocess.CalledProcessError as e:
        print("Failed to start Postgres:", e.stderr or e.stdout, file=sys.stderr)
        sys.exit(1)
    logging.basicConfig(level=logging.DEBUG)
    uvicorn.run("meditrade.main:app", host="0.0.0.0", port=8000, reload=True)
