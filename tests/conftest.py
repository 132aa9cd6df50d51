"""
conftest.py - Shared pytest fixtures for MediTrade tests

Provides:
- An in-memory SQLite engine with all tables created
- A fixed-price mock quote provider
- Service instances wired to that engine
- A TestClient running the full app (lifespan included)
"""

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import create_engine

from meditrade.config import Settings
from meditrade.db.sessions import init_db
from meditrade.main import create_app
from meditrade.providers import MockQuoteProvider
from meditrade.services import (AccountLocks, AccountService,
                                AchievementService, AlertService,
                                LeaderboardService, TradingService,
                                WalletService, WatchlistService)

STARTING_BALANCE = Decimal("100000")


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def provider():
    """Mock provider with fixed seed prices (BTC 43250.75, ETH 2280.50, ...)."""
    return MockQuoteProvider(volatility=0)


@pytest.fixture
def settings():
    return Settings(database_url="sqlite://", starting_balance=STARTING_BALANCE)


@pytest.fixture
def locks():
    return AccountLocks()


@pytest.fixture
def accounts(engine):
    return AccountService(engine, STARTING_BALANCE)


@pytest.fixture
def trading(engine, provider, locks):
    return TradingService(engine, provider, locks)


@pytest.fixture
def wallet(engine, locks):
    return WalletService(engine, locks)


@pytest.fixture
def achievements(engine):
    return AchievementService(engine)


@pytest.fixture
def leaderboard(engine, provider):
    return LeaderboardService(engine, provider, STARTING_BALANCE)


@pytest.fixture
def alerts(engine, provider):
    return AlertService(engine, provider)


@pytest.fixture
def watchlists(engine):
    return WatchlistService(engine)


@pytest.fixture
def alice(accounts):
    return accounts.register("Alice", "alice@example.com")


@pytest.fixture
def bob(accounts):
    return accounts.register("Bob", "bob@example.com")


@pytest.fixture
def client(engine, provider, settings):
    app = create_app(engine=engine, quote_provider=provider, settings=settings)
    with TestClient(app) as test_client:
        yield test_client


def as_user(user_id: int) -> dict[str, str]:
    return {"X-User-Id": str(user_id)}
