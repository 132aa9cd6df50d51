"""Database engine and session management."""
import logging
from collections.abc import Generator
from contextlib import contextmanager
from functools import lru_cache

from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, SQLModel, create_engine

from meditrade.config import get_settings
from meditrade.core.exceptions import PersistenceError
from meditrade.db.models import (  # noqa: F401  # pylint: disable=unused-import
    Account, AccountHolding, AchievementUnlock, PriceAlert, Trade,
    WalletTransaction, Watchlist)

logger = logging.getLogger(__name__)


def create_db_engine(url: str, *, echo: bool = False) -> Engine:
    """Create a synchronous engine; pool sizing only applies to server databases."""
    if url.startswith("sqlite"):
        return create_engine(url, echo=echo, connect_args={"check_same_thread": False})
    return create_engine(
        url,
        echo=echo,
        pool_pre_ping=True,
        pool_size=5,
        max_overflow=10,
    )


@lru_cache
def get_engine() -> Engine:
    """Process-wide engine for DATABASE_URL, created on first use."""
    settings = get_settings()
    return create_db_engine(settings.database_url, echo=settings.sql_echo)


@contextmanager
def get_session(engine: Engine | None = None) -> Generator[Session, None, None]:
    """Yield a session inside one transaction; commit on success, roll back on error.

    Storage errors are re-raised as PersistenceError. Callers must not retry them.
    """
    session = Session(engine or get_engine(), expire_on_commit=False)
    try:
        yield session
        session.commit()
    except SQLAlchemyError as exc:
        session.rollback()
        logger.exception("Database transaction failed")
        raise PersistenceError("Storage failure; the operation was not applied") from exc
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def init_db(engine: Engine | None = None) -> None:
    """Create all tables. Safe to call on startup (idempotent for existing tables)."""
    SQLModel.metadata.create_all(engine or get_engine())
