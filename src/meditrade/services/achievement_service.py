"""Achievement service: evaluation, idempotent unlocks, listings."""
import logging
from collections.abc import Sequence
from datetime import datetime

from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session, col, func, select

from meditrade.core import achievements
from meditrade.core.achievements import ACHIEVEMENTS, AchievementDefinition
from meditrade.core.exceptions import PersistenceError
from meditrade.db.models import Account, AchievementUnlock, Trade
from meditrade.db.sessions import get_session
from meditrade.services.repository import load_account, load_holdings

logger = logging.getLogger(__name__)


class AchievementService:
    """Evaluates the catalog for a user and records new unlocks.

    The catalog is injected so tests and deployments can use their own.
    """

    def __init__(
        self,
        engine: Engine,
        catalog: Sequence[AchievementDefinition] = ACHIEVEMENTS,
    ) -> None:
        self._engine = engine
        self._catalog = tuple(catalog)

    @property
    def catalog(self) -> tuple[AchievementDefinition, ...]:
        return self._catalog

    def _unlocks(self, session: Session, user_id: int) -> list[AchievementUnlock]:
        stmt = select(AchievementUnlock).where(AchievementUnlock.user_id == user_id)
        return list(session.exec(stmt).all())

    def check(self, user_id: int) -> list[tuple[AchievementDefinition, datetime]]:
        """Unlock every achievement the user now qualifies for.

        Returns only the newly unlocked ones with their timestamps; a second
        call with unchanged state returns an empty list.
        """
        with get_session(self._engine) as session:
            account = load_account(session, user_id)
            snapshot = account.snapshot(load_holdings(session, account.id))
            trades = session.exec(select(Trade).where(Trade.user_id == user_id)).all()
            stats = achievements.compute_stats(snapshot, (t.to_record() for t in trades))
            existing = [u.achievement_id for u in self._unlocks(session, user_id)]

        unlocked: list[tuple[AchievementDefinition, datetime]] = []
        for definition in achievements.evaluate(stats, existing, self._catalog):
            record = self.unlock(user_id, definition.id)
            if record is not None:
                unlocked.append((definition, record.unlocked_at))
        return unlocked

    def unlock(self, user_id: int, achievement_id: str) -> AchievementUnlock | None:
        """Insert one unlock in its own transaction.

        Returns None when the pair already exists: the unique constraint
        rejects the insert and that is treated as "already unlocked". Other
        storage errors are raised as PersistenceError.
        """
        session = Session(self._engine, expire_on_commit=False)
        try:
            record = AchievementUnlock(user_id=user_id, achievement_id=achievement_id)
            session.add(record)
            session.commit()
        except IntegrityError:
            session.rollback()
            logger.debug("Achievement %s already unlocked for user %s", achievement_id, user_id)
            return None
        except SQLAlchemyError as exc:
            session.rollback()
            logger.exception("Achievement unlock failed: user=%s id=%s", user_id, achievement_id)
            raise PersistenceError("Storage failure; the operation was not applied") from exc
        finally:
            session.close()
        logger.info("Achievement unlocked: user=%s id=%s", user_id, achievement_id)
        return record

    def overview(self, user_id: int) -> dict:
        """Whole catalog grouped by category, with unlock flags and completion stats."""
        with get_session(self._engine) as session:
            load_account(session, user_id)
            unlocked_at = {u.achievement_id: u.unlocked_at for u in self._unlocks(session, user_id)}

        grouped: dict[str, list[dict]] = {c: [] for c in achievements.CATEGORIES}
        for a in self._catalog:
            grouped.setdefault(a.category, []).append(
                describe(a, unlocked=a.id in unlocked_at, unlocked_at=unlocked_at.get(a.id))
            )
        total = len(self._catalog)
        count = sum(1 for a in self._catalog if a.id in unlocked_at)
        return {
            "stats": {
                "total": total,
                "unlocked": count,
                "percentage": round(count / total * 100) if total else 0,
            },
            "achievements": grouped,
        }

    def recent(self, user_id: int, limit: int = 5) -> list[dict]:
        """Most recently unlocked achievements, newest first."""
        with get_session(self._engine) as session:
            load_account(session, user_id)
            stmt = (
                select(AchievementUnlock)
                .where(AchievementUnlock.user_id == user_id)
                .order_by(col(AchievementUnlock.unlocked_at).desc(),
                          col(AchievementUnlock.id).desc())
                .limit(limit)
            )
            rows = list(session.exec(stmt).all())
        result = []
        for row in rows:
            definition = achievements.find(row.achievement_id, self._catalog)
            if definition is not None:
                result.append(describe(definition, unlocked=True, unlocked_at=row.unlocked_at))
        return result

    def leaders(self, limit: int = 10) -> list[dict]:
        """Users with the most unlocks, with completion percentage of the catalog."""
        unlock_count = func.count(col(AchievementUnlock.id)).label("count")
        stmt = (
            select(Account.id, Account.name, unlock_count)
            .join(AchievementUnlock, col(AchievementUnlock.user_id) == col(Account.id))
            .group_by(col(Account.id), col(Account.name))
            .order_by(unlock_count.desc(), col(Account.id))
            .limit(limit)
        )
        with get_session(self._engine) as session:
            rows = session.exec(stmt).all()
        total = len(self._catalog) or 1
        return [
            {
                "user_id": user_id,
                "name": name,
                "count": count,
                "percentage": count / total * 100,
            }
            for user_id, name, count in rows
        ]


def describe(
    definition: AchievementDefinition,
    *,
    unlocked: bool,
    unlocked_at: datetime | None,
) -> dict:
    return {
        "id": definition.id,
        "name": definition.name,
        "description": definition.description,
        "icon": definition.icon,
        "category": definition.category,
        "rarity": definition.rarity,
        "unlocked": unlocked,
        "unlocked_at": unlocked_at,
    }
