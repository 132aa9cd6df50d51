"""Achievement routes."""
from fastapi import APIRouter, Query
from fastapi.concurrency import run_in_threadpool

from meditrade.deps import AchievementServiceDep, CurrentUser
from meditrade.schemas import (AchievementCheckResponse, AchievementLeader,
                               AchievementOut, AchievementsOverview)
from meditrade.services.achievement_service import describe

router = APIRouter(prefix="/achievements", tags=["achievements"])


@router.get("", response_model=AchievementsOverview)
async def get_achievements(
    user_id: CurrentUser, service: AchievementServiceDep
) -> AchievementsOverview:
    """Full catalog grouped by category, with the caller's unlocks."""
    return AchievementsOverview.model_validate(
        await run_in_threadpool(service.overview, user_id)
    )


@router.post("/check", response_model=AchievementCheckResponse)
async def check_achievements(
    user_id: CurrentUser, service: AchievementServiceDep
) -> AchievementCheckResponse:
    """Unlock whatever the caller now qualifies for; returns only new unlocks."""
    unlocked = await run_in_threadpool(service.check, user_id)
    new = [
        AchievementOut.model_validate(describe(d, unlocked=True, unlocked_at=at))
        for d, at in unlocked
    ]
    message = (
        f"Congratulations! You unlocked {len(new)} new achievement(s)!"
        if new
        else "No new achievements"
    )
    return AchievementCheckResponse(new_achievements=new, message=message)


@router.get("/recent", response_model=list[AchievementOut])
async def recent_achievements(
    user_id: CurrentUser,
    service: AchievementServiceDep,
    limit: int = Query(default=5, ge=1, le=50),
) -> list[AchievementOut]:
    rows = await run_in_threadpool(service.recent, user_id, limit)
    return [AchievementOut.model_validate(r) for r in rows]


@router.get("/leaderboard", response_model=list[AchievementLeader])
async def achievement_leaders(
    service: AchievementServiceDep,
    limit: int = Query(default=10, ge=1, le=100),
) -> list[AchievementLeader]:
    """Users with the most achievements unlocked."""
    rows = await run_in_threadpool(service.leaders, limit)
    return [AchievementLeader.model_validate(r) for r in rows]
