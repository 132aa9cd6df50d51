"""Leaderboard routes."""
from dataclasses import asdict

from fastapi import APIRouter, Query

from meditrade.deps import LeaderboardServiceDep
from meditrade.schemas import (LeaderboardEntryOut, LeaderboardResponse,
                               LeaderboardStatsOut, PaginationOut)

router = APIRouter(prefix="/leaderboard", tags=["leaderboard"])


@router.get("", response_model=LeaderboardResponse)
async def get_leaderboard(
    service: LeaderboardServiceDep,
    page: int = Query(default=1, ge=1, description="1-based page"),
    limit: int = Query(default=10, ge=1, le=100, description="Entries per page"),
) -> LeaderboardResponse:
    """Traders ranked by net worth at live quotes; stats cover everyone."""
    result = await service.page(page, limit)
    return LeaderboardResponse(
        data=[LeaderboardEntryOut.model_validate(asdict(e)) for e in result.entries],
        stats=LeaderboardStatsOut.model_validate(asdict(result.stats)),
        pagination=PaginationOut.model_validate(asdict(result.pagination)),
    )


@router.get("/top", response_model=list[LeaderboardEntryOut])
async def get_top(
    service: LeaderboardServiceDep,
    n: int = Query(default=3, ge=1, le=10),
) -> list[LeaderboardEntryOut]:
    """Podium: the top n traders."""
    return [LeaderboardEntryOut.model_validate(asdict(e)) for e in await service.top(n)]
