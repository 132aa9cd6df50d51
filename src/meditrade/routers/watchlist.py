"""Watchlist routes."""
from fastapi import APIRouter
from fastapi.concurrency import run_in_threadpool

from meditrade.deps import CurrentUser, WatchlistServiceDep
from meditrade.schemas import (WatchlistReorder, WatchlistResponse,
                               WatchlistSymbol)
from meditrade.utils import normalize_symbol

router = APIRouter(prefix="/watchlist", tags=["watchlist"])


@router.get("", response_model=WatchlistResponse)
async def get_watchlist(user_id: CurrentUser, service: WatchlistServiceDep) -> WatchlistResponse:
    return WatchlistResponse(data=await run_in_threadpool(service.get, user_id))


@router.post("/add", response_model=WatchlistResponse)
async def add_symbol(
    body: WatchlistSymbol, user_id: CurrentUser, service: WatchlistServiceDep
) -> WatchlistResponse:
    symbols = await run_in_threadpool(service.add, user_id, body.symbol)
    return WatchlistResponse(
        data=symbols, message=f"{normalize_symbol(body.symbol)} added to watchlist"
    )


@router.post("/remove", response_model=WatchlistResponse)
async def remove_symbol(
    body: WatchlistSymbol, user_id: CurrentUser, service: WatchlistServiceDep
) -> WatchlistResponse:
    symbols = await run_in_threadpool(service.remove, user_id, body.symbol)
    return WatchlistResponse(
        data=symbols, message=f"{normalize_symbol(body.symbol)} removed from watchlist"
    )


@router.post("/toggle", response_model=WatchlistResponse)
async def toggle_symbol(
    body: WatchlistSymbol, user_id: CurrentUser, service: WatchlistServiceDep
) -> WatchlistResponse:
    symbols, action = await run_in_threadpool(service.toggle, user_id, body.symbol)
    symbol = normalize_symbol(body.symbol)
    return WatchlistResponse(
        data=symbols,
        action=action,
        message=f"{symbol} {'added to' if action == 'added' else 'removed from'} watchlist",
    )


@router.put("/reorder", response_model=WatchlistResponse)
async def reorder(
    body: WatchlistReorder, user_id: CurrentUser, service: WatchlistServiceDep
) -> WatchlistResponse:
    symbols = await run_in_threadpool(service.reorder, user_id, body.symbols)
    return WatchlistResponse(data=symbols, message="Watchlist reordered")
