"""Trade routes: buy, sell, history."""
from fastapi import APIRouter, Query, status
from fastapi.concurrency import run_in_threadpool

from meditrade.core.ledger import Side
from meditrade.deps import CurrentUser, TradingServiceDep
from meditrade.schemas import (TradeHistory, TradeOut, TradeRequest,
                               TradeResponse)

router = APIRouter(prefix="/trades", tags=["trades"])


async def _trade(
    service: TradingServiceDep, user_id: int, body: TradeRequest, side: Side
) -> TradeResponse:
    trade, balance = await service.trade(user_id, body.symbol, body.amount, side, body.price)
    return TradeResponse(trade=TradeOut.model_validate(trade), balance=balance)


@router.post("/buy", response_model=TradeResponse, status_code=status.HTTP_201_CREATED)
async def buy(body: TradeRequest, user_id: CurrentUser, service: TradingServiceDep) -> TradeResponse:
    """Buy `amount` units at `price` (or the live quote)."""
    return await _trade(service, user_id, body, Side.BUY)


@router.post("/sell", response_model=TradeResponse, status_code=status.HTTP_201_CREATED)
async def sell(body: TradeRequest, user_id: CurrentUser, service: TradingServiceDep) -> TradeResponse:
    """Sell `amount` units at `price` (or the live quote)."""
    return await _trade(service, user_id, body, Side.SELL)


@router.get("/history", response_model=TradeHistory)
async def history(
    user_id: CurrentUser,
    service: TradingServiceDep,
    limit: int | None = Query(default=None, ge=1, le=500, description="Max trades"),
) -> TradeHistory:
    """Caller's trades, newest first."""
    trades = await run_in_threadpool(service.history, user_id, limit)
    return TradeHistory(count=len(trades), data=[TradeOut.model_validate(t) for t in trades])
