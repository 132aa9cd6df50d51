"""Price routes backed by the configured quote provider.

Quote/overview logic lives in MarketService; this router only calls the
service and returns responses.
"""
from fastapi import APIRouter, WebSocket

from meditrade.deps import MarketServiceDep, MarketServiceWs
from meditrade.schemas import Quote

router = APIRouter(prefix="/prices", tags=["prices"])


@router.get("", response_model=list[Quote])
async def get_prices(service: MarketServiceDep) -> list[Quote]:
    """Current quotes for every listed asset."""
    return await service.get_overview_quotes()


@router.websocket("/stream")
async def stream_prices(websocket: WebSocket, service: MarketServiceWs) -> None:
    """Stream quotes over WebSocket.

    Pass symbols as query param: /prices/stream?symbols=BTC,ETH
    Each message is a Quote JSON; only price changes are sent.
    """
    await service.handle_websocket_stream(
        websocket, "Query param 'symbols' required (e.g. ?symbols=BTC,ETH)"
    )


@router.post("/refresh")
async def refresh_prices(service: MarketServiceDep) -> dict[str, str]:
    """Force refresh the quote provider."""
    await service.refresh()
    return {"status": "refreshed"}


@router.get("/{symbol}", response_model=Quote)
async def get_price(symbol: str, service: MarketServiceDep) -> Quote:
    """Current quote for one symbol (e.g. "BTC")."""
    return await service.get_quote(symbol)
