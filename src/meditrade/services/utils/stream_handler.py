"""WebSocket price streaming: parse symbols and forward quotes to the client."""
import asyncio
import logging
from collections.abc import AsyncIterator, Callable
from typing import Any

from fastapi import WebSocket, WebSocketDisconnect

from meditrade.schemas import Quote

logger = logging.getLogger(__name__)

StreamSource = Callable[[list[str], asyncio.Event], AsyncIterator[Quote]]


def parse_symbols_param(
    query_params: Any,
    normalizer: Callable[[str], str] | None = None,
) -> list[str]:
    """Parse the comma-separated 'symbols' query param, dropping blanks and repeats."""
    raw = (query_params.get("symbols") or "").strip()
    parts = [s.strip() for s in raw.split(",") if s.strip()]
    if normalizer is not None:
        parts = [normalizer(s) for s in parts]
    return list(dict.fromkeys(parts))


async def handle_websocket_stream(
    websocket: WebSocket,
    stream_source: StreamSource,
    symbol_list: list[str],
    symbols_required_message: str,
) -> None:
    """Accept the WebSocket, validate symbols, then send each quote as JSON.

    Every connection gets its own stop_event, so one client disconnecting
    leaves the shared provider streaming for the others.
    """
    await websocket.accept()
    if not symbol_list:
        await websocket.close(code=4000, reason=symbols_required_message)
        return
    stop_event = asyncio.Event()
    try:
        async for quote in stream_source(symbol_list, stop_event):
            await websocket.send_json(quote.model_dump(mode="json"))
    except WebSocketDisconnect:
        logger.debug("Stream client disconnected")
    except Exception:
        logger.exception("Price stream failed for %s", ",".join(symbol_list))
        try:
            await websocket.close(code=1011, reason="Stream error")
        except RuntimeError:
            logger.debug("WebSocket already closed")
    finally:
        stop_event.set()
