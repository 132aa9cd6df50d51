"""Market data service over a quote provider.

MarketService wraps any QuoteProviderABC with symbol normalization and maps
provider failures to HTTP errors, so routers never see raw httpx exceptions.
"""
import asyncio
from collections.abc import AsyncIterator

import httpx
from fastapi import WebSocket

from meditrade.core.error_mapper import ErrorMapper
from meditrade.providers import QuoteProviderABC
from meditrade.schemas import Quote
from meditrade.services.utils import (handle_websocket_stream,
                                      parse_symbols_param)
from meditrade.utils import normalize_symbol

# Provider exceptions mapped to HTTP; anything else propagates.
_PROVIDER_EXCEPTIONS: tuple[type[Exception], ...] = (
    ValueError,
    KeyError,
    TimeoutError,
    asyncio.TimeoutError,
    httpx.HTTPStatusError,
    httpx.TimeoutException,
)


class MarketService:
    """Quotes, overview and streaming for the prices endpoints."""

    def __init__(
        self,
        provider: QuoteProviderABC,
        error_mapper: ErrorMapper | None = None,
    ) -> None:
        self._provider = provider
        self._error_mapper = error_mapper or ErrorMapper(
            resource_name="Asset", api_name=provider.name
        )

    @property
    def provider(self) -> QuoteProviderABC:
        return self._provider

    async def get_quote(self, symbol: str) -> Quote:
        """Current quote. Raises HTTPException on provider errors."""
        try:
            return await self._provider.get_quote(normalize_symbol(symbol))
        except _PROVIDER_EXCEPTIONS as e:
            self._error_mapper.raise_http(e, symbol=normalize_symbol(symbol))

    async def get_overview_quotes(self) -> list[Quote]:
        """All listed assets. Raises HTTPException on provider errors."""
        try:
            return await self._provider.get_overview_quotes()
        except _PROVIDER_EXCEPTIONS as e:
            self._error_mapper.raise_http(e)

    async def refresh(self) -> None:
        try:
            await self._provider.refresh()
        except _PROVIDER_EXCEPTIONS as e:
            self._error_mapper.raise_http(e)

    async def stream(
        self,
        symbol_list: list[str],
        *,
        stop_event: asyncio.Event | None = None,
    ) -> AsyncIterator[Quote]:
        """Stream quotes for the given symbols until stop_event is set."""
        normalized = [normalize_symbol(s) for s in symbol_list]
        async for quote in self._provider.stream(normalized, stop_event=stop_event):
            yield quote

    async def handle_websocket_stream(
        self, websocket: WebSocket, symbols_required_message: str
    ) -> None:
        """Accept the WebSocket, parse ?symbols=, and stream quotes."""
        symbol_list = parse_symbols_param(
            websocket.query_params, normalizer=normalize_symbol
        )
        await handle_websocket_stream(
            websocket,
            lambda symbols, stop: self.stream(symbols, stop_event=stop),
            symbol_list,
            symbols_required_message,
        )
