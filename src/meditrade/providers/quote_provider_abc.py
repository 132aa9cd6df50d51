"""Abstract base class for quote providers."""
import asyncio
from abc import ABC, abstractmethod
from collections.abc import AsyncIterator
from decimal import Decimal

from meditrade.providers.stream_helpers import stream_by_polling
from meditrade.schemas import Quote


class QuoteProviderABC(ABC):
    """Base interface for all quote providers.

    A provider answers "what is the price of this symbol now". Trade
    execution, the leaderboard and price alerts depend only on this interface,
    so the in-process random walk and a live exchange feed are interchangeable.

    Subclasses must call super().__init__() and must not set _streaming directly;
    the streaming property is used by stream_by_polling to stop when close() is called.
    """

    def __init__(self, poll_interval: float = 5.0) -> None:
        """Initialize provider. Subclasses may override and should call super().__init__()."""
        self._streaming = False
        self._poll_interval = poll_interval

    @property
    def streaming(self) -> bool:
        """Flag used by stream_by_polling to control the polling loop."""
        return getattr(self, "_streaming", False)

    @streaming.setter
    def streaming(self, value: bool) -> None:
        self._streaming = value

    @property
    def name(self) -> str:
        return type(self).__name__

    @abstractmethod
    async def get_quote(self, symbol: str) -> Quote:
        """Fetch the current quote for a symbol.

        Args:
            symbol: The asset ticker (e.g., "BTC", "ETH").

        Returns:
            A Quote with the current price.

        Raises:
            ValueError: The symbol is not supported by this provider.
        """

    @abstractmethod
    async def get_overview_quotes(self) -> list[Quote]:
        """Fetch quotes for every asset the provider lists (the market overview)."""

    async def get_quotes(self, symbols: list[str]) -> list[Quote]:
        """Fetch quotes for several symbols; unsupported symbols are skipped.

        Default implementation gathers get_quote() calls. Providers with a
        batch endpoint should override.
        """
        results = await asyncio.gather(
            *(self.get_quote(s) for s in symbols), return_exceptions=True
        )
        quotes: list[Quote] = []
        for result in results:
            if isinstance(result, ValueError):
                continue
            if isinstance(result, BaseException):
                raise result
            quotes.append(result)
        return quotes

    async def get_prices(self, symbols: list[str]) -> dict[str, Decimal]:
        """Map symbol -> price for the supported subset of `symbols`."""
        if not symbols:
            return {}
        return {q.symbol: q.price for q in await self.get_quotes(symbols)}

    async def stream(
        self,
        symbols: list[str],
        *,
        stop_event: asyncio.Event | None = None,
    ) -> AsyncIterator[Quote]:
        """Yield quotes for `symbols` by polling; only changed prices are yielded.

        Args:
            symbols: List of symbols to subscribe to.
            stop_event: When set, the loop exits. Use one per client.
        """
        async for quote in stream_by_polling(
            self,
            symbols,
            self._poll_interval,
            self.get_quotes,
            stop_event=stop_event,
        ):
            yield quote

    async def refresh(self) -> None:
        """Force refresh: clear caches or reconnect. No-op by default."""

    async def close(self) -> None:
        """Clean up resources (connections, clients).

        Override in subclasses if cleanup is needed.
        """
        self.streaming = False

    async def __aenter__(self) -> "QuoteProviderABC":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:  # noqa: ANN001
        """Async context manager exit - calls close()."""
        await self.close()
