"""CoinGecko quote provider for live cryptocurrency prices."""
import os
from datetime import datetime, timezone
from decimal import Decimal
from types import MappingProxyType
from typing import Any

import httpx

from meditrade.providers.quote_provider_abc import QuoteProviderABC
from meditrade.schemas import Quote
from meditrade.utils import normalize_symbol, utcnow

# Ticker -> (CoinGecko ID, display name)
COIN_IDS = MappingProxyType({
    "BTC": ("bitcoin", "Bitcoin"),
    "ETH": ("ethereum", "Ethereum"),
    "BNB": ("binancecoin", "Binance Coin"),
    "SOL": ("solana", "Solana"),
    "XRP": ("ripple", "Ripple"),
    "ADA": ("cardano", "Cardano"),
    "DOGE": ("dogecoin", "Dogecoin"),
    "MATIC": ("matic-network", "Polygon"),
    "DOT": ("polkadot", "Polkadot"),
    "AVAX": ("avalanche-2", "Avalanche"),
})


class CoinGeckoQuoteProvider(QuoteProviderABC):
    """Quote provider backed by the CoinGecko REST API.

    Symbols are tickers ("BTC"); they are mapped to CoinGecko IDs through
    `coin_ids`. Tickers outside the map are unsupported. Streaming polls the
    REST API (CoinGecko WebSocket requires a paid plan).
    """

    BASE_URL = "https://api.coingecko.com/api/v3"
    PRO_BASE_URL = "https://pro-api.coingecko.com/api/v3"

    def __init__(
        self,
        api_key: str | None = None,
        use_pro_api: bool = False,
        poll_interval: float = 10.0,
        coin_ids: MappingProxyType | dict = COIN_IDS,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float = 10.0,
    ) -> None:
        """Initialize the CoinGecko provider.

        Args:
            api_key: CoinGecko API key. Defaults to COINGECKO_API_KEY env var.
            use_pro_api: Whether to use the Pro API endpoint.
            poll_interval: Interval in seconds for polling-based streaming.
            coin_ids: Ticker -> (CoinGecko ID, name) map of supported assets.
            transport: Optional httpx transport (tests use httpx.MockTransport).
            timeout: Request timeout in seconds.
        """
        super().__init__(poll_interval=poll_interval)
        self._api_key = api_key or os.getenv("COINGECKO_API_KEY")
        self._use_pro_api = use_pro_api or bool(self._api_key)
        self._coin_ids = dict(coin_ids)
        self._symbol_by_id = {cid: sym for sym, (cid, _) in self._coin_ids.items()}

        headers: dict[str, str] = {"Accept": "application/json"}
        if self._api_key:
            headers["x-cg-pro-api-key"] = self._api_key

        base_url = self.PRO_BASE_URL if self._use_pro_api else self.BASE_URL
        self._client = httpx.AsyncClient(
            base_url=base_url, headers=headers, transport=transport, timeout=timeout
        )

    async def _fetch(self, coin_ids: list[str]) -> dict[str, Any]:
        response = await self._client.get(
            "/simple/price",
            params={
                "ids": ",".join(coin_ids),
                "vs_currencies": "usd",
                "include_market_cap": "true",
                "include_24hr_vol": "true",
                "include_24hr_change": "true",
                "include_last_updated_at": "true",
            },
        )
        response.raise_for_status()
        return response.json()

    def _to_quote(self, coin_id: str, coin_data: dict[str, Any]) -> Quote:
        symbol = self._symbol_by_id[coin_id]
        last_updated = coin_data.get("last_updated_at")
        volume = coin_data.get("usd_24h_vol")
        return Quote(
            symbol=symbol,
            name=self._coin_ids[symbol][1],
            price=Decimal(str(coin_data["usd"])),
            change_24h=coin_data.get("usd_24h_change"),
            volume_24h=float(volume) if volume else None,
            market_cap=coin_data.get("usd_market_cap"),
            source="coingecko",
            timestamp=(
                datetime.fromtimestamp(last_updated, tz=timezone.utc)
                if last_updated
                else utcnow()
            ),
        )

    async def get_quote(self, symbol: str) -> Quote:
        """Fetch the current quote for one ticker.

        Raises:
            ValueError: Unknown ticker, or CoinGecko returned no price for it.
            httpx.HTTPStatusError: Upstream error.
        """
        symbol = normalize_symbol(symbol)
        if symbol not in self._coin_ids:
            raise ValueError(f"Asset '{symbol}' not found")
        coin_id = self._coin_ids[symbol][0]
        data = await self._fetch([coin_id])
        if coin_id not in data:
            raise ValueError(f"Asset '{symbol}' not found")
        return self._to_quote(coin_id, data[coin_id])

    async def get_quotes(self, symbols: list[str]) -> list[Quote]:
        """Batch lookup in a single request; unsupported tickers are skipped."""
        coin_ids = [
            self._coin_ids[s][0]
            for s in dict.fromkeys(normalize_symbol(s) for s in symbols)
            if s in self._coin_ids
        ]
        if not coin_ids:
            return []
        data = await self._fetch(coin_ids)
        return [self._to_quote(cid, data[cid]) for cid in coin_ids if cid in data]

    async def get_overview_quotes(self) -> list[Quote]:
        return await self.get_quotes(list(self._coin_ids))

    async def close(self) -> None:
        """Close the HTTP client."""
        await super().close()
        await self._client.aclose()
