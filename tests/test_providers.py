"""
Tests for the quote providers: mock random walk, CoinGecko over a mock
transport, the polling stream, and the provider factory.
"""

import asyncio
from datetime import datetime, timezone
from decimal import Decimal

import httpx
import pytest

from meditrade.config import Settings
from meditrade.providers import (CoinGeckoQuoteProvider, MockQuoteProvider,
                                 QuoteProviderABC, create_quote_provider)
from meditrade.schemas import Quote


class TestMockQuoteProvider:

    @pytest.mark.asyncio
    async def test_fixed_prices_at_zero_volatility(self):
        provider = MockQuoteProvider(volatility=0)

        first = await provider.get_quote("btc")
        second = await provider.get_quote("BTC")

        assert first.symbol == "BTC"
        assert first.name == "Bitcoin"
        assert first.price == second.price == Decimal("43250.75")
        assert first.change_24h == 0
        assert first.source == "mock"

    @pytest.mark.asyncio
    async def test_small_prices_keep_four_places(self):
        quote = await MockQuoteProvider(volatility=0).get_quote("DOGE")
        assert quote.price == Decimal("0.0850")

    @pytest.mark.asyncio
    async def test_unknown_symbol(self):
        with pytest.raises(ValueError, match="not found"):
            await MockQuoteProvider().get_quote("NOPE")

    @pytest.mark.asyncio
    async def test_same_seed_same_walk(self):
        a = MockQuoteProvider(seed=42)
        b = MockQuoteProvider(seed=42)

        walk_a = [(await a.get_quote("ETH")).price for _ in range(5)]
        walk_b = [(await b.get_quote("ETH")).price for _ in range(5)]

        assert walk_a == walk_b

    @pytest.mark.asyncio
    async def test_steps_bounded_by_volatility(self):
        provider = MockQuoteProvider(volatility=0.025, seed=1)
        previous = Decimal("43250.75")
        for _ in range(20):
            price = (await provider.get_quote("BTC")).price
            assert abs(price - previous) / previous <= Decimal("0.0251")
            previous = price

    @pytest.mark.asyncio
    async def test_refresh_resets_to_seed(self):
        provider = MockQuoteProvider(seed=3)
        first = (await provider.get_quote("SOL")).price
        for _ in range(3):
            await provider.get_quote("SOL")

        await provider.refresh()

        assert (await provider.get_quote("SOL")).price == first

    @pytest.mark.asyncio
    async def test_get_prices_skips_unknown(self):
        prices = await MockQuoteProvider(volatility=0).get_prices(["BTC", "NOPE", "btc", "ETH"])
        assert prices == {"BTC": Decimal("43250.75"), "ETH": Decimal("2280.50")}

    @pytest.mark.asyncio
    async def test_overview_lists_all_seeds(self):
        quotes = await MockQuoteProvider().get_overview_quotes()
        assert len(quotes) == 10

    def test_negative_volatility_rejected(self):
        with pytest.raises(ValueError):
            MockQuoteProvider(volatility=-0.1)


class TestStream:

    @pytest.mark.asyncio
    async def test_only_changed_prices_are_yielded(self):
        provider = MockQuoteProvider(volatility=0, poll_interval=0.01)
        stop = asyncio.Event()
        received: list[Quote] = []

        async def consume():
            async for quote in provider.stream(["BTC", "ETH"], stop_event=stop):
                received.append(quote)

        task = asyncio.create_task(consume())
        await asyncio.sleep(0.1)
        stop.set()
        await asyncio.wait_for(task, timeout=1)

        assert [q.symbol for q in received] == ["BTC", "ETH"]

    @pytest.mark.asyncio
    async def test_moving_prices_keep_streaming(self):
        provider = MockQuoteProvider(volatility=0.02, seed=9, poll_interval=0)
        received = []
        async for quote in provider.stream(["BTC"]):
            received.append(quote)
            if len(received) == 3:
                break
        await provider.close()

        assert len(received) == 3
        assert provider.streaming is False


class _PartialProvider(QuoteProviderABC):
    async def get_quote(self, symbol: str) -> Quote:
        if symbol == "BAD":
            raise ValueError("unknown")
        return Quote(symbol=symbol, price=Decimal("1"))

    async def get_overview_quotes(self) -> list[Quote]:
        return []


class TestDefaultGetQuotes:

    @pytest.mark.asyncio
    async def test_unsupported_symbols_skipped(self):
        quotes = await _PartialProvider().get_quotes(["A", "BAD", "B"])
        assert [q.symbol for q in quotes] == ["A", "B"]

    @pytest.mark.asyncio
    async def test_get_prices_empty(self):
        assert await _PartialProvider().get_prices([]) == {}


def coingecko(handler) -> CoinGeckoQuoteProvider:
    return CoinGeckoQuoteProvider(api_key=None, transport=httpx.MockTransport(handler))


class TestCoinGeckoQuoteProvider:

    @pytest.mark.asyncio
    async def test_quote_from_simple_price(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["path"] = request.url.path
            seen["ids"] = request.url.params["ids"]
            return httpx.Response(200, json={
                "bitcoin": {
                    "usd": 43000.5,
                    "usd_24h_change": 1.5,
                    "usd_24h_vol": 123.0,
                    "usd_market_cap": 999.0,
                    "last_updated_at": 1700000000,
                },
            })

        provider = coingecko(handler)
        quote = await provider.get_quote("btc")
        await provider.close()

        assert seen == {"path": "/api/v3/simple/price", "ids": "bitcoin"}
        assert quote.symbol == "BTC"
        assert quote.name == "Bitcoin"
        assert quote.price == Decimal("43000.5")
        assert quote.change_24h == 1.5
        assert quote.source == "coingecko"
        assert quote.timestamp == datetime(2023, 11, 14, 22, 13, 20, tzinfo=timezone.utc)

    @pytest.mark.asyncio
    async def test_batch_quotes_in_one_request(self):
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request.url.params["ids"])
            return httpx.Response(200, json={
                "bitcoin": {"usd": 1},
                "ethereum": {"usd": 2},
            })

        provider = coingecko(handler)
        prices = await provider.get_prices(["BTC", "ETH", "NOPE"])
        await provider.close()

        assert calls == ["bitcoin,ethereum"]
        assert prices == {"BTC": Decimal("1"), "ETH": Decimal("2")}

    @pytest.mark.asyncio
    async def test_unknown_ticker_without_request(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise AssertionError("no request expected")

        provider = coingecko(handler)
        with pytest.raises(ValueError):
            await provider.get_quote("NOPE")
        await provider.close()

    @pytest.mark.asyncio
    async def test_missing_price_is_not_found(self):
        provider = coingecko(lambda request: httpx.Response(200, json={}))
        with pytest.raises(ValueError):
            await provider.get_quote("ETH")
        await provider.close()

    @pytest.mark.asyncio
    async def test_upstream_error_propagates(self):
        provider = coingecko(lambda request: httpx.Response(500))
        with pytest.raises(httpx.HTTPStatusError):
            await provider.get_quote("BTC")
        await provider.close()


class TestFactory:

    def test_mock_by_default(self):
        assert isinstance(create_quote_provider(Settings()), MockQuoteProvider)

    @pytest.mark.asyncio
    async def test_coingecko(self):
        provider = create_quote_provider(Settings(quote_provider="coingecko"))
        assert isinstance(provider, CoinGeckoQuoteProvider)
        await provider.close()

    def test_unknown(self):
        with pytest.raises(ValueError):
            create_quote_provider(Settings(quote_provider="nasdaq"))
