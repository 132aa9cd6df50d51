"""Quote providers for asset prices.

- MockQuoteProvider: in-process random walk around seed prices (default)
- CoinGeckoQuoteProvider: live prices via the CoinGecko REST API

Both implement QuoteProviderABC. Example:

    async with MockQuoteProvider(seed=7) as provider:
        quote = await provider.get_quote("BTC")
        print(f"{quote.symbol}: ${quote.price}")
"""
from meditrade.config import Settings
from meditrade.providers.coingecko import CoinGeckoQuoteProvider
from meditrade.providers.mock import MockQuoteProvider
from meditrade.providers.quote_provider_abc import QuoteProviderABC


def create_quote_provider(settings: Settings) -> QuoteProviderABC:
    """Build the provider selected by MEDITRADE_QUOTE_PROVIDER."""
    if settings.quote_provider == "coingecko":
        return CoinGeckoQuoteProvider(
            api_key=settings.coingecko_api_key,
            poll_interval=settings.price_poll_interval,
        )
    if settings.quote_provider == "mock":
        return MockQuoteProvider(
            volatility=settings.mock_volatility,
            seed=settings.mock_seed,
            poll_interval=settings.price_poll_interval,
        )
    raise ValueError(f"Unknown quote provider: {settings.quote_provider}")


__all__ = [
    "CoinGeckoQuoteProvider",
    "MockQuoteProvider",
    "QuoteProviderABC",
    "create_quote_provider",
]
