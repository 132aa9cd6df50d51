"""In-process random-walk quote provider."""
import random
from decimal import Decimal
from types import MappingProxyType

from meditrade.providers.quote_provider_abc import QuoteProviderABC
from meditrade.schemas import Quote
from meditrade.utils import normalize_symbol, round_price, utcnow

# symbol -> (name, seed price)
SEED_PRICES = MappingProxyType({
    "BTC": ("Bitcoin", Decimal("43250.75")),
    "ETH": ("Ethereum", Decimal("2280.50")),
    "BNB": ("Binance Coin", Decimal("315.20")),
    "SOL": ("Solana", Decimal("98.45")),
    "XRP": ("Ripple", Decimal("0.62")),
    "ADA": ("Cardano", Decimal("0.58")),
    "DOGE": ("Dogecoin", Decimal("0.085")),
    "MATIC": ("Polygon", Decimal("0.92")),
    "DOT": ("Polkadot", Decimal("7.35")),
    "AVAX": ("Avalanche", Decimal("36.80")),
})


class MockQuoteProvider(QuoteProviderABC):
    """Simulated market: every read moves each price by a bounded random step.

    Prices start at the seed table and drift as a multiplicative random walk,
    each step uniform in [-volatility, +volatility]. Pass `seed` for
    reproducible sequences and `volatility=0` for fixed prices.
    """

    def __init__(
        self,
        seed_prices: MappingProxyType | dict = SEED_PRICES,
        *,
        volatility: float = 0.025,
        seed: int | None = None,
        poll_interval: float = 5.0,
    ) -> None:
        super().__init__(poll_interval=poll_interval)
        if volatility < 0:
            raise ValueError("volatility must be >= 0")
        self._seed_prices = dict(seed_prices)
        self._volatility = volatility
        self._seed = seed
        self._rng = random.Random(seed)
        self._prices = {s: p for s, (_, p) in self._seed_prices.items()}

    def _step(self, symbol: str) -> Decimal:
        if self._volatility:
            change = self._rng.uniform(-self._volatility, self._volatility)
            self._prices[symbol] *= Decimal(1) + Decimal(str(round(change, 6)))
        return round_price(self._prices[symbol])

    def _quote(self, symbol: str) -> Quote:
        name, seed_price = self._seed_prices[symbol]
        price = self._step(symbol)
        change_24h = float((price - seed_price) / seed_price * 100)
        return Quote(
            symbol=symbol,
            name=name,
            price=price,
            change_24h=round(change_24h, 2),
            source="mock",
            timestamp=utcnow(),
        )

    async def get_quote(self, symbol: str) -> Quote:
        symbol = normalize_symbol(symbol)
        if symbol not in self._seed_prices:
            raise ValueError(f"Asset '{symbol}' not found")
        return self._quote(symbol)

    async def get_quotes(self, symbols: list[str]) -> list[Quote]:
        wanted = [normalize_symbol(s) for s in symbols]
        return [self._quote(s) for s in dict.fromkeys(wanted) if s in self._seed_prices]

    async def get_overview_quotes(self) -> list[Quote]:
        return [self._quote(s) for s in self._seed_prices]

    async def refresh(self) -> None:
        """Reset every price to its seed value and restart the random sequence."""
        self._rng = random.Random(self._seed)
        self._prices = {s: p for s, (_, p) in self._seed_prices.items()}
