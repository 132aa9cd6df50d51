"""Achievement catalog and threshold evaluation."""
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

from meditrade.core.ledger import AccountSnapshot, Side, TradeRecord

PROFIT_ESTIMATE_RATE = Decimal("0.1")


class Metric(str, Enum):
    """Statistic an achievement threshold is compared against."""

    TOTAL_TRADES = "total_trades"
    SELL_TRADES = "sell_trades"
    PROFIT_ESTIMATE = "total_profit_estimate"
    PORTFOLIO_VALUE = "portfolio_value"
    HOLDINGS_COUNT = "holdings_count"
    ALWAYS = "always"
    MANUAL = "manual"  # in the catalog, never unlocked by evaluate()


@dataclass(frozen=True)
class AchievementDefinition:
    id: str
    name: str
    description: str
    icon: str
    category: str
    rarity: str
    metric: Metric
    threshold: Decimal = Decimal(0)


@dataclass(frozen=True)
class TradingStats:
    """Aggregates the evaluator checks thresholds against."""

    total_trades: int
    sell_trades: int
    total_profit_estimate: Decimal
    holdings_count: int
    portfolio_value: Decimal

    def value_of(self, metric: Metric) -> Decimal:
        return Decimal(getattr(self, metric.value))


def _a(id_, name, description, icon, category, rarity, metric, threshold=0):
    return AchievementDefinition(
        id_, name, description, icon, category, rarity, metric, Decimal(threshold)
    )


# Ordered lowest to highest threshold within each category.
ACHIEVEMENTS: tuple[AchievementDefinition, ...] = (
    _a("first_trade", "First Steps", "Complete your first trade", "🎯",
       "trading", "common", Metric.TOTAL_TRADES, 1),
    _a("trader_10", "Getting Started", "Complete 10 trades", "📈",
       "trading", "common", Metric.TOTAL_TRADES, 10),
    _a("trader_50", "Active Trader", "Complete 50 trades", "🔥",
       "trading", "uncommon", Metric.TOTAL_TRADES, 50),
    _a("trader_100", "Trading Pro", "Complete 100 trades", "⚡",
       "trading", "rare", Metric.TOTAL_TRADES, 100),
    _a("trader_500", "Trading Legend", "Complete 500 trades", "👑",
       "trading", "legendary", Metric.TOTAL_TRADES, 500),
    _a("first_profit", "In The Green", "Make your first profitable trade", "💚",
       "profit", "common", Metric.SELL_TRADES, 1),
    _a("profit_1k", "Thousand Dollar Club", "Earn $1,000 in total profits", "💰",
       "profit", "uncommon", Metric.PROFIT_ESTIMATE, 1_000),
    _a("profit_10k", "Big Earner", "Earn $10,000 in total profits", "💎",
       "profit", "rare", Metric.PROFIT_ESTIMATE, 10_000),
    _a("profit_100k", "Whale Status", "Earn $100,000 in total profits", "🐋",
       "profit", "legendary", Metric.PROFIT_ESTIMATE, 100_000),
    _a("portfolio_10k", "Building Wealth", "Reach $10,000 portfolio value", "📊",
       "portfolio", "common", Metric.PORTFOLIO_VALUE, 10_000),
    _a("portfolio_50k", "Serious Investor", "Reach $50,000 portfolio value", "🏆",
       "portfolio", "uncommon", Metric.PORTFOLIO_VALUE, 50_000),
    _a("portfolio_100k", "Six Figure Club", "Reach $100,000 portfolio value", "🌟",
       "portfolio", "rare", Metric.PORTFOLIO_VALUE, 100_000),
    _a("portfolio_1m", "Millionaire", "Reach $1,000,000 portfolio value", "🎖️",
       "portfolio", "legendary", Metric.PORTFOLIO_VALUE, 1_000_000),
    _a("diversified_3", "Diversifying", "Hold 3 different cryptocurrencies", "🎨",
       "diversity", "common", Metric.HOLDINGS_COUNT, 3),
    _a("diversified_5", "Well Balanced", "Hold 5 different cryptocurrencies", "⚖️",
       "diversity", "uncommon", Metric.HOLDINGS_COUNT, 5),
    _a("diversified_all", "Collector", "Hold all available cryptocurrencies", "🏅",
       "diversity", "rare", Metric.HOLDINGS_COUNT, 10),
    _a("early_bird", "Early Bird", "Join MediTrade platform", "🐣",
       "special", "common", Metric.ALWAYS),
    _a("diamond_hands", "Diamond Hands", "Hold a position for 7 days without selling", "💎",
       "special", "uncommon", Metric.MANUAL),
    _a("top_10", "Top Performer", "Reach top 10 on the leaderboard", "🥇",
       "special", "rare", Metric.MANUAL),
    _a("top_3", "Elite Trader", "Reach top 3 on the leaderboard", "👑",
       "special", "legendary", Metric.MANUAL),
)

CATEGORIES: tuple[str, ...] = ("trading", "profit", "portfolio", "diversity", "special")


def compute_stats(account: AccountSnapshot, trades: Iterable[TradeRecord]) -> TradingStats:
    """Aggregate trade history and holdings into TradingStats.

    total_profit_estimate is 10% of all sell proceeds. It ignores cost basis
    and is kept only so unlock timing stays unchanged for existing users.
    """
    trades = list(trades)
    sells = [t for t in trades if t.side is Side.SELL]
    held = [h for h in account.holdings if h.quantity > 0]
    return TradingStats(
        total_trades=len(trades),
        sell_trades=len(sells),
        total_profit_estimate=sum((t.total for t in sells), Decimal(0)) * PROFIT_ESTIMATE_RATE,
        holdings_count=len(held),
        portfolio_value=account.balance
        + sum((h.quantity * h.average_cost for h in held), Decimal(0)),
    )


def is_met(achievement: AchievementDefinition, stats: TradingStats) -> bool:
    if achievement.metric is Metric.ALWAYS:
        return True
    if achievement.metric is Metric.MANUAL:
        return False
    return stats.value_of(achievement.metric) >= achievement.threshold


def evaluate(
    stats: TradingStats,
    already_unlocked: Iterable[str],
    catalog: Sequence[AchievementDefinition] = ACHIEVEMENTS,
) -> list[AchievementDefinition]:
    """Achievements whose condition holds and that are not yet unlocked.

    Each rule is independent, so several thresholds in one category can unlock
    in the same pass. Result keeps catalog order.
    """
    unlocked = set(already_unlocked)
    return [a for a in catalog if a.id not in unlocked and is_met(a, stats)]


def find(achievement_id: str, catalog: Sequence[AchievementDefinition] = ACHIEVEMENTS
         ) -> AchievementDefinition | None:
    for a in catalog:
        if a.id == achievement_id:
            return a
    return None
