"""Core trading logic: ledger, achievements, leaderboard, alerts, watchlists."""
from meditrade.core.error_mapper import ErrorMapper
from meditrade.core.exceptions import (BusinessRuleViolation,
                                       InsufficientFunds,
                                       InsufficientHoldings, MediTradeError,
                                       NotFound, PersistenceError,
                                       ValidationError)
from meditrade.core.ledger import (AccountSnapshot, Holding, Side,
                                   TradeOutcome, TradeRecord, execute_trade)

__all__ = [
    "AccountSnapshot",
    "BusinessRuleViolation",
    "ErrorMapper",
    "Holding",
    "InsufficientFunds",
    "InsufficientHoldings",
    "MediTradeError",
    "NotFound",
    "PersistenceError",
    "Side",
    "TradeOutcome",
    "TradeRecord",
    "ValidationError",
    "execute_trade",
]
