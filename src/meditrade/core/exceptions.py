"""Error taxonomy for trading, wallet, alerts and watchlists.

Every error carries a stable machine-readable ``kind`` (the class name) and a
human message. The HTTP layer renders both via ErrorMapper.
"""


class MediTradeError(Exception):
    """Base class for all caller-visible errors."""

    def __init__(self, message: str = "") -> None:
        super().__init__(message)
        self.message = message or self.__class__.__name__

    @property
    def kind(self) -> str:
        return type(self).__name__


# ---- Validation: bad input shape or range ----
class ValidationError(MediTradeError):
    """Input failed validation; the caller must correct and resend."""


class InvalidQuantity(ValidationError):
    pass


class InvalidPrice(ValidationError):
    pass


class InvalidAmount(ValidationError):
    pass


# ---- Business rules: valid input the current state cannot satisfy ----
class BusinessRuleViolation(MediTradeError):
    """Rejected by a business rule. No mutation happened."""


class InsufficientFunds(BusinessRuleViolation):
    pass


class InsufficientHoldings(BusinessRuleViolation):
    pass


class AccountExists(BusinessRuleViolation):
    pass


class DuplicateAlert(BusinessRuleViolation):
    pass


class AlertLimitReached(BusinessRuleViolation):
    pass


class AlreadyInWatchlist(BusinessRuleViolation):
    pass


class NotInWatchlist(BusinessRuleViolation):
    pass


class WatchlistFull(BusinessRuleViolation):
    pass


# ---- Lookup and access ----
class NotFound(MediTradeError):
    """Referenced account, alert or watchlist does not exist."""


class Unauthorized(MediTradeError):
    """Caller identity is missing or malformed."""


class Forbidden(MediTradeError):
    """Caller does not own the referenced resource."""


# ---- Storage ----
class PersistenceError(MediTradeError):
    """Storage failed mid-operation. Must not be retried automatically."""
