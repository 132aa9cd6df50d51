"""Price alert conditions."""
from decimal import Decimal
from enum import Enum

from meditrade.core.exceptions import ValidationError

MAX_ACTIVE_ALERTS = 10


class AlertCondition(str, Enum):
    ABOVE = "above"
    BELOW = "below"


def parse_condition(value: AlertCondition | str) -> AlertCondition:
    try:
        return AlertCondition(value)
    except ValueError as exc:
        raise ValidationError(
            f"Invalid condition '{value}'. Expected 'above' or 'below'"
        ) from exc


def should_trigger(condition: AlertCondition | str, target_price: Decimal, price: Decimal) -> bool:
    """True when `price` has reached the target from the alert's side."""
    if AlertCondition(condition) is AlertCondition.ABOVE:
        return target_price <= price
    return target_price >= price
