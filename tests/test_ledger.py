"""
Tests for trade execution and cash movements on account snapshots.

Everything here is pure: no database, no provider.
"""

from decimal import Decimal

import pytest

from meditrade.core.exceptions import (InsufficientFunds,
                                       InsufficientHoldings, InvalidAmount,
                                       InvalidPrice, InvalidQuantity,
                                       ValidationError)
from meditrade.core.ledger import (AccountSnapshot, Holding, Side, deposit,
                                   execute_trade, withdraw)


def account(balance, *holdings) -> AccountSnapshot:
    return AccountSnapshot(user_id=1, balance=Decimal(balance), holdings=tuple(holdings))


class TestBuy:
    """Buys debit exactly quantity*price and open or extend one holding."""

    def test_first_buy_opens_position(self):
        out = execute_trade(account("1000"), "X", Decimal("1"), Side.BUY, Decimal("500"))

        assert out.account.balance == Decimal("500")
        assert out.account.holdings == (Holding("X", Decimal("1"), Decimal("500")),)
        assert out.trade.symbol == "X"
        assert out.trade.side is Side.BUY
        assert out.trade.quantity == Decimal("1")
        assert out.trade.price == Decimal("500")
        assert out.trade.total == Decimal("500")

    def test_second_buy_blends_average_cost(self):
        start = account("5000", Holding("X", Decimal("1"), Decimal("500")))

        out = execute_trade(start, "X", Decimal("1"), "buy", Decimal("700"))

        assert out.holding == Holding("X", Decimal("2"), Decimal("600"))
        assert out.account.balance == Decimal("4300")

    def test_average_cost_uses_weighted_quantities(self):
        start = account("10000", Holding("X", Decimal("3"), Decimal("100")))

        out = execute_trade(start, "X", Decimal("1"), Side.BUY, Decimal("500"))

        assert out.holding.average_cost == Decimal("200")

    def test_other_holdings_untouched(self):
        eth = Holding("ETH", Decimal("2"), Decimal("2000"))
        start = account("1000", eth)

        out = execute_trade(start, "BTC", Decimal("0.01"), Side.BUY, Decimal("40000"))

        assert out.account.holding("ETH") == eth
        assert out.account.holding("BTC").quantity == Decimal("0.01")

    def test_symbol_normalized(self):
        out = execute_trade(account("1000"), " btc ", Decimal("1"), Side.BUY, Decimal("10"))

        assert out.trade.symbol == "BTC"
        assert out.account.holding("BTC") is not None

    def test_exact_balance_succeeds(self):
        out = execute_trade(account("1000"), "X", Decimal("2"), Side.BUY, Decimal("500"))

        assert out.account.balance == Decimal("0")

    def test_one_unit_over_balance_fails(self):
        start = account("1000")

        with pytest.raises(InsufficientFunds):
            execute_trade(start, "X", Decimal("1"), Side.BUY, Decimal("1001"))

        assert start.balance == Decimal("1000")
        assert start.holdings == ()

    def test_fractional_total_is_quantized(self):
        out = execute_trade(
            account("1000"), "X", Decimal("0.33333333"), Side.BUY, Decimal("0.3")
        )

        assert out.trade.total == Decimal("0.10000000")
        assert out.account.balance == Decimal("999.90000000")


class TestSell:
    """Sells credit exactly quantity*price and shrink or remove the holding."""

    def test_partial_sell_keeps_average_cost(self):
        start = account("0", Holding("X", Decimal("2"), Decimal("600")))

        out = execute_trade(start, "X", Decimal("1"), Side.SELL, Decimal("900"))

        assert out.account.balance == Decimal("900")
        assert out.holding == Holding("X", Decimal("1"), Decimal("600"))

    def test_full_sell_removes_holding(self):
        start = account("0", Holding("X", Decimal("1"), Decimal("500")))

        out = execute_trade(start, "X", Decimal("1"), Side.SELL, Decimal("500"))

        assert out.account.holdings == ()
        assert out.holding is None

    def test_oversell_rejected_without_mutation(self):
        start = account("100", Holding("X", Decimal("1"), Decimal("500")))

        with pytest.raises(InsufficientHoldings):
            execute_trade(start, "X", Decimal("2"), Side.SELL, Decimal("500"))

        assert start.balance == Decimal("100")
        assert start.holdings == (Holding("X", Decimal("1"), Decimal("500")),)

    def test_sell_without_position_rejected(self):
        with pytest.raises(InsufficientHoldings):
            execute_trade(account("100"), "X", Decimal("1"), Side.SELL, Decimal("5"))


class TestRoundTrip:

    @pytest.mark.parametrize("quantity,price", [
        ("1", "500"),
        ("0.12345678", "43250.75"),
        ("1500", "0.085"),
    ])
    def test_buy_then_sell_restores_balance(self, quantity, price):
        start = account("100000")
        q, p = Decimal(quantity), Decimal(price)

        bought = execute_trade(start, "X", q, Side.BUY, p)
        sold = execute_trade(bought.account, "X", q, Side.SELL, p)

        assert sold.account.balance == start.balance
        assert sold.account.holdings == ()


class TestValidation:

    @pytest.mark.parametrize("quantity", ["0", "-1"])
    def test_non_positive_quantity(self, quantity):
        with pytest.raises(InvalidQuantity):
            execute_trade(account("100"), "X", Decimal(quantity), Side.BUY, Decimal("1"))

    @pytest.mark.parametrize("price", ["0", "-5"])
    def test_non_positive_price(self, price):
        with pytest.raises(InvalidPrice):
            execute_trade(account("100"), "X", Decimal("1"), Side.BUY, Decimal(price))

    def test_unknown_side(self):
        with pytest.raises(ValidationError):
            execute_trade(account("100"), "X", Decimal("1"), "short", Decimal("1"))

    @pytest.mark.parametrize("quantity", ["0.000000001", "0.123456789", "1E+30"])
    def test_quantity_must_fit_stored_precision(self, quantity):
        with pytest.raises(InvalidQuantity):
            execute_trade(account("100"), "X", Decimal(quantity), Side.BUY, Decimal("1"))

    def test_quote_price_rounded_to_stored_precision(self):
        out = execute_trade(account("100"), "X", Decimal("1"), Side.BUY, Decimal("0.123456789"))

        assert out.trade.price == Decimal("0.12345679")
        assert out.trade.total == Decimal("0.12345679")
        assert out.holding.average_cost == Decimal("0.12345679")
        assert out.account.balance == Decimal("99.87654321")

    def test_price_rounding_to_zero_rejected(self):
        with pytest.raises(InvalidPrice):
            execute_trade(account("100"), "X", Decimal("1"), Side.BUY, Decimal("0.000000001"))


class TestCashMovements:

    def test_deposit_credits(self):
        assert deposit(account("10"), Decimal("5")).balance == Decimal("15")

    def test_withdraw_debits(self):
        assert withdraw(account("10"), Decimal("10")).balance == Decimal("0")

    def test_withdraw_over_balance(self):
        with pytest.raises(InsufficientFunds):
            withdraw(account("10"), Decimal("10.01"))

    @pytest.mark.parametrize("op", [deposit, withdraw])
    def test_non_positive_amount(self, op):
        with pytest.raises(InvalidAmount):
            op(account("10"), Decimal("0"))

    @pytest.mark.parametrize("op", [deposit, withdraw])
    @pytest.mark.parametrize("amount", ["0.000000001", "1.000000001"])
    def test_amount_must_fit_stored_precision(self, op, amount):
        with pytest.raises(InvalidAmount):
            op(account("10"), Decimal(amount))
