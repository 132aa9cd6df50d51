"""
Tests for net-worth ranking, stats and pagination.
"""

from decimal import Decimal

import pytest

from meditrade.core.exceptions import ValidationError
from meditrade.core.leaderboard import Trader, net_worth, rank, rank_all
from meditrade.core.ledger import AccountSnapshot, Holding

START = Decimal("100000")
PRICES = {"BTC": Decimal("50000"), "ETH": Decimal("2000")}


def trader(user_id, balance, *holdings, role="user") -> Trader:
    snapshot = AccountSnapshot(user_id, Decimal(balance), tuple(holdings))
    return Trader(account=snapshot, name=f"user{user_id}", role=role)


def btc(quantity) -> Holding:
    return Holding("BTC", Decimal(quantity), Decimal("40000"))


class TestNetWorth:

    def test_cash_plus_marked_holdings(self):
        t = trader(1, "1000", btc("2"))
        assert net_worth(t.account, PRICES.get) == Decimal("101000")

    def test_unknown_symbol_worth_zero(self):
        t = trader(1, "1000", Holding("ZZZ", Decimal("5"), Decimal("1")))
        assert net_worth(t.account, PRICES.get) == Decimal("1000")


class TestRankAll:

    def test_sorted_by_total_value(self):
        traders = [trader(1, "90000"), trader(2, "50000", btc("2")), trader(3, "100000")]

        entries = rank_all(traders, PRICES.get, START)

        assert [e.user_id for e in entries] == [2, 3, 1]
        assert [e.rank for e in entries] == [1, 2, 3]
        assert entries[0].profit_loss == Decimal("50000")
        assert entries[0].profit_loss_percent == Decimal("50")
        assert entries[0].holdings_count == 1

    def test_ranks_are_permutation_and_monotonic(self):
        balances = ["5", "500", "5", "70000", "100000", "0", "500"]
        traders = [trader(i + 1, b) for i, b in enumerate(balances)]

        entries = rank_all(traders, PRICES.get, START)

        assert sorted(e.rank for e in entries) == list(range(1, len(balances) + 1))
        for a in entries:
            for b in entries:
                if a.total_value > b.total_value:
                    assert a.rank < b.rank

    def test_ties_break_by_user_id(self):
        traders = [trader(7, "100"), trader(3, "100"), trader(5, "100")]
        assert [e.user_id for e in rank_all(traders, PRICES.get, START)] == [3, 5, 7]

    def test_admins_excluded(self):
        traders = [trader(1, "10", role="admin"), trader(2, "5")]
        assert [e.user_id for e in rank_all(traders, PRICES.get, START)] == [2]

    @pytest.mark.parametrize("start", ["0", "-1"])
    def test_non_positive_starting_balance(self, start):
        with pytest.raises(ValidationError):
            rank_all([trader(1, "100")], PRICES.get, Decimal(start))


class TestRankPage:

    def test_pagination_and_stats_cover_everyone(self):
        traders = [trader(i, str(100000 + i * 1000)) for i in range(1, 26)]

        page = rank(traders, PRICES.get, START, page=3, page_size=10)

        assert [e.rank for e in page.entries] == [21, 22, 23, 24, 25]
        assert page.pagination.total_pages == 3
        assert page.pagination.total_traders == 25
        assert page.stats.total_traders == 25
        assert page.stats.profitable_traders == 25

    def test_stats(self):
        traders = [trader(1, "110000"), trader(2, "90000")]

        stats = rank(traders, PRICES.get, START).stats

        assert stats.total_volume == Decimal("200000")
        assert stats.avg_profit == Decimal("0")
        assert stats.profitable_traders == 1

    def test_empty(self):
        page = rank([], PRICES.get, START)
        assert page.entries == []
        assert page.pagination.total_pages == 0
        assert page.stats.avg_profit == Decimal("0")

    @pytest.mark.parametrize("kwargs", [
        {"page": 0},
        {"page_size": 0},
        {"starting_balance": Decimal("0")},
    ])
    def test_invalid_arguments(self, kwargs):
        args = {"page": 1, "page_size": 10, "starting_balance": START, **kwargs}
        with pytest.raises(ValidationError):
            rank([], PRICES.get, **args)
