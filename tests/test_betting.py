"""Bet placement: window, validation, pool accounting and repeat-bet policy."""

import pytest

from binary_market.errors import (
    BetAlreadyPlaced,
    InvalidAmount,
    InvalidOutcome,
    MarketClosed,
    TransferFailed,
)
from binary_market.market import RepeatBetPolicy
from tests.conftest import QUESTION


def test_bet_rejected_before_initialization(market):
    with pytest.raises(MarketClosed):
        market.place_bet("wallet_1", True, 100)


def test_betting_window_boundary(make_market, clock):
    market = make_market()
    deadline = clock.height + 5
    market.initialize("deployer", QUESTION, deadline)

    clock.mine_empty_blocks(deadline - 1 - clock.height)
    assert market.place_bet("wallet_1", True, 10) is True

    clock.mine_empty_blocks(1)
    assert clock.height == deadline
    with pytest.raises(MarketClosed):
        market.place_bet("wallet_2", False, 10)


def test_past_deadline_accepted_at_initialization(market, clock):
    clock.mine_empty_blocks(10)

    assert market.initialize("deployer", QUESTION, 3) is True
    with pytest.raises(MarketClosed):
        market.place_bet("wallet_1", True, 10)


@pytest.mark.parametrize("amount", [0, -5, 1.5, "100", True, None])
def test_invalid_amounts(open_market, custody, amount):
    with pytest.raises(InvalidAmount):
        open_market.place_bet("wallet_1", True, amount)

    assert open_market.get_bet("wallet_1") is None
    assert custody.balance_of("wallet_1") == 100_000


@pytest.mark.parametrize("outcome", ["false", "yes", 0, 1, None])
def test_non_boolean_outcome_rejected(open_market, custody, outcome):
    with pytest.raises(InvalidOutcome):
        open_market.place_bet("wallet_1", outcome, 100)

    assert open_market.get_bet("wallet_1") is None
    assert open_market.get_market_info()["total-yes-bets"] == 0
    assert custody.balance_of("wallet_1") == 100_000


def test_string_outcome_rejected_through_host(host):
    host.call_public("initialize-market", [QUESTION, host.block_height + 10], "deployer")

    result = host.call_public("place-bet", ["false", 100], "wallet_1")

    assert result.to_dict() == {"err": 115, "name": "InvalidOutcome"}
    assert host.call_read_only("get-bet", ["wallet_1"]).value is None

def test_closed_market_reported_before_invalid_amount(market, clock):
    market.initialize("deployer", QUESTION, clock.height)

    with pytest.raises(MarketClosed):
        market.place_bet("wallet_1", True, 0)


def test_pool_conservation(make_market, clock):
    market = make_market(repeat_bet_policy=RepeatBetPolicy.MERGE)
    market.initialize("deployer", QUESTION, clock.height + 100)

    bets = [
        ("wallet_1", True, 300),
        ("wallet_2", False, 1200),
        ("wallet_1", True, 50),
        ("wallet_3", True, 7),
        ("wallet_2", False, 1),
    ]
    for participant, outcome, amount in bets:
        market.place_bet(participant, outcome, amount)
        info = market.get_market_info()
        assert info["total-yes-bets"] + info["total-no-bets"] == market.ledger.total_staked()

    info = market.get_market_info()
    assert info["total-yes-bets"] == 357
    assert info["total-no-bets"] == 1201
    assert market.ledger.total_staked(True) == 357
    assert market.custody.balance_of("prediction-market") == 1558


def test_bet_record(open_market, clock):
    height = clock.height
    open_market.place_bet("wallet_2", False, 250)

    assert open_market.get_bet("wallet_2") == {
        "participant": "wallet_2",
        "outcome": False,
        "side": "NO",
        "amount": 250,
        "claimed": False,
        "placed_at": height,
    }


class TestRejectPolicy:
    def test_second_bet_same_side_rejected(self, open_market, custody):
        open_market.place_bet("wallet_1", True, 100)

        with pytest.raises(BetAlreadyPlaced):
            open_market.place_bet("wallet_1", True, 100)

        assert open_market.get_bet("wallet_1")["amount"] == 100
        assert open_market.get_market_info()["total-yes-bets"] == 100
        assert custody.balance_of("wallet_1") == 99_900

    def test_second_bet_other_side_rejected(self, open_market):
        open_market.place_bet("wallet_1", True, 100)

        with pytest.raises(BetAlreadyPlaced):
            open_market.place_bet("wallet_1", False, 100)

        assert open_market.get_market_info()["total-no-bets"] == 0


class TestMergePolicy:
    @pytest.fixture
    def merging_market(self, make_market, clock):
        market = make_market(repeat_bet_policy=RepeatBetPolicy.MERGE)
        market.initialize("deployer", QUESTION, clock.height + 100)
        return market

    def test_same_side_bets_merge(self, merging_market, custody, clock):
        first_height = clock.height
        merging_market.place_bet("wallet_1", True, 100)
        clock.mine_empty_blocks(3)
        merging_market.place_bet("wallet_1", True, 150)

        bet = merging_market.get_bet("wallet_1")
        assert bet["amount"] == 250
        assert bet["placed_at"] == first_height
        assert len(merging_market.ledger) == 1
        assert merging_market.get_market_info()["total-yes-bets"] == 250
        assert custody.balance_of("wallet_1") == 99_750

    def test_opposite_side_rejected(self, merging_market, custody):
        merging_market.place_bet("wallet_1", False, 100)

        with pytest.raises(BetAlreadyPlaced):
            merging_market.place_bet("wallet_1", True, 100)

        assert merging_market.get_bet("wallet_1")["outcome"] is False
        assert merging_market.get_market_info()["total-yes-bets"] == 0
        assert custody.balance_of("wallet_1") == 99_900


def test_failed_transfer_leaves_no_trace(open_market, custody):
    with pytest.raises(TransferFailed):
        open_market.place_bet("wallet_1", True, 100_001)

    assert open_market.get_bet("wallet_1") is None
    assert open_market.get_market_info()["total-yes-bets"] == 0
    assert custody.balance_of("wallet_1") == 100_000
    assert custody.balance_of("prediction-market") == 0


def test_unfunded_participant_rejected_through_host(host):
    host.call_public("initialize-market", [QUESTION, host.block_height + 10], "deployer")

    result = host.call_public("place-bet", [True, 1], "stranger")

    assert result.error_code == 114
    assert host.call_read_only("get-bet", ["stranger"]).value is None
