"""End-to-end market flow through the host, call by call."""

import pytest

from tests.conftest import QUESTION


def test_initialize_market(host):
    result = host.call_public("initialize-market", [QUESTION, host.block_height + 100], "deployer")

    assert result.ok
    assert result.value is True


def test_get_market_info(host):
    deadline = host.block_height + 100
    host.call_public("initialize-market", [QUESTION, deadline], "deployer")

    result = host.call_read_only("get-market-info")

    assert result.ok
    assert result.value == {
        "question": QUESTION,
        "deadline": deadline,
        "resolved": False,
        "winning-outcome": False,
        "total-yes-bets": 0,
        "total-no-bets": 0,
        "owner": "deployer",
    }


def test_place_bet(host):
    host.call_public("initialize-market", [QUESTION, host.block_height + 100], "deployer")

    result = host.call_public("place-bet", [True, 1000], "wallet_1")

    assert result.ok and result.value is True
    assert host.balance_of("wallet_1") == 99_000
    assert host.balance_of("prediction-market") == 1000


def test_betting_after_deadline_is_rejected(host):
    host.call_public("initialize-market", [QUESTION, host.block_height - 1], "deployer")

    result = host.call_public("place-bet", [True, 1000], "wallet_1")

    assert not result.ok
    assert result.error_code == 102
    assert result.error_name == "MarketClosed"


def test_owner_resolves_after_deadline(host):
    host.call_public("initialize-market", [QUESTION, host.block_height + 10], "deployer")
    host.mine_empty_blocks(15)

    result = host.call_public("resolve-market", [True], "deployer")

    assert result.ok and result.value is True


def test_winnings_distributed(host):
    host.call_public("initialize-market", [QUESTION, host.block_height + 100], "deployer")
    host.call_public("place-bet", [True, 1000], "wallet_1")
    host.call_public("place-bet", [False, 2000], "wallet_2")
    host.mine_empty_blocks(105)
    host.call_public("resolve-market", [True], "deployer")

    status = host.call_read_only("get-market-status")
    assert status.value == {"is-open": False, "can-resolve": False, "can-claim": True}

    claim = host.call_public("claim-winnings", [], "wallet_1")

    assert claim.ok
    assert claim.value == 3000
    assert host.balance_of("wallet_1") == 102_000
    assert host.balance_of("prediction-market") == 0


def test_non_owner_cannot_resolve(host):
    host.call_public("initialize-market", [QUESTION, host.block_height + 10], "deployer")
    host.mine_empty_blocks(15)

    result = host.call_public("resolve-market", [True], "wallet_1")

    assert result.to_dict() == {"err": 100, "name": "OwnerOnly"}


def test_claim_before_resolution(host):
    host.call_public("initialize-market", [QUESTION, host.block_height + 100], "deployer")
    host.call_public("place-bet", [True, 1000], "wallet_1")

    result = host.call_public("claim-winnings", [], "wallet_1")

    assert result.error_code == 103


def test_second_initialize_rejected_regardless_of_arguments(host):
    host.call_public("initialize-market", [QUESTION, host.block_height + 100], "deployer")

    again = host.call_public("initialize-market", ["Another question?", 5], "deployer")
    by_other = host.call_public("initialize-market", ["", -1], "wallet_1")

    assert again.error_code == 106
    assert by_other.error_code == 106
    assert host.market.get_market_info()["question"] == QUESTION
    assert host.market.get_market_info()["owner"] == "deployer"


def test_status_moves_through_lifecycle(host):
    assert host.call_read_only("get-market-status").value == {
        "is-open": False,
        "can-resolve": False,
        "can-claim": False,
    }

    deadline = host.block_height + 10
    host.call_public("initialize-market", [QUESTION, deadline], "deployer")
    assert host.call_read_only("get-market-status").value["is-open"] is True

    host.mine_empty_blocks(deadline - host.block_height)
    assert host.call_read_only("get-market-status").value == {
        "is-open": False,
        "can-resolve": True,
        "can-claim": False,
    }

    host.call_public("resolve-market", [False], "deployer")
    assert host.call_read_only("get-market-status").value == {
        "is-open": False,
        "can-resolve": False,
        "can-claim": True,
    }


def test_public_call_mines_a_block(host):
    start = host.block_height
    host.call_public("place-bet", [True, 1], "wallet_1")

    assert host.block_height == start + 1


def test_unknown_function_raises(host):
    with pytest.raises(ValueError):
        host.call_public("withdraw", [], "wallet_1")
    with pytest.raises(ValueError):
        host.call_read_only("place-bet", [True, 1])
