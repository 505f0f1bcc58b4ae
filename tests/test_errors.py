import pytest

from binary_market import errors
from binary_market.errors import ERROR_CODES, MarketError, error_for_code


def test_codes_are_unique_and_stable():
    assert {code: cls.__name__ for code, cls in ERROR_CODES.items()} == {
        100: "OwnerOnly",
        101: "NoBetFound",
        102: "MarketClosed",
        103: "MarketNotResolved",
        104: "AlreadyClaimed",
        105: "InvalidAmount",
        106: "AlreadyInitialized",
        107: "NotYetResolvable",
        108: "AlreadyResolved",
        109: "NotWinningSide",
        110: "BetAlreadyPlaced",
        111: "InvalidQuestion",
        112: "InvalidDeadline",
        113: "DustSweepUnavailable",
        114: "TransferFailed",
        115: "InvalidOutcome",
    }


def test_error_carries_name_and_message():
    err = errors.MarketClosed()

    assert isinstance(err, MarketError)
    assert err.name == "MarketClosed"
    assert err.code == 102
    assert str(err) == "market is not open for betting"
    assert str(errors.MarketClosed("deadline 10 passed")) == "deadline 10 passed"


def test_lookup_by_code():
    assert error_for_code(109) is errors.NotWinningSide
    with pytest.raises(ValueError):
        error_for_code(999)
