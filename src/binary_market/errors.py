"""Typed failures raised by the market operations.

Every rule violation has its own exception class with a stable numeric code,
so hosts can surface ``err <code>`` results and callers can tell "wrong
timing" apart from "already done" and "not eligible".
"""

from __future__ import annotations

from typing import Dict, Optional, Type


class MarketError(Exception):
    """Base class for all market rule violations."""

    code: int = 0
    name: str = "MarketError"
    default_message: str = "market rule violated"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.default_message)

    def __init_subclass__(cls, **kwargs):
        super().__init_subclass__(**kwargs)
        cls.name = cls.__name__


class OwnerOnly(MarketError):
    code = 100
    default_message = "only the market owner may perform this operation"


class NoBetFound(MarketError):
    code = 101
    default_message = "no bet recorded for this participant"


class MarketClosed(MarketError):
    code = 102
    default_message = "market is not open for betting"


class MarketNotResolved(MarketError):
    code = 103
    default_message = "market has not been resolved"


class AlreadyClaimed(MarketError):
    code = 104
    default_message = "winnings already claimed"


class InvalidAmount(MarketError):
    code = 105
    default_message = "bet amount must be a positive integer"


class AlreadyInitialized(MarketError):
    code = 106
    default_message = "market already initialized"


class NotYetResolvable(MarketError):
    code = 107
    default_message = "deadline has not passed yet"


class AlreadyResolved(MarketError):
    code = 108
    default_message = "market already resolved"


class NotWinningSide(MarketError):
    code = 109
    default_message = "bet is not on the winning side"


class BetAlreadyPlaced(MarketError):
    code = 110
    default_message = "participant already holds a bet"


class InvalidQuestion(MarketError):
    code = 111
    default_message = "question must be non-empty ASCII text within the length bound"


class InvalidDeadline(MarketError):
    code = 112
    default_message = "deadline must be a non-negative integer height"


class DustSweepUnavailable(MarketError):
    code = 113
    default_message = "dust cannot be swept"


class TransferFailed(MarketError):
    code = 114
    default_message = "value transfer failed"


class InvalidOutcome(MarketError):
    code = 115
    default_message = "outcome must be a boolean (YES=True, NO=False)"


ERROR_CODES: Dict[int, Type[MarketError]] = {
    cls.code: cls
    for cls in (
        OwnerOnly,
        NoBetFound,
        MarketClosed,
        MarketNotResolved,
        AlreadyClaimed,
        InvalidAmount,
        AlreadyInitialized,
        NotYetResolvable,
        AlreadyResolved,
        NotWinningSide,
        BetAlreadyPlaced,
        InvalidQuestion,
        InvalidDeadline,
        DustSweepUnavailable,
        TransferFailed,
        InvalidOutcome,
    )
}


def error_for_code(code: int) -> Type[MarketError]:
    """Look up the error class registered for ``code``."""
    try:
        return ERROR_CODES[code]
    except KeyError:
        raise ValueError(f"Unknown market error code: {code}") from None
