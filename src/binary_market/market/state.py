"""Market record and lifecycle derivation.

The market moves Uninitialized -> Open -> (Closed, unresolved) -> Resolved.
Only initialization and resolution are stored transitions; whether betting is
still open is always derived from the current height.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional

from ..errors import AlreadyInitialized, AlreadyResolved

YES = True
NO = False


def outcome_label(outcome: bool) -> str:
    return "YES" if outcome else "NO"


class MarketPhase(Enum):
    UNINITIALIZED = "uninitialized"
    OPEN = "open"
    CLOSED_UNRESOLVED = "closed_unresolved"
    RESOLVED = "resolved"


@dataclass
class Market:
    """Singleton market record. Question, deadline and owner are set once."""

    question: str = ""
    deadline: int = 0
    owner: Optional[str] = None
    resolved: bool = False
    winning_outcome: bool = False
    total_yes_stake: int = 0
    total_no_stake: int = 0

    @property
    def initialized(self) -> bool:
        return self.owner is not None

    @property
    def total_stake(self) -> int:
        return self.total_yes_stake + self.total_no_stake

    def open(self, *, question: str, deadline: int, owner: str) -> None:
        if self.initialized:
            raise AlreadyInitialized()
        self.question = question
        self.deadline = deadline
        self.owner = owner

    def record_resolution(self, outcome: bool) -> None:
        if self.resolved:
            raise AlreadyResolved()
        self.resolved = True
        self.winning_outcome = bool(outcome)

    def pool(self, outcome: bool) -> int:
        return self.total_yes_stake if outcome else self.total_no_stake

    def add_stake(self, outcome: bool, amount: int) -> None:
        if outcome:
            self.total_yes_stake += amount
        else:
            self.total_no_stake += amount

    def snapshot(self) -> Dict[str, object]:
        """Market info using the contract's field names."""
        return {
            "question": self.question,
            "deadline": self.deadline,
            "resolved": self.resolved,
            "winning-outcome": self.winning_outcome,
            "total-yes-bets": self.total_yes_stake,
            "total-no-bets": self.total_no_stake,
            "owner": self.owner,
        }


@dataclass(frozen=True)
class MarketStatus:
    is_open: bool
    can_resolve: bool
    can_claim: bool

    def to_dict(self) -> Dict[str, bool]:
        return {
            "is-open": self.is_open,
            "can-resolve": self.can_resolve,
            "can-claim": self.can_claim,
        }


def is_open(market: Market, height: int) -> bool:
    return market.initialized and not market.resolved and height < market.deadline


def can_resolve(market: Market, height: int) -> bool:
    return market.initialized and not market.resolved and height >= market.deadline


def derive_phase(market: Market, height: int) -> MarketPhase:
    if not market.initialized:
        return MarketPhase.UNINITIALIZED
    if market.resolved:
        return MarketPhase.RESOLVED
    if height < market.deadline:
        return MarketPhase.OPEN
    return MarketPhase.CLOSED_UNRESOLVED


def derive_status(market: Market, height: int) -> MarketStatus:
    return MarketStatus(
        is_open=is_open(market, height),
        can_resolve=can_resolve(market, height),
        can_claim=market.resolved,
    )
