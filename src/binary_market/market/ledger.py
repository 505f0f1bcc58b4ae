"""Per-participant bet ledger."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterator, List, Optional

from ..errors import AlreadyClaimed, BetAlreadyPlaced, InvalidAmount, InvalidOutcome, NoBetFound
from .state import outcome_label


class RepeatBetPolicy(str, Enum):
    """What happens when a participant who already holds a bet stakes again."""

    REJECT = "reject"
    MERGE = "merge"  # same side only


@dataclass
class Bet:
    participant: str
    outcome: bool
    amount: int
    placed_at: int
    claimed: bool = False

    def to_dict(self) -> Dict[str, object]:
        return {
            "participant": self.participant,
            "outcome": self.outcome,
            "side": outcome_label(self.outcome),
            "amount": self.amount,
            "claimed": self.claimed,
            "placed_at": self.placed_at,
        }


def validate_amount(amount: object) -> int:
    # bool is an int subclass but never a stake
    if isinstance(amount, bool) or not isinstance(amount, int) or amount <= 0:
        raise InvalidAmount(f"invalid bet amount: {amount!r}")
    return amount


def validate_outcome(outcome: object) -> bool:
    # no truthiness: "false" or 0 must not land on YES
    if not isinstance(outcome, bool):
        raise InvalidOutcome(f"invalid outcome: {outcome!r}")
    return outcome


class BetLedger:
    """Holds at most one Bet per participant.

    ``check_bet`` performs every validation without mutating, so the caller can
    run external effects (custody transfer) between checking and recording.
    """

    def __init__(self, policy: RepeatBetPolicy = RepeatBetPolicy.REJECT):
        self.policy = RepeatBetPolicy(policy)
        self._bets: Dict[str, Bet] = {}

    def __len__(self) -> int:
        return len(self._bets)

    def __contains__(self, participant: object) -> bool:
        return participant in self._bets

    def __iter__(self) -> Iterator[Bet]:
        return iter(self._bets.values())

    def get(self, participant: str) -> Optional[Bet]:
        return self._bets.get(participant)

    def require(self, participant: str) -> Bet:
        bet = self._bets.get(participant)
        if bet is None:
            raise NoBetFound(f"no bet recorded for {participant}")
        return bet

    def check_bet(self, participant: str, outcome: object, amount: object) -> int:
        outcome = validate_outcome(outcome)
        amount = validate_amount(amount)
        existing = self._bets.get(participant)
        if existing is None:
            return amount

        if self.policy is RepeatBetPolicy.REJECT:
            raise BetAlreadyPlaced(f"{participant} already bet on this market")
        if existing.outcome != outcome:
            raise BetAlreadyPlaced(
                f"{participant} holds a {outcome_label(existing.outcome)} bet "
                f"and cannot bet {outcome_label(outcome)}"
            )
        return amount

    def record(self, participant: str, outcome: bool, amount: int, height: int) -> Bet:
        existing = self._bets.get(participant)
        if existing is not None:
            existing.amount += amount
            return existing

        bet = Bet(participant=participant, outcome=outcome, amount=amount, placed_at=height)
        self._bets[participant] = bet
        return bet

    def check_unclaimed(self, participant: str) -> Bet:
        bet = self.require(participant)
        if bet.claimed:
            raise AlreadyClaimed(f"{participant} already claimed")
        return bet

    def mark_claimed(self, participant: str) -> None:
        self.check_unclaimed(participant).claimed = True

    def bets(self) -> List[Bet]:
        return list(self._bets.values())

    def bets_on(self, outcome: bool) -> List[Bet]:
        return [bet for bet in self._bets.values() if bet.outcome == bool(outcome)]

    def total_staked(self, outcome: Optional[bool] = None) -> int:
        if outcome is None:
            return sum(bet.amount for bet in self._bets.values())
        return sum(bet.amount for bet in self.bets_on(outcome))
