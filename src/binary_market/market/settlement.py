"""Parimutuel settlement arithmetic.

Winners get their stake back plus a share of the losing pool proportional to
their stake. Integer floor division means payouts never exceed the total
staked; the remainder is dust.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List


class DustPolicy(str, Enum):
    """Who ends up with the truncation remainder."""

    UNCLAIMED = "unclaimed"
    OWNER = "owner"


@dataclass(frozen=True)
class Settlement:
    participant: str
    stake: int
    share: int

    @property
    def payout(self) -> int:
        return self.stake + self.share


def losing_share(stake: int, win_pool: int, lose_pool: int) -> int:
    """floor(stake * lose_pool / win_pool)."""
    if stake <= 0:
        raise ValueError("stake must be positive")
    if win_pool < stake:
        raise ValueError("winning pool must include the stake")
    if lose_pool < 0:
        raise ValueError("losing pool cannot be negative")
    return (stake * lose_pool) // win_pool


def compute_payout(stake: int, win_pool: int, lose_pool: int) -> int:
    return stake + losing_share(stake, win_pool, lose_pool)


def settle(bets: Iterable, winning_outcome: bool) -> List[Settlement]:
    """Settle every bet on the winning side.

    ``bets`` is any iterable of objects with ``participant``, ``outcome`` and
    ``amount`` attributes. Pools are computed from the bets themselves.
    """
    bets = list(bets)
    win_pool = sum(b.amount for b in bets if b.outcome == winning_outcome)
    lose_pool = sum(b.amount for b in bets if b.outcome != winning_outcome)

    return [
        Settlement(
            participant=b.participant,
            stake=b.amount,
            share=losing_share(b.amount, win_pool, lose_pool),
        )
        for b in bets
        if b.outcome == winning_outcome
    ]


def compute_dust(stakes: Iterable[int], lose_pool: int) -> int:
    """Remainder left after paying every winning stake in ``stakes``.

    With no winning stakes the whole losing pool is left over.
    """
    stakes = list(stakes)
    win_pool = sum(stakes)
    if win_pool == 0:
        return lose_pool
    distributed = sum(losing_share(stake, win_pool, lose_pool) for stake in stakes)
    return lose_pool - distributed
