"""The prediction market service: one market, one ledger, one owner."""

from __future__ import annotations

import logging
from typing import Dict, Optional

from ..errors import (
    AlreadyInitialized,
    AlreadyResolved,
    DustSweepUnavailable,
    InvalidDeadline,
    InvalidQuestion,
    MarketClosed,
    MarketNotResolved,
    NotWinningSide,
    NotYetResolvable,
    OwnerOnly,
)
from ..interfaces import EventSink, HeightSource, ValueTransfer
from .ledger import Bet, BetLedger, RepeatBetPolicy, validate_outcome
from .settlement import DustPolicy, compute_dust, compute_payout
from .state import Market, MarketPhase, derive_phase, derive_status, is_open, outcome_label

logger = logging.getLogger(__name__)

DEFAULT_PRINCIPAL = "prediction-market"
DEFAULT_QUESTION_MAX_LENGTH = 256


class PredictionMarket:
    """Binary YES/NO market with parimutuel settlement.

    Every mutating operation takes the calling principal as ``sender`` and
    checks all of its preconditions before touching state or custody. Rule
    violations raise a ``MarketError`` subclass; on any failure nothing has
    changed.

    Funds move through ``custody``: stakes go from the participant to
    ``principal``, payouts go back. The current height comes from ``clock``.
    """

    def __init__(
        self,
        *,
        custody: ValueTransfer,
        clock: HeightSource,
        principal: str = DEFAULT_PRINCIPAL,
        question_max_length: int = DEFAULT_QUESTION_MAX_LENGTH,
        repeat_bet_policy: RepeatBetPolicy = RepeatBetPolicy.REJECT,
        dust_policy: DustPolicy = DustPolicy.UNCLAIMED,
        event_sink: Optional[EventSink] = None,
    ) -> None:
        self.custody = custody
        self.clock = clock
        self.principal = principal
        self.question_max_length = question_max_length
        self.dust_policy = DustPolicy(dust_policy)
        self.event_sink = event_sink

        self.market = Market()
        self.ledger = BetLedger(repeat_bet_policy)
        self._total_paid = 0
        self._dust_swept = False

    @property
    def height(self) -> int:
        return self.clock.height

    @property
    def phase(self) -> MarketPhase:
        return derive_phase(self.market, self.height)

    @property
    def total_paid(self) -> int:
        return self._total_paid

    # ------------------------------------------------------------------
    # Mutating operations
    # ------------------------------------------------------------------

    def initialize(self, sender: str, question: str, deadline: int) -> bool:
        """Open the market and record ``sender`` as its owner.

        The deadline is not compared against the current height: a past
        deadline is accepted and leaves the market closed for betting.
        """
        if self.market.initialized:
            raise AlreadyInitialized()
        self._validate_question(question)
        if isinstance(deadline, bool) or not isinstance(deadline, int) or deadline < 0:
            raise InvalidDeadline(f"invalid deadline: {deadline!r}")

        self.market.open(question=question, deadline=deadline, owner=sender)

        logger.info("Market initialized by %s, deadline=%d: %s", sender, deadline, question)
        self._emit("initialize", {"owner": sender, "question": question, "deadline": deadline})
        return True

    def place_bet(self, sender: str, outcome: bool, amount: int) -> bool:
        if not is_open(self.market, self.height):
            raise MarketClosed()
        outcome = validate_outcome(outcome)
        amount = self.ledger.check_bet(sender, outcome, amount)

        self.custody.transfer(sender, self.principal, amount)

        bet = self.ledger.record(sender, outcome, amount, self.height)
        self.market.add_stake(outcome, amount)

        logger.info("%s staked %d on %s (position now %d)", sender, amount, outcome_label(outcome), bet.amount)
        self._emit(
            "bet",
            {
                "participant": sender,
                "side": outcome_label(outcome),
                "amount": amount,
                "position": bet.amount,
                "total_yes": self.market.total_yes_stake,
                "total_no": self.market.total_no_stake,
            },
        )
        return True

    def resolve(self, sender: str, outcome: bool) -> bool:
        self._require_owner(sender)
        outcome = validate_outcome(outcome)
        if self.market.resolved:
            raise AlreadyResolved()
        if self.height < self.market.deadline:
            raise NotYetResolvable(f"deadline {self.market.deadline} not reached at height {self.height}")

        self.market.record_resolution(outcome)

        logger.info("Market resolved %s by %s", outcome_label(outcome), sender)
        self._emit(
            "resolve",
            {
                "owner": sender,
                "winning_side": outcome_label(outcome),
                "win_pool": self.market.pool(self.market.winning_outcome),
                "lose_pool": self.market.pool(not self.market.winning_outcome),
            },
        )
        return True

    def claim_winnings(self, sender: str) -> int:
        """Pay out a winning bet once and return the amount paid."""
        if not self.market.resolved:
            raise MarketNotResolved()
        bet = self.ledger.check_unclaimed(sender)
        if bet.outcome != self.market.winning_outcome:
            raise NotWinningSide(f"{sender} bet {outcome_label(bet.outcome)}")

        payout = self._payout_for(bet, self.market.winning_outcome)

        self.custody.transfer(self.principal, sender, payout)

        self.ledger.mark_claimed(sender)
        self._total_paid += payout

        logger.info("%s claimed %d (stake %d)", sender, payout, bet.amount)
        self._emit("claim", {"participant": sender, "stake": bet.amount, "payout": payout})
        return payout

    def sweep_dust(self, sender: str) -> int:
        """Send the undistributed remainder to the owner (``DustPolicy.OWNER`` only)."""
        if self.dust_policy is not DustPolicy.OWNER:
            raise DustSweepUnavailable("dust is left unclaimed under this market's policy")
        self._require_owner(sender)
        if not self.market.resolved:
            raise MarketNotResolved()
        if self._dust_swept:
            raise DustSweepUnavailable("dust already swept")
        winners = self.ledger.bets_on(self.market.winning_outcome)
        outstanding = [bet for bet in winners if not bet.claimed]
        if outstanding:
            raise DustSweepUnavailable(f"{len(outstanding)} winning bet(s) still unclaimed")

        dust = compute_dust([bet.amount for bet in winners], self.market.pool(not self.market.winning_outcome))
        if dust > 0:
            self.custody.transfer(self.principal, sender, dust)
        self._dust_swept = True

        logger.info("Owner %s swept %d dust", sender, dust)
        self._emit("dust_sweep", {"owner": sender, "amount": dust})
        return dust

    # ------------------------------------------------------------------
    # Read-only queries
    # ------------------------------------------------------------------

    def get_market_info(self) -> Dict[str, object]:
        return self.market.snapshot()

    def get_market_status(self) -> Dict[str, bool]:
        return derive_status(self.market, self.height).to_dict()

    def get_bet(self, participant: str) -> Optional[Dict[str, object]]:
        bet = self.ledger.get(participant)
        return bet.to_dict() if bet is not None else None

    def preview_payout(self, participant: str, outcome: Optional[bool] = None) -> int:
        """Payout ``participant`` gets if ``outcome`` wins (default: the resolved outcome)."""
        bet = self.ledger.require(participant)
        if outcome is None:
            if not self.market.resolved:
                raise MarketNotResolved()
            outcome = self.market.winning_outcome
        outcome = validate_outcome(outcome)
        if bet.outcome != outcome:
            return 0
        return self._payout_for(bet, outcome)

    # ------------------------------------------------------------------

    def _payout_for(self, bet: Bet, winning_outcome: bool) -> int:
        return compute_payout(
            bet.amount,
            self.market.pool(winning_outcome),
            self.market.pool(not winning_outcome),
        )

    def _require_owner(self, sender: str) -> None:
        if not self.market.initialized or sender != self.market.owner:
            raise OwnerOnly(f"{sender} is not the market owner")

    def _validate_question(self, question: object) -> None:
        if not isinstance(question, str) or not question:
            raise InvalidQuestion("question must be a non-empty string")
        if len(question) > self.question_max_length:
            raise InvalidQuestion(f"question exceeds {self.question_max_length} characters")
        if not question.isascii():
            raise InvalidQuestion("question must be ASCII text")

    def _emit(self, event_type: str, data: Dict[str, object]) -> None:
        if self.event_sink is not None:
            self.event_sink.log_event(self.height, event_type, data)
