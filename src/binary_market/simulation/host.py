"""In-memory host environment for a single market.

Plays the role of the chain the market would be deployed on: it keeps the
block height, holds balances, identifies callers and turns market errors into
``err`` results the way a contract call would.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Mapping, Optional, Sequence

from ..errors import MarketError, TransferFailed
from ..market.contract import PredictionMarket
from .logging import MarketEventLogger

logger = logging.getLogger(__name__)

MarketFactory = Callable[["InMemoryCustody", "BlockClock", Optional[MarketEventLogger]], PredictionMarket]


class BlockClock:
    """Monotonic block-height counter."""

    def __init__(self, start_height: int = 1):
        if start_height < 0:
            raise ValueError("start_height must be non-negative")
        self._height = start_height

    @property
    def height(self) -> int:
        return self._height

    def mine_empty_blocks(self, count: int = 1) -> int:
        if count < 0:
            raise ValueError("cannot mine a negative number of blocks")
        self._height += count
        return self._height


class InMemoryCustody:
    """Integer balances per principal with all-or-nothing transfers."""

    def __init__(self, balances: Optional[Mapping[str, int]] = None):
        self._balances: Dict[str, int] = {}
        for principal, amount in (balances or {}).items():
            self.deposit(principal, amount)

    def deposit(self, principal: str, amount: int) -> None:
        if amount < 0:
            raise ValueError("deposit amount cannot be negative")
        self._balances[principal] = self._balances.get(principal, 0) + amount

    def balance_of(self, principal: str) -> int:
        return self._balances.get(principal, 0)

    def balances(self) -> Dict[str, int]:
        return dict(self._balances)

    def transfer(self, sender: str, recipient: str, amount: int) -> None:
        if amount <= 0:
            raise TransferFailed(f"transfer amount must be positive, got {amount}")
        available = self.balance_of(sender)
        if available < amount:
            raise TransferFailed(f"{sender} holds {available}, cannot send {amount}")
        self._balances[sender] = available - amount
        self._balances[recipient] = self.balance_of(recipient) + amount


@dataclass(slots=True)
class CallResult:
    """Outcome of a host call: ``ok`` with a value, or ``err`` with a code."""

    ok: bool
    value: Any = None
    error_code: Optional[int] = None
    error_name: Optional[str] = None
    message: str = ""

    @classmethod
    def success(cls, value: Any) -> "CallResult":
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, error: MarketError) -> "CallResult":
        return cls(ok=False, error_code=error.code, error_name=error.name, message=str(error))

    def to_dict(self) -> Dict[str, Any]:
        if self.ok:
            return {"ok": self.value}
        return {"err": self.error_code, "name": self.error_name}


PUBLIC_FUNCTIONS = {
    "initialize-market": "initialize",
    "place-bet": "place_bet",
    "resolve-market": "resolve",
    "claim-winnings": "claim_winnings",
    "sweep-dust": "sweep_dust",
}

READ_ONLY_FUNCTIONS = {
    "get-market-info": "get_market_info",
    "get-market-status": "get_market_status",
    "get-bet": "get_bet",
    "preview-payout": "preview_payout",
}


def _default_market(custody, clock, event_logger) -> PredictionMarket:
    return PredictionMarket(custody=custody, clock=clock, event_sink=event_logger)


class MarketHost:
    """Executes calls against one market, one at a time.

    Args:
        accounts: Starting balances per principal
        start_height: Initial block height
        auto_mine: Mine one block after every public call
        market_factory: Builds the market from (custody, clock, event_logger)
        event_logger: Optional structured logger for events and rejections
    """

    def __init__(
        self,
        *,
        accounts: Optional[Mapping[str, int]] = None,
        start_height: int = 1,
        auto_mine: bool = True,
        market_factory: Optional[MarketFactory] = None,
        event_logger: Optional[MarketEventLogger] = None,
    ) -> None:
        self.clock = BlockClock(start_height)
        self.custody = InMemoryCustody(accounts)
        self.auto_mine = auto_mine
        self.event_logger = event_logger
        factory = market_factory or _default_market
        self.market = factory(self.custody, self.clock, event_logger)

    @property
    def block_height(self) -> int:
        return self.clock.height

    def mine_empty_blocks(self, count: int = 1) -> int:
        return self.clock.mine_empty_blocks(count)

    def balance_of(self, principal: str) -> int:
        return self.custody.balance_of(principal)

    def call_public(self, function: str, args: Sequence[Any] | Mapping[str, Any] = (), sender: str = "") -> CallResult:
        method = self._resolve(function, PUBLIC_FUNCTIONS)
        try:
            return self._invoke(function, method, args, sender)
        finally:
            if self.auto_mine:
                self.clock.mine_empty_blocks(1)

    def call_read_only(self, function: str, args: Sequence[Any] | Mapping[str, Any] = ()) -> CallResult:
        method = self._resolve(function, READ_ONLY_FUNCTIONS)
        return self._invoke(function, method, args, None)

    def _resolve(self, function: str, table: Mapping[str, str]) -> Callable[..., Any]:
        try:
            return getattr(self.market, table[function])
        except KeyError:
            raise ValueError(f"Unknown function '{function}'") from None

    def _invoke(self, function: str, method: Callable[..., Any], args, sender: Optional[str]) -> CallResult:
        lead = () if sender is None else (sender,)
        height = self.clock.height
        try:
            if isinstance(args, Mapping):
                value = method(*lead, **args)
            else:
                value = method(*lead, *args)
        except MarketError as exc:
            logger.debug("%s by %s rejected at height %d: %s (%d)", function, sender, height, exc.name, exc.code)
            if self.event_logger is not None and sender is not None:
                self.event_logger.log_rejection(
                    height=height,
                    operation=function,
                    sender=sender,
                    error_code=exc.code,
                    error_name=exc.name,
                    message=str(exc),
                )
            return CallResult.failure(exc)
        return CallResult.success(value)
