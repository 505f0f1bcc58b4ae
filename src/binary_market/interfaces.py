"""Protocol definitions for the collaborators the market depends on.

The market never keeps time or holds funds itself; the host supplies both.
"""

from __future__ import annotations

from typing import Mapping, Protocol


class HeightSource(Protocol):
    """Monotonic block-height counter."""

    @property
    def height(self) -> int:
        ...


class ValueTransfer(Protocol):
    """Atomic value movement between principals.

    Implementations must either move the full amount or raise
    ``binary_market.errors.TransferFailed`` without changing any balance.
    """

    def transfer(self, sender: str, recipient: str, amount: int) -> None:
        ...


class EventSink(Protocol):
    """Receives committed market events (see ``MarketEventLogger``)."""

    def log_event(self, height: int, event_type: str, data: Mapping[str, object]) -> None:
        ...
