"""Core market modules.

- state: the singleton Market record and pure lifecycle/status derivation
- ledger: one Bet per participant, repeat-bet policy
- settlement: payout formula and dust accounting
- contract: PredictionMarket, the public operations
"""

from .contract import DEFAULT_PRINCIPAL, PredictionMarket
from .ledger import Bet, BetLedger, RepeatBetPolicy
from .settlement import DustPolicy, Settlement, compute_dust, compute_payout, settle
from .state import NO, YES, Market, MarketPhase, MarketStatus, derive_phase, derive_status

__all__ = [
    "PredictionMarket",
    "DEFAULT_PRINCIPAL",
    "Bet",
    "BetLedger",
    "RepeatBetPolicy",
    "DustPolicy",
    "Settlement",
    "compute_payout",
    "compute_dust",
    "settle",
    "Market",
    "MarketPhase",
    "MarketStatus",
    "derive_phase",
    "derive_status",
    "YES",
    "NO",
]
