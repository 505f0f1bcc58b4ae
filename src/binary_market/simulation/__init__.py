"""Exports for the simulation subpackage."""

from .host import BlockClock, CallResult, InMemoryCustody, MarketHost
from .logging import MarketEventLogger, create_event_logger
from .runner import ScenarioResult, ScenarioRunner, StepOutcome, run_scenario_file

__all__ = [
    "BlockClock",
    "CallResult",
    "InMemoryCustody",
    "MarketHost",
    "MarketEventLogger",
    "create_event_logger",
    "ScenarioRunner",
    "ScenarioResult",
    "StepOutcome",
    "run_scenario_file",
]
