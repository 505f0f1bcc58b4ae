"""Utility modules for the prediction market."""

from .config import MarketConfig, create_host_from_config, create_market_from_config
from .scenarios import list_scenario_files, load_scenario, validate_scenario

__all__ = [
    "MarketConfig",
    "create_market_from_config",
    "create_host_from_config",
    "load_scenario",
    "validate_scenario",
    "list_scenario_files",
]
