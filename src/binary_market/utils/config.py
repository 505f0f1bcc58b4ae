"""Configuration management for the prediction market.

Reads configuration from config.env file or environment variables.
"""

import logging
import os
from pathlib import Path
from typing import Mapping, Optional

from ..interfaces import HeightSource, ValueTransfer
from ..market import DustPolicy, PredictionMarket, RepeatBetPolicy

logger = logging.getLogger(__name__)

TRUTHY = ("true", "1", "yes", "on")


class MarketConfig:
    """Configuration manager for market settings."""

    def __init__(self, config_file: Optional[str] = None):
        """
        Initialize configuration.

        Args:
            config_file: Path to .env file (default: config.env in project root)
        """
        self._load_env(config_file)

    def _load_env(self, config_file: Optional[str]):
        """Load environment variables from file."""
        if config_file is None:
            # Look for config.env in project root
            project_root = Path(__file__).parent.parent.parent.parent
            config_file = project_root / "config.env"

        config_path = Path(config_file)
        if config_path.exists():
            with open(config_path) as f:
                for line in f:
                    line = line.strip()
                    if line and not line.startswith('#') and '=' in line:
                        key, value = line.split('=', 1)
                        key = key.strip()
                        value = value.strip()
                        # Don't override existing env vars
                        if key not in os.environ:
                            os.environ[key] = value

    @staticmethod
    def _flag(name: str, default: str) -> bool:
        return os.getenv(name, default).lower() in TRUTHY

    @property
    def market_principal(self) -> str:
        """Get the custody principal that holds staked funds."""
        return os.getenv("MARKET_PRINCIPAL", "prediction-market")

    @property
    def question_max_length(self) -> int:
        return int(os.getenv("QUESTION_MAX_LENGTH", "256"))

    @property
    def repeat_bet_policy(self) -> RepeatBetPolicy:
        """Get the repeat-bet policy (reject or merge)."""
        value = os.getenv("REPEAT_BET_POLICY", "reject").lower()
        try:
            return RepeatBetPolicy(value)
        except ValueError:
            raise ValueError(
                f"Unknown repeat bet policy: {value}. Must be 'reject' or 'merge'"
            ) from None

    @property
    def dust_policy(self) -> DustPolicy:
        """Get the dust policy (unclaimed or owner)."""
        value = os.getenv("DUST_POLICY", "unclaimed").lower()
        try:
            return DustPolicy(value)
        except ValueError:
            raise ValueError(
                f"Unknown dust policy: {value}. Must be 'unclaimed' or 'owner'"
            ) from None

    @property
    def enable_event_log(self) -> bool:
        return self._flag("ENABLE_EVENT_LOG", "false")

    @property
    def log_dir(self) -> Path:
        return Path(os.getenv("LOG_DIR", "market_logs"))

    @property
    def log_level(self) -> int:
        """Get the package logger level."""
        name = os.getenv("LOG_LEVEL", "INFO").upper()
        level = logging.getLevelName(name)
        if not isinstance(level, int):
            raise ValueError(f"Unknown log level: {name}")
        return level

    @property
    def auto_mine(self) -> bool:
        """Get whether the host mines a block after each public call."""
        return self._flag("AUTO_MINE", "true")

    @property
    def show_progress(self) -> bool:
        return self._flag("SHOW_PROGRESS", "true")


def create_market_from_config(
    config: Optional[MarketConfig] = None,
    *,
    custody: ValueTransfer,
    clock: HeightSource,
    event_sink=None,
) -> PredictionMarket:
    """
    Create a market wired to the given host primitives.

    Args:
        config: Configuration object (default: loads from config.env)
        custody: Value-transfer primitive supplied by the host
        clock: Block-height source supplied by the host
        event_sink: Optional event receiver (e.g. MarketEventLogger)

    Returns:
        PredictionMarket instance

    Example:
        >>> config = MarketConfig()
        >>> market = create_market_from_config(config, custody=custody, clock=clock)
    """
    if config is None:
        config = MarketConfig()

    logging.getLogger("binary_market").setLevel(config.log_level)
    logger.info(
        "Creating market (repeat_bets=%s, dust=%s, principal=%s)",
        config.repeat_bet_policy.value,
        config.dust_policy.value,
        config.market_principal,
    )
    return PredictionMarket(
        custody=custody,
        clock=clock,
        principal=config.market_principal,
        question_max_length=config.question_max_length,
        repeat_bet_policy=config.repeat_bet_policy,
        dust_policy=config.dust_policy,
        event_sink=event_sink,
    )


def create_host_from_config(
    config: Optional[MarketConfig] = None,
    *,
    accounts: Optional[Mapping[str, int]] = None,
    start_height: int = 1,
    run_id: str = "run_001",
):
    """
    Create an in-memory host running a market built from configuration.

    Args:
        config: Configuration object (default: loads from config.env)
        accounts: Starting balances per principal
        start_height: Initial block height
        run_id: Event log run identifier (used when ENABLE_EVENT_LOG is set)

    Returns:
        MarketHost instance
    """
    from ..simulation.host import MarketHost
    from ..simulation.logging import create_event_logger

    if config is None:
        config = MarketConfig()

    event_logger = None
    if config.enable_event_log:
        event_logger = create_event_logger(run_id=run_id, log_dir=config.log_dir)

    return MarketHost(
        accounts=accounts,
        start_height=start_height,
        auto_mine=config.auto_mine,
        event_logger=event_logger,
        market_factory=lambda custody, clock, sink: create_market_from_config(
            config, custody=custody, clock=clock, event_sink=sink
        ),
    )
