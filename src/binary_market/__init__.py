"""Single binary-outcome prediction market with parimutuel settlement."""

import logging

from .errors import ERROR_CODES, MarketError
from .market import NO, YES, DustPolicy, PredictionMarket, RepeatBetPolicy
from .simulation import MarketHost

logger = logging.getLogger("binary_market")
logger.setLevel(logging.INFO)

if not logger.hasHandlers():
    handler = logging.StreamHandler()
    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)

__all__ = [
    "PredictionMarket",
    "MarketHost",
    "MarketError",
    "ERROR_CODES",
    "RepeatBetPolicy",
    "DustPolicy",
    "YES",
    "NO",
]
