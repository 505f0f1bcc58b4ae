"""Shared fixtures: a funded host and a bare market on an in-memory chain."""

import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from binary_market.market import PredictionMarket  # noqa: E402
from binary_market.simulation import BlockClock, InMemoryCustody, MarketHost  # noqa: E402

QUESTION = "Will Bitcoin reach $100,000 by end of 2025?"
ACCOUNTS = {
    "deployer": 0,
    "wallet_1": 100_000,
    "wallet_2": 100_000,
    "wallet_3": 100_000,
}
CONFIG_VARS = (
    "MARKET_PRINCIPAL",
    "QUESTION_MAX_LENGTH",
    "REPEAT_BET_POLICY",
    "DUST_POLICY",
    "ENABLE_EVENT_LOG",
    "LOG_DIR",
    "LOG_LEVEL",
    "AUTO_MINE",
    "SHOW_PROGRESS",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in CONFIG_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def host():
    return MarketHost(accounts=ACCOUNTS)


@pytest.fixture
def clock():
    return BlockClock(start_height=1)


@pytest.fixture
def custody():
    return InMemoryCustody(ACCOUNTS)


@pytest.fixture
def make_market(clock, custody):
    def _make(**kwargs):
        return PredictionMarket(custody=custody, clock=clock, **kwargs)

    return _make


@pytest.fixture
def market(make_market):
    return make_market()


@pytest.fixture
def open_market(market, clock):
    market.initialize("deployer", QUESTION, clock.height + 100)
    return market
