import logging

import pytest

from binary_market.market import DustPolicy, RepeatBetPolicy
from binary_market.simulation import BlockClock, InMemoryCustody, MarketEventLogger
from binary_market.utils import MarketConfig, create_host_from_config, create_market_from_config


@pytest.fixture
def config(tmp_path):
    # An explicit, empty config file keeps a developer's config.env out of the tests
    path = tmp_path / "config.env"
    path.write_text("")
    return MarketConfig(str(path))


def test_defaults(config):
    assert config.market_principal == "prediction-market"
    assert config.question_max_length == 256
    assert config.repeat_bet_policy is RepeatBetPolicy.REJECT
    assert config.dust_policy is DustPolicy.UNCLAIMED
    assert config.enable_event_log is False
    assert config.log_level == logging.INFO
    assert config.auto_mine is True
    assert config.show_progress is True
    assert str(config.log_dir) == "market_logs"


def test_reads_config_file(tmp_path):
    path = tmp_path / "config.env"
    path.write_text(
        "# market settings\n"
        "REPEAT_BET_POLICY=merge\n"
        "DUST_POLICY = owner\n"
        "QUESTION_MAX_LENGTH=64\n"
        "\n"
        "AUTO_MINE=off\n"
    )

    config = MarketConfig(str(path))

    assert config.repeat_bet_policy is RepeatBetPolicy.MERGE
    assert config.dust_policy is DustPolicy.OWNER
    assert config.question_max_length == 64
    assert config.auto_mine is False


def test_environment_wins_over_file(tmp_path, monkeypatch):
    monkeypatch.setenv("DUST_POLICY", "unclaimed")
    path = tmp_path / "config.env"
    path.write_text("DUST_POLICY=owner\n")

    assert MarketConfig(str(path)).dust_policy is DustPolicy.UNCLAIMED


@pytest.mark.parametrize(
    "name, value, prop",
    [
        ("REPEAT_BET_POLICY", "stack", "repeat_bet_policy"),
        ("DUST_POLICY", "burn", "dust_policy"),
        ("LOG_LEVEL", "LOUD", "log_level"),
    ],
)
def test_unknown_values_raise(config, monkeypatch, name, value, prop):
    monkeypatch.setenv(name, value)

    with pytest.raises(ValueError):
        getattr(config, prop)


def test_create_market_from_config(config, monkeypatch):
    monkeypatch.setenv("MARKET_PRINCIPAL", "escrow")
    monkeypatch.setenv("REPEAT_BET_POLICY", "merge")
    monkeypatch.setenv("LOG_LEVEL", "WARNING")
    custody = InMemoryCustody({"wallet_1": 100})

    market = create_market_from_config(config, custody=custody, clock=BlockClock())
    market.initialize("deployer", "Q?", 10)
    market.place_bet("wallet_1", True, 30)
    market.place_bet("wallet_1", True, 20)

    assert market.ledger.policy is RepeatBetPolicy.MERGE
    assert custody.balance_of("escrow") == 50
    assert logging.getLogger("binary_market").level == logging.WARNING
    logging.getLogger("binary_market").setLevel(logging.INFO)


def test_create_host_from_config(config, monkeypatch, tmp_path):
    monkeypatch.setenv("ENABLE_EVENT_LOG", "true")
    monkeypatch.setenv("LOG_DIR", str(tmp_path / "logs"))
    monkeypatch.setenv("DUST_POLICY", "owner")

    host = create_host_from_config(config, accounts={"wallet_1": 10}, run_id="cfg")
    host.call_public("initialize-market", ["Q?", 5], "deployer")

    assert isinstance(host.event_logger, MarketEventLogger)
    assert host.event_logger.run_id == "cfg"
    assert host.market.dust_policy is DustPolicy.OWNER
    assert host.market.event_sink is host.event_logger
    assert len(host.event_logger.event_records) == 1
