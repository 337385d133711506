"""Tests for yieldtrader.config — environment variable loading and validation."""

import logging
import os

import pytest

from yieldtrader.config import SimulatorConfig, configure_logging, load_config


_VARS = [
    "SIM_INITIAL_BALANCE",
    "SIM_RISK_PER_TRADE",
    "SIM_MAX_OPEN_TRADES",
    "SIM_AUTO_CLOSE_ON_TARGET",
    "SIM_ENABLE_DEFI",
    "LOG_LEVEL",
]


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    """Run each test against a private copy of the environment.

    load_dotenv writes straight into os.environ, so the copy keeps values
    read from a test .env file out of later tests.
    """
    env = {k: v for k, v in os.environ.items() if k not in _VARS}
    monkeypatch.setattr(os, "environ", env)


@pytest.fixture
def env_path(tmp_path):
    """A non-existent .env so load_dotenv never reads a real file."""
    return str(tmp_path / "nonexistent.env")


class TestLoadConfig:

    def test_defaults(self, env_path):
        cfg = load_config(env_path=env_path)
        assert cfg.initial_balance == 10_000.0
        assert cfg.trading_risk_per_trade == 0.02
        assert cfg.max_open_trades == 3
        assert cfg.auto_close_on_target is True
        assert cfg.enable_defi is True
        assert cfg.log_level == "INFO"

    def test_overrides(self, monkeypatch, env_path):
        monkeypatch.setenv("SIM_INITIAL_BALANCE", "2500.5")
        monkeypatch.setenv("SIM_RISK_PER_TRADE", "0.01")
        monkeypatch.setenv("SIM_MAX_OPEN_TRADES", "0")
        monkeypatch.setenv("SIM_AUTO_CLOSE_ON_TARGET", "no")
        monkeypatch.setenv("SIM_ENABLE_DEFI", "FALSE")
        monkeypatch.setenv("LOG_LEVEL", "debug")
        cfg = load_config(env_path=env_path)
        assert cfg.initial_balance == 2500.5
        assert cfg.trading_risk_per_trade == 0.01
        assert cfg.max_open_trades == 0
        assert cfg.auto_close_on_target is False
        assert cfg.enable_defi is False
        assert cfg.log_level == "DEBUG"

    def test_reads_dotenv_file(self, tmp_path):
        env_file = tmp_path / ".env"
        env_file.write_text("SIM_INITIAL_BALANCE=777\nSIM_ENABLE_DEFI=0\n")
        cfg = load_config(env_path=str(env_file))
        assert cfg.initial_balance == 777.0
        assert cfg.enable_defi is False

    def test_malformed_number(self, monkeypatch, env_path):
        monkeypatch.setenv("SIM_MAX_OPEN_TRADES", "three")
        with pytest.raises(ValueError, match="SIM_MAX_OPEN_TRADES"):
            load_config(env_path=env_path)

    def test_malformed_bool(self, monkeypatch, env_path):
        monkeypatch.setenv("SIM_ENABLE_DEFI", "maybe")
        with pytest.raises(ValueError, match="SIM_ENABLE_DEFI"):
            load_config(env_path=env_path)

    def test_out_of_range_risk(self, monkeypatch, env_path):
        monkeypatch.setenv("SIM_RISK_PER_TRADE", "2")
        with pytest.raises(ValueError, match="trading_risk_per_trade"):
            load_config(env_path=env_path)


class TestValidate:

    def test_valid_config_returns_self(self):
        cfg = SimulatorConfig()
        assert cfg.validate() is cfg

    def test_negative_position_limit(self):
        with pytest.raises(ValueError, match="max_open_trades"):
            SimulatorConfig(max_open_trades=-1).validate()

    def test_negative_balance(self):
        with pytest.raises(ValueError, match="initial_balance"):
            SimulatorConfig(initial_balance=-10.0).validate()


class TestConfigureLogging:

    def test_applies_level(self, monkeypatch):
        calls = {}
        monkeypatch.setattr(logging, "basicConfig", lambda **kw: calls.update(kw))
        configure_logging(SimulatorConfig(log_level="WARNING"))
        assert calls["level"] == logging.WARNING
        assert "%(levelname)s" in calls["format"]

    def test_unknown_level_falls_back_to_info(self, monkeypatch):
        calls = {}
        monkeypatch.setattr(logging, "basicConfig", lambda **kw: calls.update(kw))
        configure_logging(SimulatorConfig(log_level="CHATTY"))
        assert calls["level"] == logging.INFO
