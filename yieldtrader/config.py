"""YieldTrader — simulator configuration.

Loads .env variables into a typed config object.
Validates values on startup.
"""

import logging
import os
from dataclasses import dataclass

from dotenv import load_dotenv


_TRUE_VALUES = ("1", "true", "yes", "on")
_FALSE_VALUES = ("0", "false", "no", "off")


@dataclass(frozen=True)
class SimulatorConfig:
    """Typed configuration for a single simulated account."""

    initial_balance: float = 10_000.0
    trading_risk_per_trade: float = 0.02  # fraction of balance, e.g. 0.02 = 2 %
    max_open_trades: int = 3
    auto_close_on_target: bool = True
    enable_defi: bool = True
    log_level: str = "INFO"

    def validate(self) -> "SimulatorConfig":
        """Raise ``ValueError`` when a value is out of range; return self."""
        if self.initial_balance < 0:
            raise ValueError(
                f"initial_balance must be non-negative, got {self.initial_balance}"
            )
        if not 0 <= self.trading_risk_per_trade <= 1:
            raise ValueError(
                "trading_risk_per_trade must be within [0, 1], "
                f"got {self.trading_risk_per_trade}"
            )
        if self.max_open_trades < 0:
            raise ValueError(
                f"max_open_trades must be non-negative, got {self.max_open_trades}"
            )
        return self


def _parse_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None or raw == "":
        return default
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ValueError(f"Invalid boolean for {name}: {raw!r}")


def _parse_number(name: str, default: str, cast):
    raw = os.environ.get(name, default)
    try:
        return cast(raw)
    except ValueError:
        raise ValueError(f"Invalid value for {name}: {raw!r}") from None


def load_config(env_path: str | None = None) -> SimulatorConfig:
    """Load configuration from environment variables.

    Every variable is optional. Raises ``ValueError`` with a message naming
    the variable when a value cannot be parsed or is out of range.
    """
    load_dotenv(dotenv_path=env_path)

    config = SimulatorConfig(
        initial_balance=_parse_number("SIM_INITIAL_BALANCE", "10000", float),
        trading_risk_per_trade=_parse_number("SIM_RISK_PER_TRADE", "0.02", float),
        max_open_trades=_parse_number("SIM_MAX_OPEN_TRADES", "3", int),
        auto_close_on_target=_parse_bool("SIM_AUTO_CLOSE_ON_TARGET", True),
        enable_defi=_parse_bool("SIM_ENABLE_DEFI", True),
        log_level=os.environ.get("LOG_LEVEL", "INFO").upper(),
    )
    return config.validate()


def configure_logging(config: SimulatorConfig) -> None:
    """Apply the configured log level to the root handler."""
    logging.basicConfig(
        level=getattr(logging, config.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(message)s",
    )
