"""Deterministic tests for the strategy engine and trend detection.

Fixtures are linear price ramps: on a slope-1 series EMA(20) and EMA(50)
trail price by exactly 9.5 and 24.5, so every level below is exact.
"""

import pytest

from yieldtrader.strategy.engine import generate_trade_decision
from yieldtrader.strategy.models import (
    AccountRiskProfile,
    CandleData,
    Directional,
    Hold,
)
from yieldtrader.strategy.trend import detect_trend


# ── Candle fixtures ──────────────────────────────────────────────────────


def _make_candle(i: int, o: float, h: float, l: float, c: float, vol: float = 1000.0) -> CandleData:
    return CandleData(time=f"2025-01-{i // 24 + 1:02d}T{i % 24:02d}:00:00Z",
                      open=o, high=h, low=l, close=c, volume=vol)


def _ramp(start: float, step: float, count: int) -> list[CandleData]:
    """Candles whose close moves by *step* per bar, ±1 wick."""
    candles = []
    for i in range(count):
        close = start + step * i
        candles.append(_make_candle(i, close - step, close + 1, close - 1, close))
    return candles


def _flat(count: int, price: float = 100.0) -> list[CandleData]:
    return [_make_candle(i, price, price + 1, price - 1, price) for i in range(count)]


ACCOUNT = AccountRiskProfile(balance=10_000.0, risk_per_trade=0.02)


# ── Preconditions ────────────────────────────────────────────────────────


class TestInsufficientData:

    def test_fewer_than_50_candles_holds(self):
        """49 candles → HOLD regardless of a perfect uptrend."""
        decision = generate_trade_decision(_ramp(100.0, 1.0, 49), ACCOUNT)
        assert isinstance(decision, Hold)
        assert decision.action == "HOLD"
        assert decision.explanation.startswith("Insufficient data")

    def test_empty_history_holds(self):
        decision = generate_trade_decision([], ACCOUNT)
        assert isinstance(decision, Hold)


# ── Directional decisions ────────────────────────────────────────────────


class TestLongSignal:

    def test_uptrend_goes_long(self):
        """Rising ramp: EMA20 > EMA50, higher highs/lows → LONG."""
        decision = generate_trade_decision(_ramp(100.0, 1.0, 60), ACCOUNT)
        assert isinstance(decision, Directional)
        assert decision.action == "LONG"
        # Entry = last close, SL = lowest low of the last 20 bars
        assert decision.entry == pytest.approx(159.0)
        assert decision.stop_loss == pytest.approx(139.0)
        # TP = entry + 2 × (entry − SL)
        assert decision.take_profit == pytest.approx(199.0)
        # size = 10_000 × 0.02 / 20
        assert decision.position_size == pytest.approx(10.0)
        assert "LONG signal" in decision.explanation
        assert "Risk/Reward: 1:2.00" in decision.explanation

    def test_risk_amount_equals_balance_fraction(self):
        decision = generate_trade_decision(
            _ramp(50.0, 0.5, 80), AccountRiskProfile(balance=5_000.0, risk_per_trade=0.01),
        )
        assert isinstance(decision, Directional)
        at_risk = decision.position_size * (decision.entry - decision.stop_loss)
        assert at_risk == pytest.approx(50.0)

    def test_stop_not_below_entry_holds(self):
        """Bullish setup whose swing low sits at entry → HOLD, no inverted risk."""
        candles = _ramp(100.0, 1.0, 59)
        # Last bar closes at the 20-bar swing low (139) while its own range
        # keeps the higher-high / higher-low structure intact.
        candles.append(_make_candle(59, 158.0, 161.0, 160.0, 139.0))
        decision = generate_trade_decision(candles, ACCOUNT)
        assert isinstance(decision, Hold)
        assert "valid stop loss" in decision.explanation

    def test_zero_balance_gives_zero_size(self):
        decision = generate_trade_decision(
            _ramp(100.0, 1.0, 60), AccountRiskProfile(balance=0.0, risk_per_trade=0.02),
        )
        assert isinstance(decision, Directional)
        assert decision.position_size == 0.0


class TestShortSignal:

    def test_downtrend_goes_short(self):
        decision = generate_trade_decision(_ramp(200.0, -1.0, 60), ACCOUNT)
        assert isinstance(decision, Directional)
        assert decision.action == "SHORT"
        assert decision.entry == pytest.approx(141.0)
        assert decision.stop_loss == pytest.approx(161.0)
        assert decision.take_profit == pytest.approx(101.0)
        assert decision.position_size == pytest.approx(10.0)
        assert "Bearish structure detected" in decision.explanation


class TestHold:

    def test_flat_market_holds_with_ema_values(self):
        decision = generate_trade_decision(_flat(60), ACCOUNT)
        assert isinstance(decision, Hold)
        assert "EMA20 (100.00)" in decision.explanation
        assert "EMA50 (100.00)" in decision.explanation

    def test_trend_without_structure_holds(self):
        """EMAs aligned up but the last 10 bars are flat → HOLD."""
        candles = _ramp(100.0, 1.0, 50)
        last = candles[-1].close
        candles += [_make_candle(50 + i, last, last + 1, last - 1, last) for i in range(10)]
        decision = generate_trade_decision(candles, ACCOUNT)
        assert isinstance(decision, Hold)

    def test_engine_is_stateless(self):
        candles = _ramp(100.0, 1.0, 60)
        assert generate_trade_decision(candles, ACCOUNT) == generate_trade_decision(candles, ACCOUNT)


# ── Trend detection ──────────────────────────────────────────────────────


class TestDetectTrend:

    def test_bullish(self):
        trend = detect_trend(_ramp(100.0, 1.0, 60))
        assert trend.direction == "bullish"
        assert trend.ema_fast_value == pytest.approx(149.5)
        assert trend.ema_slow_value == pytest.approx(134.5)
        assert trend.slope == pytest.approx(15.0)

    def test_bearish(self):
        assert detect_trend(_ramp(200.0, -1.0, 60)).direction == "bearish"

    def test_flat(self):
        assert detect_trend(_flat(60)).direction == "flat"

    def test_empty_history(self):
        assert detect_trend([]) is None
