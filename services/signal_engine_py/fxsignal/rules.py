"""
Decide whether the latest bar of a candle series carries a trade signal.

Nine boolean conditions are evaluated at the last index: trend against
the 200 SMA, the 20/50 EMA stack, RSI zones, MACD/signal crossovers and
whether price sits inside the Bollinger Bands.  Bullish and bearish
evidence is counted separately and a BUY or SELL is emitted once either
count reaches ``min_score``.  A condition whose inputs are unavailable is
simply false.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional, Sequence, Tuple

from .indicators import (
    compute_bollinger,
    compute_ema,
    compute_macd,
    compute_rsi,
    compute_sma,
)
from .models import (
    Candle,
    IndicatorSeries,
    Side,
    Signal,
    closes_of,
    validate_candles,
)

logger = logging.getLogger("signal_rules")


@dataclass(frozen=True)
class RuleParams:
    ema_fast: int = 20
    ema_slow: int = 50
    sma_trend: int = 200
    rsi_period: int = 14
    rsi_bull: float = 55.0
    rsi_bear: float = 45.0
    macd_fast: int = 12
    macd_slow: int = 26
    macd_signal: int = 9
    bb_period: int = 20
    bb_mult: float = 2.0
    min_score: int = 4


DEFAULT_PARAMS = RuleParams()


@dataclass(frozen=True)
class Conditions:
    above_sma200: bool = False
    below_sma200: bool = False
    ema_bull: bool = False
    ema_bear: bool = False
    rsi_bull: bool = False
    rsi_bear: bool = False
    macd_bull: bool = False
    macd_bear: bool = False
    bb_ok: bool = False

    @property
    def buy_flags(self) -> Tuple[bool, ...]:
        return (self.above_sma200, self.ema_bull, self.rsi_bull, self.macd_bull, self.bb_ok)

    @property
    def sell_flags(self) -> Tuple[bool, ...]:
        # bb_ok is direction-agnostic and counts for both sides
        return (self.below_sma200, self.ema_bear, self.rsi_bear, self.macd_bear, self.bb_ok)


@dataclass(frozen=True)
class Evaluation:
    conditions: Conditions
    score_buy: int
    score_sell: int
    signal: Optional[Signal]
    price: Optional[float] = field(default=None)


def _at(series: IndicatorSeries, i: int) -> Optional[float]:
    if 0 <= i < len(series):
        return series[i]
    return None


def _gt(a: Optional[float], b: Optional[float]) -> bool:
    return a is not None and b is not None and a > b


def _lt(a: Optional[float], b: Optional[float]) -> bool:
    return a is not None and b is not None and a < b


def _cross_up(series1: IndicatorSeries, series2: IndicatorSeries, i: int) -> bool:
    """True when series1 moves from at-or-below series2 at i-1 to above it at i."""
    prev1, prev2 = _at(series1, i - 1), _at(series2, i - 1)
    if prev1 is None or prev2 is None:
        return False
    return _gt(_at(series1, i), _at(series2, i)) and prev1 <= prev2


def _cross_down(series1: IndicatorSeries, series2: IndicatorSeries, i: int) -> bool:
    """True when series1 moves from at-or-above series2 at i-1 to below it at i."""
    prev1, prev2 = _at(series1, i - 1), _at(series2, i - 1)
    if prev1 is None or prev2 is None:
        return False
    return _lt(_at(series1, i), _at(series2, i)) and prev1 >= prev2


def evaluate_conditions(
    closes: Sequence[float], params: RuleParams = DEFAULT_PARAMS
) -> Conditions:
    """Evaluate the nine conditions at the last index of ``closes``."""
    if not closes:
        return Conditions()

    ema_fast = compute_ema(closes, params.ema_fast)
    ema_slow = compute_ema(closes, params.ema_slow)
    sma_trend = compute_sma(closes, params.sma_trend)
    rsi = compute_rsi(closes, params.rsi_period)
    macd = compute_macd(closes, params.macd_fast, params.macd_slow, params.macd_signal)
    bb = compute_bollinger(closes, params.bb_period, params.bb_mult)

    i = len(closes) - 1
    p = closes[i]
    return Conditions(
        above_sma200=_gt(p, sma_trend[i]),
        below_sma200=_lt(p, sma_trend[i]),
        ema_bull=_gt(ema_fast[i], ema_slow[i]),
        ema_bear=_lt(ema_fast[i], ema_slow[i]),
        rsi_bull=_gt(rsi[i], params.rsi_bull),
        rsi_bear=_lt(rsi[i], params.rsi_bear),
        macd_bull=_cross_up(macd.macd, macd.signal, i),
        macd_bear=_cross_down(macd.macd, macd.signal, i),
        bb_ok=_gt(p, bb.lower[i]) and _lt(p, bb.upper[i]),
    )


def score_conditions(conditions: Conditions) -> Tuple[int, int]:
    """Return ``(score_buy, score_sell)``."""
    return sum(conditions.buy_flags), sum(conditions.sell_flags)


def _strength(score: int) -> int:
    return max(1, min(3, score - 1))


def resolve_signal(score_buy: int, score_sell: int, min_score: int = 4) -> Optional[Signal]:
    """
    Turn the two scores into at most one signal.

    BUY is checked first, so if both scores qualify the result is BUY.
    """
    if score_buy >= min_score:
        return Signal(side=Side.BUY, strength=_strength(score_buy))
    if score_sell >= min_score:
        return Signal(side=Side.SELL, strength=_strength(score_sell))
    return None


def decide_with_details(
    candles: Sequence[Candle], params: RuleParams = DEFAULT_PARAMS
) -> Evaluation:
    validate_candles(candles)
    closes = closes_of(candles)
    conditions = evaluate_conditions(closes, params)
    score_buy, score_sell = score_conditions(conditions)
    signal = resolve_signal(score_buy, score_sell, params.min_score)
    logger.debug(
        "scores buy=%d sell=%d price=%s -> %s",
        score_buy,
        score_sell,
        closes[-1],
        signal.side.value if signal else "none",
    )
    return Evaluation(
        conditions=conditions,
        score_buy=score_buy,
        score_sell=score_sell,
        signal=signal,
        price=closes[-1],
    )


def decide(candles: Sequence[Candle], params: RuleParams = DEFAULT_PARAMS) -> Optional[Signal]:
    """Return the signal for the last bar of ``candles``, or None."""
    return decide_with_details(candles, params).signal
