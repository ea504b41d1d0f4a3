"""Implement the technical indicators used by the signal rules.

SMA, EMA, RSI, MACD and Bollinger Bands are computed with pandas and
numpy and returned as tuples index-aligned with the input closes.  An
entry is ``None`` wherever there is not enough history to compute it;
callers must never treat it as zero.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

import numpy as np
import pandas as pd

from .models import IndicatorSeries, InvalidInputError, as_optional_floats

RSI_EPSILON = 1e-8
# RS used after the seed bar once the average loss has decayed to zero
RSI_ZERO_LOSS_RS = 100.0


@dataclass(frozen=True)
class MACDResult:
    macd: IndicatorSeries
    signal: IndicatorSeries
    hist: IndicatorSeries


@dataclass(frozen=True)
class BollingerBands:
    basis: IndicatorSeries
    upper: IndicatorSeries
    lower: IndicatorSeries


def _as_series(values: Sequence[float]) -> pd.Series:
    close = pd.Series(list(values), dtype=float)
    if not np.isfinite(close.to_numpy()).all():
        raise InvalidInputError("price series contains non-finite values")
    return close


def _check_period(name: str, period: int) -> None:
    if period < 1:
        raise ValueError(f"{name} must be >= 1, got {period}")


def _sma(close: pd.Series, window: int) -> pd.Series:
    return close.rolling(window=window, min_periods=window).mean()


def _ema(close: pd.Series, window: int) -> pd.Series:
    # adjust=False seeds with the first value and recurses from index 0;
    # min_periods then blanks the first window-1 results.
    return close.ewm(span=window, adjust=False, min_periods=window).mean()


def compute_sma(values: Sequence[float], period: int) -> IndicatorSeries:
    """
    Simple moving average over the trailing ``period`` values.
    Unavailable for the first ``period - 1`` entries.
    """
    _check_period("period", period)
    return as_optional_floats(_sma(_as_series(values), period))


def compute_ema(values: Sequence[float], period: int) -> IndicatorSeries:
    """
    Exponential moving average with ``k = 2 / (period + 1)``, seeded with
    ``values[0]``.  The recursion runs from the first value, and the first
    ``period - 1`` results are then reported as unavailable.
    """
    _check_period("period", period)
    return as_optional_floats(_ema(_as_series(values), period))


def _rsi_from(rs: float) -> float:
    return min(100.0, max(0.0, 100.0 - 100.0 / (1.0 + rs)))


def compute_rsi(values: Sequence[float], period: int = 14) -> IndicatorSeries:
    """
    Relative Strength Index using Wilder's smoothing.

    The first average gain/loss is the plain mean over the first
    ``period`` price changes; later averages weight the prior value by
    ``(period - 1) / period``.  A zero average loss is replaced by a tiny
    epsilon on the seed bar; on later bars RS is pinned to 100 instead.
    The result stays finite and within [0, 100].
    """
    _check_period("period", period)
    close = _as_series(values)
    out = np.full(len(close), np.nan)
    if len(close) <= period:
        return as_optional_floats(out)

    delta = close.diff().to_numpy()
    gain = np.clip(delta, 0.0, None)
    loss = np.clip(-delta, 0.0, None)

    avg_gain = gain[1 : period + 1].sum() / period
    avg_loss = loss[1 : period + 1].sum() / period
    out[period] = _rsi_from(avg_gain / (avg_loss if avg_loss != 0 else RSI_EPSILON))
    for i in range(period + 1, len(close)):
        avg_gain = (avg_gain * (period - 1) + gain[i]) / period
        avg_loss = (avg_loss * (period - 1) + loss[i]) / period
        rs = RSI_ZERO_LOSS_RS if avg_loss == 0 else avg_gain / avg_loss
        out[i] = _rsi_from(rs)
    return as_optional_floats(out)


def compute_macd(
    values: Sequence[float], fast: int = 12, slow: int = 26, signal: int = 9
) -> MACDResult:
    """
    Moving Average Convergence Divergence.

    The signal line smooths the MACD line with gaps filled by 0 so the
    recursion is defined from the first bar, then is blanked again wherever
    the MACD line itself is unavailable.
    """
    for name, p in (("fast", fast), ("slow", slow), ("signal", signal)):
        _check_period(name, p)
    close = _as_series(values)
    macd_line = _ema(close, fast) - _ema(close, slow)
    signal_line = _ema(macd_line.fillna(0.0), signal).where(macd_line.notna())
    macd_hist = macd_line - signal_line
    return MACDResult(
        macd=as_optional_floats(macd_line),
        signal=as_optional_floats(signal_line),
        hist=as_optional_floats(macd_hist),
    )


def compute_bollinger(
    values: Sequence[float], period: int = 20, mult: float = 2.0
) -> BollingerBands:
    """
    Bollinger Bands around the ``period`` SMA using the population
    standard deviation of the same window.
    """
    _check_period("period", period)
    close = _as_series(values)
    basis = _sma(close, period)
    std = close.rolling(window=period, min_periods=period).std(ddof=0)
    upper = basis + mult * std
    lower = basis - mult * std
    return BollingerBands(
        basis=as_optional_floats(basis),
        upper=as_optional_floats(upper),
        lower=as_optional_floats(lower),
    )
