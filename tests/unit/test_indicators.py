import math
import os
import sys

import numpy as np
import pytest

# add signal_engine_py to sys.path for tests
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '../../services/signal_engine_py')))

from fxsignal.indicators import (
    compute_sma,
    compute_ema,
    compute_rsi,
    compute_macd,
    compute_bollinger,
)
from fxsignal.models import InvalidInputError


def _random_walk(n=300, seed=7):
    rng = np.random.default_rng(seed)
    return list(100 + np.cumsum(rng.normal(0, 0.5, n)))


def test_compute_sma():
    sma3 = compute_sma([1, 2, 3, 4, 5], 3)
    assert sma3[:2] == (None, None)
    assert sma3[2:] == pytest.approx((2.0, 3.0, 4.0))


def test_compute_sma_matches_trailing_mean():
    values = _random_walk(60)
    sma = compute_sma(values, 10)
    assert len(sma) == len(values)
    assert all(v is None for v in sma[:9])
    for i in range(9, len(values)):
        assert sma[i] == pytest.approx(sum(values[i - 9 : i + 1]) / 10)


def test_compute_ema_blanks_warmup_but_seeds_from_first_value():
    values = _random_walk(40)
    period = 5
    ema = compute_ema(values, period)
    k = 2 / (period + 1)
    expected = [values[0]]
    for v in values[1:]:
        expected.append(expected[-1] * (1 - k) + v * k)
    assert len(ema) == len(values)
    assert all(v is None for v in ema[: period - 1])
    for i in range(period - 1, len(values)):
        assert ema[i] == pytest.approx(expected[i], rel=1e-12)


def test_compute_ema_period_one_is_identity():
    assert compute_ema([3.0, 1.0, 2.0], 1) == pytest.approx((3.0, 1.0, 2.0))


def test_compute_rsi_bounded():
    rsi = compute_rsi(_random_walk(500, seed=3), 14)
    available = [v for v in rsi if v is not None]
    assert len(available) == 500 - 14
    assert all(0 <= v <= 100 for v in available)


def test_compute_rsi_first_value_uses_simple_mean_seed():
    values = [44.0, 44.3, 44.1, 44.6, 44.2, 45.0, 45.4, 45.1, 45.8, 46.0, 45.6, 46.2, 46.5, 46.1, 46.7, 46.3]
    period = 14
    rsi = compute_rsi(values, period)
    deltas = [values[i] - values[i - 1] for i in range(1, period + 1)]
    avg_gain = sum(d for d in deltas if d > 0) / period
    avg_loss = sum(-d for d in deltas if d < 0) / period
    assert all(v is None for v in rsi[:period])
    assert rsi[period] == pytest.approx(100 - 100 / (1 + avg_gain / avg_loss))

    ch = values[period + 1] - values[period]
    avg_gain = (avg_gain * 13 + max(ch, 0)) / 14
    avg_loss = (avg_loss * 13 + max(-ch, 0)) / 14
    assert rsi[period + 1] == pytest.approx(100 - 100 / (1 + avg_gain / avg_loss))


def test_compute_rsi_short_series_unavailable():
    assert compute_rsi([1.0] * 14, 14) == (None,) * 14


def test_compute_rsi_zero_loss_stays_finite():
    pinned = 100 - 100 / 101
    rising = compute_rsi([float(i) for i in range(1, 40)], 14)
    # seed bar divides by epsilon, later bars pin RS to 100
    assert 99.9 < rising[14] <= 100
    assert rising[15:] == pytest.approx((pinned,) * 24)
    flat = compute_rsi([1.0] * 20, 14)
    assert flat[14] == 0.0
    assert flat[15:] == pytest.approx((pinned,) * 5)


def test_compute_macd_alignment():
    values = _random_walk(120)
    res = compute_macd(values)
    assert len(res.macd) == len(res.signal) == len(res.hist) == len(values)
    # slow EMA is blank for the first 25 bars
    assert all(v is None for v in res.macd[:25])
    for m, s, h in zip(res.macd, res.signal, res.hist):
        if m is None or s is None:
            assert h is None
        else:
            assert h == pytest.approx(m - s)
    assert [m is None for m in res.macd] == [s is None for s in res.signal]


def test_compute_macd_line_is_ema_difference():
    values = _random_walk(80)
    res = compute_macd(values, 12, 26, 9)
    fast = compute_ema(values, 12)
    slow = compute_ema(values, 26)
    for i in range(25, len(values)):
        assert res.macd[i] == pytest.approx(fast[i] - slow[i])


def test_compute_bollinger_band_ordering():
    values = _random_walk(100)
    bb = compute_bollinger(values, 20, 2)
    assert all(v is None for v in bb.basis[:19])
    for lo, mid, up in zip(bb.lower, bb.basis, bb.upper):
        if mid is None:
            assert lo is None and up is None
            continue
        assert lo <= mid <= up
    window = values[-20:]
    mean = sum(window) / 20
    stdev = math.sqrt(sum((v - mean) ** 2 for v in window) / 20)
    assert bb.upper[-1] == pytest.approx(mean + 2 * stdev)
    assert bb.lower[-1] == pytest.approx(mean - 2 * stdev)


def test_empty_input_gives_empty_output():
    assert compute_sma([], 3) == ()
    assert compute_rsi([], 14) == ()
    assert compute_macd([]).hist == ()


def test_non_finite_input_rejected():
    with pytest.raises(InvalidInputError):
        compute_sma([1.0, float("nan"), 3.0], 2)
    with pytest.raises(InvalidInputError):
        compute_bollinger([1.0, float("inf")], 2)
