"""
Plain data records shared by the indicator and decision code.

Candles come in from whatever supplies prices, signals go out to whatever
delivers them.  Nothing here is mutated after construction.
"""
from __future__ import annotations

import datetime as dt
import enum
import math
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple

import pandas as pd

# Index-aligned with the input closes; None marks "not enough history".
IndicatorSeries = Tuple[Optional[float], ...]


class InvalidInputError(ValueError):
    """Raised when a price series breaks the engine's preconditions."""


@dataclass(frozen=True)
class Candle:
    time: dt.datetime
    open: float
    high: float
    low: float
    close: float


class Side(str, enum.Enum):
    BUY = "BUY"
    SELL = "SELL"


@dataclass(frozen=True)
class Signal:
    side: Side
    strength: int  # star count, 1..3

    def __post_init__(self):
        if self.strength not in (1, 2, 3):
            raise ValueError(f"strength must be 1, 2 or 3, got {self.strength}")

    @property
    def stars(self) -> str:
        return "★" * self.strength


def closes_of(candles: Sequence[Candle]) -> List[float]:
    return [c.close for c in candles]


def validate_candles(candles: Sequence[Candle]) -> None:
    """
    Fail fast on a series the engine cannot score: empty, non-finite
    prices, timestamps that mix timezone-aware and naive values, or
    timestamps that are not strictly ascending.
    """
    if not candles:
        raise InvalidInputError("candle series is empty")
    prev: Optional[dt.datetime] = None
    aware = candles[0].time.tzinfo is not None
    for idx, c in enumerate(candles):
        for field in ("open", "high", "low", "close"):
            v = getattr(c, field)
            if v is None or not math.isfinite(v):
                raise InvalidInputError(f"candle {idx}: {field} is not finite ({v!r})")
        if (c.time.tzinfo is not None) != aware:
            raise InvalidInputError(f"candle {idx}: timezone-aware and naive times are mixed")
        if prev is not None and c.time <= prev:
            raise InvalidInputError(
                f"candle {idx}: time {c.time.isoformat()} is not after {prev.isoformat()}"
            )
        prev = c.time


def candles_from_frame(df: pd.DataFrame) -> List[Candle]:
    """
    Build candles from an OHLC frame indexed by timestamp (or carrying a
    ``time``/``date`` column).  Rows are sorted ascending by time.
    """
    if df.empty:
        return []
    frame = df
    for col in ("time", "date"):
        if col in frame.columns:
            frame = frame.set_index(col)
            break
    frame = frame.sort_index()
    index = pd.to_datetime(frame.index, utc=True)
    return [
        Candle(
            time=ts.to_pydatetime(),
            open=float(row.open),
            high=float(row.high),
            low=float(row.low),
            close=float(row.close),
        )
        for ts, row in zip(index, frame.itertuples(index=False))
    ]


def as_optional_floats(values: Iterable[float]) -> IndicatorSeries:
    """Convert a float sequence with NaN gaps into an IndicatorSeries."""
    return tuple(None if pd.isna(v) else float(v) for v in values)
