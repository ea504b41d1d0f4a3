"""
Run the signal rules over a list of currency pairs.

Candles are obtained from a :class:`CandleSource` and any resulting
signal is handed to a :class:`SignalSink`.  Neither is implemented here;
callers plug in their own market-data client and notifier.  A failure on
one pair is logged and the scan moves on to the next pair.
"""
from __future__ import annotations

import datetime as dt
import logging
from dataclasses import dataclass
from typing import List, Optional, Protocol, Sequence

from .config import EngineConfig
from .models import Candle, Signal
from .rules import decide_with_details

# ──────────────────────────────────────────────────────────────────────────────
# Logging
# ──────────────────────────────────────────────────────────────────────────────

logger = logging.getLogger("signal_scanner")
if not logger.handlers:
    _h = logging.StreamHandler()
    _h.setFormatter(logging.Formatter("%(asctime)s | %(levelname)s | %(message)s"))
    logger.addHandler(_h)


def configure_logging(config: EngineConfig) -> None:
    level = config.log_level.upper()
    logger.setLevel(level)
    logging.getLogger("signal_rules").setLevel(level)


# ──────────────────────────────────────────────────────────────────────────────
# Collaborators
# ──────────────────────────────────────────────────────────────────────────────

class CandleSource(Protocol):
    def __call__(self, pair: str) -> Sequence[Candle]:
        ...


@dataclass(frozen=True)
class SignalEvent:
    pair: str
    signal: Signal
    price: float
    time: dt.datetime


class SignalSink(Protocol):
    def __call__(self, event: SignalEvent) -> None:
        ...


# ──────────────────────────────────────────────────────────────────────────────
# Scan
# ──────────────────────────────────────────────────────────────────────────────

STATUS_SIGNAL = "signal"
STATUS_NO_SIGNAL = "no_signal"
STATUS_INSUFFICIENT = "insufficient_history"
STATUS_ERROR = "error"


@dataclass(frozen=True)
class PairResult:
    pair: str
    status: str
    event: Optional[SignalEvent] = None
    error: Optional[str] = None


def scan_pair(pair: str, config: EngineConfig, source: CandleSource, sink: SignalSink) -> PairResult:
    candles = source(pair)
    if len(candles) < config.min_candles:
        logger.warning("%s: not enough candles (%d < %d)", pair, len(candles), config.min_candles)
        return PairResult(pair, STATUS_INSUFFICIENT)

    evaluation = decide_with_details(candles, config.rules)
    if evaluation.signal is None:
        logger.info("%s: no signal", pair)
        return PairResult(pair, STATUS_NO_SIGNAL)

    event = SignalEvent(
        pair=pair,
        signal=evaluation.signal,
        price=evaluation.price,
        time=candles[-1].time,
    )
    sink(event)
    logger.info(
        "%s: %s %s at %s",
        pair,
        event.signal.side.value,
        event.signal.stars,
        event.price,
    )
    return PairResult(pair, STATUS_SIGNAL, event=event)


def scan_pairs(config: EngineConfig, source: CandleSource, sink: SignalSink) -> List[PairResult]:
    """Scan every configured pair in order and return one result per pair."""
    results: List[PairResult] = []
    for pair in config.pairs:
        try:
            results.append(scan_pair(pair, config, source, sink))
        except Exception as e:
            logger.exception("%s: scan failed", pair)
            results.append(PairResult(pair, STATUS_ERROR, error=str(e)))
    return results
