"""Core of the FX signal engine.

This package computes technical indicators over a candle series,
evaluates the trading rules at the latest bar, and scans a list of
currency pairs through pluggable candle sources and signal sinks.  The
indicator and rule functions are side-effect free and deterministic
when given the same inputs.
"""

from .models import (
    Candle,
    IndicatorSeries,
    InvalidInputError,
    Side,
    Signal,
    candles_from_frame,
    closes_of,
    validate_candles,
)
from .indicators import (
    BollingerBands,
    MACDResult,
    compute_sma,
    compute_ema,
    compute_rsi,
    compute_macd,
    compute_bollinger,
)
from .rules import (
    Conditions,
    Evaluation,
    RuleParams,
    evaluate_conditions,
    score_conditions,
    resolve_signal,
    decide,
    decide_with_details,
)
from .config import EngineConfig
from .scanner import PairResult, SignalEvent, scan_pair, scan_pairs

__all__ = [
    "Candle",
    "IndicatorSeries",
    "InvalidInputError",
    "Side",
    "Signal",
    "candles_from_frame",
    "closes_of",
    "validate_candles",
    "BollingerBands",
    "MACDResult",
    "compute_sma",
    "compute_ema",
    "compute_rsi",
    "compute_macd",
    "compute_bollinger",
    "Conditions",
    "Evaluation",
    "RuleParams",
    "evaluate_conditions",
    "score_conditions",
    "resolve_signal",
    "decide",
    "decide_with_details",
    "EngineConfig",
    "PairResult",
    "SignalEvent",
    "scan_pair",
    "scan_pairs",
]
