"""
Runtime configuration for the signal scanner.

Only :meth:`EngineConfig.from_env` looks at the environment.  Everything
downstream receives the resulting value explicitly.

Environment variables:

* FXSIGNAL_PAIRS: comma-separated currency pairs (default: USDJPY,EURUSD)
* FXSIGNAL_MIN_CANDLES: minimum history needed to score a pair (default: 210)
* FXSIGNAL_LOG_LEVEL: logging level name (default: INFO)
"""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Mapping, Optional, Tuple

from .rules import DEFAULT_PARAMS, RuleParams

DEFAULT_PAIRS = "USDJPY,EURUSD"
DEFAULT_MIN_CANDLES = 210


def _env(env: Mapping[str, str], name: str, default: Optional[str] = None) -> Optional[str]:
    # strip quotes/whitespace so .env "KEY=value " doesn't break things
    v = env.get(name)
    if v is None:
        return default
    v = v.strip()
    if (v.startswith('"') and v.endswith('"')) or (v.startswith("'") and v.endswith("'")):
        v = v[1:-1].strip()
    return v or default


def parse_pairs(raw: str) -> Tuple[str, ...]:
    pairs = []
    for s in raw.split(","):
        s = s.strip().upper()
        if s and s not in pairs:
            pairs.append(s)
    return tuple(pairs)


@dataclass(frozen=True)
class EngineConfig:
    pairs: Tuple[str, ...] = parse_pairs(DEFAULT_PAIRS)
    min_candles: int = DEFAULT_MIN_CANDLES
    log_level: str = "INFO"
    rules: RuleParams = field(default=DEFAULT_PARAMS)

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "EngineConfig":
        env = os.environ if env is None else env
        pairs = parse_pairs(_env(env, "FXSIGNAL_PAIRS", DEFAULT_PAIRS) or "")
        if not pairs:
            raise ValueError("FXSIGNAL_PAIRS must name at least one pair")
        raw_min = _env(env, "FXSIGNAL_MIN_CANDLES", str(DEFAULT_MIN_CANDLES))
        try:
            min_candles = int(raw_min)
        except ValueError:
            raise ValueError(f"FXSIGNAL_MIN_CANDLES must be an integer, got {raw_min!r}") from None
        if min_candles < 1:
            raise ValueError("FXSIGNAL_MIN_CANDLES must be >= 1")
        log_level = (_env(env, "FXSIGNAL_LOG_LEVEL", "INFO") or "INFO").upper()
        return cls(pairs=pairs, min_candles=min_candles, log_level=log_level)
