"""
FastAPI application exposing indicator computation and signal decisions
over caller-supplied price data.  The API is stateless; it never fetches
candles itself.
"""
from __future__ import annotations
import logging
import datetime as dt
import math
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field, validator

from fxsignal import (
    Candle,
    InvalidInputError,
    compute_sma,
    compute_ema,
    compute_rsi,
    compute_macd,
    compute_bollinger,
    decide_with_details,
)

logger = logging.getLogger("signal_api")
app = FastAPI(title="FX Signal API")


# ----------------------------------------------------------------------
# Models
# ----------------------------------------------------------------------
class CandleIn(BaseModel):
    time: dt.datetime
    open: float
    high: float
    low: float
    close: float


class IndicatorRequest(BaseModel):
    closes: List[float] = Field(..., description="Closing prices, oldest first")
    indicators: List[str] = Field(
        ..., description="Indicators: sma20, ema50, rsi14, macd, bollinger"
    )

    @validator("closes")
    def validate_closes(cls, v):
        if any(not math.isfinite(x) for x in v):
            raise ValueError("closes must be finite numbers")
        return v


class DecideRequest(BaseModel):
    candles: List[CandleIn] = Field(..., description="Candles sorted ascending by time")


class SignalOut(BaseModel):
    side: str
    strength: int
    stars: str


class DecideResponse(BaseModel):
    signal: Optional[SignalOut]
    price: float
    score_buy: int
    score_sell: int
    conditions: Dict[str, bool]


def _window(key: str, prefix: str, default: Optional[int] = None) -> int:
    raw = key[len(prefix):]
    if not raw and default is not None:
        return default
    try:
        window = int(raw)
    except ValueError:
        raise HTTPException(400, detail=f"Bad window in indicator {key}")
    if window < 1:
        raise HTTPException(400, detail=f"Bad window in indicator {key}")
    return window


# ----------------------------------------------------------------------
# Endpoints
# ----------------------------------------------------------------------
@app.get("/health")
async def health() -> Dict[str, str]:
    return {"status": "ok"}


@app.post("/indicators/compute")
async def compute_indicators(req: IndicatorRequest):
    if not req.indicators:
        raise HTTPException(400, detail="No indicators requested")
    result: Dict[str, Any] = {}
    for ind in req.indicators:
        key = ind.lower()
        if key.startswith("sma"):
            result[key] = list(compute_sma(req.closes, _window(key, "sma")))
        elif key.startswith("ema"):
            result[key] = list(compute_ema(req.closes, _window(key, "ema")))
        elif key.startswith("rsi"):
            result[key] = list(compute_rsi(req.closes, _window(key, "rsi", 14)))
        elif key == "macd":
            macd = compute_macd(req.closes)
            result[key] = {
                "macd": list(macd.macd),
                "signal": list(macd.signal),
                "hist": list(macd.hist),
            }
        elif key == "bollinger":
            bb = compute_bollinger(req.closes)
            result[key] = {
                "basis": list(bb.basis),
                "upper": list(bb.upper),
                "lower": list(bb.lower),
            }
        else:
            raise HTTPException(400, detail=f"Unknown indicator {ind}")
    return result


@app.post("/signal/decide", response_model=DecideResponse)
async def decide_signal(req: DecideRequest) -> DecideResponse:
    """
    Score the latest bar of the supplied candles.  Returns the signal, if
    any, together with the scores and the individual conditions.
    """
    candles = [Candle(**c.dict()) for c in req.candles]
    try:
        evaluation = decide_with_details(candles)
    except InvalidInputError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception:
        logger.exception("Unhandled error in /signal/decide")
        raise HTTPException(status_code=500, detail="Internal server error")

    sig = evaluation.signal
    return DecideResponse(
        signal=None
        if sig is None
        else SignalOut(side=sig.side.value, strength=sig.strength, stars=sig.stars),
        price=evaluation.price,
        score_buy=evaluation.score_buy,
        score_sell=evaluation.score_sell,
        conditions={
            "aboveSMA200": evaluation.conditions.above_sma200,
            "belowSMA200": evaluation.conditions.below_sma200,
            "emaBull": evaluation.conditions.ema_bull,
            "emaBear": evaluation.conditions.ema_bear,
            "rsiBull": evaluation.conditions.rsi_bull,
            "rsiBear": evaluation.conditions.rsi_bear,
            "macdBull": evaluation.conditions.macd_bull,
            "macdBear": evaluation.conditions.macd_bear,
            "bbOk": evaluation.conditions.bb_ok,
        },
    )
