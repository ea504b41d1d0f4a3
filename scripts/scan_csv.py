"""
Scan currency pairs from local CSV files and log any signals.

Each pair is read from ``<CANDLE_DIR>/<PAIR>.csv`` with columns
``time,open,high,low,close``.  Pairs and thresholds come from the usual
FXSIGNAL_* environment variables; CANDLE_DIR defaults to ``./candles``.

    CANDLE_DIR=data FXSIGNAL_PAIRS=USDJPY python scripts/scan_csv.py
"""
import os
import sys
from typing import List

import pandas as pd

sys.path.append(os.path.join(os.path.dirname(os.path.dirname(__file__)), "services", "signal_engine_py"))
from fxsignal import Candle, EngineConfig, SignalEvent, candles_from_frame, scan_pairs  # type: ignore
from fxsignal.scanner import STATUS_ERROR, configure_logging, logger  # type: ignore


def csv_source(candle_dir: str):
    def load(pair: str) -> List[Candle]:
        df = pd.read_csv(os.path.join(candle_dir, f"{pair}.csv"), parse_dates=["time"])
        return candles_from_frame(df)
    return load


def log_sink(event: SignalEvent) -> None:
    decimals = 3 if event.pair.endswith("JPY") else 5
    logger.info(
        "%s %s %.*f %s", event.signal.side.value, event.pair, decimals, event.price, event.signal.stars
    )


def main():
    config = EngineConfig.from_env()
    configure_logging(config)
    candle_dir = os.environ.get("CANDLE_DIR", "candles")
    logger.info("scanning %s from %s", ",".join(config.pairs), candle_dir)
    results = scan_pairs(config, csv_source(candle_dir), log_sink)
    if any(r.status == STATUS_ERROR for r in results):
        sys.exit(1)


if __name__ == "__main__":
    main()
