"""Load OHLCV price histories from CSV files."""

import logging
from datetime import datetime, timedelta
from pathlib import Path

import numpy as np
import pandas as pd

from quantrisk.analysis.errors import InputError
from quantrisk.analysis.returns import calculate_returns
from quantrisk.analysis.types import PricePoint

logger = logging.getLogger(__name__)

UNDATED_ORIGIN = datetime(1970, 1, 1)
NUMERIC_COLUMNS = ("open", "high", "low", "close", "volume")

# Common vendor header spellings to canonical names
COLUMN_ALIASES = {
    "date": "date",
    "timestamp": "date",
    "time": "date",
    "open": "open",
    "high": "high",
    "low": "low",
    "close": "close",
    "adj close": "close",
    "adj_close": "close",
    "price": "close",
    "volume": "volume",
}


def load_price_csv(path: str | Path) -> list[PricePoint]:
    """Read a CSV with at least a close column into chronological PricePoints.

    Missing open/high/low fall back to the close, missing volume to 0.
    Non-numeric values are treated as missing; rows with a missing or
    non-positive close are dropped.

    Raises:
        InputError: no close column, or fewer than two usable rows.
    """
    df = pd.read_csv(path)
    df = _normalize(df)

    if "close" not in df.columns:
        raise InputError(f"{path}: no close column found")

    for col in NUMERIC_COLUMNS:
        if col in df.columns:
            df[col] = pd.to_numeric(df[col], errors="coerce")

    before = len(df)
    df = df[df["close"].notna() & (df["close"] > 0)].copy()
    if len(df) < before:
        logger.warning("%s: dropped %d rows with missing, non-numeric or non-positive close", path, before - len(df))

    if len(df) < 2:
        raise InputError(f"{path}: need at least 2 price rows, got {len(df)}")

    if "date" in df.columns:
        df = df.assign(date=pd.to_datetime(df["date"])).sort_values("date")
    for col in ("open", "high", "low"):
        if col not in df.columns:
            df[col] = df["close"]
        else:
            df[col] = df[col].fillna(df["close"])
    if "volume" not in df.columns:
        df["volume"] = 0.0

    points = []
    for i, row in enumerate(df.itertuples(index=False)):
        timestamp = row.date.to_pydatetime() if "date" in df.columns else UNDATED_ORIGIN + timedelta(days=i)
        points.append(
            PricePoint(
                timestamp=timestamp,
                open=float(row.open),
                high=float(row.high),
                low=float(row.low),
                close=float(row.close),
                volume=float(row.volume) if pd.notna(row.volume) else 0.0,
            )
        )

    logger.info("Loaded %d price points from %s", len(points), path)
    return points


def load_benchmark_returns(path: str | Path) -> np.ndarray:
    """Load a benchmark price CSV and convert it to log returns."""
    return calculate_returns(load_price_csv(path))


def _normalize(df: pd.DataFrame) -> pd.DataFrame:
    renamed = {}
    for col in df.columns:
        key = str(col).strip().lower()
        if key in COLUMN_ALIASES and COLUMN_ALIASES[key] not in renamed.values():
            renamed[col] = COLUMN_ALIASES[key]
    df = df.rename(columns=renamed)
    return df[list(renamed.values())].copy()
