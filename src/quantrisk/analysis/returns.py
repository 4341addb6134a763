"""Return series builder.

Pure computation functions. Price inputs may be a sequence of PricePoint
bars or plain closing prices (chronological order, oldest first).
"""

import logging
from collections.abc import Sequence

import numpy as np

from quantrisk.analysis.errors import InputError
from quantrisk.analysis.types import PricePoint

logger = logging.getLogger(__name__)


def extract_closes(prices: Sequence[PricePoint] | Sequence[float] | np.ndarray) -> np.ndarray:
    """Return closing prices as a float64 array.

    Raises:
        InputError: if any close is non-positive or not finite.
    """
    closes = np.array(
        [p.close if isinstance(p, PricePoint) else p for p in prices],
        dtype=np.float64,
    )
    if closes.size and (not np.all(np.isfinite(closes)) or np.any(closes <= 0)):
        raise InputError("Invalid price data: non-positive close price")
    return closes


def calculate_returns(prices: Sequence[PricePoint] | Sequence[float] | np.ndarray) -> np.ndarray:
    """Compute daily log returns r_t = ln(close_t / close_{t-1}).

    Args:
        prices: At least two bars or closing prices, each close > 0.

    Returns:
        Array of n - 1 log returns.

    Raises:
        InputError: fewer than two points or a non-positive close.
    """
    if len(prices) < 2:
        raise InputError("Need at least 2 price points to calculate returns")

    closes = extract_closes(prices)
    returns = np.log(closes[1:] / closes[:-1])
    logger.debug("Computed %d log returns", len(returns))
    return returns
