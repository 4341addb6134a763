"""Trend and mean-reversion drift estimation.

OLS regression of log price on the bar index 0..n-1.
"""

import logging
from collections.abc import Sequence

import numpy as np

from quantrisk.analysis.errors import InputError, ParameterRangeError
from quantrisk.analysis.returns import extract_closes
from quantrisk.analysis.types import PricePoint, TrendDrift

logger = logging.getLogger(__name__)

DEGENERATE_DENOMINATOR = 1e-10


def calculate_trend_and_drift(
    prices: Sequence[PricePoint] | Sequence[float] | np.ndarray,
    theta: float,
) -> TrendDrift:
    """Project a log-linear trend and derive the drift pulling price toward it.

    trend = exp(slope * n)
    drift = theta * (trend - last_close) / last_close

    Args:
        prices: Bars or closing prices, oldest first.
        theta: Mean-reversion strength in [0, 1].

    Returns:
        TrendDrift. With a single point the regression is degenerate and
        the result is (trend=last_close, drift=0).

    Raises:
        InputError: no prices or a non-positive close.
        ParameterRangeError: theta outside [0, 1].
    """
    if len(prices) == 0:
        raise InputError("Need at least 1 price point to calculate trend")
    if not 0 <= theta <= 1:
        raise ParameterRangeError("Theta must be between 0 and 1")

    closes = extract_closes(prices)
    n = len(closes)
    log_prices = np.log(closes)
    current_price = float(closes[-1])

    x = np.arange(n, dtype=np.float64)
    x_dev = x - (n - 1) / 2
    y_dev = log_prices - log_prices.mean()

    numerator = float(np.sum(x_dev * y_dev))
    denominator = float(np.sum(x_dev**2))

    if abs(denominator) < DEGENERATE_DENOMINATOR:
        logger.debug("Trend: degenerate regression (n=%d), zero drift", n)
        return TrendDrift(trend=current_price, drift=0.0)

    slope = numerator / denominator
    trend = float(np.exp(slope * n))
    drift = theta * (trend - current_price) / current_price

    return TrendDrift(trend=trend, drift=drift)
