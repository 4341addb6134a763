"""Risk statistics reduced from simulated price paths.

VaR and Expected Shortfall are measured in price units relative to the
initial price, and percentiles use the nearest-rank index
floor(p / 100 * (N - 1)) without interpolation.
"""

import logging

import numpy as np

from quantrisk.analysis.types import HistogramBin, Probabilities, SimulationResult

logger = logging.getLogger(__name__)

NUM_BINS = 50
PERCENTILE_LEVELS = (5, 10, 25, 50, 75, 90, 95)
UPSIDE_MULTIPLIER = 1.2
DOWNSIDE_MULTIPLIER = 0.9


def calculate_statistics(
    paths: np.ndarray,
    initial_price: float,
    current_volatility: float = 0.0,
    trend: float = 0.0,
    drift: float = 0.0,
) -> SimulationResult:
    """Reduce a (num_paths, num_steps + 1) path matrix to a SimulationResult."""
    num_paths = paths.shape[0]
    final_prices = paths[:, -1]

    probabilities = Probabilities(
        upside20=int(np.count_nonzero(final_prices >= initial_price * UPSIDE_MULTIPLIER)) / num_paths,
        downside10=int(np.count_nonzero(final_prices <= initial_price * DOWNSIDE_MULTIPLIER)) / num_paths,
    )

    sorted_prices = np.sort(final_prices)

    percentiles = {
        f"p{p}": float(sorted_prices[int(np.floor(p / 100 * (num_paths - 1)))])
        for p in PERCENTILE_LEVELS
    }

    var95, es95 = _value_at_risk(sorted_prices, initial_price, 0.05)
    var99, es99 = _value_at_risk(sorted_prices, initial_price, 0.01)

    return SimulationResult(
        paths=paths,
        probabilities=probabilities,
        histogram=build_histogram(final_prices, sorted_prices[0], sorted_prices[-1]),
        percentiles=percentiles,
        var95=var95,
        var99=var99,
        expected_shortfall95=es95,
        expected_shortfall99=es99,
        current_volatility=current_volatility,
        trend=trend,
        drift=drift,
    )


def build_histogram(
    values: np.ndarray, min_value: float, max_value: float, num_bins: int = NUM_BINS
) -> tuple[HistogramBin, ...]:
    """Equal-width histogram on [min, max]; the last bin includes max.

    A zero-width range puts every value into the first bin.
    """
    bin_size = (max_value - min_value) / num_bins
    if bin_size > 0:
        indices = np.minimum(np.floor((values - min_value) / bin_size), num_bins - 1).astype(np.intp)
    else:
        indices = np.zeros(len(values), dtype=np.intp)

    counts = np.bincount(indices, minlength=num_bins)
    return tuple(
        HistogramBin(bin=float(min_value + i * bin_size), count=int(counts[i]))
        for i in range(num_bins)
    )


def max_path_drawdown(paths: np.ndarray, initial_price: float) -> float:
    """Largest peak-to-trough fractional decline over all paths.

    Each path's running peak starts at ``initial_price``.
    """
    peaks = np.maximum.accumulate(np.maximum(paths, initial_price), axis=1)
    drawdowns = (peaks - paths) / peaks
    return float(max(drawdowns.max(), 0.0))


def _value_at_risk(
    sorted_prices: np.ndarray, initial_price: float, tail: float
) -> tuple[float, float]:
    """Return (VaR, Expected Shortfall) at the given tail probability."""
    index = int(np.floor(tail * len(sorted_prices)))
    var = initial_price - float(sorted_prices[index])
    es = initial_price - float(np.mean(sorted_prices[: index + 1]))
    return var, es
