"""Risk-adjusted performance ratios from historical prices.

Pure computation functions. Returns are daily log returns, annualised with
the 252-trading-day convention.
"""

import logging
from collections.abc import Sequence

import numpy as np

from quantrisk.analysis.errors import InputError
from quantrisk.analysis.returns import calculate_returns, extract_closes
from quantrisk.analysis.types import PerformanceMetrics, PricePoint

logger = logging.getLogger(__name__)

TRADING_DAYS_PER_YEAR = 252
RISK_FREE_RATE = 0.02  # annual


def calculate_performance_metrics(
    prices: Sequence[PricePoint] | Sequence[float] | np.ndarray,
    benchmark_returns: Sequence[float] | np.ndarray | None = None,
    risk_free_rate: float = RISK_FREE_RATE,
) -> PerformanceMetrics:
    """Compute Sharpe, Sortino, Calmar, and (with a benchmark) beta, alpha,
    information and Treynor ratios.

    Args:
        prices: At least three bars or closing prices, oldest first.
        benchmark_returns: Optional benchmark log returns aligned with the
            asset returns. Ignored unless its length matches.
        risk_free_rate: Annual risk-free rate.

    Returns:
        PerformanceMetrics. Without a usable benchmark, beta=1 and
        alpha/information/Treynor are 0. A ratio whose denominator is zero
        is reported as 0.0.

    Raises:
        InputError: fewer than three prices or a non-positive close.
    """
    if len(prices) < 3:
        raise InputError("Need at least 3 price points to calculate performance metrics")

    returns = calculate_returns(prices)
    closes = extract_closes(prices)

    mean_return = float(np.mean(returns))
    volatility = float(np.std(returns, ddof=1))

    annualized_return = mean_return * TRADING_DAYS_PER_YEAR
    annualized_volatility = volatility * np.sqrt(TRADING_DAYS_PER_YEAR)
    excess_return = annualized_return - risk_free_rate

    sharpe_ratio = _safe_ratio(excess_return, annualized_volatility)

    # Downside deviation over returns below the sample mean
    downside = returns[returns < mean_return]
    if len(downside) > 0:
        downside_deviation = float(np.sqrt(np.mean((downside - mean_return) ** 2)))
    else:
        downside_deviation = 0.0
    sortino_ratio = _safe_ratio(excess_return, downside_deviation * np.sqrt(TRADING_DAYS_PER_YEAR))

    max_drawdown = max_drawdown_from_prices(closes)
    calmar_ratio = _safe_ratio(annualized_return, abs(max_drawdown))

    beta = 1.0
    alpha = 0.0
    information_ratio = 0.0
    treynor_ratio = 0.0

    if benchmark_returns is not None:
        bench = np.asarray(benchmark_returns, dtype=np.float64)
        if len(bench) == len(returns):
            benchmark_mean = float(np.mean(bench))
            benchmark_var = float(np.var(bench, ddof=1))
            covariance = float(np.sum((returns - mean_return) * (bench - benchmark_mean)) / (len(returns) - 1))

            beta = _safe_ratio(covariance, benchmark_var)
            annualized_benchmark = benchmark_mean * TRADING_DAYS_PER_YEAR
            alpha = annualized_return - (risk_free_rate + beta * (annualized_benchmark - risk_free_rate))

            tracking_error = float(np.sqrt(np.mean((returns - bench) ** 2)))
            information_ratio = _safe_ratio(
                annualized_return - annualized_benchmark,
                tracking_error * np.sqrt(TRADING_DAYS_PER_YEAR),
            )
            treynor_ratio = _safe_ratio(excess_return, beta)
        else:
            logger.warning(
                "Benchmark length %d does not match %d returns, ignoring benchmark",
                len(bench), len(returns),
            )

    return PerformanceMetrics(
        sharpe_ratio=sharpe_ratio,
        sortino_ratio=sortino_ratio,
        max_drawdown=max_drawdown,
        calmar_ratio=calmar_ratio,
        information_ratio=information_ratio,
        beta=beta,
        alpha=alpha,
        treynor_ratio=treynor_ratio,
    )


def max_drawdown_from_prices(closes: np.ndarray) -> float:
    """Largest peak-to-trough decline as a positive fraction of the peak."""
    closes = np.asarray(closes, dtype=np.float64)
    if closes.size == 0:
        return 0.0
    peaks = np.maximum.accumulate(closes)
    return float(np.max((peaks - closes) / peaks))


def _safe_ratio(numerator: float, denominator: float) -> float:
    if denominator == 0 or not np.isfinite(denominator):
        return 0.0
    return float(numerator / denominator)
