"""Synthetic price walks and an end-to-end engine self-check."""

import logging
from datetime import datetime, timedelta

import numpy as np

from quantrisk.analysis.errors import AnalyticsError, InputError
from quantrisk.analysis.garch import calculate_garch_volatility
from quantrisk.analysis.performance import calculate_performance_metrics
from quantrisk.analysis.regime import analyze_regime, generate_markov_regime
from quantrisk.analysis.returns import calculate_returns
from quantrisk.analysis.rng import RandomSource, resolve_rng
from quantrisk.analysis.simulation import run_monte_carlo_simulation
from quantrisk.analysis.trend import calculate_trend_and_drift
from quantrisk.analysis.types import PricePoint, SimulationParams

logger = logging.getLogger(__name__)

OHLC_NOISE = 0.001
SELF_CHECK_POINTS = 100
SELF_CHECK_PARAMS = SimulationParams(
    alpha=0.1, beta=0.8, theta=0.05, switch_prob=0.05, num_paths=100, num_steps=10
)


def generate_synthetic_walk(
    num_points: int,
    mean_return: float,
    volatility: float,
    rng: RandomSource = None,
    start_price: float = 100.0,
    start_date: datetime = datetime(2024, 1, 1),
) -> list[PricePoint]:
    """Generate a daily log-normal random walk with small OHLC noise.

    Args:
        num_points: Number of bars.
        mean_return: Mean daily log return.
        volatility: Daily log-return standard deviation.
        rng: Random source.
        start_price: Close of the first bar.
        start_date: Timestamp of the first bar.
    """
    if num_points < 1:
        raise InputError("Need at least 1 point for a synthetic walk")

    generator = resolve_rng(rng)
    shocks = generator.standard_normal(num_points - 1)
    log_path = np.concatenate(([0.0], np.cumsum(mean_return + volatility * shocks)))
    closes = start_price * np.exp(log_path)

    noise = generator.random((num_points, 3))
    volumes = generator.integers(0, 1_000_000, num_points)

    return [
        PricePoint(
            timestamp=start_date + timedelta(days=i),
            open=float(close * (1 + (noise[i, 0] - 0.5) * OHLC_NOISE)),
            high=float(close * (1 + noise[i, 1] * OHLC_NOISE)),
            low=float(close * (1 - noise[i, 2] * OHLC_NOISE)),
            close=float(close),
            volume=float(volumes[i]),
        )
        for i, close in enumerate(closes)
    ]


def run_self_check(rng: RandomSource = None) -> tuple[bool, list[str]]:
    """Run the whole engine on a synthetic walk and sanity-check the outputs.

    Returns:
        (success, errors) where errors lists every failed check.
    """
    generator = resolve_rng(rng)
    errors: list[str] = []

    try:
        prices = generate_synthetic_walk(SELF_CHECK_POINTS, 0.001, 0.01, generator)

        returns = calculate_returns(prices)
        volatilities = calculate_garch_volatility(returns, SELF_CHECK_PARAMS.alpha, SELF_CHECK_PARAMS.beta)
        trend_drift = calculate_trend_and_drift(prices, SELF_CHECK_PARAMS.theta)
        regimes = generate_markov_regime(returns, SELF_CHECK_PARAMS.switch_prob, generator)

        result = run_monte_carlo_simulation(
            prices[-1].close,
            SELF_CHECK_PARAMS,
            float(volatilities[-1]),
            trend_drift.drift,
            generator,
        )

        expected_shape = (SELF_CHECK_PARAMS.num_paths, SELF_CHECK_PARAMS.num_steps + 1)
        if result.paths.shape != expected_shape:
            errors.append("Invalid path dimensions")

        if not 0 <= result.probabilities.upside20 <= 1:
            errors.append("Invalid upside probability")
        if not 0 <= result.probabilities.downside10 <= 1:
            errors.append("Invalid downside probability")

        if result.var95 < 0 or result.var99 < 0:
            errors.append("Invalid VaR values")

        if not np.all(result.paths > 0):
            errors.append("Non-positive prices detected")

        performance = calculate_performance_metrics(prices)
        if not np.isfinite(performance.sharpe_ratio):
            errors.append("Invalid Sharpe ratio")

        regime_analysis = analyze_regime(returns, regimes)
        total = regime_analysis.bull_market_probability + regime_analysis.bear_market_probability
        if not np.isclose(total, 1.0):
            errors.append("Invalid regime probabilities")

    except AnalyticsError as e:
        errors.append(str(e))

    if errors:
        logger.warning("Self-check failed: %s", "; ".join(errors))
    else:
        logger.info("Self-check passed")

    return not errors, errors
