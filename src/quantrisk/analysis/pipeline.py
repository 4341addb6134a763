"""End-to-end analysis pipeline for one price history.

prices -> returns -> {GARCH volatility, trend/drift, regimes}
       -> simulation seeded at the last close, last volatility and drift
       -> stress scenarios / performance ratios / regime statistics
"""

import dataclasses
import logging
import threading
from collections.abc import Sequence

import numpy as np

from quantrisk.analysis.garch import calculate_garch_volatility
from quantrisk.analysis.performance import RISK_FREE_RATE, calculate_performance_metrics
from quantrisk.analysis.regime import analyze_regime, generate_markov_regime
from quantrisk.analysis.returns import calculate_returns, extract_closes
from quantrisk.analysis.rng import RandomSource, spawn_rngs
from quantrisk.analysis.simulation import (
    DEFAULT_BLOCK_SIZE,
    DEFAULT_MAX_WORKERS,
    run_monte_carlo_simulation,
    validate_params,
)
from quantrisk.analysis.stress import run_stress_test
from quantrisk.analysis.trend import calculate_trend_and_drift
from quantrisk.analysis.types import (
    AnalysisReport,
    PricePoint,
    SimulationParams,
    SimulationResult,
    StressScenario,
)

logger = logging.getLogger(__name__)

PriceInput = Sequence[PricePoint] | Sequence[float] | np.ndarray


def run_analysis(
    prices: PriceInput,
    params: SimulationParams | None = None,
    rng: RandomSource = None,
    *,
    max_workers: int = DEFAULT_MAX_WORKERS,
    block_size: int = DEFAULT_BLOCK_SIZE,
    cancel_event: threading.Event | None = None,
) -> SimulationResult:
    """Estimate volatility and drift from history, then simulate forward.

    The returned result carries the last GARCH volatility, the projected
    trend and the drift that seeded the simulation.
    """
    if params is None:
        params = SimulationParams()
    validate_params(params)

    closes = extract_closes(prices)
    returns = calculate_returns(closes)
    volatilities = calculate_garch_volatility(returns, params.alpha, params.beta)
    trend_drift = calculate_trend_and_drift(closes, params.theta)
    current_volatility = float(volatilities[-1])

    logger.debug(
        "Analysis inputs: %d prices, vol=%.6f, trend=%.4f, drift=%.6f",
        len(closes), current_volatility, trend_drift.trend, trend_drift.drift,
    )

    result = run_monte_carlo_simulation(
        float(closes[-1]),
        params,
        current_volatility,
        trend_drift.drift,
        rng,
        max_workers=max_workers,
        block_size=block_size,
        cancel_event=cancel_event,
    )
    return dataclasses.replace(
        result,
        current_volatility=current_volatility,
        trend=trend_drift.trend,
    )


def run_full_report(
    prices: PriceInput,
    params: SimulationParams | None = None,
    rng: RandomSource = None,
    *,
    scenarios: Sequence[StressScenario] | None = None,
    benchmark_returns: Sequence[float] | np.ndarray | None = None,
    risk_free_rate: float = RISK_FREE_RATE,
    max_workers: int = DEFAULT_MAX_WORKERS,
    block_size: int = DEFAULT_BLOCK_SIZE,
    cancel_event: threading.Event | None = None,
) -> AnalysisReport:
    """Simulation, stress tests, performance ratios and regime statistics.

    The simulation, stress runner and regime chain each draw from their own
    child of ``rng``.
    """
    if params is None:
        params = SimulationParams()

    sim_rng, stress_rng, regime_rng = spawn_rngs(rng, 3)
    closes = extract_closes(prices)

    simulation = run_analysis(
        closes,
        params,
        sim_rng,
        max_workers=max_workers,
        block_size=block_size,
        cancel_event=cancel_event,
    )

    stress = run_stress_test(
        float(closes[-1]),
        params,
        simulation.current_volatility,
        simulation.drift,
        scenarios,
        stress_rng,
        max_workers=max_workers,
        block_size=block_size,
        cancel_event=cancel_event,
    )

    performance = calculate_performance_metrics(closes, benchmark_returns, risk_free_rate)

    returns = calculate_returns(closes)
    regimes = generate_markov_regime(returns, params.switch_prob, regime_rng)
    regime = analyze_regime(returns, regimes)

    return AnalysisReport(
        simulation=simulation,
        stress=tuple(stress),
        performance=performance,
        regime=regime,
        regimes=regimes,
    )
