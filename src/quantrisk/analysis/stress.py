"""Stress testing: re-run the simulator under volatility and drift shocks."""

import logging
import threading
from collections.abc import Sequence

import numpy as np

from quantrisk.analysis.rng import RandomSource, spawn_rngs
from quantrisk.analysis.simulation import (
    DEFAULT_BLOCK_SIZE,
    DEFAULT_MAX_WORKERS,
    run_monte_carlo_simulation,
)
from quantrisk.analysis.statistics import max_path_drawdown
from quantrisk.analysis.types import SimulationParams, StressResult, StressScenario

logger = logging.getLogger(__name__)

DEFAULT_STRESS_SCENARIOS = (
    StressScenario(name="Baseline", volatility_shock=1.0, drift_shock=0.0),
    StressScenario(name="Volatility Spike", volatility_shock=2.0, drift_shock=0.0),
    StressScenario(name="Market Crash", volatility_shock=3.0, drift_shock=-0.5),
    StressScenario(name="Bear Market", volatility_shock=1.5, drift_shock=-0.2),
    StressScenario(name="Bull Rally", volatility_shock=0.8, drift_shock=0.2),
)


def run_stress_test(
    initial_price: float,
    params: SimulationParams,
    initial_volatility: float,
    drift: float,
    scenarios: Sequence[StressScenario] | None = None,
    rng: RandomSource = None,
    *,
    max_workers: int = DEFAULT_MAX_WORKERS,
    block_size: int = DEFAULT_BLOCK_SIZE,
    cancel_event: threading.Event | None = None,
) -> list[StressResult]:
    """Simulate each scenario and collect its tail-risk figures.

    Scenario i is simulated with volatility ``initial_volatility *
    volatility_shock`` and drift ``drift + drift_shock``, using the i-th
    child of ``rng``.

    Raises:
        Whatever run_monte_carlo_simulation raises for a scenario; results
        for earlier scenarios are discarded.
    """
    if scenarios is None:
        scenarios = DEFAULT_STRESS_SCENARIOS
    if not scenarios:
        return []

    scenario_rngs = spawn_rngs(rng, len(scenarios))
    results: list[StressResult] = []

    for scenario, scenario_rng in zip(scenarios, scenario_rngs):
        stressed_volatility = initial_volatility * scenario.volatility_shock
        stressed_drift = drift + scenario.drift_shock

        result = run_monte_carlo_simulation(
            initial_price,
            params,
            stressed_volatility,
            stressed_drift,
            scenario_rng,
            max_workers=max_workers,
            block_size=block_size,
            cancel_event=cancel_event,
        )

        final_prices = result.terminal_prices
        probability_of_loss = int(np.count_nonzero(final_prices < initial_price)) / len(final_prices)

        results.append(
            StressResult(
                scenario=scenario,
                var95=result.var95,
                var99=result.var99,
                expected_shortfall95=result.expected_shortfall95,
                expected_shortfall99=result.expected_shortfall99,
                probability_of_loss=probability_of_loss,
                max_drawdown=max_path_drawdown(result.paths, initial_price),
            )
        )
        logger.debug(
            "Stress %s: VaR95=%.4f P(loss)=%.3f",
            scenario.name, result.var95, probability_of_loss,
        )

    logger.info("Stress test complete: %d scenarios", len(results))
    return results
