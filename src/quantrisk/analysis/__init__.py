"""Quantitative risk-analytics engine.

Pure computation over a single price history:
- returns: log-return series
- garch: GARCH(1,1) conditional volatility
- trend: log-linear trend and mean-reversion drift
- regime: Markov bull/bear labelling and regime statistics
- simulation: Monte Carlo price paths with evolving GARCH volatility
- statistics: probabilities, histogram, percentiles, VaR / Expected Shortfall
- stress: scenario shocks over the simulator
- performance: Sharpe / Sortino / Calmar / information / Treynor ratios
"""

from quantrisk.analysis.errors import (
    AnalyticsError,
    InputError,
    ParameterRangeError,
    SimulationCancelled,
)
from quantrisk.analysis.garch import calculate_garch_volatility, fit_garch_params
from quantrisk.analysis.performance import calculate_performance_metrics
from quantrisk.analysis.pipeline import run_analysis, run_full_report
from quantrisk.analysis.regime import analyze_regime, generate_markov_regime
from quantrisk.analysis.returns import calculate_returns
from quantrisk.analysis.simulation import run_monte_carlo_simulation, validate_params
from quantrisk.analysis.stress import DEFAULT_STRESS_SCENARIOS, run_stress_test
from quantrisk.analysis.trend import calculate_trend_and_drift

__all__ = [
    "AnalyticsError",
    "InputError",
    "ParameterRangeError",
    "SimulationCancelled",
    "DEFAULT_STRESS_SCENARIOS",
    "analyze_regime",
    "calculate_garch_volatility",
    "calculate_performance_metrics",
    "calculate_returns",
    "calculate_trend_and_drift",
    "fit_garch_params",
    "generate_markov_regime",
    "run_analysis",
    "run_full_report",
    "run_monte_carlo_simulation",
    "run_stress_test",
    "validate_params",
]
