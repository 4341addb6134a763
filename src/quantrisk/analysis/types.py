"""Plain data structures produced and consumed by the analytics engine.

All types are frozen dataclasses. Array-valued fields are made read-only
on construction so a result cannot be mutated after it is returned.
"""

from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any

import numpy as np


def _frozen(array: np.ndarray, dtype=None) -> np.ndarray:
    """Read-only array; writable inputs are copied so the caller keeps ownership."""
    if (
        isinstance(array, np.ndarray)
        and not array.flags.writeable
        and (dtype is None or array.dtype == dtype)
    ):
        return array
    frozen = np.array(array, dtype=dtype)
    frozen.setflags(write=False)
    return frozen


# ---------------------------------------------------------------------------
# Inputs
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PricePoint:
    """One OHLCV bar supplied by the data-fetch layer."""

    timestamp: datetime
    open: float
    high: float
    low: float
    close: float
    volume: float


@dataclass(frozen=True)
class SimulationParams:
    """User-tunable simulation parameters."""

    alpha: float = 0.1        # GARCH shock weight
    beta: float = 0.8         # GARCH persistence
    theta: float = 0.05       # mean-reversion strength toward trend
    switch_prob: float = 0.05  # Markov regime flip probability
    num_paths: int = 1000
    num_steps: int = 252

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class StressScenario:
    name: str
    volatility_shock: float  # multiplier on initial volatility
    drift_shock: float       # additive drift adjustment
    correlation_shock: float = 0.0  # unused by the single-asset engine

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class GarchParams:
    alpha: float
    beta: float


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class TrendDrift:
    trend: float
    drift: float


@dataclass(frozen=True)
class Probabilities:
    upside20: float
    downside10: float


@dataclass(frozen=True)
class HistogramBin:
    bin: float  # lower edge
    count: int


@dataclass(frozen=True)
class SimulationResult:
    """Distribution of simulated prices and the risk figures derived from it."""

    paths: np.ndarray  # (num_paths, num_steps + 1)
    probabilities: Probabilities
    histogram: tuple[HistogramBin, ...]
    percentiles: dict[str, float]
    var95: float
    var99: float
    expected_shortfall95: float
    expected_shortfall99: float
    current_volatility: float
    trend: float
    drift: float

    def __post_init__(self):
        object.__setattr__(self, "paths", _frozen(self.paths, np.float64))

    @property
    def terminal_prices(self) -> np.ndarray:
        return self.paths[:, -1]

    def to_dict(self, include_paths: bool = True) -> dict[str, Any]:
        data = {
            "probabilities": asdict(self.probabilities),
            "histogram": [asdict(b) for b in self.histogram],
            "percentiles": dict(self.percentiles),
            "var95": self.var95,
            "var99": self.var99,
            "expected_shortfall95": self.expected_shortfall95,
            "expected_shortfall99": self.expected_shortfall99,
            "current_volatility": self.current_volatility,
            "trend": self.trend,
            "drift": self.drift,
        }
        if include_paths:
            data["paths"] = self.paths.tolist()
        return data


@dataclass(frozen=True)
class StressResult:
    scenario: StressScenario
    var95: float
    var99: float
    expected_shortfall95: float
    expected_shortfall99: float
    probability_of_loss: float
    max_drawdown: float

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class PerformanceMetrics:
    sharpe_ratio: float
    sortino_ratio: float
    max_drawdown: float
    calmar_ratio: float
    information_ratio: float
    beta: float
    alpha: float
    treynor_ratio: float

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class RegimePair:
    bull: float
    bear: float


@dataclass(frozen=True)
class RegimeAnalysis:
    bull_market_probability: float
    bear_market_probability: float
    regime_duration: RegimePair
    regime_volatility: RegimePair
    regime_returns: RegimePair

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class AnalysisReport:
    """Everything the dashboard shows for one price history."""

    simulation: SimulationResult
    stress: tuple[StressResult, ...]
    performance: PerformanceMetrics
    regime: RegimeAnalysis
    regimes: np.ndarray = field(repr=False)

    def __post_init__(self):
        object.__setattr__(self, "regimes", _frozen(self.regimes))

    def to_dict(self, include_paths: bool = False) -> dict[str, Any]:
        return {
            "simulation": self.simulation.to_dict(include_paths=include_paths),
            "stress": [s.to_dict() for s in self.stress],
            "performance": self.performance.to_dict(),
            "regime": self.regime.to_dict(),
        }


__all__ = [
    "PricePoint",
    "SimulationParams",
    "StressScenario",
    "GarchParams",
    "TrendDrift",
    "Probabilities",
    "HistogramBin",
    "SimulationResult",
    "StressResult",
    "PerformanceMetrics",
    "RegimePair",
    "RegimeAnalysis",
    "AnalysisReport",
]
