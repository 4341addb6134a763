"""Pydantic request/response schemas for the quantrisk API."""

from datetime import datetime
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


# --- Base schemas ---


class Meta(BaseModel):
    timestamp: datetime = Field(default_factory=datetime.utcnow)
    cached: bool = False


class ApiResponse(BaseModel, Generic[T]):
    data: T
    meta: Meta = Field(default_factory=Meta)


class ErrorResponse(BaseModel):
    error: dict[str, Any] = Field(
        description="Error details with code and message"
    )


# --- Request schemas ---


class SimulationParamsIn(BaseModel):
    """Unset fields take the server's configured defaults."""

    alpha: float | None = Field(None, description="GARCH shock weight, [0, 1]")
    beta: float | None = Field(None, description="GARCH persistence, [0, 1], alpha + beta < 1")
    theta: float | None = Field(None, description="Mean-reversion strength, [0, 1]")
    switch_prob: float | None = Field(None, description="Regime flip probability, [0, 1]")
    num_paths: int | None = Field(None, description="Simulated paths, 100-10000")
    num_steps: int | None = Field(None, description="Simulated trading days, 10-1000")


class StressScenarioIn(BaseModel):
    name: str
    volatility_shock: float = Field(description="Multiplier on the initial volatility")
    drift_shock: float = Field(description="Additive drift adjustment")
    correlation_shock: float = Field(0.0, description="Reserved; unused for a single asset")


class SimulationRequest(BaseModel):
    closes: list[float] = Field(description="Closing prices, oldest first")
    params: SimulationParamsIn = Field(default_factory=SimulationParamsIn)
    seed: int | None = Field(None, description="Random seed; seeded responses are cached")
    include_paths: bool = Field(False, description="Return every simulated path")


class StressRequest(BaseModel):
    closes: list[float] = Field(description="Closing prices, oldest first")
    params: SimulationParamsIn = Field(default_factory=SimulationParamsIn)
    scenarios: list[StressScenarioIn] | None = Field(
        None, description="Scenarios to run (default: built-in set)"
    )
    seed: int | None = None


class PerformanceRequest(BaseModel):
    closes: list[float] = Field(description="Closing prices, oldest first")
    benchmark_returns: list[float] | None = Field(
        None, description="Benchmark log returns aligned with the asset returns"
    )


class RegimeRequest(BaseModel):
    closes: list[float] = Field(description="Closing prices, oldest first")
    switch_prob: float | None = None
    seed: int | None = None


# --- Result schemas ---


class ProbabilitiesOut(BaseModel):
    upside20: float = Field(description="P(terminal >= 1.2 x initial)")
    downside10: float = Field(description="P(terminal <= 0.9 x initial)")


class HistogramBinOut(BaseModel):
    bin: float = Field(description="Lower bin edge")
    count: int


class SimulationResultOut(BaseModel):
    probabilities: ProbabilitiesOut
    histogram: list[HistogramBinOut]
    percentiles: dict[str, float]
    var95: float
    var99: float
    expected_shortfall95: float
    expected_shortfall99: float
    current_volatility: float
    trend: float
    drift: float
    paths: list[list[float]] | None = None


class StressResultOut(BaseModel):
    scenario: StressScenarioIn
    var95: float
    var99: float
    expected_shortfall95: float
    expected_shortfall99: float
    probability_of_loss: float
    max_drawdown: float


class PerformanceMetricsOut(BaseModel):
    sharpe_ratio: float
    sortino_ratio: float
    max_drawdown: float
    calmar_ratio: float
    information_ratio: float
    beta: float
    alpha: float
    treynor_ratio: float


class RegimePairOut(BaseModel):
    bull: float
    bear: float


class RegimeAnalysisOut(BaseModel):
    bull_market_probability: float
    bear_market_probability: float
    regime_duration: RegimePairOut
    regime_volatility: RegimePairOut
    regime_returns: RegimePairOut


# --- System schemas ---


class HealthResponse(BaseModel):
    status: str = "ok"
    version: str = "0.1.0"
    service: str = "quantrisk-api"
