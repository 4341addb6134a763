"""Risk analysis API endpoints.

Engine calls run in the threadpool so the event loop is never blocked by
a simulation. A request that exceeds the configured timeout sets the
engine's cancel event; the worker stops at its next path block.
"""

import asyncio
import logging
import threading

from fastapi import APIRouter, Depends, HTTPException
from fastapi.concurrency import run_in_threadpool

from quantrisk.analysis import (
    analyze_regime,
    calculate_performance_metrics,
    calculate_returns,
    generate_markov_regime,
    run_analysis,
    run_stress_test,
)
from quantrisk.analysis.garch import calculate_garch_volatility
from quantrisk.analysis.trend import calculate_trend_and_drift
from quantrisk.analysis.types import StressScenario
from quantrisk.config import Settings
from quantrisk.web.cache import CacheService
from quantrisk.web.dependencies import get_cache, get_settings
from quantrisk.web.schemas import (
    ApiResponse,
    Meta,
    PerformanceMetricsOut,
    PerformanceRequest,
    RegimeAnalysisOut,
    RegimeRequest,
    SimulationRequest,
    SimulationResultOut,
    StressRequest,
    StressResultOut,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/analysis", tags=["analysis"])


async def _run_cancellable(settings: Settings, func, *args, **kwargs):
    """Run an engine call off the event loop with a cancellable timeout."""
    cancel_event = threading.Event()
    try:
        return await asyncio.wait_for(
            asyncio.to_thread(func, *args, cancel_event=cancel_event, **kwargs),
            timeout=settings.simulation_timeout,
        )
    except asyncio.TimeoutError:
        cancel_event.set()
        logger.warning("%s timed out after %.1fs", func.__name__, settings.simulation_timeout)
        raise HTTPException(status_code=504, detail="Simulation timed out")


@router.post("/simulation", response_model=ApiResponse[SimulationResultOut])
async def simulate(
    request: SimulationRequest,
    settings: Settings = Depends(get_settings),
    cache: CacheService = Depends(get_cache),
):
    """Simulate forward price paths from a closing-price history."""
    cache_key = None
    if request.seed is not None:
        cache_key = cache.make_key("simulation", request.model_dump())
        cached = await cache.get(cache_key)
        if cached:
            return ApiResponse(data=cached, meta=Meta(cached=True))

    params = settings.simulation_params(**request.params.model_dump())
    result = await _run_cancellable(
        settings,
        run_analysis,
        request.closes,
        params,
        request.seed,
        max_workers=settings.simulation_max_workers,
        block_size=settings.simulation_block_size,
    )

    data = SimulationResultOut(**result.to_dict(include_paths=request.include_paths))
    if cache_key:
        await cache.set(cache_key, data)
    return ApiResponse(data=data)


@router.post("/stress", response_model=ApiResponse[list[StressResultOut]])
async def stress(
    request: StressRequest,
    settings: Settings = Depends(get_settings),
):
    """Run stress scenarios seeded from the price history."""
    params = settings.simulation_params(**request.params.model_dump())
    scenarios = None
    if request.scenarios is not None:
        scenarios = [StressScenario(**s.model_dump()) for s in request.scenarios]

    def run(cancel_event: threading.Event):
        returns = calculate_returns(request.closes)
        volatility = float(calculate_garch_volatility(returns, params.alpha, params.beta)[-1])
        drift = calculate_trend_and_drift(request.closes, params.theta).drift
        return run_stress_test(
            request.closes[-1],
            params,
            volatility,
            drift,
            scenarios,
            request.seed,
            max_workers=settings.simulation_max_workers,
            block_size=settings.simulation_block_size,
            cancel_event=cancel_event,
        )

    results = await _run_cancellable(settings, run)
    return ApiResponse(data=[StressResultOut(**r.to_dict()) for r in results])


@router.post("/performance", response_model=ApiResponse[PerformanceMetricsOut])
async def performance(
    request: PerformanceRequest,
    settings: Settings = Depends(get_settings),
):
    """Risk-adjusted performance ratios, optionally against a benchmark."""
    metrics = await run_in_threadpool(
        calculate_performance_metrics,
        request.closes,
        request.benchmark_returns,
        settings.risk_free_rate,
    )
    return ApiResponse(data=PerformanceMetricsOut(**metrics.to_dict()))


@router.post("/regime", response_model=ApiResponse[RegimeAnalysisOut])
async def regime(
    request: RegimeRequest,
    settings: Settings = Depends(get_settings),
):
    """Markov bull/bear regime statistics."""
    switch_prob = request.switch_prob
    if switch_prob is None:
        switch_prob = settings.simulation_switch_prob

    def run():
        returns = calculate_returns(request.closes)
        regimes = generate_markov_regime(returns, switch_prob, request.seed)
        return analyze_regime(returns, regimes)

    analysis = await run_in_threadpool(run)
    return ApiResponse(data=RegimeAnalysisOut(**analysis.to_dict()))
