"""Monte Carlo price-path simulator.

Each path evolves a price with drift and a GARCH(1,1) volatility that is
updated from the path's own realised returns:

    ret   = drift * dt - 0.5 * vol^2 * dt + vol * sqrt(dt) * Z
    price = max(price * exp(ret), MIN_PRICE)
    vol   = sqrt(clip(omega + alpha * ret^2 + beta * vol^2))

Paths are generated in fixed-size blocks (map), each block with its own
child random generator, and reduced once all blocks finish.
"""

import logging
import math
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed

import numpy as np

from quantrisk.analysis.errors import InputError, ParameterRangeError, SimulationCancelled
from quantrisk.analysis.garch import garch_variance_step, validate_garch_params
from quantrisk.analysis.rng import RandomSource, spawn_rngs
from quantrisk.analysis.statistics import calculate_statistics
from quantrisk.analysis.types import SimulationParams, SimulationResult

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

TRADING_DAYS_PER_YEAR = 252
DT = 1 / TRADING_DAYS_PER_YEAR
MIN_PRICE = 0.01

MIN_PATHS, MAX_PATHS = 100, 10000
MIN_STEPS, MAX_STEPS = 10, 1000

DEFAULT_BLOCK_SIZE = 250
DEFAULT_MAX_WORKERS = 4


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


def validate_params(params: SimulationParams) -> None:
    """Raise ParameterRangeError if any simulation parameter is out of bounds."""
    validate_garch_params(params.alpha, params.beta)
    if not 0 <= params.theta <= 1:
        raise ParameterRangeError("Theta must be between 0 and 1")
    if not 0 <= params.switch_prob <= 1:
        raise ParameterRangeError("Switch probability must be between 0 and 1")
    if not MIN_PATHS <= params.num_paths <= MAX_PATHS:
        raise ParameterRangeError(f"Number of paths must be between {MIN_PATHS} and {MAX_PATHS}")
    if not MIN_STEPS <= params.num_steps <= MAX_STEPS:
        raise ParameterRangeError(f"Number of steps must be between {MIN_STEPS} and {MAX_STEPS}")


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------


def run_monte_carlo_simulation(
    initial_price: float,
    params: SimulationParams,
    initial_volatility: float,
    drift: float,
    rng: RandomSource = None,
    *,
    max_workers: int = DEFAULT_MAX_WORKERS,
    block_size: int = DEFAULT_BLOCK_SIZE,
    cancel_event: threading.Event | None = None,
) -> SimulationResult:
    """Simulate ``params.num_paths`` independent price paths and their risk statistics.

    Args:
        initial_price: Seed price for every path (> 0).
        params: Validated simulation parameters.
        initial_volatility: Seed per-step volatility (> 0), usually the last
            GARCH estimate.
        drift: Annualised drift term.
        rng: Generator, integer seed, or None for a non-seeded run. A given
            seed reproduces the result bit for bit regardless of
            ``max_workers``.
        max_workers: Threads used for the path blocks.
        block_size: Paths per block; each block owns one child generator.
        cancel_event: Checked before each block and each simulated step.

    Returns:
        SimulationResult with current_volatility=initial_volatility and
        the drift used; trend is left at 0.0.

    Raises:
        ParameterRangeError: invalid params.
        InputError: non-positive initial price or volatility.
        SimulationCancelled: cancel_event was set before all blocks ran.
    """
    validate_params(params)
    if not initial_price > 0:
        raise InputError("Initial price must be positive")
    if not initial_volatility > 0:
        raise InputError("Initial volatility must be positive")
    if block_size < 1:
        raise ParameterRangeError("Block size must be at least 1")

    num_paths, num_steps = params.num_paths, params.num_steps
    omega = initial_volatility * initial_volatility * (1 - params.alpha - params.beta)

    num_blocks = math.ceil(num_paths / block_size)
    block_rngs = spawn_rngs(rng, num_blocks)
    block_sizes = [min(block_size, num_paths - i * block_size) for i in range(num_blocks)]

    def run_block(index: int) -> np.ndarray:
        if cancel_event is not None and cancel_event.is_set():
            raise SimulationCancelled("Simulation cancelled")
        return simulate_path_block(
            block_rngs[index],
            block_sizes[index],
            num_steps,
            initial_price,
            initial_volatility,
            drift,
            params.alpha,
            params.beta,
            omega,
            cancel_event,
        )

    logger.debug(
        "Monte Carlo: %d paths x %d steps in %d blocks (%d workers)",
        num_paths, num_steps, num_blocks, max_workers,
    )

    if max_workers <= 1 or num_blocks == 1:
        blocks = [run_block(i) for i in range(num_blocks)]
    else:
        blocks = _run_blocks_parallel(run_block, num_blocks, max_workers)

    paths = np.vstack(blocks)
    result = calculate_statistics(
        paths,
        initial_price,
        current_volatility=initial_volatility,
        drift=drift,
    )
    logger.info(
        "Monte Carlo complete: %d paths, VaR95=%.4f, P(up20)=%.3f",
        num_paths, result.var95, result.probabilities.upside20,
    )
    return result


def simulate_path_block(
    rng: np.random.Generator,
    num_paths: int,
    num_steps: int,
    initial_price: float,
    initial_volatility: float,
    drift: float,
    alpha: float,
    beta: float,
    omega: float,
    cancel_event: threading.Event | None = None,
) -> np.ndarray:
    """Generate a (num_paths, num_steps + 1) block of price paths.

    Standard normals come from the Box-Muller transform of two uniform
    draws, u in (0, 1] and v in [0, 1). ``cancel_event`` is checked before
    every step.
    """
    u = 1.0 - rng.random((num_steps, num_paths))
    v = rng.random((num_steps, num_paths))
    z = np.sqrt(-2.0 * np.log(u)) * np.cos(2.0 * np.pi * v)

    sqrt_dt = math.sqrt(DT)
    paths = np.empty((num_paths, num_steps + 1))
    paths[:, 0] = initial_price

    price = np.full(num_paths, float(initial_price))
    volatility = np.full(num_paths, float(initial_volatility))

    for step in range(num_steps):
        if cancel_event is not None and cancel_event.is_set():
            raise SimulationCancelled("Simulation cancelled")
        ret = drift * DT - 0.5 * volatility * volatility * DT + volatility * sqrt_dt * z[step]
        price = np.maximum(price * np.exp(ret), MIN_PRICE)
        paths[:, step + 1] = price
        volatility = np.sqrt(garch_variance_step(omega, alpha, beta, ret, volatility))

    return paths


def _run_blocks_parallel(run_block, num_blocks: int, max_workers: int) -> list[np.ndarray]:
    """Map blocks over a thread pool, keeping results in block order."""
    blocks: list[np.ndarray | None] = [None] * num_blocks

    with ThreadPoolExecutor(max_workers=min(max_workers, num_blocks)) as executor:
        futures = {executor.submit(run_block, i): i for i in range(num_blocks)}
        try:
            for future in as_completed(futures):
                blocks[futures[future]] = future.result()
        except BaseException:
            for future in futures:
                future.cancel()
            raise

    return blocks
