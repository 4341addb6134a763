"""Markov bull/bear regime labelling and per-regime statistics."""

import logging

import numpy as np

from quantrisk.analysis.errors import InputError, ParameterRangeError
from quantrisk.analysis.rng import RandomSource, resolve_rng
from quantrisk.analysis.types import RegimeAnalysis, RegimePair

logger = logging.getLogger(__name__)

BULL = 1
BEAR = -1


def generate_markov_regime(
    returns: np.ndarray,
    switch_prob: float,
    rng: RandomSource = None,
) -> np.ndarray:
    """Label each return with a bull (+1) or bear (-1) regime.

    The chain starts in the regime matching the sign of the most recent
    return (zero counts as bull) and flips after each step with probability
    ``switch_prob``.

    Raises:
        InputError: empty return series.
        ParameterRangeError: switch_prob outside [0, 1].
    """
    returns = np.asarray(returns, dtype=np.float64)
    if returns.size == 0:
        raise InputError("No returns data provided")
    if not 0 <= switch_prob <= 1:
        raise ParameterRangeError("Switch probability must be between 0 and 1")

    generator = resolve_rng(rng)
    n = len(returns)
    start = BULL if returns[-1] >= 0 else BEAR

    # One draw per step; the flip after step t affects labels from t+1 on
    flips = generator.random(n) < switch_prob
    flips_before = np.concatenate(([0], np.cumsum(flips[:-1])))
    regimes = np.where(flips_before % 2 == 0, start, -start).astype(np.int8)

    logger.debug("Markov regime: n=%d switches=%d", n, int(flips_before[-1]))
    return regimes


def analyze_regime(returns: np.ndarray, regimes: np.ndarray) -> RegimeAnalysis:
    """Summarise regime frequency, average run length, volatility and return.

    Raises:
        InputError: length mismatch, empty input, or labels other than +1/-1.
    """
    returns = np.asarray(returns, dtype=np.float64)
    regimes = np.asarray(regimes)
    if len(returns) != len(regimes):
        raise InputError("Returns and regimes arrays must have the same length")
    if len(regimes) == 0:
        raise InputError("No regime data provided")
    if not np.all(np.isin(regimes, (BULL, BEAR))):
        raise InputError("Regime labels must be +1 (bull) or -1 (bear)")

    bull_mask = regimes == BULL
    bear_mask = ~bull_mask
    total = len(regimes)
    bull_count = int(bull_mask.sum())

    bull_durations, bear_durations = _run_lengths(regimes)

    return RegimeAnalysis(
        bull_market_probability=bull_count / total,
        bear_market_probability=(total - bull_count) / total,
        regime_duration=RegimePair(
            bull=_mean_or_zero(bull_durations),
            bear=_mean_or_zero(bear_durations),
        ),
        regime_volatility=RegimePair(
            bull=_sample_std_or_zero(returns[bull_mask]),
            bear=_sample_std_or_zero(returns[bear_mask]),
        ),
        regime_returns=RegimePair(
            bull=_mean_or_zero(returns[bull_mask]),
            bear=_mean_or_zero(returns[bear_mask]),
        ),
    )


def _run_lengths(regimes: np.ndarray) -> tuple[list[int], list[int]]:
    """Run-length encode a label sequence into bull and bear run lengths."""
    bull_runs: list[int] = []
    bear_runs: list[int] = []

    current = regimes[0]
    length = 1
    for label in regimes[1:]:
        if label == current:
            length += 1
            continue
        (bull_runs if current == BULL else bear_runs).append(length)
        current = label
        length = 1
    (bull_runs if current == BULL else bear_runs).append(length)

    return bull_runs, bear_runs


def _mean_or_zero(values) -> float:
    if len(values) == 0:
        return 0.0
    return float(np.mean(values))


def _sample_std_or_zero(values: np.ndarray) -> float:
    if len(values) < 2:
        return 0.0
    return float(np.std(values, ddof=1))
