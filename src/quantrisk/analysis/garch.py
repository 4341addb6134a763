"""GARCH(1,1) conditional volatility estimation.

The recursion var_t = omega + alpha * r_{t-1}^2 + beta * var_{t-1} is
clamped to [MIN_VARIANCE, MAX_VARIANCE] at every step. The same clamped
step drives volatility evolution inside the Monte Carlo simulator.
"""

import logging
import warnings

import numpy as np

from quantrisk.analysis.errors import InputError, ParameterRangeError
from quantrisk.analysis.types import GarchParams

logger = logging.getLogger(__name__)

MIN_VARIANCE = 1e-8
MAX_VARIANCE = 1e4
MIN_FIT_RETURNS = 30
MAX_PERSISTENCE = 0.999  # alpha + beta cap applied to fitted parameters


def validate_garch_params(alpha: float, beta: float) -> None:
    """Raise ParameterRangeError unless the GARCH(1,1) process is stationary."""
    if not 0 <= alpha <= 1:
        raise ParameterRangeError("Alpha must be between 0 and 1")
    if not 0 <= beta <= 1:
        raise ParameterRangeError("Beta must be between 0 and 1")
    if alpha + beta >= 1:
        raise ParameterRangeError("Alpha + Beta must be less than 1 for GARCH stability")


def garch_variance_step(omega, alpha, beta, shock, volatility):
    """One bounded GARCH(1,1) variance update.

    Works elementwise on scalars or numpy arrays.
    """
    variance = omega + alpha * shock**2 + beta * volatility**2
    return np.clip(variance, MIN_VARIANCE, MAX_VARIANCE)


def calculate_garch_volatility(returns: np.ndarray, alpha: float, beta: float) -> np.ndarray:
    """Estimate the per-step conditional standard deviation of a return series.

    Args:
        returns: Log returns (chronological order).
        alpha: Weight on the previous squared shock.
        beta: Weight on the previous variance.

    Returns:
        Array of volatilities, same length as ``returns``.

    Raises:
        InputError: empty return series.
        ParameterRangeError: alpha/beta out of [0, 1] or alpha + beta >= 1.
    """
    returns = np.asarray(returns, dtype=np.float64)
    if returns.size == 0:
        raise InputError("No returns data provided")
    validate_garch_params(alpha, beta)

    n = len(returns)
    if n == 1:
        return np.array([np.sqrt(max(returns[0] ** 2, MIN_VARIANCE))])

    sample_var = max(float(np.var(returns, ddof=1)), MIN_VARIANCE)
    omega = sample_var * (1 - alpha - beta)

    volatilities = np.empty(n)
    volatilities[0] = np.sqrt(min(sample_var, MAX_VARIANCE))
    for t in range(1, n):
        variance = garch_variance_step(omega, alpha, beta, returns[t - 1], volatilities[t - 1])
        volatilities[t] = np.sqrt(variance)

    logger.debug(
        "GARCH(1,1): n=%d alpha=%.3f beta=%.3f last_vol=%.6f",
        n, alpha, beta, volatilities[-1],
    )
    return volatilities


def fit_garch_params(returns: np.ndarray) -> GarchParams | None:
    """Fit GARCH(1,1) alpha/beta by maximum likelihood.

    Returns None when there is too little data or the optimiser fails;
    callers fall back to configured parameters.
    """
    returns = np.asarray(returns, dtype=np.float64)
    if len(returns) < MIN_FIT_RETURNS:
        logger.debug("GARCH fit: insufficient data (%d returns)", len(returns))
        return None

    try:
        from arch import arch_model

        with warnings.catch_warnings():
            warnings.simplefilter("ignore")

            scaled_returns = returns * 100  # arch expects percentage returns
            model = arch_model(scaled_returns, vol="Garch", p=1, q=1, mean="Constant", dist="normal")
            result = model.fit(disp="off", show_warning=False)

        alpha = float(result.params["alpha[1]"])
        beta = float(result.params["beta[1]"])

    except Exception as e:
        logger.debug("GARCH fit failed: %s", e)
        return None

    if not (np.isfinite(alpha) and np.isfinite(beta)):
        logger.debug("GARCH fit: non-finite parameters")
        return None

    alpha = float(np.clip(alpha, 0.0, 1.0))
    beta = float(np.clip(beta, 0.0, 1.0))
    persistence = alpha + beta
    if persistence >= 1:
        # Rescale onto the stationary region, keeping the alpha/beta ratio
        scale = MAX_PERSISTENCE / persistence
        alpha *= scale
        beta *= scale

    logger.debug("GARCH fit: alpha=%.4f beta=%.4f", alpha, beta)
    return GarchParams(alpha=alpha, beta=beta)
