"""Tests for risk-adjusted performance ratios."""

import numpy as np
import pytest

from quantrisk.analysis.errors import InputError
from quantrisk.analysis.performance import (
    RISK_FREE_RATE,
    TRADING_DAYS_PER_YEAR,
    calculate_performance_metrics,
    max_drawdown_from_prices,
)


class TestCalculatePerformanceMetrics:
    def test_requires_three_prices(self):
        with pytest.raises(InputError):
            calculate_performance_metrics([100.0, 101.0])

    def test_non_positive_price_raises(self):
        with pytest.raises(InputError):
            calculate_performance_metrics([100.0, -1.0, 101.0])

    def test_sharpe_matches_definition(self, closes):
        returns = np.diff(np.log(closes))
        ann_return = returns.mean() * TRADING_DAYS_PER_YEAR
        ann_vol = returns.std(ddof=1) * np.sqrt(TRADING_DAYS_PER_YEAR)

        metrics = calculate_performance_metrics(closes)

        assert metrics.sharpe_ratio == pytest.approx((ann_return - RISK_FREE_RATE) / ann_vol)

    def test_sortino_uses_returns_below_mean(self, closes):
        returns = np.diff(np.log(closes))
        mean = returns.mean()
        downside = returns[returns < mean]
        downside_dev = np.sqrt(np.mean((downside - mean) ** 2)) * np.sqrt(TRADING_DAYS_PER_YEAR)

        metrics = calculate_performance_metrics(closes)

        assert metrics.sortino_ratio == pytest.approx(
            (mean * TRADING_DAYS_PER_YEAR - RISK_FREE_RATE) / downside_dev
        )

    def test_defaults_without_benchmark(self, closes):
        metrics = calculate_performance_metrics(closes)
        assert metrics.beta == 1.0
        assert metrics.alpha == 0.0
        assert metrics.information_ratio == 0.0
        assert metrics.treynor_ratio == 0.0

    def test_benchmark_identical_to_asset(self, closes):
        returns = np.diff(np.log(closes))
        metrics = calculate_performance_metrics(closes, benchmark_returns=returns)

        assert metrics.beta == pytest.approx(1.0)
        assert metrics.alpha == pytest.approx(0.0, abs=1e-12)
        assert metrics.information_ratio == 0.0
        assert metrics.treynor_ratio == pytest.approx(
            returns.mean() * TRADING_DAYS_PER_YEAR - RISK_FREE_RATE
        )

    def test_benchmark_beta(self, closes, rng):
        returns = np.diff(np.log(closes))
        benchmark = returns / 2 + rng.normal(0, 1e-4, len(returns))
        metrics = calculate_performance_metrics(closes, benchmark_returns=benchmark)
        assert metrics.beta == pytest.approx(2.0, rel=0.05)
        assert metrics.information_ratio != 0.0

    def test_mismatched_benchmark_ignored(self, closes):
        metrics = calculate_performance_metrics(closes, benchmark_returns=[0.01, 0.02])
        assert metrics.beta == 1.0
        assert metrics.treynor_ratio == 0.0

    def test_flat_prices_give_zero_ratios(self):
        metrics = calculate_performance_metrics([100.0, 100.0, 100.0])
        assert metrics.sharpe_ratio == 0.0
        assert metrics.sortino_ratio == 0.0
        assert metrics.max_drawdown == 0.0
        assert metrics.calmar_ratio == 0.0

    def test_custom_risk_free_rate(self, closes):
        base = calculate_performance_metrics(closes, risk_free_rate=0.0)
        higher = calculate_performance_metrics(closes, risk_free_rate=0.05)
        assert higher.sharpe_ratio < base.sharpe_ratio

    def test_calmar(self):
        closes = [100.0, 120.0, 90.0, 130.0]
        returns = np.diff(np.log(closes))
        metrics = calculate_performance_metrics(closes)
        assert metrics.max_drawdown == pytest.approx(0.25)
        assert metrics.calmar_ratio == pytest.approx(returns.mean() * TRADING_DAYS_PER_YEAR / 0.25)


class TestMaxDrawdownFromPrices:
    def test_peak_to_trough(self):
        assert max_drawdown_from_prices([100.0, 120.0, 90.0, 130.0]) == pytest.approx(0.25)

    def test_rising_prices(self):
        assert max_drawdown_from_prices([100.0, 101.0, 102.0]) == 0.0

    def test_empty(self):
        assert max_drawdown_from_prices([]) == 0.0
