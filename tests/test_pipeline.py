"""Tests for the end-to-end analysis pipeline and synthetic data helpers."""

import dataclasses
from datetime import datetime, timedelta

import numpy as np
import pytest

from quantrisk.analysis.errors import InputError, ParameterRangeError
from quantrisk.analysis.garch import calculate_garch_volatility
from quantrisk.analysis.pipeline import run_analysis, run_full_report
from quantrisk.analysis.returns import calculate_returns
from quantrisk.analysis.synthetic import generate_synthetic_walk, run_self_check
from quantrisk.analysis.trend import calculate_trend_and_drift
from quantrisk.analysis.types import SimulationParams


@pytest.fixture
def params():
    return SimulationParams(num_paths=200, num_steps=20)


class TestRunAnalysis:
    def test_seeds_simulation_from_history(self, price_points, params):
        result = run_analysis(price_points, params, rng=1)

        returns = calculate_returns(price_points)
        expected_vol = calculate_garch_volatility(returns, params.alpha, params.beta)[-1]
        expected = calculate_trend_and_drift(price_points, params.theta)

        assert result.current_volatility == pytest.approx(expected_vol)
        assert result.trend == pytest.approx(expected.trend)
        assert result.drift == pytest.approx(expected.drift)
        assert np.all(result.paths[:, 0] == price_points[-1].close)
        assert result.paths.shape == (200, 21)

    def test_accepts_plain_closes(self, closes, params):
        a = run_analysis(closes, params, rng=4)
        b = run_analysis(np.asarray(closes), params, rng=4)
        np.testing.assert_array_equal(a.paths, b.paths)

    def test_defaults(self, closes):
        result = run_analysis(closes, rng=0, max_workers=2)
        assert result.paths.shape == (1000, 253)

    def test_validates_before_computing(self, closes):
        with pytest.raises(ParameterRangeError):
            run_analysis(closes, SimulationParams(alpha=0.6, beta=0.6))

    def test_too_few_prices(self, params):
        with pytest.raises(InputError):
            run_analysis([100.0], params)


class TestRunFullReport:
    def test_report_sections(self, price_points, params):
        report = run_full_report(price_points, params, rng=3)

        assert report.simulation.paths.shape == (200, 21)
        assert len(report.stress) == 5
        assert len(report.regimes) == len(price_points) - 1
        total = report.regime.bull_market_probability + report.regime.bear_market_probability
        assert total == pytest.approx(1.0)
        assert np.isfinite(report.performance.sharpe_ratio)

    def test_reproducible(self, closes, params):
        a = run_full_report(closes, params, rng=21)
        b = run_full_report(closes, params, rng=21)
        assert a.to_dict() == b.to_dict()
        np.testing.assert_array_equal(a.regimes, b.regimes)

    def test_to_dict_omits_paths_by_default(self, closes, params):
        data = run_full_report(closes, params, rng=2).to_dict()
        assert "paths" not in data["simulation"]
        assert set(data) == {"simulation", "stress", "performance", "regime"}

    def test_benchmark_is_used(self, closes, params):
        returns = calculate_returns(closes)
        report = run_full_report(closes, params, rng=2, benchmark_returns=returns)
        assert report.performance.beta == pytest.approx(1.0)


    def test_report_copies_caller_regimes(self, closes, params):
        report = run_full_report(closes, params, rng=2)
        regimes = np.array(report.regimes)
        rebuilt = dataclasses.replace(report, regimes=regimes)

        assert regimes.flags.writeable
        assert not rebuilt.regimes.flags.writeable
        regimes[0] = -regimes[0]
        assert rebuilt.regimes[0] == report.regimes[0]


class TestGenerateSyntheticWalk:
    def test_length_and_dates(self):
        walk = generate_synthetic_walk(30, 0.001, 0.01, rng=1, start_date=datetime(2023, 6, 1))
        assert len(walk) == 30
        assert walk[0].timestamp == datetime(2023, 6, 1)
        assert walk[-1].timestamp - walk[0].timestamp == timedelta(days=29)

    def test_first_close_is_start_price(self):
        walk = generate_synthetic_walk(5, 0.0, 0.02, rng=1, start_price=250.0)
        assert walk[0].close == 250.0

    def test_ohlc_consistent(self):
        for bar in generate_synthetic_walk(100, 0.0, 0.02, rng=2):
            assert bar.close > 0
            assert bar.low <= bar.close <= bar.high
            assert bar.volume >= 0

    def test_zero_volatility_is_exponential(self):
        walk = generate_synthetic_walk(4, 0.01, 0.0, rng=1)
        closes = [bar.close for bar in walk]
        np.testing.assert_allclose(closes, 100.0 * np.exp(0.01 * np.arange(4)))

    def test_invalid_length(self):
        with pytest.raises(InputError):
            generate_synthetic_walk(0, 0.0, 0.01)


class TestRunSelfCheck:
    def test_passes(self):
        success, errors = run_self_check(rng=2024)
        assert success, errors
        assert errors == []

    def test_passes_unseeded(self):
        success, errors = run_self_check()
        assert success, errors
