"""Tests for the stress-test runner."""

import numpy as np
import pytest

from quantrisk.analysis.errors import ParameterRangeError
from quantrisk.analysis.stress import DEFAULT_STRESS_SCENARIOS, run_stress_test
from quantrisk.analysis.types import SimulationParams, StressScenario


@pytest.fixture
def params():
    return SimulationParams(num_paths=1000, num_steps=10)


class TestRunStressTest:
    def test_default_scenarios(self, params):
        results = run_stress_test(100.0, params, 0.2, 0.0, rng=1)
        assert [r.scenario.name for r in results] == [s.name for s in DEFAULT_STRESS_SCENARIOS]

    def test_empty_scenarios(self, params):
        assert run_stress_test(100.0, params, 0.2, 0.0, scenarios=[], rng=1) == []

    def test_result_ranges(self, params):
        for r in run_stress_test(100.0, params, 0.2, 0.0, rng=2):
            assert 0 <= r.probability_of_loss <= 1
            assert 0 <= r.max_drawdown < 1
            assert r.expected_shortfall95 >= r.var95
            assert r.expected_shortfall99 >= r.var99

    def test_volatility_shock_widens_tail(self, params):
        scenarios = [
            StressScenario(name="Base", volatility_shock=1.0, drift_shock=0.0),
            StressScenario(name="Spike", volatility_shock=2.0, drift_shock=0.0),
        ]
        base, spike = run_stress_test(100.0, params, 0.2, 0.0, scenarios, rng=3)
        assert spike.var95 > base.var95
        assert spike.max_drawdown > base.max_drawdown

    def test_drift_shock_changes_loss_probability(self, params):
        scenarios = [
            StressScenario(name="Crash", volatility_shock=3.0, drift_shock=-0.5),
            StressScenario(name="Rally", volatility_shock=0.8, drift_shock=0.2),
        ]
        crash, rally = run_stress_test(100.0, params, 0.2, 0.0, scenarios, rng=4)
        assert crash.probability_of_loss > rally.probability_of_loss

    def test_correlation_shock_is_carried_but_unused(self, params):
        with_corr = [StressScenario(name="C", volatility_shock=1.0, drift_shock=0.0, correlation_shock=0.9)]
        without = [StressScenario(name="C", volatility_shock=1.0, drift_shock=0.0)]
        a = run_stress_test(100.0, params, 0.2, 0.0, with_corr, rng=5)[0]
        b = run_stress_test(100.0, params, 0.2, 0.0, without, rng=5)[0]
        assert a.scenario.correlation_shock == 0.9
        assert a.var95 == b.var95

    def test_seed_reproducible(self, params):
        a = run_stress_test(100.0, params, 0.2, 0.0, rng=9)
        b = run_stress_test(100.0, params, 0.2, 0.0, rng=9)
        assert [r.var99 for r in a] == [r.var99 for r in b]

    def test_invalid_params_raise(self):
        with pytest.raises(ParameterRangeError):
            run_stress_test(100.0, SimulationParams(num_paths=10), 0.2, 0.0)

    def test_to_dict(self, params):
        data = run_stress_test(100.0, params, 0.2, 0.0, DEFAULT_STRESS_SCENARIOS[:1], rng=1)[0].to_dict()
        assert data["scenario"]["name"] == "Baseline"
        assert set(data) == {
            "scenario", "var95", "var99", "expected_shortfall95",
            "expected_shortfall99", "probability_of_loss", "max_drawdown",
        }
        assert np.isfinite(data["var95"])
