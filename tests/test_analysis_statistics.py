"""Tests for the risk statistics reduction."""

import numpy as np
import pytest

from quantrisk.analysis.statistics import (
    NUM_BINS,
    build_histogram,
    calculate_statistics,
    max_path_drawdown,
)


@pytest.fixture
def ladder_paths():
    """100 two-step paths from 100 to terminal prices 1..100."""
    terminal = np.arange(1, 101, dtype=float)
    return np.column_stack([np.full(100, 100.0), terminal])


class TestCalculateStatistics:
    def test_probabilities(self, ladder_paths):
        result = calculate_statistics(ladder_paths, 100.0)
        assert result.probabilities.upside20 == 0.0
        assert result.probabilities.downside10 == pytest.approx(0.9)

    def test_nearest_rank_percentiles(self, ladder_paths):
        result = calculate_statistics(ladder_paths, 100.0)
        assert result.percentiles["p5"] == 5.0
        assert result.percentiles["p50"] == 50.0
        assert result.percentiles["p95"] == 95.0

    def test_percentiles_non_decreasing(self, rng):
        paths = np.column_stack([np.full(500, 50.0), rng.lognormal(np.log(50), 0.2, 500)])
        values = list(calculate_statistics(paths, 50.0).percentiles.values())
        assert values == sorted(values)

    def test_var_anchored_to_initial_price(self, ladder_paths):
        result = calculate_statistics(ladder_paths, 100.0)
        # index floor(0.05 * 100) = 5 -> price 6
        assert result.var95 == pytest.approx(94.0)
        assert result.expected_shortfall95 == pytest.approx(100.0 - 3.5)
        # index floor(0.01 * 100) = 1 -> price 2
        assert result.var99 == pytest.approx(98.0)
        assert result.expected_shortfall99 == pytest.approx(98.5)

    def test_histogram_counts_all_paths(self, ladder_paths):
        result = calculate_statistics(ladder_paths, 100.0)
        assert len(result.histogram) == NUM_BINS
        assert sum(b.count for b in result.histogram) == 100
        assert result.histogram[0].bin == 1.0
        assert result.histogram[-1].count >= 1

    def test_passes_through_context(self, ladder_paths):
        result = calculate_statistics(ladder_paths, 100.0, current_volatility=0.2, trend=1.5, drift=-0.01)
        assert (result.current_volatility, result.trend, result.drift) == (0.2, 1.5, -0.01)

    def test_paths_read_only(self, ladder_paths):
        result = calculate_statistics(ladder_paths, 100.0)
        with pytest.raises(ValueError):
            result.paths[0, 0] = 1.0


class TestBuildHistogram:
    def test_max_lands_in_last_bin(self):
        bins = build_histogram(np.array([0.0, 10.0]), 0.0, 10.0, num_bins=5)
        assert [b.count for b in bins] == [1, 0, 0, 0, 1]
        assert [b.bin for b in bins] == [0.0, 2.0, 4.0, 6.0, 8.0]

    def test_flat_range_puts_everything_in_first_bin(self):
        values = np.full(7, 42.0)
        bins = build_histogram(values, 42.0, 42.0)
        assert bins[0].count == 7
        assert sum(b.count for b in bins) == 7
        assert all(b.bin == 42.0 for b in bins)


class TestMaxPathDrawdown:
    def test_peak_to_trough(self):
        paths = np.array([[100.0, 120.0, 90.0, 130.0], [100.0, 80.0, 85.0, 90.0]])
        assert max_path_drawdown(paths, 100.0) == pytest.approx(0.25)

    def test_monotonic_paths_have_no_drawdown(self):
        paths = np.array([[100.0, 101.0, 102.0]])
        assert max_path_drawdown(paths, 100.0) == 0.0


class TestInputOwnership:
    def test_caller_array_stays_writable(self, ladder_paths):
        result = calculate_statistics(ladder_paths, 100.0)
        assert ladder_paths.flags.writeable
        ladder_paths[0, 1] = 500.0
        assert result.paths[0, 1] == 1.0

    def test_result_paths_read_only(self, ladder_paths):
        result = calculate_statistics(ladder_paths, 100.0)
        assert not result.paths.flags.writeable
