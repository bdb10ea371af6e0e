# -*- coding: utf-8 -*-
"""
Tests for the least-squares baseline and correlation helpers.

Run with:
    pytest tests/test_linear.py -v
"""

import numpy as np
import pytest

from forecasting.linear import (
    fit_least_squares,
    fit_quality,
    is_degenerate,
    ols_denominator,
    pearson_correlation,
)


class TestLeastSquares:

    def test_exact_line(self):
        fit = fit_least_squares([1, 2, 3], [2, 4, 6])
        assert not fit.degenerate
        assert fit.slope == pytest.approx(2.0)
        assert fit.intercept == pytest.approx(0.0, abs=1e-12)
        assert fit.predict(4.0) == pytest.approx(8.0)
        assert fit.r_squared == pytest.approx(1.0)

    def test_array_predict(self):
        fit = fit_least_squares([0, 1], [1, 3])
        np.testing.assert_allclose(fit.predict(np.array([2.0, 3.0])), [5.0, 7.0])

    def test_single_point_is_flat(self):
        fit = fit_least_squares([5], [9])
        assert fit.degenerate
        assert fit.predict(100.0) == 9.0

    def test_constant_inputs_degenerate(self):
        fit = fit_least_squares([2, 2, 2], [1, 2, 3])
        assert fit.degenerate
        assert fit.slope == 0.0
        assert fit.intercept == pytest.approx(2.0)

    def test_empty_and_mismatched(self):
        assert fit_least_squares([], []).n_samples == 0
        assert fit_least_squares([1, 2], [1]).predict(3.0) == 0.0

    def test_huge_inputs_degenerate(self):
        # n·Σx² overflows to inf, so the denominator is inf - inf
        fit = fit_least_squares([1e200, 2e200, 3e200], [1, 2, 3])
        assert fit.degenerate
        assert fit.predict(2.5e200) == pytest.approx(2.0)


class TestDegeneracy:

    def test_denominator(self):
        assert ols_denominator(np.array([1.0, 2.0, 3.0])) == pytest.approx(6.0)
        assert not np.isfinite(ols_denominator(np.array([1e200, 2e200, 3e200])))

    @pytest.mark.parametrize('value, expected', [
        (6.0, False), (-6.0, False), (0.0, True), (1e-12, True),
        (float('inf'), True), (float('nan'), True),
    ])
    def test_is_degenerate(self, value, expected):
        assert is_degenerate(value) is expected


class TestFitQuality:

    def test_perfect(self):
        assert fit_quality([1, 2, 3], [1, 2, 3]) == 1.0

    def test_clipped_at_zero(self):
        assert fit_quality([1, 2, 3], [3, 2, 1]) == 0.0

    def test_non_finite_predictions(self):
        assert fit_quality([1, 2], [1, np.nan]) == 0.0

    def test_single_point(self):
        assert fit_quality([4.0], [4.0]) == 1.0
        assert fit_quality([4.0], [5.0]) == 0.0


class TestPearson:

    def test_hand_computed_fixture(self):
        x = [1.0, 2.0, 3.0, 4.0]
        y = [1.0, 3.0, 2.0, 5.0]
        # Σdx·dy = 5.5, Σdx² = 5, Σdy² = 8.75
        expected = 5.5 / np.sqrt(5.0 * 8.75)
        assert pearson_correlation(x, y) == pytest.approx(expected, abs=1e-9)

    def test_perfect_correlation(self):
        assert pearson_correlation([1, 2, 3], [2, 4, 6]) == pytest.approx(1.0, abs=1e-9)
        assert pearson_correlation([1, 2, 3], [6, 4, 2]) == pytest.approx(-1.0, abs=1e-9)

    @pytest.mark.parametrize('x, y', [
        ([1.0], [2.0]),
        ([1, 1, 1], [1, 2, 3]),
        ([1, 2, 3], [5, 5, 5]),
        ([1, 2], [1]),
    ])
    def test_degenerate_is_zero(self, x, y):
        assert pearson_correlation(x, y) == 0.0
