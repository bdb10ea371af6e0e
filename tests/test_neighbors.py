# -*- coding: utf-8 -*-
"""
Tests for the weighted k-nearest-neighbour regressor.

Run with:
    pytest tests/test_neighbors.py -v
"""

import numpy as np
import pytest

from forecasting.neighbors import (
    NeighborRegressor,
    NeighborWeights,
    directional_similarity,
)
from forecasting.samples import Sample


def _samples(pairs, start=100.0):
    return [Sample(float(x), float(y), start + i) for i, (x, y) in enumerate(pairs)]


@pytest.fixture
def knn():
    reg = NeighborRegressor(k=3, clock=lambda: 200.0)
    reg.update(_samples([(1, 2), (2, 4), (3, 6), (10, 20)]))
    return reg


class TestConfiguration:

    def test_default_weights(self):
        w = NeighborRegressor().weights
        assert (w.distance, w.recency, w.similarity) == pytest.approx((0.6, 0.3, 0.1))

    def test_set_weights_merges_and_renormalizes(self):
        reg = NeighborRegressor()
        w = reg.set_weights(distance=1.0)
        assert w.distance + w.recency + w.similarity == pytest.approx(1.0)
        assert w.distance == pytest.approx(1.0 / 1.4)
        assert w.recency == pytest.approx(0.3 / 1.4)

    def test_set_weights_unknown_key(self):
        with pytest.raises(ValueError):
            NeighborRegressor().set_weights(speed=1.0)

    @pytest.mark.parametrize('k, expected', [(0, 1), (-5, 1), (1, 1), (7, 7)])
    def test_set_k_clamps(self, k, expected):
        reg = NeighborRegressor()
        reg.set_k(k)
        assert reg.k == expected

    def test_custom_weights_normalized_on_init(self):
        reg = NeighborRegressor(weights=NeighborWeights(2.0, 1.0, 1.0))
        assert reg.weights.distance == pytest.approx(0.5)


class TestSimilarity:

    @pytest.mark.parametrize('a, b, expected', [
        (2.0, 3.0, 1.0), (-2.0, 3.0, -1.0), (-1.0, -4.0, 1.0), (0.0, 3.0, 0.0), (3.0, 0.0, 0.0),
        (1e200, 2.5e200, 1.0), (-1e200, 2.5e200, -1.0),
    ])
    def test_directional_similarity(self, a, b, expected):
        assert directional_similarity(a, b) == expected


class TestPrediction:

    def test_empty(self):
        result = NeighborRegressor().predict_detailed(1.0)
        assert result.value == 0.0
        assert result.confidence == 0.0
        assert result.neighbors == []

    def test_single_sample(self):
        reg = NeighborRegressor()
        reg.update(_samples([(5, 9)]))
        result = reg.predict_detailed(100.0)
        assert result.value == 9.0
        assert result.confidence == 0.3

    def test_top_k_prefers_close_samples(self, knn):
        neighbors = knn.find_neighbors(2.1)
        assert len(neighbors) == 3
        assert neighbors[0].sample.input == 2.0
        assert 10.0 not in [n.sample.input for n in neighbors]

    def test_sorted_by_composite_weight(self, knn):
        weights = [n.composite_weight for n in knn.find_neighbors(4.0)]
        assert weights == sorted(weights, reverse=True)

    def test_k_beyond_sample_count_clamps(self, knn):
        knn.set_k(50)
        assert len(knn.find_neighbors(2.0)) == 4
        assert np.isfinite(knn.predict(2.0))

    def test_composite_weight_formula(self):
        reg = NeighborRegressor(k=1, clock=lambda: 10.0)
        reg.update([Sample(2.0, 4.0, 10.0), Sample(4.0, 8.0, 0.0)])
        best = reg.find_neighbors(3.0)[0]
        # newest sample: age 0 -> recency 1
        expected = (1 / (1.0 + 1e-8)) * 0.6 + 1.0 * 0.3 + (1.0 + 1.0) * 0.1
        assert best.sample.input == 2.0
        assert best.composite_weight == pytest.approx(expected)
        assert best.recency_weight == 1.0

    def test_recency_decay(self):
        reg = NeighborRegressor(clock=lambda: 10.0)
        reg.update([Sample(1.0, 1.0, 10.0), Sample(1.0, 1.0, 5.0), Sample(1.0, 1.0, 0.0)])
        rec = sorted(n.recency_weight for n in reg.find_neighbors(1.0))
        assert rec == pytest.approx([np.exp(-2.0), np.exp(-1.0), 1.0])

    def test_recency_all_equal_age(self):
        reg = NeighborRegressor(clock=lambda: 5.0)
        reg.update([Sample(1.0, 1.0, 5.0), Sample(2.0, 2.0, 5.0)])
        assert all(n.recency_weight == 1.0 for n in reg.find_neighbors(1.5))

    def test_blend_of_sub_estimates(self, knn):
        neighbors = knn.find_neighbors(2.5, now=200.0)
        expected = (0.4 * knn.weighted_average(neighbors)
                    + 0.4 * knn.distance_weighted(neighbors)
                    + 0.2 * knn.local_regression(neighbors))
        assert knn.predict_detailed(2.5, now=200.0).value == pytest.approx(expected)

    def test_local_regression_at_top_neighbor(self, knn):
        neighbors = knn.find_neighbors(2.1)
        # neighbours lie on y = 2x, evaluated at the top neighbour's input
        assert knn.local_regression(neighbors) == pytest.approx(2 * neighbors[0].sample.input)

    def test_local_regression_degenerate_falls_back(self):
        reg = NeighborRegressor(clock=lambda: 3.0)
        reg.update(_samples([(1, 2), (1, 4), (1, 6)], start=0.0))
        neighbors = reg.find_neighbors(1.0)
        assert reg.local_regression(neighbors) == pytest.approx(reg.weighted_average(neighbors))

    def test_huge_inputs_stay_finite(self):
        reg = NeighborRegressor(clock=lambda: 3.0)
        reg.update(_samples([(1e200, 1), (2e200, 2), (3e200, 3)], start=0.0))
        neighbors = reg.find_neighbors(2.5e200)
        assert reg.local_regression(neighbors) == pytest.approx(reg.weighted_average(neighbors))

        result = reg.predict_detailed(2.5e200)
        assert 1.0 <= result.value <= 3.0
        assert 0.0 <= result.confidence <= 0.9

    def test_exact_match_dominates_distance_weighted(self, knn):
        neighbors = knn.find_neighbors(3.0)
        assert knn.distance_weighted(neighbors) == pytest.approx(6.0, abs=1e-6)

    def test_confidence_formula(self, knn):
        result = knn.predict_detailed(2.5)
        avg_d = np.mean([n.distance for n in result.neighbors])
        avg_r = np.mean([n.recency_weight for n in result.neighbors])
        assert result.confidence == pytest.approx(min(0.9, 0.7 / (avg_d + 1) + 0.3 * avg_r))
        assert 0.0 <= result.confidence <= 0.9

    def test_fit_from_arrays(self):
        reg = NeighborRegressor(clock=lambda: 50.0).fit([1, 2, 3], [2, 4, 6])
        assert reg.get_info()['n_samples'] == 3
        assert np.isfinite(reg.predict(2.5))

    def test_duplicate_inputs_both_count(self):
        reg = NeighborRegressor(k=2, clock=lambda: 1.0)
        reg.update([Sample(1.0, 0.0, 1.0), Sample(1.0, 10.0, 1.0)])
        assert reg.predict(1.0) == pytest.approx(5.0)
