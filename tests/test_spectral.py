# -*- coding: utf-8 -*-
"""
Tests for the frequency-domain extrapolator.

Covers:
    - Spectrum index alignment and power-of-two padding
    - Dominant-frequency selection (DC and upper half excluded)
    - Each extrapolation strategy and the 0.4 / 0.4 / 0.2 blend
    - Degenerate inputs (fewer than two samples, zero input range)
    - Determinism

Run with:
    pytest tests/test_spectral.py -v
"""

import numpy as np
import pytest

from forecasting.spectral import (
    FrequencyAnalyzer,
    SpectralResult,
    compute_spectrum,
    next_power_of_two,
)


class TestComputeSpectrum:

    @pytest.mark.parametrize('n, expected', [(1, 1), (2, 2), (3, 4), (5, 8), (8, 8), (9, 16)])
    def test_next_power_of_two(self, n, expected):
        assert next_power_of_two(n) == expected

    @pytest.mark.parametrize('n', [2, 3, 5, 7, 8, 13])
    def test_arrays_aligned_and_padded(self, n):
        rng = np.random.RandomState(n)
        s = compute_spectrum(rng.randn(n))
        assert len(s.frequencies) == len(s.amplitudes) == len(s.phases)
        assert s.size == next_power_of_two(n)
        assert s.signal_length == n

    def test_unpadded_length(self):
        s = compute_spectrum([1.0, 2.0, 3.0], pad=False)
        assert s.size == 3

    def test_matches_numpy_fft(self):
        signal = np.array([1.0, -2.0, 0.5, 3.0, 0.0, 1.0, 2.0, -1.0])
        s = compute_spectrum(signal)
        ref = np.fft.fft(signal)
        np.testing.assert_allclose(s.amplitudes, np.abs(ref) / 8, atol=1e-12)
        np.testing.assert_allclose(s.frequencies, np.arange(8) / 8)

    def test_dominant_frequency_of_pure_tone(self):
        n = 16
        k = 3
        signal = np.sin(2 * np.pi * k * np.arange(n) / n)
        s = compute_spectrum(signal)
        assert s.dominant_index == k
        assert s.dominant_frequency == pytest.approx(k / n)
        assert s.max_amplitude == pytest.approx(0.5)

    def test_dc_excluded(self):
        s = compute_spectrum([5.0, 5.0, 5.0, 5.0])
        assert s.amplitudes[0] == pytest.approx(5.0)
        assert s.dominant_frequency == 0.0
        assert s.max_amplitude == 0.0

    def test_two_samples_have_no_lower_half_bin(self):
        s = compute_spectrum([1.0, 3.0])
        assert s.dominant_index == 0
        assert s.dominant_frequency == 0.0

    def test_empty(self):
        s = compute_spectrum([])
        assert s.size == 0

    def test_result_arrays_read_only(self):
        s = compute_spectrum([1.0, 2.0, 3.0, 4.0])
        with pytest.raises(ValueError):
            s.amplitudes[0] = 1.0

    def test_misaligned_result_rejected(self):
        with pytest.raises(ValueError):
            SpectralResult(frequencies=np.zeros(2), amplitudes=np.zeros(3), phases=np.zeros(2))


class TestFrequencyAnalyzer:

    @pytest.fixture
    def linear(self):
        fa = FrequencyAnalyzer()
        fa.analyze([1, 2, 3], [2, 4, 6])
        return fa

    def test_requires_two_samples(self):
        fa = FrequencyAnalyzer()
        assert fa.analyze([1.0], [2.0]) is None
        assert not fa.is_analyzed
        assert fa.predict(3.0) == 0.0
        assert fa.confidence(3.0) == 0.0

    def test_mismatched_lengths_reset(self, linear):
        assert linear.analyze([1, 2, 3], [1, 2]) is None
        assert not linear.is_analyzed

    def test_spectrum_of_linear_fixture(self, linear):
        s = linear.get_spectrum()
        # [2, 4, 6, 0]: X1 = -4 - 4j
        assert s.size == 4
        assert s.dominant_index == 1
        assert s.max_amplitude == pytest.approx(np.sqrt(32) / 4)

    def test_interpolation_inside_range(self):
        fa = FrequencyAnalyzer()
        fa.analyze([0, 10, 20], [0, 5, 30])
        assert fa.predict_interpolated(5.0) == pytest.approx(2.5)
        assert fa.predict_interpolated(15.0) == pytest.approx(17.5)

    def test_interpolation_extrapolates_edges(self):
        fa = FrequencyAnalyzer()
        fa.analyze([0, 10, 20], [0, 5, 30])
        assert fa.predict_interpolated(-10.0) == pytest.approx(-5.0)
        assert fa.predict_interpolated(30.0) == pytest.approx(55.0)

    def test_interpolation_order_independent(self):
        fa = FrequencyAnalyzer()
        fa.analyze([3, 1, 2], [6, 2, 4])
        assert fa.predict_interpolated(4.0) == pytest.approx(8.0)

    def test_interpolation_averages_duplicates(self):
        fa = FrequencyAnalyzer()
        fa.analyze([1, 1, 2], [2, 4, 5])
        assert fa.predict_interpolated(1.0) == pytest.approx(3.0)
        assert fa.predict_interpolated(1.5) == pytest.approx(4.0)

    def test_blend_weights(self, linear):
        parts = linear.predict_components(4.0)
        expected = 0.4 * parts['sinusoidal'] + 0.4 * parts['interpolation'] + 0.2 * parts['phase']
        assert linear.predict(4.0) == pytest.approx(expected)

    def test_sinusoidal_formula(self, linear):
        s = linear.get_spectrum()
        u = (4.0 - 1.0) / 2.0
        expected = 4.0 + s.max_amplitude * np.sin(2 * np.pi * s.dominant_frequency * u)
        assert linear.predict_sinusoidal(4.0) == pytest.approx(expected)

    def test_phase_formula(self, linear):
        s = linear.get_spectrum()
        u = (4.0 - 1.0) / 2.0
        expected = 4.0 + 0.5 * s.amplitudes.max() * np.cos(s.phases.mean() + 2 * np.pi * u)
        assert linear.predict_phase(4.0) == pytest.approx(expected)

    def test_phase_uses_global_peak(self, linear):
        # DC bin 12 / 4 = 3 outweighs the dominant non-DC amplitude 1.414
        assert linear.get_spectrum().amplitudes.max() == pytest.approx(3.0)
        assert linear.predict_phase(4.0) == pytest.approx(2.5)

    def test_zero_input_range_is_finite(self):
        fa = FrequencyAnalyzer()
        fa.analyze([2, 2, 2], [1, 5, 3])
        for x in (2.0, 3.0, -100.0):
            assert np.isfinite(fa.predict(x))

    def test_deterministic(self):
        x = [0.5, 1.7, 2.2, 4.0, 5.5]
        y = [1.0, -1.0, 0.3, 2.2, 0.0]
        a, b = FrequencyAnalyzer(), FrequencyAnalyzer()
        sa, sb = a.analyze(x, y), b.analyze(x, y)
        np.testing.assert_array_equal(sa.amplitudes, sb.amplitudes)
        np.testing.assert_array_equal(sa.phases, sb.phases)
        assert a.predict(3.3) == b.predict(3.3)

    def test_confidence_decays_outside_range(self, linear):
        assert linear.confidence(2.0) == 1.0
        assert linear.confidence(4.0) == pytest.approx(1 / 1.5)
        assert linear.confidence(10.0) < linear.confidence(4.0)

    def test_get_info(self, linear):
        info = linear.get_info()
        assert info['analyzed'] is True
        assert info['spectrum_length'] == 4
        assert info['n_samples'] == 3
