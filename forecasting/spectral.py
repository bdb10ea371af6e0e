# -*- coding: utf-8 -*-
"""
Frequency-Domain Extrapolation
==============================

Discrete Fourier analysis of the output sequence and three extrapolation
strategies built on it:

    1. Sinusoidal     ŷ₁ = ȳ + A·sin(2π·f*·u)
    2. Interpolation  ŷ₂ = piecewise-linear through the observed pairs,
                           extended linearly past the edges
    3. Phase-based    ŷ₃ = ȳ + ½A·cos(φ̄ + 2π·u)

    ŷ = 0.4·ŷ₁ + 0.4·ŷ₂ + 0.2·ŷ₃

where f* is the dominant frequency (largest non-DC amplitude in the lower
half of the spectrum), A its amplitude, φ̄ the mean phase and
u = (x − x_min) / (x_max − x_min) the query mapped onto the observed range.

The output sequence is zero-padded to the next power of two before the
transform, so the spectrum may be longer than the sample count.
"""

import numpy as np
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Sequence
from scipy.fft import fft

from .base import BaseForecaster, as_pairs


def next_power_of_two(n: int) -> int:
    """Smallest power of two ≥ *n* (1 for n ≤ 1)."""
    if n <= 1:
        return 1
    return 1 << (int(n) - 1).bit_length()


@dataclass(frozen=True)
class SpectralResult:
    """
    Spectrum of one analysis call.

    ``frequencies[i]``, ``amplitudes[i]`` and ``phases[i]`` describe the
    same component; the three arrays always share one length.

    Attributes:
        frequencies: k / N for k = 0..N-1 (cycles per sample)
        amplitudes: |X_k| / N
        phases: atan2(Im X_k, Re X_k)
        dominant_frequency: Frequency of the strongest non-DC lower-half bin
        dominant_index: Bin index of the dominant frequency (0 if none)
        max_amplitude: Amplitude at ``dominant_index`` (0 if none)
        signal_length: Length before padding
    """
    frequencies: np.ndarray = field(default_factory=lambda: np.zeros(0))
    amplitudes: np.ndarray = field(default_factory=lambda: np.zeros(0))
    phases: np.ndarray = field(default_factory=lambda: np.zeros(0))
    dominant_frequency: float = 0.0
    dominant_index: int = 0
    max_amplitude: float = 0.0
    signal_length: int = 0

    def __post_init__(self):
        lengths = {len(self.frequencies), len(self.amplitudes), len(self.phases)}
        if len(lengths) != 1:
            raise ValueError(
                f'Spectral arrays must share one length, got '
                f'{len(self.frequencies)}/{len(self.amplitudes)}/{len(self.phases)}'
            )
        for arr in (self.frequencies, self.amplitudes, self.phases):
            arr.flags.writeable = False

    @property
    def size(self) -> int:
        return len(self.frequencies)

    @property
    def mean_phase(self) -> float:
        return float(self.phases.mean()) if self.size else 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            'frequencies': self.frequencies.tolist(),
            'amplitudes': self.amplitudes.tolist(),
            'phases': self.phases.tolist(),
            'dominant_frequency': self.dominant_frequency,
        }


def compute_spectrum(signal: Sequence[float], pad: bool = True) -> SpectralResult:
    """
    Discrete Fourier decomposition of *signal*.

    Args:
        signal: Real-valued sequence
        pad: Zero-pad to the next power of two first

    Returns:
        SpectralResult (empty when *signal* is empty)
    """
    values = np.asarray(signal, dtype=float).ravel()
    n = values.size
    if n == 0:
        return SpectralResult()

    n_fft = next_power_of_two(n) if pad else n
    padded = np.zeros(n_fft)
    padded[:n] = values

    coeffs = fft(padded)
    # Rounding noise would otherwise flip phases of (near) real bins by ±π
    tol = 1e-12 * max(1.0, float(np.abs(coeffs).max()))
    real = np.where(np.abs(coeffs.real) < tol, 0.0, coeffs.real)
    imag = np.where(np.abs(coeffs.imag) < tol, 0.0, coeffs.imag)

    amplitudes = np.hypot(real, imag) / n_fft
    phases = np.arctan2(imag, real)
    frequencies = np.arange(n_fft) / n_fft

    # Skip DC and the mirrored upper half
    upper = (n_fft + 1) // 2
    dominant_index = 0
    max_amplitude = 0.0
    if upper > 1:
        candidate = 1 + int(np.argmax(amplitudes[1:upper]))
        if amplitudes[candidate] > 0:
            dominant_index = candidate
            max_amplitude = float(amplitudes[candidate])

    return SpectralResult(
        frequencies=frequencies,
        amplitudes=amplitudes,
        phases=phases,
        dominant_frequency=float(frequencies[dominant_index]),
        dominant_index=dominant_index,
        max_amplitude=max_amplitude,
        signal_length=n,
    )


class FrequencyAnalyzer(BaseForecaster):
    """
    Spectral extrapolator over one-dimensional samples.

    Deterministic: identical samples always give an identical spectrum and
    identical predictions.

    Parameters:
        sinusoid_weight: Weight of the dominant-frequency sinusoid
        interpolation_weight: Weight of the piecewise-linear estimate
        phase_weight: Weight of the mean-phase cosine
        pad_to_power_of_two: Zero-pad the output sequence before the transform
        eps: Guard for zero input ranges

    Example:
        >>> fa = FrequencyAnalyzer()
        >>> spectrum = fa.analyze([1, 2, 3, 4], [0, 1, 0, -1])
        >>> fa.predict(5.0)
    """

    def __init__(
        self,
        sinusoid_weight: float = 0.4,
        interpolation_weight: float = 0.4,
        phase_weight: float = 0.2,
        pad_to_power_of_two: bool = True,
        eps: float = 1e-8,
    ):
        self.sinusoid_weight = sinusoid_weight
        self.interpolation_weight = interpolation_weight
        self.phase_weight = phase_weight
        self.pad_to_power_of_two = pad_to_power_of_two
        self.eps = eps

        self._spectrum: Optional[SpectralResult] = None
        self._inputs = np.zeros(0)
        self._outputs = np.zeros(0)

    # ------------------------------------------------------------------
    # Analysis
    # ------------------------------------------------------------------

    def analyze(self, inputs: Sequence[float],
                outputs: Sequence[float]) -> Optional[SpectralResult]:
        """
        Recompute the spectrum from scratch.

        Fewer than two pairs (or mismatched lengths) reset the analyzer and
        return ``None``.
        """
        pairs = as_pairs(inputs, outputs)
        if pairs is None or pairs[0].size < 2:
            self.reset()
            return None

        x, y = pairs
        spectrum = compute_spectrum(y, pad=self.pad_to_power_of_two)
        self._inputs, self._outputs, self._spectrum = x.copy(), y.copy(), spectrum
        return spectrum

    def fit(self, inputs: Sequence[float], outputs: Sequence[float]) -> 'FrequencyAnalyzer':
        self.analyze(inputs, outputs)
        return self

    def reset(self) -> None:
        self._spectrum = None
        self._inputs = np.zeros(0)
        self._outputs = np.zeros(0)

    @property
    def is_analyzed(self) -> bool:
        return self._spectrum is not None

    # ------------------------------------------------------------------
    # Prediction
    # ------------------------------------------------------------------

    def _normalized(self, x: float) -> float:
        lo, hi = self._inputs.min(), self._inputs.max()
        return float((x - lo) / max(hi - lo, self.eps))

    def predict_sinusoidal(self, x: float) -> float:
        s = self._spectrum
        u = self._normalized(x)
        return float(self._outputs.mean()
                     + s.max_amplitude * np.sin(2 * np.pi * s.dominant_frequency * u))

    def predict_interpolated(self, x: float) -> float:
        """Linear interpolation between bracketing inputs, edge-pair extrapolation outside."""
        # Duplicate inputs are averaged so each contributes
        xs, inverse = np.unique(self._inputs, return_inverse=True)
        ys = np.bincount(inverse, weights=self._outputs) / np.bincount(inverse)
        if xs.size == 1:
            return float(ys[0])

        if x < xs[0]:
            x0, x1, y0, y1 = xs[0], xs[1], ys[0], ys[1]
        elif x > xs[-1]:
            x0, x1, y0, y1 = xs[-2], xs[-1], ys[-2], ys[-1]
        else:
            return float(np.interp(x, xs, ys))

        slope = (y1 - y0) / (x1 - x0)
        anchor_x, anchor_y = (x0, y0) if x < xs[0] else (x1, y1)
        return float(anchor_y + slope * (x - anchor_x))

    def predict_phase(self, x: float) -> float:
        """Half the largest amplitude of the whole spectrum (DC included), phase-shifted."""
        s = self._spectrum
        u = self._normalized(x)
        peak = float(s.amplitudes.max())
        return float(self._outputs.mean()
                     + 0.5 * peak * np.cos(s.mean_phase + 2 * np.pi * u))

    def predict_components(self, x: float) -> Dict[str, float]:
        """Return each strategy's estimate, keyed by strategy name."""
        if not self.is_analyzed:
            return {'sinusoidal': 0.0, 'interpolation': 0.0, 'phase': 0.0}
        return {
            'sinusoidal': self.predict_sinusoidal(x),
            'interpolation': self.predict_interpolated(x),
            'phase': self.predict_phase(x),
        }

    def predict(self, x: float) -> float:
        """Weighted blend of the three strategies; 0.0 before analysis."""
        if not self.is_analyzed:
            return 0.0
        parts = self.predict_components(x)
        return float(
            self.sinusoid_weight * parts['sinusoidal']
            + self.interpolation_weight * parts['interpolation']
            + self.phase_weight * parts['phase']
        )

    def confidence(self, x: float) -> float:
        """1 inside the observed input range, decaying with distance outside it."""
        if not self.is_analyzed:
            return 0.0
        lo, hi = self._inputs.min(), self._inputs.max()
        outside = max(lo - x, x - hi, 0.0)
        return float(1.0 / (1.0 + outside / max(hi - lo, self.eps)))

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    def get_spectrum(self) -> SpectralResult:
        return self._spectrum if self._spectrum is not None else SpectralResult()

    def get_dominant_frequency(self) -> float:
        return self._spectrum.dominant_frequency if self._spectrum is not None else 0.0

    def get_info(self) -> Dict[str, Any]:
        spectrum = self.get_spectrum()
        return {
            'analyzed': self.is_analyzed,
            'n_samples': int(self._inputs.size),
            'spectrum_length': spectrum.size,
            'dominant_frequency': spectrum.dominant_frequency,
            'max_amplitude': spectrum.max_amplitude,
            'weights': {
                'sinusoidal': self.sinusoid_weight,
                'interpolation': self.interpolation_weight,
                'phase': self.phase_weight,
            },
        }


__all__ = ['SpectralResult', 'compute_spectrum', 'next_power_of_two', 'FrequencyAnalyzer']
