# -*- coding: utf-8 -*-
"""
Prediction Plots
================

Diagnostic figures for the ensemble: observed samples with the combined
prediction curve and each sub-model's curve, the confidence profile, and
the amplitude spectrum of the output sequence.
"""

from __future__ import annotations

import numpy as np
from typing import Any, List, Optional, Sequence

from .base import BasePlotter, MODEL_COLORS, PALETTE, plt


class PredictionPlotter(BasePlotter):
    """Figures describing one trained ensemble."""

    def __init__(self, output_dir: str = 'result/figures', dpi: int = 150,
                 figsize=(10, 6), curve_points: int = 200, curve_margin: float = 0.25):
        super().__init__(output_dir, dpi, figsize)
        self.curve_points = curve_points
        self.curve_margin = curve_margin

    def _grid(self, inputs: np.ndarray, queries: Sequence[float] = ()) -> np.ndarray:
        points = np.concatenate([inputs, np.asarray(queries, dtype=float)])
        lo, hi = float(points.min()), float(points.max())
        span = hi - lo if hi > lo else 1.0
        margin = span * self.curve_margin
        return np.linspace(lo - margin, hi + margin, self.curve_points)

    def plot_prediction_curve(
        self,
        ensemble: Any,
        queries: Sequence[float] = (),
        save_name: str = 'prediction_curve.png',
    ) -> Optional[str]:
        """Samples, ensemble curve and sub-model curves; queries marked."""
        x, y = ensemble.store.arrays()
        if x.size < 2:
            return None

        grid = self._grid(x, queries)
        results = [ensemble.predict(v) for v in grid]
        combined = np.array([r.prediction for r in results])
        confidence = np.array([r.confidence for r in results])

        fig, (ax, ax_conf) = plt.subplots(
            2, 1, figsize=self.figsize, sharex=True,
            gridspec_kw={'height_ratios': [3, 1]},
        )

        # Dropped (non-finite) contributions leave gaps in their curve
        methods = list(dict.fromkeys(c.method for r in results for c in r.per_model))
        for method in methods:
            values = [next((c.value for c in r.per_model if c.method == method), np.nan)
                      for r in results]
            ax.plot(grid, values, lw=1.2, ls='--', alpha=0.8,
                    color=MODEL_COLORS.get(method, PALETTE['slate']),
                    label=method)
        ax.plot(grid, combined, lw=2.4, color=MODEL_COLORS['ensemble'], label='ensemble')
        ax.scatter(x, y, s=50, color=PALETTE['deep_blue'], zorder=5, label='samples')

        if len(queries):
            q_results = [ensemble.predict(q) for q in queries]
            ax.scatter(queries, [r.prediction for r in q_results], marker='D', s=60,
                       color=PALETTE['teal'], edgecolors='black', zorder=6,
                       label='queries')

        ax.set_ylabel('Output')
        ax.set_title(f'Ensemble prediction ({x.size} samples)')
        ax.legend(loc='best')

        ax_conf.fill_between(grid, confidence, color=PALETTE['royal_blue'], alpha=0.3)
        ax_conf.plot(grid, confidence, color=PALETTE['royal_blue'], lw=1.5)
        ax_conf.set_ylim(0, 1)
        ax_conf.set_xlabel('Input')
        ax_conf.set_ylabel('Confidence')

        return self._save(fig, save_name)

    def plot_spectrum(self, spectrum: Any,
                      save_name: str = 'amplitude_spectrum.png') -> Optional[str]:
        """Stem plot of the amplitude spectrum with the dominant bin highlighted."""
        if spectrum.size == 0:
            return None

        fig, ax = plt.subplots(figsize=self.figsize)
        markerline, stemlines, _ = ax.stem(spectrum.frequencies, spectrum.amplitudes)
        plt.setp(stemlines, color=PALETTE['royal_blue'])
        plt.setp(markerline, color=PALETTE['royal_blue'])
        if spectrum.max_amplitude > 0:
            ax.scatter([spectrum.dominant_frequency], [spectrum.max_amplitude], s=120,
                       color=PALETTE['crimson'], zorder=5,
                       label=f'dominant f = {spectrum.dominant_frequency:.4f}')
            ax.legend(loc='best')
        ax.axvline(0.5, color=PALETTE['slate'], lw=0.8, ls=':')
        ax.set_xlabel('Frequency (cycles / sample)')
        ax.set_ylabel('Amplitude')
        ax.set_title(f'Amplitude spectrum (N = {spectrum.size}, '
                     f'{spectrum.signal_length} samples)')
        return self._save(fig, save_name)

    def generate_all(self, ensemble: Any, queries: Sequence[float] = ()) -> List[str]:
        """Every figure that applies to the current ensemble state."""
        paths = [
            self.plot_prediction_curve(ensemble, queries),
            self.plot_spectrum(ensemble.analyzer.get_spectrum()),
        ]
        return [p for p in paths if p is not None]


__all__ = ['PredictionPlotter']
