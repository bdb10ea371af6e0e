# -*- coding: utf-8 -*-
"""
Visualization Shared Utilities
==============================

Palette constants, the styling helper, and the ``BasePlotter`` base
class shared by the plotters.
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Tuple

import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt

PALETTE = {
    'deep_blue':   '#1B2838',
    'royal_blue':  '#2E86AB',
    'teal':        '#0E7C7B',
    'amber':       '#F18F01',
    'crimson':     '#C73E1D',
    'magenta':     '#A23B72',
    'slate':       '#626D71',
    'light_gray':  '#F0F0F0',
}

# One colour per sub-model, keyed by the method names used in predictions
MODEL_COLORS = {
    'neural':   PALETTE['royal_blue'],
    'linear':   PALETTE['slate'],
    'fourier':  PALETTE['magenta'],
    'neighbor': PALETTE['amber'],
    'ensemble': PALETTE['crimson'],
}


def apply_style(dpi: int = 150) -> None:
    """Apply one consistent style to all figures."""
    plt.rcParams.update({
        'figure.dpi': dpi,
        'savefig.dpi': dpi,
        'font.family': 'sans-serif',
        'font.sans-serif': ['DejaVu Sans', 'Arial', 'Helvetica', 'sans-serif'],
        'font.size': 10,
        'axes.titlesize': 13,
        'axes.titleweight': 'bold',
        'axes.labelsize': 11,
        'axes.grid': True,
        'grid.alpha': 0.25,
        'grid.linestyle': '--',
        'legend.fontsize': 9,
        'legend.framealpha': 0.9,
        'figure.facecolor': 'white',
        'savefig.facecolor': 'white',
        'savefig.bbox': 'tight',
    })


class BasePlotter:
    """
    Shared functionality for plotter subclasses.

    Subclasses build a figure and hand it to ``self._save(fig, name)``,
    which writes it, records the path and closes it.
    """

    def __init__(self,
                 output_dir: str = 'result/figures',
                 dpi: int = 150,
                 figsize: Tuple[int, int] = (10, 6)):
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)
        self.dpi = dpi
        self.figsize = figsize
        self.generated_figures: List[str] = []
        apply_style(dpi)

    def _save(self, fig, name: str) -> str:
        """Save *fig* to *output_dir/name*, record it, close it."""
        path = self.output_dir / name
        try:
            fig.savefig(path, dpi=self.dpi, bbox_inches='tight',
                        facecolor='white', edgecolor='none')
        finally:
            plt.close(fig)
        self.generated_figures.append(str(path))
        return str(path)

    def get_generated_figures(self) -> List[str]:
        return list(self.generated_figures)


__all__ = ['PALETTE', 'MODEL_COLORS', 'apply_style', 'BasePlotter', 'plt']
