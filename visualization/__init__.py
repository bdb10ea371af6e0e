# -*- coding: utf-8 -*-
"""
Visualization Package
=====================

Diagnostic figures for the pattern ensemble.

Quick start::

    from visualization import PredictionPlotter
    viz = PredictionPlotter('result/figures')
    paths = viz.generate_all(ensemble, queries=[4.0, 5.0])
"""

from .base import BasePlotter, apply_style, PALETTE, MODEL_COLORS
from .prediction_plots import PredictionPlotter

__all__ = [
    'BasePlotter',
    'apply_style',
    'PALETTE',
    'MODEL_COLORS',
    'PredictionPlotter',
]
