# -*- coding: utf-8 -*-
"""
Pattern Forecasting Module
==========================

Multi-model prediction engine over sparse one-dimensional
``(input, output)`` samples.

Architecture:
    Data:
        - samples: Append-only sample store with change notification

    Sub-models:
        - neural: Trainable feed-forward regressor (residual around a trend)
        - spectral: Frequency-domain extrapolator (DFT, three strategies)
        - neighbors: Recency-aware weighted k-nearest-neighbour regressor
        - linear: Least-squares fallback and Pearson correlation

    Orchestration:
        - ensemble: Eager retraining and confidence-weighted combination

Example Usage:
    >>> from forecasting import EnsemblePredictor, TrainableRegressor
    >>>
    >>> ensemble = EnsemblePredictor(regressor=TrainableRegressor(random_state=42))
    >>> ensemble.add_sample(1, 2)
    >>> ensemble.add_sample(2, 4)
    >>> ensemble.add_sample(3, 6)
    >>> result = ensemble.predict(4)
    >>> print(result.prediction, result.confidence, result.method)
"""

# Sample store
from .samples import Sample, SampleStore, SAMPLE_FORMAT_VERSION

# Sub-models
from .linear import LeastSquaresFit, fit_least_squares, pearson_correlation
from .spectral import SpectralResult, compute_spectrum, FrequencyAnalyzer
from .neighbors import (
    NeighborWeights,
    NeighborCandidate,
    NeighborPrediction,
    NeighborRegressor,
)
from .neural import (
    NormalizationStats,
    RegressorState,
    fit_regressor_state,
    TrainableRegressor,
)

# Orchestrator
from .ensemble import (
    ModelContribution,
    PredictionResult,
    PatternAnalysis,
    EnsemblePredictor,
)

# Base classes
from .base import BaseForecaster

__all__ = [
    # Samples
    'Sample',
    'SampleStore',
    'SAMPLE_FORMAT_VERSION',

    # Sub-models
    'LeastSquaresFit',
    'fit_least_squares',
    'pearson_correlation',
    'SpectralResult',
    'compute_spectrum',
    'FrequencyAnalyzer',
    'NeighborWeights',
    'NeighborCandidate',
    'NeighborPrediction',
    'NeighborRegressor',
    'NormalizationStats',
    'RegressorState',
    'fit_regressor_state',
    'TrainableRegressor',

    # Orchestrator
    'ModelContribution',
    'PredictionResult',
    'PatternAnalysis',
    'EnsemblePredictor',

    # Base
    'BaseForecaster',
]
