# -*- coding: utf-8 -*-
"""
Base Classes for the Pattern Models
===================================

This module provides the abstract base class shared by the three
sub-models of the ensemble.  Every model works on one-dimensional
``(input, output)`` pairs and answers scalar queries.
"""

import numpy as np
from typing import Dict, Any, Sequence
from abc import ABC, abstractmethod


class BaseForecaster(ABC):
    """
    Abstract base class for all one-dimensional pattern models.

    All models must implement:
    - fit(): Rebuild the model from a sample snapshot
    - predict(): Estimate the output for a single input
    - get_info(): Return a diagnostics dictionary
    """

    @abstractmethod
    def fit(self, inputs: Sequence[float], outputs: Sequence[float]) -> 'BaseForecaster':
        """
        Rebuild the model from scratch.

        Args:
            inputs: Observed inputs, shape (n_samples,)
            outputs: Observed outputs, shape (n_samples,)

        Returns:
            Self for method chaining
        """
        pass

    @abstractmethod
    def predict(self, x: float) -> float:
        """
        Estimate the output for one input value.

        Args:
            x: Query input

        Returns:
            Scalar estimate (0.0 when the model holds no data)
        """
        pass

    @abstractmethod
    def get_info(self) -> Dict[str, Any]:
        """Return model diagnostics."""
        pass

    def fit_predict(self, inputs: Sequence[float], outputs: Sequence[float],
                    x: float) -> float:
        """
        Fit model and make a prediction in one call.

        Args:
            inputs: Training inputs
            outputs: Training outputs
            x: Query input

        Returns:
            Prediction for *x*
        """
        self.fit(inputs, outputs)
        return self.predict(x)


def as_pairs(inputs: Sequence[float], outputs: Sequence[float]):
    """Convert paired sequences to float arrays, or ``None`` if they mismatch."""
    x = np.asarray(inputs, dtype=float).ravel()
    y = np.asarray(outputs, dtype=float).ravel()
    if x.shape != y.shape:
        return None
    return x, y
