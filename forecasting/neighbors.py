# -*- coding: utf-8 -*-
"""
Weighted k-Nearest-Neighbour Regression
=======================================

Ranks stored samples by a composite relevance score

    w = w_d · 1/(|x − xᵢ| + ε)  +  w_r · exp(−ageᵢ / (½·age_max))  +  w_s · (simᵢ + 1)

where simᵢ = x·xᵢ / (|x|·|xᵢ|) is the directional similarity of the two
inputs (0 if either is zero).  The k best-ranked samples feed three
estimates that are blended 0.4 / 0.4 / 0.2:

    * composite-weighted average of outputs
    * inverse-distance weighted average of outputs
    * least-squares line through the neighbours, evaluated at the
      top-ranked neighbour's input
"""

from __future__ import annotations

import logging
import time
import numpy as np
from dataclasses import dataclass, replace
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence

from .base import BaseForecaster, as_pairs
from .linear import is_degenerate, ols_denominator
from .samples import Sample

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NeighborWeights:
    """Relative importance of the three relevance factors (sum to 1)."""
    distance: float = 0.6
    recency: float = 0.3
    similarity: float = 0.1

    def normalized(self) -> 'NeighborWeights':
        total = self.distance + self.recency + self.similarity
        if total <= 0:
            return self
        return NeighborWeights(self.distance / total,
                               self.recency / total,
                               self.similarity / total)

    def as_dict(self) -> Dict[str, float]:
        return {'distance': self.distance, 'recency': self.recency,
                'similarity': self.similarity}


@dataclass(frozen=True)
class NeighborCandidate:
    """Per-query scoring of one stored sample.  Never persisted."""
    sample: Sample
    distance: float
    composite_weight: float
    recency_weight: float
    similarity: float


@dataclass(frozen=True)
class NeighborPrediction:
    """Output of :meth:`NeighborRegressor.predict`."""
    value: float
    confidence: float
    neighbors: List[NeighborCandidate]


def directional_similarity(a: float, b: float) -> float:
    """Sign agreement of two scalars: 1, -1, or 0 when either is zero."""
    if a == 0 or b == 0:
        return 0.0
    return float(np.sign(a) * np.sign(b))


class NeighborRegressor(BaseForecaster):
    """
    Recency-aware weighted k-NN regressor.

    Parameters:
        k: Number of neighbours (clamped to ≥ 1, and to the sample count at
           query time)
        weights: Relevance factor weights, renormalised to sum to 1
        eps: Distance guard
        clock: Zero-argument callable giving the reference time for recency

    Example:
        >>> knn = NeighborRegressor(k=3)
        >>> knn.update(store.all())
        >>> result = knn.predict(4.0)
        >>> result.value, result.confidence
    """

    def __init__(
        self,
        k: int = 3,
        weights: Optional[NeighborWeights] = None,
        eps: float = 1e-8,
        clock: Optional[Callable[[], float]] = None,
    ):
        self.k = max(1, int(k))
        self.weights = (weights or NeighborWeights()).normalized()
        self.eps = eps
        self.clock = clock or time.time
        self._samples: List[Sample] = []

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    def set_k(self, k: int) -> None:
        self.k = max(1, int(k))

    def set_weights(self, **overrides: float) -> NeighborWeights:
        """Merge factor overrides, then renormalise so the weights sum to 1."""
        unknown = set(overrides) - {'distance', 'recency', 'similarity'}
        if unknown:
            raise ValueError(f'Unknown neighbour weight(s): {sorted(unknown)}')
        self.weights = replace(self.weights, **overrides).normalized()
        return self.weights

    # ------------------------------------------------------------------
    # Data
    # ------------------------------------------------------------------

    def update(self, samples: Iterable[Sample]) -> None:
        """Replace the stored copy, kept most-recent first."""
        self._samples = sorted(samples, key=lambda s: s.inserted_at, reverse=True)

    def fit(self, inputs: Sequence[float], outputs: Sequence[float],
            timestamps: Optional[Sequence[float]] = None) -> 'NeighborRegressor':
        """Build samples from plain arrays (all stamped now unless given)."""
        pairs = as_pairs(inputs, outputs)
        if pairs is None:
            self._samples = []
            return self
        x, y = pairs
        if timestamps is None:
            timestamps = np.full(x.size, float(self.clock()))
        self.update(Sample(float(a), float(b), float(t))
                    for a, b, t in zip(x, y, timestamps))
        return self

    # ------------------------------------------------------------------
    # Scoring
    # ------------------------------------------------------------------

    def _recency_weights(self, now: float) -> np.ndarray:
        stamps = np.array([s.inserted_at for s in self._samples])
        ref = max(now, stamps.max())
        ages = ref - stamps
        max_age = ages.max()
        if max_age <= 0:
            return np.ones_like(ages)
        return np.exp(-ages / (max_age * 0.5))

    def find_neighbors(self, x: float, now: Optional[float] = None) -> List[NeighborCandidate]:
        """Score every stored sample and return the top-k by composite weight."""
        if not self._samples:
            return []
        now = float(self.clock()) if now is None else float(now)
        recency = self._recency_weights(now)
        w = self.weights

        candidates = []
        for sample, rec in zip(self._samples, recency):
            distance = abs(x - sample.input)
            similarity = directional_similarity(x, sample.input)
            composite = ((1.0 / (distance + self.eps)) * w.distance
                         + rec * w.recency
                         + (similarity + 1.0) * w.similarity)
            candidates.append(NeighborCandidate(
                sample=sample,
                distance=distance,
                composite_weight=float(composite),
                recency_weight=float(rec),
                similarity=similarity,
            ))

        # Stable sort keeps recency order among equal scores
        candidates.sort(key=lambda c: c.composite_weight, reverse=True)
        return candidates[:min(self.k, len(candidates))]

    # ------------------------------------------------------------------
    # Sub-estimates
    # ------------------------------------------------------------------

    @staticmethod
    def weighted_average(neighbors: List[NeighborCandidate]) -> float:
        if not neighbors:
            return 0.0
        outputs = np.array([n.sample.output for n in neighbors])
        weights = np.array([n.composite_weight for n in neighbors])
        total = weights.sum()
        if total <= 0 or not np.isfinite(total):
            return float(outputs.mean())
        return float(np.dot(outputs, weights) / total)

    def distance_weighted(self, neighbors: List[NeighborCandidate]) -> float:
        if not neighbors:
            return 0.0
        outputs = np.array([n.sample.output for n in neighbors])
        weights = 1.0 / (np.array([n.distance for n in neighbors]) + self.eps)
        total = weights.sum()
        if total <= 0 or not np.isfinite(total):
            return float(outputs.mean())
        return float(np.dot(outputs, weights) / total)

    def local_regression(self, neighbors: List[NeighborCandidate]) -> float:
        """Least-squares line over the neighbours, read at the top neighbour's input."""
        if len(neighbors) < 2:
            return neighbors[0].sample.output if neighbors else 0.0

        x = np.array([n.sample.input for n in neighbors])
        y = np.array([n.sample.output for n in neighbors])
        denominator = ols_denominator(x)
        if is_degenerate(denominator):
            return self.weighted_average(neighbors)

        n = x.size
        with np.errstate(over='ignore', invalid='ignore'):
            slope = (n * np.dot(x, y) - x.sum() * y.sum()) / denominator
            intercept = (y.sum() - slope * x.sum()) / n
            value = float(slope * x[0] + intercept)
        if not np.isfinite(value):
            return self.weighted_average(neighbors)
        return value

    # ------------------------------------------------------------------
    # Prediction
    # ------------------------------------------------------------------

    def predict_detailed(self, x: float, now: Optional[float] = None) -> NeighborPrediction:
        if not self._samples:
            return NeighborPrediction(value=0.0, confidence=0.0, neighbors=[])

        if len(self._samples) == 1:
            only = self._samples[0]
            candidate = NeighborCandidate(
                sample=only,
                distance=abs(x - only.input),
                composite_weight=1.0,
                recency_weight=1.0,
                similarity=directional_similarity(x, only.input),
            )
            return NeighborPrediction(value=only.output, confidence=0.3,
                                      neighbors=[candidate])

        neighbors = self.find_neighbors(x, now)
        value = (0.4 * self.weighted_average(neighbors)
                 + 0.4 * self.distance_weighted(neighbors)
                 + 0.2 * self.local_regression(neighbors))

        avg_distance = float(np.mean([n.distance for n in neighbors]))
        avg_recency = float(np.mean([n.recency_weight for n in neighbors]))
        confidence = min(0.9, 0.7 / (avg_distance + 1.0) + 0.3 * avg_recency)

        logger.debug('k-NN query %.6g: %d neighbours, value=%.6g, confidence=%.3f',
                     x, len(neighbors), value, confidence)
        return NeighborPrediction(value=float(value), confidence=float(confidence),
                                  neighbors=neighbors)

    def predict(self, x: float) -> float:
        return self.predict_detailed(x).value

    def get_info(self) -> Dict[str, Any]:
        return {
            'k': self.k,
            'n_samples': len(self._samples),
            'weights': self.weights.as_dict(),
        }


__all__ = [
    'NeighborWeights',
    'NeighborCandidate',
    'NeighborPrediction',
    'NeighborRegressor',
    'directional_similarity',
]
