# -*- coding: utf-8 -*-
"""
Ensemble Pattern Predictor
==========================

Owns the sample store and the three sub-models, keeps them in lock-step,
and merges their estimates into one confidence-scored prediction.

Architecture:
    SampleStore ──(change notification)──► retrain all sub-models
         │
    predict(x) ─┬─ TrainableRegressor  (ŷ₁, base weight 0.4)
                │    └─ least-squares line if the network is unusable
                ├─ FrequencyAnalyzer   (ŷ₂, base weight 0.3)
                └─ NeighborRegressor   (ŷ₃, base weight 0.3)

Combination:
    wᵢ = baseᵢ · cᵢ               (cᵢ = sub-model confidence)
    ŷ  = Σ wᵢ·ŷᵢ / Σ wᵢ
    σ² = Σ wᵢ·(ŷᵢ − ŷ)² / Σ wᵢ
    confidence = min(0.95, max(0, 1 − σ / |ŷ + 1|))

If every cᵢ is zero the base weights are used unchanged.  Each entry of
``per_model`` reports its normalised share wᵢ / Σ wᵢ as ``effective_weight``.
"""

import logging
import threading
import numpy as np
from dataclasses import dataclass, field, asdict, replace
from typing import Any, Callable, Dict, List, Optional, Sequence

from .linear import LeastSquaresFit, fit_least_squares, pearson_correlation
from .neighbors import NeighborRegressor, NeighborWeights
from .neural import TrainableRegressor
from .samples import Sample, SampleStore, _as_finite_float
from .spectral import FrequencyAnalyzer

logger = logging.getLogger(__name__)

NO_DATA_METHOD = 'no data'
SINGLE_POINT_METHOD = 'single point'
SINGLE_POINT_CONFIDENCE = 0.1
MAX_CONFIDENCE = 0.95

DEFAULT_MODEL_WEIGHTS = {'neural': 0.4, 'fourier': 0.3, 'neighbor': 0.3}


@dataclass(frozen=True)
class ModelContribution:
    """
    One sub-model's part in a prediction.

    ``weight`` is the configured base weight; ``effective_weight`` is the
    normalised share actually used, so ``prediction = Σ effective_weight·value``.
    """
    method: str
    value: float
    weight: float
    confidence: float
    effective_weight: float = 0.0


@dataclass(frozen=True)
class PredictionResult:
    """
    Result of :meth:`EnsemblePredictor.predict`.

    Attributes:
        prediction: Combined estimate
        confidence: Agreement score in [0, 1]
        method: Label naming the contributing strategies
        per_model: Finite contributions in fixed order (neural/linear, fourier, neighbor)
    """
    prediction: float
    confidence: float
    method: str
    per_model: List[ModelContribution] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'prediction': self.prediction,
            'confidence': self.confidence,
            'method': self.method,
            'per_model': [asdict(c) for c in self.per_model],
        }


@dataclass(frozen=True)
class PatternAnalysis:
    """Summary statistics of the current sample set."""
    sample_count: int
    avg_input: float
    avg_output: float
    correlation: float
    dominant_frequency: float

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class EnsemblePredictor:
    """
    Three-model ensemble over one-dimensional samples.

    Every mutation of the sample store retrains all sub-models before the
    mutating call returns, so a prediction always sees models derived from
    the current samples.  Mutations and predictions are serialised through
    one re-entrant lock.

    Parameters:
        regressor: Trainable network (default: ``TrainableRegressor()``)
        analyzer: Spectral extrapolator (default: ``FrequencyAnalyzer()``)
        neighbors: k-NN regressor (default: ``NeighborRegressor()``)
        model_weights: Base weights keyed ``neural``/``fourier``/``neighbor``
        confidence_weighting: Scale base weights by sub-model confidence
        clock: Timestamp source shared by the store and the k-NN recency term
        eps: Guard for the confidence denominator

    Example:
        >>> ensemble = EnsemblePredictor(regressor=TrainableRegressor(random_state=42))
        >>> for x, y in [(1, 2), (2, 4), (3, 6)]:
        ...     ensemble.add_sample(x, y)
        >>> result = ensemble.predict(4.0)
        >>> result.prediction, result.confidence, result.method
    """

    def __init__(
        self,
        regressor: Optional[TrainableRegressor] = None,
        analyzer: Optional[FrequencyAnalyzer] = None,
        neighbors: Optional[NeighborRegressor] = None,
        model_weights: Optional[Dict[str, float]] = None,
        confidence_weighting: bool = True,
        clock: Optional[Callable[[], float]] = None,
        eps: float = 1e-8,
    ):
        self.store = SampleStore(clock=clock)
        self.regressor = regressor or TrainableRegressor()
        self.analyzer = analyzer or FrequencyAnalyzer()
        self.neighbors = neighbors or NeighborRegressor(clock=self.store.clock)
        self.model_weights = dict(DEFAULT_MODEL_WEIGHTS)
        if model_weights:
            unknown = set(model_weights) - set(DEFAULT_MODEL_WEIGHTS)
            if unknown:
                raise ValueError(f'Unknown model weight(s): {sorted(unknown)}')
            self.model_weights.update(model_weights)
        self.confidence_weighting = confidence_weighting
        self.eps = eps

        self._lock = threading.RLock()
        self._fallback: Optional[LeastSquaresFit] = None
        self._retrain_count = 0
        self.store.subscribe(self._on_samples_changed)

    @classmethod
    def from_config(cls, config,
                    clock: Optional[Callable[[], float]] = None) -> 'EnsemblePredictor':
        """Build a predictor from a :class:`config.Config`."""
        reg = config.regressor
        spectral = config.spectral
        knn = config.neighbor
        return cls(
            regressor=TrainableRegressor(
                hidden_layers=reg.hidden_layers,
                learning_rate=reg.learning_rate,
                momentum=reg.momentum,
                max_epochs=reg.max_epochs,
                tolerance=reg.tolerance,
                lr_decay=reg.lr_decay,
                decay_every=reg.decay_every,
                leaky_slope=reg.leaky_slope,
                random_state=config.random.seed,
            ),
            analyzer=FrequencyAnalyzer(
                sinusoid_weight=spectral.sinusoid_weight,
                interpolation_weight=spectral.interpolation_weight,
                phase_weight=spectral.phase_weight,
                pad_to_power_of_two=spectral.pad_to_power_of_two,
            ),
            neighbors=NeighborRegressor(
                k=knn.k,
                weights=NeighborWeights(knn.distance_weight, knn.recency_weight,
                                        knn.similarity_weight),
                clock=clock,
            ),
            model_weights=config.ensemble.model_weights,
            confidence_weighting=config.ensemble.confidence_weighting,
            clock=clock,
        )

    # ------------------------------------------------------------------
    # Sample lifecycle
    # ------------------------------------------------------------------

    def add_sample(self, x: float, y: float) -> Sample:
        with self._lock:
            return self.store.add(x, y)

    def clear(self) -> None:
        with self._lock:
            self.store.clear()

    def replace_samples(self, samples: Sequence[Sample]) -> None:
        """Swap in a whole sample sequence; the models are retrained once."""
        with self._lock:
            self.store.replace(samples)

    def samples(self) -> List[Sample]:
        with self._lock:
            return list(self.store.all())

    def __len__(self) -> int:
        return len(self.store)

    def _on_samples_changed(self, store: SampleStore) -> None:
        with self._lock:
            self.retrain()

    def retrain(self) -> None:
        """Rebuild every sub-model from the current store snapshot."""
        with self._lock:
            samples = self.store.all()
            x, y = self.store.arrays()
            self.neighbors.update(samples)
            self._retrain_count += 1

            if len(samples) < 2:
                self.analyzer.reset()
                self.regressor.reset()
                self._fallback = None
                logger.debug('Retrain #%d: %d sample(s), models reset',
                             self._retrain_count, len(samples))
                return

            self.analyzer.analyze(x, y)
            self.regressor.train(x, y)
            self._fallback = fit_least_squares(x, y)
            logger.debug('Retrain #%d: %d samples, network usable=%s, dominant f=%.4f',
                         self._retrain_count, len(samples), self.regressor.is_usable,
                         self.analyzer.get_dominant_frequency())

    # ------------------------------------------------------------------
    # Prediction
    # ------------------------------------------------------------------

    def _sub_predictions(self, x: float) -> List[ModelContribution]:
        if self.regressor.is_usable:
            trend_method = 'neural'
            trend_value = self.regressor.predict(x)
            trend_conf = self.regressor.confidence()
        else:
            trend_method = 'linear'
            trend_value = self._fallback.predict(x)
            trend_conf = self._fallback.r_squared
            logger.debug('Network unusable, substituting least-squares line')

        knn = self.neighbors.predict_detailed(x)
        return [
            ModelContribution(trend_method, float(trend_value),
                              self.model_weights['neural'], float(trend_conf)),
            ModelContribution('fourier', self.analyzer.predict(x),
                              self.model_weights['fourier'], self.analyzer.confidence(x)),
            ModelContribution('neighbor', knn.value,
                              self.model_weights['neighbor'], knn.confidence),
        ]

    def effective_weights(self, contributions: Sequence[ModelContribution]) -> np.ndarray:
        """Normalised combination weights (sum to 1) for finite contributions."""
        base = np.array([c.weight for c in contributions], dtype=float)
        weights = base
        if self.confidence_weighting:
            scaled = base * np.clip([c.confidence for c in contributions], 0.0, 1.0)
            if scaled.sum() > 0:
                weights = scaled
        if weights.sum() <= 0:
            weights = np.ones_like(base)
        return weights / weights.sum()

    def combine(self, contributions: Sequence[ModelContribution]):
        """
        Merge contributions into ``(prediction, confidence)``.

        Non-finite contributions are ignored.  Returns ``(0.0, 0.0)`` when
        nothing usable remains.
        """
        usable = [c for c in contributions if np.isfinite(c.value)]
        if not usable:
            return 0.0, 0.0

        values = np.array([c.value for c in usable])
        weights = self.effective_weights(usable)
        prediction = float(np.dot(weights, values))
        variance = float(np.dot(weights, (values - prediction) ** 2))
        spread = np.sqrt(max(variance, 0.0)) / max(abs(prediction + 1.0), self.eps)
        confidence = float(min(MAX_CONFIDENCE, max(0.0, 1.0 - spread)))
        return prediction, confidence

    def predict(self, x: float) -> PredictionResult:
        """Combined estimate for *x*; non-numeric input raises ``TypeError``."""
        x = _as_finite_float(x, 'input')
        with self._lock:
            samples = self.store.all()
            if not samples:
                return PredictionResult(0.0, 0.0, NO_DATA_METHOD)
            if len(samples) == 1:
                return PredictionResult(samples[0].output, SINGLE_POINT_CONFIDENCE,
                                        SINGLE_POINT_METHOD)

            raw = self._sub_predictions(x)
            usable = [c for c in raw if np.isfinite(c.value)]
            dropped = [c.method for c in raw if not np.isfinite(c.value)]
            if dropped:
                logger.warning('Dropping non-finite sub-prediction(s) %s at x=%g', dropped, x)
            if usable:
                shares = self.effective_weights(usable)
                usable = [replace(c, effective_weight=float(w))
                          for c, w in zip(usable, shares)]

            prediction, confidence = self.combine(usable)
            label = '+'.join(c.method for c in raw)
            return PredictionResult(
                prediction=prediction,
                confidence=confidence,
                method=f'ensemble ({label})',
                per_model=usable,
            )

    # ------------------------------------------------------------------
    # Analysis and transfer
    # ------------------------------------------------------------------

    def analyze_pattern(self) -> PatternAnalysis:
        """Sample statistics; pure function of the current samples."""
        with self._lock:
            x, y = self.store.arrays()
            if x.size == 0:
                return PatternAnalysis(0, 0.0, 0.0, 0.0, 0.0)
            return PatternAnalysis(
                sample_count=int(x.size),
                avg_input=float(x.mean()),
                avg_output=float(y.mean()),
                correlation=pearson_correlation(x, y),
                dominant_frequency=self.analyzer.get_dominant_frequency(),
            )

    def export_samples(self) -> Dict[str, Any]:
        """Versioned, JSON-serialisable record of the raw sample sequence."""
        with self._lock:
            return self.store.export_records()

    def import_samples(self, payload: Any) -> int:
        """
        Replace the current samples with an exported payload.

        The payload is fully validated before anything changes; the models
        are retrained once.

        Returns:
            Number of samples imported
        """
        samples = SampleStore.parse_records(payload)
        self.replace_samples(samples)
        logger.info('Imported %d samples', len(samples))
        return len(samples)

    def get_info(self) -> Dict[str, Any]:
        with self._lock:
            return {
                'n_samples': len(self.store),
                'retrain_count': self._retrain_count,
                'model_weights': dict(self.model_weights),
                'confidence_weighting': self.confidence_weighting,
                'regressor': self.regressor.get_info(),
                'analyzer': self.analyzer.get_info(),
                'neighbors': self.neighbors.get_info(),
            }


__all__ = [
    'ModelContribution',
    'PredictionResult',
    'PatternAnalysis',
    'EnsemblePredictor',
    'DEFAULT_MODEL_WEIGHTS',
]
