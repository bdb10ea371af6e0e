# -*- coding: utf-8 -*-
"""
Trainable Piecewise Regressor
=============================

A small feed-forward network trained online with plain stochastic
gradient descent and momentum.  It is retrained from scratch on every
sample change; there is no warm start.

Architecture (default hidden stages 16 → 8):

    z → [W₀, ReLU] → [W₁, LeakyReLU] → … → [W_L, linear] → ẑ

The network models the residual around a least-squares trend fitted on
the same snapshot:

    ŷ(x) = trend(x) + σ_r · net((x − μ_x) / σ_x) + μ_r

so a ReLU network, which extrapolates with whatever slope its last linear
piece happens to have, falls back to the trend's slope away from the data.

Training (per retrain):
    1. Standardise inputs and residuals (statistics kept for prediction)
    2. Xavier-uniform weights: limit = √(6 / (fan_in + fan_out))
    3. For each epoch: shuffle, forward, squared error, backpropagate with
       Δw = −lr·∇w + momentum·Δw_prev
    4. Learning rate × 0.95 every 100 epochs
    5. Stop early once the epoch MSE drops below the tolerance

Every retrain produces a brand-new :class:`RegressorState`; nothing from a
previous state (weights, velocities, normalisation) is reused.

References:
    - Glorot & Bengio (2010). "Understanding the difficulty of training
      deep feedforward neural networks" AISTATS
    - Zhang (2003). "Time series forecasting using a hybrid ARIMA and
      neural network model" Neurocomputing
"""

import logging
import numpy as np
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple
from sklearn.utils import check_random_state

from .base import BaseForecaster, as_pairs
from .linear import LeastSquaresFit, fit_least_squares, fit_quality

logger = logging.getLogger(__name__)

_STD_EPS = 1e-8


def resolve_rng(random_state=None) -> np.random.RandomState:
    """Like ``check_random_state``, but ``None`` yields a private generator
    instead of numpy's global one."""
    if random_state is None:
        return np.random.RandomState()
    return check_random_state(random_state)


@dataclass(frozen=True)
class NormalizationStats:
    """Standardisation statistics captured at training time."""
    input_mean: float = 0.0
    input_std: float = 1.0
    output_mean: float = 0.0
    output_std: float = 1.0

    @classmethod
    def from_arrays(cls, x: np.ndarray, y: np.ndarray) -> 'NormalizationStats':
        return cls(float(x.mean()), float(x.std()), float(y.mean()), float(y.std()))

    def scale_input(self, x):
        return (x - self.input_mean) / (self.input_std + _STD_EPS)

    def scale_output(self, y):
        return (y - self.output_mean) / (self.output_std + _STD_EPS)

    def unscale_output(self, z):
        return z * (self.output_std + _STD_EPS) + self.output_mean


def _relu(s: np.ndarray) -> np.ndarray:
    return np.maximum(s, 0.0)


def _leaky_relu(s: np.ndarray, slope: float) -> np.ndarray:
    return np.where(s > 0, s, slope * s)


@dataclass
class RegressorState:
    """
    Complete trained model: one weight matrix and bias vector per layer.

    ``weights[l]`` has shape ``(layer_sizes[l + 1], layer_sizes[l])`` and
    ``biases[l]`` has shape ``(layer_sizes[l + 1],)``.
    """
    layer_sizes: Tuple[int, ...]
    weights: List[np.ndarray]
    biases: List[np.ndarray]
    normalization: NormalizationStats
    trend: LeastSquaresFit
    leaky_slope: float = 0.01
    trained: bool = False
    epochs_run: int = 0
    final_loss: float = float('nan')
    learning_rate: float = 0.0
    fit_r2: float = 0.0

    def __post_init__(self):
        n_layers = len(self.layer_sizes) - 1
        if n_layers < 1:
            raise ValueError('layer_sizes needs an input and an output size')
        if len(self.weights) != n_layers or len(self.biases) != n_layers:
            raise ValueError(
                f'Expected {n_layers} weight/bias layers, got '
                f'{len(self.weights)}/{len(self.biases)}'
            )
        for l in range(n_layers):
            expected = (self.layer_sizes[l + 1], self.layer_sizes[l])
            if self.weights[l].shape != expected:
                raise ValueError(f'Layer {l} weights have shape {self.weights[l].shape}, '
                                 f'expected {expected}')
            if self.biases[l].shape != (self.layer_sizes[l + 1],):
                raise ValueError(f'Layer {l} biases have shape {self.biases[l].shape}')

    @property
    def n_parameters(self) -> int:
        return int(sum(w.size + b.size for w, b in zip(self.weights, self.biases)))

    @property
    def is_finite(self) -> bool:
        return (all(np.all(np.isfinite(w)) for w in self.weights)
                and all(np.all(np.isfinite(b)) for b in self.biases))

    def activate(self, layer: int, s: np.ndarray) -> np.ndarray:
        """Layer 0 rectifies, middle layers leak, the last layer is linear."""
        if layer == len(self.weights) - 1:
            return s
        if layer == 0:
            return _relu(s)
        return _leaky_relu(s, self.leaky_slope)

    def activation_derivative(self, layer: int, s: np.ndarray) -> np.ndarray:
        if layer == len(self.weights) - 1:
            return np.ones_like(s)
        if layer == 0:
            return (s > 0).astype(float)
        return np.where(s > 0, 1.0, self.leaky_slope)

    def forward(self, z: float) -> Tuple[List[np.ndarray], List[np.ndarray]]:
        """Return per-layer activations (input first) and pre-activations."""
        a = np.array([z], dtype=float)
        activations, pre = [a], []
        for l, (w, b) in enumerate(zip(self.weights, self.biases)):
            s = w @ a + b
            a = self.activate(l, s)
            pre.append(s)
            activations.append(a)
        return activations, pre

    def predict(self, x: float) -> float:
        z = self.normalization.scale_input(float(x))
        activations, _ = self.forward(z)
        residual = self.normalization.unscale_output(float(activations[-1][0]))
        return float(self.trend.predict(float(x)) + residual)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'layer_sizes': list(self.layer_sizes),
            'weights': [w.tolist() for w in self.weights],
            'biases': [b.tolist() for b in self.biases],
            'normalization': self.normalization.__dict__.copy(),
            'trend': {'slope': self.trend.slope, 'intercept': self.trend.intercept,
                      'r_squared': self.trend.r_squared,
                      'degenerate': self.trend.degenerate,
                      'n_samples': self.trend.n_samples},
            'leaky_slope': self.leaky_slope,
            'trained': self.trained,
            'epochs_run': self.epochs_run,
            'final_loss': self.final_loss,
            'learning_rate': self.learning_rate,
            'fit_r2': self.fit_r2,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'RegressorState':
        return cls(
            layer_sizes=tuple(int(s) for s in data['layer_sizes']),
            weights=[np.asarray(w, dtype=float) for w in data['weights']],
            biases=[np.asarray(b, dtype=float) for b in data['biases']],
            normalization=NormalizationStats(**data['normalization']),
            trend=LeastSquaresFit(**data['trend']),
            leaky_slope=float(data.get('leaky_slope', 0.01)),
            trained=bool(data.get('trained', False)),
            epochs_run=int(data.get('epochs_run', 0)),
            final_loss=float(data.get('final_loss', float('nan'))),
            learning_rate=float(data.get('learning_rate', 0.0)),
            fit_r2=float(data.get('fit_r2', 0.0)),
        )


def xavier_init(layer_sizes: Sequence[int], rng: np.random.RandomState
                ) -> Tuple[List[np.ndarray], List[np.ndarray]]:
    """Uniform Xavier weights and small uniform biases for every layer."""
    weights, biases = [], []
    for fan_in, fan_out in zip(layer_sizes[:-1], layer_sizes[1:]):
        limit = np.sqrt(6.0 / (fan_in + fan_out))
        weights.append(rng.uniform(-limit, limit, size=(fan_out, fan_in)))
        biases.append(rng.uniform(-0.1, 0.1, size=fan_out))
    return weights, biases


def fit_regressor_state(
    inputs: Sequence[float],
    outputs: Sequence[float],
    hidden_layers: Sequence[int] = (16, 8),
    learning_rate: float = 0.01,
    momentum: float = 0.9,
    max_epochs: int = 1000,
    tolerance: float = 1e-3,
    lr_decay: float = 0.95,
    decay_every: int = 100,
    leaky_slope: float = 0.01,
    random_state=None,
) -> RegressorState:
    """
    Train a fresh network on a sample snapshot.

    Args:
        inputs, outputs: Training pairs (same length, at least one)
        hidden_layers: Hidden stage widths
        learning_rate: Initial step size
        momentum: Fraction of the previous update carried forward
        max_epochs: Hard epoch bound
        tolerance: Early-stopping threshold on the epoch MSE
        lr_decay: Multiplicative decay applied every *decay_every* epochs
        decay_every: Decay period in epochs
        leaky_slope: Negative-side slope of middle layers
        random_state: Seed or RandomState for initialisation and shuffling

    Returns:
        RegressorState (``trained`` is False if training diverged)
    """
    rng = resolve_rng(random_state)
    x = np.asarray(inputs, dtype=float).ravel()
    y = np.asarray(outputs, dtype=float).ravel()
    n = x.size

    trend = fit_least_squares(x, y)
    residual = y - trend.predict(x)
    stats = NormalizationStats.from_arrays(x, residual)
    z_in = stats.scale_input(x)
    z_out = stats.scale_output(residual)

    layer_sizes = (1, *[int(h) for h in hidden_layers], 1)
    weights, biases = xavier_init(layer_sizes, rng)
    state = RegressorState(layer_sizes=layer_sizes, weights=weights, biases=biases,
                           normalization=stats, trend=trend, leaky_slope=leaky_slope)

    vel_w = [np.zeros_like(w) for w in weights]
    vel_b = [np.zeros_like(b) for b in biases]
    lr = learning_rate
    epoch_loss = float('nan')
    epochs_run = 0
    diverged = False

    for epoch in range(max_epochs):
        total = 0.0
        for idx in rng.permutation(n):
            activations, pre = state.forward(z_in[idx])
            error = activations[-1][0] - z_out[idx]
            total += error * error

            # dL/ds for L = ½·error² at the linear output layer
            delta = np.array([error])
            for l in range(len(weights) - 1, -1, -1):
                grad_w = np.outer(delta, activations[l])
                grad_b = delta
                if l > 0:
                    next_delta = (weights[l].T @ delta) * state.activation_derivative(l - 1, pre[l - 1])
                vel_w[l] = -lr * grad_w + momentum * vel_w[l]
                vel_b[l] = -lr * grad_b + momentum * vel_b[l]
                weights[l] += vel_w[l]
                biases[l] += vel_b[l]
                if l > 0:
                    delta = next_delta

        epochs_run = epoch + 1
        epoch_loss = total / n
        if not np.isfinite(epoch_loss):
            diverged = True
            break
        if (epoch + 1) % decay_every == 0:
            lr *= lr_decay
        if epoch_loss < tolerance:
            break

    state.epochs_run = epochs_run
    state.final_loss = float(epoch_loss)
    state.learning_rate = lr
    state.trained = not diverged and state.is_finite
    if state.trained:
        fitted = np.array([state.predict(v) for v in x])
        state.fit_r2 = fit_quality(y, fitted)
    return state


class TrainableRegressor(BaseForecaster):
    """
    Online-retrained feed-forward regressor over one-dimensional samples.

    Parameters:
        hidden_layers: Hidden stage widths (first ReLU, others leaky ReLU)
        learning_rate: Initial SGD step size
        momentum: Momentum coefficient
        max_epochs: Epoch bound per retrain
        tolerance: Early-stopping MSE threshold
        lr_decay: Learning-rate decay factor
        decay_every: Epochs between decays
        leaky_slope: Negative slope of middle layers
        random_state: Seed or RandomState shared by every retrain (None
            draws a private, unseeded generator)

    Example:
        >>> reg = TrainableRegressor(random_state=42)
        >>> reg.train([1, 2, 3], [2, 4, 6])
        >>> reg.predict(4.0)
    """

    def __init__(
        self,
        hidden_layers: Sequence[int] = (16, 8),
        learning_rate: float = 0.01,
        momentum: float = 0.9,
        max_epochs: int = 1000,
        tolerance: float = 1e-3,
        lr_decay: float = 0.95,
        decay_every: int = 100,
        leaky_slope: float = 0.01,
        random_state=None,
    ):
        self.hidden_layers = tuple(int(h) for h in hidden_layers)
        self.learning_rate = learning_rate
        self.momentum = momentum
        self.max_epochs = max_epochs
        self.tolerance = tolerance
        self.lr_decay = lr_decay
        self.decay_every = decay_every
        self.leaky_slope = leaky_slope
        self._rng = resolve_rng(random_state)
        self._state: Optional[RegressorState] = None

    def train(self, inputs: Sequence[float], outputs: Sequence[float]) -> Optional[RegressorState]:
        """Retrain from scratch; mismatched or empty input is a no-op."""
        pairs = as_pairs(inputs, outputs)
        if pairs is None or pairs[0].size < 1:
            return self._state

        # Divergence is detected from the loss, overflow warnings add nothing
        with np.errstate(over='ignore', invalid='ignore'):
            state = self._fit(pairs)
        if not state.trained:
            logger.warning('Regressor training diverged after %d epochs', state.epochs_run)
        else:
            logger.debug('Regressor trained on %d samples: %d epochs, loss=%.3g, R2=%.3f',
                         pairs[0].size, state.epochs_run, state.final_loss, state.fit_r2)
        self._state = state
        return state

    def _fit(self, pairs) -> RegressorState:
        return fit_regressor_state(
            *pairs,
            hidden_layers=self.hidden_layers,
            learning_rate=self.learning_rate,
            momentum=self.momentum,
            max_epochs=self.max_epochs,
            tolerance=self.tolerance,
            lr_decay=self.lr_decay,
            decay_every=self.decay_every,
            leaky_slope=self.leaky_slope,
            random_state=self._rng,
        )

    def fit(self, inputs: Sequence[float], outputs: Sequence[float]) -> 'TrainableRegressor':
        self.train(inputs, outputs)
        return self

    def reset(self) -> None:
        self._state = None

    @property
    def state(self) -> Optional[RegressorState]:
        return self._state

    @property
    def is_trained(self) -> bool:
        return self._state is not None and self._state.trained

    @property
    def is_usable(self) -> bool:
        return self.is_trained and self._state.is_finite

    def predict(self, x: float) -> float:
        """Model estimate for *x*; 0.0 if never trained."""
        if not self.is_trained:
            return 0.0
        return self._state.predict(x)

    def confidence(self) -> float:
        """In-sample R² of the current model."""
        return self._state.fit_r2 if self.is_trained else 0.0

    def save_state(self) -> Optional[Dict[str, Any]]:
        """In-memory snapshot of the trained model."""
        return self._state.to_dict() if self._state is not None else None

    def load_state(self, data: Dict[str, Any]) -> None:
        self._state = RegressorState.from_dict(data)

    def get_info(self) -> Dict[str, Any]:
        state = self._state
        return {
            'layers': list(state.layer_sizes) if state else [1, *self.hidden_layers, 1],
            'n_parameters': state.n_parameters if state else 0,
            'learning_rate': state.learning_rate if state else self.learning_rate,
            'epochs_run': state.epochs_run if state else 0,
            'final_loss': state.final_loss if state else None,
            'fit_r2': state.fit_r2 if state else 0.0,
            'trained': self.is_trained,
        }


__all__ = [
    'NormalizationStats',
    'RegressorState',
    'resolve_rng',
    'xavier_init',
    'fit_regressor_state',
    'TrainableRegressor',
]
