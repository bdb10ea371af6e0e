# -*- coding: utf-8 -*-
"""
Linear Baselines
================

Ordinary least squares over one-dimensional samples and the Pearson
correlation used by pattern analysis.

These are used for:
- The ensemble fallback when the trainable regressor is unusable
- The trend the trainable regressor learns residuals around
- Pattern statistics reported to callers
"""

import numpy as np
from dataclasses import dataclass
from typing import Sequence
from scipy import stats
from sklearn.linear_model import LinearRegression
from sklearn.metrics import r2_score

# |n·Σx² − (Σx)²| below this means the inputs carry no slope information
DEGENERACY_EPS = 1e-8


@dataclass(frozen=True)
class LeastSquaresFit:
    """
    Straight line ``y = slope * x + intercept``.

    Attributes:
        slope: Fitted slope (0 when degenerate)
        intercept: Fitted intercept (mean output when degenerate)
        r_squared: In-sample coefficient of determination, clipped to [0, 1]
        degenerate: True when the normal equations were singular
        n_samples: Number of points fitted
    """
    slope: float = 0.0
    intercept: float = 0.0
    r_squared: float = 0.0
    degenerate: bool = True
    n_samples: int = 0

    def predict(self, x):
        """Evaluate the line at a scalar or array."""
        if np.ndim(x) == 0:
            return float(self.slope * float(x) + self.intercept)
        return self.slope * np.asarray(x, dtype=float) + self.intercept


def ols_denominator(x: np.ndarray) -> float:
    """Return ``n·Σx² − (Σx)²`` for the closed-form slope."""
    n = x.size
    # Huge inputs overflow to inf - inf; callers treat that as degenerate
    with np.errstate(over='ignore', invalid='ignore'):
        return float(n * np.dot(x, x) - x.sum() ** 2)


def is_degenerate(denominator: float, eps: float = DEGENERACY_EPS) -> bool:
    """True when the slope denominator is near zero or overflowed."""
    return not np.isfinite(denominator) or abs(denominator) < eps


def fit_quality(y_true: Sequence[float], y_pred: Sequence[float]) -> float:
    """In-sample R² clipped to [0, 1]; exact fits of constant data score 1."""
    y_true = np.asarray(y_true, dtype=float).ravel()
    y_pred = np.asarray(y_pred, dtype=float).ravel()
    if y_true.size == 0 or not np.all(np.isfinite(y_pred)):
        return 0.0
    if y_true.size < 2:
        scale = max(1.0, abs(float(y_true[0])))
        return 1.0 if abs(float(y_true[0] - y_pred[0])) <= 1e-9 * scale else 0.0
    r2 = float(r2_score(y_true, y_pred))
    if not np.isfinite(r2):
        return 0.0
    return float(np.clip(r2, 0.0, 1.0))


def fit_least_squares(inputs: Sequence[float], outputs: Sequence[float],
                      eps: float = DEGENERACY_EPS) -> LeastSquaresFit:
    """
    Fit a least-squares line through the given pairs.

    Degenerate inputs (fewer than two points, all inputs equal, or inputs
    large enough to overflow the slope denominator) give a flat line
    through the mean output.

    Args:
        inputs: Observed inputs
        outputs: Observed outputs (same length)
        eps: Degeneracy threshold on the slope denominator

    Returns:
        LeastSquaresFit
    """
    x = np.asarray(inputs, dtype=float).ravel()
    y = np.asarray(outputs, dtype=float).ravel()
    n = x.size
    if n == 0 or y.size != n:
        return LeastSquaresFit()

    if n < 2 or is_degenerate(ols_denominator(x), eps):
        return LeastSquaresFit(slope=0.0, intercept=float(y.mean()),
                               r_squared=0.0, degenerate=True, n_samples=n)

    model = LinearRegression()
    model.fit(x.reshape(-1, 1), y)
    slope = float(model.coef_[0])
    intercept = float(model.intercept_)
    return LeastSquaresFit(
        slope=slope,
        intercept=intercept,
        r_squared=fit_quality(y, model.predict(x.reshape(-1, 1))),
        degenerate=False,
        n_samples=n,
    )


def pearson_correlation(inputs: Sequence[float], outputs: Sequence[float]) -> float:
    """Pearson correlation coefficient, 0 when undefined."""
    x = np.asarray(inputs, dtype=float).ravel()
    y = np.asarray(outputs, dtype=float).ravel()
    if x.size < 2 or x.size != y.size:
        return 0.0
    if np.ptp(x) == 0 or np.ptp(y) == 0:
        return 0.0
    r = stats.pearsonr(x, y)[0]
    return float(r) if np.isfinite(r) else 0.0


__all__ = [
    'LeastSquaresFit',
    'fit_least_squares',
    'fit_quality',
    'ols_denominator',
    'is_degenerate',
    'pearson_correlation',
    'DEGENERACY_EPS',
]
