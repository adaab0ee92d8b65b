"""
consolidation/overload/trend.py
────────────────────────────────
Trend estimators: local (LOESS-style, degree 1) regression over a short
window of utilisation samples.

What this is
─────────────
The overload policy needs one thing from the history: where is the load
heading? A trend estimator answers with a straight line, value(i) ≈ a + b·i,
fitted over the last WINDOW samples where index 0 is the oldest sample in the
window and index WINDOW-1 the most recent.

Weighting
──────────
Recent samples matter more than old ones. Each point gets a tricube weight
centred on the most recent index:

    w(i) = (1 − (|i − center| / bandwidth)³)³ ,  clipped to ≥ 0
    center    = n − 1
    bandwidth = n

With bandwidth = n (not n − 1) the oldest point still gets a small, non-zero
weight, so every sample contributes.

Solving
────────
Closed-form weighted least squares for two parameters:

    x̄  = Σwx / Σw              ȳ  = Σwy / Σw
    Sxx = Σw(x − x̄)²            Sxy = Σw(x − x̄)(y − ȳ)
    b   = Sxy / Sxx             a   = ȳ − b·x̄

O(n), no matrix inversion. Degeneracy is checked explicitly: Sxx at or below
DEGENERACY_EPSILON means a singular design, Syy = Σw(y − ȳ)² at or below it
means the samples carry no trend (e.g. all identical). Both raise
DegenerateFitError so the caller can use its fallback.

Estimators
───────────
  LoessTrendEstimator        → one tricube-weighted fit.
  RobustLoessTrendEstimator  → tricube fit, then a refit with bisquare
                               robustness weights that discount outliers.

Both are pure: the same samples always give the same estimate.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol, Sequence, runtime_checkable

import numpy as np

from consolidation.shared.config import DEGENERACY_EPSILON
from consolidation.shared.errors import DegenerateFitError

logger = logging.getLogger(__name__)

ROBUSTNESS_SCALE: float = 6.0
"""Residuals beyond ROBUSTNESS_SCALE × median |residual| get zero robustness weight."""


@dataclass(frozen=True)
class TrendEstimate:
    """Intercept/slope pair of a fitted trend line over window indices."""
    intercept: float
    slope: float

    def at(self, index: float) -> float:
        """Value of the trend line at a (possibly future) window index."""
        return self.intercept + self.slope * index


@runtime_checkable
class TrendEstimator(Protocol):
    """Capability consumed by the local regression overload policy."""

    def estimate(self, samples: Sequence[float]) -> TrendEstimate: ...


# ── Building blocks ───────────────────────────────────────────────────────────

def tricube_weights(n: int) -> np.ndarray:
    """
    Tricube weights for n window indices, centred on the last (most recent) one.

    Returns:
        float64 array of shape (n,), values in [0, 1], non-decreasing in index.
    """
    indices = np.arange(n, dtype=np.float64)
    distance = np.abs(indices - (n - 1)) / float(n)
    weights = (1.0 - distance ** 3) ** 3
    return np.clip(weights, 0.0, None)


def bisquare_weights(residuals: np.ndarray, scale: float) -> np.ndarray:
    """Bisquare robustness weights: (1 − (r/scale)²)² inside the scale, 0 outside."""
    ratio = residuals / scale
    weights = (1.0 - ratio ** 2) ** 2
    weights[np.abs(ratio) >= 1.0] = 0.0
    return weights


def weighted_linear_fit(values: np.ndarray, weights: np.ndarray) -> TrendEstimate:
    """
    Closed-form weighted least-squares line through (i, values[i]).

    Raises:
        DegenerateFitError: if the weights vanish, the weighted design is
                            singular, or the weighted samples have no variance.
    """
    x = np.arange(values.shape[0], dtype=np.float64)
    weight_sum = float(weights.sum())
    if weight_sum <= DEGENERACY_EPSILON:
        raise DegenerateFitError("All regression weights are zero.")

    x_mean = float(np.dot(weights, x)) / weight_sum
    y_mean = float(np.dot(weights, values)) / weight_sum
    dx = x - x_mean
    dy = values - y_mean

    sxx = float(np.dot(weights, dx * dx))
    if sxx <= DEGENERACY_EPSILON:
        raise DegenerateFitError(f"Singular weighted design (Sxx={sxx:.3e}).")

    syy = float(np.dot(weights, dy * dy))
    if syy <= DEGENERACY_EPSILON:
        raise DegenerateFitError(
            f"Utilisation samples have no weighted variance (Syy={syy:.3e})."
        )

    slope = float(np.dot(weights, dx * dy)) / sxx
    return TrendEstimate(intercept=y_mean - slope * x_mean, slope=slope)


def _as_window(samples: Sequence[float]) -> np.ndarray:
    values = np.asarray(samples, dtype=np.float64)
    if values.ndim != 1 or values.shape[0] < 2:
        raise DegenerateFitError(
            f"A trend needs at least 2 samples, got shape {values.shape}."
        )
    if not np.all(np.isfinite(values)):
        raise DegenerateFitError("Utilisation window contains non-finite samples.")
    return values


# ── Estimators ────────────────────────────────────────────────────────────────

class LoessTrendEstimator:
    """
    Tricube-weighted local linear regression.

    Usage:
        estimate = LoessTrendEstimator().estimate(window)   # oldest → newest
        estimate.at(len(window) + 1)                         # value two steps ahead
    """

    def estimate(self, samples: Sequence[float]) -> TrendEstimate:
        values = _as_window(samples)
        return weighted_linear_fit(values, tricube_weights(values.shape[0]))

    def __repr__(self) -> str:
        return "LoessTrendEstimator()"


class RobustLoessTrendEstimator:
    """
    Tricube fit followed by one bisquare-reweighted refit.

    A single spike inside the window can tilt a plain least-squares line.
    The robust variant measures each sample's residual against the first
    fit, scales by ROBUSTNESS_SCALE × median |residual| and refits with
    tricube × bisquare weights, so isolated outliers barely count.

    Edge cases:
        - median |residual| == 0 (perfect line): the first fit is returned.
        - refit degenerate (robust weights wipe out the variance): the
          first fit is returned.
        - first fit degenerate: DegenerateFitError propagates.
    """

    def estimate(self, samples: Sequence[float]) -> TrendEstimate:
        values = _as_window(samples)
        base_weights = tricube_weights(values.shape[0])
        first = weighted_linear_fit(values, base_weights)

        indices = np.arange(values.shape[0], dtype=np.float64)
        residuals = values - (first.intercept + first.slope * indices)
        scale = ROBUSTNESS_SCALE * float(np.median(np.abs(residuals)))
        if scale <= DEGENERACY_EPSILON:
            return first

        try:
            return weighted_linear_fit(
                values, base_weights * bisquare_weights(residuals, scale)
            )
        except DegenerateFitError as exc:
            logger.debug("Robust refit degenerate (%s); keeping tricube fit.", exc.reason)
            return first

    def __repr__(self) -> str:
        return "RobustLoessTrendEstimator()"
