"""Scalar and array math primitives used by the depth filters."""

from __future__ import annotations

from typing import TypeVar

import numpy as np

T = TypeVar("T")


def clamp(value: T, lo: T, hi: T) -> T:
    """Clamp ``value`` into ``[lo, hi]``. Works on scalars and numpy arrays."""
    if isinstance(value, np.ndarray):
        return np.clip(value, lo, hi)
    return min(max(value, lo), hi)


def gaussian(delta, sigma):
    """Unnormalized zero-mean Gaussian ``exp(-delta^2 / (2 sigma^2))``."""
    return np.exp(-(delta * delta) / (2.0 * sigma * sigma))


def gaussian_2d(dx, dy, sigma_x, sigma_y):
    """Unnormalized axis-aligned 2-D zero-mean Gaussian."""
    return np.exp(-(dx * dx) / (2.0 * sigma_x * sigma_x) - (dy * dy) / (2.0 * sigma_y * sigma_y))
