"""Running weighted-average accumulator."""

from __future__ import annotations

from typing import Optional, Tuple, Union

import numpy as np

ArrayLike = Union[float, np.ndarray]


class WeightedAccumulator:
    """Two running totals, ``sum(value * weight)`` and ``sum(weight)``.

    With the default ``shape=()`` this accumulates a single scalar estimate.
    With an array shape every element is an independent accumulator, which is
    how the bilateral filter keeps one accumulator per output pixel.
    """

    def __init__(self, shape: Tuple[int, ...] = (), dtype=np.float32) -> None:
        self.value = np.zeros(shape, dtype=dtype)
        self.weight = np.zeros(shape, dtype=dtype)

    def add(self, value: ArrayLike, weight: ArrayLike, mask: Optional[np.ndarray] = None) -> None:
        """Fold ``value`` with ``weight`` into the totals.

        Elements where ``mask`` is False are left untouched.
        """
        if mask is None:
            self.value += value * weight
            self.weight += weight
            return
        weighted = np.multiply(value, weight, dtype=self.value.dtype)
        np.add(self.value, weighted, out=self.value, where=mask)
        np.add(self.weight, np.broadcast_to(weight, self.weight.shape), out=self.weight, where=mask)

    def has_weight(self) -> np.ndarray:
        return self.weight > 0

    def normalized(self, fill: float = 0.0) -> np.ndarray:
        """Weighted average where the weight total is positive, ``fill`` elsewhere."""
        out = np.full_like(self.value, fill)
        np.divide(self.value, self.weight, out=out, where=self.has_weight())
        return out
