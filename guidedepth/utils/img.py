"""Depth and guide image array helpers."""

from __future__ import annotations

import numpy as np

from guidedepth.errors import InvalidArgument

INVALID_DEPTH = 0.0


def is_valid(depth):
    """Return True where ``depth`` holds a measurement rather than the sentinel."""
    return depth != INVALID_DEPTH


def valid_fraction(depth: np.ndarray) -> float:
    """Fraction of cells in ``depth`` carrying a measurement."""
    if depth.size == 0:
        return 0.0
    return float(np.count_nonzero(is_valid(depth)) / depth.size)


def as_depth_map(array: np.ndarray, name: str = "depth_map") -> np.ndarray:
    """Ensure the array is an HxW float32 depth map."""
    if array is None:
        raise InvalidArgument(f"Null {name} given")
    array = np.asarray(array)
    if array.ndim == 3 and array.shape[2] == 1:
        array = array[:, :, 0]
    if array.ndim != 2:
        raise InvalidArgument(f"Expected {name} of shape HxW or HxWx1, got {array.shape}.")
    if array.shape[0] < 1 or array.shape[1] < 1:
        raise InvalidArgument(f"{name} must be at least 1x1, got {array.shape}.")
    if array.dtype != np.float32:
        array = array.astype(np.float32)
    return array


def as_guide_image(array: np.ndarray, name: str = "guide_image") -> np.ndarray:
    """Ensure the array is an HxWxC float32 guide image with C >= 1."""
    if array is None:
        raise InvalidArgument(f"Null {name} given")
    array = np.asarray(array)
    if array.ndim == 2:
        array = array[:, :, None]
    if array.ndim != 3:
        raise InvalidArgument(f"Expected {name} of shape HxW or HxWxC, got {array.shape}.")
    if array.shape[0] < 1 or array.shape[1] < 1:
        raise InvalidArgument(f"{name} must be at least 1x1, got {array.shape}.")
    if array.shape[2] < 1:
        raise InvalidArgument(f"{name} must have at least one channel.")
    if array.dtype != np.float32:
        array = array.astype(np.float32)
    return array
