"""Windowed median filter for single-channel grids."""

from __future__ import annotations

import operator

import numpy as np
from scipy import ndimage

from guidedepth.errors import InvalidArgument
from guidedepth.utils.img import as_depth_map
from guidedepth.utils.logger import get_logger

log = get_logger("median")


def median_filter(grid: np.ndarray, window_size: int) -> np.ndarray:
    """Median over a ``window_size x window_size`` window with clamp-to-edge borders.

    The sentinel is not treated specially: every window value takes part in
    the median. Even windows reach one more pixel before the centre than
    after it and take the upper of the two middle values. The output has the
    same height and width as ``grid``.
    """
    if grid is None:
        raise InvalidArgument("Null image given")
    try:
        window_size = operator.index(window_size)
    except TypeError as exc:
        raise InvalidArgument(f"window_size must be an integer, got {window_size!r}") from exc
    if window_size < 1:
        raise InvalidArgument(f"window_size must be >= 1, got {window_size}")

    data = as_depth_map(grid, "grid")
    if window_size == 1:
        return data.copy()

    log.debug(f"median {data.shape[1]}x{data.shape[0]} window={window_size}")
    return ndimage.median_filter(data, size=window_size, mode="nearest").astype(np.float32, copy=False)
