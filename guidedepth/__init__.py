"""Guided depth map refinement with a joint bilateral filter."""

from .errors import InvalidArgument
from .filters import (
    RANGE_SIGMA,
    WeightedAccumulator,
    bilateral_filter_depth,
    bilateral_filter_pixel,
    map_to_depth_grid,
    median_filter,
    spatial_filter_depth,
)
from .utils.img import INVALID_DEPTH, is_valid

__all__ = [
    "INVALID_DEPTH",
    "InvalidArgument",
    "RANGE_SIGMA",
    "WeightedAccumulator",
    "bilateral_filter_depth",
    "bilateral_filter_pixel",
    "is_valid",
    "map_to_depth_grid",
    "median_filter",
    "spatial_filter_depth",
]
