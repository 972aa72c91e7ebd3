"""Depth filters."""

from .accum import WeightedAccumulator
from .bilateral import (
    RANGE_SIGMA,
    bilateral_filter_depth,
    bilateral_filter_pixel,
    map_to_depth_grid,
    spatial_filter_depth,
)
from .median import median_filter

__all__ = [
    "RANGE_SIGMA",
    "WeightedAccumulator",
    "bilateral_filter_depth",
    "bilateral_filter_pixel",
    "map_to_depth_grid",
    "median_filter",
    "spatial_filter_depth",
]
