"""Joint bilateral filtering of depth maps guided by a color or intensity image.

The filter smooths regions that look similar in the guide image while keeping
depth discontinuities that coincide with guide edges. Output resolution
follows the guide, so a low-resolution depth map is resampled onto the guide
grid at the same time.
"""

from __future__ import annotations

import math
import operator
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Iterator, List, Optional, Tuple

import numpy as np
from tqdm import tqdm

from guidedepth.errors import InvalidArgument
from guidedepth.filters.accum import WeightedAccumulator
from guidedepth.utils.img import INVALID_DEPTH, as_depth_map, as_guide_image, is_valid
from guidedepth.utils.logger import get_logger
from guidedepth.utils.mathfn import clamp, gaussian, gaussian_2d

# Photometric standard deviation, in guide intensity units ([0, 1] images).
RANGE_SIGMA = 0.1

log = get_logger("bilateral")


# --------------------------------------------------------------------------- #
# Grid correspondence
# --------------------------------------------------------------------------- #


def axis_scale(depth_extent: int, guide_extent: int) -> np.float32:
    """Ratio between the depth grid and the guide grid along one axis."""
    scale = np.float32(depth_extent) / np.float32(guide_extent)
    if not np.isfinite(scale) or scale <= 0:
        raise InvalidArgument(f"Invalid scale factor {depth_extent}/{guide_extent}")
    return scale


def map_to_depth_grid(coord, scale: np.float32, depth_extent: int):
    """Map guide-grid coordinate(s) along one axis onto the depth grid.

    The coordinate is multiplied by ``scale``, clamped to
    ``[0, depth_extent - 1]`` and truncated. Accepts an int or an int array.
    """
    scaled = np.float32(scale) * np.asarray(coord, dtype=np.float32)
    mapped = clamp(scaled, np.float32(0.0), np.float32(depth_extent - 1))
    if np.ndim(mapped) == 0:
        return int(mapped)
    return mapped.astype(np.intp)


def window_coordinates(
    x: int, y: int, kernel_size: int, width: int, height: int
) -> Iterator[Tuple[int, int, int, int]]:
    """Yield ``(kx, ky, ci_x, ci_y)`` for the clamped square window around (x, y)."""
    for ky in range(-kernel_size, kernel_size + 1):
        for kx in range(-kernel_size, kernel_size + 1):
            yield kx, ky, clamp(x + kx, 0, width - 1), clamp(y + ky, 0, height - 1)


# --------------------------------------------------------------------------- #
# Weights
# --------------------------------------------------------------------------- #


def spatial_weight(kx: int, ky: int, sigma: float) -> np.float32:
    return np.float32(gaussian_2d(float(kx), float(ky), sigma, sigma))


def neighbor_weight(
    kx: int,
    ky: int,
    sigma: float,
    neighbor: Optional[np.ndarray],
    center: Optional[np.ndarray],
    shape: Tuple[int, ...] = (),
) -> np.ndarray:
    """Spatial term times the per-channel range terms.

    ``neighbor`` and ``center`` carry guide samples with channels on the last
    axis. When both are None only the spatial term is returned, broadcast to
    ``shape``.
    """
    if center is not None:
        shape = center.shape[:-1]
    weight = np.full(shape, spatial_weight(kx, ky, sigma), dtype=np.float32)
    if center is None:
        return weight
    for c in range(center.shape[-1]):
        weight *= gaussian(neighbor[..., c] - center[..., c], RANGE_SIGMA)
    return weight


# --------------------------------------------------------------------------- #
# Filtering
# --------------------------------------------------------------------------- #


def _check_params(sigma: float, kernel_size: int, workers: int = 1) -> Tuple[float, int, int]:
    try:
        sigma = float(sigma)
    except (TypeError, ValueError) as exc:
        raise InvalidArgument(f"sigma must be a number, got {sigma!r}") from exc
    if not math.isfinite(sigma) or sigma <= 0.0:
        raise InvalidArgument(f"sigma must be finite and > 0, got {sigma}")
    try:
        kernel_size = operator.index(kernel_size)
        workers = operator.index(workers)
    except TypeError as exc:
        raise InvalidArgument("kernel_size and workers must be integers") from exc
    if kernel_size < 0:
        raise InvalidArgument(f"kernel_size must be >= 0, got {kernel_size}")
    if workers < 1:
        raise InvalidArgument(f"workers must be >= 1, got {workers}")
    return sigma, kernel_size, workers


def _filter_band(
    depth: np.ndarray,
    guide: Optional[np.ndarray],
    grid_shape: Tuple[int, int],
    rows: slice,
    sigma: float,
    kernel_size: int,
) -> np.ndarray:
    """Filter output rows ``rows``; every pixel of the band is one accumulator."""
    height, width = grid_shape
    dm_h, dm_w = depth.shape
    scale_x = axis_scale(dm_w, width)
    scale_y = axis_scale(dm_h, height)

    ys = np.arange(rows.start, rows.stop)
    xs = np.arange(width)
    center = guide[rows] if guide is not None else None
    accum = WeightedAccumulator((ys.size, width))

    offsets = range(-kernel_size, kernel_size + 1)
    ci_xs = {kx: clamp(xs + kx, 0, width - 1) for kx in offsets}
    dm_xs = {kx: map_to_depth_grid(ci_xs[kx], scale_x, dm_w) for kx in offsets}

    for ky in offsets:
        ci_y = clamp(ys + ky, 0, height - 1)
        dm_y = map_to_depth_grid(ci_y, scale_y, dm_h)
        for kx in offsets:
            samples = depth[np.ix_(dm_y, dm_xs[kx])]
            valid = is_valid(samples)
            if not valid.any():
                continue
            neighbor = guide[np.ix_(ci_y, ci_xs[kx])] if guide is not None else None
            weight = neighbor_weight(kx, ky, sigma, neighbor, center, shape=samples.shape)
            accum.add(samples, weight, mask=valid)

    return accum.normalized(fill=INVALID_DEPTH)


def _row_bands(height: int, band_rows: int) -> List[slice]:
    return [slice(start, min(start + band_rows, height)) for start in range(0, height, band_rows)]


def _run(
    depth: np.ndarray,
    guide: Optional[np.ndarray],
    grid_shape: Tuple[int, int],
    sigma: float,
    kernel_size: int,
    workers: int,
    band_rows: Optional[int],
    progress: bool,
    desc: str,
) -> np.ndarray:
    height, width = grid_shape
    if band_rows is None:
        band_rows = max(1, math.ceil(height / workers))
    else:
        try:
            band_rows = operator.index(band_rows)
        except TypeError as exc:
            raise InvalidArgument(f"band_rows must be an integer, got {band_rows!r}") from exc
        if band_rows < 1:
            raise InvalidArgument(f"band_rows must be >= 1, got {band_rows}")

    out = np.full((height, width), INVALID_DEPTH, dtype=np.float32)
    bands = _row_bands(height, band_rows)

    def work(rows: slice) -> None:
        out[rows] = _filter_band(depth, guide, grid_shape, rows, sigma, kernel_size)

    if workers == 1:
        for rows in tqdm(bands, desc=desc, disable=not progress):
            work(rows)
        return out

    with ThreadPoolExecutor(max_workers=workers) as pool:
        futures = [pool.submit(work, rows) for rows in bands]
        for future in tqdm(as_completed(futures), total=len(futures), desc=desc, disable=not progress):
            future.result()
    return out


def bilateral_filter_depth(
    depth_map: np.ndarray,
    guide_image: np.ndarray,
    sigma: float,
    kernel_size: int,
    workers: int = 1,
    band_rows: Optional[int] = None,
    progress: bool = False,
) -> np.ndarray:
    """Joint bilateral filter of ``depth_map`` guided by ``guide_image``.

    Parameters
    ----------
    depth_map:
        HxW (or HxWx1) depth values; ``0.0`` marks missing measurements.
    guide_image:
        HxW or HxWxC image with intensities in [0, 1]. Sets the output size.
    sigma:
        Standard deviation of the spatial Gaussian, in guide pixels.
    kernel_size:
        Half-width of the square window (side ``2 * kernel_size + 1``).
    workers:
        Number of threads filtering disjoint row bands. Results do not
        depend on this value.
    band_rows:
        Rows per band; defaults to an even split across ``workers``.
    progress:
        Show a tqdm progress bar over bands.

    Returns
    -------
    np.ndarray
        float32 array with the guide's height and width. Pixels whose window
        held no valid depth keep ``0.0``.

    Raises
    ------
    InvalidArgument
        If an input is missing or malformed, or a parameter is out of range.
    """
    depth = as_depth_map(depth_map, "depth_map")
    guide = as_guide_image(guide_image, "guide_image")
    sigma, kernel_size, workers = _check_params(sigma, kernel_size, workers)
    height, width = guide.shape[:2]
    log.debug(
        f"bilateral {depth.shape[1]}x{depth.shape[0]} -> {width}x{height} "
        f"(channels={guide.shape[2]}, sigma={sigma}, kernel_size={kernel_size}, workers={workers})"
    )
    return _run(depth, guide, (height, width), sigma, kernel_size, workers, band_rows, progress, "bilateral")


def bilateral_filter_pixel(
    depth_map: np.ndarray,
    guide_image: np.ndarray,
    x: int,
    y: int,
    sigma: float,
    kernel_size: int,
) -> float:
    """Filtered depth for a single guide pixel ``(x, y)``."""
    depth = as_depth_map(depth_map, "depth_map")
    guide = as_guide_image(guide_image, "guide_image")
    sigma, kernel_size, _ = _check_params(sigma, kernel_size)
    height, width = guide.shape[:2]
    if not (0 <= x < width and 0 <= y < height):
        raise InvalidArgument(f"Pixel ({x}, {y}) outside {width}x{height} guide")

    dm_h, dm_w = depth.shape
    scale_x = axis_scale(dm_w, width)
    scale_y = axis_scale(dm_h, height)
    center = guide[y, x]

    accum = WeightedAccumulator()
    for kx, ky, ci_x, ci_y in window_coordinates(x, y, kernel_size, width, height):
        value = depth[map_to_depth_grid(ci_y, scale_y, dm_h), map_to_depth_grid(ci_x, scale_x, dm_w)]
        if not is_valid(value):
            continue
        accum.add(value, neighbor_weight(kx, ky, sigma, guide[ci_y, ci_x], center))
    return float(accum.normalized(fill=INVALID_DEPTH))


def spatial_filter_depth(
    depth_map: np.ndarray,
    sigma: float,
    kernel_size: int,
    workers: int = 1,
) -> np.ndarray:
    """Sentinel-aware Gaussian smoothing of ``depth_map`` on its own grid.

    Same window, border and sentinel handling as the bilateral filter but
    without the range term, so it blurs across edges.
    """
    depth = as_depth_map(depth_map, "depth_map")
    sigma, kernel_size, workers = _check_params(sigma, kernel_size, workers)
    log.debug(f"spatial {depth.shape[1]}x{depth.shape[0]} (sigma={sigma}, kernel_size={kernel_size})")
    return _run(depth, None, depth.shape, sigma, kernel_size, workers, None, False, "spatial")
