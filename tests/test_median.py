import tracemalloc

import numpy as np
import pytest

from guidedepth.errors import InvalidArgument
from guidedepth.filters.median import median_filter


def test_null_grid_raises():
    with pytest.raises(InvalidArgument):
        median_filter(None, 3)


@pytest.mark.parametrize("window_size", [0, -2, 2.5])
def test_invalid_window_raises(window_size):
    with pytest.raises(InvalidArgument):
        median_filter(np.ones((4, 4), dtype=np.float32), window_size)


def test_multichannel_grid_raises():
    with pytest.raises(InvalidArgument):
        median_filter(np.ones((4, 4, 3), dtype=np.float32), 3)


def test_shape_is_preserved():
    grid = np.random.default_rng(0).random((7, 11)).astype(np.float32)
    for window_size in (1, 2, 3, 5):
        out = median_filter(grid, window_size)
        assert out.shape == grid.shape
        assert out.dtype == np.float32


def test_salt_noise_is_removed():
    grid = np.full((9, 9), 2.0, dtype=np.float32)
    grid[4, 4] = 50.0
    grid[0, 0] = 50.0

    out = median_filter(grid, 3)

    assert np.allclose(out, 2.0)


def test_window_one_returns_copy():
    grid = np.arange(12, dtype=np.float32).reshape(3, 4)
    out = median_filter(grid, 1)
    assert np.array_equal(out, grid)
    out[0, 0] = -1.0
    assert grid[0, 0] == 0.0


def test_border_uses_edge_values():
    grid = np.array([[1, 2, 3], [4, 5, 6], [7, 8, 9]], dtype=np.float32)
    out = median_filter(grid, 3)
    # Corner window after edge padding: 1,1,2,1,1,2,4,4,5
    assert out[0, 0] == pytest.approx(2.0)
    assert out[1, 1] == pytest.approx(5.0)


def test_even_window_reaches_before_centre():
    grid = np.array([[1, 2, 3], [4, 5, 6], [7, 8, 9]], dtype=np.float32)
    out = median_filter(grid, 2)
    # (0, 0): edge-clamped window is all 1s; (1, 1): window 1, 2, 4, 5.
    assert out[0, 0] == pytest.approx(1.0)
    assert out[1, 1] == pytest.approx(4.0)


def test_large_grid_stays_within_small_memory_budget():
    grid = np.random.default_rng(1).random((1080, 1920)).astype(np.float32)
    grid[100, 200] = 1e6

    tracemalloc.start()
    try:
        out = median_filter(grid, 9)
        _, peak = tracemalloc.get_traced_memory()
    finally:
        tracemalloc.stop()

    assert out.shape == grid.shape
    assert out.dtype == np.float32
    assert out[100, 200] < 1.0
    assert peak < 8 * grid.nbytes
