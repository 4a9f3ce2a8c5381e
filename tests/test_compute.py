"""Test coordinate conversions and tiling utilities.

Tests for src.utils.compute:
    - column_tiles covers every column exactly once
    - pixel_to_screen places the origin at extent/2
    - sample_offsets spans [-r, r] with endpoints (or a single centre sample)

Run:
    pytest tests/test_compute.py -v
"""

import numpy as np
import pytest

from src.utils import compute


def test_column_tiles_basic():
    assert compute.column_tiles(120, 50) == [(0, 50), (50, 100), (100, 120)]


@pytest.mark.parametrize("width, tile", [(1, 50), (50, 50), (51, 50), (3840, 10), (7, 3)])
def test_column_tiles_partition(width, tile):
    tiles = compute.column_tiles(width, tile)
    covered = np.concatenate([np.arange(start, stop) for start, stop in tiles])
    assert np.array_equal(covered, np.arange(width))
    assert all(stop - start <= tile for start, stop in tiles)
    assert len(tiles) == -(-width // tile)


def test_column_tiles_empty_width():
    assert compute.column_tiles(0, 50) == []


def test_column_tiles_rejects_bad_tile():
    with pytest.raises(ValueError, match="tile"):
        compute.column_tiles(10, 0)


def test_pixel_to_screen_origin_and_units():
    x = compute.pixel_to_screen(np.arange(5), 4, 2.0)
    assert np.allclose(x, [-1.0, -0.5, 0.0, 0.5, 1.0])
    assert compute.pixel_to_screen(100, 200, 20000.0) == 0.0


def test_nm_to_m():
    assert compute.nm_to_m(550.0) == pytest.approx(5.5e-7)


def test_sample_offsets_single_sample_is_centre():
    assert np.array_equal(compute.sample_offsets(1.0, 1), [0.0])


def test_sample_offsets_include_endpoints():
    offsets = compute.sample_offsets(2.0, 5)
    assert np.allclose(offsets, [-2.0, -1.0, 0.0, 1.0, 2.0])


def test_sample_offsets_reject_zero_quality():
    with pytest.raises(ValueError, match="quality"):
        compute.sample_offsets(1.0, 0)
