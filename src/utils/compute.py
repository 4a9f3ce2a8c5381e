"""Coordinate conversions and tiling helpers.

Provides:
    - nm_to_m(): wavelength unit conversion
    - pixel_to_screen(): pixel index → screen-plane metres
    - column_tiles(): contiguous column ranges for data-parallel rendering
    - sample_offsets(): sub-sample positions for the averaging kernel

Coordinate convention:
    - Screen-plane origin at (width/2, height/2), +x right, +y down
    - Pixel offsets divided by scale (px/m) give metres
"""

from typing import List, Tuple, Union

import numpy as np

NM_PER_M = 1e9


def nm_to_m(wavelength_nm: Union[float, np.ndarray]) -> Union[float, np.ndarray]:
    """Convert nanometres to metres."""
    return wavelength_nm / NM_PER_M


def pixel_to_screen(
    index: Union[int, np.ndarray],
    extent: int,
    scale: float
) -> Union[float, np.ndarray]:
    """Convert a pixel index to a screen-plane coordinate in metres.

    Parameters
    ----------
    index : int or np.ndarray
        Column (or row) index, 0-based
    extent : int
        Image width (or height) in pixels
    scale : float
        Pixels per metre of screen-plane coordinate

    Returns
    -------
    float or np.ndarray
        ``(index - extent/2) / scale``
    """
    return (np.asarray(index, dtype=np.float64) - extent * 0.5) / scale


def column_tiles(width: int, tile: int) -> List[Tuple[int, int]]:
    """Partition ``[0, width)`` into contiguous column ranges.

    Parameters
    ----------
    width : int
        Image width in pixels
    tile : int
        Tile width in columns (> 0)

    Returns
    -------
    list[tuple[int, int]]
        ``(start, stop)`` half-open ranges covering every column exactly once;
        the last tile may be narrower

    Examples
    --------
    >>> column_tiles(120, 50)
    [(0, 50), (50, 100), (100, 120)]
    """
    if tile <= 0:
        raise ValueError(f"tile must be > 0, got {tile}")
    return [(start, min(start + tile, width)) for start in range(0, width, tile)]


def sample_offsets(radius: float, quality: int) -> np.ndarray:
    """Sub-sample offsets across ``[-radius, +radius]``.

    One sample sits at the centre when ``quality == 1``; otherwise
    ``quality`` evenly spaced samples include both endpoints.
    """
    if quality < 1:
        raise ValueError(f"quality must be >= 1, got {quality}")
    if quality == 1:
        return np.zeros(1, dtype=np.float64)
    return np.linspace(-radius, radius, quality, dtype=np.float64)
