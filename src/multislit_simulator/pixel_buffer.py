"""Fixed-size 8-bit RGB pixel buffer written concurrently by render tiles.

Memory layout:
    - numpy ``uint8`` array of shape ``(height, width, 3)``
    - row-major, tightly packed, 3 bytes per pixel (R, G, B)
    - byte offset of channel ``c`` at ``(ix, iy)`` is ``3 * (iy * width + ix) + c``

Write contract:
    - Writes take linear float colors (0..255 scale), clamp each channel to
      [0, 255] and truncate toward zero; NaN channels store 0
    - ``quantize()`` applies that rule to a whole block; ``store_row_span``
      copies already quantized rows
    - Concurrent writes are safe when they touch disjoint columns; the
      renderer's column tiling guarantees this
    - After ``release()`` every write is a no-op and ``released`` is True;
      render tiles poll ``released`` to abort early

The buffer is also a context manager: leaving the ``with`` block releases it.
"""

import logging
import threading
from typing import Tuple, Union

import numpy as np
from PIL import Image

from src.utils.color import RgbColor

logger = logging.getLogger(__name__)

DEFAULT_BACKGROUND = (10, 10, 10)
BYTES_PER_PIXEL = 3


def quantize(values: np.ndarray) -> np.ndarray:
    """Clamp linear channels to [0, 255] and truncate to bytes (NaN -> 0).

    Any shape is accepted; the result has the same shape, dtype uint8.
    """
    values = np.nan_to_num(np.asarray(values, dtype=np.float64), nan=0.0)
    return np.clip(values, 0.0, 255.0).astype(np.uint8)


class PixelBuffer:
    """Row-major 2D array of clamped 8-bit RGB cells.

    Attributes
    ----------
    width : int
        Number of columns
    height : int
        Number of rows
    background : tuple[int, int, int]
        Fill color applied at allocation
    """

    def __init__(
        self,
        width: int,
        height: int,
        background: Tuple[int, int, int] = DEFAULT_BACKGROUND
    ):
        if width < 0 or height < 0:
            raise ValueError(f"Buffer size must be non-negative, got {width}x{height}")

        self.width = int(width)
        self.height = int(height)
        self.background = tuple(int(c) for c in background)

        self._pixels = np.empty((self.height, self.width, BYTES_PER_PIXEL), dtype=np.uint8)
        self._pixels[...] = np.asarray(self.background, dtype=np.uint8)
        self._released = threading.Event()

    @classmethod
    def from_array(
        cls,
        pixels: np.ndarray,
        background: Tuple[int, int, int] = DEFAULT_BACKGROUND
    ) -> "PixelBuffer":
        """Wrap a copy of an existing ``(H, W, 3)`` uint8 array."""
        pixels = np.asarray(pixels)
        if pixels.ndim != 3 or pixels.shape[2] != BYTES_PER_PIXEL:
            raise ValueError(f"Expected shape (H, W, 3), got {pixels.shape}")
        buffer = cls(pixels.shape[1], pixels.shape[0], background)
        buffer._pixels[...] = pixels.astype(np.uint8, copy=False)
        return buffer

    # -- queries ---------------------------------------------------------

    @property
    def size(self) -> Tuple[int, int]:
        """(width, height)."""
        return (self.width, self.height)

    @property
    def released(self) -> bool:
        return self._released.is_set()

    def __len__(self) -> int:
        return self.width * self.height

    def __getitem__(self, index: Tuple[int, int]) -> Tuple[int, int, int]:
        ix, iy = index
        return self.pixel(ix, iy)

    def pixel(self, ix: int, iy: int) -> Tuple[int, int, int]:
        """Read one pixel as an (r, g, b) tuple of ints."""
        if not (0 <= ix < self.width and 0 <= iy < self.height):
            raise IndexError(f"Pixel ({ix}, {iy}) outside {self.width}x{self.height} buffer")
        r, g, b = self._pixels[iy, ix]
        return (int(r), int(g), int(b))

    # -- writes ----------------------------------------------------------

    def write(self, ix: int, iy: int, color: Union[RgbColor, np.ndarray]) -> None:
        """Clamp and store a single pixel (no-op once released)."""
        if self._released.is_set():
            return
        if isinstance(color, RgbColor):
            color = color.to_array()
        self._pixels[iy, ix] = quantize(color)

    def __setitem__(self, index: Tuple[int, int], color: Union[RgbColor, np.ndarray]) -> None:
        self.write(index[0], index[1], color)

    def store_row_span(self, iy: int, start: int, pixels: np.ndarray) -> None:
        """Store already quantized ``pixels`` (uint8, shape ``(k, 3)``) into row ``iy``.

        Render tiles quantize their whole block once and copy it row by
        row through here. No-op once released.
        """
        if self._released.is_set():
            return
        if pixels.dtype != np.uint8:
            raise ValueError(f"Expected uint8 pixels, got {pixels.dtype}")
        self._pixels[iy, start:start + pixels.shape[0]] = pixels

    # -- ownership -------------------------------------------------------

    def release(self) -> None:
        """Mark the buffer torn down; further writes are ignored."""
        if not self._released.is_set():
            self._released.set()
            logger.debug("PixelBuffer %dx%d released", self.width, self.height)

    def snapshot(self) -> np.ndarray:
        """Standalone copy of the pixels, shape ``(height, width, 3)`` uint8."""
        return self._pixels.copy()

    def clone(self) -> "PixelBuffer":
        """Independent, unreleased buffer holding a copy of the pixels."""
        return type(self).from_array(self._pixels, self.background)

    def tobytes(self) -> bytes:
        """Raw pixel bytes in the documented row-major RGB layout."""
        return self._pixels.tobytes()

    def to_image(self) -> Image.Image:
        """Convert to a Pillow RGB image (host-owned copy)."""
        return Image.fromarray(self.snapshot())

    def __enter__(self) -> "PixelBuffer":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release()

    def __repr__(self) -> str:
        state = "released" if self.released else "live"
        return f"PixelBuffer({self.width}x{self.height}, {state})"
