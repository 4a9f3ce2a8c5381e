"""Frame assembler: renders a multislit configuration into a pixel buffer.

Pipeline (one render call):
    1. Validate size and configuration (fail fast, nothing allocated)
    2. Precompute the vertical brightness envelope (one factor per row)
    3. Allocate the working PixelBuffer filled with the background color
    4. Split the columns into fixed-width tiles and evaluate them in a
       thread pool; each tile computes and quantizes its pixel block once,
       then copies it row by row
    5. Hand out a clone of the working buffer; the working buffer itself is
       released on every exit path

Column color::

    C(x) = brightness · Σ_light light.color · I(light.wavelength, x, r, q)

summed in the insertion order of ``light_sources``. Rows receive ``C`` as-is
when ``display_distribution`` is set, ``envelope[iy] · C`` otherwise.

Concurrency:
    - Tiles own disjoint column ranges, so buffer writes never overlap
    - The finished-tile counter and progress publication share one lock;
      observed progress is monotone and ends at exactly 1.0
    - Cancellation is cooperative: ``FrameAssembler.cancel()`` releases the
      working buffer and each tile polls the release flag at the top of its
      row loop; the render then raises RenderCancelled

Usage:
    from src.multislit_simulator.renderer import render, render_highres

    buffer = render(cfg, 800, 400, quality=4)
    progress = ProgressProvider(callback=lambda p: print(f"{p:.0%}"))
    hires = render_highres(cfg, 3840, 2160, progress)
"""

import logging
import numbers
import os
import threading
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Union

import numpy as np

from src.multislit_simulator.configuration import Configuration, validate_configuration
from src.multislit_simulator.errors import InvalidDimensions, RenderCancelled
from src.multislit_simulator.intensity import calculate_intensity
from src.multislit_simulator.pixel_buffer import DEFAULT_BACKGROUND, PixelBuffer, quantize
from src.utils import compute, fs, profiler

logger = logging.getLogger(__name__)

TILE_WIDTH = 50
HIGHRES_TILE_WIDTH = 10
HIGHRES_QUALITY = 250

# Vertical falloff: peak / base^(|y| / length)
ENVELOPE_PEAK = 10.0
ENVELOPE_BASE = 1.25
ENVELOPE_LENGTH = 2.5


class ProgressProvider:
    """Advisory render progress in [0, 1].

    ``progress`` is a plain attribute (last writer wins). An optional
    callback receives every published value.
    """

    def __init__(self, callback: Optional[Callable[[float], None]] = None):
        self.progress = 0.0
        self._callback = callback

    def report(self, value: float) -> None:
        self.progress = value
        if self._callback is not None:
            self._callback(value)


ProgressSink = Union[ProgressProvider, Callable[[float], None]]


def _as_progress_provider(sink: Optional[ProgressSink]) -> Optional[ProgressProvider]:
    if sink is None or isinstance(sink, ProgressProvider):
        return sink
    if callable(sink):
        return ProgressProvider(callback=sink)
    raise TypeError(f"progress sink must be a ProgressProvider or callable, got {type(sink)}")


def y_brightness_distribution(height: int, scale: float) -> np.ndarray:
    """Vertical brightness envelope, one factor per row.

    Parameters
    ----------
    height : int
        Image height in pixels
    scale : float
        Pixels per screen-plane metre

    Returns
    -------
    np.ndarray
        float64 factors of shape (height,), peaking at 10 on the centre row

    Notes
    -----
    ``10 / 1.25 ** (|y| / 2.5)`` with ``y = (iy - height/2) / scale``. The
    falloff is a visual heuristic and is kept as-is.
    """
    y = compute.pixel_to_screen(np.arange(height), height, scale)
    return ENVELOPE_PEAK / np.power(ENVELOPE_BASE, np.abs(y) / ENVELOPE_LENGTH)


def column_colors(
    configuration: Configuration,
    x: np.ndarray,
    quality: int,
    radius: Optional[float] = None
) -> np.ndarray:
    """Linear, unclamped colors for screen-plane columns.

    Parameters
    ----------
    configuration : Configuration
        Render configuration (light sources, slits, brightness)
    x : np.ndarray
        Column positions in screen-plane metres, shape (k,)
    quality : int
        Kernel samples per column
    radius : float, optional
        Averaging half-width in metres; defaults to
        ``configuration.sampling_radius``

    Returns
    -------
    np.ndarray
        float64 colors of shape (k, 3) on the 0..255 scale, brightness applied
    """
    if radius is None:
        radius = configuration.sampling_radius

    x = np.atleast_1d(np.asarray(x, dtype=np.float64))
    result = np.zeros((x.shape[0], 3), dtype=np.float64)
    for light in configuration.light_sources:
        intensity = calculate_intensity(
            light.wavelength_nm, configuration.slits, x, radius, quality
        )
        result = result + intensity[:, None] * light.color.to_array()[None, :]

    return configuration.brightness * result


def _validate_dimensions(width: Any, height: Any) -> None:
    for name, value in (("width", width), ("height", height)):
        if isinstance(value, bool) or not isinstance(value, numbers.Integral):
            raise InvalidDimensions(f"{name} must be an integer, got {value!r}")
        if value < 0:
            raise InvalidDimensions(f"{name} must be >= 0, got {value}")


def _validate_quality(quality: Any) -> None:
    if isinstance(quality, bool) or not isinstance(quality, numbers.Integral):
        raise ValueError(f"quality must be an integer, got {quality!r}")
    if quality < 1:
        raise ValueError(f"quality must be >= 1, got {quality}")


class FrameAssembler:
    """Drives one render: envelope, tiling, parallel tile evaluation.

    Attributes
    ----------
    configuration : Configuration
        Immutable render input
    width, height : int
        Output size in pixels
    quality : int
        Kernel samples per column
    tile_width : int
        Columns per unit of parallel work
    progress : ProgressProvider or None
        Receives ``finished / total`` after every completed tile
    """

    def __init__(
        self,
        configuration: Configuration,
        width: int,
        height: int,
        quality: int = 1,
        *,
        tile_width: int = TILE_WIDTH,
        progress: Optional[ProgressSink] = None,
        max_workers: Optional[int] = None
    ):
        _validate_dimensions(width, height)
        _validate_quality(quality)
        validate_configuration(configuration)
        if tile_width < 1:
            raise ValueError(f"tile_width must be >= 1, got {tile_width}")

        self.configuration = configuration
        self.width = int(width)
        self.height = int(height)
        self.quality = int(quality)
        self.tile_width = int(tile_width)
        self.progress = _as_progress_provider(progress)
        self.max_workers = max_workers or os.cpu_count() or 4

        self._lock = threading.Lock()
        self._finished_tiles = 0
        self._total_tiles = 0
        self._cancel_requested = threading.Event()
        self._buffer: Optional[PixelBuffer] = None

    @property
    def cancelled(self) -> bool:
        return self._cancel_requested.is_set()

    def cancel(self) -> None:
        """Release the working buffer; running tiles stop at their next row."""
        self._cancel_requested.set()
        buffer = self._buffer
        if buffer is not None:
            buffer.release()

    def run(self) -> PixelBuffer:
        """Render the frame.

        Returns
        -------
        PixelBuffer
            Host-owned buffer of size (width, height)

        Raises
        ------
        RenderCancelled
            If the working buffer was released before every tile finished
        """
        cfg = self.configuration
        envelope = y_brightness_distribution(self.height, cfg.scale)

        buffer = PixelBuffer(self.width, self.height, DEFAULT_BACKGROUND)
        self._buffer = buffer
        if self._cancel_requested.is_set():
            buffer.release()

        try:
            if not cfg.light_sources or self.width == 0 or self.height == 0:
                self._check_cancelled(buffer)
                if self.progress is not None:
                    self.progress.report(1.0)
                return buffer.clone()

            tiles = compute.column_tiles(self.width, self.tile_width)
            self._total_tiles = len(tiles)
            self._finished_tiles = 0

            timings: Dict[str, float] = {}
            with profiler.timer("render", sink=timings.__setitem__):
                with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
                    futures = [
                        pool.submit(self._render_tile, buffer, envelope, start, stop)
                        for start, stop in tiles
                    ]
                    try:
                        for future in futures:
                            future.result()
                    except BaseException:
                        buffer.release()
                        raise

            self._check_cancelled(buffer)
            logger.info(
                "Rendered %dx%d: quality=%d, tiles=%d, sources=%d, elapsed=%.3f s",
                self.width, self.height, self.quality, len(tiles),
                len(cfg.light_sources), timings.get("render", 0.0)
            )
            return buffer.clone()
        finally:
            buffer.release()
            self._buffer = None

    def _check_cancelled(self, buffer: PixelBuffer) -> None:
        if buffer.released:
            logger.warning(
                "Render %dx%d cancelled after %d/%d tiles",
                self.width, self.height, self._finished_tiles, self._total_tiles
            )
            raise RenderCancelled(
                f"Pixel buffer released during {self.width}x{self.height} render"
            )

    def _render_tile(
        self,
        buffer: PixelBuffer,
        envelope: np.ndarray,
        start: int,
        stop: int
    ) -> None:
        """Compute and write columns ``[start, stop)``."""
        cfg = self.configuration
        x = compute.pixel_to_screen(np.arange(start, stop), self.width, cfg.scale)
        colors = column_colors(cfg, x, self.quality)

        # Quantize the tile once; rows are plain byte copies
        if cfg.display_distribution:
            row = quantize(colors)
            block = np.broadcast_to(row, (self.height,) + row.shape)
        else:
            block = quantize(envelope[:, None, None] * colors[None, :, :])

        for iy in range(self.height):
            if buffer.released:
                return
            buffer.store_row_span(iy, start, block[iy])

        with self._lock:
            self._finished_tiles += 1
            finished = self._finished_tiles
            if self.progress is not None:
                self.progress.report(finished / self._total_tiles)
        logger.debug("Tile [%d, %d) done (%d/%d)", start, stop, finished, self._total_tiles)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def render(
    configuration: Configuration,
    width: int,
    height: int,
    quality: int = 1
) -> PixelBuffer:
    """Render a configuration at the given size and quality.

    Raises
    ------
    InvalidDimensions
        Negative or non-integer width/height
    InvalidGeometry
        Invalid slit geometry, scale or brightness
    """
    assembler = FrameAssembler(
        configuration, width, height, quality, tile_width=TILE_WIDTH
    )
    return assembler.run()


def render_highres(
    configuration: Configuration,
    width: int,
    height: int,
    progress: Optional[ProgressSink] = None
) -> PixelBuffer:
    """Render at quality 250 with narrow tiles and progress reporting.

    Parameters
    ----------
    progress : ProgressProvider or callable, optional
        Receives ``finished_tiles / total_tiles`` after every tile; the last
        published value is exactly 1.0
    """
    assembler = FrameAssembler(
        configuration, width, height, HIGHRES_QUALITY,
        tile_width=HIGHRES_TILE_WIDTH, progress=progress
    )
    return assembler.run()


def save_image(
    buffer: PixelBuffer,
    path: Union[str, Path],
    pil_kwargs: Optional[Dict[str, Any]] = None
) -> Path:
    """Write a rendered buffer to an image file (format from extension)."""
    path = Path(path)
    fs.atomic_save_image(buffer.snapshot(), path, pil_kwargs)
    logger.info("Saved %dx%d render to %s", buffer.width, buffer.height, path)
    return path
