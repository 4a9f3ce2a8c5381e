"""Immutable render configuration.

A ``Configuration`` is a frozen snapshot describing the slit barrier, the
monochromatic light sources, and how the screen plane maps to pixels. The
renderer only reads it; hosts build a new one for every change.

Units:
    - Slit width, slit spacing, screen distance: metres
    - Wavelengths: nanometres (converted to metres inside the kernel)
    - Scale: pixels per metre of screen-plane coordinate

Usage::

    from src.multislit_simulator.configuration import (
        Configuration, SlitGeometry, WavelengthColorPair,
    )
    cfg = Configuration(
        slits=SlitGeometry(slit_count=2, slit_width=2e-5,
                           slit_spacing=1e-4, screen_distance=1.0),
        light_sources=(WavelengthColorPair.from_wavelength(550.0),),
        scale=20000.0,
    )
"""

from __future__ import annotations

import logging
import math
import numbers
from dataclasses import dataclass
from typing import Iterable

from src.multislit_simulator.errors import InvalidGeometry
from src.utils.color import VISIBLE_MAX_NM, VISIBLE_MIN_NM, RgbColor, wavelength_to_rgb

logger = logging.getLogger(__name__)

DEFAULT_SAMPLING_RADIUS = 1.0


# ---------------------------------------------------------------------------
# Dataclasses
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SlitGeometry:
    """Slit barrier geometry in metres."""

    slit_count: int
    slit_width: float
    slit_spacing: float
    screen_distance: float


@dataclass(frozen=True)
class WavelengthColorPair:
    """A monochromatic light source and its display color.

    ``from_wavelength`` takes the color from the spectrum map. Constructing
    the pair directly keeps an explicit display color (YAML ``color:``
    overrides); it must still be finite and non-negative.
    """

    wavelength_nm: float
    color: RgbColor

    @classmethod
    def from_wavelength(cls, wavelength_nm: float) -> WavelengthColorPair:
        """Pair a wavelength with its spectrum-map color."""
        return cls(float(wavelength_nm), wavelength_to_rgb(wavelength_nm))


@dataclass(frozen=True)
class Configuration:
    """Everything a render reads.

    ``display_distribution`` renders the horizontal interference only;
    otherwise each row is multiplied by the vertical brightness envelope.
    ``brightness`` is a linear gain applied to every column color before
    the envelope. ``sampling_radius`` is the half-width (screen-plane
    metres) of the kernel's averaging window.
    """

    slits: SlitGeometry
    light_sources: tuple[WavelengthColorPair, ...] = ()
    scale: float = 20000.0
    brightness: float = 1.0
    display_distribution: bool = False
    sampling_radius: float = DEFAULT_SAMPLING_RADIUS

    def __post_init__(self) -> None:
        # Accept any iterable of sources but store an immutable tuple
        object.__setattr__(self, "light_sources", tuple(self.light_sources))

    def with_light_sources(
        self, light_sources: Iterable[WavelengthColorPair]
    ) -> Configuration:
        """Return a copy with a different set of light sources."""
        return Configuration(
            slits=self.slits,
            light_sources=tuple(light_sources),
            scale=self.scale,
            brightness=self.brightness,
            display_distribution=self.display_distribution,
            sampling_radius=self.sampling_radius,
        )

    def with_brightness(self, brightness: float) -> Configuration:
        """Return a copy with a different global brightness."""
        return Configuration(
            slits=self.slits,
            light_sources=self.light_sources,
            scale=self.scale,
            brightness=brightness,
            display_distribution=self.display_distribution,
            sampling_radius=self.sampling_radius,
        )


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


def _positive_finite(name: str, value: float) -> None:
    if not isinstance(value, numbers.Real) or isinstance(value, bool):
        raise InvalidGeometry(f"{name} must be a real number, got {value!r}")
    if not math.isfinite(value) or value <= 0:
        raise InvalidGeometry(f"{name} must be finite and > 0, got {value}")


def validate_configuration(cfg: Configuration) -> None:
    """Check a configuration before rendering.

    Raises
    ------
    InvalidGeometry
        On ``slit_count < 1``, a non-positive or non-finite length, scale
        or sampling radius, or a negative brightness. Light sources must lie
        in the visible band (380-780 nm) with a non-negative color.
    """
    slits = cfg.slits
    if isinstance(slits.slit_count, bool) or not isinstance(slits.slit_count, numbers.Integral):
        raise InvalidGeometry(
            f"slit_count must be an integer, got {slits.slit_count!r}"
        )
    if slits.slit_count < 1:
        raise InvalidGeometry(f"slit_count must be >= 1, got {slits.slit_count}")

    _positive_finite("slit_width", slits.slit_width)
    _positive_finite("slit_spacing", slits.slit_spacing)
    _positive_finite("screen_distance", slits.screen_distance)
    _positive_finite("scale", cfg.scale)
    _positive_finite("sampling_radius", cfg.sampling_radius)

    if not math.isfinite(cfg.brightness) or cfg.brightness < 0:
        raise InvalidGeometry(f"brightness must be finite and >= 0, got {cfg.brightness}")

    for source in cfg.light_sources:
        wl = source.wavelength_nm
        if not math.isfinite(wl) or not VISIBLE_MIN_NM <= wl <= VISIBLE_MAX_NM:
            raise InvalidGeometry(
                f"Light source wavelength must be in [{VISIBLE_MIN_NM:g}, "
                f"{VISIBLE_MAX_NM:g}] nm, got {wl}"
            )
        channels = source.color.to_tuple()
        if not all(math.isfinite(c) and c >= 0 for c in channels):
            raise InvalidGeometry(
                f"Light source color at {wl} nm must be finite and >= 0, got {channels}"
            )
