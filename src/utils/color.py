"""Linear RGB color model and visible-spectrum color map.

Provides:
    - RgbColor: additive, unbounded linear RGB triple (0..255 scale)
    - wavelength_to_rgb(): visible wavelength (nm) → linear RgbColor
    - wavelength_to_rgb_array(): vectorized spectrum map on numpy arrays
    - visible_spectrum(): evenly spaced (wavelength, color) samples for
      white-light illumination

Used by:
    - Configuration: WavelengthColorPair colors
    - Renderer: per-column color accumulation across light sources
    - config_loader: default colors for light sources given only a wavelength

Invariants:
    - Colors are linear and unclamped; clamping happens at the pixel buffer
    - Channel scale is 0..255 (a fully saturated channel is 255.0)
    - Wavelengths outside [380, 780] nm map to black
    - Adjacent nanometres never differ by more than 0.05 (normalized) in any
      channel, band edges included
"""

from dataclasses import dataclass
from typing import List, Tuple, Union

import numpy as np

VISIBLE_MIN_NM = 380.0
VISIBLE_MAX_NM = 780.0

# Piecewise-linear anchors (nm, r, g, b), channels normalized to [0, 1]
_SPECTRUM_ANCHORS = np.array([
    [380.0, 0.5, 0.0, 1.0],   # violet
    [450.0, 0.0, 0.0, 1.0],   # blue
    [490.0, 0.0, 1.0, 1.0],   # cyan
    [550.0, 0.0, 1.0, 0.0],   # green
    [600.0, 1.0, 1.0, 0.0],   # yellow
    [650.0, 1.0, 0.0, 0.0],   # red
    [780.0, 1.0, 0.0, 0.0],
], dtype=np.float64)

# Attenuation ramps toward the band edges (eye sensitivity falls off)
_FADE_IN_END_NM = 420.0
_FADE_OUT_START_NM = 700.0


@dataclass(frozen=True)
class RgbColor:
    """Linear, unbounded, non-premultiplied RGB triple.

    Forms an additive monoid with identity ``RgbColor(0, 0, 0)``; scalar
    multiplication distributes over addition. Values are not clamped.
    """

    r: float = 0.0
    g: float = 0.0
    b: float = 0.0

    def __add__(self, other: "RgbColor") -> "RgbColor":
        if not isinstance(other, RgbColor):
            return NotImplemented
        return RgbColor(self.r + other.r, self.g + other.g, self.b + other.b)

    def __mul__(self, factor: float) -> "RgbColor":
        if isinstance(factor, RgbColor):
            return NotImplemented
        factor = float(factor)
        return RgbColor(self.r * factor, self.g * factor, self.b * factor)

    __rmul__ = __mul__

    def to_array(self) -> np.ndarray:
        """Return channels as a float64 array of shape (3,)."""
        return np.array([self.r, self.g, self.b], dtype=np.float64)

    def to_tuple(self) -> Tuple[float, float, float]:
        return (self.r, self.g, self.b)

    @classmethod
    def from_array(cls, values) -> "RgbColor":
        """Build a color from any 3-element sequence."""
        values = np.asarray(values, dtype=np.float64).reshape(-1)
        if values.shape != (3,):
            raise ValueError(f"Expected 3 color channels, got shape {values.shape}")
        return cls(float(values[0]), float(values[1]), float(values[2]))


BLACK = RgbColor(0.0, 0.0, 0.0)


def _edge_attenuation(wavelength_nm: np.ndarray) -> np.ndarray:
    """Linear fade to zero at both ends of the visible band."""
    fade_in = (wavelength_nm - VISIBLE_MIN_NM) / (_FADE_IN_END_NM - VISIBLE_MIN_NM)
    fade_out = (VISIBLE_MAX_NM - wavelength_nm) / (VISIBLE_MAX_NM - _FADE_OUT_START_NM)
    return np.clip(np.minimum(fade_in, fade_out), 0.0, 1.0)


def wavelength_to_rgb_array(wavelength_nm: Union[float, np.ndarray]) -> np.ndarray:
    """Map wavelengths to linear RGB on the 0..255 scale.

    Parameters
    ----------
    wavelength_nm : float or np.ndarray
        Wavelength(s) in nanometres, any shape

    Returns
    -------
    np.ndarray
        Colors, shape ``wavelength_nm.shape + (3,)``, float64, range [0, 255]

    Notes
    -----
    Piecewise-linear approximation of the visible spectrum with saturated
    blue at 450 nm, green at 550 nm and red at 650 nm. Outside [380, 780] nm
    the result is black.
    """
    wl = np.asarray(wavelength_nm, dtype=np.float64)
    nm = _SPECTRUM_ANCHORS[:, 0]
    channels = [
        np.interp(wl, nm, _SPECTRUM_ANCHORS[:, c], left=0.0, right=0.0)
        for c in (1, 2, 3)
    ]
    rgb = np.stack(channels, axis=-1) * _edge_attenuation(wl)[..., None]

    visible = (wl >= VISIBLE_MIN_NM) & (wl <= VISIBLE_MAX_NM)
    rgb = np.where(visible[..., None], rgb, 0.0)
    return rgb * 255.0


def wavelength_to_rgb(wavelength_nm: float) -> RgbColor:
    """Map a single visible wavelength (nm) to a linear RgbColor.

    Examples
    --------
    >>> wavelength_to_rgb(550.0)
    RgbColor(r=0.0, g=255.0, b=0.0)
    """
    return RgbColor.from_array(wavelength_to_rgb_array(float(wavelength_nm)))


def visible_spectrum(step_nm: float = 10.0) -> List[Tuple[float, RgbColor]]:
    """Sample the visible band at a fixed step.

    Parameters
    ----------
    step_nm : float
        Spacing between samples in nm, default 10.0

    Returns
    -------
    list[tuple[float, RgbColor]]
        (wavelength_nm, color) pairs from 380 nm up to 780 nm inclusive

    Notes
    -----
    Used to approximate white-light illumination with many monochromatic
    sources. Samples with a black color (the band edges) are dropped.
    """
    if step_nm <= 0:
        raise ValueError(f"step_nm must be > 0, got {step_nm}")

    wavelengths = np.arange(VISIBLE_MIN_NM, VISIBLE_MAX_NM + 0.5 * step_nm, step_nm)
    wavelengths = wavelengths[wavelengths <= VISIBLE_MAX_NM]
    colors = wavelength_to_rgb_array(wavelengths)

    samples = []
    for wl, rgb in zip(wavelengths, colors):
        if np.any(rgb > 0.0):
            samples.append((float(wl), RgbColor.from_array(rgb)))
    return samples
