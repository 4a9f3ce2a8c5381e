"""N-slit Fraunhofer intensity kernel.

For ``n`` slits of width ``a`` spaced ``d`` apart, lit at wavelength ``λ``
and observed on a screen at distance ``L``, the relative far-field
intensity at screen offset ``x`` is::

    θ = atan2(x, L)
    α = π a sin θ / λ
    β = π d sin θ / λ
    I = (sin α / α)² · (sin nβ / sin β)² / n²

``I`` is 1 on the optical axis and never exceeds 1. The renderer averages
``I`` over a small window around each column (the quality knob) to
anti-alias the fringes.

Numerical policy:
    - float64 throughout
    - α within 1e-12 of 0 uses sin α / α → 1
    - β within 1e-12 of a multiple of π uses (sin nβ / sin β)² → n²
    - no division by near-zero values; the result is clipped to [0, 1]

All functions are pure and vectorized over ``x``.
"""

from typing import Union

import numpy as np

from src.multislit_simulator.configuration import SlitGeometry
from src.utils import compute

LIMIT_EPS = 1e-12

ArrayLike = Union[float, np.ndarray]


def _sinc_squared(alpha: np.ndarray) -> np.ndarray:
    """(sin α / α)² with the α → 0 limit substituted."""
    near_zero = np.abs(alpha) < LIMIT_EPS
    safe_alpha = np.where(near_zero, 1.0, alpha)
    ratio = np.where(near_zero, 1.0, np.sin(safe_alpha) / safe_alpha)
    return ratio * ratio


def _grating_factor(beta: np.ndarray, slit_count: int) -> np.ndarray:
    """(sin nβ / sin β)² / n² with principal maxima substituted."""
    if slit_count == 1:
        return np.ones_like(beta)

    order = np.round(beta / np.pi)
    at_maximum = np.abs(beta - order * np.pi) < LIMIT_EPS
    sin_beta = np.where(at_maximum, 1.0, np.sin(beta))
    ratio = np.where(at_maximum, float(slit_count), np.sin(slit_count * beta) / sin_beta)
    return (ratio * ratio) / float(slit_count * slit_count)


def fraunhofer_intensity(
    x: ArrayLike,
    wavelength_m: float,
    slits: SlitGeometry
) -> np.ndarray:
    """Relative far-field intensity at screen offsets ``x``.

    Parameters
    ----------
    x : float or np.ndarray
        Screen-plane offset(s) from the optical axis in metres
    wavelength_m : float
        Wavelength in metres
    slits : SlitGeometry
        Slit count, width, spacing and screen distance

    Returns
    -------
    np.ndarray
        Intensity in [0, 1], same shape as ``x`` (0-d for scalar input)
    """
    x = np.asarray(x, dtype=np.float64)
    sin_theta = np.sin(np.arctan2(x, float(slits.screen_distance)))

    alpha = np.pi * slits.slit_width * sin_theta / wavelength_m
    beta = np.pi * slits.slit_spacing * sin_theta / wavelength_m

    intensity = _sinc_squared(alpha) * _grating_factor(beta, int(slits.slit_count))
    return np.clip(intensity, 0.0, 1.0)


def calculate_intensity(
    wavelength_nm: float,
    slits: SlitGeometry,
    x: ArrayLike,
    radius: float,
    quality: int
) -> np.ndarray:
    """Window-averaged intensity around screen offset(s) ``x``.

    Parameters
    ----------
    wavelength_nm : float
        Wavelength in nanometres
    slits : SlitGeometry
        Slit barrier geometry
    x : float or np.ndarray
        Window centre(s) in screen-plane metres
    radius : float
        Half-width of the averaging window in metres (>= 0)
    quality : int
        Number of samples across ``[x - radius, x + radius]`` (>= 1); a
        single centre sample when 1, endpoints included otherwise

    Returns
    -------
    np.ndarray
        Mean intensity per window centre, same shape as ``x``, in [0, 1]
    """
    if radius < 0:
        raise ValueError(f"radius must be >= 0, got {radius}")

    centres = np.asarray(x, dtype=np.float64)
    offsets = compute.sample_offsets(radius, int(quality))
    samples = centres[..., None] + offsets

    intensity = fraunhofer_intensity(samples, compute.nm_to_m(wavelength_nm), slits)
    return intensity.mean(axis=-1)
