"""Test the linear color model and spectrum map.

Tests for src.utils.color:
    - RgbColor is an additive monoid with distributive scalar multiplication
    - Spectrum anchors: blue 450 nm, green 550 nm, red 650 nm
    - Outside the visible band → black
    - No jump larger than 0.05 (normalized) between adjacent nanometres
    - visible_spectrum() sampling

Run:
    pytest tests/test_color.py -v
"""

import numpy as np
import pytest

from src.utils.color import (
    BLACK,
    RgbColor,
    visible_spectrum,
    wavelength_to_rgb,
    wavelength_to_rgb_array,
)


# ============================================================================
# RgbColor arithmetic
# ============================================================================

def test_addition_identity():
    c = RgbColor(1.5, 20.0, 300.0)
    assert c + BLACK == c
    assert BLACK + c == c


def test_addition_componentwise():
    assert RgbColor(1.0, 2.0, 3.0) + RgbColor(10.0, 20.0, 30.0) == RgbColor(11.0, 22.0, 33.0)


def test_scalar_multiplication_both_sides():
    c = RgbColor(1.0, 2.0, 4.0)
    assert c * 2.0 == RgbColor(2.0, 4.0, 8.0)
    assert 2.0 * c == RgbColor(2.0, 4.0, 8.0)
    assert 0 * c == BLACK


def test_scalar_multiplication_distributes():
    a = RgbColor(1.0, 2.0, 3.0)
    b = RgbColor(0.5, 0.25, 8.0)
    lhs = 3.0 * (a + b)
    rhs = 3.0 * a + 3.0 * b
    assert np.allclose(lhs.to_array(), rhs.to_array())


def test_no_clamping():
    c = RgbColor(200.0, 0.0, 0.0) * 10.0
    assert c.r == 2000.0


def test_from_array_roundtrip_and_shape_check():
    c = RgbColor.from_array([1, 2, 3])
    assert c == RgbColor(1.0, 2.0, 3.0)
    assert c.to_tuple() == (1.0, 2.0, 3.0)
    with pytest.raises(ValueError, match="3 color channels"):
        RgbColor.from_array([1, 2])


def test_colors_are_immutable():
    c = RgbColor(1.0, 2.0, 3.0)
    with pytest.raises(Exception):
        c.r = 5.0


# ============================================================================
# Spectrum map
# ============================================================================

@pytest.mark.parametrize("wavelength, expected", [
    (450.0, (0.0, 0.0, 255.0)),
    (550.0, (0.0, 255.0, 0.0)),
    (650.0, (255.0, 0.0, 0.0)),
])
def test_saturated_anchors(wavelength, expected):
    assert wavelength_to_rgb(wavelength).to_tuple() == pytest.approx(expected)


@pytest.mark.parametrize("wavelength", [0.0, 200.0, 379.9, 780.1, 1064.0])
def test_outside_visible_band_is_black(wavelength):
    assert wavelength_to_rgb(wavelength) == BLACK


def test_edges_are_attenuated():
    """Colors fade toward both ends of the band."""
    violet_near_edge = wavelength_to_rgb(390.0).to_array().max()
    violet_inner = wavelength_to_rgb(420.0).to_array().max()
    red_inner = wavelength_to_rgb(700.0).to_array().max()
    red_near_edge = wavelength_to_rgb(770.0).to_array().max()

    assert violet_near_edge < violet_inner
    assert red_near_edge < red_inner


def test_adjacent_nanometres_are_smooth():
    wavelengths = np.arange(360.0, 801.0, 1.0)
    rgb = wavelength_to_rgb_array(wavelengths) / 255.0
    steps = np.abs(np.diff(rgb, axis=0))
    assert steps.max() <= 0.05 + 1e-12


def test_array_map_matches_scalar_map():
    wavelengths = np.array([[400.0, 500.0], [600.0, 700.0]])
    rgb = wavelength_to_rgb_array(wavelengths)
    assert rgb.shape == (2, 2, 3)
    assert np.allclose(rgb[1, 0], wavelength_to_rgb(600.0).to_array())


def test_spectrum_values_non_negative_and_bounded():
    rgb = wavelength_to_rgb_array(np.linspace(300.0, 900.0, 601))
    assert rgb.min() >= 0.0
    assert rgb.max() <= 255.0


# ============================================================================
# visible_spectrum
# ============================================================================

def test_visible_spectrum_drops_black_edges():
    samples = visible_spectrum(10.0)
    wavelengths = [wl for wl, _ in samples]

    # 380 and 780 nm are fully attenuated
    assert wavelengths[0] == pytest.approx(390.0)
    assert wavelengths[-1] == pytest.approx(770.0)
    assert len(samples) == 39
    assert all(color != BLACK for _, color in samples)


def test_visible_spectrum_rejects_bad_step():
    with pytest.raises(ValueError, match="step_nm"):
        visible_spectrum(0.0)
