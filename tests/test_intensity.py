"""Test the N-slit Fraunhofer intensity kernel.

Test suites:
1. Analytic values (on-axis peak, double-slit minima, principal maxima)
2. Bounds and symmetry over wide coordinate ranges
3. Limit substitution near α = 0 and β = kπ
4. Window averaging (quality) and its convergence

Run:
    pytest tests/test_intensity.py -v
"""

import math

import numpy as np
import pytest

from src.multislit_simulator.configuration import SlitGeometry
from src.multislit_simulator.intensity import calculate_intensity, fraunhofer_intensity

GREEN_M = 550e-9


@pytest.fixture
def double_slit():
    return SlitGeometry(slit_count=2, slit_width=2e-5, slit_spacing=1e-4, screen_distance=1.0)


def _analytic(x, wavelength_m, slits):
    """Direct evaluation of the far-field formula away from singular points."""
    s = math.sin(math.atan2(x, slits.screen_distance))
    alpha = math.pi * slits.slit_width * s / wavelength_m
    beta = math.pi * slits.slit_spacing * s / wavelength_m
    n = slits.slit_count
    single = (math.sin(alpha) / alpha) ** 2
    multi = (math.sin(n * beta) / math.sin(beta)) ** 2
    return single * multi / n ** 2


# ============================================================================
# TEST SUITE 1: Analytic values
# ============================================================================

@pytest.mark.physics
@pytest.mark.parametrize("n", [1, 2, 3, 7, 50])
def test_on_axis_intensity_is_one(n):
    slits = SlitGeometry(n, 2e-5, 1e-4, 1.0)
    assert float(fraunhofer_intensity(0.0, GREEN_M, slits)) == 1.0


@pytest.mark.physics
@pytest.mark.parametrize("x", [1e-4, 7.3e-4, 3.1e-3, 0.02, -0.013])
def test_matches_analytic_formula(double_slit, x):
    expected = _analytic(x, GREEN_M, double_slit)
    assert float(fraunhofer_intensity(x, GREEN_M, double_slit)) == pytest.approx(expected, rel=1e-9)


@pytest.mark.physics
def test_double_slit_is_sinc_squared_times_cos_squared(double_slit):
    x = np.linspace(-0.05, 0.05, 1001)
    s = np.sin(np.arctan2(x, 1.0))
    alpha = np.pi * 2e-5 * s / GREEN_M
    beta = np.pi * 1e-4 * s / GREEN_M
    expected = np.sinc(alpha / np.pi) ** 2 * np.cos(beta) ** 2

    assert np.allclose(fraunhofer_intensity(x, GREEN_M, double_slit), expected, atol=1e-12)


@pytest.mark.physics
def test_single_slit_has_no_grating_factor():
    slits = SlitGeometry(1, 2e-5, 1e-4, 1.0)
    x = 3e-3
    s = math.sin(math.atan2(x, 1.0))
    alpha = math.pi * 2e-5 * s / GREEN_M
    assert float(fraunhofer_intensity(x, GREEN_M, slits)) == pytest.approx(
        (math.sin(alpha) / alpha) ** 2, rel=1e-12
    )


@pytest.mark.physics
def test_double_slit_first_minimum(double_slit):
    # β = π/2  ⇔  sin θ = λ / (2d)
    theta = math.asin(GREEN_M / (2 * double_slit.slit_spacing))
    x = double_slit.screen_distance * math.tan(theta)
    assert float(fraunhofer_intensity(x, GREEN_M, double_slit)) < 1e-12


@pytest.mark.physics
@pytest.mark.parametrize("n", [2, 5])
def test_principal_maximum_equals_single_slit_envelope(n):
    # β = π  ⇔  sin θ = λ / d; the grating factor is 1 there
    slits = SlitGeometry(n, 2e-5, 1e-4, 1.0)
    theta = math.asin(GREEN_M / slits.slit_spacing)
    x = slits.screen_distance * math.tan(theta)

    alpha = math.pi * slits.slit_width * math.sin(theta) / GREEN_M
    envelope = (math.sin(alpha) / alpha) ** 2
    assert float(fraunhofer_intensity(x, GREEN_M, slits)) == pytest.approx(envelope, rel=1e-6)


# ============================================================================
# TEST SUITE 2: Bounds & symmetry
# ============================================================================

@pytest.mark.parametrize("n, a, d", [(1, 1e-5, 1e-5), (2, 2e-5, 1e-4), (5, 1e-6, 3e-6), (40, 5e-7, 1e-6)])
def test_intensity_bounds(n, a, d):
    slits = SlitGeometry(n, a, d, 1.0)
    x = np.linspace(-50.0, 50.0, 20001)
    for wavelength in (380e-9, 550e-9, 780e-9):
        intensity = fraunhofer_intensity(x, wavelength, slits)
        assert np.all(np.isfinite(intensity))
        assert intensity.min() >= 0.0
        assert intensity.max() <= 1.0


def test_intensity_is_even_in_x(double_slit):
    x = np.linspace(0.0, 0.1, 501)
    assert np.allclose(
        fraunhofer_intensity(x, GREEN_M, double_slit),
        fraunhofer_intensity(-x, GREEN_M, double_slit),
        atol=0.0,
    )


def test_huge_offsets_stay_finite(double_slit):
    # Equivalent to scale → 0: θ → ±π/2
    x = np.array([-1e15, -1e9, 1e9, 1e15])
    intensity = fraunhofer_intensity(x, GREEN_M, double_slit)
    assert np.all(np.isfinite(intensity))
    assert np.all((intensity >= 0.0) & (intensity <= 1.0))


def test_preserves_input_shape(double_slit):
    x = np.zeros((4, 3))
    assert fraunhofer_intensity(x, GREEN_M, double_slit).shape == (4, 3)
    assert fraunhofer_intensity(0.0, GREEN_M, double_slit).shape == ()


# ============================================================================
# TEST SUITE 3: Limits
# ============================================================================

def test_tiny_offsets_approach_peak(double_slit):
    x = np.array([1e-300, 1e-200, 1e-30, -1e-30])
    assert np.allclose(fraunhofer_intensity(x, GREEN_M, double_slit), 1.0)


def test_near_principal_maximum_is_continuous():
    slits = SlitGeometry(3, 2e-5, 1e-4, 1.0)
    theta = math.asin(GREEN_M / slits.slit_spacing)
    x0 = math.tan(theta)
    x = x0 + np.array([-1e-12, 0.0, 1e-12])
    values = fraunhofer_intensity(x, GREEN_M, slits)
    assert np.all(np.isfinite(values))
    assert np.ptp(values) < 1e-4


# ============================================================================
# TEST SUITE 4: Window averaging
# ============================================================================

def test_quality_one_samples_centre(double_slit):
    x = np.array([-2e-3, 0.0, 4e-4])
    averaged = calculate_intensity(550.0, double_slit, x, radius=1.0, quality=1)
    assert np.array_equal(averaged, fraunhofer_intensity(x, GREEN_M, double_slit))


def test_quality_three_is_mean_of_centre_and_endpoints(double_slit):
    x, r = 1e-3, 5e-4
    samples = fraunhofer_intensity(np.array([x - r, x, x + r]), GREEN_M, double_slit)
    averaged = calculate_intensity(550.0, double_slit, x, radius=r, quality=3)
    assert float(averaged) == pytest.approx(samples.mean(), rel=1e-12)


def test_zero_radius_equals_point_sample(double_slit):
    averaged = calculate_intensity(550.0, double_slit, 1.7e-3, radius=0.0, quality=9)
    point = fraunhofer_intensity(1.7e-3, GREEN_M, double_slit)
    assert float(averaged) == pytest.approx(float(point), rel=1e-12)


def test_averaged_intensity_bounds(double_slit):
    x = np.linspace(-0.05, 0.05, 201)
    for quality in (1, 2, 10, 250):
        averaged = calculate_intensity(550.0, double_slit, x, radius=1.0, quality=quality)
        assert averaged.shape == x.shape
        assert averaged.min() >= 0.0
        assert averaged.max() <= 1.0


def test_invalid_window_arguments(double_slit):
    with pytest.raises(ValueError, match="radius"):
        calculate_intensity(550.0, double_slit, 0.0, radius=-1.0, quality=3)
    with pytest.raises(ValueError, match="quality"):
        calculate_intensity(550.0, double_slit, 0.0, radius=1.0, quality=0)


@pytest.mark.physics
def test_per_pixel_window_converges(double_slit):
    """Averaging over one pixel converges quickly as quality grows."""
    scale = 20000.0
    x = (np.arange(400) - 200) / scale
    radius = 1.0 / scale

    reference = calculate_intensity(550.0, double_slit, x, radius, quality=1000)
    err_10 = np.abs(calculate_intensity(550.0, double_slit, x, radius, 10) - reference).max()
    err_100 = np.abs(calculate_intensity(550.0, double_slit, x, radius, 100) - reference).max()

    assert err_100 <= err_10
    assert err_100 * 255.0 < 1.0
