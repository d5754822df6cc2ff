import numpy as np
import pytest

from sph2d.core.errors import InvalidConfigurationError
from sph2d.sph.kernels import kernel_coefficients, poly6, spiky_grad, visc_laplacian


def test_coefficients_match_2d_normalizations():
    h = 16.0
    c = kernel_coefficients(h)

    assert c.h2 == 256.0
    assert np.isclose(c.poly6, 4.0 / (np.pi * h ** 8))
    assert np.isclose(c.spiky_grad, -10.0 / (np.pi * h ** 5))
    assert np.isclose(c.visc_lap, 40.0 / (np.pi * h ** 5))


def test_coefficients_reject_non_positive_radius():
    with pytest.raises(InvalidConfigurationError):
        kernel_coefficients(0.0)
    with pytest.raises(InvalidConfigurationError):
        kernel_coefficients(-1.0)


def test_poly6_value_and_compact_support():
    """
    W_poly6 depends on the squared distance and vanishes at and beyond h.
    """
    c = kernel_coefficients(16.0)

    assert np.isclose(poly6(0.0, c.h2, c.poly6), c.poly6 * c.h2 ** 3)
    assert np.isclose(poly6(64.0, c.h2, c.poly6), c.poly6 * (256.0 - 64.0) ** 3)
    assert poly6(c.h2, c.h2, c.poly6) == 0.0
    assert poly6(1.01 * c.h2, c.h2, c.poly6) == 0.0


def test_poly6_non_negative_and_decreasing():
    c = kernel_coefficients(16.0)
    r2 = np.linspace(0.0, 255.0, 50)
    w = np.array([poly6(v, c.h2, c.poly6) for v in r2])

    assert (w >= 0.0).all()
    assert (np.diff(w) < 0.0).all()


def test_spiky_grad_is_cubic_and_negative_inside_support():
    c = kernel_coefficients(16.0)

    assert np.isclose(spiky_grad(4.0, c.h, c.spiky_grad), c.spiky_grad * 12.0 ** 3)
    assert spiky_grad(8.0, c.h, c.spiky_grad) < 0.0
    assert spiky_grad(16.0, c.h, c.spiky_grad) == 0.0
    assert spiky_grad(20.0, c.h, c.spiky_grad) == 0.0


def test_visc_laplacian_linear_inside_support():
    c = kernel_coefficients(16.0)

    assert np.isclose(visc_laplacian(0.0, c.h, c.visc_lap), c.visc_lap * 16.0)
    assert np.isclose(visc_laplacian(6.0, c.h, c.visc_lap), c.visc_lap * 10.0)
    assert visc_laplacian(16.0, c.h, c.visc_lap) == 0.0
