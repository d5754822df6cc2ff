from __future__ import annotations

from dataclasses import dataclass

import numpy as np
from numba import njit

from sph2d.core.errors import InvalidConfigurationError


@dataclass(frozen=True)
class KernelCoefficients:
    """
    Normalization constants of the three smoothing kernels for one radius h.

    Reference:
    - Müller, Charypar, Gross: "Particle-Based Fluid Simulation for
      Interactive Applications" (SCA 2003), Section 3.5 (kernel design),
      with the 2D normalizations used by the interactive solver:
        poly6:          4 / (pi h^8)
        spiky gradient: -10 / (pi h^5)
        viscosity lap:  40 / (pi h^5)
    """

    h: float
    h2: float
    poly6: float
    spiky_grad: float
    visc_lap: float


def kernel_coefficients(h: float) -> KernelCoefficients:
    h = float(h)
    if not h > 0.0:
        raise InvalidConfigurationError("smoothing radius h must be > 0")

    return KernelCoefficients(
        h=h,
        h2=h * h,
        poly6=4.0 / (np.pi * h ** 8),
        spiky_grad=-10.0 / (np.pi * h ** 5),
        visc_lap=40.0 / (np.pi * h ** 5),
    )


@njit(cache=True)
def poly6(r2: float, h2: float, coeff: float) -> float:
    """
    Density kernel W_poly6 evaluated on the squared distance:

        W(r2) = coeff * (h^2 - r2)^3    for 0 <= r2 < h^2
              = 0                        otherwise

    Squared distance avoids a sqrt in the density pass.
    """
    if r2 < 0.0 or r2 >= h2:
        return 0.0
    d = h2 - r2
    return coeff * d * d * d


@njit(cache=True)
def spiky_grad(r: float, h: float, coeff: float) -> float:
    """
    Magnitude factor of the spiky kernel gradient:

        coeff * (h - r)^3    for 0 <= r < h

    The cubic exponent is used throughout; the direction (unit vector between
    the pair) is applied by the caller. coeff is negative.
    """
    if r < 0.0 or r >= h:
        return 0.0
    d = h - r
    return coeff * d * d * d


@njit(cache=True)
def visc_laplacian(r: float, h: float, coeff: float) -> float:
    """Laplacian of the viscosity kernel: coeff * (h - r) for 0 <= r < h."""
    if r < 0.0 or r >= h:
        return 0.0
    return coeff * (h - r)
