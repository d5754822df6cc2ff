from __future__ import annotations

import numpy as np
from numba import njit, prange

from sph2d.sph.kernels import KernelCoefficients, poly6
from sph2d.sph.pressure import pressure_state_equation_linear


@njit(parallel=True, cache=True, error_model="numpy")
def _density_pressure_kernel(pos, mass, h2, poly6_coeff, rho0, k, out_rho, out_p):
    n = pos.shape[0]
    for i in prange(n):
        xi = pos[i, 0]
        yi = pos[i, 1]
        rho_i = 0.0

        # all pairs, j == i included (self contribution at r = 0)
        for j in range(n):
            dx = pos[j, 0] - xi
            dy = pos[j, 1] - yi
            rho_i += mass * poly6(dx * dx + dy * dy, h2, poly6_coeff)

        out_rho[i] = rho_i
        out_p[i] = pressure_state_equation_linear(rho_i, rho0, k)


def compute_density_pressure(
    pos: np.ndarray,
    mass: float,
    coeffs: KernelCoefficients,
    rho0: float,
    k: float,
    out_rho: np.ndarray | None = None,
    out_p: np.ndarray | None = None,
) -> tuple[np.ndarray, np.ndarray]:
    """
    Density summation followed by the linear equation of state:

        rho_i = sum_j m W_poly6(||x_j - x_i||^2)
        p_i   = k (rho_i - rho0)

    Reference:
    - Müller et al. 2003, Eq. (3) (density) and Eq. (12) (ideal gas state equation).

    Notes:
    - Exhaustive all-pairs evaluation; W_poly6 is zero outside h, which is
      what defines the neighborhood.
    - `pos` is only read. Each worker writes its own slot of out_rho/out_p,
      so no particle observes another particle's partially computed density.
    - An isolated particle keeps its self term: rho = m W_poly6(0).
    """
    n = pos.shape[0]
    if out_rho is None:
        out_rho = np.empty((n,), dtype=np.float64)
    if out_p is None:
        out_p = np.empty((n,), dtype=np.float64)

    _density_pressure_kernel(
        pos,
        float(mass),
        float(coeffs.h2),
        float(coeffs.poly6),
        float(rho0),
        float(k),
        out_rho,
        out_p,
    )
    return out_rho, out_p
