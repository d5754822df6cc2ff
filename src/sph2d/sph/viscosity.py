from __future__ import annotations

from numba import njit

from sph2d.sph.kernels import visc_laplacian


@njit(cache=True, error_model="numpy")
def viscous_force_pair(
    dvx: float,
    dvy: float,
    r: float,
    rho_j: float,
    mass: float,
    mu: float,
    h: float,
    visc_coeff: float,
) -> tuple[float, float]:
    """
    Viscous force contribution of neighbor j on particle i:

        f = mu * m (v_j - v_i) / rho_j * lapW_visc(r)

    with (dvx, dvy) = v_j - v_i.

    Reference:
    - Müller et al. 2003, Eq. (14) (symmetrized viscosity force).
    """
    if r < 0.0 or r >= h:
        return 0.0, 0.0

    w = mu * mass / rho_j * visc_laplacian(r, h, visc_coeff)
    return dvx * w, dvy * w
