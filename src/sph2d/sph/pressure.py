from __future__ import annotations

from numba import njit

from sph2d.sph.kernels import spiky_grad


@njit(cache=True, error_model="numpy")
def pressure_state_equation_linear(rho, rho0: float, k: float):
    """
    Linear equation of state:
        p_i = k (rho_i - rho0)

    Works on scalars and arrays. Densities below rho0 yield negative
    pressure (tension); this is kept as is.
    """
    return k * (rho - rho0)


@njit(cache=True, error_model="numpy")
def pressure_force_pair(
    dx: float,
    dy: float,
    r: float,
    p_i: float,
    p_j: float,
    rho_j: float,
    mass: float,
    h: float,
    spiky_coeff: float,
) -> tuple[float, float]:
    """
    Pressure force contribution of neighbor j on particle i.

        f = -(x_j - x_i)/r * m (p_i + p_j) / (2 rho_j) * gradW_spiky(r)

    (dx, dy) = x_j - x_i and r = ||(dx, dy)||.

    Reference:
    - Müller et al. 2003, Eq. (10) (symmetrized pressure force).

    For r == 0 the direction is undefined and the contribution is zero;
    outside the support it is zero as well. rho_j == 0 is not guarded and
    produces a non-finite result.
    """
    if r <= 0.0 or r >= h:
        return 0.0, 0.0

    w = mass * (p_i + p_j) / (2.0 * rho_j) * spiky_grad(r, h, spiky_coeff)
    return -(dx / r) * w, -(dy / r) * w
