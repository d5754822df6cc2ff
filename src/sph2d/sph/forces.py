from __future__ import annotations

import numpy as np
from numba import njit, prange

from sph2d.sph.kernels import KernelCoefficients
from sph2d.sph.pressure import pressure_force_pair
from sph2d.sph.viscosity import viscous_force_pair


@njit(parallel=True, cache=True, error_model="numpy")
def _force_kernel(pos, vel, rho, p, mass, mu, gx, gy, h, spiky_coeff, visc_coeff, out_force):
    n = pos.shape[0]
    for i in prange(n):
        xi = pos[i, 0]
        yi = pos[i, 1]

        fpx = 0.0
        fpy = 0.0
        fvx = 0.0
        fvy = 0.0

        for j in range(n):
            if j == i:
                continue

            dx = pos[j, 0] - xi
            dy = pos[j, 1] - yi
            r = np.sqrt(dx * dx + dy * dy)
            if r >= h:
                continue

            ax, ay = pressure_force_pair(dx, dy, r, p[i], p[j], rho[j], mass, h, spiky_coeff)
            fpx += ax
            fpy += ay

            bx, by = viscous_force_pair(
                vel[j, 0] - vel[i, 0],
                vel[j, 1] - vel[i, 1],
                r,
                rho[j],
                mass,
                mu,
                h,
                visc_coeff,
            )
            fvx += bx
            fvy += by

        out_force[i, 0] = fpx + fvx + gx * mass / rho[i]
        out_force[i, 1] = fpy + fvy + gy * mass / rho[i]


def compute_forces(
    pos: np.ndarray,
    vel: np.ndarray,
    rho: np.ndarray,
    p: np.ndarray,
    mass: float,
    mu: float,
    gravity: np.ndarray,
    coeffs: KernelCoefficients,
    out_force: np.ndarray | None = None,
) -> np.ndarray:
    """
    Net force per particle: pressure + viscosity + gravity.

        f_i = sum_{j != i, r < h} f^p_ij + f^v_ij  +  g m / rho_i

    Reference:
    - Müller et al. 2003, Section 4 (pressure, viscosity, external forces).

    Notes:
    - rho and p must come from the density pass of the same step; all of them
      are complete before this runs.
    - Inputs are only read; each worker writes out_force[i] for its own i.
    - Zero density (rho_j == 0 or rho_i == 0) is not clamped: the resulting
      NaN/Inf propagate to the caller.
    """
    n = pos.shape[0]
    if out_force is None:
        out_force = np.empty((n, 2), dtype=np.float64)

    g = np.asarray(gravity, dtype=np.float64)

    _force_kernel(
        pos,
        vel,
        rho,
        p,
        float(mass),
        float(mu),
        float(g[0]),
        float(g[1]),
        float(coeffs.h),
        float(coeffs.spiky_grad),
        float(coeffs.visc_lap),
        out_force,
    )
    return out_force
