from __future__ import annotations

import numpy as np
from numba import njit, prange


@njit(parallel=True, cache=True, error_model="numpy")
def _integrate_kernel(pos, vel, force, rho, dt, eps, width, height, damping):
    n = pos.shape[0]
    for i in prange(n):
        # symplectic Euler: velocity first, then position with the new velocity
        vel[i, 0] += dt * force[i, 0] / rho[i]
        vel[i, 1] += dt * force[i, 1] / rho[i]
        pos[i, 0] += dt * vel[i, 0]
        pos[i, 1] += dt * vel[i, 1]

        if pos[i, 0] - eps < 0.0:
            vel[i, 0] *= damping
            pos[i, 0] = eps
        if pos[i, 0] + eps > width:
            vel[i, 0] *= damping
            pos[i, 0] = width - eps
        if pos[i, 1] - eps < 0.0:
            vel[i, 1] *= damping
            pos[i, 1] = eps
        if pos[i, 1] + eps > height:
            vel[i, 1] *= damping
            pos[i, 1] = height - eps


def integrate_and_enforce_boundaries(
    pos: np.ndarray,
    vel: np.ndarray,
    force: np.ndarray,
    rho: np.ndarray,
    dt: float,
    eps: float,
    width: float,
    height: float,
    damping: float,
) -> None:
    """
    Advance velocity and position in place, then clamp to the domain.

        v_i <- v_i + dt f_i / rho_i
        x_i <- x_i + dt v_i

    Each axis is checked independently against [eps, extent - eps]. A particle
    crossing the margin is put back on it and its velocity component along
    that axis is multiplied by `damping` (negative: reflection with loss).

    There are no cross-particle reads, so particle i only touches row i of
    pos/vel.
    """
    _integrate_kernel(
        pos,
        vel,
        force,
        rho,
        float(dt),
        float(eps),
        float(width),
        float(height),
        float(damping),
    )
