from __future__ import annotations

"""
Observability: per-step diagnostics ("vital signs") for SPH runs.

What this module does:
- Defines a structured `StepDiagnostics` snapshot for one simulation step.
- Computes statistics for velocity, density, pressure and neighbor counts.
- Provides an explicit finiteness check for validation runs.

How it works:
- Statistics are taken over finite values only, so a single degenerate
  particle does not turn every reported number into NaN; `n_nonfinite`
  reports how many particles were left out.
- Neighbor counts use the same all-pairs, distance < h notion as the solver
  (no spatial index).

Physics / solver constraints:
- This module is strictly read-only: it must not modify the particle state.
"""

from dataclasses import dataclass

import numpy as np
from numba import njit, prange

from sph2d.core.errors import NumericDegeneracyError
from sph2d.core.state import ParticleStore


@dataclass(frozen=True)
class StepDiagnostics:
    """Structured diagnostics for one simulation step."""

    step: int
    n_particles: int
    n_nonfinite: int

    v_max: float

    rho_min: float
    rho_mean: float
    rho_max: float

    rho_rel_err_min: float
    rho_rel_err_mean: float
    rho_rel_err_max: float

    p_min: float
    p_mean: float
    p_max: float

    neigh_min: int
    neigh_mean: float
    neigh_max: int


@njit(parallel=True, cache=True)
def _neighbor_count_kernel(pos, h, out_counts):
    n = pos.shape[0]
    h2 = h * h
    for i in prange(n):
        c = 0
        for j in range(n):
            if j == i:
                continue
            dx = pos[j, 0] - pos[i, 0]
            dy = pos[j, 1] - pos[i, 1]
            if dx * dx + dy * dy < h2:
                c += 1
        out_counts[i] = c


def neighbor_counts(pos: np.ndarray, h: float) -> np.ndarray:
    """Number of other particles strictly closer than h, per particle."""
    counts = np.zeros((pos.shape[0],), dtype=np.int64)
    _neighbor_count_kernel(pos, float(h), counts)
    return counts


def _stats(values: np.ndarray) -> tuple[float, float, float]:
    if values.size == 0:
        return 0.0, 0.0, 0.0
    return float(np.min(values)), float(np.mean(values)), float(np.max(values))


def compute_step_diagnostics(
    step: int,
    store: ParticleStore,
    rho0: float,
    h: float,
) -> StepDiagnostics:
    """
    Compute diagnostics for a given step without mutating the store.

    Args:
        step: number of completed steps.
        store: particle store after the step.
        rho0: rest density.
        h: smoothing radius (neighbor cutoff).
    """
    rho0 = float(rho0)
    n = store.n

    bad = store.nonfinite_mask()
    ok = ~bad

    vnorm = np.linalg.norm(store.vel[ok], axis=1)
    v_max = float(np.max(vnorm)) if vnorm.size else 0.0

    rho = store.rho[ok]
    rho_min, rho_mean, rho_max = _stats(rho)
    err_min, err_mean, err_max = _stats((rho - rho0) / rho0)
    p_min, p_mean, p_max = _stats(store.p[ok])

    counts = neighbor_counts(store.pos[ok], h)
    if counts.size:
        neigh_min, neigh_mean, neigh_max = int(counts.min()), float(counts.mean()), int(counts.max())
    else:
        neigh_min, neigh_mean, neigh_max = 0, 0.0, 0

    return StepDiagnostics(
        step=int(step),
        n_particles=n,
        n_nonfinite=int(np.count_nonzero(bad)),
        v_max=v_max,
        rho_min=rho_min,
        rho_mean=rho_mean,
        rho_max=rho_max,
        rho_rel_err_min=err_min,
        rho_rel_err_mean=err_mean,
        rho_rel_err_max=err_max,
        p_min=p_min,
        p_mean=p_mean,
        p_max=p_max,
        neigh_min=neigh_min,
        neigh_mean=neigh_mean,
        neigh_max=neigh_max,
    )


def assert_finite(store: ParticleStore) -> None:
    """Raise NumericDegeneracyError if any particle field is NaN/Inf."""
    bad = store.nonfinite_mask()
    if bad.any():
        idx = np.flatnonzero(bad)
        raise NumericDegeneracyError(
            f"{idx.size} of {store.n} particles hold non-finite values (first index {int(idx[0])})"
        )
