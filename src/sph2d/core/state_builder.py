from __future__ import annotations

import logging

import numpy as np

from sph2d.core.state import ParticleStore

logger = logging.getLogger(__name__)

# Upper bound of the horizontal dam-break jitter, uniform in [0, JITTER_MAX).
JITTER_MAX = 1.0


def _grid_points_2d(xs: np.ndarray, ys: np.ndarray) -> np.ndarray:
    # rows bottom-up, left to right within a row
    X, Y = np.meshgrid(xs, ys, indexing="xy")
    return np.stack([X.ravel(), Y.ravel()], axis=1)


def dam_break_positions(width: float, height: float, h: float, eps: float) -> np.ndarray:
    """
    Candidate lattice of the dam-break column (before jitter).

    Layout of the classic interactive dam break:
    - rows start one spacing above the bottom margin and are spaced by h,
      up to (exclusive) the top margin,
    - columns start at width/10 + h and are spaced by h, the last one being
      the first to pass width/2.5,
    - points whose jittered x could leave [eps, width - eps] are dropped.
    """
    width = float(width)
    height = float(height)
    h = float(h)
    eps = float(eps)

    ys = np.arange(eps + h, height - eps, h, dtype=np.float64)
    xs = np.arange(width / 10.0 + h, width / 2.5 + h + 1e-9, h, dtype=np.float64)
    xs = xs[(xs >= eps) & (xs + JITTER_MAX <= width - eps)]

    if xs.size == 0 or ys.size == 0:
        return np.zeros((0, 2), dtype=np.float64)
    return _grid_points_2d(xs, ys)


def block_positions(width: float, height: float, h: float, eps: float) -> np.ndarray:
    """
    Candidate lattice of a square block dropped into a running simulation.

    The block is centered at (width/2, height/1.5) with half extent height/10
    on both axes and spacing 0.95 h. The first row and column sit one spacing
    in from the lower-left corner. Points outside the margin are dropped.
    """
    width = float(width)
    height = float(height)
    spacing = 0.95 * float(h)
    eps = float(eps)

    half = height / 10.0
    cx = width / 2.0
    cy = height / 1.5

    xs = np.arange(cx - half + spacing, cx + half + spacing, spacing, dtype=np.float64)
    ys = np.arange(cy - half + spacing, cy + half + spacing, spacing, dtype=np.float64)
    xs = xs[(xs >= eps) & (xs <= width - eps)]
    ys = ys[(ys >= eps) & (ys <= height - eps)]

    if xs.size == 0 or ys.size == 0:
        return np.zeros((0, 2), dtype=np.float64)
    return _grid_points_2d(xs, ys)


def seed_dam_break_store(
    store: ParticleStore,
    requested: int,
    width: float,
    height: float,
    h: float,
    eps: float,
    rng: np.random.Generator | None = None,
) -> int:
    """
    Fill the dam-break column into `store`.

    At most min(requested, store.remaining) particles are placed. If `rng`
    is given, each placed particle gets a horizontal jitter in [0, 1) to
    break the lattice symmetry; with rng=None the lattice is exact.

    Returns the number of particles placed.
    """
    requested = max(0, int(requested))
    pts = dam_break_positions(width, height, h, eps)
    pts = pts[: min(requested, store.remaining)].copy()

    if rng is not None and pts.shape[0] > 0:
        pts[:, 0] += JITTER_MAX * rng.random(pts.shape[0])

    placed = store.push(pts)
    logger.info("Initialized dam break with %d particles, new total %d", placed, store.n)
    return placed


def seed_block_store(
    store: ParticleStore,
    requested: int,
    width: float,
    height: float,
    h: float,
    eps: float,
) -> int:
    """Fill the block lattice into `store`; returns the number placed."""
    requested = max(0, int(requested))
    pts = block_positions(width, height, h, eps)
    placed = store.push(pts[:requested])
    logger.info("Initialized block of %d particles, new total %d", placed, store.n)
    return placed
