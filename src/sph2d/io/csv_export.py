from __future__ import annotations

"""
Observability export: CSV snapshots for particle data.

What this module does:
- Writes one CSV file containing per-particle attributes for offline analysis.

How it works:
- Reads arrays from `ParticleStore` and writes them in a stable column order.

Physics / solver constraints:
- This module is pure I/O: it must not modify simulation state.
"""

from pathlib import Path

import numpy as np

from sph2d.core.state import ParticleStore

CSV_HEADER = "id,x,y,vx,vy,fx,fy,rho,p"


def export_particles_csv(path: str | Path, store: ParticleStore) -> None:
    """
    Export a snapshot of all particles to CSV.

    Columns:
      id, x, y, vx, vy, fx, fy, rho, p
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    store.validate()

    n = store.n
    table = np.column_stack(
        [
            np.arange(n, dtype=np.int64),
            store.pos[:, 0],
            store.pos[:, 1],
            store.vel[:, 0],
            store.vel[:, 1],
            store.force[:, 0],
            store.force[:, 1],
            store.rho,
            store.p,
        ]
    )
    fmt = "%d,%.17g,%.17g,%.17g,%.17g,%.17g,%.17g,%.17g,%.17g"

    with path.open("w", encoding="utf-8", newline="\n") as f:
        f.write(CSV_HEADER + "\n")
        if n:
            np.savetxt(f, table, delimiter=",", fmt=fmt)
