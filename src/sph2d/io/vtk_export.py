from __future__ import annotations

"""
Observability export: VTK legacy ASCII PolyData for particle visualization.

What this module does:
- Writes a VTK legacy (ASCII) PolyData file containing:
  - POINTS (particle positions, z = 0)
  - VERTICES (one vertex per particle)
  - POINT_DATA scalars/vectors for analysis in ParaView

Physics / solver constraints:
- This module is pure I/O: it must not modify simulation state.
"""

from pathlib import Path

import numpy as np

from sph2d.core.state import ParticleStore


def _pad3(a: np.ndarray) -> np.ndarray:
    out = np.zeros((a.shape[0], 3), dtype=np.float64)
    out[:, 0:2] = a
    return out


def export_particles_vtk_legacy(path: str | Path, store: ParticleStore) -> None:
    """
    Export particles as VTK legacy ASCII PolyData.

    Fields:
    - POINTS and VERTICES
    - POINT_DATA:
        - rho (float)
        - p (float)
        - v (VECTORS, float, z = 0)
        - f (VECTORS, float, z = 0)
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    store.validate()

    n = store.n
    pos3 = _pad3(store.pos)
    vel3 = _pad3(store.vel)
    force3 = _pad3(store.force)

    with path.open("w", encoding="utf-8", newline="\n") as f:
        f.write("# vtk DataFile Version 3.0\n")
        f.write("SPH particles (2D) - legacy PolyData\n")
        f.write("ASCII\n")
        f.write("DATASET POLYDATA\n")

        f.write(f"POINTS {n} float\n")
        for x, y, z in pos3:
            f.write(f"{x:.17g} {y:.17g} {z:.17g}\n")

        # n cells, 2*n indices
        f.write(f"VERTICES {n} {2*n}\n")
        for i in range(n):
            f.write(f"1 {i}\n")

        f.write(f"POINT_DATA {n}\n")

        for name, values in (("rho", store.rho), ("p", store.p)):
            f.write(f"SCALARS {name} float 1\n")
            f.write("LOOKUP_TABLE default\n")
            for value in values:
                f.write(f"{float(value):.17g}\n")

        for name, vectors in (("v", vel3), ("f", force3)):
            f.write(f"VECTORS {name} float\n")
            for x, y, z in vectors:
                f.write(f"{x:.17g} {y:.17g} {z:.17g}\n")
