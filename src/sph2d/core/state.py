from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np


def _empty_vec() -> np.ndarray:
    return np.zeros((0, 2), dtype=np.float64)


def _empty_scalar() -> np.ndarray:
    return np.zeros((0,), dtype=np.float64)


@dataclass(slots=True)
class ParticleStore:
    """
    Bounded structure-of-arrays storage for 2D fluid particles.

    The number of particles can grow up to `capacity`; every insertion goes
    through `push`, which truncates instead of failing once the store is full.
    Particles are never removed individually, only all at once via `clear`.

    Storage order is insertion order. It has no physical meaning: every
    solver pass treats all pairs symmetrically.
    """

    capacity: int

    pos: np.ndarray = field(default_factory=_empty_vec)      # (N, 2)
    vel: np.ndarray = field(default_factory=_empty_vec)      # (N, 2)
    force: np.ndarray = field(default_factory=_empty_vec)    # (N, 2)

    rho: np.ndarray = field(default_factory=_empty_scalar)   # (N,)
    p: np.ndarray = field(default_factory=_empty_scalar)     # (N,)

    @property
    def n(self) -> int:
        return int(self.pos.shape[0])

    @property
    def remaining(self) -> int:
        """How many more particles fit before the capacity is reached."""
        return max(0, int(self.capacity) - self.n)

    def push(self, positions: np.ndarray, velocities: np.ndarray | None = None) -> int:
        """
        Append particles, keeping at most `remaining` of them.

        Returns the number actually placed. Force, density and pressure of the
        new particles start at zero; they are produced by the next step.
        """
        positions = np.asarray(positions, dtype=np.float64).reshape(-1, 2)
        if velocities is None:
            velocities = np.zeros_like(positions)
        else:
            velocities = np.asarray(velocities, dtype=np.float64).reshape(-1, 2)
            if velocities.shape != positions.shape:
                raise ValueError(
                    f"velocities shape {velocities.shape} != positions shape {positions.shape}"
                )

        k = min(positions.shape[0], self.remaining)
        if k == 0:
            return 0

        self.pos = np.concatenate([self.pos, positions[:k]], axis=0)
        self.vel = np.concatenate([self.vel, velocities[:k]], axis=0)
        self.force = np.concatenate([self.force, np.zeros((k, 2), dtype=np.float64)], axis=0)
        self.rho = np.concatenate([self.rho, np.zeros((k,), dtype=np.float64)])
        self.p = np.concatenate([self.p, np.zeros((k,), dtype=np.float64)])
        return k

    def clear(self) -> None:
        self.pos = _empty_vec()
        self.vel = _empty_vec()
        self.force = _empty_vec()
        self.rho = _empty_scalar()
        self.p = _empty_scalar()

    def nonfinite_mask(self) -> np.ndarray:
        """Boolean mask of particles with any NaN/Inf field."""
        bad = ~np.isfinite(self.pos).all(axis=1)
        bad |= ~np.isfinite(self.vel).all(axis=1)
        bad |= ~np.isfinite(self.force).all(axis=1)
        bad |= ~np.isfinite(self.rho)
        bad |= ~np.isfinite(self.p)
        return bad

    def validate(self) -> None:
        n = self.n
        if self.pos.shape != (n, 2):
            raise ValueError(f"pos shape {self.pos.shape} != (N, 2) = ({n},2)")

        for name, arr, shape in [
            ("vel", self.vel, (n, 2)),
            ("force", self.force, (n, 2)),
            ("rho", self.rho, (n,)),
            ("p", self.p, (n,)),
        ]:
            if arr.shape != shape:
                raise ValueError(f"{name} shape {arr.shape} != {shape}")

        if n > self.capacity:
            raise ValueError(f"particle count {n} exceeds capacity {self.capacity}")
