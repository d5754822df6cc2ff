from __future__ import annotations

import logging
from dataclasses import dataclass

import numba
import numpy as np

from sph2d.core.errors import InvalidConfigurationError
from sph2d.core.state import ParticleStore
from sph2d.core.state_builder import seed_block_store, seed_dam_break_store
from sph2d.sph.density import compute_density_pressure
from sph2d.sph.forces import compute_forces
from sph2d.sph.integration import integrate_and_enforce_boundaries
from sph2d.sph.kernels import KernelCoefficients, kernel_coefficients

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SimConfig:
    """
    Physical and numerical parameters of one simulation, fixed at creation.

    Defaults are the reference parameter set of the interactive dam-break
    demo (pixel-like units, y axis pointing up).
    """

    # Domain rectangle [0, domain_width] x [0, domain_height]
    domain_width: float
    domain_height: float

    # Kernel / neighborhood
    smoothing_radius: float = 16.0

    # State equation: p_i = gas_constant (rho_i - rest_density)
    rest_density: float = 300.0
    gas_constant: float = 2000.0

    particle_mass: float = 2.5
    viscosity: float = 200.0

    # Fixed time step (no adaptive stepping)
    dt: float = 0.0007

    # Velocity multiplier on wall contact (negative: reflection)
    boundary_damping: float = -0.5

    gravity: tuple[float, float] = (0.0, -9.81)

    # Dam-break seeding: horizontal jitter and its RNG seed (None = fresh entropy)
    jitter: bool = True
    seed: int | None = None

    # Worker threads for the parallel passes (None = numba default)
    num_threads: int | None = None

    # Flag non-finite particle state after every step (log only, no correction)
    check_finite: bool = False

    @property
    def eps(self) -> float:
        """Wall margin; particles are kept one smoothing radius off the walls."""
        return float(self.smoothing_radius)

    def validate(self) -> None:
        for name in ("smoothing_radius", "domain_width", "domain_height", "dt", "particle_mass", "rest_density"):
            value = float(getattr(self, name))
            if not (np.isfinite(value) and value > 0.0):
                raise InvalidConfigurationError(f"{name} must be > 0 (got {value!r})")

        if len(self.gravity) != 2:
            raise InvalidConfigurationError(f"gravity must have 2 components (got {self.gravity!r})")

        if self.num_threads is not None and int(self.num_threads) <= 0:
            raise InvalidConfigurationError("num_threads must be > 0")


@dataclass
class Simulation:
    """
    Handle returned by `create`: configuration, derived kernel constants,
    particle storage and the jitter RNG.

    Not thread-safe. Seeding and `step` must be called from the same thread,
    so a seeding request is always applied between two steps.
    """

    cfg: SimConfig
    coeffs: KernelCoefficients
    store: ParticleStore
    rng: np.random.Generator
    step_count: int = 0


def create_from_config(cfg: SimConfig, max_particles: int) -> Simulation:
    cfg.validate()
    if int(max_particles) < 0:
        raise InvalidConfigurationError("max_particles must be >= 0")

    return Simulation(
        cfg=cfg,
        coeffs=kernel_coefficients(cfg.smoothing_radius),
        store=ParticleStore(capacity=int(max_particles)),
        rng=np.random.default_rng(cfg.seed),
    )


def create(max_particles: int, domain_width: float, domain_height: float, **options) -> Simulation:
    """
    Create an empty simulation.

    `options` are SimConfig fields (smoothing_radius, rest_density,
    gas_constant, particle_mass, viscosity, dt, boundary_damping, gravity,
    jitter, seed, num_threads, check_finite).

    Raises InvalidConfigurationError for non-positive radius, domain or dt.
    """
    cfg = SimConfig(domain_width=float(domain_width), domain_height=float(domain_height), **options)
    return create_from_config(cfg, max_particles)


def seed_dam_break(sim: Simulation, requested: int) -> int:
    cfg = sim.cfg
    return seed_dam_break_store(
        sim.store,
        requested,
        width=cfg.domain_width,
        height=cfg.domain_height,
        h=cfg.smoothing_radius,
        eps=cfg.eps,
        rng=sim.rng if cfg.jitter else None,
    )


def seed_block(sim: Simulation, requested: int) -> int:
    cfg = sim.cfg
    return seed_block_store(
        sim.store,
        requested,
        width=cfg.domain_width,
        height=cfg.domain_height,
        h=cfg.smoothing_radius,
        eps=cfg.eps,
    )


def add_particles(sim: Simulation, positions: np.ndarray, velocities: np.ndarray | None = None) -> int:
    """Insert externally generated particles; truncated at capacity."""
    return sim.store.push(positions, velocities)


def clear(sim: Simulation) -> None:
    """Remove every particle. Capacity, domain and RNG are kept."""
    sim.store.clear()


def positions(sim: Simulation) -> np.ndarray:
    """Snapshot (copy) of current positions, shape (n, 2)."""
    return sim.store.pos.copy()


def step(sim: Simulation) -> None:
    """
    Advance the simulation by one fixed time step.

    Steps:
      1) Density by summation and pressure from the state equation
         (reads positions, writes rho/p).
      2) Net force: pressure + viscosity + gravity
         (reads positions, velocities, rho, p; writes force).
      3) Symplectic Euler integration and wall clamping
         (reads force/rho, updates each particle's own velocity/position).

    Each pass is a numba parallel loop; the call only returns once every
    particle is done, which is the barrier between passes.

    A configured `num_threads` only applies for the duration of the call;
    the caller's numba thread count is restored afterwards.
    """
    cfg = sim.cfg
    store = sim.store

    if cfg.num_threads is None:
        _run_passes(sim)
    else:
        previous = numba.get_num_threads()
        numba.set_num_threads(min(int(cfg.num_threads), numba.config.NUMBA_NUM_THREADS))
        try:
            _run_passes(sim)
        finally:
            numba.set_num_threads(previous)

    sim.step_count += 1

    if cfg.check_finite:
        bad = store.nonfinite_mask()
        n_bad = int(np.count_nonzero(bad))
        if n_bad:
            logger.warning(
                "step %d: %d of %d particles hold non-finite values (first index %d)",
                sim.step_count,
                n_bad,
                store.n,
                int(np.flatnonzero(bad)[0]),
            )


def _run_passes(sim: Simulation) -> None:
    cfg = sim.cfg
    store = sim.store

    # (1) density + pressure
    compute_density_pressure(
        store.pos,
        mass=cfg.particle_mass,
        coeffs=sim.coeffs,
        rho0=cfg.rest_density,
        k=cfg.gas_constant,
        out_rho=store.rho,
        out_p=store.p,
    )

    # (2) forces, using rho/p of this step
    compute_forces(
        store.pos,
        store.vel,
        store.rho,
        store.p,
        mass=cfg.particle_mass,
        mu=cfg.viscosity,
        gravity=np.asarray(cfg.gravity, dtype=np.float64),
        coeffs=sim.coeffs,
        out_force=store.force,
    )

    # (3) integration + boundary
    integrate_and_enforce_boundaries(
        store.pos,
        store.vel,
        store.force,
        store.rho,
        dt=cfg.dt,
        eps=cfg.eps,
        width=cfg.domain_width,
        height=cfg.domain_height,
        damping=cfg.boundary_damping,
    )
