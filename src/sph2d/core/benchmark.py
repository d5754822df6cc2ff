"""
Timing harness for `step`.

Reference workload: dam break with n=5000 particles, 100 steps, default
2400 x 1800 domain. The first (JIT compiling) step runs on a throwaway
simulation so the timed loop only measures the passes themselves.

Usage: sph2d-bench [n_particles] [steps] [num_threads]
"""

from __future__ import annotations

import sys
import time
from dataclasses import dataclass

from sph2d.core.bootstrap import DEFAULT_DOMAIN
from sph2d.core.simulator import create, seed_dam_break, step

DEFAULT_BENCH_PARTICLES = 5000
DEFAULT_BENCH_STEPS = 100


@dataclass(frozen=True)
class BenchmarkResult:
    n_particles: int
    steps: int
    total_s: float

    @property
    def per_step_s(self) -> float:
        return self.total_s / self.steps if self.steps else 0.0


def run_benchmark(
    n_particles: int = DEFAULT_BENCH_PARTICLES,
    steps: int = DEFAULT_BENCH_STEPS,
    num_threads: int | None = None,
    seed: int = 0,
) -> BenchmarkResult:
    width, height = DEFAULT_DOMAIN

    # warm-up: compile the parallel kernels outside the timed loop
    warm = create(16, width, height, seed=seed, num_threads=num_threads)
    seed_dam_break(warm, 16)
    step(warm)

    sim = create(n_particles, width, height, seed=seed, num_threads=num_threads)
    placed = seed_dam_break(sim, n_particles)

    t0 = time.perf_counter()
    for _ in range(steps):
        step(sim)
    total = time.perf_counter() - t0

    return BenchmarkResult(n_particles=placed, steps=steps, total_s=total)


def main(argv: list[str] | None = None) -> int:
    argv = sys.argv[1:] if argv is None else argv

    try:
        n_particles = int(argv[0]) if len(argv) > 0 else DEFAULT_BENCH_PARTICLES
        steps = int(argv[1]) if len(argv) > 1 else DEFAULT_BENCH_STEPS
        num_threads = int(argv[2]) if len(argv) > 2 else None
    except ValueError:
        print("Usage: sph2d-bench [n_particles] [steps] [num_threads]")
        return 2

    print(f"[BENCH] n={n_particles} steps={steps} threads={num_threads or 'default'}")
    result = run_benchmark(n_particles, steps, num_threads=num_threads)
    print(f"[BENCH] placed={result.n_particles} total={result.total_s:.3f}s per_step={1e3 * result.per_step_s:.2f}ms")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
