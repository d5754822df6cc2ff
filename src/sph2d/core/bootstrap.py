"""
Bootstrap / CLI entry point for the 2D SPH kernel.

What this file does:
- Loads a JSON scene configuration.
- Creates the simulation and seeds the dam-break column.
- Runs the fixed-step loop (density/pressure -> forces -> integration).
- Applies scripted user events between steps (block injection, reset),
  the headless counterpart of the interactive spawn/reset keys.
- Logs per-step diagnostics (rho/p/v/neighbors).
- Optionally exports CSV and VTK snapshots for ParaView/analysis.

Important constraint:
- This file must not change any solver math/physics. It only wires together
  existing components and adds observability/export around them.
"""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path

from sph2d.core.diagnostics import compute_step_diagnostics
from sph2d.core.errors import InvalidConfigurationError
from sph2d.core.simulator import (
    SimConfig,
    Simulation,
    clear,
    create_from_config,
    seed_block,
    seed_dam_break,
    step,
)
from sph2d.io.csv_export import export_particles_csv
from sph2d.io.vtk_export import export_particles_vtk_legacy

# Reference window (1600 x 1200) scaled by 1.5 into world units.
DEFAULT_DOMAIN = (2400.0, 1800.0)
DEFAULT_MAX_PARTICLES = 5000
DEFAULT_BLOCK_PARTICLES = 250


def build_config(scene: dict) -> tuple[SimConfig, int]:
    """
    Map a scene dict onto SimConfig; missing keys keep the reference defaults.

    Returns (config, max_particles).
    """
    domain = scene.get("domain", {})
    material = scene.get("material", {})
    time_cfg = scene.get("time", {})
    seeding = scene.get("seeding", {})

    options = {}
    if "support_radius" in scene.get("neighbors", {}):
        options["smoothing_radius"] = float(scene["neighbors"]["support_radius"])

    for key, field_name in [
        ("rest_density", "rest_density"),
        ("gas_constant", "gas_constant"),
        ("mass", "particle_mass"),
        ("viscosity", "viscosity"),
    ]:
        if key in material:
            options[field_name] = float(material[key])

    if "dt" in time_cfg:
        options["dt"] = float(time_cfg["dt"])
    if "damping" in scene.get("boundary", {}):
        options["boundary_damping"] = float(scene["boundary"]["damping"])
    if "gravity" in scene.get("forces", {}):
        options["gravity"] = tuple(float(v) for v in scene["forces"]["gravity"])
    if "jitter" in seeding:
        options["jitter"] = bool(seeding["jitter"])
    if scene.get("meta", {}).get("seed") is not None:
        options["seed"] = int(scene["meta"]["seed"])
    if scene.get("parallel", {}).get("num_threads") is not None:
        options["num_threads"] = int(scene["parallel"]["num_threads"])
    if "check_finite" in scene.get("diagnostics", {}):
        options["check_finite"] = bool(scene["diagnostics"]["check_finite"])

    cfg = SimConfig(
        domain_width=float(domain.get("width", DEFAULT_DOMAIN[0])),
        domain_height=float(domain.get("height", DEFAULT_DOMAIN[1])),
        **options,
    )
    max_particles = int(domain.get("max_particles", DEFAULT_MAX_PARTICLES))
    return cfg, max_particles


def apply_event(sim: Simulation, event: dict, dam_break_count: int | None = None) -> None:
    """
    Apply one scripted user event between steps.

    Supported:
      {"action": "block", "count": n}   inject a block of up to n particles
      {"action": "reset", "count": n}   clear and re-seed the dam break

    A reset without "count" re-seeds `dam_break_count` particles (the
    initial dam-break size), or up to capacity if that is not given.
    """
    action = str(event.get("action", "")).lower()

    if action == "block":
        placed = seed_block(sim, int(event.get("count", DEFAULT_BLOCK_PARTICLES)))
        print(f"[EVENT] block placed={placed} total={sim.store.n}")
    elif action == "reset":
        clear(sim)
        default = sim.store.capacity if dam_break_count is None else dam_break_count
        placed = seed_dam_break(sim, int(event.get("count", default)))
        print(f"[EVENT] reset placed={placed}")
    else:
        raise ValueError(f"Unknown event action: {action!r}")


def main(argv: list[str] | None = None) -> int:
    argv = sys.argv[1:] if argv is None else argv
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    if len(argv) < 1:
        print("Usage: sph2d-run <scene.json>")
        return 2

    scene_path = Path(argv[0]).resolve()
    if not scene_path.exists():
        print("[ERROR] scene file not found")
        return 1

    with scene_path.open("r", encoding="utf-8") as f:
        scene = json.load(f)

    try:
        cfg, max_particles = build_config(scene)
        sim = create_from_config(cfg, max_particles)
    except InvalidConfigurationError as exc:
        print(f"[ERROR] invalid configuration: {exc}")
        return 3

    print(f"[BOOT] domain={cfg.domain_width:g}x{cfg.domain_height:g} h={cfg.smoothing_radius:g} max_particles={max_particles}")

    seeding = scene.get("seeding", {})
    dam_break_count = int(seeding.get("dam_break", max_particles))
    placed = seed_dam_break(sim, dam_break_count)
    print(f"[BOOT] dam break placed={placed}")

    time_cfg = scene.get("time", {})
    steps = int(time_cfg.get("steps", 100))
    log_every = int(time_cfg.get("log_every", 10))

    events: dict[int, list[dict]] = {}
    for event in scene.get("events", []):
        events.setdefault(int(event["step"]), []).append(event)

    # -------------------------------------------------------------------------
    # Optional exports controlled by scene:
    #   export.csv.enable/every/dir
    #   export.vtk.enable/every/dir
    # -------------------------------------------------------------------------
    export_cfg = scene.get("export", {})

    csv_cfg = export_cfg.get("csv", {})
    csv_enabled = bool(csv_cfg.get("enable", False))
    csv_every = int(csv_cfg.get("every", 10))
    csv_dir = Path(csv_cfg.get("dir", "out/csv"))

    vtk_cfg = export_cfg.get("vtk", {})
    vtk_enabled = bool(vtk_cfg.get("enable", False))
    vtk_every = int(vtk_cfg.get("every", 10))
    vtk_dir = Path(vtk_cfg.get("dir", "out/vtk"))

    # Export step 0000 if enabled (pre-step snapshot)
    if csv_enabled:
        export_particles_csv(csv_dir / "particles_step_0000.csv", sim.store)
    if vtk_enabled:
        export_particles_vtk_legacy(vtk_dir / "particles_step_0000.vtk", sim.store)

    for s in range(steps):
        # user events are applied between steps, never during one
        for event in events.get(s, []):
            apply_event(sim, event, dam_break_count=dam_break_count)

        step(sim)

        if (s == 0) or ((s + 1) % max(1, log_every) == 0):
            diag = compute_step_diagnostics(
                step=sim.step_count,
                store=sim.store,
                rho0=cfg.rest_density,
                h=cfg.smoothing_radius,
            )
            print(
                f"[STEP {diag.step:04d}] n={diag.n_particles} "
                f"|v|max={diag.v_max:.3e} "
                f"rho(min/avg/max)={diag.rho_min:.2f}/{diag.rho_mean:.2f}/{diag.rho_max:.2f} "
                f"err% (avg)={100.0 * diag.rho_rel_err_mean:.2f} "
                f"p(min/avg/max)={diag.p_min:.2f}/{diag.p_mean:.2f}/{diag.p_max:.2f} "
                f"neigh(min/avg/max)={diag.neigh_min}/{diag.neigh_mean:.1f}/{diag.neigh_max} "
                f"nonfinite={diag.n_nonfinite}"
            )

        if csv_enabled and ((s + 1) % max(1, csv_every) == 0):
            export_particles_csv(csv_dir / f"particles_step_{sim.step_count:04d}.csv", sim.store)

        if vtk_enabled and ((s + 1) % max(1, vtk_every) == 0):
            export_particles_vtk_legacy(vtk_dir / f"particles_step_{sim.step_count:04d}.vtk", sim.store)

    print("[BOOT] done")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
