import logging

import numpy as np
import pytest

from sph2d.core.diagnostics import assert_finite, compute_step_diagnostics, neighbor_counts
from sph2d.core.errors import NumericDegeneracyError
from sph2d.core.simulator import add_particles, create, step


def test_neighbor_counts_use_all_pairs_within_h():
    pos = np.array([[0.0, 0.0], [10.0, 0.0], [100.0, 0.0], [0.0, 16.0]])
    counts = neighbor_counts(pos, 16.0)
    # distance exactly h is outside the support
    assert counts.tolist() == [1, 1, 0, 0]

    pos[3] = [0.0, 15.9]
    assert neighbor_counts(pos, 16.0).tolist() == [2, 1, 0, 1]


def test_step_diagnostics_after_a_step():
    sim = create(10, 400.0, 400.0)
    add_particles(sim, np.array([[100.0, 100.0], [108.0, 100.0], [300.0, 300.0]]))
    step(sim)

    diag = compute_step_diagnostics(sim.step_count, sim.store, rho0=300.0, h=16.0)

    assert diag.step == 1
    assert diag.n_particles == 3
    assert diag.n_nonfinite == 0
    assert diag.rho_min == pytest.approx(float(sim.store.rho.min()))
    assert diag.rho_max == pytest.approx(float(sim.store.rho.max()))
    assert diag.p_mean == pytest.approx(float(sim.store.p.mean()))
    assert diag.neigh_min == 0
    assert diag.neigh_max == 1
    assert diag.v_max > 0.0


def test_diagnostics_on_empty_store():
    sim = create(10, 400.0, 400.0)
    diag = compute_step_diagnostics(0, sim.store, rho0=300.0, h=16.0)
    assert diag.n_particles == 0
    assert diag.v_max == 0.0
    assert diag.neigh_max == 0


def test_assert_finite_raises_on_degenerate_state():
    sim = create(10, 400.0, 400.0)
    add_particles(sim, np.array([[100.0, 100.0], [200.0, 200.0]]))
    assert_finite(sim.store)

    sim.store.vel[1, 0] = np.nan
    with pytest.raises(NumericDegeneracyError):
        assert_finite(sim.store)


def test_non_finite_values_propagate_and_are_flagged(caplog):
    sim = create(10, 400.0, 400.0, check_finite=True)
    add_particles(sim, np.array([[100.0, 100.0], [300.0, 300.0]]))
    sim.store.vel[0, 0] = np.nan

    with caplog.at_level(logging.WARNING, logger="sph2d.core.simulator"):
        step(sim)

    # state is not corrected
    assert np.isnan(sim.store.pos[0, 0])
    assert np.isfinite(sim.store.pos[1]).all()
    assert "non-finite" in caplog.text

    diag = compute_step_diagnostics(sim.step_count, sim.store, rho0=300.0, h=16.0)
    assert diag.n_nonfinite == 1
    assert diag.n_particles == 2
