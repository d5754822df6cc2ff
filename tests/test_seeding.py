import numpy as np
import pytest

from sph2d.core.simulator import create, positions, seed_block, seed_dam_break
from sph2d.core.state_builder import block_positions, dam_break_positions

H = 16.0
EPS = H


@pytest.mark.parametrize("n", [0, 1, 37, 500, 5000])
@pytest.mark.parametrize("domain", [(2400.0, 1800.0), (300.0, 200.0), (120.0, 90.0)])
def test_dam_break_stays_inside_margin(n, domain):
    w, h = domain
    sim = create(5000, w, h, seed=0)

    placed = seed_dam_break(sim, n)
    pos = positions(sim)

    assert placed <= n
    assert pos.shape == (placed, 2)
    assert (pos[:, 0] >= EPS).all() and (pos[:, 0] <= w - EPS).all()
    assert (pos[:, 1] >= EPS).all() and (pos[:, 1] <= h - EPS).all()


def test_dam_break_reference_layout():
    pts = dam_break_positions(2400.0, 1800.0, H, EPS)

    xs = np.unique(pts[:, 0])
    ys = np.unique(pts[:, 1])
    assert xs[0] == pytest.approx(2400.0 / 10.0 + H)
    assert xs[-1] <= 2400.0 / 2.5 + H
    assert ys[0] == pytest.approx(EPS + H)
    assert np.allclose(np.diff(xs), H)
    assert np.allclose(np.diff(ys), H)
    assert pts.shape[0] >= 5000


def test_dam_break_jitter_is_horizontal_and_sub_cell():
    lattice = dam_break_positions(800.0, 600.0, H, EPS)
    sim = create(1000, 800.0, 600.0, seed=5)
    placed = seed_dam_break(sim, 200)

    d = positions(sim) - lattice[:placed]
    assert np.array_equal(d[:, 1], np.zeros(placed))
    assert (d[:, 0] >= 0.0).all() and (d[:, 0] < 1.0).all()
    assert np.any(d[:, 0] > 0.0)


def test_seeding_is_capped_by_capacity():
    sim = create(30, 2400.0, 1800.0)

    assert seed_dam_break(sim, 100) == 30
    assert seed_block(sim, 10) == 0
    assert sim.store.n == 30


def test_block_spacing_and_count():
    sim = create(10000, 2400.0, 1800.0)
    lattice = block_positions(2400.0, 1800.0, H, EPS)

    placed = seed_block(sim, 100000)
    pos = positions(sim)

    assert placed == lattice.shape[0]
    assert np.array_equal(pos, lattice)
    xs = np.unique(pos[:, 0])
    assert np.allclose(np.diff(xs), 0.95 * H)
    # centered horizontally in the domain
    assert abs(0.5 * (xs[0] + xs[-1]) - 1200.0) < 0.95 * H


def test_block_after_dam_break_reports_placed_count():
    sim = create(1000, 2400.0, 1800.0, seed=1)
    seed_dam_break(sim, 900)

    placed = seed_block(sim, 250)

    assert placed == 100
    assert sim.store.n == 1000


def test_block_stays_inside_margin_in_small_domain():
    sim = create(1000, 100.0, 100.0)
    seed_block(sim, 1000)
    pos = positions(sim)

    assert (pos >= EPS).all()
    assert (pos <= 100.0 - EPS).all()
