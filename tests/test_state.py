import numpy as np
import pytest

from sph2d.core.state import ParticleStore


def test_push_truncates_at_capacity():
    store = ParticleStore(capacity=3)

    placed = store.push(np.array([[1.0, 1.0], [2.0, 2.0]]))
    assert placed == 2
    assert store.remaining == 1

    placed = store.push(np.array([[3.0, 3.0], [4.0, 4.0], [5.0, 5.0]]))
    assert placed == 1
    assert store.n == 3
    assert np.allclose(store.pos[-1], [3.0, 3.0])

    assert store.push(np.array([[6.0, 6.0]])) == 0
    assert store.n == 3
    store.validate()


def test_push_initializes_derived_fields_to_zero():
    store = ParticleStore(capacity=4)
    store.push(np.array([[1.0, 2.0]]), np.array([[3.0, 4.0]]))

    assert np.allclose(store.vel, [[3.0, 4.0]])
    assert np.allclose(store.force, 0.0)
    assert np.allclose(store.rho, 0.0)
    assert np.allclose(store.p, 0.0)


def test_push_rejects_mismatched_velocities():
    store = ParticleStore(capacity=4)
    with pytest.raises(ValueError):
        store.push(np.zeros((2, 2)), np.zeros((3, 2)))


def test_clear_keeps_capacity():
    store = ParticleStore(capacity=5)
    store.push(np.ones((5, 2)))
    store.clear()

    assert store.n == 0
    assert store.capacity == 5
    assert store.remaining == 5
    store.validate()


def test_nonfinite_mask_flags_any_field():
    store = ParticleStore(capacity=3)
    store.push(np.ones((3, 2)))
    store.rho[1] = np.inf
    store.vel[2, 0] = np.nan

    assert store.nonfinite_mask().tolist() == [False, True, True]
