import numpy as np
import pytest

from tilebody import body_body_interaction, tile_accelerations, source_bodies


@pytest.mark.parametrize("mass", [0.7, 1.0, 1.3, 1000.0])
@pytest.mark.parametrize("eps2", [1e-6, 0.00125, 1.0])
def test_self_interaction_is_exactly_zero(mass, eps2):
    ai = np.array([0.25, -1.5, 3.0], dtype=np.float32)
    body = np.array([1.2, -3.4, 51.0, mass], dtype=np.float32)
    out = body_body_interaction(np.float32(eps2), ai, body, body)
    assert out.dtype == np.float32
    assert np.array_equal(out, ai)


def test_zero_softening_self_term_is_not_finite():
    body = np.array([1.0, 2.0, 3.0, 1.0], dtype=np.float32)
    with np.errstate(divide="ignore", invalid="ignore"):
        out = body_body_interaction(np.float32(0.0), np.zeros(3, dtype=np.float32), body, body)
    assert np.all(np.isnan(out))


def test_two_body_magnitude_and_direction():
    eps2 = np.float32(0.00125)
    bi = np.array([0.0, 0.0, 0.0, 1.0], dtype=np.float32)
    bj = np.array([1.0, 0.0, 0.0, 2.0], dtype=np.float32)
    a = body_body_interaction(eps2, np.zeros(3, dtype=np.float32), bi, bj)
    expected = 2.0 / (1.0 + 0.00125) ** 1.5
    assert a[0] == pytest.approx(expected, rel=1e-5)
    assert a[1] == 0.0 and a[2] == 0.0

    back = body_body_interaction(eps2, np.zeros(3, dtype=np.float32), bj, bi)
    assert back[0] < 0.0


def test_law_broadcasts_over_lanes():
    rng = np.random.default_rng(3)
    lanes = rng.random((17, 4)).astype(np.float32)
    src = rng.random(4).astype(np.float32)
    acc = rng.random((17, 3)).astype(np.float32)
    eps2 = np.float32(0.00125)

    batched = body_body_interaction(eps2, acc, lanes, src)
    for i in range(17):
        single = body_body_interaction(eps2, acc[i], lanes[i], src)
        np.testing.assert_allclose(batched[i], single, rtol=1e-6)


def test_tile_accelerations_matches_sequential_sum():
    rng = np.random.default_rng(11)
    bodies = rng.random((8, 4)).astype(np.float32)
    tile = rng.random((32, 4)).astype(np.float32)
    tile[:, :3] += 5.0
    eps2 = np.float32(0.00125)

    acc = np.zeros((8, 3), dtype=np.float32)
    for k in range(len(tile)):
        acc = body_body_interaction(eps2, acc, bodies, tile[k])

    tiled = tile_accelerations(eps2, bodies, tile)
    assert tiled.shape == (8, 3)
    np.testing.assert_allclose(tiled, acc, rtol=1e-5, atol=1e-5)


def test_source_bodies_take_mass_from_velocity():
    pos = np.array([[1.0, 2.0, 3.0, 9.0]], dtype=np.float32)
    vel = np.array([[0.1, 0.2, 0.3, 1.25]], dtype=np.float32)
    src = source_bodies(pos, vel)
    assert src.tolist() == [[1.0, 2.0, 3.0, 1.25]]


def test_law_runs_on_torch_tensors():
    torch = pytest.importorskip("torch")
    rng = np.random.default_rng(5)
    lanes = rng.random((6, 4)).astype(np.float32)
    src = rng.random((6, 4)).astype(np.float32)

    expected = body_body_interaction(0.00125, np.zeros((6, 3), dtype=np.float32), lanes, src)
    got = body_body_interaction(
        0.00125, torch.zeros((6, 3)), torch.from_numpy(lanes), torch.from_numpy(src)
    )
    assert got.dtype == torch.float32
    np.testing.assert_allclose(got.numpy(), expected, rtol=1e-6, atol=1e-6)
