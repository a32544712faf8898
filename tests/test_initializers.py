import numpy as np
import pytest

from tilebody import (
    BodyInitializerKind,
    Diagnostics,
    SimConfig,
    initial_state,
    initialize,
)

ALL_KINDS = list(BodyInitializerKind)


@pytest.mark.parametrize("kind", ALL_KINDS)
def test_shapes_and_dtype(kind):
    cfg = SimConfig(num_bodies=123)
    pos, vel = initialize(kind, cfg)
    assert pos.shape == (123, 4) and vel.shape == (123, 4)
    assert pos.dtype == np.float32 and vel.dtype == np.float32


@pytest.mark.parametrize("kind", ALL_KINDS)
@pytest.mark.parametrize("n", [1, 2, 7, 1000, 3000])
def test_total_momentum_is_near_zero(kind, n):
    state = initial_state(kind, SimConfig(num_bodies=n))
    diag = Diagnostics(state)
    vel = state.vel.astype(np.float64)
    p = np.sum(vel[:, :3] * vel[:, 3:4], axis=0)
    assert np.all(np.abs(p) <= 1e-3 * diag.total_mass())
    assert diag.momentum_residual() <= 1e-3


@pytest.mark.parametrize("kind", [BodyInitializerKind.UNIFORM_CLOUD, BodyInitializerKind.TWO_CLUSTERS])
def test_seeded_kinds_are_bit_reproducible(kind):
    cfg = SimConfig(num_bodies=500)
    pos_a, vel_a = initialize(kind, cfg)
    pos_b, vel_b = initialize(kind, cfg)
    assert np.array_equal(pos_a, pos_b)
    assert np.array_equal(vel_a, vel_b)


def test_mass_kind_is_unseeded_by_default():
    cfg = SimConfig(num_bodies=500)
    pos_a, _ = initialize(BodyInitializerKind.TWO_CLUSTERS_MASS, cfg)
    pos_b, _ = initialize(BodyInitializerKind.TWO_CLUSTERS_MASS, cfg)
    assert not np.array_equal(pos_a, pos_b)


def test_explicit_seed_makes_mass_kind_reproducible():
    cfg = SimConfig(num_bodies=500)
    pos_a, vel_a = initialize(3, cfg, seed=123)
    pos_b, vel_b = initialize(3, cfg, seed=np.random.default_rng(123))
    assert np.array_equal(pos_a, pos_b)
    assert np.array_equal(vel_a, vel_b)


def test_uniform_cloud_ranges():
    cfg = SimConfig(num_bodies=2000)
    pos, vel = initialize(BodyInitializerKind.UNIFORM_CLOUD, cfg)
    half = 0.5 * cfg.pscale
    assert np.all(np.abs(pos[:, 0]) <= half)
    assert np.all(np.abs(pos[:, 1]) <= half)
    assert np.all(np.abs(pos[:, 2] - 50.0) <= half + 1e-4)
    assert np.all(pos[:, 3] == 1.0)
    assert np.all(vel[:, 3] == 1.0)


def test_two_clusters_are_split_along_x():
    cfg = SimConfig(num_bodies=1000, cluster_scale=100.0)
    pos, vel = initialize(BodyInitializerKind.TWO_CLUSTERS, cfg)
    first, second = pos[:500], pos[500:]
    assert np.all(first[:, 0] >= 0.0)
    assert np.all(second[:, 0] <= 0.0)
    assert np.all(vel[:, 3] == 1.0)
    # the shear term pushes the halves in opposite y directions
    assert vel[:500, 1].mean() > vel[500:, 1].mean()


def test_mass_kind_carries_mass_in_both_records():
    cfg = SimConfig(num_bodies=1000)
    pos, vel = initialize(BodyInitializerKind.TWO_CLUSTERS_MASS, cfg, seed=1)
    assert np.all(pos[:, 3] >= 0.7) and np.all(pos[:, 3] <= 1.3)
    assert np.array_equal(pos[:, 3], vel[:, 3])
    assert pos[:, 3].std() > 0.05


def test_zero_bodies_gives_empty_state():
    pos, vel = initialize(BodyInitializerKind.UNIFORM_CLOUD, SimConfig(num_bodies=0))
    assert pos.shape == (0, 4) and vel.shape == (0, 4)


def test_verbose_reports_momentum(capsys):
    initialize(BodyInitializerKind.UNIFORM_CLOUD, SimConfig(num_bodies=10, verbose=True))
    out = capsys.readouterr().out
    assert "total momentum and mass 0" in out
    assert "total momentum and mass 1" in out


def test_unknown_kind_is_rejected():
    with pytest.raises(ValueError):
        initialize(4, SimConfig(num_bodies=10))
