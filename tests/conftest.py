import numpy as np
import pytest

from tilebody import SimConfig, BodyInitializerKind, initial_state


@pytest.fixture
def small_cfg():
    return SimConfig(num_bodies=300, steps=5, block_size=256)


@pytest.fixture
def cloud_state(small_cfg):
    return initial_state(BodyInitializerKind.UNIFORM_CLOUD, small_cfg)


@pytest.fixture
def mass_state(small_cfg):
    return initial_state(BodyInitializerKind.TWO_CLUSTERS_MASS, small_cfg, seed=7)


def naive_step(pos, vel, cfg):
    """Float64 textbook step used as an independent check of the float32 integrators."""
    pos = pos.astype(np.float64)
    vel = vel.astype(np.float64)
    n = len(pos)
    acc = np.zeros((n, 3))
    for i in range(n):
        for j in range(n):
            r = pos[j, :3] - pos[i, :3]
            d2 = r @ r + cfg.softening_squared
            acc[i] += r * vel[j, 3] / d2 ** 1.5
    new_vel = vel.copy()
    new_vel[:, :3] = (vel[:, :3] + acc * cfg.delta_time) * cfg.damping
    new_pos = pos.copy()
    new_pos[:, :3] = pos[:, :3] + new_vel[:, :3] * cfg.delta_time
    return new_pos, new_vel
