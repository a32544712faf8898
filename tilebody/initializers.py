"""
This module generates the initial body states of a run.

Three fixed sampling policies are provided through BodyInitializerKind: a uniform random
cloud (UNIFORM_CLOUD), two clusters split at N/2 and offset by +/- pscale/2 along x with a
velocity shear proportional to x^2 that sets them rotating (TWO_CLUSTERS), and the same
two clusters with per-body masses drawn from [0.7, 1.3) and carried in both position.w and
velocity.w (TWO_CLUSTERS_MASS). Every policy draws all positions first, then all
velocities, from one numpy Generator; the first two kinds default to seed 42 and are
bit-reproducible, the third defaults to fresh OS entropy, and any kind accepts an
explicit seed or Generator. After sampling, the net linear momentum is removed by
zero_total_momentum. Sampling is done in double precision and stored as float32, with
pscale = cluster_scale * max(1, N/1024) and vscale = velocity_scale * pscale. All masses
must be strictly positive.
"""

from __future__ import annotations

import enum
from typing import Callable, Dict, Tuple
import numpy as np

from .body_state import BodyState
from .physics_utils import total_momentum, zero_total_momentum
from .sim_config import SimConfig




class BodyInitializerKind(enum.IntEnum):
	UNIFORM_CLOUD = 1
	TWO_CLUSTERS = 2
	TWO_CLUSTERS_MASS = 3


_DEFAULT_SEEDS: Dict[BodyInitializerKind, int | None] = {
	BodyInitializerKind.UNIFORM_CLOUD: 42,
	BodyInitializerKind.TWO_CLUSTERS: 42,
	BodyInitializerKind.TWO_CLUSTERS_MASS: None,
}

Z_OFFSET = 50.0
ROTATION_SHEAR = 0.01
MASS_RANGE = (0.7, 1.3)

_UNSET = object()


def _scaled(u: np.ndarray, scale: float = 1.0, location: float = -0.5) -> np.ndarray:
	return (u * scale + location).astype(np.float32)


def _rand(rng: np.random.Generator, shape, scale: float = 1.0, location: float = -0.5) -> np.ndarray:
	return _scaled(rng.random(shape), scale, location)


def _halves(n: int) -> Tuple[slice, slice]:
	return slice(0, n // 2), slice(n // 2, n)


def _cloud_positions(rng, n: int, pscale: np.float32) -> np.ndarray:
	pos = np.empty((n, 4), dtype=np.float32)
	pos[:, 0:3] = pscale * _rand(rng, (n, 3))
	pos[:, 2] += np.float32(Z_OFFSET)
	pos[:, 3] = 1.0
	return pos


def _cloud_velocities(rng, pos: np.ndarray, vscale: np.float32) -> np.ndarray:
	n = len(pos)
	vel = np.empty((n, 4), dtype=np.float32)
	vel[:, 0:3] = vscale * _rand(rng, (n, 3))
	vel[:, 3] = 1.0
	return vel


def _cluster_positions(rng, n: int, pscale: np.float32, *, with_mass: bool = False) -> np.ndarray:
	# x, y, z (and mass) are drawn body by body
	u = rng.random((n, 4 if with_mass else 3))
	pos = np.empty((n, 4), dtype=np.float32)
	pos[:, 0:3] = pscale * _scaled(u[:, 0:3])
	first, second = _halves(n)
	pos[first, 0] += np.float32(0.5) * pscale
	pos[second, 0] -= np.float32(0.5) * pscale
	pos[:, 2] += np.float32(Z_OFFSET)
	if with_mass:
		lo, hi = MASS_RANGE
		pos[:, 3] = _scaled(u[:, 3], hi - lo, lo)
	else:
		pos[:, 3] = 1.0
	return pos


def _cluster_velocities(rng, pos: np.ndarray, vscale: np.float32, *, with_mass: bool = False) -> np.ndarray:
	n = len(pos)
	vel = np.empty((n, 4), dtype=np.float32)
	vel[:, 0:3] = vscale * _rand(rng, (n, 3))
	shear = np.float32(ROTATION_SHEAR) * vscale * pos[:, 0] * pos[:, 0]
	first, second = _halves(n)
	vel[first, 1] += shear[first]
	vel[second, 1] -= shear[second]
	if with_mass:
		vel[:, 3] = pos[:, 3]
	else:
		vel[:, 3] = 1.0
	return vel


def _mass_cluster_positions(rng, n, pscale):
	return _cluster_positions(rng, n, pscale, with_mass=True)


def _mass_cluster_velocities(rng, pos, vscale):
	return _cluster_velocities(rng, pos, vscale, with_mass=True)


_SAMPLERS: Dict[BodyInitializerKind, Tuple[Callable, Callable]] = {
	BodyInitializerKind.UNIFORM_CLOUD: (_cloud_positions, _cloud_velocities),
	BodyInitializerKind.TWO_CLUSTERS: (_cluster_positions, _cluster_velocities),
	BodyInitializerKind.TWO_CLUSTERS_MASS: (_mass_cluster_positions, _mass_cluster_velocities),
}


def make_rng(kind, seed=_UNSET) -> np.random.Generator:
	if isinstance(seed, np.random.Generator):
		return seed
	if seed is _UNSET:
		seed = _DEFAULT_SEEDS[BodyInitializerKind(kind)]
	return np.random.default_rng(seed)


def initialize(
	kind,
	cfg: SimConfig,
	seed=_UNSET,
) -> Tuple[np.ndarray, np.ndarray]:
	kind = BodyInitializerKind(kind)
	n = int(cfg.num_bodies)
	rng = make_rng(kind, seed)
	pscale = np.float32(cfg.pscale)
	vscale = np.float32(cfg.vscale)

	sample_positions, sample_velocities = _SAMPLERS[kind]
	positions = sample_positions(rng, n, pscale)
	velocities = sample_velocities(rng, positions, vscale)

	# adjust velocities so that total momentum is zero
	if cfg.verbose:
		print(f"[info] total momentum and mass 0 = {total_momentum(velocities)}")
	velocities = zero_total_momentum(velocities)
	if cfg.verbose:
		print(f"[info] total momentum and mass 1 = {total_momentum(velocities)}")

	return positions, velocities


def initial_state(kind, cfg: SimConfig, seed=_UNSET) -> BodyState:
	positions, velocities = initialize(kind, cfg, seed)
	return BodyState(positions, velocities)
