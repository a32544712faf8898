"""
This module implements the softened pairwise interaction law shared by every integrator.

body_body_interaction adds the acceleration that a source body j (x, y, z, mass) exerts on
a body i to an accumulator: r = bj.xyz - bi.xyz, dist_sqr = |r|^2 + eps^2,
s = m_j * dist_sqr^(-3/2), a_i + r * s. Mass factors out of the equation of motion, so the
accumulator already is the acceleration. The function only uses arithmetic operators and
trailing-axis slicing, which makes it broadcast over single bodies, lanes of a block and
whole tiles, and lets the same code run on numpy arrays and torch tensors. The self term
is not skipped: for i == j the separation is the exact zero vector, and with a positive
softening constant the product r * s is exactly zero as well. tile_accelerations applies
the law between a set of lanes and a resident tile, and source_bodies builds the source
records with mass taken from the velocity array.
"""

from __future__ import annotations
import numpy as np




def body_body_interaction(softening_squared, ai, bi, bj):
    # r_ij
    r = bj[..., 0:3] - bi[..., 0:3]

    # dist_sqr = dot(r_ij, r_ij) + EPS^2
    dist_sqr = (r[..., 0:1] * r[..., 0:1]
                + r[..., 1:2] * r[..., 1:2]
                + r[..., 2:3] * r[..., 2:3]
                + softening_squared)

    # inv_dist_cube = 1 / dist_sqr^(3/2)
    inv_dist = 1.0 / dist_sqr ** 0.5
    inv_dist_cube = inv_dist * inv_dist * inv_dist

    # s = m_j * inv_dist_cube
    s = bj[..., 3:4] * inv_dist_cube

    return ai + r * s


def tile_accelerations(softening_squared, bodies, tile):
    # bodies: (..., L, 4), tile: (..., T, 4) -> (..., L, 3)
    contrib = body_body_interaction(
        softening_squared, 0.0, bodies[..., :, None, :], tile[..., None, :, :]
    )
    return contrib.sum(-2)


def source_bodies(positions: np.ndarray, velocities: np.ndarray) -> np.ndarray:
    src = np.empty((len(positions), 4), dtype=np.float32)
    src[:, 0:3] = positions[:, 0:3]
    src[:, 3] = velocities[:, 3]
    return src
