"""
This module implements the sequential reference integrator.

The ReferenceIntegrator class advances the system in two strictly ordered passes. Pass one
accumulates, for every body, the interaction with every source body in ascending index
order (the self term included, which the law makes exactly zero), using only the pre-step
positions. Pass two applies the damped semi-implicit Euler update to every body and writes
the new positions into the output buffer. Bodies are processed as numpy lanes within each
pass, but the per-body summation order is the plain ascending loop over sources, which is
what the tiled integrators are checked against. The acceleration scratch array is kept on
the instance and reused across steps.
"""

from __future__ import annotations
from typing import TYPE_CHECKING
import numpy as np

from .buffers import ensure_buffer
from .forces import body_body_interaction, source_bodies
from .integrator import Integrator, advance_bodies

if TYPE_CHECKING:
	from .sim_config import SimConfig




class ReferenceIntegrator(Integrator):

	def __init__(self) -> None:
		self.description = "ReferenceIntegrator"
		self._acc = None

	def accelerations(self, pos: np.ndarray, vel: np.ndarray, softening_squared: float) -> np.ndarray:
		n = len(pos)
		acc = ensure_buffer(self, "_acc", (n, 3))
		acc[...] = 0.0
		eps2 = np.float32(softening_squared)
		sources = source_bodies(pos, vel)
		for j in range(n):
			np.add(acc, body_body_interaction(eps2, 0.0, pos, sources[j]), out=acc)
		return acc

	def _step(self, pos_in, pos_out, vel, cfg: "SimConfig") -> None:
		# pass 1 must finish before any body moves
		acc = self.accelerations(pos_in, vel, cfg.softening_squared)

		# pass 2
		new_pos, new_vel = advance_bodies(pos_in, vel, acc, cfg.delta_time, cfg.damping)
		pos_out[:, 0:3] = new_pos
		pos_out[:, 3] = pos_in[:, 3]
		vel[:, 0:3] = new_vel
