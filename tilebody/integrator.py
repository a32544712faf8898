from __future__ import annotations
from typing import TYPE_CHECKING, Optional
import numpy as np

from .buffers import PositionBuffers

if TYPE_CHECKING:
	from .body_state import BodyState
	from .sim_config import SimConfig

"""
This central module defines the Integrator capability shared by the sequential reference and the tiled integrators. Two entry points are provided: integrate advances a BodyState in place by a batch of steps through a private ping-pong pair of position buffers, and step_buffers performs exactly one step on caller-owned buffers (reading front, writing back, then swapping) for drivers that keep their buffers across frames. Concrete integrators only implement _step, which must read every force contribution from the pre-step positions and write the new positions into a distinct output array. advance_bodies is the semi-implicit Euler update with velocity damping that all of them apply once the accelerations are known, and make_integrator selects the concrete integrator from the configured mode. The harness and the renderer-facing driver depend only on this capability, never on a concrete class.

"""

def advance_bodies(
	positions: np.ndarray,
	velocities: np.ndarray,
	accel: np.ndarray,
	delta_time: float,
	damping: float,
):
	# acceleration = force / mass; mass cancels in body_body_interaction
	vel = (velocities[..., 0:3] + accel * delta_time) * damping
	pos = positions[..., 0:3] + vel * delta_time
	return pos, vel


class Integrator:
	description: str = "Integrator"

	def integrate(
		self,
		state: "BodyState",
		cfg: "SimConfig",
		steps: Optional[int] = None,
	) -> "BodyState":
		if steps is None:
			steps = cfg.steps
		steps = int(steps)
		if state.n_bodies == 0 or steps <= 0:
			return state

		buffers = PositionBuffers(state.pos)
		for _ in range(steps):
			self.step_buffers(buffers, state.vel, cfg)
		state.pos = buffers.front
		return state

	def step_buffers(
		self,
		buffers: PositionBuffers,
		vel: np.ndarray,
		cfg: "SimConfig",
	) -> None:
		if buffers.n_bodies == 0:
			return
		self._step(buffers.front, buffers.back, vel, cfg)
		buffers.swap()

	def _step(self, pos_in, pos_out, vel, cfg: "SimConfig") -> None:
		raise NotImplementedError

	def __repr__(self) -> str:
		return self.description


def make_integrator(cfg: "SimConfig") -> Integrator:
	mode = cfg.integrator_mode
	if mode == "reference":
		from .reference_integrator import ReferenceIntegrator
		return ReferenceIntegrator()
	if mode == "torch":
		from .torch_integrator import TorchTiledIntegrator
		return TorchTiledIntegrator(cfg.block_size, device=cfg.device)
	from .tiled_integrator import TiledIntegrator
	return TiledIntegrator(cfg.block_size, max_workers=cfg.max_workers)
