"""
This module implements the tiled integrator as a kernel grid on a torch device.

The TorchTiledIntegrator class runs the same block and tile decomposition as the host
TiledIntegrator, but evaluates every block of the grid at once: lanes are laid out as a
(num_blocks, block_size) grid, every block owns its slice of a batched SharedTile, and
each tile is stored, synchronized, consumed and synchronized again for all blocks
together. integrate copies positions and velocities to the device once, ping-pongs two
device position buffers for the whole batch and copies the result back; step_buffers
performs one step on host buffers with a synchronous copy-in and copy-out. Allocation
failures on the device are fatal and raised as BufferAllocationError. The device defaults
to CUDA when available and to the CPU otherwise.
"""

from __future__ import annotations
from typing import TYPE_CHECKING, Optional
import numpy as np
import torch

from .buffers import SharedTile, div_up
from .errors import BufferAllocationError
from .forces import body_body_interaction
from .integrator import Integrator, advance_bodies

if TYPE_CHECKING:
	from .body_state import BodyState
	from .buffers import PositionBuffers
	from .sim_config import SimConfig




def default_device() -> str:
	if torch.cuda.is_available():
		return "cuda"
	return "cpu"


class TorchTiledIntegrator(Integrator):

	def __init__(self, block_size: int = 256, *, device: Optional[str] = None) -> None:
		if int(block_size) < 1:
			raise ValueError(f"block_size must be >= 1, got {block_size}")
		self.block_size = int(block_size)
		self.device = torch.device(device or default_device())
		self.description = f"TorchTiledIntegrator({self.block_size}, {self.device.type})"
		self.last_barrier_count = 0

	def _to_device(self, arr: np.ndarray) -> torch.Tensor:
		try:
			return torch.from_numpy(np.array(arr, dtype=np.float32, copy=True)).to(self.device)
		except torch.cuda.OutOfMemoryError as exc:
			raise BufferAllocationError(f"cannot allocate device buffer of shape {arr.shape}") from exc

	def _empty(self, *shape) -> torch.Tensor:
		try:
			return torch.empty(shape, dtype=torch.float32, device=self.device)
		except torch.cuda.OutOfMemoryError as exc:
			raise BufferAllocationError(f"cannot allocate device buffer of shape {shape}") from exc

	def _device_step(self, pos_in: torch.Tensor, pos_out: torch.Tensor, vel: torch.Tensor, cfg: "SimConfig") -> None:
		n = int(pos_in.shape[0])
		B = self.block_size
		num_blocks = div_up(n, B)
		padded = num_blocks * B

		body_pos = torch.zeros((padded, 4), dtype=torch.float32, device=self.device)
		body_pos[:n] = pos_in
		body_pos = body_pos.view(num_blocks, B, 1, 4)

		sources = torch.cat((pos_in[:, 0:3], vel[:, 3:4]), dim=1)
		acc = torch.zeros((num_blocks, B, 3), dtype=torch.float32, device=self.device)
		tile = SharedTile(self._empty(num_blocks, B, 4))

		for t in range(div_up(n, B)):
			start = t * B
			tile.store(sources[start:min(start + B, n)])
			tile.sync()

			resident = tile.view().unsqueeze(1)
			acc += body_body_interaction(cfg.softening_squared, 0.0, body_pos, resident).sum(2)

			tile.sync()

		# lanes past n are dropped here
		acc = acc.view(padded, 3)[:n]
		new_pos, new_vel = advance_bodies(pos_in, vel, acc, cfg.delta_time, cfg.damping)
		pos_out[:, 0:3] = new_pos
		pos_out[:, 3] = pos_in[:, 3]
		vel[:, 0:3] = new_vel
		self.last_barrier_count = tile.barriers * num_blocks

	def integrate(self, state: "BodyState", cfg: "SimConfig", steps: Optional[int] = None) -> "BodyState":
		if steps is None:
			steps = cfg.steps
		steps = int(steps)
		if state.n_bodies == 0 or steps <= 0:
			return state

		with torch.no_grad():
			pos0 = self._to_device(state.pos)
			pos1 = self._empty(*pos0.shape)
			vel = self._to_device(state.vel)
			for _ in range(steps):
				self._device_step(pos0, pos1, vel, cfg)
				pos0, pos1 = pos1, pos0
			state.pos = pos0.cpu().numpy()
			state.vel = vel.cpu().numpy()
		return state

	def step_buffers(self, buffers: "PositionBuffers", vel: np.ndarray, cfg: "SimConfig") -> None:
		if buffers.n_bodies == 0:
			return
		with torch.no_grad():
			d_in = self._to_device(buffers.front)
			d_out = self._empty(*d_in.shape)
			d_vel = self._to_device(vel)
			self._device_step(d_in, d_out, d_vel, cfg)
			buffers.back[...] = d_out.cpu().numpy()
			vel[...] = d_vel.cpu().numpy()
		buffers.swap()
