"""
This module implements the shared-memory-tiled integrator on host threads.

The TiledIntegrator class partitions the bodies into blocks of block_size lanes, one lane
per body, and processes the position array in tiles of the same size. Within a block the
lanes run in lockstep as numpy vectors: for every tile they cooperatively store the source
bodies tile*B + k into the block's SharedTile, pass the load barrier, accumulate the
interaction with every resident entry, and pass the consume barrier before the next tile
may be stored. After the last tile each active lane applies the same damped Euler update
as the reference integrator and writes its body into the output position buffer; the
velocity rows of a block are updated in place because no other block reads them. Blocks
are independent and are dispatched to a ThreadPoolExecutor that is created on first use
and kept on the instance until close(); blocks share nothing but the
read-only input buffers. In a partial final block the lanes past the body count do no
work, and tile slots past the body count are never stored or read.
"""

from __future__ import annotations
import os
from concurrent.futures import ThreadPoolExecutor
from typing import TYPE_CHECKING, Optional
import numpy as np

from .buffers import SharedTile, allocate, div_up
from .forces import source_bodies, tile_accelerations
from .integrator import Integrator, advance_bodies

if TYPE_CHECKING:
	from .sim_config import SimConfig




class TiledIntegrator(Integrator):

	def __init__(self, block_size: int = 256, *, max_workers: Optional[int] = None) -> None:
		if int(block_size) < 1:
			raise ValueError(f"block_size must be >= 1, got {block_size}")
		self.block_size = int(block_size)
		if max_workers is None:
			max_workers = os.cpu_count() or 1
		self.max_workers = max(1, int(max_workers))
		self.description = f"TiledIntegrator({self.block_size})"
		self.last_barrier_count = 0
		self._pool: Optional[ThreadPoolExecutor] = None

	def _executor(self) -> ThreadPoolExecutor:
		if self._pool is None:
			self._pool = ThreadPoolExecutor(max_workers=self.max_workers)
		return self._pool

	def close(self) -> None:
		if self._pool is not None:
			self._pool.shutdown(wait=True)
			self._pool = None

	def _run_block(
		self,
		block: int,
		pos_in: np.ndarray,
		pos_out: np.ndarray,
		vel: np.ndarray,
		sources: np.ndarray,
		cfg: "SimConfig",
	) -> int:
		n = len(pos_in)
		B = self.block_size
		first = block * B
		last = min(first + B, n)

		body_pos = pos_in[first:last]
		acc = np.zeros((last - first, 3), dtype=np.float32)
		eps2 = np.float32(cfg.softening_squared)
		tile = SharedTile(allocate((B, 4)))

		for t in range(div_up(n, B)):
			start = t * B
			tile.store(sources[start:min(start + B, n)])
			tile.sync()

			# tile_calculation
			acc += tile_accelerations(eps2, body_pos, tile.view())

			tile.sync()

		new_pos, new_vel = advance_bodies(body_pos, vel[first:last], acc, cfg.delta_time, cfg.damping)
		pos_out[first:last, 0:3] = new_pos
		pos_out[first:last, 3] = body_pos[:, 3]
		vel[first:last, 0:3] = new_vel
		return tile.barriers

	def _step(self, pos_in, pos_out, vel, cfg: "SimConfig") -> None:
		num_blocks = div_up(len(pos_in), self.block_size)
		sources = source_bodies(pos_in, vel)

		if self.max_workers == 1 or num_blocks == 1:
			counts = [
				self._run_block(b, pos_in, pos_out, vel, sources, cfg)
				for b in range(num_blocks)
			]
		else:
			pool = self._executor()
			futures = [
				pool.submit(self._run_block, b, pos_in, pos_out, vel, sources, cfg)
				for b in range(num_blocks)
			]
			counts = [f.result() for f in futures]
		self.last_barrier_count = int(sum(counts))
