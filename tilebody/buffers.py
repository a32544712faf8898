"""
This module provides the buffers the integrators read from and write to.

PositionBuffers is the ping-pong pair of position arrays: a step reads the front buffer
through a read-only view, writes every body into the back buffer, and swap() exchanges the
roles, so the output of a step never aliases its input and a renderer always sees a
complete snapshot in front. SharedTile is the block-local tile of the tiled integrators:
it alternates between a load phase, in which lanes may only store source bodies, and a
compute phase, in which lanes may only read the resident entries, with sync() as the
barrier between the two. ensure_buffer keeps growable scratch arrays on an owner object,
reallocating with 1.5x row headroom only when the requested rows no longer fit, and
allocate turns allocation failures into BufferAllocationError.
"""

from __future__ import annotations
import math
from typing import Callable, Optional, Tuple
import numpy as np

from .errors import BufferAllocationError, TileProtocolError




def allocate(shape, dtype=np.float32, *, factory: Optional[Callable] = None):
	if factory is None:
		factory = np.empty
	try:
		return factory(shape, dtype=dtype)
	except MemoryError as exc:
		raise BufferAllocationError(f"cannot allocate buffer of shape {shape}") from exc


def div_up(num: int, den: int) -> int:
	return (num + den - 1) // den


def ensure_buffer(
	owner,
	name: str,
	shape: Tuple[int, int],
	*,
	dtype: np.dtype | str = np.float32,
) -> np.ndarray:
	rows = max(int(shape[0]), 0)
	cols = max(int(shape[1]), 0)

	buf = getattr(owner, name, None)
	req_dtype = np.dtype(dtype)

	need_realloc = True
	if isinstance(buf, np.ndarray) and buf.ndim == 2 and buf.dtype == req_dtype:
		if buf.shape[0] >= rows and buf.shape[1] == cols:
			need_realloc = False

	if need_realloc:
		new_rows = max(int(math.ceil(rows * 1.5)), rows)
		buf = allocate((new_rows, cols), req_dtype)
		setattr(owner, name, buf)

	return buf[:rows, :cols]


class PositionBuffers:

	def __init__(self, positions: np.ndarray) -> None:
		front = np.asarray(positions, dtype=np.float32)
		self._front = allocate(front.shape)
		self._front[...] = front
		self._back = allocate(front.shape)
		self._back[...] = front
		self.swaps = 0

	@property
	def n_bodies(self) -> int:
		return int(self._front.shape[0])

	@property
	def front(self) -> np.ndarray:
		view = self._front.view()
		view.flags.writeable = False
		return view

	@property
	def back(self) -> np.ndarray:
		return self._back

	def swap(self) -> None:
		self._front, self._back = self._back, self._front
		self.swaps += 1

	def snapshot(self) -> np.ndarray:
		return self._front.copy()


class SharedTile:
	LOAD = "load"
	COMPUTE = "compute"

	def __init__(self, storage) -> None:
		self._storage = storage
		self._count = 0
		self.phase = SharedTile.LOAD
		self.barriers = 0

	@property
	def capacity(self) -> int:
		return int(self._storage.shape[-2])

	def store(self, values) -> None:
		if self.phase != SharedTile.LOAD:
			raise TileProtocolError("tile store before the consume barrier")
		count = int(values.shape[-2])
		if count > self.capacity:
			raise TileProtocolError(
				f"tile of {count} entries does not fit {self.capacity} slots"
			)
		self._storage[..., :count, :] = values
		self._count = count

	def sync(self) -> None:
		if self.phase == SharedTile.LOAD:
			self.phase = SharedTile.COMPUTE
		else:
			self.phase = SharedTile.LOAD
		self.barriers += 1

	def view(self):
		if self.phase != SharedTile.COMPUTE:
			raise TileProtocolError("tile read before the load barrier")
		return self._storage[..., :self._count, :]
