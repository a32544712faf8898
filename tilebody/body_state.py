"""
This module manages the internal state representation of an N-body run.

The BodyState class holds two float32 arrays of shape (N, 4): positions (x, y, z, w) and
velocities (vx, vy, vz, mass), indexed 1:1 by body id. Mass lives in the fourth velocity
component and is the value every integrator uses; position.w is carried along untouched.
The class provides property accessors with validation, construction from arbitrary array
likes, copies for the harness, in-memory snapshot/restore, and Body-like views of single
bodies. Setters refuse shape changes so that the row count stays equal to n_bodies for
the lifetime of a run. It assumes all masses are strictly positive; this is documented,
not enforced, since a zero mass only surfaces as NaN during momentum zeroing.
"""

from __future__ import annotations
import numpy as np
from typing import List, TYPE_CHECKING

if TYPE_CHECKING:
    from .body_view import BodyView


DTYPE = np.float32
RECORD_WIDTH = 4




def _as_records(value, name: str) -> np.ndarray | None:
	arr = np.asarray(value, dtype=DTYPE)
	if arr.ndim == 1 and arr.size % RECORD_WIDTH == 0:
		arr = arr.reshape(-1, RECORD_WIDTH)
	if arr.ndim != 2 or arr.shape[1] != RECORD_WIDTH:
		print(f"[error] {name} must be shape (N,4) or flat length 4N, got {arr.shape}")
		return None
	return arr


class BodyState:

	def __init__(self, positions=None, velocities=None):
		self.n_bodies: int = 0
		self._pos: np.ndarray = np.empty((0, RECORD_WIDTH), dtype=DTYPE)
		self._vel: np.ndarray = np.empty((0, RECORD_WIDTH), dtype=DTYPE)
		if positions is not None or velocities is not None:
			if not self.build_state(positions, velocities):
				raise ValueError("positions and velocities must both be (N,4) with equal N")

	@classmethod
	def empty(cls, n_bodies: int) -> "BodyState":
		state = cls()
		state.n_bodies = int(n_bodies)
		state._pos = np.zeros((state.n_bodies, RECORD_WIDTH), dtype=DTYPE)
		state._vel = np.zeros((state.n_bodies, RECORD_WIDTH), dtype=DTYPE)
		return state

	@property
	def pos(self) -> np.ndarray:
		return self._pos

	@property
	def vel(self) -> np.ndarray:
		return self._vel

	@property
	def mass(self) -> np.ndarray:
		return self._vel[:, 3]



	@pos.setter
	def pos(self, value) -> None:
		arr = _as_records(value, "state.pos")
		if arr is None:
			return
		if arr.shape != self._pos.shape:
			print(f"[error] shape mismatch when assigning to state.pos: "
				  f"expected {self._pos.shape}, got {arr.shape}")
			return
		self._pos[...] = arr

	@vel.setter
	def vel(self, value) -> None:
		arr = _as_records(value, "state.vel")
		if arr is None:
			return
		if arr.shape != self._vel.shape:
			print(f"[error] shape mismatch when assigning to state.vel: "
				  f"expected {self._vel.shape}, got {arr.shape}")
			return
		self._vel[...] = arr

	def build_state(self, positions, velocities) -> bool:
		if positions is None or velocities is None:
			return False
		pos = _as_records(positions, "positions")
		vel = _as_records(velocities, "velocities")
		if pos is None or vel is None:
			return False
		if pos.shape[0] != vel.shape[0]:
			print(f"[error] positions and velocities differ in length: "
				  f"{pos.shape[0]} vs {vel.shape[0]}")
			return False
		self.n_bodies = int(pos.shape[0])
		self._pos = np.array(pos, dtype=DTYPE, copy=True)
		self._vel = np.array(vel, dtype=DTYPE, copy=True)
		return True

	def copy(self) -> "BodyState":
		return BodyState(self._pos.copy(), self._vel.copy())

	def copy_from(self, other: "BodyState") -> None:
		self.pos = other.pos
		self.vel = other.vel

	def body(self, idx: int) -> "BodyView":
		from .body_view import BodyView
		if not -self.n_bodies <= idx < self.n_bodies:
			raise IndexError(f"body index {idx} out of range for {self.n_bodies} bodies")
		return BodyView(self, idx % self.n_bodies)

	@property
	def bodies(self) -> List["BodyView"]:
		return [self.body(i) for i in range(self.n_bodies)]

	def snapshot(self) -> dict:
		return {
			"n_bodies": self.n_bodies,
			"positions": self._pos.copy(),
			"velocities": self._vel.copy(),
		}

	@staticmethod
	def restore(snap: dict) -> "BodyState":
		return BodyState(snap["positions"], snap["velocities"])

	def __len__(self) -> int:
		return self.n_bodies

	def __repr__(self) -> str:
		return f"BodyState(n_bodies={self.n_bodies})"
