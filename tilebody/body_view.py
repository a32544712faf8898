"""
This module implements BodyView, a proxy class providing attribute access to a single
body stored in a BodyState's float32 arrays.

Properties map x, y, z and w onto the position record and vx, vy, vz and mass onto the
velocity record of the parent state, so a body can be inspected or nudged without
copying. Values are read as Python floats and written back through the float32 arrays.
The view assumes the parent state keeps its arrays and that the index stays in range.
"""

from __future__ import annotations
from typing import TYPE_CHECKING
if TYPE_CHECKING:
    from .body_state import BodyState




def _pos_component(col: int):
	def getter(self) -> float:
		return float(self._state._pos[self._i, col])

	def setter(self, v: float) -> None:
		self._state._pos[self._i, col] = v

	return property(getter, setter)


def _vel_component(col: int):
	def getter(self) -> float:
		return float(self._state._vel[self._i, col])

	def setter(self, v: float) -> None:
		self._state._vel[self._i, col] = v

	return property(getter, setter)


class BodyView:
	__slots__ = ("_state", "_i")

	def __init__(self, state: "BodyState", idx: int) -> None:
		self._state = state
		self._i = int(idx)

	x = _pos_component(0)
	y = _pos_component(1)
	z = _pos_component(2)
	w = _pos_component(3)

	vx = _vel_component(0)
	vy = _vel_component(1)
	vz = _vel_component(2)
	mass = _vel_component(3)

	@property
	def index(self) -> int:
		return self._i

	@property
	def momentum(self):
		m = self.mass
		return (self.vx * m, self.vy * m, self.vz * m, m)

	def __repr__(self) -> str:
		return (f"Body(mass={self.mass}, x={self.x}, y={self.y}, z={self.z}, "
				f"vx={self.vx}, vy={self.vy}, vz={self.vz})")
