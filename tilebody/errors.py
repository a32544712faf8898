"""
Exception types raised by the tilebody engine.

Numeric precondition violations (for instance a zero mass in momentum zeroing) are
deliberately not represented here: they surface as NaN or Inf in the state and are the
caller's responsibility. What remains are the fatal conditions of the tiled backends and
the equivalence failures reported by the harness.
"""

from __future__ import annotations
from typing import Sequence, TYPE_CHECKING

if TYPE_CHECKING:
	from .harness import Violation


class TilebodyError(Exception):
	pass


class BufferAllocationError(TilebodyError, MemoryError):
	"""A position buffer, scratch array or shared tile could not be allocated."""


class TileProtocolError(TilebodyError, RuntimeError):
	"""A shared tile was read before its load barrier or written before its consume barrier."""


class EquivalenceError(TilebodyError, AssertionError):

	def __init__(self, violations: Sequence["Violation"], *, limit: int = 10) -> None:
		self.violations = list(violations)
		lines = [f"{len(self.violations)} coordinate(s) outside tolerance"]
		for v in self.violations[:limit]:
			lines.append(
				f"  step {v.step} body {v.body} {v.component}: "
				f"expected {v.expected!r}, actual {v.actual!r}"
			)
		if len(self.violations) > limit:
			lines.append(f"  ... {len(self.violations) - limit} more")
		super().__init__("\n".join(lines))
