from __future__ import annotations
import numpy as np
from typing import TYPE_CHECKING
from .physics_utils import total_momentum
if TYPE_CHECKING:
    from .body_state import BodyState
    from .sim_config import SimConfig

"""
This module computes conserved quantities and health checks for a BodyState. The Diagnostics class provides total linear momentum and total mass (the sums used by momentum zeroing), a momentum residual normalized by total mass for the post-initialization check, the center of mass position and velocity, the kinetic energy, and a finiteness check that catches the NaN/Inf produced by violated preconditions such as a zero mass. Quantities are accumulated in double precision from the float32 state. Warnings go through a rate-limited print so long runs do not flood the console; the limit and interval come from the run configuration when one is attached.

"""




class Diagnostics:
	_GLOBAL_DIAG_COUNTS = {}

	def __init__(self, state: "BodyState", cfg: "SimConfig" | None = None):
		self.state = state
		self.cfg = cfg

	def total_momentum(self) -> np.ndarray:
		return total_momentum(self.state.vel)

	def total_mass(self) -> float:
		return float(np.sum(self.state.mass, dtype=np.float64))

	def momentum_residual(self) -> float:
		m_tot = self.total_mass()
		if self.state.n_bodies == 0 or m_tot == 0.0:
			return 0.0
		vel = self.state.vel.astype(np.float64)
		p = np.sum(vel[:, 0:3] * vel[:, 3:4], axis=0)
		return float(np.max(np.abs(p)) / m_tot)

	def center_of_mass(self):
		if self.state.n_bodies == 0:
			return np.zeros(3), np.zeros(3)
		m = self.state.mass.astype(np.float64)
		M = float(np.sum(m))
		if M == 0.0:
			return np.zeros(3), np.zeros(3)
		pos = self.state.pos[:, 0:3].astype(np.float64)
		vel = self.state.vel[:, 0:3].astype(np.float64)
		r_cm = np.einsum("i,ij->j", m, pos) / M
		v_cm = np.einsum("i,ij->j", m, vel) / M
		return r_cm, v_cm

	def kinetic_energy(self) -> float:
		vel = self.state.vel.astype(np.float64)
		return 0.5 * float(np.sum(vel[:, 3] * np.sum(vel[:, 0:3] ** 2, axis=1)))

	def is_finite(self) -> bool:
		ok = bool(np.all(np.isfinite(self.state.pos)) and np.all(np.isfinite(self.state.vel)))
		if not ok:
			self._rate_limited_diag_print("non_finite", "[diag] non-finite values in body state")
		return ok

	def _rate_limited_diag_print(self, key: str, msg: str) -> None:
		cfg = self.cfg
		if cfg is None:
			limit, interval = 3, 1000
		else:
			if not cfg.verbose:
				return
			limit = int(cfg.diag_print_limit)
			interval = max(1, int(cfg.diag_print_interval))

		counts = Diagnostics._GLOBAL_DIAG_COUNTS
		c = counts.get(key, 0) + 1
		counts[key] = c

		if c <= limit:
			print(msg)
		elif c % interval == 0:
			print(f"{msg} (occurrence #{c})")
