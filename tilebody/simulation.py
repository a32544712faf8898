"""
This module provides NBodySimulation, the driver a renderer talks to.

The class owns one BodyState, a persistent ping-pong pair of position buffers and a
rotating queue of integrators. step() advances the system by exactly one step with the
current integrator, reading the front buffer and publishing the result by swapping, so
positions() always hands out a complete snapshot and never a half-updated step.
switch_integrator() moves the current integrator to the back of the queue and takes the
next one, which lets a display loop compare block sizes live. A frame counter and a
stopwatch produce a throughput description refreshed every fps_calc_lag frames. The
driver defaults to 256*64 bodies drawn from the mass-varying two-cluster initializer and
to host-tiled integrators with block sizes 256, 64, 128, 256 and 512.
"""

from __future__ import annotations
import collections
import time
from typing import Deque, Iterable, Optional

import numpy as np

from .body_state import BodyState
from .buffers import PositionBuffers
from .harness_constants import DISPLAY_BODIES
from .initializers import BodyInitializerKind, initial_state
from .integrator import Integrator
from .sim_config import SimConfig




def default_integrators(block_sizes: Iterable[int] = (256, 64, 128, 256, 512)) -> list:
	from .tiled_integrator import TiledIntegrator
	return [TiledIntegrator(b) for b in block_sizes]


class NBodySimulation:

	def __init__(
		self,
		cfg: Optional[SimConfig] = None,
		integrators: Optional[Iterable[Integrator]] = None,
		*,
		kind=BodyInitializerKind.TWO_CLUSTERS_MASS,
		state: Optional[BodyState] = None,
		fps_calc_lag: int = 128,
	) -> None:
		self.cfg: SimConfig = cfg or SimConfig(num_bodies=DISPLAY_BODIES)
		if integrators is None:
			integrators = default_integrators()
		self._integrators: Deque[Integrator] = collections.deque(integrators)
		if not self._integrators:
			raise ValueError("NBodySimulation needs at least one integrator")
		self._integrator = self._integrators.popleft()

		if state is None:
			state = initial_state(kind, self.cfg)
		self._state = state
		self._buffers = PositionBuffers(state.pos)

		self.fps_calc_lag = max(1, int(fps_calc_lag))
		self.frame_counter = 0
		self.total_steps = 0
		self._t0 = time.perf_counter()
		self.title = ""
		self.describe()

	@property
	def integrator(self) -> Integrator:
		return self._integrator

	@property
	def n_bodies(self) -> int:
		return self._state.n_bodies

	def step(self) -> None:
		self._integrator.step_buffers(self._buffers, self._state.vel, self.cfg)
		self.total_steps += 1
		self.frame_counter += 1
		if self.frame_counter >= self.fps_calc_lag:
			self.describe()
			self.frame_counter = 0

	def run(self, n_steps: int) -> None:
		for _ in range(int(n_steps)):
			self.step()

	def positions(self) -> np.ndarray:
		return self._buffers.snapshot()

	def commit_state(self) -> BodyState:
		self._state.pos = self._buffers.front
		return self._state

	def switch_integrator(self) -> Integrator:
		self._integrators.append(self._integrator)
		self._integrator = self._integrators.popleft()
		self.frame_counter = 0
		self.describe()
		return self._integrator

	def describe(self) -> str:
		elapsed = time.perf_counter() - self._t0
		if elapsed > 0.0:
			fps = self.frame_counter / elapsed
		else:
			fps = 0.0
		self.title = f"bodies {self.n_bodies}, {self._integrator.description}, fps {fps:.1f}"
		self._t0 = time.perf_counter()
		if self.cfg.verbose:
			print(f"[info] {self.title}")
		return self.title
