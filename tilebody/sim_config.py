from __future__ import annotations
from dataclasses import dataclass, replace

"""
This central configuration module defines all run parameters through the SimConfig dataclass. Key parameters include the cluster and velocity scales used by the body initializers, the body count, the time step, the softening constant added to every squared pair distance, the per-step velocity damping factor, and the step count of a batch. Execution parameters select the integrator (sequential reference, host-tiled or torch-tiled), the block size of the tiled integrators, the worker count of the host thread pool and the torch device. diag_print_limit and diag_print_interval bound the rate-limited diagnostic prints. The derived pscale and vscale properties reproduce the scaling rule of the initializers. The class is frozen so a run cannot change its configuration halfway; copy and replace return new instances. Validation rejects negative body counts, non-positive softening (which would turn the self term of the interaction law into NaN) and unknown integrator modes.

"""
_ALLOWED_MODES = {
	"reference",
	"tiled",
	"torch",
}

@dataclass(frozen=True)
class SimConfig:
	cluster_scale:     float = 1.0
	velocity_scale:    float = 1.0
	num_bodies:        int = 256 * 56
	delta_time:        float = 0.001
	softening_squared: float = 0.00125
	damping:           float = 0.9995
	steps:             int = 5
	block_size:        int = 256
	integrator_mode:   str = "tiled"
	max_workers:       int | None = None
	device:            str | None = None
	verbose:           bool = False
	diag_print_limit:    int = 3
	diag_print_interval: int = 1000

	def __post_init__(self) -> None:
		if int(self.num_bodies) < 0:
			raise ValueError(f"num_bodies must be >= 0, got {self.num_bodies}")
		if not float(self.softening_squared) > 0.0:
			raise ValueError(
				f"softening_squared must be > 0, got {self.softening_squared}"
			)
		if int(self.block_size) < 1:
			raise ValueError(f"block_size must be >= 1, got {self.block_size}")
		if int(self.steps) < 0:
			raise ValueError(f"steps must be >= 0, got {self.steps}")
		if int(self.diag_print_limit) < 0 or int(self.diag_print_interval) < 1:
			raise ValueError(
				f"diag_print_limit must be >= 0 and diag_print_interval >= 1, "
				f"got {self.diag_print_limit} and {self.diag_print_interval}"
			)
		if self.integrator_mode not in _ALLOWED_MODES:
			raise ValueError(
				f"integrator_mode must be one of {sorted(_ALLOWED_MODES)}, "
				f"got {self.integrator_mode!r}"
			)

	@property
	def pscale(self) -> float:
		return self.cluster_scale * max(1.0, self.num_bodies / 1024.0)

	@property
	def vscale(self) -> float:
		return self.velocity_scale * self.pscale

	def copy(self) -> "SimConfig":
		return replace(self)

	def replace(self, **changes) -> "SimConfig":
		return replace(self, **changes)
