import time
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Sequence
import numpy as np
import pandas as pd

from .body_state import BodyState
from .errors import EquivalenceError
from .harness_constants import (
	BENCHMARK_BLOCK_SIZES,
	CORRECTNESS_BODIES,
	PERFORMANCE_STEPS,
	TEST_STEPS,
	TOLERANCE,
)
from .initializers import BodyInitializerKind, initial_state
from .integrator import Integrator
from .sim_config import SimConfig

"""
This module drives two integrators against each other and measures throughput. check_equivalence builds one initial state with the chosen initializer, then for each of TEST_STEPS steps copies the expected state into the actual one, advances both by a single step and compares every body's x, y, z and w within TOLERANCE; every coordinate outside tolerance is recorded as a Violation rather than stopping at the first one. check_equivalence_all runs the uniform cloud and the mass-varying two-cluster states, which is where tiling-order bugs show up. EquivalenceReport exposes the result as a pandas DataFrame and can raise EquivalenceError. measure_performance times PERFORMANCE_STEPS steps of one integrator from a uniform cloud without any checking, and benchmark collects several such measurements into a DataFrame that save_results exports to CSV. Progress is printed when show_progress is set.


"""

COMPONENTS = ("x", "y", "z", "w")


def harness_config(num_bodies: int, steps: int = TEST_STEPS, **overrides) -> SimConfig:
	return SimConfig(
		cluster_scale=1.0,
		velocity_scale=1.0,
		num_bodies=int(num_bodies),
		delta_time=0.001,
		softening_squared=0.00125,
		damping=0.9995,
		steps=int(steps),
		**overrides,
	)


@dataclass
class Violation:
	step: int
	body: int
	component: str
	expected: float
	actual: float

	@property
	def error(self) -> float:
		return abs(self.actual - self.expected)


@dataclass
class EquivalenceReport:
	expected: str
	actual: str
	initializer: str
	num_bodies: int
	steps: int
	tolerance: float
	violations: List[Violation] = field(default_factory=list)
	max_error: float = 0.0

	@property
	def passed(self) -> bool:
		return not self.violations

	def to_frame(self) -> pd.DataFrame:
		return pd.DataFrame(
			[vars(v) for v in self.violations],
			columns=["step", "body", "component", "expected", "actual"],
		)

	def raise_for_violations(self) -> None:
		if self.violations:
			raise EquivalenceError(self.violations)


@dataclass
class PerformanceResult:
	description: str
	num_bodies: int
	steps: int
	seconds: float

	@property
	def steps_per_second(self) -> float:
		if self.seconds <= 0.0:
			return float("inf")
		return self.steps / self.seconds

	@property
	def interactions_per_second(self) -> float:
		return float(self.num_bodies) ** 2 * self.steps_per_second

	def as_dict(self) -> dict:
		return {
			"description": self.description,
			"num_bodies": self.num_bodies,
			"steps": self.steps,
			"seconds": self.seconds,
			"steps_per_second": self.steps_per_second,
			"interactions_per_second": self.interactions_per_second,
		}


def compare_positions(step: int, expected: np.ndarray, actual: np.ndarray, tol: float) -> List[Violation]:
	err = np.abs(actual.astype(np.float64) - expected.astype(np.float64))
	# NaN never compares <= tol
	bad = ~(err <= tol)
	out = []
	for body, col in zip(*np.nonzero(bad)):
		out.append(Violation(
			step=step,
			body=int(body),
			component=COMPONENTS[col],
			expected=float(expected[body, col]),
			actual=float(actual[body, col]),
		))
	return out


def check_equivalence(
	kind,
	expected: Integrator,
	actual: Integrator,
	num_bodies: int,
	cfg: Optional[SimConfig] = None,
	*,
	seed=None,
	resync: bool = True,
	show_progress: bool = False,
) -> EquivalenceReport:
	kind = BodyInitializerKind(kind)
	if cfg is None:
		cfg = harness_config(num_bodies)
	elif cfg.num_bodies != num_bodies:
		cfg = cfg.replace(num_bodies=int(num_bodies))
	tol = TOLERANCE

	if show_progress:
		print(f"Testing {actual.description} against {expected.description} with {num_bodies} bodies...")
		print(f"Using body initializer {kind.name}...")

	if seed is None:
		expected_state = initial_state(kind, cfg)
	else:
		expected_state = initial_state(kind, cfg, seed)
	actual_state = expected_state.copy()

	report = EquivalenceReport(
		expected=expected.description,
		actual=actual.description,
		initializer=kind.name,
		num_bodies=int(num_bodies),
		steps=int(cfg.steps),
		tolerance=tol,
	)

	for step in range(cfg.steps):
		if resync:
			actual_state.copy_from(expected_state)
		expected.integrate(expected_state, cfg, 1)
		actual.integrate(actual_state, cfg, 1)

		err = np.abs(actual_state.pos.astype(np.float64) - expected_state.pos.astype(np.float64))
		report.max_error = max(report.max_error, float(err.max(initial=0.0)))
		report.violations.extend(compare_positions(step, expected_state.pos, actual_state.pos, tol))

	if show_progress:
		if report.passed:
			print(f"  passed, max error {report.max_error:.3e}")
		else:
			print(f"[error] {len(report.violations)} coordinate(s) outside tolerance {tol}")
	return report


def check_equivalence_all(
	expected: Integrator,
	actual: Integrator,
	num_bodies: int,
	cfg: Optional[SimConfig] = None,
	**kwargs,
) -> List[EquivalenceReport]:
	return [
		check_equivalence(kind, expected, actual, num_bodies, cfg, **kwargs)
		for kind in (BodyInitializerKind.UNIFORM_CLOUD, BodyInitializerKind.TWO_CLUSTERS_MASS)
	]


def measure_performance(
	integrator: Integrator,
	num_bodies: int,
	cfg: Optional[SimConfig] = None,
	*,
	show_progress: bool = False,
) -> PerformanceResult:
	if cfg is None:
		cfg = harness_config(num_bodies, steps=PERFORMANCE_STEPS)
	elif cfg.num_bodies != num_bodies:
		cfg = cfg.replace(num_bodies=int(num_bodies))

	if show_progress:
		print(f"Performancing {integrator.description} with {num_bodies} bodies...")

	state = initial_state(BodyInitializerKind.UNIFORM_CLOUD, cfg)
	t0 = time.perf_counter()
	integrator.integrate(state, cfg, cfg.steps)
	elapsed = time.perf_counter() - t0

	result = PerformanceResult(integrator.description, int(num_bodies), int(cfg.steps), elapsed)
	if show_progress:
		print(f"  {result.steps_per_second:.2f} steps/s, {result.interactions_per_second:.3e} interactions/s")
	return result


def benchmark(
	integrators: Iterable[Integrator],
	num_bodies: int,
	cfg: Optional[SimConfig] = None,
	*,
	show_progress: bool = False,
) -> pd.DataFrame:
	rows = []
	for integ in integrators:
		rows.append(measure_performance(integ, num_bodies, cfg, show_progress=show_progress).as_dict())
	return pd.DataFrame(rows)


def block_size_sweep(num_bodies: int, block_sizes: Sequence[int] = BENCHMARK_BLOCK_SIZES, **kwargs) -> pd.DataFrame:
	from .tiled_integrator import TiledIntegrator
	return benchmark([TiledIntegrator(b) for b in block_sizes], num_bodies, **kwargs)


def save_results(frame: pd.DataFrame, filename: str) -> None:
	if frame is None or frame.empty:
		print("[error] No results to save.")
		return
	frame.to_csv(filename, index=False)
	print(f"Saved {len(frame)} results to {filename}")


def main() -> None:
	from .reference_integrator import ReferenceIntegrator
	from .tiled_integrator import TiledIntegrator

	reports = check_equivalence_all(
		ReferenceIntegrator(), TiledIntegrator(256), CORRECTNESS_BODIES, show_progress=True
	)
	frame = block_size_sweep(CORRECTNESS_BODIES, show_progress=True)
	print(frame.to_string(index=False))
	for report in reports:
		report.raise_for_violations()


if __name__ == "__main__":
	main()
