from __future__ import annotations

import os
from typing import Final

"""
This module defines the numerical constants of the equivalence and performance harness. It includes TOLERANCE for the per-coordinate comparison of two integrators, TEST_STEPS for the number of single steps compared, PERFORMANCE_STEPS for the timed batch, and the default block sizes swept by the benchmark. Each value can be overridden through an environment variable so that longer soak runs or looser tolerances can be tried without code changes. It assumes the constants are used consistently across the harness and its tests.


"""




def _parse_float(name: str, default: float) -> float:
	env_val = os.getenv(name, "")
	if env_val.strip() != "":
		try:
			val = float(env_val)
		except ValueError:
			print(f"[warning] ignoring {name}={env_val!r}; expected a float")
			return default
		if val > 0.0:
			return val
		print(f"[warning] ignoring {name}={env_val!r}; expected a positive value")
	return default


def _parse_int(name: str, default: int) -> int:
	env_val = os.getenv(name, "")
	if env_val.strip() != "":
		try:
			val = int(env_val)
		except ValueError:
			print(f"[warning] ignoring {name}={env_val!r}; expected an integer")
			return default
		if val > 0:
			return val
		print(f"[warning] ignoring {name}={env_val!r}; expected a positive value")
	return default




TOLERANCE: Final[float] = _parse_float("TILEBODY_TOLERANCE", 1e-5)
TEST_STEPS: Final[int] = _parse_int("TILEBODY_TEST_STEPS", 5)
PERFORMANCE_STEPS: Final[int] = _parse_int("TILEBODY_PERFORMANCE_STEPS", 10)

CORRECTNESS_BODIES: Final[int] = 256 * 56
DISPLAY_BODIES: Final[int] = 256 * 64
BENCHMARK_BLOCK_SIZES = (64, 128, 256, 512)
