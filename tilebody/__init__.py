"""
This initialization file serves as the main entry point for the tilebody package,
exposing its public API through a single namespace.

It re-exports the run configuration (SimConfig), the body state containers (BodyState,
BodyView), the ping-pong position buffers and the shared tile used by the tiled
integrators, the initial condition entry points (BodyInitializerKind, initialize,
initial_state), the softened interaction law, the integrator capability with its
sequential, host-tiled and torch-tiled implementations, diagnostics, the equivalence and
performance harness, the renderer-facing NBodySimulation driver and the exception types.
The torch backend is imported lazily so that the numpy integrators stay usable in
environments where torch is slow to import.
"""

from .sim_config import SimConfig
from .errors import (
    TilebodyError,
    BufferAllocationError,
    TileProtocolError,
    EquivalenceError,
)
from .body_state import BodyState
from .body_view import BodyView
from .buffers import PositionBuffers, SharedTile, allocate, ensure_buffer, div_up
from .physics_utils import momentum, total_momentum, zero_total_momentum
from .forces import body_body_interaction, tile_accelerations, source_bodies
from .initializers import BodyInitializerKind, initialize, initial_state
from .integrator import Integrator, advance_bodies, make_integrator
from .reference_integrator import ReferenceIntegrator
from .tiled_integrator import TiledIntegrator
from .diagnostics import Diagnostics
from .harness import (
    Violation,
    EquivalenceReport,
    PerformanceResult,
    check_equivalence,
    check_equivalence_all,
    measure_performance,
    benchmark,
    block_size_sweep,
    save_results,
)
from .simulation import NBodySimulation


def __getattr__(name):
    if name == "TorchTiledIntegrator":
        from .torch_integrator import TorchTiledIntegrator
        return TorchTiledIntegrator
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")




__all__ = [
    "SimConfig",
    "TilebodyError",
    "BufferAllocationError",
    "TileProtocolError",
    "EquivalenceError",
    "BodyState",
    "BodyView",
    "PositionBuffers",
    "SharedTile",
    "ensure_buffer",
    "allocate",
    "div_up",
    "momentum",
    "total_momentum",
    "zero_total_momentum",
    "body_body_interaction",
    "tile_accelerations",
    "source_bodies",
    "BodyInitializerKind",
    "initialize",
    "initial_state",
    "Integrator",
    "advance_bodies",
    "make_integrator",
    "ReferenceIntegrator",
    "TiledIntegrator",
    "TorchTiledIntegrator",
    "Diagnostics",
    "Violation",
    "EquivalenceReport",
    "PerformanceResult",
    "check_equivalence",
    "check_equivalence_all",
    "measure_performance",
    "benchmark",
    "block_size_sweep",
    "save_results",
    "NBodySimulation",
]
