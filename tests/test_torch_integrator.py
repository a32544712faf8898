import numpy as np
import pytest

torch = pytest.importorskip("torch")

from tilebody import (  # noqa: E402
    BodyInitializerKind,
    BodyState,
    BufferAllocationError,
    PositionBuffers,
    ReferenceIntegrator,
    SimConfig,
    check_equivalence,
    initial_state,
    make_integrator,
)
from tilebody.torch_integrator import TorchTiledIntegrator  # noqa: E402


@pytest.mark.parametrize("kind", [BodyInitializerKind.UNIFORM_CLOUD, BodyInitializerKind.TWO_CLUSTERS_MASS])
def test_cpu_device_matches_reference(kind):
    integ = TorchTiledIntegrator(64, device="cpu")
    report = check_equivalence(kind, ReferenceIntegrator(), integ, 300, seed=9)
    assert report.passed, report.to_frame().head()


def test_batch_integrate_matches_reference_without_resync():
    cfg = SimConfig(num_bodies=150, steps=4)
    state = initial_state(BodyInitializerKind.TWO_CLUSTERS, cfg)
    expected = ReferenceIntegrator().integrate(state.copy(), cfg)
    actual = TorchTiledIntegrator(32, device="cpu").integrate(state.copy(), cfg)
    np.testing.assert_allclose(actual.pos, expected.pos, atol=1e-5, rtol=0)
    assert np.array_equal(actual.mass, state.mass)


def test_step_buffers_swaps_host_buffers():
    cfg = SimConfig(num_bodies=40)
    state = initial_state(1, cfg)
    buffers = PositionBuffers(state.pos)
    start = buffers.snapshot()

    integ = TorchTiledIntegrator(16, device="cpu")
    integ.step_buffers(buffers, state.vel, cfg)
    assert buffers.swaps == 1
    assert not np.array_equal(buffers.front, start)
    assert integ.last_barrier_count == 2 * 3 * 3


def test_zero_bodies_is_a_no_op():
    empty = BodyState.empty(0)
    assert TorchTiledIntegrator(8, device="cpu").integrate(empty, SimConfig(num_bodies=0)) is empty


def test_make_integrator_torch_mode():
    integ = make_integrator(SimConfig(integrator_mode="torch", device="cpu", block_size=32))
    assert isinstance(integ, TorchTiledIntegrator)
    assert integ.description == "TorchTiledIntegrator(32, cpu)"


def test_device_out_of_memory_is_fatal(monkeypatch):
    def _out_of_memory(*args, **kwargs):
        raise torch.cuda.OutOfMemoryError("CUDA out of memory")

    cfg = SimConfig(num_bodies=20)
    state = initial_state(BodyInitializerKind.UNIFORM_CLOUD, cfg)
    monkeypatch.setattr(torch, "empty", _out_of_memory)
    with pytest.raises(BufferAllocationError):
        TorchTiledIntegrator(8, device="cpu").integrate(state, cfg, 1)
