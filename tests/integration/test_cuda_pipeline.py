"""CUDA backend tests; skipped on hosts without a GPU."""

from __future__ import annotations

import pytest
import torch

pytestmark = pytest.mark.skipif(not torch.cuda.is_available(), reason="requires CUDA")


@pytest.fixture
def cuda_backend():
    from streamed_vector_add.backends.cuda import CudaBackend

    backend = CudaBackend()
    yield backend
    assert backend.registered_regions == 0


def test_reversed_ranges_sum_to_nine_on_device(cuda_backend) -> None:
    from streamed_vector_add.pipeline import run_pipeline

    in1 = torch.arange(10, dtype=torch.int32)
    in2 = torch.arange(9, -1, -1, dtype=torch.int32)
    out = torch.zeros(10, dtype=torch.int32)

    result = run_pipeline(in1, in2, out, block_size=4, n_streams=3, backend=cuda_backend)

    assert out.tolist() == [9] * 10
    assert result.elapsed_ms >= 0.0


@pytest.mark.parametrize("n_streams", [1, 4, 16])
@pytest.mark.parametrize("block_size", [3, 128, 512])
def test_device_matches_host_reference(cuda_backend, n_streams: int, block_size: int) -> None:
    from streamed_vector_add.data import generate_operands
    from streamed_vector_add.pipeline import run_pipeline

    in1, in2, out = generate_operands((1 << 16) + 3, seed=n_streams * block_size)

    run_pipeline(in1, in2, out, block_size=block_size, n_streams=n_streams, backend=cuda_backend)

    assert torch.equal(out, in1 + in2)


def test_host_registration_pins_in_place(cuda_backend) -> None:
    from streamed_vector_add.pipeline import pinned_host_buffers

    buffer = torch.zeros(1024, dtype=torch.int32)
    assert not buffer.is_pinned()

    with pinned_host_buffers(cuda_backend, buffer) as (registration,):
        assert registration.platform_pinned
        assert buffer.is_pinned()

    assert not buffer.is_pinned()


def test_already_pinned_buffers_are_left_alone(cuda_backend) -> None:
    from streamed_vector_add.pipeline import pinned_host_buffers

    buffer = torch.zeros(256, dtype=torch.int32).pin_memory()

    with pinned_host_buffers(cuda_backend, buffer) as (registration,):
        assert not registration.platform_pinned

    assert buffer.is_pinned()
