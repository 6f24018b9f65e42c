"""Overlapped copy/compute/copy pipeline across independent device streams."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

import numpy as np
import torch

from ..backends import DeviceBackend, resolve_backend
from ..config import DEFAULT_BLOCK_SIZE, DEFAULT_N_STREAMS, PipelineConfig
from ..errors import PipelineError, ResourceExhaustedError, fail_fast
from ..utils.devices import resolve_device
from .kernel import launch_vector_add
from .partition import Partition, plan_partitions
from .pinned import pinned_host_buffers
from .timing import ElapsedTimer

LOGGER = logging.getLogger("streamed vector add.orchestrator")

HostArray = Union[torch.Tensor, np.ndarray]


class PartitionPhase(str, Enum):
    """Latest operation enqueued for a partition; ``DONE`` once the join is observed."""

    PENDING = "pending"
    TRANSFERRING_IN = "transferring_in"
    COMPUTING = "computing"
    TRANSFERRING_OUT = "transferring_out"
    DONE = "done"


_PHASE_ORDER: Tuple[PartitionPhase, ...] = tuple(PartitionPhase)


@dataclass(slots=True)
class PartitionTrace:
    partition: Partition
    phase: PartitionPhase = PartitionPhase.PENDING
    grid: int = 0

    def advance(self, phase: PartitionPhase) -> None:
        current = _PHASE_ORDER.index(self.phase)
        if _PHASE_ORDER.index(phase) != current + 1:
            raise RuntimeError(
                f"Partition {self.partition.index} cannot move from {self.phase.value} to {phase.value}."
            )
        self.phase = phase

    def as_dict(self) -> Dict[str, Any]:
        return {
            "index": self.partition.index,
            "offset": self.partition.offset,
            "length": self.partition.length,
            "grid": self.grid,
            "phase": self.phase.value,
        }


@dataclass(slots=True)
class PipelineResult:
    """Outcome of one pipeline run; ``out`` has already been written in place."""

    device: str
    n: int
    block_size: int
    n_streams: int
    elapsed_ms: float
    traces: Tuple[PartitionTrace, ...] = field(default_factory=tuple)

    @property
    def partitions(self) -> Tuple[Partition, ...]:
        return tuple(trace.partition for trace in self.traces)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "device": self.device,
            "n": self.n,
            "block_size": self.block_size,
            "n_streams": self.n_streams,
            "elapsed_ms": self.elapsed_ms,
            "partitions": [trace.as_dict() for trace in self.traces],
        }


class DeviceMirror:
    """Full-size device copies of ``in1``, ``in2`` and ``out``, sliced per partition."""

    def __init__(self, backend: DeviceBackend, n: int, dtype: torch.dtype) -> None:
        self.in1 = backend.empty(n, dtype)
        self.in2 = backend.empty(n, dtype)
        self.out = backend.empty(n, dtype)

    def views(self, partition: Partition) -> Tuple[torch.Tensor, torch.Tensor, torch.Tensor]:
        window = partition.as_slice()
        return self.in1[window], self.in2[window], self.out[window]

    def release(self) -> None:
        del self.in1, self.in2, self.out


def as_host_tensor(array: HostArray, *, role: str) -> torch.Tensor:
    """Borrow ``array`` as a CPU tensor without copying."""

    if isinstance(array, np.ndarray):
        tensor = torch.from_numpy(array)
    elif isinstance(array, torch.Tensor):
        tensor = array
    else:
        raise TypeError(f"{role} must be a torch.Tensor or numpy.ndarray, got {type(array)!r}.")
    if tensor.device.type != "cpu":
        raise ValueError(f"{role} must live in host memory, found device {tensor.device}.")
    if tensor.dim() != 1:
        raise ValueError(f"{role} must be one-dimensional, found shape {tuple(tensor.shape)}.")
    if not tensor.is_contiguous():
        raise ValueError(f"{role} must be contiguous.")
    if tensor.dtype.is_floating_point or tensor.dtype.is_complex or not tensor.dtype.is_signed:
        raise ValueError(f"{role} must hold signed integers, found {tensor.dtype}.")
    return tensor


class StreamPipeline:
    """Adds two host arrays on the device with ``n_streams``-way copy/compute overlap."""

    def __init__(
        self,
        backend: DeviceBackend,
        *,
        block_size: int = DEFAULT_BLOCK_SIZE,
        n_streams: int = DEFAULT_N_STREAMS,
    ) -> None:
        if block_size < 1:
            raise ValueError(f"block_size must be >= 1, received {block_size}.")
        if n_streams < 1:
            raise ValueError(f"n_streams must be >= 1, received {n_streams}.")
        self.backend = backend
        self.block_size = int(block_size)
        self.n_streams = int(n_streams)

    @classmethod
    def from_config(
        cls, config: PipelineConfig, backend: Optional[DeviceBackend] = None
    ) -> "StreamPipeline":
        if backend is None:
            backend = resolve_backend(resolve_device(config.device))
        return cls(backend, block_size=config.block_size, n_streams=config.n_streams)

    def run(self, in1: HostArray, in2: HostArray, out: HostArray) -> PipelineResult:
        """Write ``in1 + in2`` into ``out`` and return the device-measured span."""

        self.backend.ensure_usable()
        host_in1 = as_host_tensor(in1, role="in1")
        host_in2 = as_host_tensor(in2, role="in2")
        host_out = as_host_tensor(out, role="out")
        n = host_out.numel()
        if host_in1.numel() != n or host_in2.numel() != n:
            raise ValueError(
                f"Buffer lengths differ: in1={host_in1.numel()} in2={host_in2.numel()} out={n}."
            )
        if not host_in1.dtype == host_in2.dtype == host_out.dtype:
            raise ValueError("in1, in2 and out must share a dtype.")

        traces = tuple(PartitionTrace(part) for part in plan_partitions(n, self.n_streams))
        LOGGER.info(
            "pipeline_start | device=%s | n=%d | streams=%d | block=%d",
            self.backend.name,
            n,
            self.n_streams,
            self.block_size,
        )
        mirror: Optional[DeviceMirror] = None
        try:
            # Freed only after the pinned scope has drained the device.
            with pinned_host_buffers(self.backend, host_in1, host_in2, host_out):
                with fail_fast("allocate_mirror", ResourceExhaustedError):
                    mirror = DeviceMirror(self.backend, n, host_out.dtype)
                elapsed_ms = self._execute(host_in1, host_in2, host_out, mirror, traces)
        except PipelineError as exc:
            self.backend.poison(str(exc))
            raise
        finally:
            if mirror is not None:
                mirror.release()

        LOGGER.info("pipeline_complete | elapsed_ms=%.3f", elapsed_ms)
        return PipelineResult(
            device=self.backend.name,
            n=n,
            block_size=self.block_size,
            n_streams=self.n_streams,
            elapsed_ms=elapsed_ms,
            traces=traces,
        )

    def _execute(
        self,
        in1: torch.Tensor,
        in2: torch.Tensor,
        out: torch.Tensor,
        mirror: DeviceMirror,
        traces: Sequence[PartitionTrace],
    ) -> float:
        streams: List[Any] = []
        try:
            with fail_fast("stream_create", ResourceExhaustedError):
                for _ in traces:
                    streams.append(self.backend.new_stream())
            timer = ElapsedTimer(self.backend)
            timer.start()
            # Enqueue every partition before any wait; the only barrier is the join below.
            for trace, stream in zip(traces, streams):
                self._enqueue_partition(trace, stream, in1, in2, out, mirror)
            timer.stop(after=streams)
            elapsed_ms = timer.elapsed()
        finally:
            for stream in streams:
                self.backend.release_stream(stream)
        for trace in traces:
            trace.advance(PartitionPhase.DONE)
        return elapsed_ms

    def _enqueue_partition(
        self,
        trace: PartitionTrace,
        stream: Any,
        in1: torch.Tensor,
        in2: torch.Tensor,
        out: torch.Tensor,
        mirror: DeviceMirror,
    ) -> None:
        partition = trace.partition
        window = partition.as_slice()
        dev_in1, dev_in2, dev_out = mirror.views(partition)

        trace.advance(PartitionPhase.TRANSFERRING_IN)
        with fail_fast(f"copy_in[{partition.index}]"):
            self.backend.copy_async(dev_in1, in1[window], stream)
            self.backend.copy_async(dev_in2, in2[window], stream)

        trace.advance(PartitionPhase.COMPUTING)
        with fail_fast(f"launch[{partition.index}]"):
            trace.grid = launch_vector_add(
                self.backend, dev_in1, dev_in2, dev_out, block_size=self.block_size, stream=stream
            )

        trace.advance(PartitionPhase.TRANSFERRING_OUT)
        with fail_fast(f"copy_out[{partition.index}]"):
            self.backend.copy_async(out[window], dev_out, stream)
        LOGGER.debug(
            "partition_enqueued | index=%d | offset=%d | length=%d | grid=%d",
            partition.index,
            partition.offset,
            partition.length,
            trace.grid,
        )


def run_pipeline(
    in1: HostArray,
    in2: HostArray,
    out: HostArray,
    *,
    block_size: int = DEFAULT_BLOCK_SIZE,
    n_streams: int = DEFAULT_N_STREAMS,
    device: Optional[str] = None,
    backend: Optional[DeviceBackend] = None,
) -> PipelineResult:
    """Functional entry point around :class:`StreamPipeline`."""

    if backend is None:
        backend = resolve_backend(resolve_device(device))
    pipeline = StreamPipeline(backend, block_size=block_size, n_streams=n_streams)
    return pipeline.run(in1, in2, out)


__all__ = [
    "DeviceMirror",
    "PartitionPhase",
    "PartitionTrace",
    "PipelineResult",
    "StreamPipeline",
    "as_host_tensor",
    "run_pipeline",
]
