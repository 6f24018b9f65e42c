"""Host emulation of device streams and events.

Each :class:`HostStream` is a single-worker thread pool, so operations on one
stream run in submission order while different streams run concurrently.
Events are recorded as markers in a stream's queue and fire once every
operation submitted before them has finished.
"""

from __future__ import annotations

import itertools
import logging
import threading
import time
import weakref
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, Optional

import torch

from ..errors import ResourceExhaustedError, fail_fast
from .base import DeviceBackend

LOGGER = logging.getLogger("streamed vector add.backend.host")

_STREAM_IDS = itertools.count()


class HostEvent:
    """Marker with the same surface as ``torch.cuda.Event``."""

    def __init__(self, enable_timing: bool = False) -> None:
        self.enable_timing = enable_timing
        self._reached = threading.Event()
        self._recorded = False
        self._timestamp: Optional[float] = None
        self._error: Optional[BaseException] = None

    def record(self, stream: "HostStream") -> None:
        self._reached.clear()
        self._timestamp = None
        self._error = None
        self._recorded = True
        stream._enqueue_marker(self)

    def query(self) -> bool:
        return not self._recorded or self._reached.is_set()

    def synchronize(self) -> None:
        if not self._recorded:
            return
        self._reached.wait()
        if self._error is not None:
            raise RuntimeError(f"host stream failed before marker: {self._error}") from self._error

    def elapsed_time(self, end: "HostEvent") -> float:
        if not (self.enable_timing and end.enable_timing):
            raise RuntimeError("Both events must be created with enable_timing=True.")
        if self._timestamp is None or end._timestamp is None:
            raise RuntimeError("Both events must be recorded and reached before elapsed_time().")
        return (end._timestamp - self._timestamp) * 1000.0

    def _mark(self, error: Optional[BaseException]) -> None:
        self._timestamp = time.perf_counter()
        self._error = error
        self._reached.set()


class HostStream:
    """Strictly ordered queue of host operations."""

    def __init__(self, name: str) -> None:
        self.name = name
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix=name)
        self._error: Optional[BaseException] = None

    def submit(self, fn: Callable[..., Any], *args: Any) -> None:
        self._executor.submit(self._run, fn, args)

    def wait_event(self, event: HostEvent) -> None:
        self.submit(event.synchronize)

    def wait_stream(self, other: "HostStream") -> None:
        marker = HostEvent()
        marker.record(other)
        self.wait_event(marker)

    def synchronize(self) -> None:
        marker = HostEvent()
        marker.record(self)
        marker.synchronize()

    def close(self) -> None:
        self._executor.shutdown(wait=True)

    def _run(self, fn: Callable[..., Any], args: tuple) -> None:
        # Once an op fails the remaining ops on this stream are skipped; markers still fire.
        if self._error is not None:
            return
        try:
            fn(*args)
        except Exception as exc:
            LOGGER.error(
                "host_op_failed | stream=%s | op=%s",
                self.name,
                getattr(fn, "__name__", repr(fn)),
                exc_info=True,
            )
            self._error = exc

    def _enqueue_marker(self, event: HostEvent) -> None:
        self._executor.submit(lambda: event._mark(self._error))

    def __repr__(self) -> str:
        return f"HostStream(name={self.name!r})"


def emulate_vector_add(
    a: torch.Tensor,
    b: torch.Tensor,
    out: torch.Tensor,
    length: int,
    block_size: int,
    grid: int,
) -> None:
    """Run ``grid`` programs of ``block_size`` lanes, each masked by ``index < length``.

    The lanes that pass the mask always form the prefix ``[0, min(length,
    grid * block_size))``, so the programs collapse into one slice add.
    """

    covered = min(length, grid * block_size)
    torch.add(a[:covered], b[:covered], out=out[:covered])


class HostBackend(DeviceBackend):
    """Runs the pipeline on the CPU with thread-backed streams."""

    name = "cpu"

    def __init__(self) -> None:
        super().__init__()
        self._default = HostStream("sva-default")
        self._live: "weakref.WeakSet[HostStream]" = weakref.WeakSet()

    def default_stream(self) -> HostStream:
        return self._default

    def new_stream(self) -> HostStream:
        stream = HostStream(f"sva-stream-{next(_STREAM_IDS)}")
        self._live.add(stream)
        return stream

    def release_stream(self, stream: HostStream) -> None:
        stream.close()
        self._live.discard(stream)

    def new_event(self, *, enable_timing: bool = False) -> HostEvent:
        return HostEvent(enable_timing=enable_timing)

    def synchronize(self) -> None:
        for stream in list(self._live):
            stream.synchronize()
        self._default.synchronize()

    def empty(self, length: int, dtype: torch.dtype) -> torch.Tensor:
        with fail_fast("allocate", ResourceExhaustedError):
            return torch.empty(length, dtype=dtype)

    def copy_async(self, dst: torch.Tensor, src: torch.Tensor, stream: HostStream) -> None:
        stream.submit(dst.copy_, src)

    def launch_vector_add(
        self,
        a: torch.Tensor,
        b: torch.Tensor,
        out: torch.Tensor,
        *,
        length: int,
        block_size: int,
        grid: int,
        stream: HostStream,
    ) -> None:
        stream.submit(emulate_vector_add, a, b, out, length, block_size, grid)

    # Host memory is always eligible for the emulated copies; registration is bookkeeping only.
    def _pin(self, pointer: int, nbytes: int) -> None:
        pass

    def _unpin(self, pointer: int) -> None:
        pass


__all__ = ["HostBackend", "HostEvent", "HostStream", "emulate_vector_add"]
