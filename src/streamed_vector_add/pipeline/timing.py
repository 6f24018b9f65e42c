"""Device-side elapsed-time measurement."""

from __future__ import annotations

from typing import Any, Iterable, Optional

from ..backends.base import DeviceBackend
from ..errors import fail_fast


class ElapsedTimer:
    """Measures the span between two device markers in milliseconds.

    ``start`` blocks until the device reaches the marker so enqueue backlog
    is excluded. ``stop`` only records. ``elapsed`` blocks on the stop
    marker and caches the result.
    """

    def __init__(self, backend: DeviceBackend, stream: Optional[Any] = None) -> None:
        self._backend = backend
        self.stream = stream if stream is not None else backend.default_stream()
        self._start = backend.new_event(enable_timing=True)
        self._stop = backend.new_event(enable_timing=True)
        self._started = False
        self._stopped = False
        self._elapsed_ms: Optional[float] = None

    def start(self) -> None:
        with fail_fast("timer_start"):
            self._start.record(self.stream)
            self._start.synchronize()
        self._started = True
        self._stopped = False
        self._elapsed_ms = None

    def stop(self, after: Iterable[Any] = ()) -> None:
        """Record the stop marker once every stream in ``after`` has drained."""

        if not self._started:
            raise RuntimeError("ElapsedTimer.stop() called before start().")
        with fail_fast("timer_stop"):
            for stream in after:
                self.stream.wait_stream(stream)
            self._stop.record(self.stream)
        self._stopped = True

    def elapsed(self) -> float:
        if not self._stopped:
            raise RuntimeError("ElapsedTimer.elapsed() is only readable after stop().")
        if self._elapsed_ms is None:
            with fail_fast("timer_elapsed"):
                self._stop.synchronize()
                self._elapsed_ms = max(0.0, float(self._start.elapsed_time(self._stop)))
        return self._elapsed_ms


__all__ = ["ElapsedTimer"]
