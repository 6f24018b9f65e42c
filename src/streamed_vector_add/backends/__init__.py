"""Device backends: the CUDA runtime and its host emulation."""

from __future__ import annotations

from functools import lru_cache

from .base import DeviceBackend, PinnedRegistration
from .host import HostBackend, HostEvent, HostStream


@lru_cache(maxsize=None)
def resolve_backend(device: str) -> DeviceBackend:
    """Return the process-wide backend for ``device`` ('cpu' or 'cuda')."""

    if device == "cpu":
        return HostBackend()
    if device == "cuda":
        from .cuda import CudaBackend

        return CudaBackend()
    raise ValueError(f"Unsupported device: {device!r}")


__all__ = [
    "DeviceBackend",
    "HostBackend",
    "HostEvent",
    "HostStream",
    "PinnedRegistration",
    "resolve_backend",
]
