"""Scoped page-locking of caller-owned host buffers."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator, List, Sequence, Tuple

import torch

from ..backends.base import DeviceBackend, PinnedRegistration
from ..errors import PipelineError, fail_fast

LOGGER = logging.getLogger("streamed vector add.pinned")


@contextmanager
def pinned_host_buffers(
    backend: DeviceBackend, *buffers: torch.Tensor
) -> Iterator[Tuple[PinnedRegistration, ...]]:
    """Register ``buffers`` for the duration of the block.

    On exit, normal or exceptional, the device is drained before any region
    is unregistered, so no in-flight copy ever touches an unregistered page.
    Regions are released in reverse order even when the drain fails.
    """

    registrations: List[PinnedRegistration] = []
    try:
        for buffer in buffers:
            registrations.append(backend.register_host(buffer))
        LOGGER.debug("pinned_scope_open | buffers=%d", len(registrations))
        yield tuple(registrations)
    except BaseException:
        _release(backend, registrations, unwinding=True)
        raise
    else:
        _release(backend, registrations, unwinding=False)


def _release(
    backend: DeviceBackend, registrations: Sequence[PinnedRegistration], *, unwinding: bool
) -> None:
    try:
        if registrations:
            with fail_fast("drain_before_unregister"):
                backend.synchronize()
    except PipelineError:
        # The error already unwinding names the failing call site; keep it.
        if not unwinding:
            raise
        LOGGER.error("drain_failed_during_unwind | backend=%s", backend.name, exc_info=True)
    finally:
        for registration in reversed(registrations):
            backend.unregister_host(registration)
        LOGGER.debug("pinned_scope_closed | buffers=%d", len(registrations))


__all__ = ["pinned_host_buffers"]
