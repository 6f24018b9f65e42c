"""Backend contract shared by the CUDA runtime and the host emulation."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict

import torch

from ..errors import PipelineError, ResourceExhaustedError, fail_fast

LOGGER = logging.getLogger("streamed vector add.backend")


@dataclass(slots=True)
class PinnedRegistration:
    """Handle for a host region made eligible for asynchronous copies."""

    buffer: torch.Tensor
    pointer: int
    nbytes: int
    platform_pinned: bool
    released: bool = False


class DeviceBackend:
    """Streams, events, device memory and host registration for one device.

    Streams and events returned by a backend follow the ``torch.cuda``
    surface: streams expose ``wait_stream``/``wait_event``/``synchronize``
    and events expose ``record``/``synchronize``/``elapsed_time``.
    """

    name: str = "abstract"

    def __init__(self) -> None:
        self.poisoned = False
        # Pointer -> registration that pinned it, and how many live handles share it.
        self._registrations: Dict[int, PinnedRegistration] = {}
        self._holders: Dict[int, int] = {}

    # ------------------------------------------------------------------ streams
    def default_stream(self) -> Any:
        raise NotImplementedError

    def new_stream(self) -> Any:
        raise NotImplementedError

    def release_stream(self, stream: Any) -> None:
        """Hook for backends that own resources per stream."""

    def new_event(self, *, enable_timing: bool = False) -> Any:
        raise NotImplementedError

    def synchronize(self) -> None:
        raise NotImplementedError

    # ------------------------------------------------------------------- memory
    def empty(self, length: int, dtype: torch.dtype) -> torch.Tensor:
        raise NotImplementedError

    def copy_async(self, dst: torch.Tensor, src: torch.Tensor, stream: Any) -> None:
        raise NotImplementedError

    def launch_vector_add(
        self,
        a: torch.Tensor,
        b: torch.Tensor,
        out: torch.Tensor,
        *,
        length: int,
        block_size: int,
        grid: int,
        stream: Any,
    ) -> None:
        raise NotImplementedError

    # -------------------------------------------------------- host registration
    def register_host(self, buffer: torch.Tensor) -> PinnedRegistration:
        """Page-lock ``buffer`` in place; failures are fatal.

        A region that is already registered (the same array passed as two
        operands) gets its own handle but is pinned only once. The platform
        registration is undone when the last handle is released.
        """

        if buffer.device.type != "cpu":
            raise ValueError("Only host (CPU) tensors can be registered for asynchronous copy.")
        if not buffer.is_contiguous():
            raise ValueError("Host buffers must be contiguous to be registered.")
        pointer = int(buffer.data_ptr())
        nbytes = buffer.numel() * buffer.element_size()
        if nbytes and pointer in self._registrations:
            self._holders[pointer] += 1
            LOGGER.debug(
                "host_registration_shared | backend=%s | ptr=%#x | holders=%d",
                self.name,
                pointer,
                self._holders[pointer],
            )
            return PinnedRegistration(
                buffer=buffer, pointer=pointer, nbytes=nbytes, platform_pinned=False
            )
        platform_pinned = False
        if nbytes and not self._already_pinned(buffer):
            with fail_fast("register_host", ResourceExhaustedError):
                self._pin(pointer, nbytes)
            platform_pinned = True
        registration = PinnedRegistration(
            buffer=buffer, pointer=pointer, nbytes=nbytes, platform_pinned=platform_pinned
        )
        if nbytes:
            self._registrations[pointer] = registration
            self._holders[pointer] = 1
        LOGGER.debug(
            "host_registered | backend=%s | ptr=%#x | bytes=%d | pinned=%s",
            self.name,
            pointer,
            nbytes,
            platform_pinned,
        )
        return registration

    def unregister_host(self, registration: PinnedRegistration) -> None:
        """Reverse :meth:`register_host`; valid exactly once per registration."""

        if registration.released:
            raise RuntimeError(f"Host region at {registration.pointer:#x} was already unregistered.")
        pointer = registration.pointer
        if registration.nbytes:
            holders = self._holders.get(pointer, 0)
            if not holders:
                raise RuntimeError(f"Host region at {pointer:#x} is not registered with this backend.")
            if holders > 1:
                self._holders[pointer] = holders - 1
            else:
                if self._registrations[pointer].platform_pinned:
                    with fail_fast("unregister_host"):
                        self._unpin(pointer)
                del self._registrations[pointer]
                del self._holders[pointer]
        registration.released = True
        LOGGER.debug("host_unregistered | backend=%s | ptr=%#x", self.name, pointer)

    @property
    def registered_regions(self) -> int:
        return len(self._registrations)

    def _already_pinned(self, buffer: torch.Tensor) -> bool:
        return False

    def _pin(self, pointer: int, nbytes: int) -> None:
        raise NotImplementedError

    def _unpin(self, pointer: int) -> None:
        raise NotImplementedError

    # ------------------------------------------------------------------- health
    def poison(self, reason: str) -> None:
        if not self.poisoned:
            LOGGER.error("backend_poisoned | backend=%s | reason=%s", self.name, reason)
        self.poisoned = True

    def ensure_usable(self) -> None:
        if self.poisoned:
            raise PipelineError(
                "ensure_usable",
                f"backend {self.name!r} failed earlier in this process; restart to run again",
            )


__all__ = ["DeviceBackend", "PinnedRegistration"]
