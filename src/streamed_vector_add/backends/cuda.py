"""CUDA backend built on torch streams, events and ``cudaHostRegister``."""

from __future__ import annotations

import logging
from typing import Optional

import torch

from ..errors import ResourceExhaustedError, fail_fast
from .base import DeviceBackend

LOGGER = logging.getLogger("streamed vector add.backend.cuda")

_HOST_REGISTER_DEFAULT = 0


class CudaBackend(DeviceBackend):
    """Drives one CUDA device through ``torch.cuda``."""

    name = "cuda"

    def __init__(self, device_index: Optional[int] = None) -> None:
        super().__init__()
        if not torch.cuda.is_available():
            raise ResourceExhaustedError(
                "CudaBackend", "CUDA is not available; no async-copy-eligible memory"
            )
        index = torch.cuda.current_device() if device_index is None else int(device_index)
        self.device = torch.device("cuda", index)

    def default_stream(self) -> torch.cuda.Stream:
        return torch.cuda.current_stream(self.device)

    def new_stream(self) -> torch.cuda.Stream:
        with fail_fast("stream_create", ResourceExhaustedError):
            return torch.cuda.Stream(device=self.device)

    def new_event(self, *, enable_timing: bool = False) -> torch.cuda.Event:
        return torch.cuda.Event(enable_timing=enable_timing)

    def synchronize(self) -> None:
        torch.cuda.synchronize(self.device)

    def empty(self, length: int, dtype: torch.dtype) -> torch.Tensor:
        with fail_fast("allocate", ResourceExhaustedError):
            return torch.empty(length, dtype=dtype, device=self.device)

    def copy_async(
        self, dst: torch.Tensor, src: torch.Tensor, stream: torch.cuda.Stream
    ) -> None:
        with torch.cuda.stream(stream):
            dst.copy_(src, non_blocking=True)

    def launch_vector_add(
        self,
        a: torch.Tensor,
        b: torch.Tensor,
        out: torch.Tensor,
        *,
        length: int,
        block_size: int,
        grid: int,
        stream: torch.cuda.Stream,
    ) -> None:
        from .triton_add import triton_vector_add

        with torch.cuda.stream(stream):
            triton_vector_add(a, b, out, length, block_size, grid)

    def _already_pinned(self, buffer: torch.Tensor) -> bool:
        return buffer.is_pinned()

    def _pin(self, pointer: int, nbytes: int) -> None:
        result = torch.cuda.cudart().cudaHostRegister(pointer, nbytes, _HOST_REGISTER_DEFAULT)
        torch.cuda.check_error(result)

    def _unpin(self, pointer: int) -> None:
        torch.cuda.check_error(torch.cuda.cudart().cudaHostUnregister(pointer))


__all__ = ["CudaBackend"]
