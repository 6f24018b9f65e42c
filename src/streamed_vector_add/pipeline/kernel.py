"""Element-wise add launched over one partition."""

from __future__ import annotations

import logging
from typing import Any

import torch

from ..backends.base import DeviceBackend
from .partition import grid_size

LOGGER = logging.getLogger("streamed vector add.kernel")


def launch_vector_add(
    backend: DeviceBackend,
    a: torch.Tensor,
    b: torch.Tensor,
    out: torch.Tensor,
    *,
    block_size: int,
    stream: Any,
) -> int:
    """Enqueue ``out[i] = a[i] + b[i]`` for every ``i < len(out)`` on ``stream``.

    Returns the grid size used. An empty range launches nothing.
    """

    length = out.numel()
    grid = grid_size(length, block_size)
    if grid == 0:
        LOGGER.debug("launch_skipped | reason=empty_range")
        return 0
    backend.launch_vector_add(
        a, b, out, length=length, block_size=block_size, grid=grid, stream=stream
    )
    return grid


__all__ = ["launch_vector_add"]
