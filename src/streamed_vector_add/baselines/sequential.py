"""Host-side sequential reference for the streamed add."""

from __future__ import annotations

import time
from typing import Optional, Tuple

import torch


def sequential_add(
    in1: torch.Tensor,
    in2: torch.Tensor,
    out: Optional[torch.Tensor] = None,
) -> torch.Tensor:
    """Return ``in1 + in2`` computed on the host in a single pass."""

    if in1.shape != in2.shape:
        raise ValueError(f"Operand shapes differ: {tuple(in1.shape)} vs {tuple(in2.shape)}.")
    if out is None:
        out = torch.empty_like(in1)
    elif out.shape != in1.shape:
        raise ValueError(f"Output shape {tuple(out.shape)} does not match operands.")
    torch.add(in1.cpu(), in2.cpu(), out=out)
    return out


def timed_sequential_add(
    in1: torch.Tensor, in2: torch.Tensor
) -> Tuple[torch.Tensor, float]:
    """Run :func:`sequential_add` and report its host wall-clock time in milliseconds."""

    start = time.perf_counter()
    result = sequential_add(in1, in2)
    return result, (time.perf_counter() - start) * 1000.0
