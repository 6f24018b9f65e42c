"""Triton vector-add kernel launched by the CUDA backend."""

from __future__ import annotations

import torch
import triton
import triton.language as tl


@triton.jit
def _vector_add_kernel(
    a_ptr,
    b_ptr,
    out_ptr,
    length,
    block_size,
    TILE: tl.constexpr,
):
    pid = tl.program_id(axis=0)
    lanes = tl.arange(0, TILE)
    offsets = pid * block_size + lanes
    # TILE is block_size rounded up to a power of two; padded lanes stay idle.
    mask = (lanes < block_size) & (offsets < length)
    a = tl.load(a_ptr + offsets, mask=mask, other=0)
    b = tl.load(b_ptr + offsets, mask=mask, other=0)
    tl.store(out_ptr + offsets, a + b, mask=mask)


def triton_vector_add(
    a: torch.Tensor,
    b: torch.Tensor,
    out: torch.Tensor,
    length: int,
    block_size: int,
    grid: int,
) -> None:
    """Launch ``grid`` programs on the current CUDA stream."""

    _vector_add_kernel[(grid,)](
        a,
        b,
        out,
        length,
        block_size,
        TILE=triton.next_power_of_2(block_size),
    )


__all__ = ["triton_vector_add"]
