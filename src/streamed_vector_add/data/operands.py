"""Random operand generation for pipeline runs."""

from __future__ import annotations

from typing import Optional, Tuple

import torch

from ..utils.random import host_generator

# Half the int32 range on each side keeps every pairwise sum representable.
OPERAND_LOW = -(1 << 30)
OPERAND_HIGH = 1 << 30


def generate_operands(
    n: int,
    *,
    seed: Optional[int] = None,
    dtype: torch.dtype = torch.int32,
) -> Tuple[torch.Tensor, torch.Tensor, torch.Tensor]:
    """Return ``(in1, in2, out)`` host tensors of length ``n``; ``out`` is zeroed."""

    if n < 0:
        raise ValueError(f"n must be >= 0, received {n}.")
    generator = host_generator(seed)
    in1 = torch.randint(OPERAND_LOW, OPERAND_HIGH, (n,), generator=generator, dtype=dtype)
    in2 = torch.randint(OPERAND_LOW, OPERAND_HIGH, (n,), generator=generator, dtype=dtype)
    out = torch.zeros(n, dtype=dtype)
    return in1, in2, out


__all__ = ["OPERAND_HIGH", "OPERAND_LOW", "generate_operands"]
