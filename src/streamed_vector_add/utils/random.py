"""Seeding helpers so operand draws and reference runs can be replayed."""

from __future__ import annotations

import os
import random
from typing import Optional

import numpy as np
import torch


def seed_everything(seed: Optional[int]) -> None:
    """Seed the global Python, NumPy and PyTorch RNGs; ``None`` leaves them untouched."""

    if seed is None:
        return
    value = int(seed)
    os.environ["PYTHONHASHSEED"] = str(value)
    random.seed(value)
    np.random.seed(value)
    torch.manual_seed(value)
    if torch.cuda.is_available():  # pragma: no cover - exercised on CUDA hosts
        torch.cuda.manual_seed_all(value)


def host_generator(seed: Optional[int] = None) -> torch.Generator:
    """Return a private CPU generator, seeded from ``seed`` or from OS entropy."""

    generator = torch.Generator(device="cpu")
    if seed is None:
        generator.seed()
    else:
        generator.manual_seed(int(seed))
    return generator


__all__ = ["host_generator", "seed_everything"]
