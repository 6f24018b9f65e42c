"""Comparison of pipeline output against the sequential reference."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

import torch


@dataclass(frozen=True)
class ValidationReport:
    """Element-wise agreement between a computed and an expected buffer."""

    checked: int
    mismatches: int
    first_mismatch: Optional[int] = None

    @property
    def matches(self) -> bool:
        return self.mismatches == 0

    def as_dict(self) -> Dict[str, Any]:
        return {
            "checked": self.checked,
            "mismatches": self.mismatches,
            "first_mismatch": self.first_mismatch,
            "matches": self.matches,
        }


def validate_output(out: torch.Tensor, expected: torch.Tensor) -> ValidationReport:
    """Count positions where ``out`` disagrees with ``expected``; never raises on mismatch."""

    if out.shape != expected.shape:
        raise ValueError(
            f"Cannot compare shapes {tuple(out.shape)} and {tuple(expected.shape)}."
        )
    differing = torch.nonzero(out.cpu() != expected.cpu(), as_tuple=False).flatten()
    first = int(differing[0]) if differing.numel() else None
    return ValidationReport(checked=out.numel(), mismatches=int(differing.numel()), first_mismatch=first)


__all__ = ["ValidationReport", "validate_output"]
