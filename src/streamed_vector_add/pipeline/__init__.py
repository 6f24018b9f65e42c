"""Overlapped host/device pipeline components."""

from __future__ import annotations

import importlib
from types import ModuleType
from typing import Dict, Iterable, Tuple

__all__ = [
    "DeviceMirror",
    "ElapsedTimer",
    "Partition",
    "PartitionPhase",
    "PartitionTrace",
    "PipelineResult",
    "StreamPipeline",
    "as_host_tensor",
    "grid_size",
    "launch_vector_add",
    "pinned_host_buffers",
    "plan_partitions",
    "run_pipeline",
]

_EXPORTS: Dict[str, Tuple[str, ...]] = {
    "kernel": ("launch_vector_add",),
    "orchestrator": (
        "DeviceMirror",
        "PartitionPhase",
        "PartitionTrace",
        "PipelineResult",
        "StreamPipeline",
        "as_host_tensor",
        "run_pipeline",
    ),
    "partition": ("Partition", "grid_size", "plan_partitions"),
    "pinned": ("pinned_host_buffers",),
    "timing": ("ElapsedTimer",),
}


def _load_module(name: str) -> ModuleType:
    return importlib.import_module(f"streamed_vector_add.pipeline.{name}")


def __getattr__(name: str):
    for module_name, symbols in _EXPORTS.items():
        if name in symbols:
            module = _load_module(module_name)
            return getattr(module, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


def __dir__() -> Iterable[str]:
    return sorted(set(__all__))
