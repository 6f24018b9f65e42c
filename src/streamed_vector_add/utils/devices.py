"""Device selection and one-shot capability description for the outer layer."""

from __future__ import annotations

import os
import platform
from typing import Any, Dict, Literal, Optional

import torch

DEVICE_ENV_VAR = "SVA_DEVICE"


def resolve_device(preferred: Optional[str] = None) -> Literal["cpu", "cuda"]:
    """Resolve the runtime device from ``preferred`` or the SVA_DEVICE environment variable.

    One of the two must name 'cpu' or 'cuda'. A ValueError is raised when
    neither is set or when the requested device is unavailable.
    """
    device = preferred or os.getenv(DEVICE_ENV_VAR)

    if not device:
        raise ValueError(f"{DEVICE_ENV_VAR} environment variable must be set to 'cpu' or 'cuda'.")

    device = device.strip().lower()
    if device == "cuda":
        if not torch.cuda.is_available():
            raise ValueError("Device 'cuda' was requested, but CUDA is not available.")
        return "cuda"
    elif device == "cpu":
        return "cpu"
    else:
        raise ValueError(f"Unsupported device specified: {device}")


def describe_device(device: str) -> Dict[str, Any]:
    """Return a JSON-friendly snapshot of the device's capabilities."""

    if device == "cuda":
        index = torch.cuda.current_device()
        props = torch.cuda.get_device_properties(index)
        return {
            "type": "cuda",
            "index": index,
            "name": props.name,
            "compute_capability": f"{props.major}.{props.minor}",
            "multiprocessors": props.multi_processor_count,
            "total_memory_bytes": int(props.total_memory),
            "torch_cuda_version": torch.version.cuda,
        }
    return {
        "type": "cpu",
        "name": platform.processor() or platform.machine(),
        "threads": torch.get_num_threads(),
        "python": platform.python_version(),
    }


__all__ = ["DEVICE_ENV_VAR", "describe_device", "resolve_device"]
