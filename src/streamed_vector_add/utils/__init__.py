"""Utility helpers for logging, device selection, and reproducibility."""

from .logging import configure_logging
from .devices import describe_device, resolve_device
from .random import host_generator, seed_everything
from .git import get_git_metadata, GitMetadata

__all__ = [
    "configure_logging",
    "describe_device",
    "resolve_device",
    "seed_everything",
    "host_generator",
    "get_git_metadata",
    "GitMetadata",
]
