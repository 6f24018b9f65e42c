"""Reference implementations used to validate the pipeline."""

from .sequential import sequential_add, timed_sequential_add

__all__ = ["sequential_add", "timed_sequential_add"]
