"""Evaluation helpers for pipeline output and timing."""

from .validation import ValidationReport, validate_output
from .sweep import SweepPoint, sweep_stream_counts

__all__ = ["SweepPoint", "ValidationReport", "sweep_stream_counts", "validate_output"]
