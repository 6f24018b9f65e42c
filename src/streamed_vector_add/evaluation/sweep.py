"""Elapsed-time sweep over pipeline depth to expose copy/compute overlap."""

from __future__ import annotations

import logging
import statistics
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

from tqdm import tqdm

from ..backends import DeviceBackend
from ..data import generate_operands
from ..pipeline import StreamPipeline
from .validation import validate_output

LOGGER = logging.getLogger("streamed vector add.sweep")


@dataclass(slots=True)
class SweepPoint:
    n_streams: int
    samples_ms: List[float]
    speedup: Optional[float] = None  # relative to the first point of the sweep

    @property
    def median_ms(self) -> float:
        return float(statistics.median(self.samples_ms))

    def as_dict(self) -> Dict[str, Any]:
        return {
            "n_streams": self.n_streams,
            "median_ms": self.median_ms,
            "samples_ms": list(self.samples_ms),
            "speedup": self.speedup,
        }


def sweep_stream_counts(
    backend: DeviceBackend,
    *,
    n: int,
    stream_counts: Sequence[int],
    block_size: int,
    repeats: int = 3,
    seed: Optional[int] = None,
    show_progress: bool = True,
) -> List[SweepPoint]:
    """Time the pipeline for each stream count on the same operands.

    Every run is validated against ``in1 + in2``; a mismatch raises because a
    sweep over a wrong result says nothing about overlap.
    """

    if not stream_counts:
        raise ValueError("stream_counts must not be empty.")
    if repeats < 1:
        raise ValueError(f"repeats must be >= 1, received {repeats}.")
    in1, in2, out = generate_operands(n, seed=seed)
    expected = in1 + in2

    points: List[SweepPoint] = []
    with tqdm(
        total=len(stream_counts) * repeats, desc="sweep", unit="run", disable=not show_progress
    ) as progress:
        for count in stream_counts:
            pipeline = StreamPipeline(backend, block_size=block_size, n_streams=count)
            samples: List[float] = []
            for _ in range(repeats):
                out.zero_()
                result = pipeline.run(in1, in2, out)
                report = validate_output(out, expected)
                if not report.matches:
                    raise RuntimeError(
                        f"Sweep run with n_streams={count} produced {report.mismatches} mismatches."
                    )
                samples.append(result.elapsed_ms)
                progress.update(1)
            points.append(SweepPoint(n_streams=count, samples_ms=samples))
            LOGGER.info("sweep_point | streams=%d | median_ms=%.3f", count, points[-1].median_ms)

    baseline = points[0].median_ms
    for point in points:
        point.speedup = baseline / point.median_ms if point.median_ms > 0 else None
    return points


__all__ = ["SweepPoint", "sweep_stream_counts"]
