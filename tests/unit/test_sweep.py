"""Stream-count sweep tests on the host backend."""

from __future__ import annotations

import pytest

from streamed_vector_add.evaluation import sweep_stream_counts


def test_sweep_reports_each_stream_count(host_backend) -> None:
    points = sweep_stream_counts(
        host_backend,
        n=257,
        stream_counts=[1, 2, 4],
        block_size=32,
        repeats=2,
        seed=5,
        show_progress=False,
    )

    assert [point.n_streams for point in points] == [1, 2, 4]
    assert all(len(point.samples_ms) == 2 for point in points)
    assert all(point.median_ms >= 0.0 for point in points)
    payload = points[1].as_dict()
    assert set(payload) == {"n_streams", "median_ms", "samples_ms", "speedup"}


def test_sweep_rejects_empty_counts(host_backend) -> None:
    with pytest.raises(ValueError, match="stream_counts"):
        sweep_stream_counts(host_backend, n=8, stream_counts=[], block_size=4)
