"""Elapsed-time instrument tests on the host backend."""

from __future__ import annotations

import pytest

from streamed_vector_add.pipeline.timing import ElapsedTimer


def test_elapsed_is_unreadable_before_stop(host_backend) -> None:
    timer = ElapsedTimer(host_backend)

    with pytest.raises(RuntimeError, match="after stop"):
        timer.elapsed()
    timer.start()
    with pytest.raises(RuntimeError, match="after stop"):
        timer.elapsed()


def test_stop_requires_start(host_backend) -> None:
    timer = ElapsedTimer(host_backend)

    with pytest.raises(RuntimeError, match="before start"):
        timer.stop()


def test_elapsed_is_non_negative_and_idempotent(host_backend) -> None:
    timer = ElapsedTimer(host_backend)
    timer.start()
    timer.stop()

    first = timer.elapsed()
    second = timer.elapsed()

    assert first >= 0.0
    assert first == second


def test_stop_joins_other_streams(host_backend) -> None:
    worker = host_backend.new_stream()
    seen: list[str] = []
    try:
        timer = ElapsedTimer(host_backend)
        timer.start()
        worker.submit(seen.append, "work")
        timer.stop(after=[worker])
        timer.elapsed()
        # stop() fired only after the worker drained.
        assert seen == ["work"]
    finally:
        host_backend.release_stream(worker)
