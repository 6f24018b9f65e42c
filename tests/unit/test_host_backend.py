"""Ordering and marker semantics of the host stream emulation."""

from __future__ import annotations

import threading

import pytest
import torch

from streamed_vector_add.backends.host import HostEvent, HostStream, emulate_vector_add


def test_stream_runs_operations_in_submission_order() -> None:
    stream = HostStream("test-fifo")
    seen: list[int] = []
    try:
        for value in range(50):
            stream.submit(seen.append, value)
        stream.synchronize()
    finally:
        stream.close()

    assert seen == list(range(50))


def test_wait_stream_orders_across_streams() -> None:
    producer = HostStream("test-producer")
    consumer = HostStream("test-consumer")
    gate = threading.Event()
    seen: list[str] = []
    try:
        producer.submit(gate.wait)
        producer.submit(seen.append, "produced")
        consumer.wait_stream(producer)
        consumer.submit(seen.append, "consumed")
        gate.set()
        consumer.synchronize()
    finally:
        producer.close()
        consumer.close()

    assert seen == ["produced", "consumed"]


def test_event_elapsed_time_is_non_negative_milliseconds() -> None:
    stream = HostStream("test-timing")
    start = HostEvent(enable_timing=True)
    stop = HostEvent(enable_timing=True)
    try:
        start.record(stream)
        stream.submit(lambda: sum(range(1000)))
        stop.record(stream)
        stop.synchronize()
    finally:
        stream.close()

    assert start.query() and stop.query()
    assert start.elapsed_time(stop) >= 0.0


def test_elapsed_time_requires_timing_events() -> None:
    stream = HostStream("test-no-timing")
    start = HostEvent()
    stop = HostEvent()
    try:
        start.record(stream)
        stop.record(stream)
        stop.synchronize()
    finally:
        stream.close()

    with pytest.raises(RuntimeError, match="enable_timing"):
        start.elapsed_time(stop)


def test_failed_operation_skips_rest_and_surfaces_on_marker() -> None:
    stream = HostStream("test-failure")
    seen: list[str] = []

    def explode() -> None:
        raise RuntimeError("boom")

    try:
        stream.submit(explode)
        stream.submit(seen.append, "after")
        with pytest.raises(RuntimeError, match="boom"):
            stream.synchronize()
    finally:
        stream.close()

    assert seen == []


def test_emulated_kernel_masks_overprovisioned_grid() -> None:
    a = torch.arange(10, dtype=torch.int32)
    b = torch.full((10,), 5, dtype=torch.int32)
    out = torch.full((12,), -1, dtype=torch.int32)

    # 3 programs of 4 lanes = 12 lanes for 10 elements; lanes 10 and 11 stay idle.
    emulate_vector_add(a, b, out[:10], length=10, block_size=4, grid=3)

    assert out[:10].tolist() == [value + 5 for value in range(10)]
    assert out[10:].tolist() == [-1, -1]


def test_emulated_kernel_leaves_lanes_beyond_the_grid_untouched() -> None:
    a = torch.arange(10, dtype=torch.int32)
    b = torch.ones(10, dtype=torch.int32)
    out = torch.zeros(10, dtype=torch.int32)

    # 2 programs of 3 lanes cover only the first 6 elements.
    emulate_vector_add(a, b, out, length=10, block_size=3, grid=2)

    assert out.tolist() == [1, 2, 3, 4, 5, 6, 0, 0, 0, 0]
