"""Contiguous partitioning of the element index space across streams."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True, slots=True)
class Partition:
    """Half-open range ``[offset, offset + length)`` owned by stream ``index``."""

    index: int
    offset: int
    length: int

    @property
    def stop(self) -> int:
        return self.offset + self.length

    @property
    def is_empty(self) -> bool:
        return self.length == 0

    def as_slice(self) -> slice:
        return slice(self.offset, self.stop)


def plan_partitions(n: int, n_streams: int) -> Tuple[Partition, ...]:
    """Split ``n`` elements into ``n_streams`` contiguous partitions.

    Every partition but the last is ``n // n_streams + 1`` elements long and
    the last absorbs whatever remains. Because that base length over-provisions,
    trailing partitions can run past ``n`` when ``n_streams`` is large; their
    offsets are clamped to ``n`` and their lengths to what is left, so they
    come out empty instead of overlapping or overrunning.
    """

    if n < 0:
        raise ValueError(f"n must be >= 0, received {n}.")
    if n_streams <= 0:
        raise ValueError(f"n_streams must be >= 1, received {n_streams}.")

    base = n // n_streams + 1
    partitions = []
    for index in range(n_streams):
        offset = min(index * base, n)
        if index < n_streams - 1:
            length = min(base, n - offset)
        else:
            length = n - offset
        partitions.append(Partition(index=index, offset=offset, length=length))
    return tuple(partitions)


def grid_size(length: int, block_size: int) -> int:
    """Number of programs needed to cover ``length`` elements, 0 when empty."""

    if block_size <= 0:
        raise ValueError(f"block_size must be >= 1, received {block_size}.")
    if length <= 0:
        return 0
    return (length + block_size - 1) // block_size


__all__ = ["Partition", "grid_size", "plan_partitions"]
