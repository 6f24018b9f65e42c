# ruff: noqa: E402
"""Time the pipeline across several stream counts and report overlap speedup."""

from __future__ import annotations

# Ensure local src/ is on sys.path when running from the repo without installation
import os as _os
import sys as _sys

_REPO_ROOT = _os.path.abspath(_os.path.join(_os.path.dirname(__file__), ".."))
_SRC_PATH = _os.path.join(_REPO_ROOT, "src")
if _SRC_PATH not in _sys.path and _os.path.isdir(_SRC_PATH):
    _sys.path.insert(0, _SRC_PATH)

import argparse
import json
from pathlib import Path
from typing import List

from streamed_vector_add.backends import resolve_backend
from streamed_vector_add.config import DEFAULT_BLOCK_SIZE, DEFAULT_N
from streamed_vector_add.evaluation import sweep_stream_counts
from streamed_vector_add.utils import configure_logging, resolve_device


def _parse_counts(raw: str) -> List[int]:
    counts = [int(item) for item in raw.split(",") if item.strip()]
    if not counts or any(count < 1 for count in counts):
        raise argparse.ArgumentTypeError("stream counts must be positive integers")
    return counts


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Sweep pipeline depth and report timings.")
    parser.add_argument("--n", type=int, default=DEFAULT_N, help="Number of elements.")
    parser.add_argument("--block-size", type=int, default=DEFAULT_BLOCK_SIZE)
    parser.add_argument(
        "--streams",
        type=_parse_counts,
        default=[1, 2, 4, 8],
        help="Comma-separated stream counts; the first one is the speedup baseline.",
    )
    parser.add_argument("--repeats", type=int, default=3, help="Runs per stream count.")
    parser.add_argument("--device", choices=("cpu", "cuda"), default=None)
    parser.add_argument("--seed", type=int, default=0)
    parser.add_argument(
        "--json",
        action="store_true",
        help="Emit results as JSON instead of a table.",
    )
    parser.add_argument("--output", type=Path, default=None, help="Optional JSON output path.")
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    logger = configure_logging(name="streamed vector add.cli.sweep")
    backend = resolve_backend(resolve_device(args.device))
    points = sweep_stream_counts(
        backend,
        n=args.n,
        stream_counts=args.streams,
        block_size=args.block_size,
        repeats=args.repeats,
        seed=args.seed,
    )
    payload = [point.as_dict() for point in points]
    if args.output is not None:
        args.output.parent.mkdir(parents=True, exist_ok=True)
        args.output.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        logger.info("sweep_written | path=%s", args.output)
    if args.json:
        print(json.dumps(payload, indent=2))
        return
    print(f"{'streams':>8} {'median_ms':>12} {'speedup':>8}")
    for point in points:
        speedup = f"{point.speedup:.2f}x" if point.speedup is not None else "-"
        print(f"{point.n_streams:>8} {point.median_ms:>12.3f} {speedup:>8}")


if __name__ == "__main__":
    main()
