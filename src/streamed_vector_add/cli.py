"""Command-line driver: generate operands, run the pipeline, validate, write a manifest."""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Sequence

from .backends import resolve_backend
from .baselines import timed_sequential_add
from .config import PipelineConfig, load_pipeline_config
from .data import generate_operands
from .errors import PipelineError
from .evaluation import validate_output
from .pipeline import StreamPipeline
from .utils import (
    configure_logging,
    describe_device,
    get_git_metadata,
    resolve_device,
    seed_everything,
)

EXIT_OK = 0
EXIT_PIPELINE_FAILURE = 1
EXIT_MISMATCH = 2


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Add two integer vectors on the device with overlapped streams."
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Optional YAML file with pipeline settings; CLI flags override it.",
    )
    parser.add_argument("--n", type=int, default=None, help="Number of elements.")
    parser.add_argument(
        "--block-size",
        type=int,
        default=None,
        help="Elements handled by one kernel program (default 512).",
    )
    parser.add_argument(
        "--streams",
        type=int,
        default=None,
        help="Number of independent streams / partitions (default 1).",
    )
    parser.add_argument(
        "--device",
        choices=("cpu", "cuda"),
        default=None,
        help="Execution device. Falls back to SVA_DEVICE when omitted.",
    )
    parser.add_argument("--seed", type=int, default=None, help="RNG seed for operands.")
    parser.add_argument(
        "--no-validate",
        action="store_true",
        help="Skip comparison against the sequential reference.",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Where to write the run manifest JSON.",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=("DEBUG", "INFO", "WARNING", "ERROR"),
        help="Logging verbosity.",
    )
    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> PipelineConfig:
    """Merge the optional YAML config with CLI overrides."""

    base = load_pipeline_config(args.config) if args.config is not None else PipelineConfig()
    payload = base.as_dict()
    overrides = {
        "n": args.n,
        "block_size": args.block_size,
        "n_streams": args.streams,
        "device": args.device,
        "seed": args.seed,
    }
    payload.update({key: value for key, value in overrides.items() if value is not None})
    if args.no_validate:
        payload["validate"] = False
    return PipelineConfig.from_mapping(payload)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)
    logger = configure_logging(
        args.log_level,
        name="streamed vector add.cli",
        extra_loggers=["streamed vector add"],
    )
    config = build_config(args)
    device = resolve_device(config.device)
    device_info = describe_device(device)
    logger.info("device | %s", " | ".join(f"{key}={value}" for key, value in device_info.items()))

    seed_everything(config.seed)
    in1, in2, out = generate_operands(config.n, seed=config.seed)

    manifest: Dict[str, Any] = {
        "config": {**config.as_dict(), "device": device},
        "device": device_info,
        "git": get_git_metadata().as_dict(),
    }
    try:
        pipeline = StreamPipeline.from_config(config, backend=resolve_backend(device))
        result = pipeline.run(in1, in2, out)
    except PipelineError as exc:
        logger.error("pipeline_failed | call_site=%s | detail=%s", exc.call_site, exc.detail)
        manifest["error"] = {"call_site": exc.call_site, "detail": exc.detail}
        _write_manifest(args.output, manifest, logger)
        return EXIT_PIPELINE_FAILURE

    manifest["result"] = result.as_dict()
    logger.info(
        "pipeline | n=%d | streams=%d | block=%d | elapsed_ms=%.3f",
        result.n,
        result.n_streams,
        result.block_size,
        result.elapsed_ms,
    )

    exit_code = EXIT_OK
    if config.validate:
        expected, reference_ms = timed_sequential_add(in1, in2)
        report = validate_output(out, expected)
        manifest["validation"] = {**report.as_dict(), "reference_ms": reference_ms}
        if report.matches:
            logger.info("validation | status=pass | checked=%d", report.checked)
        else:
            logger.warning(
                "validation | status=fail | mismatches=%d | first=%s",
                report.mismatches,
                report.first_mismatch,
            )
            exit_code = EXIT_MISMATCH

    _write_manifest(args.output, manifest, logger)
    return exit_code


def _write_manifest(path: Optional[Path], manifest: Dict[str, Any], logger: logging.Logger) -> None:
    if path is None:
        return
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(manifest, indent=2, sort_keys=True), encoding="utf-8")
    logger.info("manifest_written | path=%s", path)


__all__ = ["build_config", "main", "parse_args"]
