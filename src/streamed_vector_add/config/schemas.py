"""Runtime configuration for the streamed vector-add pipeline."""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

LOGGER = logging.getLogger("streamed vector add.config")

DEFAULT_N = (1 << 24) + 1
DEFAULT_BLOCK_SIZE = 512
DEFAULT_N_STREAMS = 1


@dataclass(slots=True)
class PipelineConfig:
    """Problem size and tuning knobs for one pipeline run."""

    n: int = DEFAULT_N
    block_size: int = DEFAULT_BLOCK_SIZE
    n_streams: int = DEFAULT_N_STREAMS
    device: Optional[str] = None  # resolved from SVA_DEVICE when unset
    seed: Optional[int] = None
    validate: bool = True

    def __post_init__(self) -> None:
        self._validate_integer("n", self.n, minimum=0)
        self._validate_integer("block_size", self.block_size, minimum=1)
        self._validate_integer("n_streams", self.n_streams, minimum=1)
        if self.device is not None:
            device = str(self.device).strip().lower()
            if device not in {"cpu", "cuda"}:
                raise ValueError(f"PipelineConfig.device must be 'cpu' or 'cuda', received {device!r}.")
            self.device = device
        if self.seed is not None:
            self.seed = int(self.seed)
        self.validate = bool(self.validate)

    @staticmethod
    def _validate_integer(name: str, value: int, *, minimum: int) -> None:
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValueError(f"PipelineConfig.{name} must be an integer, received {value!r}.")
        if value < minimum:
            raise ValueError(f"PipelineConfig.{name} must be >= {minimum}, received {value}.")

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any]) -> "PipelineConfig":
        known = {item.name for item in fields(cls)}
        unknown = sorted(set(payload) - known)
        if unknown:
            LOGGER.warning("config_keys_ignored | keys=%s", ",".join(unknown))
        return cls(**{key: value for key, value in payload.items() if key in known})

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)


def load_pipeline_config(path: Path | str) -> PipelineConfig:
    """Read a YAML file whose top level (or ``pipeline:`` section) holds config keys."""

    with Path(path).open("r", encoding="utf-8") as handle:
        payload = yaml.safe_load(handle) or {}
    if not isinstance(payload, Mapping):
        raise ValueError(f"Pipeline config at {path} must be a mapping.")
    section = payload.get("pipeline", payload)
    if not isinstance(section, Mapping):
        raise ValueError(f"'pipeline' section in {path} must be a mapping.")
    return PipelineConfig.from_mapping(section)


__all__ = [
    "DEFAULT_BLOCK_SIZE",
    "DEFAULT_N",
    "DEFAULT_N_STREAMS",
    "PipelineConfig",
    "load_pipeline_config",
]
