"""Configuration helpers for the streamed vector-add pipeline."""

from .schemas import (
    DEFAULT_BLOCK_SIZE,
    DEFAULT_N,
    DEFAULT_N_STREAMS,
    PipelineConfig,
    load_pipeline_config,
)

__all__ = [
    "DEFAULT_BLOCK_SIZE",
    "DEFAULT_N",
    "DEFAULT_N_STREAMS",
    "PipelineConfig",
    "load_pipeline_config",
]
