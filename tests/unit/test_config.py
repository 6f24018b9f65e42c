"""Pipeline configuration validation and YAML loading."""

from __future__ import annotations

import logging

import pytest

from streamed_vector_add.config import (
    DEFAULT_BLOCK_SIZE,
    DEFAULT_N,
    DEFAULT_N_STREAMS,
    PipelineConfig,
    load_pipeline_config,
)


def test_defaults_follow_reference_scenario() -> None:
    config = PipelineConfig()

    assert config.n == DEFAULT_N == (1 << 24) + 1
    assert config.block_size == DEFAULT_BLOCK_SIZE == 512
    assert config.n_streams == DEFAULT_N_STREAMS == 1
    assert config.device is None
    assert config.validate is True


@pytest.mark.parametrize(
    "kwargs, field",
    [
        ({"n": -1}, "n"),
        ({"block_size": 0}, "block_size"),
        ({"n_streams": 0}, "n_streams"),
        ({"n_streams": 2.5}, "n_streams"),
        ({"block_size": True}, "block_size"),
    ],
)
def test_rejects_out_of_range_values(kwargs, field: str) -> None:
    with pytest.raises(ValueError, match=f"PipelineConfig.{field}"):
        PipelineConfig(**kwargs)


def test_device_is_normalised_and_checked() -> None:
    assert PipelineConfig(device=" CUDA ").device == "cuda"
    with pytest.raises(ValueError, match="device"):
        PipelineConfig(device="mps")


def test_from_mapping_ignores_unknown_keys(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING, logger="streamed vector add.config"):
        config = PipelineConfig.from_mapping({"n": 10, "n_streams": 3, "colour": "blue"})

    assert (config.n, config.n_streams) == (10, 3)
    assert "colour" in caplog.text


def test_load_yaml_with_pipeline_section(tmp_path) -> None:
    path = tmp_path / "pipeline.yaml"
    path.write_text(
        "pipeline:\n  n: 1000\n  block_size: 128\n  n_streams: 4\n  device: cpu\n  seed: 3\n",
        encoding="utf-8",
    )

    config = load_pipeline_config(path)

    assert config.as_dict() == {
        "n": 1000,
        "block_size": 128,
        "n_streams": 4,
        "device": "cpu",
        "seed": 3,
        "validate": True,
    }


def test_load_yaml_rejects_non_mapping(tmp_path) -> None:
    path = tmp_path / "bad.yaml"
    path.write_text("- 1\n- 2\n", encoding="utf-8")

    with pytest.raises(ValueError, match="mapping"):
        load_pipeline_config(path)


def test_empty_yaml_yields_defaults(tmp_path) -> None:
    path = tmp_path / "empty.yaml"
    path.write_text("", encoding="utf-8")

    assert load_pipeline_config(path) == PipelineConfig()
