"""Command-line driver tests on the CPU backend."""

from __future__ import annotations

import json

import pytest

from streamed_vector_add import cli
from streamed_vector_add.backends import HostBackend
from streamed_vector_add.evaluation.validation import ValidationReport
from streamed_vector_add.utils.git import GitMetadata


@pytest.fixture(autouse=True)
def _isolate(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(cli, "resolve_backend", lambda device: HostBackend())
    monkeypatch.setattr(
        cli, "get_git_metadata", lambda: GitMetadata(sha="abc123", branch="main", dirty=False)
    )
    monkeypatch.delenv("SVA_DEVICE", raising=False)


def test_cli_runs_validates_and_writes_manifest(tmp_path) -> None:
    manifest_path = tmp_path / "runs" / "manifest.json"

    exit_code = cli.main(
        [
            "--device",
            "cpu",
            "--n",
            "1000",
            "--streams",
            "4",
            "--block-size",
            "64",
            "--seed",
            "11",
            "--output",
            str(manifest_path),
        ]
    )

    assert exit_code == cli.EXIT_OK
    manifest = json.loads(manifest_path.read_text(encoding="utf-8"))
    assert manifest["config"]["n_streams"] == 4
    assert manifest["config"]["device"] == "cpu"
    assert manifest["result"]["n"] == 1000
    assert len(manifest["result"]["partitions"]) == 4
    assert manifest["validation"]["matches"] is True
    assert manifest["git"]["sha"] == "abc123"


def test_cli_flags_override_yaml(tmp_path) -> None:
    config_path = tmp_path / "pipeline.yaml"
    config_path.write_text("n: 50\nn_streams: 2\nblock_size: 8\ndevice: cpu\n", encoding="utf-8")
    args = cli.parse_args(["--config", str(config_path), "--streams", "5", "--no-validate"])

    config = cli.build_config(args)

    assert (config.n, config.n_streams, config.block_size) == (50, 5, 8)
    assert config.validate is False


def test_cli_reports_mismatch_exit_code(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(
        cli,
        "validate_output",
        lambda out, expected: ValidationReport(checked=out.numel(), mismatches=1, first_mismatch=0),
    )

    assert cli.main(["--device", "cpu", "--n", "16"]) == cli.EXIT_MISMATCH


def test_cli_reports_pipeline_failure(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    class _BrokenBackend(HostBackend):
        def empty(self, length, dtype):
            raise RuntimeError("no device memory")

    monkeypatch.setattr(cli, "resolve_backend", lambda device: _BrokenBackend())
    manifest_path = tmp_path / "failed.json"

    exit_code = cli.main(["--device", "cpu", "--n", "16", "--output", str(manifest_path)])

    assert exit_code == cli.EXIT_PIPELINE_FAILURE
    manifest = json.loads(manifest_path.read_text(encoding="utf-8"))
    assert manifest["error"]["detail"] == "no device memory"
    assert "result" not in manifest
