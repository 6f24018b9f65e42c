"""Pytest fixtures and path configuration for streamed vector-add tests."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

REPO_ROOT = Path(__file__).resolve().parents[1]
SRC_DIR = REPO_ROOT / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from streamed_vector_add.backends import HostBackend  # noqa: E402


@pytest.fixture
def host_backend():
    """Fresh host backend so poisoning in one test never leaks into another."""

    backend = HostBackend()
    yield backend
    assert backend.registered_regions == 0
