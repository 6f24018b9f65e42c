"""Fail-fast error taxonomy for the streamed vector-add pipeline."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator, Type

LOGGER = logging.getLogger("streamed vector add.errors")


class PipelineError(RuntimeError):
    """Fatal platform failure raised at the call site that detected it."""

    def __init__(self, call_site: str, detail: str) -> None:
        super().__init__(f"{call_site}: {detail}")
        self.call_site = call_site
        self.detail = detail


class ResourceExhaustedError(PipelineError):
    """Pinning or device allocation could not be satisfied."""


class LaunchError(PipelineError):
    """An asynchronous copy, kernel launch or synchronization was rejected."""


@contextmanager
def fail_fast(call_site: str, error_cls: Type[PipelineError] = LaunchError) -> Iterator[None]:
    """Translate platform ``RuntimeError``s raised inside the block into ``error_cls``.

    ``torch.cuda.CudaError`` and ``torch.OutOfMemoryError`` both derive from
    ``RuntimeError``; errors that already belong to the taxonomy pass through
    untouched so the innermost call site is the one reported.
    """

    try:
        yield
    except (PipelineError, NotImplementedError):
        raise
    except RuntimeError as exc:
        LOGGER.error("platform_call_failed | call_site=%s | detail=%s", call_site, exc)
        raise error_cls(call_site, str(exc)) from exc


__all__ = ["LaunchError", "PipelineError", "ResourceExhaustedError", "fail_fast"]
