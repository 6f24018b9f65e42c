"""Logging setup shared by the pipeline runtime and its CLI."""

from __future__ import annotations

import logging
from logging import Logger
from typing import Iterable, Optional, Union

ROOT_LOGGER_NAME = "streamed vector add"
LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def _coerce_level(level: Union[int, str]) -> int:
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.strip().upper())
    if not isinstance(resolved, int):
        raise ValueError(f"Unknown logging level: {level!r}")
    return resolved


def configure_logging(
    level: Union[int, str] = logging.INFO,
    *,
    name: str = ROOT_LOGGER_NAME,
    propagate: bool = False,
    extra_loggers: Optional[Iterable[str]] = None,
) -> Logger:
    """Configure and return a logger, optionally binding further loggers to the same handler.

    Parameters
    ----------
    level:
        Verbosity as a ``logging`` constant or its name (``"DEBUG"``).
    name:
        Logger to configure. Component loggers live beneath
        ``"streamed vector add"`` and inherit its handler.
    extra_loggers:
        Additional logger names that should share the handler and level,
        typically the package root when ``name`` is a CLI child logger.
    """

    numeric_level = _coerce_level(level)
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))

    targets = [logging.getLogger(name)]
    targets.extend(logging.getLogger(extra) for extra in extra_loggers or ())
    for target in targets:
        # Reconfiguring keeps the first handler so repeated CLI calls do not duplicate lines.
        if not any(isinstance(existing, logging.StreamHandler) for existing in target.handlers):
            target.addHandler(handler)
        target.setLevel(numeric_level)
        target.propagate = propagate
    return targets[0]


__all__ = ["LOG_FORMAT", "ROOT_LOGGER_NAME", "configure_logging"]
