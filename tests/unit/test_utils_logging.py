"""Logging and seeding helpers."""

from __future__ import annotations

import logging

import pytest
import torch

from streamed_vector_add.utils.logging import configure_logging
from streamed_vector_add.utils.random import host_generator, seed_everything


def test_configure_logging_accepts_level_names() -> None:
    logger = configure_logging("debug", name="streamed vector add.test.names")

    assert logger.level == logging.DEBUG
    assert logger.propagate is False


def test_configure_logging_does_not_stack_handlers() -> None:
    name = "streamed vector add.test.handlers"
    configure_logging(name=name, extra_loggers=[f"{name}.child"])
    configure_logging(logging.WARNING, name=name, extra_loggers=[f"{name}.child"])

    for logger_name in (name, f"{name}.child"):
        logger = logging.getLogger(logger_name)
        assert len(logger.handlers) == 1
        assert logger.level == logging.WARNING


def test_configure_logging_rejects_unknown_level() -> None:
    with pytest.raises(ValueError, match="Unknown logging level"):
        configure_logging("chatty", name="streamed vector add.test.bad")


def test_seed_everything_makes_torch_draws_repeatable() -> None:
    seed_everything(123)
    first = torch.randint(0, 1000, (8,))
    seed_everything(123)
    second = torch.randint(0, 1000, (8,))

    assert torch.equal(first, second)


def test_seed_everything_ignores_none() -> None:
    state = torch.get_rng_state()

    seed_everything(None)

    assert torch.equal(state, torch.get_rng_state())


def test_host_generator_is_independent_of_global_state() -> None:
    torch.manual_seed(1)
    first = torch.randint(0, 1000, (8,), generator=host_generator(7))
    torch.manual_seed(2)
    second = torch.randint(0, 1000, (8,), generator=host_generator(7))

    assert torch.equal(first, second)
