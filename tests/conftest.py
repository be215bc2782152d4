"""Shared test configuration."""

import logging

import pytest
import structlog


@pytest.fixture(autouse=True)
def quiet_structlog():
    """Keep structlog's default stdout logger out of captured command output."""
    structlog.configure(wrapper_class=structlog.make_filtering_bound_logger(logging.CRITICAL))
    yield
    structlog.reset_defaults()
