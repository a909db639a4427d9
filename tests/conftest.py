"""Shared fixtures for signoff tests."""

import logging

import pytest

from signoff.lib.config import load_config
from signoff.workflow.engine import ProgressionEngine

FIXED_TIME = "2026-01-01T00:00:00+00:00"


@pytest.fixture
def config(tmp_path, monkeypatch):
    """Config rooted in a temp project, isolated from SIGNOFF_* env vars."""
    monkeypatch.delenv("SIGNOFF_OUTPUT_DIR", raising=False)
    monkeypatch.delenv("SIGNOFF_LOCK_TIMEOUT", raising=False)
    return load_config(tmp_path, lock_timeout=2)


@pytest.fixture
def engine(config):
    """Engine with no governance configured and a fixed clock."""
    return ProgressionEngine(config, clock=lambda: FIXED_TIME)


@pytest.fixture
def configured_engine(engine):
    """Engine with governance set up."""
    engine.governance.configure(["alice", "bob"], ["carol"], ["dave"], "PROJ")
    return engine


@pytest.fixture
def initiative(configured_engine):
    """A freshly created initiative FEAT-1."""
    return configured_engine.create("FEAT-1", "Checkout redesign")


@pytest.fixture(autouse=True)
def reset_signoff_logger():
    """CLI tests call setup_logging(); keep its level and handlers out of other tests."""
    logger = logging.getLogger("signoff")
    level, handlers = logger.level, list(logger.handlers)
    yield
    logger.setLevel(level)
    logger.handlers[:] = handlers
