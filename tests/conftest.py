"""Pytest configuration and shared fixtures."""

import sys
from pathlib import Path

import pytest

# Ensure src directory is in Python path for all tests
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from todotxt.config import Config  # noqa: E402
from todotxt.registry import AnnotationRegistry, reset_registry  # noqa: E402


@pytest.fixture(autouse=True)
def isolated_environment(tmp_path, monkeypatch):
    """Keep tests away from the user's config and the global registry."""
    monkeypatch.setenv("TODOTXT_CONFIG", str(tmp_path / "config.yaml"))
    monkeypatch.delenv("TODOTXT_TRACK", raising=False)
    Config._instance = None
    reset_registry()
    yield
    Config._instance = None
    reset_registry()


@pytest.fixture
def registry():
    """Registry that counts hits."""
    return AnnotationRegistry(tracking_enabled=True)


@pytest.fixture
def untracked_registry():
    """Registry that records entries without counting hits."""
    return AnnotationRegistry(tracking_enabled=False)
