"""Unit test environment helpers."""

import pytest


@pytest.fixture(autouse=True)
def _minimal_env(monkeypatch):
    """Keep unit tests independent of the caller's telemetry settings."""
    monkeypatch.delenv("PGERROR_CLASSIFIED_ERROR_TELEMETRY", raising=False)
    yield
