"""Pytest configuration and fixtures."""

import pytest

from evolutions.config import settings


@pytest.fixture(autouse=True)
def default_settings(monkeypatch):
    """Every test runs against the default settings."""
    monkeypatch.setattr(settings, "version_key", "version")
    monkeypatch.setattr(settings, "warn_on_duplicate_versions", True)
