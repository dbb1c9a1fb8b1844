"""Pytest configuration for all tests."""

import os

import pytest


@pytest.fixture
def clean_release_env(monkeypatch):
    """Remove RELEASE_* overrides so settings fall back to their defaults."""
    for key in list(os.environ):
        if key.startswith("RELEASE_"):
            monkeypatch.delenv(key)
    return monkeypatch
