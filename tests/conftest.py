"""Pytest configuration for all tests."""

import os

import pytest


ENV_VARS = (
    "GITHUB_TOKEN",
    "GITHUB_REPOSITORY",
    "ANTHROPIC_API_KEY",
)


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Keep host credentials and AUTOCODER_* settings out of every test."""
    for name in list(os.environ):
        if name.upper().startswith("AUTOCODER_") or name.upper() in ENV_VARS:
            monkeypatch.delenv(name, raising=False)
