"""Shared pytest fixtures for Tessera tests.

This module provides common fixtures used across all test modules:
- A whitespace tokenizer so token counts are predictable and offline
- Settings isolation (no TESSERA_ variables, no .env file)
- Ready-made role and task components
"""

from __future__ import annotations

import os

import pytest

from tessera.component import Component
from tessera.config import clear_settings_cache


# -----------------------------------------------------------------------------
# Tokenizer
# -----------------------------------------------------------------------------


class WhitespaceEncoding:
    """Stand-in for a tiktoken Encoding: one token per whitespace-separated word."""

    name = "whitespace"

    def encode(self, text: str, disallowed_special=()) -> list[str]:
        return text.split()


@pytest.fixture(autouse=True)
def whitespace_tokenizer(monkeypatch):
    """Count tokens as whitespace-separated words in every test.

    tiktoken downloads its encodings on first use; replacing the encoding
    keeps the suite offline and makes expected counts easy to read.
    """
    monkeypatch.setattr(
        "tessera.telemetry.tokens.get_encoding",
        lambda name: WhitespaceEncoding(),
    )


# -----------------------------------------------------------------------------
# Settings Isolation
# -----------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def clean_settings(monkeypatch, tmp_path):
    """Run every test with default settings."""
    for key in [k for k in os.environ if k.startswith("TESSERA_")]:
        monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)
    clear_settings_cache()
    yield
    clear_settings_cache()


# -----------------------------------------------------------------------------
# Components
# -----------------------------------------------------------------------------


@pytest.fixture
def role_component() -> Component:
    """Component rendering "You are a {{role}}."."""
    return Component(key="role", schema={"role": str}, template="You are a {{role}}.")


@pytest.fixture
def task_component() -> Component:
    """Component rendering "Task: {{task}}"."""
    return Component(key="task", schema={"task": str}, template="Task: {{task}}")
