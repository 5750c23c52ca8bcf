"""
Kaleidoscope Test Configuration
===============================

Keeps every test independent of the caller's environment: the
KALEIDOSCOPE_* variables are removed and the cached default
configuration is reset around each test.
"""

import pytest

from kaleidoscope.config import set_default_config


ENV_VARS = (
    "KALEIDOSCOPE_RECOVERY",
    "KALEIDOSCOPE_PROMPT",
    "KALEIDOSCOPE_MAX_ERRORS",
    "KALEIDOSCOPE_PRECEDENCE",
)


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    set_default_config(None)
    yield
    set_default_config(None)


@pytest.fixture
def status_lines():
    """A driver sink that records status lines (prompts excluded)."""
    lines = []

    def sink(text: str, newline: bool = True) -> None:
        if newline and text:
            lines.append(text)

    sink.lines = lines
    return sink
