"""
Pytest configuration and shared fixtures for the clock block tests.
"""

import pytest


@pytest.fixture
def write_config(tmp_path):
    """
    Write a YAML config into a temporary directory and return its path.
    """
    def _write(text: str, name: str = "clock.yaml") -> str:
        path = tmp_path / name
        path.write_text(text, encoding="utf-8")
        return str(path)

    return _write


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """
    Point HOME at an empty directory and drop the config override.
    """
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    monkeypatch.delenv("SWIFTBAR_CLOCK_CONFIG", raising=False)
    return tmp_path
