"""Pytest configuration and fixtures for tagmatch tests."""

from __future__ import annotations

import tempfile
from pathlib import Path
from typing import Generator

import pytest

from tagmatch import config
from tagmatch.config import Settings


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch: pytest.MonkeyPatch, temp_dir: Path) -> Generator[None, None, None]:
    """Keep tests away from the developer's environment and working directory."""
    monkeypatch.chdir(temp_dir)
    monkeypatch.delenv("TAGMATCH_TAGS", raising=False)
    monkeypatch.delenv("TAGMATCH_LOGGING__LEVEL", raising=False)
    monkeypatch.delenv("TAGMATCH_LOGGING__FORMAT", raising=False)
    monkeypatch.setattr(config, "_settings", None)
    yield


@pytest.fixture
def test_settings() -> Settings:
    """Create test settings with a couple of rules."""
    return Settings(
        tags=["qa", "eu"],
        rules=[
            {"name": "seed-data", "expression": "!prod and (qa, dev)"},
            {"name": "audit", "expression": "@prod"},
        ],
        logging={"level": "DEBUG"},
    )


@pytest.fixture
def sample_config_yaml(temp_dir: Path) -> Path:
    """Create a sample tagmatch.yaml file for testing."""
    config_content = """
tags: "qa, ${TAGMATCH_TEST_REGION}"

rules:
  - name: seed-data
    expression: "!prod and (qa, dev)"
    description: Load fixture rows
  - name: audit
    expression: "@prod"
  - name: legacy-cleanup
    expression: "legacy"
    enabled: false

logging:
  level: "DEBUG"
  format: "console"
"""

    config_path = temp_dir / "config.yaml"
    config_path.write_text(config_content)
    return config_path
