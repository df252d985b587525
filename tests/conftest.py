"""Pytest configuration and shared fixtures."""

import pytest
from pathlib import Path
from git_ingest.config import IngestConfig


@pytest.fixture
def temp_repo(tmp_path: Path) -> Path:
    """Create a small project: README, one JS source, a .gitignore and an ignored log."""
    repo = tmp_path / "test_repo"
    repo.mkdir()

    (repo / "README.md").write_text("# Test")
    (repo / "src").mkdir()
    (repo / "src" / "index.js").write_text('console.log("hi")')
    (repo / ".gitignore").write_text("*.log\n")
    (repo / "debug.log").write_text("should never appear")

    return repo


@pytest.fixture
def config() -> IngestConfig:
    """Provide a test configuration."""
    return IngestConfig(concurrency_limit=4)


@pytest.fixture
def output_path(tmp_path: Path) -> Path:
    """Artifact location outside the ingested tree."""
    return tmp_path / "artifact.txt"
