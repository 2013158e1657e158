"""Shared fixtures for building ~/.claude-style directory trees."""

import pytest

from claude_dashboard.core.paths import ClaudePaths

PROJECT_DIR = "-Users-dev-code-webapp"


@pytest.fixture
def claude_dir(tmp_path):
    """An empty Claude config directory with a projects/ folder."""
    root = tmp_path / ".claude"
    (root / "projects").mkdir(parents=True)
    return root


@pytest.fixture
def paths(claude_dir):
    return ClaudePaths(claude_dir)


@pytest.fixture
def project_dir(claude_dir):
    path = claude_dir / "projects" / PROJECT_DIR
    path.mkdir()
    return path
