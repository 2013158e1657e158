"""Filesystem layout of the Claude Code data directory."""

import os
import re
from pathlib import Path
from typing import Optional

from claude_dashboard import config


class ClaudePaths:
    """Resolve canonical locations under a Claude config directory."""

    def __init__(self, claude_dir: Optional[Path] = None):
        """Initialize with Claude config directory."""
        if claude_dir is None:
            claude_dir = config.CLAUDE_DIR
        self.claude_dir = Path(claude_dir)
        self.projects_dir = self.claude_dir / "projects"
        self.stats_path = self.claude_dir / "stats-cache.json"
        self.history_path = self.claude_dir / "history.jsonl"

    def project_dir(self, dir_name: str) -> Path:
        return self.projects_dir / dir_name

    def session_file(self, dir_name: str, session_id: str) -> Path:
        return self.projects_dir / dir_name / f"{session_id}.jsonl"


def decode_project_dir_name(dir_name: str) -> str:
    """Decode a project directory name back to a filesystem path.

    Claude stores projects in dirs like "-Users-alice-code-foo", which maps
    to "/Users/alice/code/foo". The encoding is lossy: dashes that were part
    of the original path come back as slashes.
    """
    return re.sub(r"^-", "/", dir_name).replace("-", "/")


def encode_project_dir_name(project_path: str) -> str:
    """Encode an absolute project path the way Claude names its project dirs."""
    return project_path.replace("/", "-")


def extract_project_name(decoded_path: str) -> str:
    """"/Users/alice/code/myproject" -> "myproject"."""
    return os.path.basename(decoded_path.rstrip("/"))


def extract_session_id(filename: str) -> str:
    """"abc-123.jsonl" -> "abc-123"."""
    return re.sub(r"\.jsonl$", "", filename)


def lock_dir_path(session_file: Path) -> Path:
    """Directory next to a live session file, named like the file minus .jsonl."""
    return session_file.with_name(extract_session_id(session_file.name))


def subagent_transcript_path(session_file: Path, agent_id: str) -> Path:
    """Per-agent transcript stored under <session>/subagents/agent-<id>.jsonl."""
    return lock_dir_path(session_file) / "subagents" / f"agent-{agent_id}.jsonl"
