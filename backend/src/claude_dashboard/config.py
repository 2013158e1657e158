"""Claude Dashboard configuration."""

import os
from pathlib import Path


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _env_path(name: str, default: Path) -> Path:
    value = os.getenv(name)
    if not value:
        return default
    return Path(value).expanduser()


# Where Claude Code writes its transcripts
CLAUDE_DIR = _env_path("CLAUDE_DASHBOARD_CLAUDE_DIR", Path.home() / ".claude")

# Dashboard-owned state (settings + derived caches)
DATA_DIR = _env_path("CLAUDE_DASHBOARD_DATA_DIR", Path.home() / ".claude-dashboard")
SETTINGS_PATH = DATA_DIR / "settings.json"
CACHE_DIR = DATA_DIR / "cache"

# A session counts as live if written to within this window and its lock dir exists
ACTIVE_THRESHOLD_MS = _env_int("CLAUDE_DASHBOARD_ACTIVE_THRESHOLD_MS", 120_000)

DEFAULT_PAGE_SIZE = _env_int("CLAUDE_DASHBOARD_DEFAULT_PAGE_SIZE", 20)

# Server settings
HOST = os.getenv("CLAUDE_DASHBOARD_HOST", "127.0.0.1")
PORT = _env_int("CLAUDE_DASHBOARD_PORT", 8000)

LOG_LEVEL = os.getenv("CLAUDE_DASHBOARD_LOG_LEVEL", "INFO").upper()

# Comma-separated origins allowed to call the API from a browser
CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv("CLAUDE_DASHBOARD_CORS_ORIGINS", "*").split(",")
    if origin.strip()
]
