"""API dependencies.

One instance of each collaborator per process; tests swap them through
``app.dependency_overrides``.
"""

from claude_dashboard.core.disk_cache import DiskCache
from claude_dashboard.core.paths import ClaudePaths
from claude_dashboard.core.scanner import SessionScanner
from claude_dashboard.core.settings_store import SettingsStore
from claude_dashboard.core.stats import StatsReader

_paths = ClaudePaths()
_session_scanner = SessionScanner(_paths)
_stats_reader = StatsReader(_paths)
_disk_cache = DiskCache()
_settings_store = SettingsStore()


def get_scanner() -> SessionScanner:
    return _session_scanner


def get_stats_reader() -> StatsReader:
    return _stats_reader


def get_disk_cache() -> DiskCache:
    return _disk_cache


def get_settings_store() -> SettingsStore:
    return _settings_store
