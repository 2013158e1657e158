"""Readers for Claude's aggregate stats and prompt history files."""

import json
import logging
from typing import Optional

from pydantic import ValidationError

from claude_dashboard.core.disk_cache import MtimeCache
from claude_dashboard.core.paths import ClaudePaths
from claude_dashboard.schemas.analytics import HistoryEntry, StatsCache

logger = logging.getLogger(__name__)


class StatsReader:
    """Parse stats-cache.json and history.jsonl."""

    def __init__(
        self,
        paths: Optional[ClaudePaths] = None,
        cache: Optional[MtimeCache[StatsCache]] = None,
    ):
        self.paths = paths or ClaudePaths()
        self.cache = cache if cache is not None else MtimeCache()

    def read(self) -> Optional[StatsCache]:
        """Return the validated stats file, or None if it is missing or malformed."""
        path = self.paths.stats_path
        try:
            mtime_ms = path.stat().st_mtime * 1000
        except FileNotFoundError:
            return None

        cached = self.cache.get(str(path), mtime_ms)
        if cached is not None:
            return cached

        try:
            with open(path, encoding="utf-8") as f:
                stats = StatsCache.model_validate(json.load(f))
        except (OSError, ValueError) as e:
            logger.warning("Could not read stats file %s: %s", path, e)
            return None
        self.cache.set(str(path), mtime_ms, stats)
        return stats

    def read_history(self, limit: Optional[int] = None) -> list[HistoryEntry]:
        """Prompt history, most recent first. Malformed lines are skipped."""
        path = self.paths.history_path
        if not path.exists():
            return []

        entries = []
        with open(path, encoding="utf-8", errors="replace") as f:
            for line in f:
                line = line.strip()
                if not line:
                    continue
                try:
                    entry = HistoryEntry.model_validate_json(line)
                except ValidationError:
                    continue
                if entry.display and entry.timestamp and entry.session_id:
                    entries.append(entry)

        entries.sort(key=lambda e: e.timestamp, reverse=True)
        return entries[:limit] if limit else entries


def daily_token_totals(stats: StatsCache) -> dict[str, int]:
    """Sum tokens across models for each day."""
    return {
        day.date: sum(day.tokens_by_model.values())
        for day in stats.daily_model_tokens
    }


def daily_session_counts(stats: StatsCache) -> dict[str, int]:
    return {day.date: day.session_count for day in stats.daily_activity}
