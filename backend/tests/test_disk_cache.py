"""Tests for the on-disk and in-memory caches."""

import json
import logging

from pydantic import TypeAdapter

from claude_dashboard.core.disk_cache import CACHE_VERSION, DiskCache, MtimeCache
from claude_dashboard.schemas.session import SessionPage, SessionSummary

MTIME = 1767261600123.5


def _page():
    summary = SessionSummary(
        session_id="abc",
        project_path="/code/webapp",
        project_name="webapp",
        started_at="2026-01-01T10:00:00.000Z",
        last_active_at="2026-01-01T10:05:00.000Z",
    )
    return SessionPage(
        sessions=[summary], total_count=1, total_pages=1, page=1, page_size=20,
        projects=["webapp"],
    )


def test_round_trip(tmp_path):
    """Test that a written value reads back equal under the same mtime."""
    cache = DiskCache(tmp_path / "cache")
    page = _page()

    cache.write("sessions", "/src/file.jsonl", MTIME, page)

    assert cache.read("sessions", MTIME, SessionPage) == page


def test_entry_format(tmp_path):
    cache = DiskCache(tmp_path)
    cache.write("stats", "/src/stats.json", MTIME, {"a": 1})

    entry = json.loads((tmp_path / "stats.cache.json").read_text())

    assert entry["version"] == CACHE_VERSION
    assert entry["sourceFile"] == "/src/stats.json"
    assert entry["sourceMtimeMs"] == MTIME
    assert entry["cachedAt"]
    assert entry["data"] == {"a": 1}
    assert not (tmp_path / "stats.cache.json.tmp").exists()


def test_plain_values_with_type_adapter(tmp_path):
    cache = DiskCache(tmp_path)
    cache.write("counts", "/src", MTIME, {"Read": 3})

    assert cache.read("counts", MTIME, TypeAdapter(dict[str, int])) == {"Read": 3}


def test_stale_mtime_is_a_miss(tmp_path, caplog):
    cache = DiskCache(tmp_path)
    cache.write("sessions", "/src", MTIME, _page())

    with caplog.at_level(logging.DEBUG, logger="claude_dashboard.core.disk_cache"):
        assert cache.read("sessions", MTIME + 1, SessionPage) is None
    assert "Cache miss for 'sessions': source changed" in caplog.text


def test_missing_entry_is_a_miss(tmp_path):
    assert DiskCache(tmp_path / "nowhere").read("sessions", MTIME, SessionPage) is None


def test_corrupt_file_is_a_miss(tmp_path, caplog):
    (tmp_path / "sessions.cache.json").write_text("{truncated")

    with caplog.at_level(logging.WARNING):
        assert DiskCache(tmp_path).read("sessions", MTIME, SessionPage) is None
    assert "Cache read failed" in caplog.text


def test_version_mismatch_is_a_miss(tmp_path, caplog):
    entry = {"version": 99, "sourceFile": "/src", "sourceMtimeMs": MTIME, "data": {}}
    (tmp_path / "sessions.cache.json").write_text(json.dumps(entry))

    with caplog.at_level(logging.DEBUG, logger="claude_dashboard.core.disk_cache"):
        assert DiskCache(tmp_path).read("sessions", MTIME, SessionPage) is None
    assert "Cache miss for 'sessions': version mismatch" in caplog.text


def test_schema_mismatch_is_a_miss(tmp_path, caplog):
    cache = DiskCache(tmp_path)
    cache.write("sessions", "/src", MTIME, {"sessions": "wrong shape"})

    with caplog.at_level(logging.WARNING):
        assert cache.read("sessions", MTIME, SessionPage) is None
    assert "Cache validation failed" in caplog.text


def test_write_failure_is_logged(tmp_path, caplog):
    blocker = tmp_path / "file"
    blocker.write_text("")
    cache = DiskCache(blocker / "cache")

    with caplog.at_level(logging.WARNING):
        cache.write("sessions", "/src", MTIME, {"a": 1})
    assert "Cache write failed" in caplog.text


def test_invalidate(tmp_path):
    cache = DiskCache(tmp_path)
    cache.write("sessions", "/src", MTIME, {"a": 1})

    cache.invalidate("sessions")
    cache.invalidate("sessions")

    assert not cache.cache_path("sessions").exists()


def test_mtime_cache():
    cache = MtimeCache()
    cache.set("s1", 100.0, "summary")

    assert cache.get("s1", 100.0) == "summary"
    assert cache.get("s1", 101.0) is None
    assert cache.get("s2", 100.0) is None
    assert len(cache) == 1

    cache.clear()
    assert len(cache) == 0
