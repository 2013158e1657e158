"""Tests for Claude directory path helpers."""

from pathlib import Path

from claude_dashboard.core.paths import (
    ClaudePaths,
    decode_project_dir_name,
    encode_project_dir_name,
    extract_project_name,
    extract_session_id,
    lock_dir_path,
    subagent_transcript_path,
)


def test_claude_paths(tmp_path):
    paths = ClaudePaths(tmp_path)

    assert paths.projects_dir == tmp_path / "projects"
    assert paths.stats_path == tmp_path / "stats-cache.json"
    assert paths.history_path == tmp_path / "history.jsonl"
    assert paths.session_file("-a-b", "s1") == tmp_path / "projects" / "-a-b" / "s1.jsonl"


def test_decode_and_encode_project_dir_name():
    assert decode_project_dir_name("-Users-alice-code-foo") == "/Users/alice/code/foo"
    assert encode_project_dir_name("/Users/alice/code/foo") == "-Users-alice-code-foo"
    # Dashes inside directory names do not survive the round trip
    assert decode_project_dir_name("-Users-alice-my-app") == "/Users/alice/my/app"


def test_extract_names():
    assert extract_project_name("/Users/alice/code/myproject") == "myproject"
    assert extract_project_name("/Users/alice/code/myproject/") == "myproject"
    assert extract_session_id("abc-123.jsonl") == "abc-123"
    assert extract_session_id("notes.jsonl.bak") == "notes.jsonl.bak"


def test_lock_and_subagent_paths():
    session_file = Path("/p/-a/sess-1.jsonl")

    assert lock_dir_path(session_file) == Path("/p/-a/sess-1")
    assert subagent_transcript_path(session_file, "a1b2") == Path(
        "/p/-a/sess-1/subagents/agent-a1b2.jsonl"
    )
