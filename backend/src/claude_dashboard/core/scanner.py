"""Discover projects and session transcripts under ~/.claude/projects."""

import logging
import os
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from claude_dashboard import config
from claude_dashboard.core.disk_cache import MtimeCache
from claude_dashboard.core.parser import parse_summary
from claude_dashboard.core.paths import (
    ClaudePaths,
    decode_project_dir_name,
    extract_project_name,
    extract_session_id,
    lock_dir_path,
)
from claude_dashboard.schemas.session import SessionSummary

logger = logging.getLogger(__name__)


@dataclass
class ProjectInfo:
    """A project directory and the session files it holds."""

    dir_name: str
    decoded_path: str
    project_name: str
    session_files: list[str] = field(default_factory=list)


@dataclass
class SessionLocation:
    """Where a session transcript lives on disk."""

    path: Path
    dir_name: str

    @property
    def project_path(self) -> str:
        return decode_project_dir_name(self.dir_name)

    @property
    def project_name(self) -> str:
        return extract_project_name(self.project_path)


def file_mtime_ms(path: Path) -> float:
    return path.stat().st_mtime * 1000


def is_session_active(
    session_file: Path,
    threshold_ms: int = config.ACTIVE_THRESHOLD_MS,
    now: Optional[float] = None,
) -> bool:
    """A session is live if written to recently and its lock directory exists."""
    try:
        mtime_ms = file_mtime_ms(session_file)
    except OSError:
        return False

    if now is None:
        now = time.time()
    if now * 1000 - mtime_ms > threshold_ms:
        return False

    return lock_dir_path(session_file).is_dir()


class ProjectScanner:
    """List project directories that contain session files."""

    def __init__(self, paths: Optional[ClaudePaths] = None):
        self.paths = paths or ClaudePaths()

    def scan_projects(self) -> list[ProjectInfo]:
        try:
            entries = sorted(os.listdir(self.paths.projects_dir))
        except OSError:
            return []

        projects = []
        for dir_name in entries:
            dir_path = self.paths.project_dir(dir_name)
            if not dir_path.is_dir():
                continue
            try:
                files = sorted(f for f in os.listdir(dir_path) if f.endswith(".jsonl"))
            except OSError as e:
                logger.debug("Skipping unreadable project dir %s: %s", dir_path, e)
                continue
            if not files:
                continue

            decoded = decode_project_dir_name(dir_name)
            projects.append(ProjectInfo(
                dir_name=dir_name,
                decoded_path=decoded,
                project_name=extract_project_name(decoded),
                session_files=files,
            ))
        return projects


class SessionScanner:
    """Build session summaries for every transcript, cached by mtime."""

    def __init__(
        self,
        paths: Optional[ClaudePaths] = None,
        summary_cache: Optional[MtimeCache[SessionSummary]] = None,
        active_threshold_ms: int = config.ACTIVE_THRESHOLD_MS,
    ):
        self.paths = paths or ClaudePaths()
        self.projects = ProjectScanner(self.paths)
        self.summary_cache = summary_cache if summary_cache is not None else MtimeCache()
        self.active_threshold_ms = active_threshold_ms

    def _summarize(self, project: ProjectInfo, filename: str) -> Optional[SessionSummary]:
        session_id = extract_session_id(filename)
        file_path = self.paths.session_file(project.dir_name, session_id)
        try:
            stat = file_path.stat()
        except OSError:
            return None
        mtime_ms = stat.st_mtime * 1000

        summary = self.summary_cache.get(session_id, mtime_ms)
        if summary is None:
            try:
                summary = parse_summary(
                    file_path,
                    session_id,
                    project.decoded_path,
                    project.project_name,
                    stat.st_size,
                )
            except OSError as e:
                logger.debug("Could not summarize %s: %s", file_path, e)
                return None
            if summary is None:
                return None
            self.summary_cache.set(session_id, mtime_ms, summary)

        # Liveness changes without the file changing, so never serve it from cache
        active = is_session_active(file_path, self.active_threshold_ms)
        return summary.model_copy(update={"is_active": active})

    def scan_all_sessions(self) -> list[SessionSummary]:
        """All parseable sessions, most recently active first."""
        summaries = []
        for project in self.projects.scan_projects():
            for filename in project.session_files:
                summary = self._summarize(project, filename)
                if summary is not None:
                    summaries.append(summary)

        summaries.sort(key=lambda s: s.last_active_at, reverse=True)
        return summaries

    def get_active_sessions(self) -> list[SessionSummary]:
        return [s for s in self.scan_all_sessions() if s.is_active]

    def find_session_file(
        self, session_id: str, project_path: Optional[str] = None
    ) -> Optional[SessionLocation]:
        """Locate a transcript, preferring the given project."""
        try:
            entries = sorted(os.listdir(self.paths.projects_dir))
        except OSError:
            return None

        if project_path:
            for dir_name in entries:
                if project_path in (dir_name, decode_project_dir_name(dir_name)):
                    path = self.paths.session_file(dir_name, session_id)
                    if path.is_file():
                        return SessionLocation(path=path, dir_name=dir_name)

        for dir_name in entries:
            path = self.paths.session_file(dir_name, session_id)
            if path.is_file():
                return SessionLocation(path=path, dir_name=dir_name)
        return None
