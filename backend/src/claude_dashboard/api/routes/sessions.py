"""Session-related API endpoints."""

import logging
from typing import Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import Response

from claude_dashboard import config
from claude_dashboard.api.deps import get_disk_cache, get_scanner, get_settings_store
from claude_dashboard.core.cost import calculate_session_cost, get_merged_pricing
from claude_dashboard.core.disk_cache import DiskCache
from claude_dashboard.core.export import session_to_json
from claude_dashboard.core.pagination import paginate_and_filter_sessions
from claude_dashboard.core.parser import parse_detail, read_session_messages
from claude_dashboard.core.scanner import SessionLocation, SessionScanner, file_mtime_ms
from claude_dashboard.core.settings_store import SettingsStore
from claude_dashboard.schemas.cost import CostBreakdown
from claude_dashboard.schemas.session import (
    MessageList,
    SessionDetail,
    SessionPage,
    SessionQuery,
    SessionSummary,
)

logger = logging.getLogger(__name__)

# Handlers that read files are sync so FastAPI runs them in its threadpool
router = APIRouter()


def _locate(
    scanner: SessionScanner, session_id: str, project_path: Optional[str]
) -> SessionLocation:
    location = scanner.find_session_file(session_id, project_path)
    if location is None:
        raise HTTPException(status_code=404, detail="Session not found")
    return location


def load_session_detail(
    location: SessionLocation, session_id: str, cache: DiskCache
) -> SessionDetail:
    """Parse a session, reusing the cached result while the file is unchanged."""
    cache_key = f"session-{location.dir_name}-{session_id}"
    try:
        mtime_ms = file_mtime_ms(location.path)
        detail = cache.read(cache_key, mtime_ms, SessionDetail)
        if detail is not None:
            return detail
        detail = parse_detail(
            location.path, session_id, location.project_path, location.project_name
        )
    except FileNotFoundError:
        raise HTTPException(status_code=404, detail="Session not found")

    logger.debug("Parsed session %s (%d turns)", session_id, len(detail.turns))
    cache.write(cache_key, location.path, mtime_ms, detail)
    return detail


@router.get("", response_model=SessionPage)
def list_sessions(
    page: int = Query(1, description="1-based page number, clamped to the valid range"),
    page_size: int = Query(config.DEFAULT_PAGE_SIZE, ge=1, le=200),
    search: str = Query("", description="Matches project, branch, session id or cwd"),
    status: Literal["all", "active", "completed"] = Query("all"),
    project: str = Query("", description="Exact project name"),
    scanner: SessionScanner = Depends(get_scanner),
):
    """List sessions with filtering and pagination."""
    params = SessionQuery(
        page=page, page_size=page_size, search=search, status=status, project=project
    )
    return paginate_and_filter_sessions(scanner.scan_all_sessions(), params)


@router.get("/active", response_model=list[SessionSummary])
def list_active_sessions(scanner: SessionScanner = Depends(get_scanner)):
    """Sessions currently being written to."""
    return scanner.get_active_sessions()


@router.get("/{session_id}", response_model=SessionDetail)
def get_session(
    session_id: str,
    project_path: Optional[str] = Query(None),
    scanner: SessionScanner = Depends(get_scanner),
    cache: DiskCache = Depends(get_disk_cache),
):
    """Get detailed information about a specific session."""
    location = _locate(scanner, session_id, project_path)
    return load_session_detail(location, session_id, cache)


@router.get("/{session_id}/messages", response_model=MessageList)
def get_session_messages(
    session_id: str,
    project_path: Optional[str] = Query(None),
    offset: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    scanner: SessionScanner = Depends(get_scanner),
):
    """Get raw transcript records for a specific session."""
    location = _locate(scanner, session_id, project_path)
    try:
        messages, total = read_session_messages(location.path, offset, limit)
    except FileNotFoundError:
        raise HTTPException(status_code=404, detail="Session not found")
    return MessageList(messages=messages, total=total)


@router.get("/{session_id}/cost", response_model=CostBreakdown)
def get_session_cost(
    session_id: str,
    project_path: Optional[str] = Query(None),
    scanner: SessionScanner = Depends(get_scanner),
    cache: DiskCache = Depends(get_disk_cache),
    settings_store: SettingsStore = Depends(get_settings_store),
):
    """Estimate the USD cost of a session."""
    location = _locate(scanner, session_id, project_path)
    detail = load_session_detail(location, session_id, cache)
    pricing = get_merged_pricing(settings_store.load())
    return calculate_session_cost(detail.tokens_by_model, pricing)


@router.get("/{session_id}/export")
def export_session(
    session_id: str,
    project_path: Optional[str] = Query(None),
    scanner: SessionScanner = Depends(get_scanner),
    cache: DiskCache = Depends(get_disk_cache),
):
    """Download the session detail as a JSON file."""
    location = _locate(scanner, session_id, project_path)
    detail = load_session_detail(location, session_id, cache)
    return Response(
        content=session_to_json(detail),
        media_type="application/json",
        headers={
            "Content-Disposition": f"attachment; filename=session-{session_id}.json"
        },
    )
