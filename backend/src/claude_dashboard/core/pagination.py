"""Filtering, paging and activity binning over session summaries."""

import math
from datetime import date, timedelta
from typing import Optional

from claude_dashboard.schemas.analytics import HeatmapDay, Percentiles, ProjectAnalytics
from claude_dashboard.schemas.session import SessionPage, SessionQuery, SessionSummary


def _matches_search(session: SessionSummary, needle: str) -> bool:
    fields = (session.project_name, session.branch, session.session_id, session.cwd)
    return any(f and needle in f.lower() for f in fields)


def paginate_and_filter_sessions(
    all_sessions: list[SessionSummary], params: SessionQuery
) -> SessionPage:
    """Filter by search, status and project, then cut out one page.

    `projects` always lists every project in the unfiltered input. Out of
    range page numbers are clamped to the nearest valid page.
    """
    projects = sorted({s.project_name for s in all_sessions})

    filtered = all_sessions
    if params.search:
        needle = params.search.lower()
        filtered = [s for s in filtered if _matches_search(s, needle)]
    if params.status == "active":
        filtered = [s for s in filtered if s.is_active]
    elif params.status == "completed":
        filtered = [s for s in filtered if not s.is_active]
    if params.project:
        filtered = [s for s in filtered if s.project_name == params.project]

    page_size = max(1, params.page_size)
    total_count = len(filtered)
    total_pages = max(1, math.ceil(total_count / page_size))
    page = min(max(1, params.page), total_pages)
    start = (page - 1) * page_size

    return SessionPage(
        sessions=filtered[start:start + page_size],
        total_count=total_count,
        total_pages=total_pages,
        page=page,
        page_size=page_size,
        projects=projects,
    )


def compute_percentiles(values: list[float]) -> Percentiles:
    """25th/50th/75th percentiles, interpolating between order statistics."""
    if not values:
        return Percentiles(p25=0, p50=0, p75=0)
    ordered = sorted(values)

    def percentile(p: float) -> float:
        idx = p / 100 * (len(ordered) - 1)
        lower = math.floor(idx)
        upper = math.ceil(idx)
        if lower == upper:
            return ordered[lower]
        return ordered[lower] + (ordered[upper] - ordered[lower]) * (idx - lower)

    return Percentiles(p25=percentile(25), p50=percentile(50), p75=percentile(75))


def get_intensity_level(value: float, percentiles: Percentiles) -> int:
    """0 for no activity, otherwise the quartile bucket 1-4."""
    if value == 0:
        return 0
    if value <= percentiles.p25:
        return 1
    if value <= percentiles.p50:
        return 2
    if value <= percentiles.p75:
        return 3
    return 4


def build_heatmap(
    daily_tokens: dict[str, int],
    end_date: date,
    daily_sessions: Optional[dict[str, int]] = None,
    days: int = 365,
) -> list[HeatmapDay]:
    """Lay out a Monday-first grid of days ending at `end_date`.

    Args:
        daily_tokens: Token totals keyed by ISO date.
        end_date: Last day shown (usually today).
        daily_sessions: Session counts keyed by ISO date.
        days: Length of the window before it is widened back to a Monday.
    """
    daily_sessions = daily_sessions or {}
    start = end_date - timedelta(days=days - 1)
    start -= timedelta(days=start.weekday())

    grid = []
    current = start
    while current <= end_date:
        key = current.isoformat()
        grid.append(HeatmapDay(
            date=key,
            total_tokens=daily_tokens.get(key, 0),
            session_count=daily_sessions.get(key, 0),
            intensity=0,
            week_index=(current - start).days // 7,
            day_of_week=current.weekday(),
        ))
        current += timedelta(days=1)

    percentiles = compute_percentiles([d.total_tokens for d in grid if d.total_tokens > 0])
    for day in grid:
        day.intensity = get_intensity_level(day.total_tokens, percentiles)
    return grid


def aggregate_project_analytics(sessions: list[SessionSummary]) -> list[ProjectAnalytics]:
    """Roll session summaries up per project, most recently active first."""
    grouped: dict[str, list[SessionSummary]] = {}
    for session in sessions:
        grouped.setdefault(session.project_path, []).append(session)

    projects = []
    for project_path, group in grouped.items():
        projects.append(ProjectAnalytics(
            project_path=project_path,
            project_name=group[0].project_name,
            total_sessions=len(group),
            active_sessions=sum(1 for s in group if s.is_active),
            total_messages=sum(s.message_count for s in group),
            total_duration_ms=sum(s.duration_ms for s in group),
            first_session_at=min(s.started_at for s in group),
            last_session_at=max(s.last_active_at for s in group),
        ))

    projects.sort(key=lambda p: p.last_session_at, reverse=True)
    return projects
