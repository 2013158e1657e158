"""Analytics API endpoints."""

from datetime import date
from typing import Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import Response

from claude_dashboard.api.deps import get_scanner, get_stats_reader
from claude_dashboard.core.export import CSV_EXPORTS, stats_to_json
from claude_dashboard.core.pagination import aggregate_project_analytics, build_heatmap
from claude_dashboard.core.scanner import SessionScanner
from claude_dashboard.core.stats import StatsReader, daily_session_counts, daily_token_totals
from claude_dashboard.schemas.analytics import (
    HeatmapDay,
    HistoryEntry,
    ProjectAnalytics,
    StatsCache,
)

router = APIRouter()


def _require_stats(reader: StatsReader) -> StatsCache:
    stats = reader.read()
    if stats is None:
        raise HTTPException(status_code=404, detail="Stats not found")
    return stats


@router.get("/stats", response_model=StatsCache)
def get_stats(reader: StatsReader = Depends(get_stats_reader)):
    """Lifetime usage stats precomputed by Claude Code."""
    return _require_stats(reader)


@router.get("/heatmap", response_model=list[HeatmapDay])
def get_heatmap(
    end_date: Optional[date] = Query(None, description="Last day shown (default today)"),
    days: int = Query(365, ge=7, le=730),
    reader: StatsReader = Depends(get_stats_reader),
):
    """Daily token activity binned into intensity levels."""
    stats = _require_stats(reader)
    return build_heatmap(
        daily_token_totals(stats),
        end_date or date.today(),
        daily_sessions=daily_session_counts(stats),
        days=days,
    )


@router.get("/projects", response_model=list[ProjectAnalytics])
def get_project_analytics(scanner: SessionScanner = Depends(get_scanner)):
    """Session totals per project."""
    return aggregate_project_analytics(scanner.scan_all_sessions())


@router.get("/history", response_model=list[HistoryEntry])
def get_history(
    limit: Optional[int] = Query(None, ge=1, le=1000),
    reader: StatsReader = Depends(get_stats_reader),
):
    """Recent prompts, newest first."""
    return reader.read_history(limit)


@router.get("/export/stats.json")
def export_stats_json(reader: StatsReader = Depends(get_stats_reader)):
    """Download the stats file as JSON."""
    return Response(
        content=stats_to_json(_require_stats(reader)),
        media_type="application/json",
        headers={"Content-Disposition": "attachment; filename=claude-stats.json"},
    )


@router.get("/export/{dataset}.csv")
def export_stats_csv(
    dataset: Literal["daily-activity", "daily-tokens", "model-usage"],
    reader: StatsReader = Depends(get_stats_reader),
):
    """Download one stats table as CSV."""
    content = CSV_EXPORTS[dataset](_require_stats(reader))
    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": f"attachment; filename=claude-{dataset}.csv"},
    )
