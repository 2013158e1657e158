"""Analytics-related schemas."""

from pydantic import BaseModel, ConfigDict, Field
from typing import Optional


class _StatsModel(BaseModel):
    """Models read from Claude's own camelCase JSON files."""

    model_config = ConfigDict(populate_by_name=True)


class DailyActivity(_StatsModel):
    """Activity counts for a single day."""

    date: str
    message_count: int = Field(alias="messageCount")
    session_count: int = Field(alias="sessionCount")
    tool_call_count: int = Field(alias="toolCallCount")


class DailyModelTokens(_StatsModel):
    """Tokens per model for a single day."""

    date: str
    tokens_by_model: dict[str, int] = Field(alias="tokensByModel")


class ModelUsage(_StatsModel):
    """Lifetime token usage for one model."""

    input_tokens: int = Field(alias="inputTokens")
    output_tokens: int = Field(alias="outputTokens")
    cache_read_input_tokens: int = Field(alias="cacheReadInputTokens")
    cache_creation_input_tokens: int = Field(alias="cacheCreationInputTokens")
    web_search_requests: Optional[int] = Field(default=None, alias="webSearchRequests")
    cost_usd: Optional[float] = Field(default=None, alias="costUSD")


class LongestSession(_StatsModel):
    """The longest recorded session."""

    session_id: str = Field(alias="sessionId")
    duration: int
    message_count: int = Field(alias="messageCount")
    timestamp: str


class StatsCache(_StatsModel):
    """Contents of ~/.claude/stats-cache.json."""

    version: int
    last_computed_date: str = Field(alias="lastComputedDate")
    daily_activity: list[DailyActivity] = Field(alias="dailyActivity")
    daily_model_tokens: list[DailyModelTokens] = Field(alias="dailyModelTokens")
    model_usage: dict[str, ModelUsage] = Field(alias="modelUsage")
    total_sessions: int = Field(alias="totalSessions")
    total_messages: int = Field(alias="totalMessages")
    longest_session: LongestSession = Field(alias="longestSession")
    first_session_date: str = Field(alias="firstSessionDate")
    hour_counts: dict[str, int] = Field(alias="hourCounts")
    total_speculation_time_saved_ms: Optional[int] = Field(
        default=None, alias="totalSpeculationTimeSavedMs"
    )


class HistoryEntry(_StatsModel):
    """A prompt from ~/.claude/history.jsonl."""

    display: str
    timestamp: int
    project: str = ""
    session_id: str = Field(alias="sessionId")


class Percentiles(BaseModel):
    """Quartile cut points of non-zero daily token totals."""

    p25: float
    p50: float
    p75: float


class HeatmapDay(BaseModel):
    """One cell of the activity heatmap."""

    date: str
    total_tokens: int
    session_count: int
    intensity: int  # 0 (none) to 4 (top quartile)
    week_index: int
    day_of_week: int  # 0 = Monday


class ProjectAnalytics(BaseModel):
    """Session totals for one project."""

    project_path: str
    project_name: str
    total_sessions: int
    active_sessions: int
    total_messages: int
    total_duration_ms: int
    first_session_at: str
    last_session_at: str
