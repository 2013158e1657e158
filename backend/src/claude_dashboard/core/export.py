"""CSV and JSON exports of usage stats and session detail."""

import csv
import io

from claude_dashboard.schemas.analytics import StatsCache
from claude_dashboard.schemas.session import SessionDetail


def _to_csv(header: list[str], rows) -> str:
    output = io.StringIO()
    writer = csv.writer(output, lineterminator="\n")
    writer.writerow(header)
    writer.writerows(rows)
    return output.getvalue()


def daily_activity_to_csv(stats: StatsCache) -> str:
    """One row per day: date, messageCount, sessionCount, toolCallCount."""
    return _to_csv(
        ["date", "messageCount", "sessionCount", "toolCallCount"],
        (
            [day.date, day.message_count, day.session_count, day.tool_call_count]
            for day in stats.daily_activity
        ),
    )


def daily_tokens_to_csv(stats: StatsCache) -> str:
    """One row per (day, model) pair."""
    return _to_csv(
        ["date", "model", "tokens"],
        (
            [day.date, model, tokens]
            for day in stats.daily_model_tokens
            for model, tokens in day.tokens_by_model.items()
        ),
    )


def model_usage_to_csv(stats: StatsCache) -> str:
    return _to_csv(
        [
            "model",
            "inputTokens",
            "outputTokens",
            "cacheReadInputTokens",
            "cacheCreationInputTokens",
        ],
        (
            [
                model,
                usage.input_tokens,
                usage.output_tokens,
                usage.cache_read_input_tokens,
                usage.cache_creation_input_tokens,
            ]
            for model, usage in stats.model_usage.items()
        ),
    )


CSV_EXPORTS = {
    "daily-activity": daily_activity_to_csv,
    "daily-tokens": daily_tokens_to_csv,
    "model-usage": model_usage_to_csv,
}


def stats_to_json(stats: StatsCache) -> str:
    """Stats in the camelCase layout of stats-cache.json."""
    return stats.model_dump_json(by_alias=True, indent=2)


def session_to_json(detail: SessionDetail) -> str:
    return detail.model_dump_json(indent=2)
