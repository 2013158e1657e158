"""Command-line interface for Claude Dashboard."""

import argparse
import logging
import sys
from pathlib import Path

from claude_dashboard import config


def main():
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Claude Dashboard: browse Claude Code session logs"
    )
    parser.add_argument(
        "--log-level",
        default=config.LOG_LEVEL,
        help=f"Logging level (default: {config.LOG_LEVEL})",
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Serve command
    serve_parser = subparsers.add_parser("serve", help="Start the API server")
    serve_parser.add_argument(
        "--host",
        default=config.HOST,
        help=f"Host to bind to (default: {config.HOST})",
    )
    serve_parser.add_argument(
        "--port",
        type=int,
        default=config.PORT,
        help=f"Port to bind to (default: {config.PORT})",
    )
    serve_parser.add_argument(
        "--reload",
        action="store_true",
        help="Enable auto-reload for development",
    )

    # Sessions command
    sessions_parser = subparsers.add_parser("sessions", help="List recent sessions")
    sessions_parser.add_argument(
        "--claude-dir",
        type=Path,
        default=None,
        help="Path to Claude config directory (default: ~/.claude)",
    )
    sessions_parser.add_argument("--search", default="", help="Filter by text")
    sessions_parser.add_argument(
        "--status",
        choices=["all", "active", "completed"],
        default="all",
        help="Filter by status",
    )
    sessions_parser.add_argument("--limit", type=int, default=20, help="Rows to show")

    # Cost command
    cost_parser = subparsers.add_parser("cost", help="Estimate the cost of a session")
    cost_parser.add_argument("session_id", help="Session ID")
    cost_parser.add_argument(
        "--claude-dir",
        type=Path,
        default=None,
        help="Path to Claude config directory (default: ~/.claude)",
    )

    # Export command
    export_parser = subparsers.add_parser("export", help="Export usage stats as CSV or JSON")
    export_parser.add_argument(
        "dataset",
        choices=["daily-activity", "daily-tokens", "model-usage", "stats"],
        help="Table to export (stats = the whole stats file as JSON)",
    )
    export_parser.add_argument(
        "--claude-dir",
        type=Path,
        default=None,
        help="Path to Claude config directory (default: ~/.claude)",
    )
    export_parser.add_argument("-o", "--output", type=Path, help="Write to file instead of stdout")

    args = parser.parse_args()

    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "serve":
        cmd_serve(args)
    elif args.command == "sessions":
        cmd_sessions(args)
    elif args.command == "cost":
        cmd_cost(args)
    elif args.command == "export":
        cmd_export(args)
    else:
        parser.print_help()
        sys.exit(1)


def cmd_serve(args):
    """Handle serve command."""
    import uvicorn

    print("Starting Claude Dashboard API server...")
    print(f"  URL: http://{args.host}:{args.port}")
    print(f"  API docs: http://{args.host}:{args.port}/docs")

    uvicorn.run(
        "claude_dashboard.main:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level=args.log_level.lower(),
    )


def cmd_sessions(args):
    """Handle sessions command."""
    from claude_dashboard.core.pagination import paginate_and_filter_sessions
    from claude_dashboard.core.paths import ClaudePaths
    from claude_dashboard.core.scanner import SessionScanner
    from claude_dashboard.schemas.session import SessionQuery

    scanner = SessionScanner(ClaudePaths(args.claude_dir))
    result = paginate_and_filter_sessions(
        scanner.scan_all_sessions(),
        SessionQuery(page=1, page_size=args.limit, search=args.search, status=args.status),
    )

    print(f"\n=== Sessions ({result.total_count} matching) ===\n")
    for s in result.sessions:
        status = "ACTIVE" if s.is_active else "      "
        minutes = s.duration_ms // 60000
        print(f"{status} {s.last_active_at[:16]}  {s.project_name:<24} {s.branch or '-':<20} "
              f"{s.message_count:>4} msgs {minutes:>4} min  {s.session_id}")


def cmd_cost(args):
    """Handle cost command."""
    from claude_dashboard.core.cost import calculate_session_cost, get_merged_pricing
    from claude_dashboard.core.parser import parse_detail
    from claude_dashboard.core.paths import ClaudePaths
    from claude_dashboard.core.scanner import SessionScanner
    from claude_dashboard.core.settings_store import SettingsStore

    scanner = SessionScanner(ClaudePaths(args.claude_dir))
    location = scanner.find_session_file(args.session_id)
    if location is None:
        print(f"Session not found: {args.session_id}", file=sys.stderr)
        sys.exit(1)

    detail = parse_detail(
        location.path, args.session_id, location.project_path, location.project_name
    )
    cost = calculate_session_cost(
        detail.tokens_by_model, get_merged_pricing(SettingsStore().load())
    )

    print(f"\n=== Cost for {args.session_id} ===\n")
    for entry in cost.by_model.values():
        print(f"  {entry.display_name:<20} ({entry.model_id}): ${entry.total_cost:,.4f}")
    print(f"\nInput:       ${cost.by_category.input:,.4f}")
    print(f"Output:      ${cost.by_category.output:,.4f}")
    print(f"Cache read:  ${cost.by_category.cache_read:,.4f}")
    print(f"Cache write: ${cost.by_category.cache_write:,.4f}")
    print(f"Total:       ${cost.total_usd:,.4f}")


def cmd_export(args):
    """Handle export command."""
    from claude_dashboard.core.export import CSV_EXPORTS, stats_to_json
    from claude_dashboard.core.paths import ClaudePaths
    from claude_dashboard.core.stats import StatsReader

    stats = StatsReader(ClaudePaths(args.claude_dir)).read()
    if stats is None:
        print("No readable stats-cache.json found", file=sys.stderr)
        sys.exit(1)

    if args.dataset == "stats":
        content = stats_to_json(stats)
    else:
        content = CSV_EXPORTS[args.dataset](stats)

    if args.output:
        args.output.write_text(content, encoding="utf-8")
        print(f"Wrote {args.dataset} to {args.output}")
    else:
        sys.stdout.write(content)


if __name__ == "__main__":
    main()
