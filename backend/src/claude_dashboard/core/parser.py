"""Log parser for Claude Code session transcripts."""

import json
import logging
import os
import re
from datetime import datetime
from pathlib import Path, PurePosixPath
from typing import Any, Optional, Union

from claude_dashboard.core.paths import subagent_transcript_path
from claude_dashboard.core.records import (
    AssistantRecord,
    ContentBlock,
    FileHistorySnapshotRecord,
    Message,
    ProgressRecord,
    SystemRecord,
    Usage,
    UserRecord,
    parse_record,
)
from claude_dashboard.schemas.session import (
    AgentInvocation,
    ContextWindowData,
    ContextWindowSnapshot,
    SessionDetail,
    SessionError,
    SessionSummary,
    SkillInvocation,
    TaskItem,
    TokenUsage,
    ToolCall,
    Turn,
)

logger = logging.getLogger(__name__)

PathLike = Union[str, os.PathLike]

HEAD_LINES = 15
TAIL_LINES = 15
# Tail lines are taken from this many trailing bytes; longer lines are cut.
TAIL_WINDOW_BYTES = 64 * 1024

MAX_TURN_TEXT = 500

AGENT_TOOLS = {"Task", "Agent"}
TASK_STATUSES = {"pending", "in_progress", "completed", "deleted"}

DEFAULT_CONTEXT_LIMIT = 200_000
EXTENDED_CONTEXT_LIMIT = 1_000_000
AUTOCOMPACT_BUFFER_RATIO = 0.165

_TASK_CREATED_RE = re.compile(r"Task #(\S+?) created successfully")
_SKILL_BASE_DIR_RE = re.compile(r"^Base directory for this skill:\s*(\S+)")


# --- Line readers ---


def read_head_lines(file_path: PathLike, count: int) -> tuple[list[str], int]:
    """Read the first `count` lines, returning them with the byte offset reached."""
    lines = []
    offset = 0
    with open(file_path, "rb") as f:
        for raw in f:
            offset += len(raw)
            lines.append(raw.decode("utf-8", errors="replace"))
            if len(lines) >= count:
                break
    return lines, offset


def read_tail_lines(
    file_path: PathLike,
    count: int,
    start_at: int = 0,
    window: int = TAIL_WINDOW_BYTES,
) -> list[str]:
    """Read the last `count` non-empty lines from the final `window` bytes.

    Never reads before `start_at`, so a tail read does not repeat lines already
    taken from the head of the file. The first line in the window may be a
    fragment when the window starts mid-line; fragments fail to parse and are
    dropped by the caller.
    """
    size = os.path.getsize(file_path)
    start = max(start_at, size - window)
    if start >= size:
        return []
    with open(file_path, "rb") as f:
        f.seek(start)
        text = f.read(size - start).decode("utf-8", errors="replace")
    lines = [line for line in text.split("\n") if line.strip()]
    return lines[-count:]


def iter_records(file_path: PathLike):
    """Stream validated records from a transcript, skipping anything unusable."""
    with open(file_path, encoding="utf-8", errors="replace") as f:
        for line in f:
            record = parse_record(line)
            if record is not None:
                yield record


# --- Content helpers ---


def _parse_timestamp(ts: Optional[str]) -> Optional[datetime]:
    """Parse ISO timestamp string to datetime."""
    if not ts:
        return None
    try:
        return datetime.fromisoformat(ts.replace("Z", "+00:00"))
    except (ValueError, TypeError):
        return None


def _text_parts(message: Optional[Message]) -> list[str]:
    if message is None:
        return []
    if isinstance(message.content, str):
        return [message.content] if message.content else []
    return [b.text for b in message.blocks if b.type == "text" and b.text]


def extract_text_content(message: Optional[Message]) -> Optional[str]:
    """Join the text blocks of a message, truncated for the timeline.

    Plain string content (how Claude Code stores typed prompts) counts as a
    single text block, so user prompts show up in the timeline.
    """
    parts = _text_parts(message)
    if not parts:
        return None
    return "\n".join(parts)[:MAX_TURN_TEXT]


def extract_tool_result_text(content: Any) -> str:
    """Extract plain text from a tool_result (string or content blocks array)."""
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts = []
        for block in content:
            if isinstance(block, dict):
                if block.get("type") == "text" and block.get("text"):
                    parts.append(block["text"])
            elif isinstance(block, str):
                parts.append(block)
        return "\n".join(parts)
    return ""


def _token_usage(usage: Usage) -> TokenUsage:
    return TokenUsage(
        input_tokens=usage.input_tokens or 0,
        output_tokens=usage.output_tokens or 0,
        cache_read_input_tokens=usage.cache_read_input_tokens or 0,
        cache_creation_input_tokens=usage.cache_creation_input_tokens or 0,
    )


def _tool_uses(message: Optional[Message]) -> list[ContentBlock]:
    if message is None:
        return []
    return [b for b in message.blocks if b.type == "tool_use" and b.name]


def _skill_from_tool_use(block: ContentBlock, timestamp: str) -> Optional[SkillInvocation]:
    if block.name != "Skill" or not block.input or not block.input.get("skill"):
        return None
    args = block.input.get("args")
    return SkillInvocation(
        skill=str(block.input["skill"]),
        args=str(args) if args else None,
        timestamp=timestamp,
        tool_use_id=block.id or "",
        source="tool",
    )


def context_limit_for(model: Optional[str]) -> int:
    """Context window size for a model ID."""
    if model and "[1m]" in model:
        return EXTENDED_CONTEXT_LIMIT
    return DEFAULT_CONTEXT_LIMIT


# --- Summary ---


def parse_summary(
    file_path: PathLike,
    session_id: str,
    project_path: str,
    project_name: str,
    file_size_bytes: int,
) -> Optional[SessionSummary]:
    """Summarize a session from its first and last lines only.

    Returns None when none of the sampled records carries a timestamp.
    """
    head_lines, head_end = read_head_lines(file_path, HEAD_LINES)
    tail_lines = read_tail_lines(file_path, TAIL_LINES, start_at=head_end)

    started_at = None
    last_active_at = None
    branch = None
    cwd = None
    model = None
    version = None
    user_count = 0
    assistant_count = 0
    message_count = 0

    for line in head_lines + tail_lines:
        record = parse_record(line)
        if record is None or isinstance(record, FileHistorySnapshotRecord):
            continue

        ts = record.timestamp
        if ts:
            if started_at is None or ts < started_at:
                started_at = ts
            if last_active_at is None or ts > last_active_at:
                last_active_at = ts

        if record.git_branch and not branch:
            branch = record.git_branch
        if record.cwd and not cwd:
            cwd = record.cwd
        if record.version and not version:
            version = record.version

        if isinstance(record, UserRecord):
            user_count += 1
        elif isinstance(record, AssistantRecord):
            assistant_count += 1
            if record.message and record.message.model and not model:
                model = record.message.model
        if isinstance(record, (UserRecord, AssistantRecord, SystemRecord)):
            message_count += 1

    if started_at is None:
        return None
    if last_active_at is None:
        last_active_at = started_at

    duration_ms = 0
    start_dt = _parse_timestamp(started_at)
    end_dt = _parse_timestamp(last_active_at)
    if start_dt and end_dt:
        duration_ms = int((end_dt - start_dt).total_seconds() * 1000)

    return SessionSummary(
        session_id=session_id,
        project_path=project_path,
        project_name=project_name,
        branch=branch,
        cwd=cwd,
        started_at=started_at,
        last_active_at=last_active_at,
        duration_ms=duration_ms,
        message_count=message_count,
        user_message_count=user_count,
        assistant_message_count=assistant_count,
        is_active=False,  # set by the scanner
        model=model,
        version=version,
        file_size_bytes=file_size_bytes,
    )


# --- Detail ---


class SessionDetailBuilder:
    """Accumulate a SessionDetail from transcript records in file order.

    Agent progress may be spread anywhere after its Task call, so per-agent
    data is collected in maps keyed by the Task's tool_use_id and merged into
    the agents in `finish()`.
    """

    def __init__(self, session_file: Path):
        self.session_file = session_file
        self.branch: Optional[str] = None
        self.turns: list[Turn] = []
        self.total_tokens = TokenUsage()
        self.tokens_by_model: dict[str, TokenUsage] = {}
        self.tool_frequency: dict[str, int] = {}
        self.errors: list[SessionError] = []
        self.models: dict[str, None] = {}  # insertion-ordered set
        self.agents: list[AgentInvocation] = []
        self.skills: list[SkillInvocation] = []
        self.tasks: list[TaskItem] = []
        self.snapshots: list[ContextWindowSnapshot] = []
        self.last_model: Optional[str] = None

        # Correlation state, keyed by tool_use_id unless noted
        self.agents_by_tool_use: dict[str, AgentInvocation] = {}
        self.pending_tasks: dict[str, TaskItem] = {}
        self.tasks_by_id: dict[str, TaskItem] = {}  # keyed by task id
        self.agent_tokens: dict[str, TokenUsage] = {}
        self.agent_tool_calls: dict[str, dict[str, int]] = {}
        self.agent_models: dict[str, str] = {}
        self.agent_ids: dict[str, str] = {}
        self.skills_awaiting_context: dict[str, int] = {}  # keyed by skill name

    def feed(self, record) -> None:
        if isinstance(record, FileHistorySnapshotRecord):
            return

        if record.git_branch and not self.branch:
            self.branch = record.git_branch

        if isinstance(record, ProgressRecord):
            self._handle_progress(record)
            return

        tool_calls: list[ToolCall] = []

        if isinstance(record, AssistantRecord) and record.message:
            tool_calls = self._handle_tool_uses(record)
            if record.message.model:
                self.models[record.message.model] = None
            if record.message.usage:
                self._add_usage_turn(record, tool_calls)
                return

        elif isinstance(record, UserRecord) and record.message:
            self._handle_tool_results(record)
            self._handle_skill_context(record)

        elif isinstance(record, SystemRecord) and record.level == "error":
            self.errors.append(SessionError(
                timestamp=record.timestamp or "",
                message=record.slug or record.subtype or "Unknown error",
                type=record.subtype or "system",
            ))

        self.turns.append(Turn(
            uuid=record.uuid or "",
            type=record.type,
            timestamp=record.timestamp or "",
            message=extract_text_content(record.message),
            tool_calls=tool_calls,
        ))

    def _add_tokens(self, model: Optional[str], tokens: TokenUsage) -> None:
        self.total_tokens.add(tokens)
        key = model or "unknown"
        self.tokens_by_model.setdefault(key, TokenUsage()).add(tokens)

    def _handle_progress(self, record: ProgressRecord) -> None:
        key = record.parent_tool_use_id
        if not key:
            return

        if record.data and record.data.agent_id:
            self.agent_ids[key] = record.data.agent_id

        message = record.agent_message
        if message is None:
            return

        if message.model:
            self.agent_models[key] = message.model
            self.models[message.model] = None

        if message.usage:
            tokens = _token_usage(message.usage)
            self.agent_tokens.setdefault(key, TokenUsage()).add(tokens)
            # Task calls carry no usage of their own; agent usage is the
            # only record of what they cost.
            self._add_tokens(message.model, tokens)

        counts = self.agent_tool_calls.setdefault(key, {})
        for block in _tool_uses(message):
            counts[block.name] = counts.get(block.name, 0) + 1

    def _handle_tool_uses(self, record: AssistantRecord) -> list[ToolCall]:
        timestamp = record.timestamp or ""
        tool_calls = []

        for block in _tool_uses(record.message):
            tool_use_id = block.id or ""
            tool_input = block.input or {}
            tool_calls.append(ToolCall(
                tool_name=block.name,
                tool_use_id=tool_use_id,
                input=block.input,
            ))
            self.tool_frequency[block.name] = self.tool_frequency.get(block.name, 0) + 1

            if block.name in AGENT_TOOLS and tool_input.get("subagent_type"):
                agent = AgentInvocation(
                    subagent_type=str(tool_input["subagent_type"]),
                    description=str(tool_input.get("description", "")),
                    timestamp=timestamp,
                    tool_use_id=tool_use_id,
                )
                self.agents.append(agent)
                if tool_use_id:
                    self.agents_by_tool_use[tool_use_id] = agent

            skill = _skill_from_tool_use(block, timestamp)
            if skill is not None:
                self.skills.append(skill)
                self.skills_awaiting_context[skill.skill] = (
                    self.skills_awaiting_context.get(skill.skill, 0) + 1
                )

            if block.name == "TaskCreate":
                task = TaskItem(
                    subject=str(tool_input.get("subject", "")),
                    description=tool_input.get("description"),
                    active_form=tool_input.get("activeForm"),
                    status="pending",
                    timestamp=timestamp,
                )
                self.tasks.append(task)
                if tool_use_id:
                    self.pending_tasks[tool_use_id] = task

            elif block.name == "TaskUpdate":
                self._update_task(tool_input)

        return tool_calls

    def _update_task(self, tool_input: dict) -> None:
        task = self.tasks_by_id.get(str(tool_input.get("taskId", "")))
        if task is None:
            return
        status = tool_input.get("status")
        if status in TASK_STATUSES:
            task.status = status
        if tool_input.get("subject"):
            task.subject = str(tool_input["subject"])
        if tool_input.get("description"):
            task.description = str(tool_input["description"])
        if tool_input.get("activeForm"):
            task.active_form = str(tool_input["activeForm"])

    def _handle_tool_results(self, record: UserRecord) -> None:
        for block in record.message.blocks:
            if block.type != "tool_result" or not block.tool_use_id:
                continue
            tool_use_id = block.tool_use_id

            match = _TASK_CREATED_RE.search(extract_tool_result_text(block.content))
            if match:
                task = self.pending_tasks.pop(tool_use_id, None)
                if task is not None:
                    task.task_id = match.group(1)
                    self.tasks_by_id[task.task_id] = task

            result = record.tool_use_result
            agent = self.agents_by_tool_use.get(tool_use_id)
            if agent is not None and isinstance(result, dict):
                if result.get("totalTokens") is not None:
                    agent.total_tokens = result["totalTokens"]
                if result.get("totalToolUseCount") is not None:
                    agent.total_tool_use_count = result["totalToolUseCount"]
                if result.get("totalDurationMs") is not None:
                    agent.duration_ms = result["totalDurationMs"]
                if result.get("agentId") and not agent.agent_id:
                    agent.agent_id = str(result["agentId"])

    def _handle_skill_context(self, record: UserRecord) -> None:
        """Record skills whose instructions were injected without a Skill call."""
        for text in _text_parts(record.message):
            match = _SKILL_BASE_DIR_RE.match(text)
            if not match:
                continue
            name = PurePosixPath(match.group(1)).name
            if self.skills_awaiting_context.get(name):
                # Injection that follows a Skill tool call we already counted
                self.skills_awaiting_context[name] -= 1
                continue
            self.skills.append(SkillInvocation(
                skill=name,
                timestamp=record.timestamp or "",
                tool_use_id="",
                source="context",
            ))

    def _add_usage_turn(self, record: AssistantRecord, tool_calls: list[ToolCall]) -> None:
        message = record.message
        tokens = _token_usage(message.usage)
        self._add_tokens(message.model, tokens)
        if message.model:
            self.last_model = message.model

        # Output tokens are generation, not standing context
        context_size = (
            tokens.input_tokens
            + tokens.cache_read_input_tokens
            + tokens.cache_creation_input_tokens
        )
        if not self.snapshots or self.snapshots[-1].context_size != context_size:
            self.snapshots.append(ContextWindowSnapshot(
                turn_index=len(self.turns),
                timestamp=record.timestamp or "",
                context_size=context_size,
                output_tokens=tokens.output_tokens,
            ))

        self.turns.append(Turn(
            uuid=record.uuid or "",
            type="assistant",
            timestamp=record.timestamp or "",
            model=message.model,
            tool_calls=tool_calls,
            tokens=tokens,
            stop_reason=message.stop_reason,
        ))

    def _context_window(self) -> Optional[ContextWindowData]:
        if not self.snapshots:
            return None
        limit = context_limit_for(self.last_model)
        overhead = self.snapshots[0].context_size
        current = self.snapshots[-1].context_size
        return ContextWindowData(
            context_limit=limit,
            model_name=self.last_model or "",
            system_overhead=overhead,
            current_context_size=current,
            messages_estimate=max(0, current - overhead),
            free_space=max(0, limit - current),
            autocompact_buffer=round(limit * AUTOCOMPACT_BUFFER_RATIO),
            usage_percent=current / limit * 100,
            snapshots=self.snapshots,
        )

    def _enrich_agents(self) -> None:
        for agent in self.agents:
            key = agent.tool_use_id
            if agent.tokens is None and key in self.agent_tokens:
                agent.tokens = self.agent_tokens[key]
            if agent.tool_calls is None and key in self.agent_tool_calls:
                agent.tool_calls = self.agent_tool_calls[key]
            if agent.model is None and key in self.agent_models:
                agent.model = self.agent_models[key]
            if agent.agent_id is None and key in self.agent_ids:
                agent.agent_id = self.agent_ids[key]
            if agent.agent_id:
                agent.skills = parse_subagent_skills(
                    subagent_transcript_path(self.session_file, agent.agent_id)
                )

    def finish(
        self, session_id: str, project_path: str, project_name: str
    ) -> SessionDetail:
        self._enrich_agents()
        return SessionDetail(
            session_id=session_id,
            project_path=project_path,
            project_name=project_name,
            branch=self.branch,
            turns=self.turns,
            total_tokens=self.total_tokens,
            tokens_by_model=self.tokens_by_model,
            tool_frequency=self.tool_frequency,
            errors=self.errors,
            models=list(self.models),
            agents=self.agents,
            skills=self.skills,
            tasks=self.tasks,
            context_window=self._context_window(),
        )


def parse_detail(
    file_path: PathLike,
    session_id: str,
    project_path: str,
    project_name: str,
) -> SessionDetail:
    """Stream-parse the full session file for the detail view.

    Raises FileNotFoundError if the transcript does not exist.
    """
    builder = SessionDetailBuilder(Path(file_path))
    for record in iter_records(file_path):
        builder.feed(record)
    return builder.finish(session_id, project_path, project_name)


def parse_subagent_skills(file_path: PathLike) -> Optional[list[SkillInvocation]]:
    """Skill calls made inside one agent's own transcript.

    Returns None when the transcript does not exist.
    """
    if not os.path.isfile(file_path):
        return None
    skills = []
    for record in iter_records(file_path):
        if not isinstance(record, AssistantRecord):
            continue
        for block in _tool_uses(record.message):
            skill = _skill_from_tool_use(block, record.timestamp or "")
            if skill is not None:
                skills.append(skill)
    return skills


# --- Raw access ---


def read_session_messages(
    file_path: PathLike, offset: int, limit: int
) -> tuple[list[dict[str, Any]], int]:
    """Return raw records [offset, offset + limit) and the total record count."""
    messages = []
    total = 0
    with open(file_path, encoding="utf-8", errors="replace") as f:
        for line in f:
            line = line.strip()
            if not line:
                continue
            try:
                record = json.loads(line)
            except json.JSONDecodeError:
                continue
            if not isinstance(record, dict) or record.get("type") == "file-history-snapshot":
                continue
            if offset <= total < offset + limit:
                messages.append(record)
            total += 1
    return messages, total
