"""Session-related schemas."""

from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Literal, Optional


class TokenUsage(BaseModel):
    """Token counters for one usage block, or a sum of them."""

    input_tokens: int = 0
    output_tokens: int = 0
    cache_read_input_tokens: int = 0
    cache_creation_input_tokens: int = 0

    def add(self, other: "TokenUsage") -> None:
        """Accumulate another usage block into this one."""
        self.input_tokens += other.input_tokens
        self.output_tokens += other.output_tokens
        self.cache_read_input_tokens += other.cache_read_input_tokens
        self.cache_creation_input_tokens += other.cache_creation_input_tokens

    @property
    def total(self) -> int:
        return (
            self.input_tokens
            + self.output_tokens
            + self.cache_read_input_tokens
            + self.cache_creation_input_tokens
        )


class SessionSummary(BaseModel):
    """Session summary built from the first and last lines of a transcript."""

    session_id: str
    project_path: str
    project_name: str
    branch: Optional[str] = None
    cwd: Optional[str] = None
    started_at: str
    last_active_at: str
    duration_ms: int = 0
    message_count: int = 0
    user_message_count: int = 0
    assistant_message_count: int = 0
    is_active: bool = False
    model: Optional[str] = None
    version: Optional[str] = None
    file_size_bytes: int = 0


class ToolCall(BaseModel):
    """A tool_use block from an assistant message."""

    tool_name: str
    tool_use_id: str
    input: Optional[dict[str, Any]] = None


class Turn(BaseModel):
    """A single conversation event in the session timeline."""

    uuid: str = ""
    type: Literal["user", "assistant", "system", "progress"]
    timestamp: str = ""
    message: Optional[str] = None
    model: Optional[str] = None
    tool_calls: list[ToolCall] = Field(default_factory=list)
    tokens: Optional[TokenUsage] = None
    stop_reason: Optional[str] = None


class SkillInvocation(BaseModel):
    """A skill run, either through the Skill tool or injected into context."""

    skill: str
    args: Optional[str] = None
    timestamp: str = ""
    tool_use_id: str = ""
    source: Optional[Literal["tool", "context"]] = None


class AgentInvocation(BaseModel):
    """A sub-agent dispatched through the Task tool."""

    subagent_type: str
    description: str = ""
    timestamp: str = ""
    tool_use_id: str = ""
    agent_id: Optional[str] = None
    tokens: Optional[TokenUsage] = None
    total_tokens: Optional[int] = None
    total_tool_use_count: Optional[int] = None
    duration_ms: Optional[int] = None
    model: Optional[str] = None
    tool_calls: Optional[dict[str, int]] = None
    skills: Optional[list[SkillInvocation]] = None


TaskStatus = Literal["pending", "in_progress", "completed", "deleted"]


class TaskItem(BaseModel):
    """A todo item tracked through TaskCreate / TaskUpdate."""

    task_id: str = ""  # empty until the TaskCreate result is seen
    subject: str = ""
    description: Optional[str] = None
    active_form: Optional[str] = None
    status: TaskStatus = "pending"
    timestamp: str = ""


class SessionError(BaseModel):
    """An error-level system record."""

    timestamp: str = ""
    message: str
    type: str


class ContextWindowSnapshot(BaseModel):
    """Context size after one assistant turn."""

    turn_index: int
    timestamp: str = ""
    context_size: int
    output_tokens: int = 0


class ContextWindowData(BaseModel):
    """Context window occupancy reconstructed from usage blocks."""

    model_config = ConfigDict(protected_namespaces=())

    context_limit: int
    model_name: str = ""
    system_overhead: int
    current_context_size: int
    messages_estimate: int
    free_space: int
    autocompact_buffer: int
    usage_percent: float
    snapshots: list[ContextWindowSnapshot]


class SessionDetail(BaseModel):
    """Detailed session information from a full pass over the transcript."""

    session_id: str
    project_path: str
    project_name: str
    branch: Optional[str] = None
    turns: list[Turn]
    total_tokens: TokenUsage
    tokens_by_model: dict[str, TokenUsage]
    tool_frequency: dict[str, int]
    errors: list[SessionError]
    models: list[str]
    agents: list[AgentInvocation]
    skills: list[SkillInvocation]
    tasks: list[TaskItem]
    context_window: Optional[ContextWindowData] = None


class SessionQuery(BaseModel):
    """Filter and page parameters for the session list."""

    page: int = 1
    page_size: int = 20
    search: str = ""
    status: Literal["all", "active", "completed"] = "all"
    project: str = ""


class SessionPage(BaseModel):
    """One page of filtered session summaries."""

    sessions: list[SessionSummary]
    total_count: int
    total_pages: int
    page: int
    page_size: int
    projects: list[str]


class MessageList(BaseModel):
    """Raw transcript records for the log viewer."""

    messages: list[dict[str, Any]]
    total: int
