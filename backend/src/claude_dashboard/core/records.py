"""Typed views of the records found in a Claude Code transcript.

Each JSONL line is validated against a discriminated union keyed on the
record's ``type``. Lines that are not JSON, carry an unknown ``type`` or
cannot be coerced into the expected shape are rejected here so the parsers
only ever see the five known record kinds.
"""

import logging
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

logger = logging.getLogger(__name__)


class _Record(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class Usage(_Record):
    input_tokens: Optional[int] = None
    output_tokens: Optional[int] = None
    cache_read_input_tokens: Optional[int] = None
    cache_creation_input_tokens: Optional[int] = None


class ContentBlock(_Record):
    """One entry of ``message.content``; fields depend on ``type``."""

    type: str = ""
    text: Optional[str] = None
    # tool_use
    name: Optional[str] = None
    id: Optional[str] = None
    input: Optional[dict[str, Any]] = None
    # tool_result
    tool_use_id: Optional[str] = None
    content: Union[str, list[Any], None] = None


class Message(_Record):
    role: Optional[str] = None
    model: Optional[str] = None
    content: Union[str, list[ContentBlock], None] = None
    usage: Optional[Usage] = None
    stop_reason: Optional[str] = None

    @property
    def blocks(self) -> list[ContentBlock]:
        """Content as a block list; legacy string content has no blocks."""
        if isinstance(self.content, list):
            return self.content
        return []


class _ConversationRecord(_Record):
    uuid: Optional[str] = None
    parent_uuid: Optional[str] = Field(default=None, alias="parentUuid")
    session_id: Optional[str] = Field(default=None, alias="sessionId")
    timestamp: Optional[str] = None
    cwd: Optional[str] = None
    git_branch: Optional[str] = Field(default=None, alias="gitBranch")
    version: Optional[str] = None


class UserRecord(_ConversationRecord):
    type: Literal["user"]
    message: Optional[Message] = None
    # Shape varies by tool (object, list or error string)
    tool_use_result: Any = Field(default=None, alias="toolUseResult")


class AssistantRecord(_ConversationRecord):
    type: Literal["assistant"]
    message: Optional[Message] = None


class SystemRecord(_ConversationRecord):
    type: Literal["system"]
    message: Optional[Message] = None
    level: Optional[str] = None
    subtype: Optional[str] = None
    slug: Optional[str] = None


class ProgressEnvelope(_Record):
    type: Optional[str] = None
    message: Optional[Message] = None


class ProgressData(_Record):
    type: Optional[str] = None
    agent_id: Optional[str] = Field(default=None, alias="agentId")
    message: Optional[ProgressEnvelope] = None


class ProgressRecord(_ConversationRecord):
    type: Literal["progress"]
    parent_tool_use_id: Optional[str] = Field(default=None, alias="parentToolUseID")
    data: Optional[ProgressData] = None

    @property
    def agent_message(self) -> Optional[Message]:
        """The sub-agent's assistant message mirrored inside data.message.message."""
        if self.data and self.data.message:
            return self.data.message.message
        return None


class FileHistorySnapshotRecord(_Record):
    type: Literal["file-history-snapshot"]


TranscriptRecord = Annotated[
    Union[
        UserRecord,
        AssistantRecord,
        SystemRecord,
        ProgressRecord,
        FileHistorySnapshotRecord,
    ],
    Field(discriminator="type"),
]

_record_adapter = TypeAdapter(TranscriptRecord)


def parse_record(line: str) -> Optional[TranscriptRecord]:
    """Validate one JSONL line, returning None for anything unrecognized."""
    line = line.strip()
    if not line:
        return None
    try:
        return _record_adapter.validate_json(line)
    except ValidationError as e:
        logger.debug("Skipping unrecognized transcript line: %s", e.errors()[0]["type"])
        return None
