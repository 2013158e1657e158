"""Pydantic schemas shared by the engine and the API."""

from claude_dashboard.schemas.session import (
    AgentInvocation,
    ContextWindowData,
    ContextWindowSnapshot,
    MessageList,
    SessionDetail,
    SessionError,
    SessionPage,
    SessionQuery,
    SessionSummary,
    SkillInvocation,
    TaskItem,
    TokenUsage,
    ToolCall,
    Turn,
)
from claude_dashboard.schemas.cost import CostBreakdown, ModelCostBreakdown, ModelPricing
from claude_dashboard.schemas.settings import PricingOverride, Settings

__all__ = [
    "AgentInvocation",
    "ContextWindowData",
    "ContextWindowSnapshot",
    "MessageList",
    "SessionDetail",
    "SessionError",
    "SessionPage",
    "SessionQuery",
    "SessionSummary",
    "SkillInvocation",
    "TaskItem",
    "TokenUsage",
    "ToolCall",
    "Turn",
    "CostBreakdown",
    "ModelCostBreakdown",
    "ModelPricing",
    "PricingOverride",
    "Settings",
]
