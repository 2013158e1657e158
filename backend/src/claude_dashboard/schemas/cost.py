"""Pricing and cost schemas."""

from pydantic import BaseModel, ConfigDict

from claude_dashboard.schemas.session import TokenUsage


class ModelPricing(BaseModel):
    """Per-million-token rates for one model."""

    model_config = ConfigDict(protected_namespaces=())

    model_id: str
    display_name: str
    input_per_mtok: float
    output_per_mtok: float
    cache_read_per_mtok: float
    cache_write_per_mtok: float


class ModelCostBreakdown(BaseModel):
    """Estimated cost for one (normalized) model."""

    model_config = ConfigDict(protected_namespaces=())

    model_id: str
    display_name: str
    input_cost: float = 0.0
    output_cost: float = 0.0
    cache_read_cost: float = 0.0
    cache_write_cost: float = 0.0
    total_cost: float = 0.0
    tokens: TokenUsage


class CategoryCosts(BaseModel):
    """Cost split by token category across all models."""

    input: float = 0.0
    output: float = 0.0
    cache_read: float = 0.0
    cache_write: float = 0.0


class CostBreakdown(BaseModel):
    """Estimated USD cost of a session."""

    total_usd: float
    by_model: dict[str, ModelCostBreakdown]
    by_category: CategoryCosts
