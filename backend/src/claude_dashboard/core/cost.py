"""Cost estimation for Claude model token usage."""

import re
from typing import Optional

from claude_dashboard.schemas.cost import (
    CategoryCosts,
    CostBreakdown,
    ModelCostBreakdown,
    ModelPricing,
)
from claude_dashboard.schemas.session import TokenUsage
from claude_dashboard.schemas.settings import Settings

# Rates in USD per million tokens
DEFAULT_PRICING = [
    ModelPricing(
        model_id="claude-opus-4-6", display_name="Claude Opus 4.6",
        input_per_mtok=5.0, output_per_mtok=25.0,
        cache_read_per_mtok=0.5, cache_write_per_mtok=6.25,
    ),
    ModelPricing(
        model_id="claude-opus-4-5", display_name="Claude Opus 4.5",
        input_per_mtok=5.0, output_per_mtok=25.0,
        cache_read_per_mtok=0.5, cache_write_per_mtok=6.25,
    ),
    ModelPricing(
        model_id="claude-opus-4-1", display_name="Claude Opus 4.1",
        input_per_mtok=15.0, output_per_mtok=75.0,
        cache_read_per_mtok=1.5, cache_write_per_mtok=18.75,
    ),
    ModelPricing(
        model_id="claude-opus-4", display_name="Claude Opus 4",
        input_per_mtok=15.0, output_per_mtok=75.0,
        cache_read_per_mtok=1.5, cache_write_per_mtok=18.75,
    ),
    ModelPricing(
        model_id="claude-sonnet-4-5", display_name="Claude Sonnet 4.5",
        input_per_mtok=3.0, output_per_mtok=15.0,
        cache_read_per_mtok=0.3, cache_write_per_mtok=3.75,
    ),
    ModelPricing(
        model_id="claude-sonnet-4", display_name="Claude Sonnet 4",
        input_per_mtok=3.0, output_per_mtok=15.0,
        cache_read_per_mtok=0.3, cache_write_per_mtok=3.75,
    ),
    ModelPricing(
        model_id="claude-haiku-4-5", display_name="Claude Haiku 4.5",
        input_per_mtok=1.0, output_per_mtok=5.0,
        cache_read_per_mtok=0.1, cache_write_per_mtok=1.25,
    ),
    ModelPricing(
        model_id="claude-haiku-3-5", display_name="Claude Haiku 3.5",
        input_per_mtok=0.8, output_per_mtok=4.0,
        cache_read_per_mtok=0.08, cache_write_per_mtok=1.0,
    ),
    ModelPricing(
        model_id="claude-haiku-3", display_name="Claude Haiku 3",
        input_per_mtok=0.25, output_per_mtok=1.25,
        cache_read_per_mtok=0.03, cache_write_per_mtok=0.3,
    ),
]

# Pricing used when a model ID is not in the table
FALLBACK_MODEL_ID = "claude-sonnet-4"

_DATE_SUFFIX_RE = re.compile(r"-\d{8}$")


def normalize_model_id(raw: str) -> str:
    """Strip the date suffix: claude-sonnet-4-20250514 -> claude-sonnet-4."""
    return _DATE_SUFFIX_RE.sub("", raw)


def get_merged_pricing(settings: Optional[Settings] = None) -> dict[str, ModelPricing]:
    """Build a complete pricing lookup from defaults + user overrides.

    An override replaces all four rates of its model; display names are kept.
    """
    overrides = settings.pricing_overrides if settings else {}
    table = {}

    for model in DEFAULT_PRICING:
        override = overrides.get(model.model_id)
        if override is None:
            table[model.model_id] = model.model_copy()
        else:
            table[model.model_id] = model.model_copy(update=override.model_dump())

    for model_id, override in overrides.items():
        if model_id not in table:
            table[model_id] = ModelPricing(
                model_id=model_id, display_name=model_id, **override.model_dump()
            )

    return table


def calculate_session_cost(
    tokens_by_model: dict[str, TokenUsage],
    pricing_table: dict[str, ModelPricing],
) -> CostBreakdown:
    """Estimate USD cost from per-model token usage.

    Raw model IDs are normalized before lookup; IDs that collapse to the same
    model are accumulated into one entry. Unknown models are priced as
    FALLBACK_MODEL_ID but keep their own ID in the breakdown.
    """
    by_model: dict[str, ModelCostBreakdown] = {}
    by_category = CategoryCosts()

    for raw_model_id, tokens in tokens_by_model.items():
        normalized = normalize_model_id(raw_model_id)
        pricing = pricing_table.get(normalized) or pricing_table.get(FALLBACK_MODEL_ID)
        if pricing is None:
            continue

        input_cost = tokens.input_tokens / 1_000_000 * pricing.input_per_mtok
        output_cost = tokens.output_tokens / 1_000_000 * pricing.output_per_mtok
        cache_read_cost = tokens.cache_read_input_tokens / 1_000_000 * pricing.cache_read_per_mtok
        cache_write_cost = (
            tokens.cache_creation_input_tokens / 1_000_000 * pricing.cache_write_per_mtok
        )

        entry = by_model.get(normalized)
        if entry is None:
            entry = by_model[normalized] = ModelCostBreakdown(
                model_id=normalized,
                display_name=pricing.display_name,
                tokens=TokenUsage(),
            )
        entry.input_cost += input_cost
        entry.output_cost += output_cost
        entry.cache_read_cost += cache_read_cost
        entry.cache_write_cost += cache_write_cost
        entry.total_cost += input_cost + output_cost + cache_read_cost + cache_write_cost
        entry.tokens.add(tokens)

        by_category.input += input_cost
        by_category.output += output_cost
        by_category.cache_read += cache_read_cost
        by_category.cache_write += cache_write_cost

    total_usd = (
        by_category.input + by_category.output + by_category.cache_read + by_category.cache_write
    )
    return CostBreakdown(total_usd=total_usd, by_model=by_model, by_category=by_category)
