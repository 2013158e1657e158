"""Tests for cost estimation."""

import pytest

from claude_dashboard.core.cost import (
    DEFAULT_PRICING,
    FALLBACK_MODEL_ID,
    calculate_session_cost,
    get_merged_pricing,
    normalize_model_id,
)
from claude_dashboard.schemas.session import TokenUsage
from claude_dashboard.schemas.settings import PricingOverride, Settings


def _tokens(input=0, output=0, cache_read=0, cache_write=0):
    return TokenUsage(
        input_tokens=input,
        output_tokens=output,
        cache_read_input_tokens=cache_read,
        cache_creation_input_tokens=cache_write,
    )


def test_normalize_model_id():
    assert normalize_model_id("claude-sonnet-4-20250514") == "claude-sonnet-4"
    assert normalize_model_id("claude-sonnet-4") == "claude-sonnet-4"
    assert normalize_model_id("claude-sonnet-4-2025051") == "claude-sonnet-4-2025051"
    assert normalize_model_id("claude-sonnet-4-202505141") == "claude-sonnet-4-202505141"


def test_normalize_model_id_is_idempotent():
    once = normalize_model_id("claude-opus-4-5-20251101")
    assert normalize_model_id(once) == once


def test_dated_ids_accumulate():
    """Test that two dated IDs of one model merge into a single entry."""
    cost = calculate_session_cost(
        {
            "claude-sonnet-4-20250514": _tokens(input=1_000_000, output=500_000),
            "claude-sonnet-4-20250601": _tokens(input=500_000, output=250_000),
        },
        get_merged_pricing(),
    )

    assert list(cost.by_model) == ["claude-sonnet-4"]
    entry = cost.by_model["claude-sonnet-4"]
    assert entry.tokens.input_tokens == 1_500_000
    assert entry.tokens.output_tokens == 750_000
    assert entry.input_cost == pytest.approx(4.5)
    assert entry.output_cost == pytest.approx(11.25)
    assert entry.total_cost == pytest.approx(15.75)
    assert cost.total_usd == pytest.approx(15.75)


def test_category_costs():
    cost = calculate_session_cost(
        {"claude-opus-4-1-20250805": _tokens(1_000_000, 1_000_000, 1_000_000, 1_000_000)},
        get_merged_pricing(),
    )

    entry = cost.by_model["claude-opus-4-1"]
    assert entry.display_name == "Claude Opus 4.1"
    assert entry.input_cost == pytest.approx(15.0)
    assert entry.output_cost == pytest.approx(75.0)
    assert entry.cache_read_cost == pytest.approx(1.5)
    assert entry.cache_write_cost == pytest.approx(18.75)
    assert cost.by_category.cache_write == pytest.approx(18.75)
    assert cost.total_usd == pytest.approx(110.25)


def test_totals_are_consistent_across_models():
    cost = calculate_session_cost(
        {
            "claude-opus-4-6": _tokens(12_345, 6_789, 100_000, 2_000),
            "claude-haiku-4-5-20251001": _tokens(50_000, 1_000, 0, 9_999),
        },
        get_merged_pricing(),
    )

    per_model = sum(e.total_cost for e in cost.by_model.values())
    assert cost.total_usd == pytest.approx(per_model)
    for entry in cost.by_model.values():
        categories = (
            entry.input_cost + entry.output_cost + entry.cache_read_cost + entry.cache_write_cost
        )
        assert entry.total_cost == pytest.approx(categories)


def test_unknown_model_uses_fallback_pricing():
    """Test that an unknown model keeps its ID but is priced like the fallback."""
    cost = calculate_session_cost(
        {"claude-future-9-20300101": _tokens(input=1_000_000)},
        get_merged_pricing(),
    )

    entry = cost.by_model["claude-future-9"]
    fallback = get_merged_pricing()[FALLBACK_MODEL_ID]
    assert entry.model_id == "claude-future-9"
    assert entry.display_name == fallback.display_name
    assert entry.input_cost == pytest.approx(fallback.input_per_mtok)


def test_empty_input():
    cost = calculate_session_cost({}, get_merged_pricing())

    assert cost.total_usd == 0
    assert cost.by_model == {}
    assert cost.by_category.input == 0
    assert cost.by_category.cache_write == 0


def test_merged_pricing_defaults():
    table = get_merged_pricing()

    assert set(table) == {p.model_id for p in DEFAULT_PRICING}
    assert FALLBACK_MODEL_ID in table


def test_override_replaces_all_rates():
    settings = Settings(pricing_overrides={
        "claude-sonnet-4": PricingOverride(
            input_per_mtok=1, output_per_mtok=2, cache_read_per_mtok=0, cache_write_per_mtok=0,
        ),
        "my-proxy-model": PricingOverride(
            input_per_mtok=9, output_per_mtok=9, cache_read_per_mtok=9, cache_write_per_mtok=9,
        ),
    })

    table = get_merged_pricing(settings)

    sonnet = table["claude-sonnet-4"]
    assert sonnet.display_name == "Claude Sonnet 4"
    assert (sonnet.input_per_mtok, sonnet.output_per_mtok) == (1, 2)
    assert sonnet.cache_read_per_mtok == 0
    assert table["my-proxy-model"].display_name == "my-proxy-model"
    # Defaults are not mutated by overrides
    assert get_merged_pricing()["claude-sonnet-4"].input_per_mtok == 3.0
