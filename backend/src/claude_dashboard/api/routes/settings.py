"""Settings API endpoints."""

from fastapi import APIRouter, Depends, HTTPException

from claude_dashboard.api.deps import get_settings_store
from claude_dashboard.core.cost import get_merged_pricing
from claude_dashboard.core.settings_store import SUBSCRIPTION_TIERS, SettingsStore
from claude_dashboard.schemas.cost import ModelPricing
from claude_dashboard.schemas.settings import Settings, SubscriptionTier

router = APIRouter()


@router.get("", response_model=Settings)
def get_settings(store: SettingsStore = Depends(get_settings_store)):
    """Current settings, or defaults if none were saved."""
    return store.load()


@router.put("", response_model=Settings)
def save_settings(
    settings: Settings,
    store: SettingsStore = Depends(get_settings_store),
):
    """Replace the stored settings."""
    try:
        return store.save(settings)
    except OSError as e:
        raise HTTPException(status_code=500, detail=f"Failed to save settings: {e}")


@router.get("/pricing", response_model=list[ModelPricing])
def get_pricing(store: SettingsStore = Depends(get_settings_store)):
    """Effective per-model pricing after overrides."""
    return list(get_merged_pricing(store.load()).values())


@router.get("/tiers", response_model=list[SubscriptionTier])
async def get_tiers():
    """Subscription plans available for comparison."""
    return SUBSCRIPTION_TIERS
