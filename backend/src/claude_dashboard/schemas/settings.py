"""Dashboard settings schemas.

Field aliases follow the camelCase keys of the settings file on disk.
"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

SubscriptionTierId = Literal["free", "pro", "max-5x", "max-20x", "teams", "enterprise", "api"]


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class PricingOverride(_CamelModel):
    """User-supplied rates replacing a model's defaults as a unit."""

    input_per_mtok: float = Field(ge=0, alias="inputPerMTok")
    output_per_mtok: float = Field(ge=0, alias="outputPerMTok")
    cache_read_per_mtok: float = Field(ge=0, alias="cacheReadPerMTok")
    cache_write_per_mtok: float = Field(ge=0, alias="cacheWritePerMTok")


class Settings(_CamelModel):
    """Contents of ~/.claude-dashboard/settings.json."""

    version: Literal[1] = 1
    subscription_tier: SubscriptionTierId = Field(default="pro", alias="subscriptionTier")
    pricing_overrides: dict[str, PricingOverride] = Field(
        default_factory=dict, alias="pricingOverrides"
    )
    updated_at: Optional[datetime] = Field(default=None, alias="updatedAt")


class SubscriptionTier(BaseModel):
    """A plan the user can select for cost comparison."""

    id: SubscriptionTierId
    display_name: str
    monthly_usd: Optional[float] = None
