"""Persistence for dashboard settings."""

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from claude_dashboard import config
from claude_dashboard.core.disk_cache import atomic_write_text
from claude_dashboard.schemas.settings import Settings, SubscriptionTier

logger = logging.getLogger(__name__)

SUBSCRIPTION_TIERS = [
    SubscriptionTier(id="free", display_name="Free", monthly_usd=0),
    SubscriptionTier(id="pro", display_name="Pro", monthly_usd=20),
    SubscriptionTier(id="max-5x", display_name="Max 5x", monthly_usd=100),
    SubscriptionTier(id="max-20x", display_name="Max 20x", monthly_usd=200),
    SubscriptionTier(id="teams", display_name="Teams", monthly_usd=150),
    SubscriptionTier(id="enterprise", display_name="Enterprise", monthly_usd=None),
    SubscriptionTier(id="api", display_name="API Only", monthly_usd=None),
]


class SettingsStore:
    """Load and save settings.json."""

    def __init__(self, path: Optional[Path] = None):
        if path is None:
            path = config.SETTINGS_PATH
        self.path = Path(path)

    def load(self) -> Settings:
        """Return stored settings, or defaults if the file is missing or invalid."""
        try:
            with open(self.path, encoding="utf-8") as f:
                raw = json.load(f)
        except FileNotFoundError:
            return Settings()
        except (OSError, ValueError) as e:
            logger.warning("Unreadable settings file %s, using defaults: %s", self.path, e)
            return Settings()

        try:
            return Settings.model_validate(raw)
        except ValidationError as e:
            logger.warning("Invalid settings file %s, using defaults: %s", self.path, e)
            return Settings()

    def save(self, settings: Settings) -> Settings:
        """Stamp and atomically write settings. Raises OSError on failure."""
        stamped = settings.model_copy(update={"updated_at": datetime.now(timezone.utc)})
        self.path.parent.mkdir(parents=True, exist_ok=True)
        atomic_write_text(
            self.path,
            json.dumps(stamped.model_dump(mode="json", by_alias=True, exclude_none=True), indent=2),
        )
        return stamped
