"""Project configuration and paths.

Loads settings from config/settings.yaml and environment variables.
"""

from __future__ import annotations

import os
from pathlib import Path

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field

# === Paths ===
PROJECT_ROOT = Path(__file__).parent.parent.parent
CONFIG_DIR = PROJECT_ROOT / "config"
DATA_DIR = PROJECT_ROOT / "data"

# Load .env from project root
load_dotenv(PROJECT_ROOT / ".env")


class RecommendationThresholds(BaseModel):
    """Cut-offs used by the buy/wait decision tree.

    Percentages are expressed in percent points, except
    ``global_low_tolerance`` which is a ratio above the all-time low.
    """
    global_low_tolerance: float = 0.05
    seasonal_buy_deviation: float = -10.0
    best_month_band: float = 10.0
    seasonal_wait_deviation: float = 15.0


class StorageSettings(BaseModel):
    """Local record store settings."""
    store_path: str = str(DATA_DIR / "price_records.json")

    @property
    def store_abs_path(self) -> Path:
        """Resolve store path relative to project root."""
        path = Path(self.store_path)
        return path if path.is_absolute() else PROJECT_ROOT / path


class AnalyticsSettings(BaseModel):
    """Presentation-facing analytics settings."""
    currency_symbol: str = "₹"
    default_time_range: str = "All"
    default_granularity: str = "Month"


class Settings(BaseModel):
    """Top-level application settings."""
    analytics: AnalyticsSettings = Field(default_factory=AnalyticsSettings)
    recommendation: RecommendationThresholds = Field(default_factory=RecommendationThresholds)
    storage: StorageSettings = Field(default_factory=StorageSettings)
    log_level: str = "INFO"

    @classmethod
    def load(cls, settings_path: Path | None = None) -> Settings:
        """Load settings from config/settings.yaml, falling back to defaults.

        Environment variables override the file:
        MANDI_LOG_LEVEL, MANDI_STORE_PATH, MANDI_CURRENCY_SYMBOL.
        """
        settings_path = settings_path or CONFIG_DIR / "settings.yaml"
        data: dict = {}
        if settings_path.exists():
            with open(settings_path, encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}

        loaded = cls(**data)

        if level := os.getenv("MANDI_LOG_LEVEL"):
            loaded.log_level = level.upper()
        if store_path := os.getenv("MANDI_STORE_PATH"):
            loaded.storage.store_path = store_path
        if symbol := os.getenv("MANDI_CURRENCY_SYMBOL"):
            loaded.analytics.currency_symbol = symbol
        return loaded


# Singleton settings instance
settings = Settings.load()
