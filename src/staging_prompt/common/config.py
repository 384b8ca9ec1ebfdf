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
PROJECT_ROOT = Path(__file__).resolve().parents[3]
CONFIG_DIR = PROJECT_ROOT / "config"

# Load .env from project root
load_dotenv(PROJECT_ROOT / ".env")

# Environment variables checked (in order) for the shared spreadsheet URL
_BASE_URL_ENV_KEYS = (
    "GOOGLE_SHEETS_CSV_URL",
    "SHEETS_BASE_CSV_URL",
    "SHEETS_CSV_BASE_URL",
)


class SheetSettings(BaseModel):
    """Google Sheets CSV export locations.

    ``base_csv_url`` points at a whole spreadsheet; each tab is addressed by
    adding ``sheet=<tab>`` to it. The per-tab URLs override that.
    """
    base_csv_url: str = ""
    products_csv_url: str = ""
    presets_csv_url: str = ""
    rules_csv_url: str = ""
    master_csv_url: str = ""
    room_to_furniture_csv_url: str = ""
    request_timeout: int = 30


class ShopifySettings(BaseModel):
    """Shopify Admin API access, used when the catalog source is "shopify"."""
    shop: str = ""
    admin_token: str = ""
    api_version: str = "2025-10"


class SelectorSettings(BaseModel):
    """Defaults for the prompt builder."""
    default_preset_slug: str = "living-room-corner-warm-minimal"
    furniture_subset_min: int = Field(default=2, ge=1)
    furniture_subset_max: int = Field(default=4, ge=1)


class Settings(BaseModel):
    """Top-level application settings."""
    catalog_source: str = "sheets"
    log_level: str = "INFO"
    sheets: SheetSettings = Field(default_factory=SheetSettings)
    shopify: ShopifySettings = Field(default_factory=ShopifySettings)
    selector: SelectorSettings = Field(default_factory=SelectorSettings)

    @classmethod
    def load(cls, path: Path | None = None) -> Settings:
        """Load settings from config/settings.yaml, then apply env overrides."""
        settings_path = path or CONFIG_DIR / "settings.yaml"
        data: dict = {}
        if settings_path.exists():
            with open(settings_path, encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        settings = cls(**data)
        settings.apply_env_overrides()
        return settings

    def apply_env_overrides(self) -> None:
        """Override catalog sources and logging from environment variables."""
        for key in _BASE_URL_ENV_KEYS:
            if url := os.getenv(key, "").strip():
                self.sheets.base_csv_url = url
                break
        if url := os.getenv("PRODUCTS_CSV_URL", "").strip():
            self.sheets.products_csv_url = url
        if url := os.getenv("PRESETS_CSV_URL", "").strip():
            self.sheets.presets_csv_url = url
        if url := os.getenv("RULES_CSV_URL", "").strip():
            self.sheets.rules_csv_url = url
        if url := os.getenv("MASTER_CSV_URL", "").strip():
            self.sheets.master_csv_url = url
        if url := os.getenv("ROOM_TO_FURNITURE_CSV_URL", "").strip():
            self.sheets.room_to_furniture_csv_url = url
        if timeout := os.getenv("REQUEST_TIMEOUT"):
            self.sheets.request_timeout = int(timeout)
        if source := os.getenv("PRODUCT_CATALOG_SOURCE", "").strip():
            self.catalog_source = source
        if shop := os.getenv("SHOPIFY_SHOP", "").strip():
            self.shopify.shop = shop
        if token := os.getenv("SHOPIFY_ADMIN_TOKEN", "").strip():
            self.shopify.admin_token = token
        if version := os.getenv("SHOPIFY_API_VERSION", "").strip():
            self.shopify.api_version = version
        if level := os.getenv("LOG_LEVEL", "").strip():
            self.log_level = level

    @property
    def uses_shopify(self) -> bool:
        return self.catalog_source.strip().lower() == "shopify"


# Singleton settings instance
settings = Settings.load()
