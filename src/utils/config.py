import os
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, Field, model_validator

from src.utils.logger import setup_logger

logger = setup_logger(__name__)

PROJECT_ROOT = Path(__file__).parent.parent.parent


class MarketConfig(BaseModel):
    currency: Literal["usd", "eur", "inr"] = "usd"
    per_page: int = Field(default=50, ge=1, le=250)
    order: str = "market_cap_desc"
    refresh_interval: float = Field(default=30, gt=0)  # seconds between polls
    top_coins: int = Field(default=10, ge=0)


class StorageConfig(BaseModel):
    data_dir: str = "data"

    def resolved_dir(self) -> Path:
        path = Path(self.data_dir)
        return path if path.is_absolute() else PROJECT_ROOT / path


class UserConfig(BaseModel):
    email: str = "demo@example.com"
    name: str = "Demo"


class DashboardSections(BaseModel):
    portfolio: bool = True
    watchlist: bool = True
    alerts: bool = True
    top_coins: bool = True


class TelegramConfig(BaseModel):
    bot_token: str = ""
    chat_id: str = ""

    @model_validator(mode="after")
    def check_not_empty(self) -> "TelegramConfig":
        if not self.bot_token.strip():
            raise ValueError("TELEGRAM_BOT_TOKEN is empty or not set")
        if not self.chat_id.strip():
            raise ValueError("TELEGRAM_CHAT_ID is empty or not set")
        return self


class AppConfig(BaseModel):
    market: MarketConfig = Field(default_factory=MarketConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    user: UserConfig = Field(default_factory=UserConfig)
    sections: DashboardSections = Field(default_factory=DashboardSections)
    telegram: TelegramConfig


def load_config(config_path: str | None = None, require_telegram: bool = True) -> AppConfig:
    """Load config from YAML file + environment variables.

    Args:
        config_path: Path to YAML config. Defaults to config/config.yaml,
                     falls back to config/config.example.yaml.
        require_telegram: If False, skip Telegram credential validation (for dry runs).

    DASHBOARD_CURRENCY and DASHBOARD_DATA_DIR override the YAML values.
    """
    if config_path is None:
        config_path = str(PROJECT_ROOT / "config" / "config.yaml")
        if not Path(config_path).exists():
            config_path = str(PROJECT_ROOT / "config" / "config.example.yaml")
            logger.info("Using config.example.yaml (no config.yaml found)")

    with open(config_path) as f:
        raw = yaml.safe_load(f) or {}

    currency = os.environ.get("DASHBOARD_CURRENCY")
    if currency:
        raw.setdefault("market", {})["currency"] = currency.lower()
    data_dir = os.environ.get("DASHBOARD_DATA_DIR")
    if data_dir:
        raw.setdefault("storage", {})["data_dir"] = data_dir

    bot_token = os.environ.get("TELEGRAM_BOT_TOKEN", "")
    chat_id = os.environ.get("TELEGRAM_CHAT_ID", "")

    if not require_telegram:
        # Use dummy values for dry run
        bot_token = bot_token or "dry-run-token"
        chat_id = chat_id or "dry-run-chat-id"

    raw["telegram"] = {
        "bot_token": bot_token,
        "chat_id": chat_id,
    }

    config = AppConfig(**raw)
    logger.info(
        "Config loaded: currency=%s, %d coins per poll, every %.0fs",
        config.market.currency,
        config.market.per_page,
        config.market.refresh_interval,
    )
    return config
