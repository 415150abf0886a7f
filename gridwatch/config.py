"""Configuration models and YAML loader.

Secrets can be provided via environment variables, which always take
precedence over values in the YAML file:

- ``PHEMEX_API_KEY`` / ``PHEMEX_API_SECRET`` for the exchange key pair
- ``TELEGRAM_BOT_TOKEN`` / ``TELEGRAM_CHAT_ID`` for the Telegram bot
"""

import os
from datetime import datetime
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

from .grid import GridType
from .models import BotConfig, BotStatus, Credentials, parse_bot_config
from .transport import DEFAULT_BASE_URL


class ExchangeConfig(BaseModel):
    base_url: str = DEFAULT_BASE_URL
    api_key: str = ""
    api_secret: str = ""
    timeout_seconds: float = 10.0
    max_retries: int = 0
    retry_backoff_seconds: float = 1.0
    max_retry_delay_seconds: float = 8.0

    @model_validator(mode="before")
    @classmethod
    def _resolve_env_vars(cls, values: dict) -> dict:  # type: ignore[override]
        """Override the key pair from env vars if set."""
        values = dict(values or {})
        env_key = os.environ.get("PHEMEX_API_KEY")
        env_secret = os.environ.get("PHEMEX_API_SECRET")
        if env_key:
            values["api_key"] = env_key
        if env_secret:
            values["api_secret"] = env_secret
        return values

    @field_validator("base_url")
    @classmethod
    def normalize_base_url(cls, v: str) -> str:
        v = v.strip().rstrip("/")
        if not v.startswith(("http://", "https://")):
            v = f"https://{v}"
        return v

    @field_validator("timeout_seconds")
    @classmethod
    def positive_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("timeout_seconds must be positive")
        return v


class TelegramConfig(BaseModel):
    bot_token: str = ""
    chat_id: str = ""

    @model_validator(mode="before")
    @classmethod
    def _resolve_env_vars(cls, values: dict) -> dict:  # type: ignore[override]
        """Override token / chat_id from env vars if set."""
        values = dict(values or {})
        env_token = os.environ.get("TELEGRAM_BOT_TOKEN")
        env_chat = os.environ.get("TELEGRAM_CHAT_ID")
        if env_token:
            values["bot_token"] = env_token
        if env_chat:
            values["chat_id"] = env_chat
        return values

    @model_validator(mode="after")
    def _check_required(self) -> "TelegramConfig":
        """Ensure both fields are present (from YAML or env)."""
        if not self.bot_token:
            raise ValueError(
                "bot_token is required — set TELEGRAM_BOT_TOKEN env var "
                "or provide it in the YAML config"
            )
        if not self.chat_id:
            raise ValueError(
                "chat_id is required — set TELEGRAM_CHAT_ID env var "
                "or provide it in the YAML config"
            )
        return self


class BotEntry(BaseModel):
    """One grid bot as declared in the config file."""

    id: str | None = None
    pair: str
    upper_limit: float
    lower_limit: float
    grid_count: int
    grid_type: GridType = GridType.ARITHMETIC
    investment: float
    started_at: datetime
    notes: str | None = None
    status: BotStatus = BotStatus.ACTIVE

    @model_validator(mode="after")
    def _check_bounds(self) -> "BotEntry":
        self.to_bot_config()
        return self

    def to_bot_config(self, owner_id: str = "default") -> BotConfig:
        return parse_bot_config(
            {
                "id": self.id,
                "pair": self.pair,
                "upper_limit": self.upper_limit,
                "lower_limit": self.lower_limit,
                "grid_count": self.grid_count,
                "grid_type": self.grid_type.value,
                "investment": self.investment,
                "started_at": self.started_at,
                "notes": self.notes,
                "status": self.status.value,
            },
            owner_id=owner_id,
        )


class ReportingConfig(BaseModel):
    refresh_interval_seconds: int = 60
    periodic_interval_minutes: int = 60
    alert_cooldown_seconds: int = 300
    startup_notification: bool = True


class DemoConfig(BaseModel):
    seed: int | None = None


class LoggingConfig(BaseModel):
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"


class MonitorConfig(BaseModel):
    exchange: ExchangeConfig = Field(default_factory=ExchangeConfig)
    telegram: TelegramConfig | None = None
    owner_id: str = "default"
    bots: list[BotEntry] = []
    reporting: ReportingConfig = ReportingConfig()
    demo: DemoConfig = DemoConfig()
    logging: LoggingConfig = LoggingConfig()

    @model_validator(mode="after")
    def _unique_bot_ids(self) -> "MonitorConfig":
        ids = [b.id for b in self.bot_configs()]
        dupes = sorted({i for i in ids if ids.count(i) > 1})
        if dupes:
            raise ValueError(f"duplicate bot ids: {', '.join(dupes)}")
        return self

    def bot_configs(self) -> list[BotConfig]:
        return [entry.to_bot_config(self.owner_id) for entry in self.bots]

    def credentials(self) -> Credentials | None:
        """The exchange key pair, or None if either half is missing."""
        if not self.exchange.api_key or not self.exchange.api_secret:
            return None
        return Credentials(
            api_key=self.exchange.api_key, api_secret=self.exchange.api_secret
        )


def load_config(path: str | Path) -> MonitorConfig:
    """Load and validate monitor configuration from a YAML file."""
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path) as f:
        raw = yaml.safe_load(f) or {}

    return MonitorConfig(**raw)
