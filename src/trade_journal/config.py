"""Configuration loading from environment variables and the .env file."""

from enum import Enum
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class LogFormat(str, Enum):
    """Log output format."""

    JSON = "json"
    CONSOLE = "console"


class Settings(BaseSettings):
    """Journal engine settings.

    Loaded from environment variables (prefix ``TRADE_JOURNAL_``) and ``.env``.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="TRADE_JOURNAL_",
        case_sensitive=False,
        extra="ignore",
    )

    # ==================== Display rounding ====================
    default_precision: int = Field(
        default=2,
        ge=0,
        le=8,
        description="Point rounding when no market specification resolves",
    )
    money_decimals: int = Field(default=2, ge=0, le=6, description="Currency rounding")
    ratio_decimals: int = Field(default=2, ge=0, le=6, description="R:R and R-multiple rounding")
    efficiency_decimals: int = Field(default=1, ge=0, le=4, description="Efficiency rounding")

    # ==================== Pricing ====================
    price_tick_tolerance: float = Field(
        default=1e-4,
        gt=0.0,
        le=0.01,
        description="Tolerance when checking a price against the tick grid",
    )

    # ==================== Sizing defaults ====================
    default_account_balance: float = Field(
        default=100_000.0,
        gt=0.0,
        description="Account balance used for suggested risk amounts",
    )

    # ==================== Logging ====================
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Log level",
    )
    log_format: LogFormat = Field(
        default=LogFormat.CONSOLE,
        description="Log output format",
    )


# Global settings instance (lazy)
_settings: Settings | None = None


def get_settings() -> Settings:
    """Return the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reload_settings() -> Settings:
    """Reload settings from the environment."""
    global _settings
    _settings = Settings()
    return _settings
