"""
Configuration for the flowtree backend.
"""

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from flow_core.config import LayoutConfig


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_prefix="FLOWTREE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Service configuration
    host: str = Field(default="127.0.0.1", description="Host to bind")
    port: int = Field(default=8765, ge=1, le=65535, description="Port")
    log_level: str = Field(default="info", description="Log level")
    log_file: Optional[str] = Field(default=None, description="Optional log file path")
    cors_origins: list[str] = Field(
        default_factory=lambda: ["http://localhost:5173", "http://localhost:3000", "http://127.0.0.1:5173"],
        description="Origins allowed to call the API",
    )

    # Input feed
    data_url: str = Field(
        default="http://localhost:5173/payload.json",
        description="URL of the flow record list",
    )
    fetch_timeout_s: float = Field(default=30.0, gt=0, description="Feed request timeout")
    load_on_startup: bool = Field(default=True, description="Fetch records when the app starts")

    # History
    max_history: int = Field(default=50, ge=1, description="Undo steps kept")

    # Sub-configurations
    layout: LayoutConfig = Field(default_factory=LayoutConfig)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings."""
    return Settings()
