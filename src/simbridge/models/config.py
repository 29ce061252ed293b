from __future__ import annotations

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from simbridge.models.auth import (
    DEFAULT_API_URL,
    DEFAULT_LOGIN_URL,
    DEFAULT_PORT,
    DEFAULT_TOKEN_FILENAME,
)


class AppSettings(BaseSettings):
    """Application-wide settings populated from environment variables and .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="SIMBRIDGE_",
        extra="ignore",
    )

    api_url: str = DEFAULT_API_URL
    login_url: str = DEFAULT_LOGIN_URL
    callback_port: int = Field(default=DEFAULT_PORT, ge=0, le=65535)
    config_dir: str = "~/.config/simbridge"
    token_file: str | None = None
    app_name: str = "simbridge"
    simconnect_dll: str = "SimConnect.dll"
    poll_interval: float = Field(default=1.0, ge=0)
    min_fix_degrees: float = Field(default=0.1, ge=0)
    callback_timeout: float = Field(default=300.0, gt=0)
    shutdown_timeout: float = Field(default=60.0, gt=0)
    request_timeout: float = Field(default=10.0, gt=0)

    @property
    def token_path(self) -> Path:
        """Resolved location of the cached bearer token."""
        if self.token_file:
            return Path(self.token_file).expanduser()
        return Path(self.config_dir).expanduser() / DEFAULT_TOKEN_FILENAME
