from __future__ import annotations

import logging
import os
from urllib.parse import urlparse

from pydantic import BaseModel, Field, field_validator

from twallet.application.polling import (
    DEFAULT_POLL_CEILING,
    DEFAULT_POLL_INTERVAL,
    PollingConfig,
)
from twallet.infrastructure.wallet.issuer_client import DEFAULT_BASE_URL


class Settings(BaseModel):
    access_token: str
    base_url: str = DEFAULT_BASE_URL
    http_timeout: float = Field(default=10.0, gt=0)

    # Activation polling
    poll_interval: float = Field(default=DEFAULT_POLL_INTERVAL, gt=0)
    poll_ceiling: float = Field(default=DEFAULT_POLL_CEILING, gt=0)

    log_level: str = "INFO"

    @field_validator("access_token")
    @classmethod
    def validate_access_token(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Access token cannot be empty")
        return v

    @field_validator("base_url")
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        if not v:
            raise ValueError("Base URL cannot be empty")
        parsed = urlparse(v)
        if parsed.scheme not in {"http", "https"}:
            raise ValueError("Base URL must start with http:// or https://")
        if not parsed.netloc:
            raise ValueError("Base URL must include a host")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {v}")
        return level

    def polling_config(self) -> PollingConfig:
        return PollingConfig(interval=self.poll_interval, ceiling=self.poll_ceiling)


def get_settings() -> Settings:
    access_token = os.environ.get("TWALLET_ACCESS_TOKEN")
    if not access_token:
        raise ValueError("TWALLET_ACCESS_TOKEN is required")

    http_timeout_str = os.environ.get("TWALLET_HTTP_TIMEOUT")
    poll_interval_str = os.environ.get("TWALLET_POLL_INTERVAL")
    poll_ceiling_str = os.environ.get("TWALLET_POLL_CEILING")

    return Settings(
        access_token=access_token,
        base_url=os.environ.get("TWALLET_BASE_URL", DEFAULT_BASE_URL),
        http_timeout=float(http_timeout_str) if http_timeout_str else 10.0,
        poll_interval=float(poll_interval_str)
        if poll_interval_str
        else DEFAULT_POLL_INTERVAL,
        poll_ceiling=float(poll_ceiling_str)
        if poll_ceiling_str
        else DEFAULT_POLL_CEILING,
        log_level=os.environ.get("TWALLET_LOG_LEVEL", "INFO"),
    )
