"""Configuration models for remote browser control."""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any, Literal, Optional

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .models import Capability


class BrowserConfig(BaseModel):
    """Settings for the browser backend."""

    browser_type: Literal["chromium", "firefox", "webkit"] = "chromium"
    headless: bool = True
    viewport_width: int = 1280
    viewport_height: int = 720
    launch_args: list[str] = Field(
        default_factory=lambda: [
            "--no-sandbox",
            "--disable-dev-shm-usage",
            "--disable-gpu",
        ]
    )
    slow_mo_ms: Optional[float] = None


class ScreenshotConfig(BaseModel):
    """Settings for post-action screenshot capture."""

    full_page: bool = False
    max_per_session: Optional[int] = Field(
        default=None,
        ge=1,
        description="Keep at most this many screenshots per session (oldest dropped first).",
    )


class CatalogConfig(BaseModel):
    """Settings controlling which actions are exposed and how they are named."""

    prefix: str = Field(default="browser_cu")
    capabilities: list[Capability] = Field(
        default_factory=lambda: [Capability.COMPUTER_USE, Capability.SESSION]
    )


class NotificationConfig(BaseModel):
    """Notification channel settings."""

    channel: str = Field(default="log")


class ServerConfig(BaseSettings):
    """Top-level configuration for serving the control surface."""

    model_config = SettingsConfigDict(
        env_prefix="REMOTE_BROWSER_CONTROL_",
        env_file=(".env",),
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
    )

    server_name: str = Field(default="remote-browser-control")
    browser: BrowserConfig = Field(default_factory=BrowserConfig)
    screenshots: ScreenshotConfig = Field(default_factory=ScreenshotConfig)
    catalog: CatalogConfig = Field(default_factory=CatalogConfig)
    notifications: NotificationConfig = Field(default_factory=NotificationConfig)


def load_config(
    path: Path | None = None,
    *,
    env_file: Path | None = None,
    **overrides: object,
) -> ServerConfig:
    """Load configuration from an optional file and overrides."""

    data: dict[str, Any] = {}
    if path:
        import yaml

        data = yaml.safe_load(path.read_text()) or {}
    if overrides:
        _deep_update(data, overrides)
    settings_kwargs: dict[str, object] = {}
    if env_file is not None:
        settings_kwargs["_env_file"] = env_file
    config = ServerConfig(**data, **settings_kwargs)
    if not data:
        return config

    merged = config.model_dump(mode="python")
    _deep_update(merged, data)
    return ServerConfig.model_validate(merged)


def _deep_update(target: dict[str, Any], updates: Mapping[str, Any]) -> None:
    """Recursively merge ``updates`` into ``target`` in-place."""

    for key, value in updates.items():
        if (
            isinstance(value, Mapping)
            and isinstance(existing := target.get(key), Mapping)
        ):
            nested: dict[str, Any]
            if isinstance(existing, dict):
                nested = existing
            else:
                nested = dict(existing)
            _deep_update(nested, value)
            target[key] = nested
        else:
            target[key] = value
