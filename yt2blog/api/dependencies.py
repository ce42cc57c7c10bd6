"""Dependency injection for the API layer.

Settings are read from the environment once and can be replaced for testing.
Per-request API keys sent as headers take precedence over the configured ones.
"""

from typing import Optional

from fastapi import Depends, Header

from ..config import Settings

# Global instance (can be replaced for testing)
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the configured settings.

    This is a FastAPI dependency.
    """
    global _settings
    if _settings is None:
        _settings = Settings.from_env()
    return _settings


def get_request_settings(
    settings: Settings = Depends(get_settings),
    x_openai_key: Optional[str] = Header(None, description="OpenAI API key for this request"),
    x_youtube_key: Optional[str] = Header(None, description="YouTube Data API key for this request"),
) -> Settings:
    """Get the settings for one request, with header keys applied."""
    overrides = {}
    if x_openai_key:
        overrides["openai_api_key"] = x_openai_key
    if x_youtube_key:
        overrides["youtube_api_key"] = x_youtube_key
    return settings.with_overrides(**overrides) if overrides else settings


def set_settings(settings: Settings) -> None:
    """Set the settings instance (for testing)."""
    global _settings
    _settings = settings


def reset_dependencies() -> None:
    """Reset all dependencies to None (for testing)."""
    global _settings
    _settings = None
