"""
Runtime configuration for the poz bot.

All settings come from the environment.  A ``.env`` file in the working
directory is loaded first via python-dotenv so local development does not
need exported variables.  Required values that are missing raise
:class:`ConfigError`, which the entry point treats as fatal.
"""
from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

from .tts.voicetext_client import DEFAULT_URL

DEFAULT_VOICE_CHANNEL_ID = 1001440920299905096
DEFAULT_MESSAGE_CACHE_SIZE = 1000


class ConfigError(RuntimeError):
    """Raised when a required setting is missing or malformed."""


def _require(name: str) -> str:
    value = os.getenv(name)
    if not value:
        raise ConfigError(f"{name} is not set")
    return value


def _int_setting(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from None
    if value <= 0:
        raise ConfigError(f"{name} must be positive, got {value}")
    return value


@dataclass(frozen=True)
class BotConfig:
    """Settings read once at startup."""

    discord_token: str
    voicetext_api_key: str
    voicetext_url: str = DEFAULT_URL
    voice_channel_id: int = DEFAULT_VOICE_CHANNEL_ID
    message_cache_size: int = DEFAULT_MESSAGE_CACHE_SIZE
    discord_log_level: str = "WARNING"

    @classmethod
    def from_env(cls, *, dotenv_path: Optional[str] = None) -> "BotConfig":
        # Existing environment variables win over values in .env
        load_dotenv(dotenv_path)
        return cls(
            discord_token=_require("DISCORD_TOKEN"),
            voicetext_api_key=_require("VOICETEXT_API"),
            voicetext_url=os.getenv("VOICETEXT_URL") or DEFAULT_URL,
            voice_channel_id=_int_setting("POZ_VOICE_CHANNEL_ID", DEFAULT_VOICE_CHANNEL_ID),
            message_cache_size=_int_setting("POZ_MESSAGE_CACHE_SIZE", DEFAULT_MESSAGE_CACHE_SIZE),
            discord_log_level=os.getenv("DISCORD_LOG_LEVEL", "WARNING"),
        )
