"""Shared pytest fixtures for the poz test suite.

Discord objects are replaced by ``unittest.mock`` doubles; nothing here talks
to Discord or to the VoiceText API.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional
from unittest.mock import AsyncMock, MagicMock

import pytest

from poz.config import BotConfig

ENV_VARS = (
    "DISCORD_TOKEN",
    "VOICETEXT_API",
    "VOICETEXT_URL",
    "POZ_VOICE_CHANNEL_ID",
    "POZ_MESSAGE_CACHE_SIZE",
    "DISCORD_LOG_LEVEL",
)


@pytest.fixture()
def clean_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    """Remove every poz setting from the environment (restored afterwards)."""
    for name in ENV_VARS:
        # setenv first so monkeypatch remembers the original state, even if unset
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    return monkeypatch


@pytest.fixture()
def config() -> BotConfig:
    return BotConfig(
        discord_token="discord-token",
        voicetext_api_key="voicetext-key",
        voice_channel_id=555,
        message_cache_size=100,
    )


@pytest.fixture()
def make_message() -> Callable[..., MagicMock]:
    """Factory for ``discord.Message`` doubles with an awaitable ``channel.send``."""

    def _make(content: str, *, guild_id: Optional[int] = 1, author_id: int = 42) -> MagicMock:
        message = MagicMock()
        message.content = content
        message.author.id = author_id
        message.channel.id = 10
        message.channel.send = AsyncMock()
        if guild_id is None:
            message.guild = None
        else:
            message.guild.id = guild_id
        return message

    return _make


@pytest.fixture()
def client_caplog(caplog: pytest.LogCaptureFixture) -> pytest.LogCaptureFixture:
    """``caplog`` wired to the ``poz`` logger, which does not propagate to the root."""
    poz_logger = logging.getLogger("poz")
    poz_logger.addHandler(caplog.handler)
    with caplog.at_level(logging.DEBUG, logger="poz.discord_bot.client"):
        yield caplog
    poz_logger.removeHandler(caplog.handler)
