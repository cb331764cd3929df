"""
Discord client for poz.

The client subscribes to guild, guild message, voice state and message
content events, filters out its own messages and hands everything else to
the :class:`~poz.commands.CommandRouter`.  ``discord.py`` runs each event
handler as its own task, so commands are handled concurrently and without
any ordering guarantee between them, even within one guild.
"""
from __future__ import annotations

import logging
from typing import Any, Optional

import discord

from .. import __version__
from ..commands import CommandRouter
from ..config import BotConfig
from ..tts import VoiceTextClient
from .handlers import CommandHandlers
from .voice import TrackStore

logger = logging.getLogger(__name__)


def presence_name() -> str:
    return f"poz - v{__version__}"


def _in_voice(member: discord.Member) -> bool:
    voice = member.voice
    return voice is not None and voice.channel is not None


class PozClient(discord.Client):
    """
    The poz bot.

    Parameters
    ----------
    config:
        Settings loaded at startup.
    tts:
        Synthesis client; built from ``config`` when omitted.
    tracks:
        Voice session store; a fresh one is created when omitted.
    """

    def __init__(
        self,
        config: BotConfig,
        *,
        tts: Optional[VoiceTextClient] = None,
        tracks: Optional[TrackStore] = None,
    ) -> None:
        intents = discord.Intents.none()
        intents.guilds = True
        intents.guild_messages = True
        intents.voice_states = True
        intents.message_content = True
        super().__init__(
            intents=intents,
            max_messages=config.message_cache_size,
            activity=discord.Game(name=presence_name()),
            status=discord.Status.online,
        )
        self.config = config
        self.tts = tts or VoiceTextClient(config.voicetext_api_key, config.voicetext_url)
        self.tracks = tracks or TrackStore()
        self.router = CommandRouter()
        CommandHandlers(self.tracks, self.tts, config.voice_channel_id).register(self.router)

    async def on_ready(self) -> None:
        logger.info(f"Ready as: {self.user.name}")
        logger.debug(f"Connected to {len(self.guilds)} guild(s)")

    async def on_socket_event_type(self, event_type: str) -> None:
        logger.debug(f"Received event {event_type}")

    async def on_message(self, message: discord.Message) -> None:
        # Ignore messages sent by the bot itself
        if self.user is not None and message.author.id == self.user.id:
            return
        if await self.router.dispatch(message):
            logger.debug(f"Handled {message.content} from {message.author} in channel {message.channel.id}")

    async def on_voice_state_update(
        self, member: discord.Member, before: discord.VoiceState, after: discord.VoiceState
    ) -> None:
        # Only our own disconnects matter: drop the session so a later !join starts fresh
        if self.user is None or member.id != self.user.id:
            return
        if before.channel is not None and after.channel is None:
            # member.voice reads the guild's live voice state, which a later
            # !join may already have replaced by the time the lock is ours
            await self.tracks.discard(member.guild.id, still_connected=lambda: _in_voice(member))

    async def on_error(self, event_method: str, /, *args: Any, **kwargs: Any) -> None:
        logger.exception(f"Unhandled error in {event_method}")

    async def close(self) -> None:
        await self.tracks.close()
        await super().close()
