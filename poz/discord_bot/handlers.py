"""
Chat command handlers.

Each handler takes the triggering ``discord.Message`` and replies in the
channel it came from.  Failures of the reply itself (``discord.HTTPException``
and friends) are not caught; they propagate to the client's error hook.
"""
from __future__ import annotations

import asyncio
import io
import logging
from typing import Optional, Union

import discord

from ..commands import CommandRouter, NotInGuildError
from ..tts import ApiOptions, AudioFormat, VoiceTextClient, VoiceTextError
from .embeds import api_error_embed
from .voice import TrackStore

logger = logging.getLogger(__name__)

TEST_TEXT = "テスト"
TEST_TIMEOUT = 1.0
TEST_FILENAME = "test.ogg"

VoiceChannel = Union[discord.VoiceChannel, discord.StageChannel]


class VoiceChannelNotFound(LookupError):
    """The configured voice channel does not exist in the guild."""


class CommandHandlers:
    """
    The bot's chat commands.

    Parameters
    ----------
    tracks:
        Voice sessions, shared with the client.
    tts:
        Client used by ``!test`` to synthesize speech.
    voice_channel_id:
        Channel joined by ``!join``.
    """

    def __init__(self, tracks: TrackStore, tts: VoiceTextClient, voice_channel_id: int) -> None:
        self.tracks = tracks
        self.tts = tts
        self.voice_channel_id = voice_channel_id

    def register(self, router: CommandRouter) -> None:
        router.add_command("!ping", self.ping)
        router.add_command("!join", self.join)
        router.add_command("!leave", self.leave)
        router.add_command("!test", self.test)

    # ------------------------------------------------------------------
    # !ping
    # ------------------------------------------------------------------
    async def ping(self, message: discord.Message) -> None:
        await message.channel.send("Pong!")

    # ------------------------------------------------------------------
    # !join / !leave
    # ------------------------------------------------------------------
    def _voice_channel(self, guild: discord.Guild) -> VoiceChannel:
        channel = guild.get_channel(self.voice_channel_id)
        if not isinstance(channel, (discord.VoiceChannel, discord.StageChannel)):
            raise VoiceChannelNotFound(f"no voice channel {self.voice_channel_id} in guild {guild.id}")
        return channel

    async def join(self, message: discord.Message) -> None:
        guild = message.guild
        if guild is None:
            raise NotInGuildError("!join")

        channel_id = self.voice_channel_id
        channel: Optional[VoiceChannel] = None
        try:
            channel = self._voice_channel(guild)
            await self.tracks.join(channel)
            content = f"Joined <#{channel_id}>!"
        except (VoiceChannelNotFound, discord.DiscordException, asyncio.TimeoutError, RuntimeError) as e:
            logger.warning(f"Failed to join voice channel {channel_id} in guild {guild.id}: {e!r}")
            content = f"Failed to join <#{channel_id}>! Why: {e!r}"

        await message.channel.send(content)

        if channel is not None:
            logger.debug(f"Cached voice states in {channel_id}: {list(channel.voice_states)}")

    async def leave(self, message: discord.Message) -> None:
        guild = message.guild
        if guild is None:
            raise NotInGuildError("!leave")

        handle = await self.tracks.leave(guild.id)
        if handle is None:
            await message.channel.send("Not connected to a voice channel.")
        else:
            await message.channel.send(f"Left <#{handle.channel_id}>!")

    # ------------------------------------------------------------------
    # !test
    # ------------------------------------------------------------------
    async def test(self, message: discord.Message) -> None:
        options = ApiOptions(text=TEST_TEXT, format=AudioFormat.OGG)
        try:
            audio = await self.tts.asynthesize(options, timeout=TEST_TIMEOUT)
        except VoiceTextError as e:
            logger.warning(f"Speech synthesis failed: {e}")
            await message.channel.send(embed=api_error_embed(e))
            return

        await message.channel.send("test!", file=discord.File(io.BytesIO(audio), filename=TEST_FILENAME))

        # Also speak it if we are in a voice channel of this guild
        if message.guild is not None and message.guild.id in self.tracks:
            await self.tracks.play(message.guild.id, audio)
