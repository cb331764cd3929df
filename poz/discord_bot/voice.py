"""
Voice sessions for the poz bot.

:class:`TrackStore` keeps one :class:`TrackHandle` per guild the bot is
connected to.  A handle is created when the bot joins a voice channel and
removed when it leaves or when the gateway reports that the bot was
disconnected.  All changes to the map go through a single ``asyncio.Lock``.

Audio is played from in-memory buffers through ffmpeg, so the ``ffmpeg``
executable must be available on ``PATH`` for playback (joining works
without it).
"""
from __future__ import annotations

import asyncio
import functools
import io
import logging
from dataclasses import dataclass
from typing import Callable, Dict, Optional

import discord

logger = logging.getLogger(__name__)

SourceFactory = Callable[[bytes], discord.AudioSource]


def ffmpeg_source(data: bytes) -> discord.AudioSource:
    """Wrap an encoded audio buffer (ogg, mp3, wav...) as an Opus source."""
    return discord.FFmpegOpusAudio(io.BytesIO(data), pipe=True)


@dataclass
class TrackHandle:
    """The voice connection of one guild and the track it is playing, if any."""

    guild_id: int
    channel_id: int
    voice_client: discord.VoiceClient
    source: Optional[discord.AudioSource] = None

    def stop(self) -> None:
        if self.voice_client.is_playing() or self.voice_client.is_paused():
            self.voice_client.stop()
        self.source = None


class TrackStore:
    """Maps guild ids to their active :class:`TrackHandle`."""

    def __init__(self, source_factory: SourceFactory = ffmpeg_source) -> None:
        self._tracks: Dict[int, TrackHandle] = {}
        self._lock = asyncio.Lock()
        self._source_factory = source_factory

    def __contains__(self, guild_id: object) -> bool:
        return guild_id in self._tracks

    def __len__(self) -> int:
        return len(self._tracks)

    def get(self, guild_id: int) -> Optional[TrackHandle]:
        return self._tracks.get(guild_id)

    async def join(self, channel: discord.abc.Connectable) -> TrackHandle:
        """
        Connect to ``channel`` and record the session.

        If the guild already has a live connection it is moved to ``channel``
        instead of opening a second one.  Errors from ``discord.py``
        (``discord.ClientException``, ``asyncio.TimeoutError``...) propagate.
        """
        guild = channel.guild
        async with self._lock:
            handle = self._tracks.get(guild.id)
            voice_client = handle.voice_client if handle is not None else guild.voice_client
            if voice_client is not None and voice_client.is_connected():
                if voice_client.channel.id != channel.id:
                    await voice_client.move_to(channel)
            else:
                voice_client = await channel.connect()

            if handle is None:
                handle = TrackHandle(guild.id, channel.id, voice_client)
                self._tracks[guild.id] = handle
            else:
                handle.channel_id = channel.id
                handle.voice_client = voice_client
        logger.info(f"Joined voice channel {channel.id} in guild {guild.id}")
        return handle

    async def play(self, guild_id: int, data: bytes) -> Optional[TrackHandle]:
        """
        Play ``data`` in the guild's voice channel, replacing the current track.

        Returns the handle, or ``None`` if the bot is not connected in that guild.
        """
        async with self._lock:
            handle = self._tracks.get(guild_id)
            if handle is None:
                return None
            handle.stop()
            source = self._source_factory(data)
            handle.voice_client.play(source, after=functools.partial(self._after_play, guild_id))
            handle.source = source
        logger.debug(f"Playing {len(data)} bytes in guild {guild_id}")
        return handle

    async def leave(self, guild_id: int) -> Optional[TrackHandle]:
        """Stop playback, disconnect and forget the guild's session."""
        async with self._lock:
            handle = self._tracks.pop(guild_id, None)
        if handle is None:
            return None
        handle.stop()
        await handle.voice_client.disconnect()
        logger.info(f"Left voice channel {handle.channel_id} in guild {guild_id}")
        return handle

    async def discard(
        self, guild_id: int, still_connected: Optional[Callable[[], bool]] = None
    ) -> Optional[TrackHandle]:
        """
        Forget the guild's session without touching the connection.

        A disconnect event can arrive after a newer ``join`` for the same
        guild has already completed.  ``still_connected`` is evaluated under
        the lock and, when it reports the bot as connected, the session is
        kept.  Without it the handle's own voice client is asked.
        """
        async with self._lock:
            handle = self._tracks.get(guild_id)
            if handle is None:
                return None
            connected = still_connected() if still_connected is not None else handle.voice_client.is_connected()
            if connected:
                logger.debug(f"Ignoring stale voice disconnect in guild {guild_id}")
                return None
            del self._tracks[guild_id]
        handle.source = None
        logger.info(f"Voice session in guild {guild_id} ended")
        return handle

    async def close(self) -> None:
        """Disconnect every session.  Used on shutdown."""
        async with self._lock:
            handles = list(self._tracks.values())
            self._tracks.clear()
        for handle in handles:
            handle.stop()
            try:
                await handle.voice_client.disconnect(force=True)
            except Exception as e:
                logger.warning(f"Failed to disconnect from guild {handle.guild_id}: {e}")

    @staticmethod
    def _after_play(guild_id: int, error: Optional[Exception]) -> None:
        # Runs on the audio player thread
        if error is not None:
            logger.error(f"Playback failed in guild {guild_id}: {error}")
        else:
            logger.debug(f"Playback finished in guild {guild_id}")
