"""Tests for the chat command handlers."""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import discord
import pytest

from poz.commands import CommandRouter, NotInGuildError
from poz.discord_bot.handlers import TEST_TEXT, CommandHandlers
from poz.tts import AudioFormat, VoiceTextError

CHANNEL_ID = 555


@pytest.fixture()
def tracks():
    store = MagicMock()
    store.join = AsyncMock()
    store.leave = AsyncMock(return_value=None)
    store.play = AsyncMock()
    store.__contains__.return_value = False
    return store


@pytest.fixture()
def tts():
    client = MagicMock()
    client.asynthesize = AsyncMock(return_value=b"OggS\x00audio")
    return client


@pytest.fixture()
def handlers(tracks, tts):
    return CommandHandlers(tracks, tts, CHANNEL_ID)


def _voice_channel(channel_id=CHANNEL_ID):
    channel = MagicMock(spec=discord.VoiceChannel)
    channel.id = channel_id
    channel.voice_states = {}
    return channel


class TestRegistration:
    def test_registers_the_four_commands(self, handlers):
        router = CommandRouter()
        handlers.register(router)
        assert router.names == ["!ping", "!join", "!leave", "!test"]


class TestPing:
    @pytest.mark.asyncio
    async def test_replies_pong(self, handlers, make_message, tracks, tts):
        message = make_message("!ping")
        await handlers.ping(message)

        message.channel.send.assert_awaited_once_with("Pong!")
        tracks.join.assert_not_awaited()
        tts.asynthesize.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_send_failure_propagates(self, handlers, make_message):
        message = make_message("!ping")
        message.channel.send.side_effect = discord.DiscordException("missing permissions")

        with pytest.raises(discord.DiscordException):
            await handlers.ping(message)


class TestJoin:
    @pytest.mark.asyncio
    async def test_outside_guild_fails_without_join(self, handlers, make_message, tracks):
        message = make_message("!join", guild_id=None)

        with pytest.raises(NotInGuildError):
            await handlers.join(message)

        tracks.join.assert_not_awaited()
        message.channel.send.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_success(self, handlers, make_message, tracks):
        message = make_message("!join")
        channel = _voice_channel()
        message.guild.get_channel.return_value = channel

        await handlers.join(message)

        message.guild.get_channel.assert_called_once_with(CHANNEL_ID)
        tracks.join.assert_awaited_once_with(channel)
        message.channel.send.assert_awaited_once_with(f"Joined <#{CHANNEL_ID}>!")

    @pytest.mark.asyncio
    async def test_missing_channel_reports_failure(self, handlers, make_message, tracks):
        message = make_message("!join")
        message.guild.get_channel.return_value = None

        await handlers.join(message)

        tracks.join.assert_not_awaited()
        content = message.channel.send.await_args.args[0]
        assert content.startswith(f"Failed to join <#{CHANNEL_ID}>! Why: ")
        assert "VoiceChannelNotFound" in content

    @pytest.mark.asyncio
    async def test_text_channel_is_not_joinable(self, handlers, make_message, tracks):
        message = make_message("!join")
        message.guild.get_channel.return_value = MagicMock(spec=discord.TextChannel)

        await handlers.join(message)

        tracks.join.assert_not_awaited()
        assert message.channel.send.await_args.args[0].startswith("Failed to join")

    @pytest.mark.asyncio
    async def test_connect_error_reports_failure(self, handlers, make_message, tracks):
        message = make_message("!join")
        message.guild.get_channel.return_value = _voice_channel()
        tracks.join.side_effect = asyncio.TimeoutError()

        await handlers.join(message)

        content = message.channel.send.await_args.args[0]
        assert content == f"Failed to join <#{CHANNEL_ID}>! Why: TimeoutError()"


class TestLeave:
    @pytest.mark.asyncio
    async def test_outside_guild_fails(self, handlers, make_message, tracks):
        with pytest.raises(NotInGuildError):
            await handlers.leave(make_message("!leave", guild_id=None))
        tracks.leave.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_leaves_active_session(self, handlers, make_message, tracks):
        tracks.leave.return_value = MagicMock(channel_id=777)
        message = make_message("!leave", guild_id=9)

        await handlers.leave(message)

        tracks.leave.assert_awaited_once_with(9)
        message.channel.send.assert_awaited_once_with("Left <#777>!")

    @pytest.mark.asyncio
    async def test_without_session(self, handlers, make_message):
        message = make_message("!leave")
        await handlers.leave(message)
        message.channel.send.assert_awaited_once_with("Not connected to a voice channel.")


class TestTest:
    @pytest.mark.asyncio
    async def test_success_attaches_audio(self, handlers, make_message, tts, tracks):
        message = make_message("!test")

        await handlers.test(message)

        options = tts.asynthesize.await_args.args[0]
        assert options.text == TEST_TEXT == "テスト"
        assert options.format == AudioFormat.OGG
        assert tts.asynthesize.await_args.kwargs["timeout"] == 1.0

        message.channel.send.assert_awaited_once()
        call = message.channel.send.await_args
        assert call.args == ("test!",)
        attachment = call.kwargs["file"]
        assert attachment.filename == "test.ogg"
        assert attachment.fp.read() == b"OggS\x00audio"
        tracks.play.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_plays_when_connected(self, handlers, make_message, tracks):
        tracks.__contains__.return_value = True
        message = make_message("!test", guild_id=3)

        await handlers.test(message)

        tracks.play.assert_awaited_once_with(3, b"OggS\x00audio")

    @pytest.mark.asyncio
    async def test_http_error_embed(self, handlers, make_message, tts):
        tts.asynthesize.side_effect = VoiceTextError("boom", status=500)
        message = make_message("!test")

        await handlers.test(message)

        message.channel.send.assert_awaited_once()
        embed = message.channel.send.await_args.kwargs["embed"]
        assert embed.title == "APIリクエストエラー"
        assert embed.description == "500: Internal Server Error"
        assert "file" not in message.channel.send.await_args.kwargs

    @pytest.mark.asyncio
    async def test_request_failure_embed(self, handlers, make_message, tts, tracks):
        tts.asynthesize.side_effect = VoiceTextError("timed out")
        tracks.__contains__.return_value = True
        message = make_message("!test")

        await handlers.test(message)

        embed = message.channel.send.await_args.kwargs["embed"]
        assert embed.title == "APIのリクエストに失敗しました。"
        assert embed.description is None
        tracks.play.assert_not_awaited()
