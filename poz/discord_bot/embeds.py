"""Embeds the bot sends back to chat."""
from __future__ import annotations

import discord

from ..tts import VoiceTextError

ERROR_COLOUR = 0xFF0000
API_ERROR_TITLE = "APIリクエストエラー"
REQUEST_FAILED_TITLE = "APIのリクエストに失敗しました。"
UNKNOWN_STATUS = "<unknown status code>"


def api_error_embed(error: VoiceTextError) -> discord.Embed:
    """
    Describe a failed synthesis request.

    With an HTTP status the description reads ``"<code>: <reason>"``; a
    request that never got a response only carries the generic title.
    """
    if error.status is None:
        return discord.Embed(title=REQUEST_FAILED_TITLE, colour=ERROR_COLOUR)
    return discord.Embed(
        title=API_ERROR_TITLE,
        description=f"{error.status}: {error.reason or UNKNOWN_STATUS}",
        colour=ERROR_COLOUR,
    )
