"""
Command routing for the poz bot.

This module defines a small dispatch table that maps the exact content of an
incoming chat message to an asynchronous handler.  Matching is literal and
case sensitive: ``"!ping"`` matches, ``"!ping "`` and ``"!PING"`` do not.

Handlers receive the ``discord.Message`` that triggered them and perform
their side effects themselves (usually a single reply).  Exceptions raised
by a handler are not caught here; they propagate to the caller so that the
Discord client's error hook can log them.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Optional

CommandHandler = Callable[[Any], Awaitable[None]]


class CommandError(Exception):
    """Base class for errors raised by command handlers."""


class NotInGuildError(CommandError):
    """Raised when a guild-only command is used outside a server."""

    def __init__(self, command: str) -> None:
        super().__init__(f"{command} can only be used in a server.")
        self.command = command


@dataclass
class Command:
    """Represents a chat command and its handler."""

    name: str
    handler: CommandHandler


class CommandRouter:
    """
    Routes chat messages to registered command handlers.

    Commands are registered under the literal message content that triggers
    them.  ``dispatch`` looks the content up and awaits the handler.  Content
    that is not registered is ignored and ``dispatch`` returns ``False``.
    """

    def __init__(self) -> None:
        self._commands: Dict[str, Command] = {}

    def add_command(self, name: str, handler: CommandHandler) -> None:
        """
        Register a command.

        Parameters
        ----------
        name:
            The exact message content that triggers the command, e.g. ``"!ping"``.
        handler:
            A coroutine function invoked with the message when it matches.
        """
        if name in self._commands:
            raise ValueError(f"command {name!r} is already registered")
        self._commands[name] = Command(name, handler)

    def get(self, content: str) -> Optional[Command]:
        return self._commands.get(content)

    @property
    def names(self) -> List[str]:
        return list(self._commands)

    async def dispatch(self, message: Any) -> bool:
        """
        Run the handler registered for ``message.content``.

        Returns ``True`` if a command matched (and its handler completed),
        ``False`` if the content is not a known command.
        """
        cmd = self.get(message.content)
        if cmd is None:
            return False
        await cmd.handler(message)
        return True
