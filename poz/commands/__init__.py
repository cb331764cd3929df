"""Command routing subsystem for poz.

This package exposes the ``CommandRouter`` class which maps the literal
content of a chat message to an asynchronous handler, plus the errors
handlers raise when a command cannot be carried out.
"""

from .command_router import CommandRouter, CommandError, NotInGuildError  # noqa: F401

__all__ = ["CommandRouter", "CommandError", "NotInGuildError"]
