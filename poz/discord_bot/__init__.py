"""Discord integration for poz.

The client receives chat messages, dispatches the ``!`` commands through the
command router and manages the bot's voice connections.
"""

from .client import PozClient  # noqa: F401

__all__ = ["PozClient"]
