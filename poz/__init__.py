"""
poz Discord bot package.

poz answers a handful of chat commands, joins a voice channel on request
and speaks text synthesized by the VoiceText Web API.  It contains the
command router, the VoiceText client, the Discord client and the logging
setup.
"""

__version__ = "0.1.0"

__all__ = [
    "commands",
    "tts",
    "discord_bot",
    "utils",
]
