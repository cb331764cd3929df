"""Text-to-speech support for poz.

This package exposes :class:`~poz.tts.voicetext_client.VoiceTextClient`,
a client for the remote VoiceText Web API, together with its request
options and error type.  Synthesis happens on the remote service; the
client only returns the encoded audio bytes.
"""

from .voicetext_client import (  # noqa: F401
    ApiOptions,
    AudioFormat,
    Emotion,
    Speaker,
    VoiceTextClient,
    VoiceTextError,
)

__all__ = ["ApiOptions", "AudioFormat", "Emotion", "Speaker", "VoiceTextClient", "VoiceTextError"]
