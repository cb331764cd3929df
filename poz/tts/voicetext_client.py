"""
Client for the VoiceText Web API.

The API converts a short piece of Japanese text into an audio file.  Requests
are form-encoded ``POST`` calls authenticated with HTTP basic auth, the API
key being the user name and the password left empty.  The response body is
the encoded audio (WAV, Ogg Vorbis or MP3) or, on failure, a small JSON
document of the form ``{"error": {"message": "..."}}``.

The HTTP call itself uses ``requests`` and therefore blocks; the bot calls
:meth:`VoiceTextClient.asynthesize` which runs it in the default executor.
No retries are attempted.  Every failure is reported as a
:class:`VoiceTextError` whose ``status`` is ``None`` when no HTTP response
was received at all (timeout, DNS failure, refused connection...).
"""
from __future__ import annotations

import asyncio
import enum
import functools
import logging
from dataclasses import dataclass
from http import HTTPStatus
from typing import Any, Dict, Optional

import requests

logger = logging.getLogger(__name__)

DEFAULT_URL = "https://api.voicetext.jp/v1/tts"
MAX_TEXT_LENGTH = 200


class AudioFormat(str, enum.Enum):
    WAV = "wav"
    OGG = "ogg"
    MP3 = "mp3"


class Speaker(str, enum.Enum):
    SHOW = "show"
    HARUKA = "haruka"
    HIKARI = "hikari"
    TAKERU = "takeru"
    SANTA = "santa"
    BEAR = "bear"


class Emotion(str, enum.Enum):
    HAPPINESS = "happiness"
    ANGER = "anger"
    SADNESS = "sadness"


class VoiceTextError(Exception):
    """
    Raised when a synthesis request fails.

    Attributes
    ----------
    status:
        HTTP status code returned by the server, or ``None`` if the request
        never produced a response.
    detail:
        Error message reported by the API, if the body contained one.
    """

    def __init__(self, message: str, *, status: Optional[int] = None, detail: Optional[str] = None) -> None:
        super().__init__(message)
        self.status = status
        self.detail = detail

    @property
    def reason(self) -> Optional[str]:
        """Canonical reason phrase for ``status`` or ``None`` if unknown."""
        if self.status is None:
            return None
        try:
            return HTTPStatus(self.status).phrase
        except ValueError:
            return None


def _check_range(name: str, value: Optional[int], low: int, high: int) -> None:
    if value is not None and not low <= value <= high:
        raise ValueError(f"{name} must be between {low} and {high}, got {value}")


@dataclass
class ApiOptions:
    """Parameters of a single synthesis request.  Unset fields use the API defaults."""

    text: str
    speaker: Speaker = Speaker.SHOW
    format: Optional[AudioFormat] = None
    emotion: Optional[Emotion] = None
    emotion_level: Optional[int] = None
    pitch: Optional[int] = None
    speed: Optional[int] = None
    volume: Optional[int] = None

    def to_form(self) -> Dict[str, Any]:
        """Validate the options and return the form fields to post."""
        if not self.text:
            raise ValueError("text must not be empty")
        if len(self.text) > MAX_TEXT_LENGTH:
            raise ValueError(f"text must be at most {MAX_TEXT_LENGTH} characters, got {len(self.text)}")
        if self.emotion is not None and self.speaker == Speaker.SHOW:
            raise ValueError("speaker 'show' does not support emotions")
        _check_range("emotion_level", self.emotion_level, 1, 4)
        _check_range("pitch", self.pitch, 50, 200)
        _check_range("speed", self.speed, 50, 400)
        _check_range("volume", self.volume, 50, 200)

        form: Dict[str, Any] = {"text": self.text, "speaker": Speaker(self.speaker).value}
        if self.format is not None:
            form["format"] = AudioFormat(self.format).value
        if self.emotion is not None:
            form["emotion"] = Emotion(self.emotion).value
        for key in ("emotion_level", "pitch", "speed", "volume"):
            value = getattr(self, key)
            if value is not None:
                form[key] = value
        return form


def _error_detail(response: requests.Response) -> Optional[str]:
    try:
        data = response.json()
    except ValueError:
        return None
    if isinstance(data, dict) and isinstance(data.get("error"), dict):
        message = data["error"].get("message")
        return str(message) if message is not None else None
    return None


class VoiceTextClient:
    """Thin wrapper around the VoiceText ``/v1/tts`` endpoint."""

    def __init__(self, api_key: str, url: str = DEFAULT_URL) -> None:
        self.api_key = api_key
        self.url = url

    def synthesize(self, options: ApiOptions, timeout: float) -> bytes:
        """
        Synthesize ``options.text`` and return the encoded audio bytes.

        Parameters
        ----------
        options:
            Request payload.  Invalid options raise ``ValueError`` before any
            request is made.
        timeout:
            Passed to ``requests`` as the connect and per-read socket timeout.
            It is not a deadline for the whole transfer; :meth:`asynthesize`
            enforces that.

        Raises
        ------
        VoiceTextError
            If the request could not be completed or the server answered
            with a non-success status.
        """
        form = options.to_form()
        logger.debug(f"VoiceText request: {form}")
        try:
            response = requests.post(self.url, data=form, auth=(self.api_key, ""), timeout=timeout)
        except requests.RequestException as e:
            raise VoiceTextError(f"VoiceText request failed: {e}") from e

        if not response.ok:
            detail = _error_detail(response)
            raise VoiceTextError(
                f"VoiceText API returned HTTP {response.status_code}: {detail or response.reason}",
                status=response.status_code,
                detail=detail,
            )
        logger.debug(f"VoiceText returned {len(response.content)} bytes")
        return response.content

    async def asynthesize(self, options: ApiOptions, timeout: float) -> bytes:
        """Run :meth:`synthesize` in the default executor, giving up after ``timeout`` seconds in total."""
        loop = asyncio.get_running_loop()
        call = loop.run_in_executor(None, functools.partial(self.synthesize, options, timeout))
        try:
            return await asyncio.wait_for(call, timeout)
        except asyncio.TimeoutError:
            # The worker thread finishes on its own; its result is dropped
            raise VoiceTextError(f"VoiceText request did not complete within {timeout}s") from None
