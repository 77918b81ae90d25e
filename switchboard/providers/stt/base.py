"""
Shared helpers for speech-to-text adapters.
"""

from __future__ import annotations

from switchboard.orchestration.types import Capability

from ..base import BaseProviderAdapter

MIME_TO_EXT: dict[str, str] = {
    "audio/ogg": "ogg",
    "audio/mpeg": "mp3",
    "audio/mp3": "mp3",
    "audio/wav": "wav",
    "audio/x-wav": "wav",
    "audio/webm": "webm",
    "audio/flac": "flac",
    "audio/mp4": "mp4",
    "audio/m4a": "m4a",
    "audio/x-m4a": "m4a",
    "audio/aac": "aac",
}

# Normalizes aliases some clients send
MIME_ALIASES: dict[str, str] = {
    "audio/mp3": "audio/mpeg",
    "audio/m4a": "audio/mp4",
    "audio/x-m4a": "audio/mp4",
    "audio/x-wav": "audio/wav",
}


def base_mime_type(mime_type: str) -> str:
    """Strip parameters ("audio/webm;codecs=opus" -> "audio/webm") and resolve aliases."""
    base = mime_type.split(";", 1)[0].strip().lower()
    return MIME_ALIASES.get(base, base)


def audio_filename(mime_type: str) -> str:
    ext = MIME_TO_EXT.get(mime_type.split(";", 1)[0].strip().lower(), "webm")
    return f"audio.{ext}"


class BaseSTTProvider(BaseProviderAdapter):
    """Base class for transcription adapters."""

    @property
    def capability(self) -> Capability:
        return Capability.TRANSCRIBE


__all__ = [
    "BaseSTTProvider",
    "MIME_TO_EXT",
    "audio_filename",
    "base_mime_type",
]
