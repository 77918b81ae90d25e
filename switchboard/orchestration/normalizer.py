"""
Request Normalizer.

Validates raw caller input and builds the canonical CapabilityRequest.
Pure: no I/O, no provider knowledge.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import fields
from typing import Any

from switchboard.errors import ValidationError

from .types import Capability, CapabilityRequest, RequestOptions

logger = logging.getLogger(__name__)


DEFAULT_MIN_DETECT_CHARS = 50
DEFAULT_MAX_TEXT_CHARS = 200_000
DEFAULT_MAX_AUDIO_BYTES = 20 * 1024 * 1024

# escalation is reserved for the retry controller
_OPTION_KEYS = frozenset(f.name for f in fields(RequestOptions)) - {"escalation"}

_OPTION_ALIASES = {
    "preferredProvider": "preferred_provider",
    "provider": "preferred_provider",
    "engine": "preferred_provider",
    "styleText": "style_text",
    "contentText": "content_text",
    "mimeType": "mime_type",
}


def parse_capability(value: Capability | str) -> Capability:
    if isinstance(value, Capability):
        return value
    try:
        return Capability(str(value).strip().lower())
    except ValueError:
        raise ValidationError(f"Unknown capability '{value}'", field="capability") from None


class RequestNormalizer:
    """
    Builds CapabilityRequests and enforces input limits.

    Limits:
        rewrite: 1..max_text_chars characters after stripping
        detect: at least min_detect_chars characters after stripping
        transcribe: 1..max_audio_bytes bytes
    """

    def __init__(
        self,
        min_detect_chars: int = DEFAULT_MIN_DETECT_CHARS,
        max_text_chars: int = DEFAULT_MAX_TEXT_CHARS,
        max_audio_bytes: int = DEFAULT_MAX_AUDIO_BYTES,
    ):
        self.min_detect_chars = min_detect_chars
        self.max_text_chars = max_text_chars
        self.max_audio_bytes = max_audio_bytes

    def normalize(
        self,
        capability: Capability | str,
        raw_input: Any,
        options: Mapping[str, Any] | RequestOptions | None = None,
        correlation_id: str | None = None,
    ) -> CapabilityRequest:
        """
        Validate input and build a request.

        Raises:
            ValidationError: On unknown capability, bad payload or bad options
        """
        capability = parse_capability(capability)

        if capability is Capability.TRANSCRIBE:
            payload: str | bytes = self._audio_payload(raw_input)
        else:
            payload = self._text_payload(capability, raw_input)

        request_options = self._build_options(options)
        if correlation_id:
            return CapabilityRequest(capability, payload, request_options, correlation_id)
        return CapabilityRequest(capability, payload, request_options)

    # ==================== Payloads ====================

    def _text_payload(self, capability: Capability, raw_input: Any) -> str:
        if not isinstance(raw_input, str):
            raise ValidationError(f"{capability.value} requires text input", field="text")

        text = raw_input.strip()
        if not text:
            raise ValidationError("Text must not be empty", field="text")
        if len(text) > self.max_text_chars:
            raise ValidationError(
                f"Text exceeds {self.max_text_chars} characters", field="text"
            )
        if capability is Capability.DETECT and len(text) < self.min_detect_chars:
            raise ValidationError(
                f"Text must be at least {self.min_detect_chars} characters for AI detection",
                field="text",
            )
        return text

    def _audio_payload(self, raw_input: Any) -> bytes:
        if not isinstance(raw_input, (bytes, bytearray, memoryview)):
            raise ValidationError("transcribe requires binary audio input", field="audio")

        audio = bytes(raw_input)
        if not audio:
            raise ValidationError("Audio must not be empty", field="audio")
        if len(audio) > self.max_audio_bytes:
            raise ValidationError(
                f"Audio exceeds {self.max_audio_bytes} bytes", field="audio"
            )
        return audio

    # ==================== Options ====================

    def _build_options(self, options: Mapping[str, Any] | RequestOptions | None) -> RequestOptions:
        if options is None:
            return RequestOptions()
        if isinstance(options, RequestOptions):
            return options
        if not isinstance(options, Mapping):
            raise ValidationError("Options must be a mapping", field="options")

        values: dict[str, Any] = {}
        for key, value in options.items():
            name = _OPTION_ALIASES.get(key, key)
            if name not in _OPTION_KEYS:
                raise ValidationError(f"Unknown option '{key}'", field=key)
            if value is None:
                continue
            if name == "presets":
                values[name] = self._presets(value)
                continue
            if not isinstance(value, str):
                raise ValidationError(f"Option '{key}' must be a string", field=key)
            value = value.strip()
            if value:
                values[name] = value

        return RequestOptions(**values)

    @staticmethod
    def _presets(value: Any) -> tuple[str, ...]:
        if isinstance(value, str):
            value = [value]
        if not isinstance(value, (list, tuple)):
            raise ValidationError("presets must be a list of names", field="presets")
        presets = []
        for item in value:
            if not isinstance(item, str):
                raise ValidationError("presets must be a list of names", field="presets")
            if item.strip():
                presets.append(item.strip())
        return tuple(presets)


__all__ = [
    "DEFAULT_MAX_AUDIO_BYTES",
    "DEFAULT_MAX_TEXT_CHARS",
    "DEFAULT_MIN_DETECT_CHARS",
    "RequestNormalizer",
    "parse_capability",
]
