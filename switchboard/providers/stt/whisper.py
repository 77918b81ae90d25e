"""
Whisper STT Provider for Switchboard.

Uses OpenAI's Whisper API for speech transcription.
"""

from __future__ import annotations

import io
import logging
from typing import Any

from switchboard.orchestration.types import CapabilityRequest

from ..base import RawResponse, ResponseShape, sdk_dump
from .base import BaseSTTProvider, audio_filename

logger = logging.getLogger(__name__)


class WhisperSTTProvider(BaseSTTProvider):
    """
    OpenAI Whisper Speech-to-Text provider.

    Requests verbose_json so the reply carries the detected language.

    Requirements:
    - openai package (v1+)
    - the OpenAI API key
    """

    def __init__(
        self,
        api_key: str,
        model: str = "whisper-1",
        temperature: float = 0.0,
        client: Any = None,
    ):
        """
        Initialize Whisper STT provider.

        Args:
            api_key: OpenAI API key
            model: Model to use (whisper-1)
            temperature: Sampling temperature (0.0 for deterministic)
            client: Pre-built AsyncOpenAI client (lazily created if None)
        """
        self._api_key = api_key
        self._model = model
        self._temperature = temperature
        self._client = client

    @property
    def name(self) -> str:
        return "whisper"

    def _get_client(self):
        """Lazy initialization of OpenAI async client."""
        if self._client is None:
            from openai import AsyncOpenAI

            self._client = AsyncOpenAI(api_key=self._api_key, max_retries=0)
        return self._client

    async def invoke(self, request: CapabilityRequest) -> RawResponse:
        audio = request.audio
        mime_type = request.options.mime_type

        audio_file = io.BytesIO(audio)
        audio_file.name = audio_filename(mime_type)

        params: dict[str, Any] = {
            "model": self._model,
            "file": audio_file,
            "response_format": "verbose_json",
            "temperature": self._temperature,
        }
        if request.options.language:
            params["language"] = request.options.language

        logger.debug(f"[{request.correlation_id}] Sending {len(audio)} bytes to Whisper ({mime_type})")
        response = await self._get_client().audio.transcriptions.create(**params)
        return RawResponse(provider=self.name, shape=ResponseShape.WHISPER, body=sdk_dump(response))


__all__ = ["WhisperSTTProvider"]
