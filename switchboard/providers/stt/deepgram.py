"""
Deepgram STT Provider for Switchboard.

Uses Deepgram's pre-recorded API (deepgram-sdk v3) with language
detection and smart formatting.
"""

from __future__ import annotations

import logging
from typing import Any

from switchboard.orchestration.types import CapabilityRequest

from ..base import RawResponse, ResponseShape, sdk_dump
from .base import BaseSTTProvider, base_mime_type

logger = logging.getLogger(__name__)


class DeepgramSTTProvider(BaseSTTProvider):
    """
    Deepgram Speech-to-Text provider.

    Requirements:
    - deepgram-sdk package (v3)
    - the Deepgram API key
    """

    def __init__(
        self,
        api_key: str,
        model: str = "nova-2",
        smart_format: bool = True,
        punctuate: bool = True,
        client: Any = None,
    ):
        """
        Initialize Deepgram STT provider.

        Args:
            api_key: Deepgram API key
            model: Model to use (nova-2, nova, base, enhanced)
            smart_format: Enable smart formatting
            punctuate: Enable punctuation
            client: Pre-built DeepgramClient (lazily created if None)
        """
        self._api_key = api_key
        self._model = model
        self._smart_format = smart_format
        self._punctuate = punctuate
        self._client = client

    @property
    def name(self) -> str:
        return "deepgram"

    def _get_client(self):
        """Lazy initialization of Deepgram client."""
        if self._client is None:
            from deepgram import DeepgramClient

            self._client = DeepgramClient(self._api_key)
        return self._client

    def _build_options(self, language: str | None):
        from deepgram import PrerecordedOptions

        options = PrerecordedOptions(
            model=self._model,
            smart_format=self._smart_format,
            punctuate=self._punctuate,
            detect_language=language is None,
        )
        if language:
            options.language = language
        return options

    async def invoke(self, request: CapabilityRequest) -> RawResponse:
        audio = request.audio
        source = {
            "buffer": audio,
            "mimetype": base_mime_type(request.options.mime_type),
        }
        options = self._build_options(request.options.language)

        logger.debug(
            f"[{request.correlation_id}] Sending {len(audio)} bytes to Deepgram "
            f"({request.options.mime_type})"
        )
        response = await self._get_client().listen.asyncrest.v("1").transcribe_file(source, options)
        return RawResponse(provider=self.name, shape=ResponseShape.DEEPGRAM, body=sdk_dump(response))


__all__ = ["DeepgramSTTProvider"]
