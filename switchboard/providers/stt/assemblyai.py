"""
AssemblyAI STT Provider for Switchboard.

Upload, submit, then poll the transcript until it completes.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import httpx

from switchboard.errors import ProviderError, TransientProviderError
from switchboard.orchestration.types import CapabilityRequest

from ..base import HTTPProviderMixin, RawResponse, ResponseShape
from .base import BaseSTTProvider

logger = logging.getLogger(__name__)


class AssemblyAISTTProvider(HTTPProviderMixin, BaseSTTProvider):
    """
    AssemblyAI Speech-to-Text provider.

    Polling is bounded by max_polls; an unfinished transcript after the
    last poll is a transient failure.
    """

    base_url = "https://api.assemblyai.com/v2"

    def __init__(
        self,
        api_key: str,
        poll_interval: float = 1.0,
        max_polls: int = 60,
        http_client: httpx.AsyncClient | None = None,
        timeout: httpx.Timeout | float | None = None,
    ):
        self._api_key = api_key
        self._poll_interval = poll_interval
        self._max_polls = max_polls
        self._init_http(http_client, timeout)

    @property
    def name(self) -> str:
        return "assemblyai"

    async def _upload(self, audio: bytes) -> str:
        response = await self._get_http().post(
            f"{self.base_url}/upload",
            headers={"authorization": self._api_key, "content-type": "application/octet-stream"},
            content=audio,
        )
        response.raise_for_status()
        return response.json()["upload_url"]

    async def _submit(self, audio_url: str, language: str | None) -> str:
        payload: dict[str, Any] = {"audio_url": audio_url, "punctuate": True, "format_text": True}
        if language:
            payload["language_code"] = language
        else:
            payload["language_detection"] = True
        response = await self._get_http().post(
            f"{self.base_url}/transcript",
            headers={"authorization": self._api_key},
            json=payload,
        )
        response.raise_for_status()
        return response.json()["id"]

    async def _poll(self, transcript_id: str) -> dict[str, Any]:
        url = f"{self.base_url}/transcript/{transcript_id}"
        for _ in range(self._max_polls):
            response = await self._get_http().get(url, headers={"authorization": self._api_key})
            response.raise_for_status()
            body = response.json()
            status = body.get("status")
            if status == "completed":
                return body
            if status == "error":
                raise ProviderError(self.name, f"transcription failed: {body.get('error') or 'unknown error'}")
            await asyncio.sleep(self._poll_interval)
        raise TransientProviderError(self.name, f"transcript not completed after {self._max_polls} polls")

    async def invoke(self, request: CapabilityRequest) -> RawResponse:
        audio = request.audio
        logger.debug(f"[{request.correlation_id}] Uploading {len(audio)} bytes to AssemblyAI")
        audio_url = await self._upload(audio)
        transcript_id = await self._submit(audio_url, request.options.language)
        body = await self._poll(transcript_id)
        return RawResponse(provider=self.name, shape=ResponseShape.ASSEMBLYAI, body=body)


__all__ = ["AssemblyAISTTProvider"]
