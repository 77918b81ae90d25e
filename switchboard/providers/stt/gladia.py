"""
Gladia STT Provider for Switchboard.

Gladia v2 pre-recorded flow over httpx: upload the audio, submit a
transcription job, poll its result URL until done.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import httpx

from switchboard.errors import ProviderError, TransientProviderError
from switchboard.orchestration.types import CapabilityRequest

from ..base import HTTPProviderMixin, RawResponse, ResponseShape
from .base import BaseSTTProvider, audio_filename, base_mime_type

logger = logging.getLogger(__name__)


class GladiaSTTProvider(HTTPProviderMixin, BaseSTTProvider):
    """
    Gladia Speech-to-Text provider.

    The polls are bounded by max_polls; the orchestrator's per-call
    timeout bounds the whole flow regardless.
    """

    base_url = "https://api.gladia.io/v2"

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
        return "gladia"

    @property
    def _headers(self) -> dict[str, str]:
        return {"x-gladia-key": self._api_key}

    async def _upload(self, audio: bytes, mime_type: str) -> str:
        response = await self._get_http().post(
            f"{self.base_url}/upload",
            headers=self._headers,
            files={"audio": (audio_filename(mime_type), audio, base_mime_type(mime_type))},
        )
        response.raise_for_status()
        return response.json()["audio_url"]

    async def _submit(self, audio_url: str, language: str | None) -> str:
        payload: dict[str, Any] = {"audio_url": audio_url, "diarization": False}
        if language:
            payload["language_config"] = {"languages": [language], "code_switching": False}
        response = await self._get_http().post(
            f"{self.base_url}/pre-recorded",
            headers=self._headers,
            json=payload,
        )
        response.raise_for_status()
        body = response.json()
        return body.get("result_url") or f"{self.base_url}/pre-recorded/{body['id']}"

    async def _poll(self, result_url: str) -> dict[str, Any]:
        for _ in range(self._max_polls):
            response = await self._get_http().get(result_url, headers=self._headers)
            response.raise_for_status()
            body = response.json()
            status = body.get("status")
            if status == "done":
                return body
            if status == "error":
                raise ProviderError(self.name, f"transcription failed: {body.get('error_code', 'unknown error')}")
            await asyncio.sleep(self._poll_interval)
        raise TransientProviderError(self.name, f"transcription not done after {self._max_polls} polls")

    async def invoke(self, request: CapabilityRequest) -> RawResponse:
        audio = request.audio
        logger.debug(f"[{request.correlation_id}] Uploading {len(audio)} bytes to Gladia")
        audio_url = await self._upload(audio, request.options.mime_type)
        result_url = await self._submit(audio_url, request.options.language)
        body = await self._poll(result_url)
        return RawResponse(provider=self.name, shape=ResponseShape.GLADIA, body=body)


__all__ = ["GladiaSTTProvider"]
