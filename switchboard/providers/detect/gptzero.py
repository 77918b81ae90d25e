"""
GPTZero AI-content detector.
"""

from __future__ import annotations

import logging

import httpx

from switchboard.orchestration.types import Capability, CapabilityRequest

from ..base import BaseProviderAdapter, HTTPProviderMixin, RawResponse, ResponseShape

logger = logging.getLogger(__name__)


class GPTZeroDetectProvider(HTTPProviderMixin, BaseProviderAdapter):
    """
    GPTZero text classifier.

    Returns the predict/text document; the assembler reads
    documents[0].completely_generated_prob and overall_burstiness.
    """

    base_url = "https://api.gptzero.me/v2"
    truncation_size = 250_000

    def __init__(
        self,
        api_key: str,
        http_client: httpx.AsyncClient | None = None,
        timeout: httpx.Timeout | float | None = None,
    ):
        self._api_key = api_key
        self._init_http(http_client, timeout)

    @property
    def name(self) -> str:
        return "gptzero"

    @property
    def capability(self) -> Capability:
        return Capability.DETECT

    async def invoke(self, request: CapabilityRequest) -> RawResponse:
        logger.debug(f"[{request.correlation_id}] Sending {request.payload_size} chars to GPTZero")
        response = await self._get_http().post(
            f"{self.base_url}/predict/text",
            headers={
                "X-Api-Key": self._api_key,
                "Accept": "application/json",
            },
            json={"document": request.text, "truncation_size": self.truncation_size},
        )
        response.raise_for_status()
        return RawResponse(provider=self.name, shape=ResponseShape.GPTZERO, body=response.json())


__all__ = ["GPTZeroDetectProvider"]
