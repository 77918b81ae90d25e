"""
Chat-model AI-content detectors.

The model is asked for a JSON verdict; the assembler parses it leniently
and derives the labels from the probability.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from switchboard.orchestration.types import Capability, CapabilityRequest

from ..base import BaseProviderAdapter, RawResponse, ResponseShape
from ..chat import (
    AnthropicChatMixin,
    ChatConfig,
    CompatibleChatMixin,
    Message,
    OpenAIChatMixin,
)

logger = logging.getLogger(__name__)


DETECTION_PROMPT = """Assess whether the following text was written by an AI model or by a human.

Consider sentence-length variance (burstiness), predictability of word choice, \
stock transitions, hedging patterns and the presence of a distinctive personal voice.

Respond with a single JSON object and nothing else:
{
  "probability": <number between 0 and 1, the likelihood the text is AI-generated>,
  "isAIGenerated": <true or false>,
  "burstiness": <number between 0 and 1, variation in sentence structure>,
  "assessment": "<two or three sentences explaining the verdict>"
}"""


def build_detection_messages(request: CapabilityRequest) -> list[Message]:
    return [
        Message.system("You are an expert in computational stylometry. You answer only in JSON."),
        Message.user(f'{DETECTION_PROMPT}\n\nText:\n"""\n{request.text}\n"""'),
    ]


class ChatDetectProvider(BaseProviderAdapter):
    """Base class for chat-model detectors."""

    shape: ResponseShape = ResponseShape.OPENAI_CHAT

    def __init__(self, model: str, max_tokens: int = 600):
        self._model = model
        self._max_tokens = max_tokens

    @property
    def capability(self) -> Capability:
        return Capability.DETECT

    async def _chat(self, messages: list[Message], config: ChatConfig) -> dict[str, Any]:
        raise NotImplementedError

    async def invoke(self, request: CapabilityRequest) -> RawResponse:
        config = ChatConfig(
            model=self.resolve_model(request.options.model),
            temperature=0.0,
            max_tokens=self._max_tokens,
            json_mode=True,
        )
        logger.debug(f"[{request.correlation_id}] Assessing {request.payload_size} chars with {self.name}")
        body = await self._chat(build_detection_messages(request), config)
        return RawResponse(provider=self.name, shape=self.shape, body=body)


class OpenAIDetectProvider(OpenAIChatMixin, ChatDetectProvider):
    """GPT models as an AI-content assessor."""

    def __init__(self, api_key: str, model: str = "gpt-4o", client: Any = None, **kwargs: Any):
        super().__init__(model=model, **kwargs)
        self._api_key = api_key
        self._client = client

    @property
    def name(self) -> str:
        return "openai"


class AnthropicDetectProvider(AnthropicChatMixin, ChatDetectProvider):
    """Claude models as an AI-content assessor."""

    shape = ResponseShape.ANTHROPIC_MESSAGES

    def __init__(
        self,
        api_key: str,
        model: str = "claude-sonnet-4-20250514",
        client: Any = None,
        **kwargs: Any,
    ):
        super().__init__(model=model, **kwargs)
        self._api_key = api_key
        self._client = client

    @property
    def name(self) -> str:
        return "anthropic"


class PerplexityDetectProvider(CompatibleChatMixin, ChatDetectProvider):
    """Perplexity chat models as an AI-content assessor."""

    base_url = "https://api.perplexity.ai"
    model_prefixes = ("sonar", "llama-3.1-sonar")

    def __init__(
        self,
        api_key: str,
        model: str = "sonar",
        http_client: httpx.AsyncClient | None = None,
        timeout: httpx.Timeout | float | None = None,
        **kwargs: Any,
    ):
        super().__init__(model=model, **kwargs)
        self._api_key = api_key
        self._init_http(http_client, timeout)

    @property
    def name(self) -> str:
        return "perplexity"


__all__ = [
    "AnthropicDetectProvider",
    "ChatDetectProvider",
    "DETECTION_PROMPT",
    "OpenAIDetectProvider",
    "PerplexityDetectProvider",
    "build_detection_messages",
]
