"""
Rewrite adapter base.

A rewrite adapter turns a request into chat messages (see prompts) and
sends them through one of the chat transports in providers.chat.
"""

from __future__ import annotations

import logging
from typing import Any

from switchboard.orchestration.types import Capability, CapabilityRequest

from ..base import BaseProviderAdapter, RawResponse, ResponseShape
from ..chat import ChatConfig, Message
from .prompts import build_rewrite_messages

logger = logging.getLogger(__name__)


class ChatRewriteProvider(BaseProviderAdapter):
    """
    Base class for chat-model rewrite adapters.

    Subclasses combine this with a chat transport mixin that supplies
    _chat() and resolve_model().
    """

    shape: ResponseShape = ResponseShape.OPENAI_CHAT

    def __init__(self, model: str, temperature: float = 0.7, max_tokens: int = 4000):
        self._model = model
        self._temperature = temperature
        self._max_tokens = max_tokens

    @property
    def capability(self) -> Capability:
        return Capability.REWRITE

    @property
    def default_model(self) -> str:
        return self._model

    async def _chat(self, messages: list[Message], config: ChatConfig) -> dict[str, Any]:
        raise NotImplementedError

    async def invoke(self, request: CapabilityRequest) -> RawResponse:
        config = ChatConfig(
            model=self.resolve_model(request.options.model),
            temperature=self._temperature,
            max_tokens=self._max_tokens,
        )
        logger.debug(
            f"[{request.correlation_id}] Rewriting {request.payload_size} chars "
            f"with {self.name} ({config.model})"
        )
        body = await self._chat(build_rewrite_messages(request), config)
        return RawResponse(provider=self.name, shape=self.shape, body=body)
