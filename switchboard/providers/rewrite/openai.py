"""
SDK-backed rewrite adapters: OpenAI and Anthropic.
"""

from __future__ import annotations

from typing import Any

from ..base import ResponseShape
from ..chat import AnthropicChatMixin, OpenAIChatMixin
from .base import ChatRewriteProvider


class OpenAIRewriteProvider(OpenAIChatMixin, ChatRewriteProvider):
    """
    OpenAI-based rewrite provider.

    Uses OpenAI's Chat Completions API. The target-model hint is honored
    when it names a GPT/o-series model.

    Requirements:
    - openai package
    """

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4o",
        organization: str | None = None,
        client: Any = None,
        **kwargs: Any,
    ):
        """
        Initialize OpenAI rewrite provider.

        Args:
            api_key: OpenAI API key
            model: Default model to use
            organization: Optional OpenAI organization ID
            client: Pre-built AsyncOpenAI client (lazily created if None)
        """
        super().__init__(model=model, **kwargs)
        self._api_key = api_key
        self._organization = organization
        self._client = client

    @property
    def name(self) -> str:
        return "openai"


class AnthropicRewriteProvider(AnthropicChatMixin, ChatRewriteProvider):
    """
    Anthropic-based rewrite provider.

    Uses Anthropic's Messages API; the reply is an anthropic_messages
    document whose first text block carries the rewrite.

    Requirements:
    - anthropic package
    """

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


__all__ = [
    "AnthropicRewriteProvider",
    "OpenAIRewriteProvider",
]
