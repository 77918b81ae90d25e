"""
Rewrite adapters for OpenAI-compatible chat APIs (DeepSeek, Perplexity).
"""

from __future__ import annotations

from typing import Any

import httpx

from ..chat import CompatibleChatMixin
from .base import ChatRewriteProvider


class DeepSeekRewriteProvider(CompatibleChatMixin, ChatRewriteProvider):
    """DeepSeek chat completions over httpx."""

    base_url = "https://api.deepseek.com"
    model_prefixes = ("deepseek",)

    def __init__(
        self,
        api_key: str,
        model: str = "deepseek-chat",
        http_client: httpx.AsyncClient | None = None,
        timeout: httpx.Timeout | float | None = None,
        **kwargs: Any,
    ):
        super().__init__(model=model, **kwargs)
        self._api_key = api_key
        self._init_http(http_client, timeout)

    @property
    def name(self) -> str:
        return "deepseek"


class PerplexityRewriteProvider(CompatibleChatMixin, ChatRewriteProvider):
    """Perplexity chat completions over httpx."""

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
    "DeepSeekRewriteProvider",
    "PerplexityRewriteProvider",
]
