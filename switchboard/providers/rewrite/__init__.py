"""
Rewrite Providers for Switchboard.

Available Providers:
- OpenAIRewriteProvider: GPT models via the openai SDK
- AnthropicRewriteProvider: Claude models via the anthropic SDK
- DeepSeekRewriteProvider: DeepSeek chat API over httpx
- PerplexityRewriteProvider: Perplexity chat API over httpx
"""

from .base import ChatRewriteProvider
from .compatible import DeepSeekRewriteProvider, PerplexityRewriteProvider
from .openai import AnthropicRewriteProvider, OpenAIRewriteProvider
from .prompts import PRESET_TEXT, build_rewrite_messages, expand_presets

__all__ = [
    "AnthropicRewriteProvider",
    "ChatRewriteProvider",
    "DeepSeekRewriteProvider",
    "OpenAIRewriteProvider",
    "PRESET_TEXT",
    "PerplexityRewriteProvider",
    "build_rewrite_messages",
    "expand_presets",
]
