"""
AI-Content Detection Providers for Switchboard.

Available Providers:
- GPTZeroDetectProvider: dedicated classifier API
- OpenAIDetectProvider, AnthropicDetectProvider, PerplexityDetectProvider:
  chat models asked for a JSON verdict
"""

from .gptzero import GPTZeroDetectProvider
from .llm import (
    AnthropicDetectProvider,
    ChatDetectProvider,
    OpenAIDetectProvider,
    PerplexityDetectProvider,
)

__all__ = [
    "AnthropicDetectProvider",
    "ChatDetectProvider",
    "GPTZeroDetectProvider",
    "OpenAIDetectProvider",
    "PerplexityDetectProvider",
]
