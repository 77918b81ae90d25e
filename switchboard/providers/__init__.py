"""
Switchboard Providers

Interchangeable third-party services grouped by capability.

Provider Types:
- Rewrite: OpenAIRewriteProvider, AnthropicRewriteProvider,
  DeepSeekRewriteProvider, PerplexityRewriteProvider
- Transcribe: WhisperSTTProvider, DeepgramSTTProvider, GladiaSTTProvider,
  AssemblyAISTTProvider
- Detect: GPTZeroDetectProvider, OpenAIDetectProvider,
  AnthropicDetectProvider, PerplexityDetectProvider

Features:
- ProviderRegistry: static capability map with credential readiness
- One adapter per (provider, capability); adapters return raw replies
"""

from .base import (
    BaseProviderAdapter,
    HTTPProviderMixin,
    ProviderAdapter,
    RawResponse,
    ResponseShape,
)
from .chat import ChatConfig, Message, MessageRole

# Detect Providers
from .detect import (
    AnthropicDetectProvider,
    GPTZeroDetectProvider,
    OpenAIDetectProvider,
    PerplexityDetectProvider,
)
from .registry import ProviderDescriptor, ProviderRegistry

# Rewrite Providers
from .rewrite import (
    AnthropicRewriteProvider,
    DeepSeekRewriteProvider,
    OpenAIRewriteProvider,
    PerplexityRewriteProvider,
)

# STT Providers
from .stt import (
    AssemblyAISTTProvider,
    DeepgramSTTProvider,
    GladiaSTTProvider,
    WhisperSTTProvider,
)

__all__ = [
    # Contract
    "BaseProviderAdapter",
    "HTTPProviderMixin",
    "ProviderAdapter",
    "RawResponse",
    "ResponseShape",
    "ChatConfig",
    "Message",
    "MessageRole",
    # Registry
    "ProviderDescriptor",
    "ProviderRegistry",
    # Rewrite
    "AnthropicRewriteProvider",
    "DeepSeekRewriteProvider",
    "OpenAIRewriteProvider",
    "PerplexityRewriteProvider",
    # STT
    "AssemblyAISTTProvider",
    "DeepgramSTTProvider",
    "GladiaSTTProvider",
    "WhisperSTTProvider",
    # Detect
    "AnthropicDetectProvider",
    "GPTZeroDetectProvider",
    "OpenAIDetectProvider",
    "PerplexityDetectProvider",
]
