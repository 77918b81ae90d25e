"""
Switchboard - route AI requests across interchangeable third-party providers.

Switchboard accepts text or audio for one of three capabilities and
returns a normalized result from whichever provider could serve it:

- **rewrite**: OpenAI, Anthropic, DeepSeek, Perplexity
- **transcribe**: Gladia, Whisper, Deepgram, AssemblyAI (one-shot and streaming)
- **detect**: GPTZero and chat-model assessors

Providers without credentials are skipped, failures fall through to the
next provider, and rewrites that come back shorter than their input get
one escalated retry.

Quick Start:
    >>> from switchboard.app.dependencies import get_normalizer, get_orchestrator
    >>> request = get_normalizer().normalize("rewrite", "Some text", {"presets": ["Concise"]})
    >>> result = await get_orchestrator().execute(request)
    >>> result.provider, result.text
"""

__version__ = "0.1.0"

from switchboard.errors import ChainExhaustedError, ValidationError
from switchboard.orchestration import (
    Capability,
    CapabilityRequest,
    CapabilityResult,
    FallbackOrchestrator,
    RequestNormalizer,
)
from switchboard.providers import ProviderDescriptor, ProviderRegistry

__all__ = [
    "__version__",
    "Capability",
    "CapabilityRequest",
    "CapabilityResult",
    "ChainExhaustedError",
    "FallbackOrchestrator",
    "ProviderDescriptor",
    "ProviderRegistry",
    "RequestNormalizer",
    "ValidationError",
]
