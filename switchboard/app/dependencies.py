"""
Dependency Injection for Switchboard.

Provides the settings object and the singletons built from it: the
provider registry, the request normalizer and the fallback
orchestrator. The registry is built once at startup and sealed.
"""
from __future__ import annotations

import logging
import os
from collections.abc import Callable
from functools import lru_cache
from typing import Optional

from switchboard.config.schemas import AppSettings
from switchboard.orchestration import (
    Capability,
    FallbackOrchestrator,
    RequestNormalizer,
)
from switchboard.providers import (
    AnthropicDetectProvider,
    AnthropicRewriteProvider,
    AssemblyAISTTProvider,
    DeepgramSTTProvider,
    DeepSeekRewriteProvider,
    GladiaSTTProvider,
    GPTZeroDetectProvider,
    OpenAIDetectProvider,
    OpenAIRewriteProvider,
    PerplexityDetectProvider,
    PerplexityRewriteProvider,
    ProviderDescriptor,
    ProviderRegistry,
    WhisperSTTProvider,
)

logger = logging.getLogger(__name__)

_ENV_PREFIX = "SWITCHBOARD_"


def _env(name: str, default: Optional[str] = None) -> Optional[str]:
    return os.getenv(f"{_ENV_PREFIX}{name}", default)


def _env_bool(name: str, default: bool) -> bool:
    value = _env(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


@lru_cache()
def get_settings() -> AppSettings:
    """
    Get application settings from environment.

    Uses lru_cache for singleton pattern. Unset variables fall back to
    the model defaults.
    """
    values: dict[str, object] = {
        # Service
        "service_name": _env("SERVICE_NAME"),
        "environment": _env("ENVIRONMENT"),
        "debug": _env_bool("DEBUG", False),
        "log_level": _env("LOG_LEVEL"),
        "cors_origins": _env("CORS_ORIGINS"),
        # Provider API keys
        "openai_api_key": _env("OPENAI_API_KEY"),
        "anthropic_api_key": _env("ANTHROPIC_API_KEY"),
        "perplexity_api_key": _env("PERPLEXITY_API_KEY"),
        "deepseek_api_key": _env("DEEPSEEK_API_KEY"),
        "gladia_api_key": _env("GLADIA_API_KEY"),
        "deepgram_api_key": _env("DEEPGRAM_API_KEY"),
        "assemblyai_api_key": _env("ASSEMBLYAI_API_KEY"),
        "gptzero_api_key": _env("GPTZERO_API_KEY"),
        # Chains (comma-separated provider ids)
        "rewrite_chain": _env("REWRITE_CHAIN"),
        "transcribe_chain": _env("TRANSCRIBE_CHAIN"),
        "detect_chain": _env("DETECT_CHAIN"),
        # Orchestration and limits
        "provider_timeout_seconds": _env("PROVIDER_TIMEOUT_SECONDS"),
        "expose_attempt_trace": _env_bool("EXPOSE_ATTEMPT_TRACE", True),
        "min_detect_chars": _env("MIN_DETECT_CHARS"),
        "max_text_chars": _env("MAX_TEXT_CHARS"),
        "max_audio_bytes": _env("MAX_AUDIO_BYTES"),
        # Streaming sessions
        "batch_threshold": _env("BATCH_THRESHOLD"),
        "debounce_seconds": _env("DEBOUNCE_SECONDS"),
        "silence_seconds": _env("SILENCE_SECONDS"),
    }
    return AppSettings(**{k: v for k, v in values.items() if v is not None})


# =============================================================================
# Registry
# =============================================================================


def _key_check(settings: AppSettings, key: str) -> Callable[[], bool]:
    return lambda: settings.has_key(key)


def build_registry(settings: AppSettings) -> ProviderRegistry:
    """
    Register every known provider and seal the registry.

    Providers without credentials are still registered so they show up
    in chains and status; the orchestrator skips them as not-ready.
    """
    registry = ProviderRegistry(default_chains=settings.default_chains())
    key = settings.api_key
    rewrite, transcribe, detect = Capability.REWRITE, Capability.TRANSCRIBE, Capability.DETECT

    registry.register(
        ProviderDescriptor(
            "openai",
            frozenset({rewrite, detect}),
            priority=90,
            aliases=frozenset({"gpt-4o", "gpt", "chatgpt"}),
            credential_check=_key_check(settings, "openai"),
        ),
        OpenAIRewriteProvider(api_key=key("openai")),
        OpenAIDetectProvider(api_key=key("openai")),
    )
    registry.register(
        ProviderDescriptor(
            "anthropic",
            frozenset({rewrite, detect}),
            priority=80,
            aliases=frozenset({"claude"}),
            credential_check=_key_check(settings, "anthropic"),
        ),
        AnthropicRewriteProvider(api_key=key("anthropic")),
        AnthropicDetectProvider(api_key=key("anthropic")),
    )
    registry.register(
        ProviderDescriptor(
            "deepseek",
            frozenset({rewrite}),
            priority=40,
            credential_check=_key_check(settings, "deepseek"),
        ),
        DeepSeekRewriteProvider(api_key=key("deepseek")),
    )
    registry.register(
        ProviderDescriptor(
            "perplexity",
            frozenset({rewrite, detect}),
            priority=20,
            credential_check=_key_check(settings, "perplexity"),
        ),
        PerplexityRewriteProvider(api_key=key("perplexity")),
        PerplexityDetectProvider(api_key=key("perplexity")),
    )
    registry.register(
        ProviderDescriptor(
            "gladia",
            frozenset({transcribe}),
            priority=70,
            credential_check=_key_check(settings, "gladia"),
        ),
        GladiaSTTProvider(api_key=key("gladia")),
    )
    registry.register(
        ProviderDescriptor(
            "whisper",
            frozenset({transcribe}),
            priority=60,
            aliases=frozenset({"openai whisper", "openai-whisper"}),
            credential_check=_key_check(settings, "openai"),
        ),
        WhisperSTTProvider(api_key=key("openai")),
    )
    registry.register(
        ProviderDescriptor(
            "deepgram",
            frozenset({transcribe}),
            priority=50,
            credential_check=_key_check(settings, "deepgram"),
        ),
        DeepgramSTTProvider(api_key=key("deepgram")),
    )
    registry.register(
        ProviderDescriptor(
            "assemblyai",
            frozenset({transcribe}),
            priority=30,
            aliases=frozenset({"assembly", "assembly ai"}),
            credential_check=_key_check(settings, "assemblyai"),
        ),
        AssemblyAISTTProvider(api_key=key("assemblyai")),
    )
    registry.register(
        ProviderDescriptor(
            "gptzero",
            frozenset({detect}),
            priority=100,
            credential_check=_key_check(settings, "gptzero"),
        ),
        GPTZeroDetectProvider(api_key=key("gptzero")),
    )

    registry.seal()
    ready = {cap: registry.ready_providers(cap) for cap in Capability}
    logger.info(
        "Provider registry ready: "
        + ", ".join(f"{cap.value}={names or 'none'}" for cap, names in ready.items())
    )
    return registry


# Global instances (initialized on first access)
_registry: Optional[ProviderRegistry] = None
_orchestrator: Optional[FallbackOrchestrator] = None


def get_registry() -> ProviderRegistry:
    """Get the provider registry, building it on first call."""
    global _registry
    if _registry is None:
        _registry = build_registry(get_settings())
    return _registry


def get_normalizer() -> RequestNormalizer:
    settings = get_settings()
    return RequestNormalizer(
        min_detect_chars=settings.min_detect_chars,
        max_text_chars=settings.max_text_chars,
        max_audio_bytes=settings.max_audio_bytes,
    )


def get_orchestrator() -> FallbackOrchestrator:
    """Get the shared fallback orchestrator."""
    global _orchestrator
    if _orchestrator is None:
        _orchestrator = FallbackOrchestrator(
            get_registry(),
            provider_timeout=get_settings().provider_timeout_seconds,
        )
    return _orchestrator


async def initialize_services() -> None:
    """Build the registry and orchestrator at startup."""
    get_orchestrator()


async def shutdown_services() -> None:
    """Close HTTP clients held by adapters and drop singletons."""
    global _registry, _orchestrator
    if _registry is not None:
        for descriptor in _registry:
            for capability in descriptor.capabilities:
                adapter = _registry.adapter_for(descriptor.name, capability)
                aclose = getattr(adapter, "aclose", None)
                if aclose is not None:
                    await aclose()
    _registry = None
    _orchestrator = None


def reset_dependencies() -> None:
    """Clear cached settings and singletons (tests)."""
    global _registry, _orchestrator
    get_settings.cache_clear()
    _registry = None
    _orchestrator = None
