"""
Fallback Chain Example

This example runs a rewrite through a provider chain without any
network access:
1. Register custom adapters in a ProviderRegistry
2. Normalize a request
3. Execute it and inspect the attempt trace

The first provider has no credentials, the second summarizes (and is
retried once with a length requirement), so the trace shows a skip, a
quality failure and an accepted retry.

Run: python -m examples.01-fallback-chain.main
"""

import asyncio

from switchboard import (
    Capability,
    ChainExhaustedError,
    FallbackOrchestrator,
    ProviderDescriptor,
    ProviderRegistry,
    RequestNormalizer,
)
from switchboard.providers import RawResponse, ResponseShape
from switchboard.utils.text import count_words

# =============================================================================
# Custom Adapters
# =============================================================================


class EchoRewriter:
    """Rewrites by repeating the input, optionally truncated."""

    def __init__(self, name: str, keep_words: int | None = None):
        self._name = name
        self._keep_words = keep_words

    @property
    def name(self) -> str:
        return self._name

    @property
    def capability(self) -> Capability:
        return Capability.REWRITE

    async def invoke(self, request) -> RawResponse:
        words = request.text.split()
        # A retry carries an escalation; honor it by returning everything
        if self._keep_words is not None and not request.options.escalation:
            words = words[: self._keep_words]
        reply = {"choices": [{"message": {"content": " ".join(words)}}]}
        return RawResponse(self._name, ResponseShape.OPENAI_CHAT, reply)


def build_registry() -> ProviderRegistry:
    registry = ProviderRegistry(default_chains={Capability.REWRITE: ["locked", "terse", "steady"]})
    registry.register(
        ProviderDescriptor("locked", frozenset({Capability.REWRITE}), credential_check=lambda: False),
        EchoRewriter("locked"),
    )
    registry.register(
        ProviderDescriptor("terse", frozenset({Capability.REWRITE})),
        EchoRewriter("terse", keep_words=3),
    )
    registry.register(
        ProviderDescriptor("steady", frozenset({Capability.REWRITE})),
        EchoRewriter("steady"),
    )
    registry.seal()
    return registry


# =============================================================================
# Main
# =============================================================================


async def main():
    orchestrator = FallbackOrchestrator(build_registry(), provider_timeout=5.0)
    normalizer = RequestNormalizer()

    text = "Providers fail in ordinary ways and a good router simply moves on to the next one."
    request = normalizer.normalize(Capability.REWRITE, text, {"presets": ["Concise"]})

    try:
        result = await orchestrator.execute(request)
    except ChainExhaustedError as e:
        print(f"No provider succeeded: {e}")
        return

    print(f"Provider: {result.provider} (retried={result.retried}, quality_passed={result.quality_passed})")
    print(f"Words: {count_words(text)} -> {count_words(result.text)}")
    print("Trace:")
    for attempt in result.attempts:
        print(f"  {attempt}{' [retry]' if attempt.is_retry else ''}")


if __name__ == "__main__":
    asyncio.run(main())
