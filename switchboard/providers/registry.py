"""
Provider Registry for Switchboard.

Static capability map built once at startup: which provider ids support
which capability, in what default order, and whether each one has the
credentials it needs. Read-only after sealing; freely shared.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from switchboard.errors import ValidationError
from switchboard.orchestration.types import Capability

if TYPE_CHECKING:
    from .base import ProviderAdapter

logger = logging.getLogger(__name__)


def _always_ready() -> bool:
    return True


@dataclass(frozen=True)
class ProviderDescriptor:
    """
    Immutable description of one provider.

    Attributes:
        name: Provider id (e.g. "openai", "gladia")
        capabilities: Capabilities this provider can serve
        priority: Used for ordering when no explicit chain is configured (higher = preferred)
        aliases: Alternate names accepted from callers (e.g. "OpenAI Whisper")
        credential_check: Returns True when credentials are present
    """

    name: str
    capabilities: frozenset[Capability]
    priority: int = 0
    aliases: frozenset[str] = frozenset()
    credential_check: Callable[[], bool] = field(default=_always_ready, compare=False, repr=False)

    def supports(self, capability: Capability) -> bool:
        return capability in self.capabilities

    def is_ready(self) -> bool:
        """Credential presence, not validity."""
        return bool(self.credential_check())

    def matches(self, name: str) -> bool:
        key = name.strip().lower()
        return key == self.name.lower() or key in {a.lower() for a in self.aliases}


class ProviderRegistry:
    """
    Registry of provider descriptors and their capability adapters.

    Usage:
        registry = ProviderRegistry(default_chains={Capability.TRANSCRIBE: ["gladia", "whisper"]})
        registry.register(
            ProviderDescriptor("gladia", frozenset({Capability.TRANSCRIBE}), credential_check=...),
            GladiaSTTProvider(api_key=...),
        )
        registry.seal()

        chain = registry.providers_for(Capability.TRANSCRIBE, preferred="whisper")
        adapter = registry.adapter_for("whisper", Capability.TRANSCRIBE)
    """

    def __init__(self, default_chains: dict[Capability, list[str]] | None = None):
        self._descriptors: dict[str, ProviderDescriptor] = {}
        self._adapters: dict[tuple[str, Capability], ProviderAdapter] = {}
        self._default_chains: dict[Capability, list[str]] = {
            cap: list(names) for cap, names in (default_chains or {}).items()
        }
        self._sealed = False

    # ==================== Registration ====================

    def _validate_adapter(self, descriptor: ProviderDescriptor, adapter: ProviderAdapter) -> None:
        if not hasattr(adapter, "invoke") or not callable(adapter.invoke):
            raise ValueError(f"Adapter for '{descriptor.name}' must have an 'invoke' method")
        if adapter.name != descriptor.name:
            raise ValueError(
                f"Adapter name '{adapter.name}' does not match provider '{descriptor.name}'"
            )
        if not descriptor.supports(adapter.capability):
            raise ValueError(
                f"Provider '{descriptor.name}' does not declare capability "
                f"'{adapter.capability.value}'"
            )

    def register(self, descriptor: ProviderDescriptor, *adapters: ProviderAdapter) -> None:
        """
        Register a provider and one adapter per capability it serves.

        Raises:
            RuntimeError: If the registry has been sealed
            ValueError: If an adapter does not match the descriptor
        """
        if self._sealed:
            raise RuntimeError("Provider registry is sealed; register providers at startup")
        for adapter in adapters:
            self._validate_adapter(descriptor, adapter)
        missing = {c for c in descriptor.capabilities} - {a.capability for a in adapters}
        if missing:
            raise ValueError(
                f"Provider '{descriptor.name}' has no adapter for: "
                f"{', '.join(sorted(c.value for c in missing))}"
            )

        self._descriptors[descriptor.name] = descriptor
        for adapter in adapters:
            self._adapters[(descriptor.name, adapter.capability)] = adapter
        logger.debug(
            f"Registered provider: {descriptor.name} "
            f"(capabilities={sorted(c.value for c in descriptor.capabilities)}, "
            f"ready={descriptor.is_ready()})"
        )

    def seal(self) -> None:
        """Freeze the registry; it is read-only from here on."""
        self._sealed = True

    @property
    def sealed(self) -> bool:
        return self._sealed

    # ==================== Lookup ====================

    def resolve_name(self, name: str) -> str:
        """Resolve a provider id or alias to its canonical id."""
        for descriptor in self._descriptors.values():
            if descriptor.matches(name):
                return descriptor.name
        raise ValidationError(f"Unknown provider '{name}'", field="provider")

    def get_descriptor(self, name: str) -> ProviderDescriptor:
        return self._descriptors[self.resolve_name(name)]

    def is_ready(self, name: str) -> bool:
        try:
            return self.get_descriptor(name).is_ready()
        except ValidationError:
            return False

    def adapter_for(self, name: str, capability: Capability) -> ProviderAdapter:
        try:
            return self._adapters[(name, capability)]
        except KeyError:
            raise LookupError(
                f"No '{capability.value}' adapter registered for provider '{name}'"
            ) from None

    def providers_for(
        self,
        capability: Capability,
        preferred: str | None = None,
    ) -> list[ProviderDescriptor]:
        """
        Build the fallback chain for a capability.

        Order: the configured default chain, then any other provider that
        supports the capability by descending priority. A preferred
        provider is moved to the head; the rest keep their order.

        Raises:
            ValidationError: If preferred is unknown or lacks the capability
        """
        configured = [
            self._descriptors[name]
            for name in self._default_chains.get(capability, [])
            if name in self._descriptors and self._descriptors[name].supports(capability)
        ]
        configured_names = {d.name for d in configured}
        extras = sorted(
            (
                d
                for d in self._descriptors.values()
                if d.supports(capability) and d.name not in configured_names
            ),
            key=lambda d: d.priority,
            reverse=True,
        )
        chain = configured + extras

        if preferred:
            pinned = self.get_descriptor(preferred)
            if not pinned.supports(capability):
                raise ValidationError(
                    f"Provider '{pinned.name}' does not support '{capability.value}'",
                    field="provider",
                )
            chain = [pinned] + [d for d in chain if d.name != pinned.name]

        return chain

    def ready_providers(self, capability: Capability) -> list[str]:
        return [d.name for d in self.providers_for(capability) if d.is_ready()]

    # ==================== Utility Methods ====================

    def list_providers(self) -> dict[str, dict[str, Any]]:
        """Readiness snapshot per capability, in default chain order."""
        return {
            capability.value: {d.name: d.is_ready() for d in self.providers_for(capability)}
            for capability in Capability
        }

    def __len__(self) -> int:
        return len(self._descriptors)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name in self._descriptors

    def __iter__(self) -> Iterator[ProviderDescriptor]:
        return iter(list(self._descriptors.values()))

    def __repr__(self) -> str:
        return f"ProviderRegistry(providers=[{', '.join(self._descriptors)}], sealed={self._sealed})"


__all__ = [
    "ProviderDescriptor",
    "ProviderRegistry",
]
