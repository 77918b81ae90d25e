"""
Error taxonomy for Switchboard.

Provider-level failures are raised by adapters and caught by the
orchestrator, which classifies them into trace reasons. Only
ValidationError and ChainExhaustedError are meant to reach callers.
"""

from __future__ import annotations

import asyncio
from enum import Enum
from typing import TYPE_CHECKING, Any

import httpx

if TYPE_CHECKING:
    from switchboard.orchestration.types import Capability, ProviderAttempt


class FailureReason(str, Enum):
    """Why a provider attempt did not produce a usable result."""

    NOT_READY = "not-ready"
    TRANSIENT = "transient"
    AUTH = "auth"
    BAD_RESPONSE = "bad-response"
    QUALITY = "quality"
    ERROR = "error"


class SwitchboardError(Exception):
    """Base class for all Switchboard errors."""


class ValidationError(SwitchboardError):
    """Malformed or insufficient input. Never retried, never a fallback trigger."""

    def __init__(self, message: str, field: str | None = None):
        self.field = field
        super().__init__(message)


# =============================================================================
# Provider errors (caught and classified by the orchestrator)
# =============================================================================


class ProviderError(SwitchboardError):
    """A single provider call failed."""

    reason: FailureReason = FailureReason.ERROR

    def __init__(self, provider: str, message: str):
        self.provider = provider
        super().__init__(f"{provider}: {message}")


class ProviderNotReadyError(ProviderError):
    """Provider lacks required credentials."""

    reason = FailureReason.NOT_READY


class TransientProviderError(ProviderError):
    """Timeout, network failure, rate limit or 5xx from a provider."""

    reason = FailureReason.TRANSIENT


class MalformedResponseError(ProviderError):
    """Provider answered but the reply could not be mapped to a result."""

    reason = FailureReason.BAD_RESPONSE


# =============================================================================
# Orchestration errors (surface to callers)
# =============================================================================


class OrchestrationError(SwitchboardError):
    """An orchestration call ended without a result."""

    def __init__(
        self,
        message: str,
        capability: Capability | None = None,
        attempts: list[ProviderAttempt] | tuple[ProviderAttempt, ...] = (),
    ):
        self.capability = capability
        self.attempts = tuple(attempts)
        super().__init__(message)

    def attempts_to_dict(self) -> list[dict[str, Any]]:
        return [a.to_dict() for a in self.attempts]


class ChainExhaustedError(OrchestrationError):
    """Every provider in the chain was skipped or failed."""

    @classmethod
    def from_attempts(
        cls,
        capability: Capability,
        attempts: list[ProviderAttempt],
    ) -> ChainExhaustedError:
        if not attempts:
            return cls(
                f"No providers configured for '{capability.value}'",
                capability=capability,
                attempts=attempts,
            )
        summary = ", ".join(
            f"{a.provider}: {a.status.value}({a.reason})" if a.reason else f"{a.provider}: {a.status.value}"
            for a in attempts
        )
        return cls(
            f"All providers failed for '{capability.value}' [{summary}]",
            capability=capability,
            attempts=attempts,
        )

    @property
    def all_skipped(self) -> bool:
        """True when no provider in the chain had credentials."""
        return all(a.reason == FailureReason.NOT_READY.value for a in self.attempts)


# =============================================================================
# Classification
# =============================================================================

_TRANSIENT_STATUS = {408, 409, 425, 429}
_AUTH_STATUS = {401, 403}


def classify_failure(exc: BaseException) -> FailureReason:
    """
    Classify a provider exception into a trace reason.

    Explicit ProviderError subclasses carry their own reason. httpx and
    asyncio errors are mapped by type and status code; SDK errors
    (openai, anthropic, deepgram) are matched by class name so that
    the SDKs stay optional imports.
    """
    if isinstance(exc, ProviderError):
        return exc.reason

    if isinstance(exc, (asyncio.TimeoutError, TimeoutError, httpx.TimeoutException)):
        return FailureReason.TRANSIENT

    if isinstance(exc, httpx.HTTPStatusError):
        return _classify_status(exc.response.status_code)

    if isinstance(exc, httpx.TransportError):
        return FailureReason.TRANSIENT

    status = getattr(exc, "status_code", None)
    if isinstance(status, int):
        return _classify_status(status)

    name = type(exc).__name__.lower()
    if "timeout" in name or "connection" in name or "ratelimit" in name:
        return FailureReason.TRANSIENT
    if "auth" in name or "permission" in name:
        return FailureReason.AUTH
    if isinstance(exc, (KeyError, IndexError, ValueError, TypeError)):
        return FailureReason.BAD_RESPONSE
    return FailureReason.ERROR


def _classify_status(status: int) -> FailureReason:
    if status in _AUTH_STATUS:
        return FailureReason.AUTH
    if status in _TRANSIENT_STATUS or status >= 500:
        return FailureReason.TRANSIENT
    return FailureReason.ERROR


__all__ = [
    "ChainExhaustedError",
    "FailureReason",
    "MalformedResponseError",
    "OrchestrationError",
    "ProviderError",
    "ProviderNotReadyError",
    "SwitchboardError",
    "TransientProviderError",
    "ValidationError",
    "classify_failure",
]
