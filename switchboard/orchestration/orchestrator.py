"""
Fallback Orchestrator.

Runs one capability request through an ordered provider chain:

    for provider in chain:
        not ready           -> skipped(not-ready), no call
        call + assemble     -> failure: failed(reason), next provider
        quality gate passes -> return
        gate fails          -> one escalated retry on the same provider
                               retry returns -> return it (best effort)
                               retry raises  -> failed, next provider
    chain exhausted -> ChainExhaustedError with the full trace

Providers are tried strictly one at a time. The only suspension point is
the provider call itself, bounded by provider_timeout.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from dataclasses import replace
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Union

from switchboard.errors import ChainExhaustedError, FailureReason, classify_failure

from .assembler import ResponseAssembler
from .quality import QualityGate
from .types import AttemptStatus, CapabilityRequest, CapabilityResult, ProviderAttempt

if TYPE_CHECKING:
    from switchboard.providers.registry import ProviderDescriptor, ProviderRegistry

logger = logging.getLogger(__name__)


DEFAULT_PROVIDER_TIMEOUT = 20.0


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class FallbackOrchestrator:
    """
    Sequential fallback over a provider chain with a single quality retry.

    The orchestrator holds no per-request state; one instance is shared
    by every HTTP request and streaming session.

    Example:
        orchestrator = FallbackOrchestrator(registry, provider_timeout=20.0)
        result = await orchestrator.execute(request)
        print(result.provider, result.text)
    """

    def __init__(
        self,
        registry: ProviderRegistry,
        assembler: ResponseAssembler | None = None,
        quality_gate: QualityGate | None = None,
        provider_timeout: float = DEFAULT_PROVIDER_TIMEOUT,
    ):
        self._registry = registry
        self._assembler = assembler or ResponseAssembler()
        self._gate = quality_gate or QualityGate()
        self._timeout = provider_timeout

    @property
    def registry(self) -> ProviderRegistry:
        return self._registry

    @property
    def provider_timeout(self) -> float:
        return self._timeout

    async def execute(
        self,
        request: CapabilityRequest,
        chain: Sequence[Union[ProviderDescriptor, str]] | None = None,
    ) -> CapabilityResult:
        """
        Execute a request against the chain.

        Args:
            request: Normalized request
            chain: Explicit chain (descriptors or provider ids). Defaults to
                the registry chain for the capability, with the request's
                preferred provider pinned to the head.

        Returns:
            CapabilityResult with the full attempt trace

        Raises:
            ValidationError: If the preferred provider is unknown
            ChainExhaustedError: If no provider produced a result
        """
        capability = request.capability
        cid = request.correlation_id
        descriptors = self._resolve_chain(request, chain)
        attempts: list[ProviderAttempt] = []

        for descriptor in descriptors:
            name = descriptor.name

            if not descriptor.is_ready():
                attempts.append(
                    ProviderAttempt(
                        provider=name,
                        status=AttemptStatus.SKIPPED,
                        reason=FailureReason.NOT_READY.value,
                        detail="credentials not configured",
                        payload_size=request.payload_size,
                    )
                )
                logger.debug(f"[{cid}] {capability.value}: skipping {name} (not ready)")
                continue

            result, attempt = await self._attempt(name, request)
            attempts.append(attempt)
            if result is None:
                continue

            verdict = self._gate.check(capability, request, result.output)
            if verdict.passed:
                return self._finish(result, attempts, retried=False, quality_passed=True)

            attempts[-1] = replace(
                attempt, reason=FailureReason.QUALITY.value, detail=verdict.reason
            )
            logger.info(
                f"[{cid}] {capability.value}: {name} failed quality check "
                f"({verdict.reason}), retrying with escalated constraints"
            )

            retry_request = self._gate.escalate(request, verdict, result.output)
            retry_result, retry_attempt = await self._attempt(name, retry_request, is_retry=True)
            if retry_result is None:
                attempts.append(retry_attempt)
                continue

            retry_verdict = self._gate.check(capability, request, retry_result.output)
            if not retry_verdict.passed:
                retry_attempt = replace(
                    retry_attempt,
                    reason=FailureReason.QUALITY.value,
                    detail=retry_verdict.reason,
                )
                logger.warning(
                    f"[{cid}] {capability.value}: {name} retry still failed quality check "
                    f"({retry_verdict.reason}); accepting best-effort output"
                )
            attempts.append(retry_attempt)
            return self._finish(
                retry_result,
                attempts,
                retried=True,
                quality_passed=retry_verdict.passed,
            )

        error = ChainExhaustedError.from_attempts(capability, attempts)
        logger.error(f"[{cid}] {error}")
        raise error

    # ==================== Internals ====================

    def _resolve_chain(
        self,
        request: CapabilityRequest,
        chain: Sequence[Union[ProviderDescriptor, str]] | None,
    ) -> list[ProviderDescriptor]:
        if chain is None:
            return self._registry.providers_for(
                request.capability, request.options.preferred_provider
            )
        return [
            self._registry.get_descriptor(item) if isinstance(item, str) else item
            for item in chain
        ]

    async def _attempt(
        self,
        name: str,
        request: CapabilityRequest,
        is_retry: bool = False,
    ) -> tuple[CapabilityResult | None, ProviderAttempt]:
        """One bounded provider call. Never raises except on cancellation."""
        capability = request.capability
        cid = request.correlation_id
        started = _utc_now()

        try:
            adapter = self._registry.adapter_for(name, capability)
            raw = await asyncio.wait_for(adapter.invoke(request), timeout=self._timeout)
            result = self._assembler.assemble(name, raw, capability, request)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            reason = classify_failure(e)
            detail = str(e) or type(e).__name__
            if isinstance(e, asyncio.TimeoutError):
                detail = f"timed out after {self._timeout}s"
            attempt = ProviderAttempt(
                provider=name,
                status=AttemptStatus.FAILED,
                reason=reason.value,
                detail=detail,
                started_at=started,
                finished_at=_utc_now(),
                payload_size=request.payload_size,
                is_retry=is_retry,
            )
            logger.warning(
                f"[{cid}] {capability.value}: {name} failed "
                f"({reason.value}{', retry' if is_retry else ''}): {detail}"
            )
            return None, attempt

        attempt = ProviderAttempt(
            provider=name,
            status=AttemptStatus.SUCCESS,
            started_at=started,
            finished_at=_utc_now(),
            payload_size=request.payload_size,
            output_size=result.output.size,
            is_retry=is_retry,
        )
        logger.info(
            f"[{cid}] {capability.value}: {name} succeeded in {attempt.duration_ms:.0f}ms"
            f"{' (retry)' if is_retry else ''}"
        )
        return result, attempt

    @staticmethod
    def _finish(
        result: CapabilityResult,
        attempts: list[ProviderAttempt],
        retried: bool,
        quality_passed: bool,
    ) -> CapabilityResult:
        return replace(
            result,
            attempts=tuple(attempts),
            retried=retried,
            quality_passed=quality_passed,
        )


__all__ = [
    "DEFAULT_PROVIDER_TIMEOUT",
    "FallbackOrchestrator",
]
