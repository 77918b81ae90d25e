"""
Canonical request/result types for the orchestration core.

Requests and results are frozen dataclasses; the only mutable record is
the per-call attempt list owned by the orchestrator while it runs.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Union
from uuid import uuid4


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Capability(str, Enum):
    """A category of operation that several providers can satisfy."""

    REWRITE = "rewrite"
    TRANSCRIBE = "transcribe"
    DETECT = "detect"


class AttemptStatus(str, Enum):
    SUCCESS = "success"
    FAILED = "failed"
    SKIPPED = "skipped"


# =============================================================================
# Requests
# =============================================================================


@dataclass(frozen=True, slots=True)
class RequestOptions:
    """
    Provider-independent option bag.

    Attributes:
        instructions: Free-form caller instructions (rewrite)
        preferred_provider: Provider id pinned to the head of the chain
        model: Target-model hint, passed through to adapters that accept it
        presets: Named rewrite presets to expand into instruction lines
        style_text: Style augmentation text
        content_text: Content augmentation text
        mime_type: Audio MIME type (transcribe)
        language: Language hint (transcribe)
        escalation: Amplified constraint text set by the retry controller
    """

    instructions: str | None = None
    preferred_provider: str | None = None
    model: str | None = None
    presets: tuple[str, ...] = ()
    style_text: str | None = None
    content_text: str | None = None
    mime_type: str = "audio/webm"
    language: str | None = None
    escalation: str | None = None


@dataclass(frozen=True, slots=True)
class CapabilityRequest:
    """Canonical request built by the normalizer."""

    capability: Capability
    payload: Union[str, bytes]
    options: RequestOptions = field(default_factory=RequestOptions)
    correlation_id: str = field(default_factory=lambda: uuid4().hex)

    @property
    def payload_size(self) -> int:
        return len(self.payload)

    @property
    def text(self) -> str:
        """Text payload (rewrite/detect)."""
        if not isinstance(self.payload, str):
            raise TypeError(f"{self.capability.value} request carries audio, not text")
        return self.payload

    @property
    def audio(self) -> bytes:
        """Audio payload (transcribe)."""
        if not isinstance(self.payload, bytes):
            raise TypeError(f"{self.capability.value} request carries text, not audio")
        return self.payload

    def with_options(self, **changes: Any) -> CapabilityRequest:
        """Copy with updated options; keeps the correlation id."""
        return replace(self, options=replace(self.options, **changes))


# =============================================================================
# Outputs
# =============================================================================


@dataclass(frozen=True, slots=True)
class TextOutput:
    """Rewrite or transcription output."""

    text: str
    language: str | None = None
    confidence: float | None = None

    @property
    def size(self) -> int:
        return len(self.text)

    def to_dict(self) -> dict[str, Any]:
        return {
            "text": self.text,
            "language": self.language,
            "confidence": self.confidence,
        }


@dataclass(frozen=True, slots=True)
class DetectionOutput:
    """AI-content detection scores."""

    probability: float
    is_ai_generated: bool
    human_likelihood: str
    burstiness: float | None = None
    assessment: str | None = None

    @property
    def size(self) -> int:
        return len(self.assessment or "")

    def to_dict(self) -> dict[str, Any]:
        return {
            "probability": self.probability,
            "isAIGenerated": self.is_ai_generated,
            "humanLikelihood": self.human_likelihood,
            "burstiness": self.burstiness,
            "assessment": self.assessment,
        }


Output = Union[TextOutput, DetectionOutput]


# =============================================================================
# Trace and result
# =============================================================================


@dataclass(frozen=True, slots=True)
class ProviderAttempt:
    """One element of an orchestration trace."""

    provider: str
    status: AttemptStatus
    reason: str | None = None
    detail: str | None = None
    started_at: datetime = field(default_factory=_utc_now)
    finished_at: datetime = field(default_factory=_utc_now)
    payload_size: int = 0
    output_size: int = 0
    is_retry: bool = False

    @property
    def duration_ms(self) -> float:
        return (self.finished_at - self.started_at).total_seconds() * 1000

    def to_dict(self) -> dict[str, Any]:
        return {
            "provider": self.provider,
            "status": self.status.value,
            "reason": self.reason,
            "detail": self.detail,
            "started_at": self.started_at.isoformat(),
            "finished_at": self.finished_at.isoformat(),
            "duration_ms": round(self.duration_ms, 1),
            "payload_size": self.payload_size,
            "output_size": self.output_size,
            "is_retry": self.is_retry,
        }

    def __str__(self) -> str:
        label = f"{self.status.value}({self.reason})" if self.reason else self.status.value
        return f"{self.provider}: {label}"


@dataclass(frozen=True, slots=True)
class CapabilityResult:
    """Terminal result of one orchestration call."""

    capability: Capability
    provider: str
    output: Output
    attempts: tuple[ProviderAttempt, ...] = ()
    retried: bool = False
    quality_passed: bool = True
    correlation_id: str = ""

    @property
    def text(self) -> str:
        if not isinstance(self.output, TextOutput):
            raise TypeError(f"{self.capability.value} result has no text output")
        return self.output.text

    @property
    def detection(self) -> DetectionOutput:
        if not isinstance(self.output, DetectionOutput):
            raise TypeError(f"{self.capability.value} result has no detection output")
        return self.output

    def to_dict(self) -> dict[str, Any]:
        return {
            "capability": self.capability.value,
            "provider": self.provider,
            "output": self.output.to_dict(),
            "attempts": [a.to_dict() for a in self.attempts],
            "retried": self.retried,
            "quality_passed": self.quality_passed,
            "correlation_id": self.correlation_id,
        }


__all__ = [
    "AttemptStatus",
    "Capability",
    "CapabilityRequest",
    "CapabilityResult",
    "DetectionOutput",
    "Output",
    "ProviderAttempt",
    "RequestOptions",
    "TextOutput",
]
