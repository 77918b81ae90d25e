"""
Switchboard Orchestration

Provider-independent request handling:

- RequestNormalizer: validate caller input into a CapabilityRequest
- FallbackOrchestrator: run a request through an ordered provider chain
- QualityGate: judge outputs and build the single escalated retry
- ResponseAssembler: map provider replies to canonical outputs
"""

from .assembler import ResponseAssembler, build_detection, human_likelihood
from .normalizer import RequestNormalizer, parse_capability
from .orchestrator import DEFAULT_PROVIDER_TIMEOUT, FallbackOrchestrator
from .quality import GateVerdict, QualityGate
from .types import (
    AttemptStatus,
    Capability,
    CapabilityRequest,
    CapabilityResult,
    DetectionOutput,
    Output,
    ProviderAttempt,
    RequestOptions,
    TextOutput,
)

__all__ = [
    # Types
    "AttemptStatus",
    "Capability",
    "CapabilityRequest",
    "CapabilityResult",
    "DetectionOutput",
    "Output",
    "ProviderAttempt",
    "RequestOptions",
    "TextOutput",
    # Components
    "DEFAULT_PROVIDER_TIMEOUT",
    "FallbackOrchestrator",
    "GateVerdict",
    "QualityGate",
    "RequestNormalizer",
    "ResponseAssembler",
    "build_detection",
    "human_likelihood",
    "parse_capability",
]
