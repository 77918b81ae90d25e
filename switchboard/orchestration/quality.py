"""
Quality Gate and Retry Controller.

A successful provider response can still be unusable: rewrite engines
tend to summarize when asked to rewrite. The gate judges each output and
the controller builds the one escalated retry a provider gets.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from switchboard.utils.text import count_words, min_required_words

from .types import Capability, CapabilityRequest, Output, TextOutput

logger = logging.getLogger(__name__)


DEFAULT_EXPANSION_FACTOR = 1.125


@dataclass(frozen=True, slots=True)
class GateVerdict:
    """
    Outcome of a quality check.

    Attributes:
        passed: Whether the output is acceptable
        reason: Why it failed (None when passed)
        input_words: Word count of the request text (rewrite only)
        output_words: Word count of the output text (rewrite only)
    """

    passed: bool
    reason: str | None = None
    input_words: int = 0
    output_words: int = 0

    @classmethod
    def ok(cls, input_words: int = 0, output_words: int = 0) -> GateVerdict:
        return cls(passed=True, input_words=input_words, output_words=output_words)


class QualityGate:
    """
    Post-hoc output check plus escalation builder.

    Rewrite outputs must keep at least as many words as the input.
    Transcription and detection outputs always pass.

    Example:
        gate = QualityGate()
        verdict = gate.check(Capability.REWRITE, request, output)
        if not verdict.passed:
            retry_request = gate.escalate(request, verdict, output)
    """

    def __init__(self, expansion_factor: float = DEFAULT_EXPANSION_FACTOR):
        if expansion_factor < 1.0:
            raise ValueError("expansion_factor must be >= 1.0")
        self.expansion_factor = expansion_factor

    def check(
        self,
        capability: Capability,
        request: CapabilityRequest,
        output: Output,
    ) -> GateVerdict:
        if capability is not Capability.REWRITE:
            return GateVerdict.ok()

        if not isinstance(output, TextOutput):
            return GateVerdict(passed=False, reason="rewrite produced no text output")

        input_words = count_words(request.text)
        output_words = count_words(output.text)
        if output_words >= input_words:
            return GateVerdict.ok(input_words, output_words)

        return GateVerdict(
            passed=False,
            reason=f"output has {output_words} words, input has {input_words}",
            input_words=input_words,
            output_words=output_words,
        )

    def target_words(self, request: CapabilityRequest) -> int:
        return min_required_words(request.text, self.expansion_factor)

    def escalate(
        self,
        request: CapabilityRequest,
        verdict: GateVerdict,
        output: Output,
    ) -> CapabilityRequest:
        """
        Build the retry request with an explicit length constraint.

        The returned request keeps the original payload and correlation id.
        """
        target = self.target_words(request)
        produced = verdict.output_words
        escalation = (
            f"LENGTH REQUIREMENT: Your previous rewrite had only {produced} words, "
            f"but the original text has {verdict.input_words} words. "
            f"The rewrite MUST contain at least {target} words. "
            "Do not summarize, condense or omit any point from the original; "
            "develop every point fully."
        )
        logger.debug(
            f"[{request.correlation_id}] Escalating rewrite: {produced} -> >= {target} words"
        )
        return request.with_options(escalation=escalation)


__all__ = [
    "DEFAULT_EXPANSION_FACTOR",
    "GateVerdict",
    "QualityGate",
]
