"""
Response Assembler.

Maps each provider reply shape onto the canonical TextOutput or
DetectionOutput. A reply that cannot be mapped raises
MalformedResponseError, which the orchestrator treats as a provider
failure.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from switchboard.errors import MalformedResponseError
from switchboard.providers.base import RawResponse, ResponseShape
from switchboard.utils.json_parser import coerce_probability, parse_detection_json
from switchboard.utils.text import clean_markup

from .types import (
    Capability,
    CapabilityRequest,
    CapabilityResult,
    DetectionOutput,
    Output,
    TextOutput,
)

logger = logging.getLogger(__name__)


_MISSING = object()


def _dig(body: Any, *path: str | int) -> Any:
    """Walk dicts and lists; _MISSING if any step is absent."""
    node = body
    for step in path:
        try:
            node = node[step]
        except (KeyError, IndexError, TypeError):
            return _MISSING
        if node is None:
            return _MISSING
    return node


# =============================================================================
# Detection labels
# =============================================================================


def human_likelihood(probability: float) -> str:
    """Readable label for an AI-likelihood probability."""
    if probability < 0.2:
        return "Very likely human-written"
    if probability < 0.4:
        return "Likely human-written"
    if probability < 0.6:
        return "Uncertain"
    if probability < 0.8:
        return "Likely AI-generated"
    return "Very likely AI-generated"


def default_assessment(probability: float) -> str:
    if probability > 0.8:
        return (
            "This text appears to be AI-generated with high confidence. It lacks the "
            "natural variance and personal style of human writing."
        )
    if probability > 0.6:
        return (
            "This text likely contains AI-generated elements. More distinctive phrasing "
            "and personal perspective would make it read as human."
        )
    if probability > 0.4:
        return "This text shows a balance of AI-like and human-like qualities."
    if probability > 0.2:
        return "This text appears mostly human-written, with natural variation in structure."
    return "This text shows the characteristics of authentic human writing."


def build_detection(
    probability: float,
    burstiness: float | None = None,
    assessment: str | None = None,
) -> DetectionOutput:
    probability = min(max(float(probability), 0.0), 1.0)
    return DetectionOutput(
        probability=probability,
        is_ai_generated=probability > 0.5,
        human_likelihood=human_likelihood(probability),
        burstiness=burstiness,
        assessment=assessment or default_assessment(probability),
    )


# =============================================================================
# Assembler
# =============================================================================


class ResponseAssembler:
    """
    Normalizes raw provider replies.

    Example:
        assembler = ResponseAssembler()
        result = assembler.assemble("openai", raw, Capability.REWRITE, request)
        result.text  # markup-free rewrite
    """

    def __init__(self) -> None:
        self._text_extractors: dict[ResponseShape, Callable[[Any], str | None]] = {
            ResponseShape.OPENAI_CHAT: self._chat_text,
            ResponseShape.ANTHROPIC_MESSAGES: self._anthropic_text,
        }
        self._transcript_extractors: dict[ResponseShape, Callable[[Any], TextOutput | None]] = {
            ResponseShape.WHISPER: self._whisper,
            ResponseShape.DEEPGRAM: self._deepgram,
            ResponseShape.GLADIA: self._gladia,
            ResponseShape.ASSEMBLYAI: self._assemblyai,
        }

    def assemble(
        self,
        provider: str,
        raw: RawResponse,
        capability: Capability,
        request: CapabilityRequest,
    ) -> CapabilityResult:
        """
        Build a CapabilityResult with an empty trace.

        Raises:
            MalformedResponseError: If the reply is missing required fields
        """
        output = self._output(provider, raw, capability)
        return CapabilityResult(
            capability=capability,
            provider=provider,
            output=output,
            correlation_id=request.correlation_id,
        )

    def _output(self, provider: str, raw: RawResponse, capability: Capability) -> Output:
        shape = raw.shape
        body = raw.body

        if capability is Capability.TRANSCRIBE:
            extractor = self._transcript_extractors.get(shape)
            if extractor is None:
                raise MalformedResponseError(provider, f"'{shape.value}' is not a transcription reply")
            output = extractor(body)
            if output is None:
                raise MalformedResponseError(provider, f"no transcript in '{shape.value}' reply")
            return output

        if capability is Capability.DETECT and shape is ResponseShape.GPTZERO:
            return self._gptzero(provider, body)

        text_extractor = self._text_extractors.get(shape)
        if text_extractor is None:
            raise MalformedResponseError(
                provider, f"'{shape.value}' reply cannot serve '{capability.value}'"
            )
        content = text_extractor(body)
        if content is None:
            raise MalformedResponseError(provider, f"no message content in '{shape.value}' reply")

        if capability is Capability.DETECT:
            try:
                verdict = parse_detection_json(content)
            except ValueError as e:
                raise MalformedResponseError(provider, str(e)) from e
            return build_detection(
                verdict["probability"],
                burstiness=verdict["burstiness"],
                assessment=verdict["assessment"],
            )

        text = clean_markup(content)
        if not text:
            raise MalformedResponseError(provider, "empty rewrite")
        return TextOutput(text=text)

    # ==================== Chat replies ====================

    @staticmethod
    def _chat_text(body: Any) -> str | None:
        content = _dig(body, "choices", 0, "message", "content")
        return content if isinstance(content, str) else None

    @staticmethod
    def _anthropic_text(body: Any) -> str | None:
        blocks = _dig(body, "content")
        if not isinstance(blocks, list):
            return None
        for block in blocks:
            if isinstance(block, dict) and block.get("type") == "text":
                text = block.get("text")
                return text if isinstance(text, str) else None
        return None

    # ==================== Transcription replies ====================

    @staticmethod
    def _whisper(body: Any) -> TextOutput | None:
        text = _dig(body, "text")
        if not isinstance(text, str):
            return None
        language = _dig(body, "language")
        return TextOutput(
            text=text.strip(),
            language=language if isinstance(language, str) else None,
        )

    @staticmethod
    def _deepgram(body: Any) -> TextOutput | None:
        channel = _dig(body, "results", "channels", 0)
        transcript = _dig(channel, "alternatives", 0, "transcript")
        if not isinstance(transcript, str):
            return None
        confidence = _dig(channel, "alternatives", 0, "confidence")
        language = _dig(channel, "detected_language")
        return TextOutput(
            text=transcript.strip(),
            language=language if isinstance(language, str) else None,
            confidence=float(confidence) if isinstance(confidence, (int, float)) else None,
        )

    @staticmethod
    def _gladia(body: Any) -> TextOutput | None:
        for path in (
            ("prediction", "transcription"),
            ("transcription",),
            ("result", "transcription", "full_transcript"),
        ):
            text = _dig(body, *path)
            if isinstance(text, str):
                languages = _dig(body, "result", "transcription", "languages")
                language = languages[0] if isinstance(languages, list) and languages else None
                return TextOutput(text=text.strip(), language=language)
        return None

    @staticmethod
    def _assemblyai(body: Any) -> TextOutput | None:
        if _dig(body, "status") != "completed":
            return None
        text = _dig(body, "text")
        if text is _MISSING:
            text = ""
        if not isinstance(text, str):
            return None
        language = _dig(body, "language_code")
        confidence = _dig(body, "confidence")
        return TextOutput(
            text=text.strip(),
            language=language if isinstance(language, str) else None,
            confidence=float(confidence) if isinstance(confidence, (int, float)) else None,
        )

    # ==================== Detection replies ====================

    @staticmethod
    def _gptzero(provider: str, body: Any) -> DetectionOutput:
        document = _dig(body, "documents", 0)
        probability = coerce_probability(_dig(document, "completely_generated_prob"))
        if probability is None:
            raise MalformedResponseError(provider, "no completely_generated_prob in GPTZero reply")

        burstiness = _dig(document, "overall_burstiness")
        predicted = _dig(document, "predicted_class")
        assessment = None
        if isinstance(predicted, str):
            assessment = f"{default_assessment(probability)} (predicted class: {predicted})"
        return build_detection(
            probability,
            burstiness=float(burstiness) if isinstance(burstiness, (int, float)) else None,
            assessment=assessment,
        )


__all__ = [
    "ResponseAssembler",
    "build_detection",
    "default_assessment",
    "human_likelihood",
]
