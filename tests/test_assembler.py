"""
Tests for the response assembler.
"""

import pytest

from switchboard.errors import MalformedResponseError
from switchboard.orchestration import (
    Capability,
    CapabilityRequest,
    DetectionOutput,
    ResponseAssembler,
    TextOutput,
    build_detection,
    human_likelihood,
)
from switchboard.providers.base import RawResponse, ResponseShape


def chat_body(content):
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}


@pytest.fixture
def assembler():
    return ResponseAssembler()


@pytest.fixture
def rewrite_request():
    return CapabilityRequest(Capability.REWRITE, "input text", correlation_id="cid-7")


@pytest.fixture
def transcribe_request():
    return CapabilityRequest(Capability.TRANSCRIBE, b"audio")


@pytest.fixture
def detect_request(sample_detect_text):
    return CapabilityRequest(Capability.DETECT, sample_detect_text)


class TestRewriteReplies:
    def test_openai_chat_markup_is_cleaned(self, assembler, rewrite_request):
        raw = RawResponse("openai", ResponseShape.OPENAI_CHAT, chat_body("## Title\n\n**Bold** and `code`"))

        result = assembler.assemble("openai", raw, Capability.REWRITE, rewrite_request)

        assert result.text == "Title\n\nBold and code"
        assert result.provider == "openai"
        assert result.correlation_id == "cid-7"
        assert result.attempts == ()

    def test_anthropic_first_text_block(self, assembler, rewrite_request):
        body = {
            "content": [
                {"type": "tool_use", "id": "x"},
                {"type": "text", "text": "Rewritten prose."},
            ]
        }
        raw = RawResponse("anthropic", ResponseShape.ANTHROPIC_MESSAGES, body)
        result = assembler.assemble("anthropic", raw, Capability.REWRITE, rewrite_request)
        assert result.text == "Rewritten prose."

    def test_empty_rewrite_is_malformed(self, assembler, rewrite_request):
        raw = RawResponse("openai", ResponseShape.OPENAI_CHAT, chat_body("```\n```"))
        with pytest.raises(MalformedResponseError, match="empty rewrite"):
            assembler.assemble("openai", raw, Capability.REWRITE, rewrite_request)

    def test_missing_content_is_malformed(self, assembler, rewrite_request):
        raw = RawResponse("deepseek", ResponseShape.OPENAI_CHAT, {"choices": []})
        with pytest.raises(MalformedResponseError) as exc_info:
            assembler.assemble("deepseek", raw, Capability.REWRITE, rewrite_request)
        assert exc_info.value.provider == "deepseek"

    def test_transcript_shape_cannot_serve_rewrite(self, assembler, rewrite_request):
        raw = RawResponse("whisper", ResponseShape.WHISPER, {"text": "hi"})
        with pytest.raises(MalformedResponseError):
            assembler.assemble("whisper", raw, Capability.REWRITE, rewrite_request)


class TestTranscriptReplies:
    def test_whisper(self, assembler, transcribe_request):
        raw = RawResponse("whisper", ResponseShape.WHISPER, {"text": " hello ", "language": "english"})
        output = assembler.assemble("whisper", raw, Capability.TRANSCRIBE, transcribe_request).output
        assert output == TextOutput("hello", language="english")

    def test_deepgram(self, assembler, transcribe_request):
        body = {
            "results": {
                "channels": [
                    {
                        "detected_language": "en",
                        "alternatives": [{"transcript": "good morning", "confidence": 0.93}],
                    }
                ]
            }
        }
        raw = RawResponse("deepgram", ResponseShape.DEEPGRAM, body)
        output = assembler.assemble("deepgram", raw, Capability.TRANSCRIBE, transcribe_request).output
        assert output.text == "good morning"
        assert output.language == "en"
        assert output.confidence == pytest.approx(0.93)

    @pytest.mark.parametrize(
        "body",
        [
            {"prediction": {"transcription": "bonjour"}},
            {"transcription": "bonjour"},
            {"status": "done", "result": {"transcription": {"full_transcript": "bonjour", "languages": ["fr"]}}},
        ],
    )
    def test_gladia_layouts(self, assembler, transcribe_request, body):
        raw = RawResponse("gladia", ResponseShape.GLADIA, body)
        output = assembler.assemble("gladia", raw, Capability.TRANSCRIBE, transcribe_request).output
        assert output.text == "bonjour"

    def test_gladia_language(self, assembler, transcribe_request):
        body = {"result": {"transcription": {"full_transcript": "hola", "languages": ["es"]}}}
        raw = RawResponse("gladia", ResponseShape.GLADIA, body)
        output = assembler.assemble("gladia", raw, Capability.TRANSCRIBE, transcribe_request).output
        assert output.language == "es"

    def test_assemblyai_requires_completed(self, assembler, transcribe_request):
        done = RawResponse(
            "assemblyai",
            ResponseShape.ASSEMBLYAI,
            {"status": "completed", "text": "hi there", "language_code": "en", "confidence": 0.8},
        )
        output = assembler.assemble("assemblyai", done, Capability.TRANSCRIBE, transcribe_request).output
        assert output == TextOutput("hi there", language="en", confidence=0.8)

        queued = RawResponse("assemblyai", ResponseShape.ASSEMBLYAI, {"status": "queued"})
        with pytest.raises(MalformedResponseError):
            assembler.assemble("assemblyai", queued, Capability.TRANSCRIBE, transcribe_request)

    def test_silence_is_an_empty_transcript(self, assembler, transcribe_request):
        raw = RawResponse("assemblyai", ResponseShape.ASSEMBLYAI, {"status": "completed", "text": None})
        output = assembler.assemble("assemblyai", raw, Capability.TRANSCRIBE, transcribe_request).output
        assert output.text == ""

    def test_chat_shape_cannot_serve_transcribe(self, assembler, transcribe_request):
        raw = RawResponse("openai", ResponseShape.OPENAI_CHAT, chat_body("hi"))
        with pytest.raises(MalformedResponseError, match="not a transcription reply"):
            assembler.assemble("openai", raw, Capability.TRANSCRIBE, transcribe_request)


class TestDetectionReplies:
    def test_chat_verdict(self, assembler, detect_request):
        content = '```json\n{"probability": 85, "burstiness": 0.3, "assessment": "Even rhythm.",}\n```'
        raw = RawResponse("openai", ResponseShape.OPENAI_CHAT, chat_body(content))

        output = assembler.assemble("openai", raw, Capability.DETECT, detect_request).output

        assert isinstance(output, DetectionOutput)
        assert output.probability == pytest.approx(0.85)
        assert output.is_ai_generated
        assert output.human_likelihood == "Very likely AI-generated"
        assert output.burstiness == pytest.approx(0.3)
        assert output.assessment == "Even rhythm."

    def test_verdict_without_probability_is_malformed(self, assembler, detect_request):
        raw = RawResponse("openai", ResponseShape.OPENAI_CHAT, chat_body("I think it is AI."))
        with pytest.raises(MalformedResponseError):
            assembler.assemble("openai", raw, Capability.DETECT, detect_request)

    def test_gptzero(self, assembler, detect_request):
        body = {
            "documents": [
                {
                    "completely_generated_prob": 0.1,
                    "overall_burstiness": 42.5,
                    "predicted_class": "human",
                }
            ]
        }
        raw = RawResponse("gptzero", ResponseShape.GPTZERO, body)

        output = assembler.assemble("gptzero", raw, Capability.DETECT, detect_request).output

        assert output.probability == pytest.approx(0.1)
        assert not output.is_ai_generated
        assert output.human_likelihood == "Very likely human-written"
        assert output.burstiness == pytest.approx(42.5)
        assert "predicted class: human" in output.assessment

    def test_gptzero_without_probability(self, assembler, detect_request):
        raw = RawResponse("gptzero", ResponseShape.GPTZERO, {"documents": []})
        with pytest.raises(MalformedResponseError):
            assembler.assemble("gptzero", raw, Capability.DETECT, detect_request)


class TestDetectionLabels:
    @pytest.mark.parametrize(
        "probability,label",
        [
            (0.0, "Very likely human-written"),
            (0.25, "Likely human-written"),
            (0.5, "Uncertain"),
            (0.65, "Likely AI-generated"),
            (0.95, "Very likely AI-generated"),
        ],
    )
    def test_human_likelihood_bands(self, probability, label):
        assert human_likelihood(probability) == label

    def test_is_ai_only_above_half(self):
        assert not build_detection(0.5).is_ai_generated
        assert build_detection(0.51).is_ai_generated

    def test_probability_is_clamped(self):
        assert build_detection(1.7).probability == 1.0
        assert build_detection(-0.2).probability == 0.0

    def test_default_assessment_when_missing(self):
        assert build_detection(0.9).assessment.startswith("This text appears to be AI-generated")
