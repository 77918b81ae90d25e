"""
Tests for Switchboard provider adapters.

HTTP adapters run against httpx.MockTransport; SDK adapters get a
pre-built fake client.
"""

import json
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from switchboard.errors import ProviderError, TransientProviderError
from switchboard.orchestration import (
    Capability,
    CapabilityRequest,
    RequestOptions,
    ResponseAssembler,
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
    ProviderAdapter,
    ResponseShape,
    WhisperSTTProvider,
)
from switchboard.providers.stt import audio_filename, base_mime_type

CHAT_REPLY = {"choices": [{"message": {"role": "assistant", "content": "Rewritten."}}]}


def mock_client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


@pytest.fixture
def rewrite_request():
    return CapabilityRequest(
        Capability.REWRITE,
        "Original text to rewrite",
        RequestOptions(presets=("Concise",), instructions="Keep names."),
    )


@pytest.fixture
def detect_request(sample_detect_text):
    return CapabilityRequest(Capability.DETECT, sample_detect_text)


@pytest.fixture
def audio_request(sample_audio_bytes):
    return CapabilityRequest(
        Capability.TRANSCRIBE,
        sample_audio_bytes,
        RequestOptions(mime_type="audio/ogg; codecs=opus"),
    )


class TestAdapterContract:
    def test_adapters_satisfy_protocol(self):
        adapters = [
            OpenAIRewriteProvider(api_key="k"),
            AnthropicRewriteProvider(api_key="k"),
            DeepSeekRewriteProvider(api_key="k"),
            GPTZeroDetectProvider(api_key="k"),
            PerplexityDetectProvider(api_key="k"),
            WhisperSTTProvider(api_key="k"),
            DeepgramSTTProvider(api_key="k"),
            GladiaSTTProvider(api_key="k"),
            AssemblyAISTTProvider(api_key="k"),
        ]
        for adapter in adapters:
            assert isinstance(adapter, ProviderAdapter)
        assert [a.capability for a in adapters[:3]] == [Capability.REWRITE] * 3
        assert repr(adapters[0]) == "OpenAIRewriteProvider(name='openai', capability='rewrite')"

    def test_mime_helpers(self):
        assert base_mime_type("audio/webm;codecs=opus") == "audio/webm"
        assert base_mime_type("audio/mp3") == "audio/mpeg"
        assert audio_filename("audio/ogg; codecs=opus") == "audio.ogg"
        assert audio_filename("application/octet-stream") == "audio.webm"


# =============================================================================
# Rewrite
# =============================================================================


class TestOpenAIRewrite:
    @pytest.mark.asyncio
    async def test_sends_chat_completion(self, rewrite_request):
        client = MagicMock()
        client.chat.completions.create = AsyncMock(return_value=CHAT_REPLY)
        provider = OpenAIRewriteProvider(api_key="sk-test", client=client)

        raw = await provider.invoke(rewrite_request)

        assert raw.shape is ResponseShape.OPENAI_CHAT
        assert raw.body == CHAT_REPLY
        kwargs = client.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == "gpt-4o"
        assert "response_format" not in kwargs
        system, user = kwargs["messages"]
        assert system["role"] == "system"
        assert "Original text to rewrite" in user["content"]
        assert "Keep names." in user["content"]

    @pytest.mark.asyncio
    async def test_model_hint(self, rewrite_request):
        client = MagicMock()
        client.chat.completions.create = AsyncMock(return_value=CHAT_REPLY)
        provider = OpenAIRewriteProvider(api_key="sk-test", client=client)

        await provider.invoke(rewrite_request.with_options(model="GPT-4o-mini"))
        assert client.chat.completions.create.call_args.kwargs["model"] == "gpt-4o-mini"

        await provider.invoke(rewrite_request.with_options(model="claude-3-haiku"))
        assert client.chat.completions.create.call_args.kwargs["model"] == "gpt-4o"


class TestAnthropicRewrite:
    @pytest.mark.asyncio
    async def test_system_prompt_is_separate(self, rewrite_request):
        reply = {"content": [{"type": "text", "text": "Rewritten."}]}
        client = MagicMock()
        client.messages.create = AsyncMock(return_value=reply)
        provider = AnthropicRewriteProvider(api_key="sk-ant", client=client)

        raw = await provider.invoke(rewrite_request)

        assert raw.shape is ResponseShape.ANTHROPIC_MESSAGES
        kwargs = client.messages.create.call_args.kwargs
        assert kwargs["system"].startswith("You are an expert text transformation assistant")
        assert [m["role"] for m in kwargs["messages"]] == ["user"]
        assert kwargs["model"] == "claude-sonnet-4-20250514"


class TestDeepSeekRewrite:
    @pytest.mark.asyncio
    async def test_posts_chat_completions(self, rewrite_request):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["auth"] = request.headers["authorization"]
            seen["payload"] = json.loads(request.content)
            return httpx.Response(200, json=CHAT_REPLY)

        provider = DeepSeekRewriteProvider(api_key="ds-key", http_client=mock_client(handler))
        raw = await provider.invoke(rewrite_request.with_options(model="deepseek-reasoner"))

        assert seen["url"] == "https://api.deepseek.com/chat/completions"
        assert seen["auth"] == "Bearer ds-key"
        assert seen["payload"]["model"] == "deepseek-reasoner"
        assert seen["payload"]["stream"] is False
        assert raw.body == CHAT_REPLY

    @pytest.mark.asyncio
    async def test_http_errors_propagate(self, rewrite_request):
        provider = DeepSeekRewriteProvider(
            api_key="ds-key",
            http_client=mock_client(lambda request: httpx.Response(503)),
        )
        with pytest.raises(httpx.HTTPStatusError):
            await provider.invoke(rewrite_request)


# =============================================================================
# Detect
# =============================================================================


class TestChatDetectors:
    @pytest.mark.asyncio
    async def test_openai_asks_for_json(self, detect_request):
        client = MagicMock()
        client.chat.completions.create = AsyncMock(return_value=CHAT_REPLY)
        provider = OpenAIDetectProvider(api_key="sk-test", client=client)

        await provider.invoke(detect_request)

        kwargs = client.chat.completions.create.call_args.kwargs
        assert kwargs["response_format"] == {"type": "json_object"}
        assert kwargs["temperature"] == 0.0
        assert detect_request.text in kwargs["messages"][1]["content"]

    @pytest.mark.asyncio
    async def test_anthropic_detector(self, detect_request):
        client = MagicMock()
        client.messages.create = AsyncMock(return_value={"content": []})
        provider = AnthropicDetectProvider(api_key="sk-ant", client=client)

        raw = await provider.invoke(detect_request)

        assert raw.provider == "anthropic"
        assert raw.shape is ResponseShape.ANTHROPIC_MESSAGES
        assert client.messages.create.call_args.kwargs["max_tokens"] == 600

    @pytest.mark.asyncio
    async def test_perplexity_skips_json_mode(self, detect_request):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["payload"] = json.loads(request.content)
            return httpx.Response(200, json=CHAT_REPLY)

        provider = PerplexityDetectProvider(api_key="pplx", http_client=mock_client(handler))
        await provider.invoke(detect_request)

        assert seen["payload"]["model"] == "sonar"
        assert "response_format" not in seen["payload"]


class TestGPTZero:
    @pytest.mark.asyncio
    async def test_predict_text(self, detect_request):
        reply = {"documents": [{"completely_generated_prob": 0.93, "overall_burstiness": 12.0}]}
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["path"] = request.url.path
            seen["key"] = request.headers["x-api-key"]
            seen["payload"] = json.loads(request.content)
            return httpx.Response(200, json=reply)

        provider = GPTZeroDetectProvider(api_key="gz-key", http_client=mock_client(handler))
        raw = await provider.invoke(detect_request)

        assert seen["path"] == "/v2/predict/text"
        assert seen["key"] == "gz-key"
        assert seen["payload"]["document"] == detect_request.text
        assert raw.shape is ResponseShape.GPTZERO

        result = ResponseAssembler().assemble("gptzero", raw, Capability.DETECT, detect_request)
        assert result.detection.is_ai_generated

    @pytest.mark.asyncio
    async def test_aclose_releases_client(self):
        provider = GPTZeroDetectProvider(api_key="gz-key", http_client=mock_client(lambda r: httpx.Response(200)))
        await provider.aclose()
        assert provider._http is None


# =============================================================================
# Transcribe
# =============================================================================


class TestWhisper:
    @pytest.mark.asyncio
    async def test_uploads_named_file(self, audio_request):
        client = MagicMock()
        client.audio.transcriptions.create = AsyncMock(return_value={"text": "hi", "language": "english"})
        provider = WhisperSTTProvider(api_key="sk-test", client=client)

        raw = await provider.invoke(audio_request.with_options(language="en"))

        assert raw.shape is ResponseShape.WHISPER
        kwargs = client.audio.transcriptions.create.call_args.kwargs
        assert kwargs["file"].name == "audio.ogg"
        assert kwargs["response_format"] == "verbose_json"
        assert kwargs["language"] == "en"


class TestDeepgram:
    @pytest.mark.asyncio
    async def test_transcribe_file(self, audio_request, sample_audio_bytes):
        reply = {"results": {"channels": [{"alternatives": [{"transcript": "hi", "confidence": 0.9}]}]}}
        client = MagicMock()
        transcribe_file = AsyncMock(return_value=reply)
        client.listen.asyncrest.v.return_value.transcribe_file = transcribe_file
        provider = DeepgramSTTProvider(api_key="dg-key", client=client)

        raw = await provider.invoke(audio_request)

        assert raw.shape is ResponseShape.DEEPGRAM
        assert raw.body == reply
        source, options = transcribe_file.call_args.args
        assert source == {"buffer": sample_audio_bytes, "mimetype": "audio/ogg"}
        assert options.model == "nova-2"
        assert options.detect_language is True


class TestGladia:
    @staticmethod
    def handler(statuses, calls):
        def handle(request: httpx.Request) -> httpx.Response:
            calls.append((request.method, request.url.path))
            assert request.headers["x-gladia-key"] == "gl-key"
            if request.url.path == "/v2/upload":
                return httpx.Response(200, json={"audio_url": "https://api.gladia.io/file/1"})
            if request.method == "POST" and request.url.path == "/v2/pre-recorded":
                body = json.loads(request.content)
                assert body["audio_url"] == "https://api.gladia.io/file/1"
                return httpx.Response(
                    201, json={"id": "job-1", "result_url": "https://api.gladia.io/v2/pre-recorded/job-1"}
                )
            status = statuses.pop(0) if len(statuses) > 1 else statuses[0]
            body = {"status": status}
            if status == "done":
                body["result"] = {"transcription": {"full_transcript": "bonjour", "languages": ["fr"]}}
            if status == "error":
                body["error_code"] = 422
            return httpx.Response(200, json=body)

        return handle

    @pytest.mark.asyncio
    async def test_upload_submit_poll(self, audio_request):
        calls = []
        provider = GladiaSTTProvider(
            api_key="gl-key",
            poll_interval=0,
            http_client=mock_client(self.handler(["queued", "processing", "done"], calls)),
        )

        raw = await provider.invoke(audio_request)

        assert calls == [
            ("POST", "/v2/upload"),
            ("POST", "/v2/pre-recorded"),
            ("GET", "/v2/pre-recorded/job-1"),
            ("GET", "/v2/pre-recorded/job-1"),
            ("GET", "/v2/pre-recorded/job-1"),
        ]
        output = ResponseAssembler().assemble("gladia", raw, Capability.TRANSCRIBE, audio_request).output
        assert output.text == "bonjour"
        assert output.language == "fr"

    @pytest.mark.asyncio
    async def test_error_status(self, audio_request):
        provider = GladiaSTTProvider(
            api_key="gl-key",
            poll_interval=0,
            http_client=mock_client(self.handler(["error"], [])),
        )
        with pytest.raises(ProviderError, match="transcription failed"):
            await provider.invoke(audio_request)

    @pytest.mark.asyncio
    async def test_polls_are_bounded(self, audio_request):
        provider = GladiaSTTProvider(
            api_key="gl-key",
            poll_interval=0,
            max_polls=3,
            http_client=mock_client(self.handler(["processing"], [])),
        )
        with pytest.raises(TransientProviderError, match="after 3 polls"):
            await provider.invoke(audio_request)


class TestAssemblyAI:
    @pytest.mark.asyncio
    async def test_upload_submit_poll(self, audio_request, sample_audio_bytes):
        statuses = ["queued", "completed"]
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            assert request.headers["authorization"] == "aai-key"
            if request.url.path == "/v2/upload":
                seen["upload"] = request.content
                return httpx.Response(200, json={"upload_url": "https://cdn.assemblyai.com/upload/1"})
            if request.url.path == "/v2/transcript":
                seen["submit"] = json.loads(request.content)
                return httpx.Response(200, json={"id": "t-1", "status": "queued"})
            status = statuses.pop(0)
            body = {"id": "t-1", "status": status}
            if status == "completed":
                body.update(text="hello there", language_code="en", confidence=0.97)
            return httpx.Response(200, json=body)

        provider = AssemblyAISTTProvider(api_key="aai-key", poll_interval=0, http_client=mock_client(handler))
        raw = await provider.invoke(audio_request)

        assert seen["upload"] == sample_audio_bytes
        assert seen["submit"]["audio_url"] == "https://cdn.assemblyai.com/upload/1"
        assert seen["submit"]["language_detection"] is True
        output = ResponseAssembler().assemble("assemblyai", raw, Capability.TRANSCRIBE, audio_request).output
        assert output.text == "hello there"
        assert output.confidence == pytest.approx(0.97)

    @pytest.mark.asyncio
    async def test_error_status(self, audio_request):
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path == "/v2/upload":
                return httpx.Response(200, json={"upload_url": "u"})
            if request.url.path == "/v2/transcript":
                return httpx.Response(200, json={"id": "t-2"})
            return httpx.Response(200, json={"status": "error", "error": "unsupported codec"})

        provider = AssemblyAISTTProvider(api_key="aai-key", poll_interval=0, http_client=mock_client(handler))
        with pytest.raises(ProviderError, match="unsupported codec"):
            await provider.invoke(audio_request)
