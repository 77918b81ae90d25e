"""
Tests for streaming transcription sessions.
"""

import asyncio
import base64
import json

import pytest

from switchboard.orchestration import Capability, FallbackOrchestrator
from switchboard.providers import ProviderDescriptor, ProviderRegistry
from switchboard.providers.base import RawResponse, ResponseShape
from switchboard.realtime import SessionState, TranscriptionSessionManager
from switchboard.realtime.messages import MessageFormatError, parse_client_message


# =============================================================================
# Mock Providers for Testing
# =============================================================================


class MockSTTAdapter:
    """
    Transcribes by echoing the audio bytes as text.

    When a gate is set the call blocks until the gate opens; concurrent
    calls are counted so tests can assert on exclusivity.
    """

    def __init__(self, name: str = "whisper", should_fail: bool = False):
        self._name = name
        self.should_fail = should_fail
        self.gate: asyncio.Event | None = None
        self.audio: list[bytes] = []
        self.active = 0
        self.max_active = 0

    @property
    def name(self) -> str:
        return self._name

    @property
    def capability(self) -> Capability:
        return Capability.TRANSCRIBE

    async def invoke(self, request):
        self.audio.append(request.audio)
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        try:
            if self.gate is not None:
                await self.gate.wait()
            if self.should_fail:
                raise RuntimeError("Mock STT failure")
            text = request.audio.decode()
            return RawResponse(self._name, ResponseShape.WHISPER, {"text": text})
        finally:
            self.active -= 1


class EventSink:
    """Collects events sent to the client."""

    def __init__(self):
        self.events: list[dict] = []

    async def __call__(self, event: dict) -> None:
        self.events.append(event)

    def of_type(self, type_: str) -> list[dict]:
        return [e for e in self.events if e["type"] == type_]

    @property
    def transcripts(self) -> list[tuple[str, bool]]:
        return [(e["text"], e["isFinal"]) for e in self.of_type("transcription")]

    @property
    def statuses(self) -> list[str]:
        return [e["status"] for e in self.of_type("status")]

    @property
    def errors(self) -> list[str]:
        return [e["message"] for e in self.of_type("error")]


def chunk(text: str) -> str:
    return base64.b64encode(text.encode()).decode()


def audio_frame(text: str) -> str:
    return json.dumps({"type": "audio_data", "audioChunk": chunk(text)})


async def settle(seconds: float = 0.02) -> None:
    await asyncio.sleep(seconds)


def make_manager(adapter, ready: bool = True, silence_seconds: float = 5.0):
    registry = ProviderRegistry()
    registry.register(
        ProviderDescriptor(
            adapter.name,
            frozenset({Capability.TRANSCRIBE}),
            aliases=frozenset({"OpenAI Whisper"}),
            credential_check=lambda: ready,
        ),
        adapter,
    )
    registry.seal()
    sink = EventSink()
    manager = TranscriptionSessionManager(
        FallbackOrchestrator(registry, provider_timeout=2.0),
        sink,
        batch_threshold=2,
        debounce_seconds=0.0,
        silence_seconds=silence_seconds,
    )
    return manager, sink


# =============================================================================
# Client messages
# =============================================================================


class TestClientMessages:
    def test_parses_aliases(self):
        start = parse_client_message({"type": "start", "engine": "gladia", "mimeType": "audio/ogg"})
        assert start.engine == "gladia"
        assert start.mime_type == "audio/ogg"

        audio = parse_client_message('{"type": "audio", "audio": "aGk="}')
        assert audio.audio_chunk == "aGk="

    def test_rejects_bad_frames(self):
        with pytest.raises(MessageFormatError, match="Invalid message format"):
            parse_client_message("{not json")
        with pytest.raises(MessageFormatError, match="Invalid message format"):
            parse_client_message('{"type": "audio_data"}')
        with pytest.raises(MessageFormatError, match="Unknown message type: pause"):
            parse_client_message('{"type": "pause"}')


# =============================================================================
# Session lifecycle
# =============================================================================


class TestSessionLifecycle:
    @pytest.mark.asyncio
    async def test_connected_and_start(self):
        manager, sink = make_manager(MockSTTAdapter())

        await manager.connected()
        await manager.handle_message('{"type": "start_transcription", "engine": "OpenAI Whisper"}')

        assert sink.statuses == ["connected", "ready"]
        assert manager.session.state is SessionState.ACTIVE
        assert manager.session.mime_type == "audio/webm"

    @pytest.mark.asyncio
    async def test_start_with_unknown_engine(self):
        manager, sink = make_manager(MockSTTAdapter())

        await manager.handle_message('{"type": "start_transcription", "engine": "Siri"}')

        assert sink.errors == ["Unknown provider 'Siri'"]
        assert manager.session is None

    @pytest.mark.asyncio
    async def test_start_without_ready_provider(self):
        adapter = MockSTTAdapter()
        manager, sink = make_manager(adapter, ready=False)

        await manager.handle_message('{"type": "start_transcription"}')
        await manager.handle_message(audio_frame("a"))
        await manager.handle_message(audio_frame("b"))
        await settle()

        assert sink.errors == ["No transcription provider is configured"]
        assert manager.session.is_closed
        assert adapter.audio == []

    @pytest.mark.asyncio
    async def test_bad_frames_are_reported(self):
        manager, sink = make_manager(MockSTTAdapter())
        await manager.handle_message('{"type": "start_transcription"}')

        await manager.handle_message("not json")
        await manager.handle_message('{"type": "rewind"}')
        await manager.handle_message('{"type": "audio_data", "audioChunk": "***"}')

        assert sink.errors == [
            "Invalid message format",
            "Unknown message type: rewind",
            "Invalid audio data",
        ]
        assert manager.session.is_active

    @pytest.mark.asyncio
    async def test_stop_without_session(self):
        manager, sink = make_manager(MockSTTAdapter())
        await manager.handle_message('{"type": "stop_transcription"}')
        assert sink.statuses == ["stopped"]


# =============================================================================
# Batching
# =============================================================================


class TestBatching:
    @pytest.mark.asyncio
    async def test_batch_after_threshold(self):
        adapter = MockSTTAdapter()
        manager, sink = make_manager(adapter)
        await manager.start()

        await manager.handle_message(audio_frame("hello "))
        await settle()
        assert adapter.audio == []

        await manager.handle_message(audio_frame("world"))
        await settle()

        assert adapter.audio == [b"hello world"]
        assert sink.transcripts == [("hello world", False)]

    @pytest.mark.asyncio
    async def test_one_call_in_flight(self):
        adapter = MockSTTAdapter()
        adapter.gate = asyncio.Event()
        manager, sink = make_manager(adapter)
        await manager.start()

        await manager.receive_audio(chunk("a"))
        await manager.receive_audio(chunk("b"))
        await settle()
        assert manager.session.pending

        await manager.receive_audio(chunk("c"))
        await manager.receive_audio(chunk("d"))
        await settle()
        assert len(adapter.audio) == 1

        adapter.gate.set()
        await settle(0.05)

        assert adapter.max_active == 1
        assert adapter.audio == [b"ab", b"cd"]
        assert sink.transcripts == [("ab", False), ("cd", False)]

    @pytest.mark.asyncio
    async def test_batch_failure_is_swallowed(self):
        adapter = MockSTTAdapter(should_fail=True)
        manager, sink = make_manager(adapter)
        await manager.start()

        await manager.receive_audio(chunk("a"))
        await manager.receive_audio(chunk("b"))
        await settle()

        assert len(adapter.audio) == 1
        assert sink.errors == []
        assert sink.transcripts == []
        assert manager.session.is_active

        adapter.should_fail = False
        await manager.receive_audio(chunk("c"))
        await manager.receive_audio(chunk("d"))
        await settle()
        assert sink.transcripts == [("cd", False)]

    @pytest.mark.asyncio
    async def test_silence_sends_final_once(self):
        adapter = MockSTTAdapter()
        manager, sink = make_manager(adapter, silence_seconds=0.05)
        await manager.start()

        await manager.receive_audio(chunk("so "))
        await manager.receive_audio(chunk("quiet"))
        await settle(0.15)
        await settle(0.15)

        assert sink.transcripts == [("so quiet", False), ("so quiet", True)]
        assert manager.session.finalized

    @pytest.mark.asyncio
    async def test_new_audio_cancels_silence(self):
        adapter = MockSTTAdapter()
        manager, sink = make_manager(adapter, silence_seconds=0.1)
        await manager.start()

        await manager.receive_audio(chunk("a"))
        await manager.receive_audio(chunk("b"))
        await settle(0.03)
        await manager.receive_audio(chunk("c"))
        await manager.receive_audio(chunk("d"))
        await settle(0.3)

        assert sink.transcripts == [("ab", False), ("cd", False), ("cd", True)]

    @pytest.mark.asyncio
    async def test_trailing_chunk_is_transcribed_and_finalized(self):
        """A chunk below the batch threshold is flushed when silence follows."""
        adapter = MockSTTAdapter()
        manager, sink = make_manager(adapter, silence_seconds=0.1)
        await manager.start()

        await manager.receive_audio(chunk("a"))
        await manager.receive_audio(chunk("b"))
        await settle(0.03)
        await manager.receive_audio(chunk("c"))
        await settle(0.3)

        assert adapter.audio == [b"ab", b"c"]
        assert sink.transcripts == [("ab", False), ("c", True)]
        assert manager.session.finalized

    @pytest.mark.asyncio
    async def test_failed_batch_does_not_restart_silence(self):
        adapter = MockSTTAdapter()
        manager, sink = make_manager(adapter, silence_seconds=0.1)
        await manager.start()

        await manager.receive_audio(chunk("a"))
        await manager.receive_audio(chunk("b"))
        await settle()
        adapter.should_fail = True
        await manager.receive_audio(chunk("c"))
        await manager.receive_audio(chunk("d"))
        await settle(0.3)

        assert adapter.audio == [b"ab", b"cd"]
        assert sink.transcripts == [("ab", False)]
        assert manager.session.silence_task is None


# =============================================================================
# Stop and disconnect
# =============================================================================


class TestStop:
    @pytest.mark.asyncio
    async def test_stop_flushes_buffer(self):
        adapter = MockSTTAdapter()
        manager, sink = make_manager(adapter)
        await manager.start()

        await manager.receive_audio(chunk("tail"))
        await manager.handle_message('{"type": "stop_transcription"}')

        assert adapter.audio == [b"tail"]
        assert sink.transcripts == [("tail", True)]
        assert sink.statuses == ["ready", "processing", "stopped"]
        assert manager.session.is_closed

    @pytest.mark.asyncio
    async def test_stop_waits_for_in_flight_call(self):
        adapter = MockSTTAdapter()
        adapter.gate = asyncio.Event()
        manager, sink = make_manager(adapter)
        await manager.start()

        await manager.receive_audio(chunk("a"))
        await manager.receive_audio(chunk("b"))
        await settle()
        await manager.receive_audio(chunk("c"))

        stopping = asyncio.create_task(manager.stop())
        await settle()
        assert not stopping.done()
        assert adapter.audio == [b"ab"]

        adapter.gate.set()
        await asyncio.wait_for(stopping, timeout=1.0)

        assert adapter.max_active == 1
        assert adapter.audio == [b"ab", b"c"]
        assert sink.transcripts == [("ab", False), ("c", True)]
        assert sink.statuses[-1] == "stopped"

    @pytest.mark.asyncio
    async def test_stop_keeps_in_flight_transcript(self):
        adapter = MockSTTAdapter()
        adapter.gate = asyncio.Event()
        manager, sink = make_manager(adapter)
        await manager.start()

        await manager.receive_audio(chunk("first half "))
        await manager.receive_audio(chunk("spoken"))
        await settle()

        stopping = asyncio.create_task(manager.stop())
        await settle()
        adapter.gate.set()
        await asyncio.wait_for(stopping, timeout=1.0)

        assert adapter.audio == [b"first half spoken"]
        assert sink.transcripts == [("first half spoken", False), ("first half spoken", True)]
        assert sink.statuses == ["ready", "processing", "stopped"]
        assert manager.session.is_closed

    @pytest.mark.asyncio
    async def test_disconnect_drops_in_flight_transcript(self):
        adapter = MockSTTAdapter()
        adapter.gate = asyncio.Event()
        manager, sink = make_manager(adapter)
        await manager.start()

        await manager.receive_audio(chunk("a"))
        await manager.receive_audio(chunk("b"))
        await settle()
        manager.disconnect()
        adapter.gate.set()
        await settle(0.05)

        assert adapter.audio == [b"ab"]
        assert sink.transcripts == []

    @pytest.mark.asyncio
    async def test_failed_final_transcription(self):
        adapter = MockSTTAdapter(should_fail=True)
        manager, sink = make_manager(adapter)
        await manager.start()

        await manager.receive_audio(chunk("x"))
        await manager.stop()

        assert sink.errors == ["Failed to transcribe final audio"]
        assert sink.statuses[-1] == "stopped"

    @pytest.mark.asyncio
    async def test_audio_after_stop_is_ignored(self):
        adapter = MockSTTAdapter()
        manager, sink = make_manager(adapter)
        await manager.start()
        await manager.stop()

        await manager.receive_audio(chunk("a"))
        await manager.receive_audio(chunk("b"))
        await settle()

        assert adapter.audio == []

    @pytest.mark.asyncio
    async def test_disconnect_does_not_drain(self):
        adapter = MockSTTAdapter()
        manager, sink = make_manager(adapter, silence_seconds=0.05)
        await manager.start()

        await manager.receive_audio(chunk("left over"))
        manager.disconnect()
        await settle(0.1)

        assert adapter.audio == []
        assert manager.session.is_closed
        assert manager.session.buffer == []
        assert sink.transcripts == []

    @pytest.mark.asyncio
    async def test_new_start_replaces_session(self):
        manager, sink = make_manager(MockSTTAdapter())
        await manager.start()
        first = manager.session

        await manager.start(mime_type="audio/ogg")

        assert first.is_closed
        assert manager.session is not first
        assert manager.session.mime_type == "audio/ogg"
