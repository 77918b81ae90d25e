"""
Real-Time Session Manager.

One TranscriptionSessionManager per WebSocket connection. It turns a
stream of base64 audio chunks into debounced transcription batches run
through the Fallback Orchestrator, and emits incremental and final
transcripts back to the client.

Batching rules:
- a batch is scheduled (debounced) once the buffer holds batch_threshold chunks
- at most one transcription call is in flight per session; chunks keep
  accumulating meanwhile and the completed call reschedules if needed
- after silence_seconds without new audio any trailing chunks are
  transcribed and the last transcript is sent once more as final
"""

from __future__ import annotations

import asyncio
import base64
import binascii
import logging
from collections.abc import Awaitable, Callable
from typing import Any

from switchboard.errors import SwitchboardError, ValidationError
from switchboard.orchestration.normalizer import RequestNormalizer
from switchboard.orchestration.orchestrator import FallbackOrchestrator
from switchboard.orchestration.types import Capability, RequestOptions

from .messages import (
    AudioMessage,
    MessageFormatError,
    StartMessage,
    StopMessage,
    error_event,
    parse_client_message,
    status_event,
    transcription_event,
)
from .session import SessionState, TranscriptionSession

logger = logging.getLogger(__name__)


SendFn = Callable[[dict[str, Any]], Awaitable[None]]

DEFAULT_BATCH_THRESHOLD = 2
DEFAULT_DEBOUNCE_SECONDS = 0.1
DEFAULT_SILENCE_SECONDS = 2.0


class TranscriptionSessionManager:
    """
    Drives streaming transcription for one connection.

    Example:
        manager = TranscriptionSessionManager(orchestrator, websocket.send_json)
        await manager.connected()
        async for frame in websocket.iter_text():
            await manager.handle_message(frame)
        manager.disconnect()
    """

    def __init__(
        self,
        orchestrator: FallbackOrchestrator,
        send: SendFn,
        normalizer: RequestNormalizer | None = None,
        batch_threshold: int = DEFAULT_BATCH_THRESHOLD,
        debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS,
        silence_seconds: float = DEFAULT_SILENCE_SECONDS,
    ):
        if batch_threshold < 1:
            raise ValueError("batch_threshold must be >= 1")
        self._orchestrator = orchestrator
        self._send = send
        self._normalizer = normalizer or RequestNormalizer()
        self.batch_threshold = batch_threshold
        self.debounce_seconds = debounce_seconds
        self.silence_seconds = silence_seconds
        self._session: TranscriptionSession | None = None

    @property
    def session(self) -> TranscriptionSession | None:
        return self._session

    # ==================== Connection lifecycle ====================

    async def connected(self) -> None:
        await self._emit(status_event("connected", "WebSocket connection established"))

    async def handle_message(self, raw: str | bytes | dict[str, Any]) -> None:
        """Dispatch one client frame. Never raises for bad input."""
        try:
            message = parse_client_message(raw)
        except MessageFormatError as e:
            logger.debug(f"Rejected client message: {e}")
            await self._emit(error_event(str(e)))
            return

        if isinstance(message, StartMessage):
            await self.start(message.engine, message.mime_type)
        elif isinstance(message, AudioMessage):
            await self.receive_audio(message.audio_chunk)
        elif isinstance(message, StopMessage):
            await self.stop()

    def disconnect(self) -> None:
        """Close immediately; nothing is drained because nothing can be delivered."""
        if self._session is not None:
            self._session.close()

    # ==================== Client operations ====================

    async def start(self, engine: str | None = None, mime_type: str | None = None) -> None:
        if self._session is not None and not self._session.is_closed:
            logger.info(f"Session {self._session.session_id}: replaced by new start")
            self._session.close()
            self._session = None

        try:
            chain = self._orchestrator.registry.providers_for(Capability.TRANSCRIBE, engine)
        except ValidationError as e:
            await self._emit(error_event(str(e)))
            return

        session = TranscriptionSession(chain=chain, mime_type=mime_type or "audio/webm")
        self._session = session

        if not session.has_ready_provider:
            logger.warning(f"Session {session.session_id}: no transcription provider is configured")
            session.close()
            await self._emit(error_event("No transcription provider is configured"))
            return

        session.activate()
        logger.info(
            f"Session {session.session_id}: started "
            f"(chain={[d.name for d in chain]}, mime={session.mime_type})"
        )
        await self._emit(status_event("ready", "Transcription session started"))

    async def receive_audio(self, chunk: str) -> None:
        session = self._session
        if session is None or not session.is_active:
            return

        try:
            audio = base64.b64decode(chunk, validate=True)
        except (binascii.Error, ValueError):
            await self._emit(error_event("Invalid audio data"))
            return
        if not audio:
            return

        session.buffer.append(audio)
        session.cancel_silence()
        if len(session.buffer) >= self.batch_threshold:
            self._schedule_batch(session)
        else:
            self._restart_silence(session)

    async def stop(self) -> None:
        session = self._session
        if session is None or not session.is_active:
            await self._emit(status_event("stopped", "No active transcription session"))
            return

        session.state = SessionState.DRAINING
        session.cancel_timers()

        if session.pending:
            # The in-flight call still emits its transcript while draining
            await session.in_flight

        await self._emit(status_event("processing", "Processing final audio"))

        audio = session.drain_buffer()
        if audio:
            try:
                text = await self._transcribe(session, audio)
            except SwitchboardError as e:
                logger.warning(f"Session {session.session_id}: final transcription failed: {e}")
                await self._emit(error_event("Failed to transcribe final audio"))
            else:
                if text:
                    session.last_text = text
                    session.finalized = True
                    await self._emit(transcription_event(text, is_final=True))
        else:
            await self._finalize(session)

        await self._emit(status_event("stopped", "Transcription session stopped"))
        session.close()
        logger.info(f"Session {session.session_id}: stopped")

    # ==================== Timers ====================

    def _schedule_batch(self, session: TranscriptionSession) -> None:
        session.cancel_debounce()
        session.debounce_task = asyncio.create_task(self._debounce_fire(session))

    async def _debounce_fire(self, session: TranscriptionSession) -> None:
        await asyncio.sleep(self.debounce_seconds)
        session.debounce_task = None
        if not session.is_active or session.pending or not session.buffer:
            return
        session.in_flight = asyncio.create_task(self._run_batch(session))

    def _restart_silence(self, session: TranscriptionSession) -> None:
        session.cancel_silence()
        session.silence_task = asyncio.create_task(self._silence_fire(session))

    async def _silence_fire(self, session: TranscriptionSession) -> None:
        await asyncio.sleep(self.silence_seconds)
        session.silence_task = None
        if not session.is_active or session.pending:
            return
        if session.buffer:
            # Trailing chunks below the batch threshold
            session.cancel_debounce()
            session.in_flight = asyncio.create_task(self._run_batch(session, finalize=True))
            return
        await self._finalize(session)

    async def _finalize(self, session: TranscriptionSession) -> None:
        if session.finalized or not session.last_text:
            return
        session.finalized = True
        await self._emit(transcription_event(session.last_text, is_final=True))

    # ==================== Batches ====================

    async def _run_batch(self, session: TranscriptionSession, finalize: bool = False) -> None:
        """
        Transcribe the buffered audio and emit the result.

        A result is dropped only when the session closed meanwhile. With
        finalize set and no audio arriving during the call, the transcript
        is sent as final instead of incremental.
        """
        audio = session.drain_buffer()
        succeeded = False
        try:
            text = await self._transcribe(session, audio)
            succeeded = True
        except SwitchboardError as e:
            logger.warning(f"Session {session.session_id}: batch transcription failed: {e}")
            text = ""
        except Exception as e:
            logger.error(f"Session {session.session_id}: batch transcription error: {e}", exc_info=True)
            text = ""

        if session.is_closed:
            return

        finalize = finalize and session.is_active and not session.buffer
        if text and text != session.last_text:
            session.last_text = text
            session.finalized = False
            if not finalize:
                await self._emit(transcription_event(text, is_final=False))
        if finalize:
            await self._finalize(session)

        # Completion runs inside the in-flight task; clear it before rescheduling
        session.in_flight = None
        if not session.is_active:
            return
        if (succeeded and session.last_text and not session.finalized) or (
            0 < len(session.buffer) < self.batch_threshold
        ):
            self._restart_silence(session)
        if len(session.buffer) >= self.batch_threshold:
            self._schedule_batch(session)

    async def _transcribe(self, session: TranscriptionSession, audio: bytes) -> str:
        request = self._normalizer.normalize(
            Capability.TRANSCRIBE,
            audio,
            RequestOptions(mime_type=session.mime_type),
        )
        result = await self._orchestrator.execute(request, chain=session.chain)
        return result.text

    async def _emit(self, event: dict[str, Any]) -> bool:
        try:
            await self._send(event)
            return True
        except Exception as e:
            logger.warning(f"Failed to send {event.get('type')} event: {e}")
            return False


__all__ = [
    "DEFAULT_BATCH_THRESHOLD",
    "DEFAULT_DEBOUNCE_SECONDS",
    "DEFAULT_SILENCE_SECONDS",
    "TranscriptionSessionManager",
]
