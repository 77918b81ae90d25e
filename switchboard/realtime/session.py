"""
Streaming transcription session state.

A session lives inside one WebSocket connection and is only touched by
that connection's handler and its own timer tasks, all on one event
loop, so it needs no locking.

    idle --start--> active --stop--> draining --> closed
                      |                             ^
                      +---------disconnect----------+
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING
from uuid import uuid4

if TYPE_CHECKING:
    from switchboard.providers.registry import ProviderDescriptor

logger = logging.getLogger(__name__)


class SessionState(str, Enum):
    IDLE = "idle"
    ACTIVE = "active"
    DRAINING = "draining"
    CLOSED = "closed"


@dataclass
class TranscriptionSession:
    """
    Mutable per-connection transcription state.

    Attributes:
        session_id: Identifier used in logs
        chain: Transcription provider chain selected at start
        mime_type: MIME type of the streamed audio
        state: Lifecycle state
        buffer: Audio chunks received since the last batch
        last_text: Most recent non-empty transcript sent to the client
        finalized: Whether last_text has been sent as final
        in_flight: Task of the transcription call currently running
        debounce_task: Pending debounce timer
        silence_task: Pending silence timer
    """

    chain: list[ProviderDescriptor] = field(default_factory=list)
    mime_type: str = "audio/webm"
    session_id: str = field(default_factory=lambda: uuid4().hex[:12])
    state: SessionState = SessionState.IDLE
    buffer: list[bytes] = field(default_factory=list)
    last_text: str = ""
    finalized: bool = False
    in_flight: asyncio.Task | None = None
    debounce_task: asyncio.Task | None = None
    silence_task: asyncio.Task | None = None

    @property
    def is_active(self) -> bool:
        return self.state is SessionState.ACTIVE

    @property
    def is_closed(self) -> bool:
        return self.state is SessionState.CLOSED

    @property
    def pending(self) -> bool:
        """A transcription call is in flight."""
        return self.in_flight is not None and not self.in_flight.done()

    @property
    def has_ready_provider(self) -> bool:
        return any(d.is_ready() for d in self.chain)

    def activate(self) -> None:
        self.buffer.clear()
        self.last_text = ""
        self.finalized = False
        self.state = SessionState.ACTIVE

    def drain_buffer(self) -> bytes:
        """Concatenate and clear the buffered chunks."""
        audio = b"".join(self.buffer)
        self.buffer.clear()
        return audio

    def cancel_debounce(self) -> None:
        if self.debounce_task is not None and not self.debounce_task.done():
            self.debounce_task.cancel()
        self.debounce_task = None

    def cancel_silence(self) -> None:
        if self.silence_task is not None and not self.silence_task.done():
            self.silence_task.cancel()
        self.silence_task = None

    def cancel_timers(self) -> None:
        self.cancel_debounce()
        self.cancel_silence()

    def close(self) -> None:
        """Release buffer and timers. An in-flight call is left to finish; its result is dropped once closed."""
        if self.state is not SessionState.CLOSED:
            logger.debug(f"Session {self.session_id}: {self.state.value} -> closed")
        self.state = SessionState.CLOSED
        self.cancel_timers()
        self.buffer.clear()


__all__ = [
    "SessionState",
    "TranscriptionSession",
]
