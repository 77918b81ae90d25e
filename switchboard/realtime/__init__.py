"""
Switchboard Realtime

Per-connection streaming transcription over WebSocket.
"""

from .manager import TranscriptionSessionManager
from .messages import (
    MessageFormatError,
    error_event,
    parse_client_message,
    status_event,
    transcription_event,
)
from .session import SessionState, TranscriptionSession

__all__ = [
    "MessageFormatError",
    "SessionState",
    "TranscriptionSession",
    "TranscriptionSessionManager",
    "error_event",
    "parse_client_message",
    "status_event",
    "transcription_event",
]
