"""
WebSocket message schemas for streaming transcription.

Client -> server:
    {"type": "start_transcription", "engine"?: str, "mimeType"?: str}   (alias "start")
    {"type": "audio_data", "audioChunk": <base64>}                       (alias "audio", field "audio")
    {"type": "stop_transcription"}                                      (alias "stop")

Server -> client:
    {"type": "status", "status": str, "message"?: str}
    {"type": "transcription", "text": str, "isFinal": bool}
    {"type": "error", "message": str}
"""

from __future__ import annotations

import json
from typing import Any, Literal, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

INVALID_FORMAT = "Invalid message format"


class MessageFormatError(ValueError):
    """Client message could not be parsed or is not a known type."""


# =============================================================================
# Client messages
# =============================================================================


class StartMessage(BaseModel):
    model_config = ConfigDict(extra="ignore")

    type: Literal["start_transcription", "start"]
    engine: str | None = None
    mime_type: str | None = Field(None, validation_alias=AliasChoices("mimeType", "mime_type"))


class AudioMessage(BaseModel):
    model_config = ConfigDict(extra="ignore")

    type: Literal["audio_data", "audio"]
    audio_chunk: str = Field(..., validation_alias=AliasChoices("audioChunk", "audio"))


class StopMessage(BaseModel):
    model_config = ConfigDict(extra="ignore")

    type: Literal["stop_transcription", "stop"]


ClientMessage = Union[StartMessage, AudioMessage, StopMessage]

_MESSAGE_TYPES: dict[str, type[BaseModel]] = {
    "start_transcription": StartMessage,
    "start": StartMessage,
    "audio_data": AudioMessage,
    "audio": AudioMessage,
    "stop_transcription": StopMessage,
    "stop": StopMessage,
}


def parse_client_message(raw: str | bytes | dict[str, Any]) -> ClientMessage:
    """
    Parse one client frame.

    Raises:
        MessageFormatError: On malformed JSON, a missing field or an unknown type
    """
    if isinstance(raw, (str, bytes)):
        try:
            data = json.loads(raw)
        except (json.JSONDecodeError, UnicodeDecodeError):
            raise MessageFormatError(INVALID_FORMAT) from None
    else:
        data = raw

    if not isinstance(data, dict) or not isinstance(data.get("type"), str):
        raise MessageFormatError(INVALID_FORMAT)

    model = _MESSAGE_TYPES.get(data["type"])
    if model is None:
        raise MessageFormatError(f"Unknown message type: {data['type']}")

    try:
        return model.model_validate(data)
    except PydanticValidationError:
        raise MessageFormatError(INVALID_FORMAT) from None


# =============================================================================
# Server events
# =============================================================================


class ServerEvent(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class StatusEvent(ServerEvent):
    type: Literal["status"] = "status"
    status: str
    message: str | None = None


class TranscriptionEvent(ServerEvent):
    type: Literal["transcription"] = "transcription"
    text: str
    is_final: bool = Field(False, alias="isFinal")


class ErrorEvent(ServerEvent):
    type: Literal["error"] = "error"
    message: str


def status_event(status: str, message: str | None = None) -> dict[str, Any]:
    return StatusEvent(status=status, message=message).to_wire()


def transcription_event(text: str, is_final: bool) -> dict[str, Any]:
    return TranscriptionEvent(text=text, is_final=is_final).to_wire()


def error_event(message: str) -> dict[str, Any]:
    return ErrorEvent(message=message).to_wire()


__all__ = [
    "AudioMessage",
    "ClientMessage",
    "INVALID_FORMAT",
    "MessageFormatError",
    "StartMessage",
    "StopMessage",
    "error_event",
    "parse_client_message",
    "status_event",
    "transcription_event",
]
