"""
WebSocket endpoint for streaming transcription.
"""
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect

from switchboard.app.dependencies import get_normalizer, get_orchestrator, get_settings
from switchboard.config.schemas import AppSettings
from switchboard.orchestration import FallbackOrchestrator, RequestNormalizer
from switchboard.realtime import TranscriptionSessionManager

logger = logging.getLogger(__name__)

router = APIRouter(tags=["streaming"])


@router.websocket("/ws")
async def transcription_stream(
    websocket: WebSocket,
    settings: AppSettings = Depends(get_settings),
    normalizer: RequestNormalizer = Depends(get_normalizer),
    orchestrator: FallbackOrchestrator = Depends(get_orchestrator),
) -> None:
    """
    One TranscriptionSessionManager per connection.

    Frames are handled strictly in order; timers run as tasks on the
    same event loop.
    """
    await websocket.accept()
    manager = TranscriptionSessionManager(
        orchestrator,
        websocket.send_json,
        normalizer=normalizer,
        batch_threshold=settings.batch_threshold,
        debounce_seconds=settings.debounce_seconds,
        silence_seconds=settings.silence_seconds,
    )
    logger.info("WebSocket client connected")
    await manager.connected()

    try:
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                break
            frame = message.get("text")
            if frame is None:
                frame = message.get("bytes")
            if frame is not None:
                await manager.handle_message(frame)
    except WebSocketDisconnect:
        pass
    finally:
        manager.disconnect()
        logger.info("WebSocket client disconnected")


__all__ = ["router"]
