"""
HTTP endpoints for one-shot capability requests.

    POST /api/transform   rewrite text through the rewrite chain
    POST /api/transcribe  transcribe an uploaded audio file
    POST /api/detect-ai   score text for AI-generated content
    GET  /api/status      provider readiness per capability
"""
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, File, Form, UploadFile

from switchboard.app.dependencies import get_normalizer, get_orchestrator, get_registry
from switchboard.orchestration import (
    Capability,
    FallbackOrchestrator,
    RequestNormalizer,
)
from switchboard.providers import ProviderRegistry

from .schemas import (
    DetectRequest,
    DetectResponse,
    StatusResponse,
    TranscribeResponse,
    TransformRequest,
    TransformResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["capabilities"])


@router.post("/transform", response_model=TransformResponse, response_model_by_alias=True)
async def transform(
    body: TransformRequest,
    normalizer: RequestNormalizer = Depends(get_normalizer),
    orchestrator: FallbackOrchestrator = Depends(get_orchestrator),
) -> TransformResponse:
    """Rewrite text, falling back across rewrite providers."""
    request = normalizer.normalize(Capability.REWRITE, body.text, body.options())
    result = await orchestrator.execute(request)
    return TransformResponse(text=result.text, provider=result.provider, retried=result.retried)


@router.post("/transcribe", response_model=TranscribeResponse, response_model_by_alias=True)
async def transcribe(
    audio: UploadFile = File(...),
    engine: str | None = Form(None),
    normalizer: RequestNormalizer = Depends(get_normalizer),
    orchestrator: FallbackOrchestrator = Depends(get_orchestrator),
) -> TranscribeResponse:
    """
    Transcribe an uploaded audio file.

    `engine` pins a transcription provider (id or display name such as
    "OpenAI Whisper") to the head of the chain.
    """
    # One byte over the limit is enough for the normalizer to reject it
    data = await audio.read(normalizer.max_audio_bytes + 1)
    options = {
        "preferred_provider": engine,
        "mime_type": audio.content_type or "audio/webm",
    }
    request = normalizer.normalize(Capability.TRANSCRIBE, data, options)
    result = await orchestrator.execute(request)
    return TranscribeResponse(text=result.text, engine=result.provider, retried=result.retried)


@router.post("/detect-ai", response_model=DetectResponse, response_model_by_alias=True)
async def detect_ai(
    body: DetectRequest,
    normalizer: RequestNormalizer = Depends(get_normalizer),
    orchestrator: FallbackOrchestrator = Depends(get_orchestrator),
) -> DetectResponse:
    """Score text for AI-generated content."""
    request = normalizer.normalize(
        Capability.DETECT, body.text, {"preferred_provider": body.provider}
    )
    result = await orchestrator.execute(request)
    detection = result.detection
    return DetectResponse(
        probability=detection.probability,
        is_ai_generated=detection.is_ai_generated,
        human_likelihood=detection.human_likelihood,
        burstiness=detection.burstiness,
        assessment=detection.assessment,
        provider=result.provider,
    )


@router.get("/status", response_model=StatusResponse)
async def status(registry: ProviderRegistry = Depends(get_registry)) -> StatusResponse:
    """Credential readiness of every provider, per capability."""
    providers = registry.list_providers()
    connected = any(ready for by_name in providers.values() for ready in by_name.values())
    return StatusResponse(connected=connected, providers=providers)


__all__ = ["router"]
