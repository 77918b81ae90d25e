"""
Request and response bodies for the HTTP API.

Field names on the wire are camelCase; Python attributes are snake_case.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ApiModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class TransformRequest(ApiModel):
    text: str
    instructions: str | None = None
    preferred_provider: str | None = Field(None, alias="preferredProvider")
    presets: list[str] | str | None = None
    style_text: str | None = Field(None, alias="styleText")
    content_text: str | None = Field(None, alias="contentText")
    model: str | None = None

    def options(self) -> dict[str, Any]:
        return self.model_dump(exclude={"text"}, exclude_none=True)


class TransformResponse(ApiModel):
    text: str
    provider: str
    retried: bool


class TranscribeResponse(ApiModel):
    text: str
    engine: str
    retried: bool = False


class DetectRequest(ApiModel):
    text: str
    provider: str | None = None


class DetectResponse(ApiModel):
    probability: float
    is_ai_generated: bool = Field(alias="isAIGenerated")
    human_likelihood: str = Field(alias="humanLikelihood")
    burstiness: float | None = None
    assessment: str | None = None
    provider: str


class StatusResponse(ApiModel):
    connected: bool
    providers: dict[str, dict[str, bool]]


class ErrorResponse(ApiModel):
    error: str
    attempts: list[dict[str, Any]] | None = None


__all__ = [
    "DetectRequest",
    "DetectResponse",
    "ErrorResponse",
    "StatusResponse",
    "TranscribeResponse",
    "TransformRequest",
    "TransformResponse",
]
