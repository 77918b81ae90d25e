"""
Configuration Schemas for Switchboard.

Security:
    Provider API keys use SecretStr to prevent accidental logging
    of credentials. Access the value with `.get_secret_value()`.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, SecretStr, field_validator

from switchboard.orchestration.types import Capability

PROVIDER_KEYS = (
    "openai",
    "anthropic",
    "perplexity",
    "deepseek",
    "gladia",
    "deepgram",
    "assemblyai",
    "gptzero",
)


def _split_csv(value: Any) -> Any:
    if isinstance(value, str):
        return [item.strip() for item in value.split(",") if item.strip()]
    return value


class AppSettings(BaseModel):
    """
    Application settings model.

    Built once at startup (see switchboard.app.dependencies.get_settings);
    nothing else reads the environment.
    """

    # Service identity
    service_name: str = "switchboard"
    environment: str = "development"
    debug: bool = False
    log_level: str = "INFO"
    cors_origins: list[str] = Field(default_factory=lambda: ["*"])

    # Provider API keys (SecretStr prevents accidental logging)
    openai_api_key: SecretStr | None = None
    anthropic_api_key: SecretStr | None = None
    perplexity_api_key: SecretStr | None = None
    deepseek_api_key: SecretStr | None = None
    gladia_api_key: SecretStr | None = None
    deepgram_api_key: SecretStr | None = None
    assemblyai_api_key: SecretStr | None = None
    gptzero_api_key: SecretStr | None = None

    # Default fallback chains (provider ids, in order)
    rewrite_chain: list[str] = Field(
        default_factory=lambda: ["openai", "anthropic", "deepseek", "perplexity"]
    )
    transcribe_chain: list[str] = Field(
        default_factory=lambda: ["gladia", "whisper", "deepgram", "assemblyai"]
    )
    detect_chain: list[str] = Field(
        default_factory=lambda: ["gptzero", "openai", "anthropic", "perplexity"]
    )

    # Orchestration
    provider_timeout_seconds: float = Field(20.0, gt=0, description="Per provider call bound")
    expose_attempt_trace: bool = Field(True, description="Include attempts in error bodies")

    # Input limits
    min_detect_chars: int = Field(50, ge=1)
    max_text_chars: int = Field(200_000, ge=1)
    max_audio_bytes: int = Field(20 * 1024 * 1024, ge=1)

    # Streaming sessions
    batch_threshold: int = Field(2, ge=1, description="Chunks buffered before a batch is scheduled")
    debounce_seconds: float = Field(0.1, ge=0)
    silence_seconds: float = Field(2.0, gt=0)

    @field_validator("cors_origins", mode="before")
    @classmethod
    def _parse_origins(cls, value: Any) -> Any:
        return _split_csv(value)

    @field_validator("rewrite_chain", "transcribe_chain", "detect_chain", mode="before")
    @classmethod
    def _parse_chain(cls, value: Any) -> Any:
        value = _split_csv(value)
        if isinstance(value, list):
            return [str(name).strip().lower() for name in value]
        return value

    @field_validator(*(f"{name}_api_key" for name in PROVIDER_KEYS), mode="before")
    @classmethod
    def _blank_key_is_none(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    def api_key(self, provider: str) -> str:
        """Secret value for a provider key ("" when unset)."""
        secret: SecretStr | None = getattr(self, f"{provider}_api_key")
        return secret.get_secret_value() if secret is not None else ""

    def has_key(self, provider: str) -> bool:
        return bool(self.api_key(provider))

    def default_chains(self) -> dict[Capability, list[str]]:
        return {
            Capability.REWRITE: list(self.rewrite_chain),
            Capability.TRANSCRIBE: list(self.transcribe_chain),
            Capability.DETECT: list(self.detect_chain),
        }


__all__ = [
    "PROVIDER_KEYS",
    "AppSettings",
]
