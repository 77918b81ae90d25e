"""
Chat-model plumbing shared by rewrite and detect adapters.

Three transports produce the two chat reply shapes the assembler knows:

- OpenAIChatMixin: official openai SDK -> openai_chat
- AnthropicChatMixin: official anthropic SDK -> anthropic_messages
- CompatibleChatMixin: OpenAI-compatible REST API over httpx
  (DeepSeek, Perplexity) -> openai_chat
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from .base import HTTPProviderMixin, sdk_dump


class MessageRole(str, Enum):
    """Role of a message in the conversation."""

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


@dataclass(frozen=True)
class Message:
    """
    A message in a chat completion request.

    Attributes:
        role: Role of the message sender
        content: Text content of the message
    """

    role: MessageRole
    content: str

    def to_dict(self) -> dict[str, Any]:
        return {"role": self.role.value, "content": self.content}

    @classmethod
    def system(cls, content: str) -> Message:
        """Create a system message."""
        return cls(role=MessageRole.SYSTEM, content=content)

    @classmethod
    def user(cls, content: str) -> Message:
        """Create a user message."""
        return cls(role=MessageRole.USER, content=content)


@dataclass(frozen=True)
class ChatConfig:
    """
    Sampling settings for one chat call.

    Attributes:
        model: Model identifier
        temperature: Sampling temperature
        max_tokens: Maximum tokens to generate
        json_mode: Ask for a JSON object reply where the API supports it
    """

    model: str
    temperature: float = 0.7
    max_tokens: int = 4000
    json_mode: bool = False


class ModelHintMixin:
    """
    Resolves a caller's target-model hint.

    The hint is used only when it names a model of this provider's
    family; otherwise the adapter's default model applies.
    """

    model_prefixes: tuple[str, ...] = ()
    _model: str = ""

    def resolve_model(self, hint: str | None) -> str:
        if hint and hint.lower().startswith(self.model_prefixes):
            return hint.strip().lower()
        return self._model


class OpenAIChatMixin(ModelHintMixin):
    """Chat completions through the openai SDK."""

    model_prefixes = ("gpt-", "o1", "o3", "o4", "chatgpt-")

    _api_key: str
    _organization: str | None = None
    _client: Any = None

    def _get_client(self):
        """Lazy initialization of OpenAI client."""
        if self._client is None:
            from openai import AsyncOpenAI

            self._client = AsyncOpenAI(
                api_key=self._api_key,
                organization=self._organization,
                max_retries=0,
            )
        return self._client

    async def _chat(self, messages: list[Message], config: ChatConfig) -> dict[str, Any]:
        params: dict[str, Any] = {
            "model": config.model,
            "messages": [m.to_dict() for m in messages],
            "temperature": config.temperature,
            "max_tokens": config.max_tokens,
        }
        if config.json_mode:
            params["response_format"] = {"type": "json_object"}

        response = await self._get_client().chat.completions.create(**params)
        return sdk_dump(response)


class AnthropicChatMixin(ModelHintMixin):
    """Messages API through the anthropic SDK."""

    model_prefixes = ("claude",)

    _api_key: str
    _client: Any = None

    def _get_client(self):
        """Lazy initialization of Anthropic client."""
        if self._client is None:
            from anthropic import AsyncAnthropic

            self._client = AsyncAnthropic(api_key=self._api_key, max_retries=0)
        return self._client

    async def _chat(self, messages: list[Message], config: ChatConfig) -> dict[str, Any]:
        # Anthropic takes the system prompt separately
        system_prompt = ""
        conversation = []
        for msg in messages:
            if msg.role is MessageRole.SYSTEM:
                system_prompt = msg.content
            else:
                conversation.append(msg.to_dict())

        response = await self._get_client().messages.create(
            model=config.model,
            max_tokens=config.max_tokens,
            temperature=config.temperature,
            system=system_prompt,
            messages=conversation,
        )
        return sdk_dump(response)


class CompatibleChatMixin(HTTPProviderMixin, ModelHintMixin):
    """OpenAI-compatible /chat/completions endpoint over httpx."""

    base_url: str = ""
    supports_json_mode: bool = False

    _api_key: str

    async def _chat(self, messages: list[Message], config: ChatConfig) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "model": config.model,
            "messages": [m.to_dict() for m in messages],
            "temperature": config.temperature,
            "max_tokens": config.max_tokens,
            "stream": False,
        }
        if config.json_mode and self.supports_json_mode:
            payload["response_format"] = {"type": "json_object"}

        response = await self._get_http().post(
            f"{self.base_url}/chat/completions",
            headers={
                "Authorization": f"Bearer {self._api_key}",
                "Content-Type": "application/json",
            },
            json=payload,
        )
        response.raise_for_status()
        return response.json()


__all__ = [
    "AnthropicChatMixin",
    "ChatConfig",
    "CompatibleChatMixin",
    "Message",
    "MessageRole",
    "ModelHintMixin",
    "OpenAIChatMixin",
]
