"""
Provider Adapter Protocol for Switchboard.

Every adapter performs exactly one capability against one external
service and returns the provider's reply untouched, wrapped in a
RawResponse tagged with its shape. Mapping the reply to a canonical
result is the Response Assembler's job.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

import httpx

if TYPE_CHECKING:
    from switchboard.orchestration.types import Capability, CapabilityRequest


# Transport-level bound; the orchestrator applies its own per-call timeout on top.
DEFAULT_HTTP_TIMEOUT = httpx.Timeout(30.0, connect=10.0)


class ResponseShape(str, Enum):
    """Known reply layouts understood by the assembler."""

    OPENAI_CHAT = "openai_chat"
    ANTHROPIC_MESSAGES = "anthropic_messages"
    WHISPER = "whisper"
    DEEPGRAM = "deepgram"
    GLADIA = "gladia"
    ASSEMBLYAI = "assemblyai"
    GPTZERO = "gptzero"


@dataclass(frozen=True, slots=True)
class RawResponse:
    """
    A provider reply before normalization.

    Attributes:
        provider: Provider id that produced the reply
        shape: Layout of body
        body: Decoded JSON body (dict) as returned by the provider
    """

    provider: str
    shape: ResponseShape
    body: Any


@runtime_checkable
class ProviderAdapter(Protocol):
    """
    Protocol for capability adapters.

    Implementations must provide:
    - name: Provider identifier (matches the registry descriptor)
    - capability: The single capability this adapter performs
    - invoke(): Call the provider and return its raw reply

    Adapters raise on any failure; they never return partial results.
    """

    @property
    def name(self) -> str:
        ...

    @property
    def capability(self) -> Capability:
        ...

    async def invoke(self, request: CapabilityRequest) -> RawResponse:
        ...


class BaseProviderAdapter(ABC):
    """Base class for adapter implementations."""

    @property
    @abstractmethod
    def name(self) -> str:
        pass

    @property
    @abstractmethod
    def capability(self) -> Capability:
        pass

    @abstractmethod
    async def invoke(self, request: CapabilityRequest) -> RawResponse:
        pass

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name='{self.name}', capability='{self.capability.value}')"


class HTTPProviderMixin:
    """
    Lazily created httpx.AsyncClient shared by one adapter instance.

    A client can be injected (tests use httpx.MockTransport); otherwise
    one is created on first use with an explicit timeout.
    """

    _http: httpx.AsyncClient | None = None
    _timeout: httpx.Timeout = DEFAULT_HTTP_TIMEOUT

    def _init_http(
        self,
        http_client: httpx.AsyncClient | None = None,
        timeout: httpx.Timeout | float | None = None,
    ) -> None:
        self._http = http_client
        if timeout is not None:
            self._timeout = timeout if isinstance(timeout, httpx.Timeout) else httpx.Timeout(timeout)

    def _get_http(self) -> httpx.AsyncClient:
        if self._http is None:
            self._http = httpx.AsyncClient(timeout=self._timeout)
        return self._http

    async def aclose(self) -> None:
        if self._http is not None:
            await self._http.aclose()
            self._http = None


def sdk_dump(response: Any) -> Any:
    """Convert an SDK response object (pydantic or dataclass-json) to a dict."""
    for attr in ("model_dump", "to_dict"):
        method = getattr(response, attr, None)
        if callable(method):
            return method()
    return response


__all__ = [
    "DEFAULT_HTTP_TIMEOUT",
    "BaseProviderAdapter",
    "HTTPProviderMixin",
    "ProviderAdapter",
    "RawResponse",
    "ResponseShape",
    "sdk_dump",
]
