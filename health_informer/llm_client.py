"""OpenAI-compatible LLM client with blocking and streaming completions."""
from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, AsyncIterator, Callable

import httpx
import openai

from health_informer.config import settings
from health_informer.errors import LLMError, ParseError
from health_informer.services import logger as log_service

Message = dict[str, str]


class LLMProvider(str, Enum):
    OPENAI = "openai"
    OPENROUTER = "openrouter"
    OLLAMA = "ollama"


@dataclass
class Usage:
    input_tokens: int = 0
    output_tokens: int = 0


@dataclass
class LLMMessage:
    content: str
    usage: Usage = field(default_factory=Usage)


@dataclass
class Endpoint:
    api_key: str
    base_url: str | None
    model: str


def resolve_endpoint(provider: str | None = None) -> Endpoint:
    """Map the configured provider onto an OpenAI-compatible endpoint."""
    raw = (provider if provider is not None else settings.llm_provider).lower().strip()
    try:
        llm_provider = LLMProvider(raw)
    except ValueError:
        raise ValueError(f"Unsupported LLM_PROVIDER: {raw}") from None

    if llm_provider is LLMProvider.OPENROUTER:
        return Endpoint(
            api_key=settings.openrouter_api_key,
            base_url=settings.openrouter_base_url.strip() or "https://openrouter.ai/api/v1",
            model=settings.openrouter_llm_model,
        )
    if llm_provider is LLMProvider.OLLAMA:
        # Ollama ignores the key but the SDK requires one.
        return Endpoint(
            api_key="ollama",
            base_url=f"{settings.ollama_api_url.rstrip('/')}/v1",
            model=settings.ollama_llm_model,
        )
    return Endpoint(api_key=settings.openai_api_key, base_url=None, model=settings.openai_llm_model)


def _map_usage(usage: Any) -> Usage:
    return Usage(
        input_tokens=getattr(usage, "prompt_tokens", 0) or 0,
        output_tokens=getattr(usage, "completion_tokens", 0) or 0,
    )


class LLMClient:
    """Wraps a hosted chat-completions endpoint.

    `invoke` blocks for the whole reply. `iter_stream` yields text segments in arrival
    order and `stream` is its callback form. Every failure surfaces as `LLMError`;
    text already delivered before a mid-stream failure stays delivered.
    """

    def __init__(self, openai_client: Any | None = None, model: str | None = None):
        if openai_client is None or model is None:
            endpoint = resolve_endpoint()
            if openai_client is None:
                openai_client = openai.AsyncOpenAI(
                    api_key=endpoint.api_key or "missing",
                    base_url=endpoint.base_url,
                    timeout=settings.llm_timeout_seconds,
                )
            model = model or endpoint.model
        self._client = openai_client
        self.model = model

    def _request_kwargs(self, messages: list[Message]) -> dict[str, Any]:
        return {
            "model": self.model,
            "messages": messages,
            "max_tokens": settings.llm_max_tokens,
            "temperature": settings.llm_temperature,
        }

    async def invoke(self, messages: list[Message], *, caller: str = "llm.invoke") -> LLMMessage:
        t0 = time.monotonic()
        try:
            response = await self._client.chat.completions.create(**self._request_kwargs(messages))
        except openai.APIError as exc:
            log_service.log_llm_call(
                model=self.model,
                caller=caller,
                duration_ms=int((time.monotonic() - t0) * 1000),
                status="error",
                error=str(exc),
            )
            raise LLMError(f"Language model request failed: {exc}") from exc

        choices = getattr(response, "choices", None) or []
        if not choices:
            raise ParseError("Language model returned no choices")
        content = getattr(choices[0].message, "content", None) or ""
        usage = _map_usage(getattr(response, "usage", None))
        log_service.log_llm_call(
            model=self.model,
            caller=caller,
            input_tokens=usage.input_tokens,
            output_tokens=usage.output_tokens,
            duration_ms=int((time.monotonic() - t0) * 1000),
        )
        return LLMMessage(content=content, usage=usage)

    async def iter_stream(
        self,
        messages: list[Message],
        *,
        caller: str = "llm.stream",
    ) -> AsyncIterator[str]:
        t0 = time.monotonic()
        usage = Usage()
        stream = None
        try:
            stream = await self._client.chat.completions.create(
                **self._request_kwargs(messages),
                stream=True,
                stream_options={"include_usage": True},
            )
            async for chunk in stream:
                if getattr(chunk, "usage", None):
                    usage = _map_usage(chunk.usage)
                choices = getattr(chunk, "choices", None) or []
                if not choices:
                    continue
                delta = getattr(choices[0], "delta", None)
                text = getattr(delta, "content", None) if delta else None
                if text:
                    yield text
        except (openai.APIError, httpx.HTTPError) as exc:
            log_service.log_llm_call(
                model=self.model,
                caller=caller,
                duration_ms=int((time.monotonic() - t0) * 1000),
                status="error",
                error=str(exc),
            )
            raise LLMError(f"Language model stream failed: {exc}") from exc
        finally:
            if stream is not None:
                await stream.close()

        log_service.log_llm_call(
            model=self.model,
            caller=caller,
            input_tokens=usage.input_tokens,
            output_tokens=usage.output_tokens,
            duration_ms=int((time.monotonic() - t0) * 1000),
        )

    async def stream(
        self,
        messages: list[Message],
        on_chunk: Callable[[str], None],
        *,
        caller: str = "llm.stream",
    ) -> None:
        async for text in self.iter_stream(messages, caller=caller):
            on_chunk(text)


def get_model() -> str:
    """Get the model id of the configured provider."""
    return resolve_endpoint().model


_client: LLMClient | None = None


def client() -> LLMClient:
    """Get or create the LLM client."""
    global _client
    if _client is None:
        _client = LLMClient()
    return _client
