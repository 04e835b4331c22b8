"""OpenRouter-backed AI gateway: structured record generation and free text."""
from __future__ import annotations

import asyncio
import json
import time
from typing import Any

import openai

from patentos.config import settings
from patentos.errors import ConfigError, ParseError, TransportError
from patentos.services import logger as log_service


def get_client() -> openai.AsyncOpenAI:
    """Get OpenRouter client via OpenAI-compatible SDK."""
    if not settings.has_credentials:
        raise ConfigError("OPENROUTER_API_KEY is not set.")
    base_url = settings.openrouter_base_url.strip() or "https://openrouter.ai/api/v1"
    return openai.AsyncOpenAI(
        api_key=settings.openrouter_api_key,
        base_url=base_url,
        timeout=settings.llm_timeout_seconds,
    )


def get_model() -> str:
    """Get the active OpenRouter model id."""
    if settings.openrouter_model:
        return settings.openrouter_model
    return settings.default_model


_client: openai.AsyncOpenAI | None = None


def client() -> openai.AsyncOpenAI:
    """Get or create the LLM client."""
    global _client
    if _client is None:
        _client = get_client()
    return _client


def _strip_fences(raw_text: str) -> str:
    text = raw_text.strip()
    if text.startswith("```"):
        parts = text.split("```")
        if len(parts) >= 2:
            text = parts[1]
        if text.startswith("json"):
            text = text[4:]
        text = text.strip()
    return text


def parse_records(raw_text: str, key: str = "patents") -> list[Any]:
    """Pull the record array out of a model reply.

    Accepts ``{"patents": [...]}`` or a bare ``[...]``. The items themselves
    are returned untouched.
    """
    text = _strip_fences(raw_text or "")
    if not text:
        raise ParseError("empty payload")
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ParseError(f"payload is not JSON: {exc.msg}") from exc
    except ValueError as exc:
        # e.g. integer literals past the int string-conversion limit
        raise ParseError(f"payload could not be decoded: {exc}") from exc

    if isinstance(payload, dict):
        payload = payload.get(key)
    if not isinstance(payload, list):
        raise ParseError(f"payload has no '{key}' array")
    return payload


class AIGateway:
    """Thin async wrapper over the chat completions endpoint.

    Transport problems surface as ``TransportError``, unusable JSON as
    ``ParseError``; nothing else escapes.
    """

    def __init__(self, llm: Any | None = None, model: str | None = None):
        self.model = model or get_model()
        self._llm = llm

    @property
    def is_configured(self) -> bool:
        return self._llm is not None or settings.has_credentials

    def _active_client(self) -> Any:
        if self._llm is not None:
            return self._llm
        return client()

    async def _complete(self, caller: str, **kwargs: Any) -> str:
        active_client = self._active_client()
        t0 = time.monotonic()
        try:
            response = await active_client.chat.completions.create(
                model=self.model,
                max_tokens=settings.llm_max_tokens,
                **kwargs,
            )
        except (openai.APIError, asyncio.TimeoutError) as exc:
            elapsed_ms = int((time.monotonic() - t0) * 1000)
            log_service.log_llm_call(
                model=self.model,
                caller=caller,
                duration_ms=elapsed_ms,
                status="error",
                error=f"{type(exc).__name__}: {exc}",
            )
            raise TransportError(str(exc) or type(exc).__name__) from exc

        elapsed_ms = int((time.monotonic() - t0) * 1000)
        usage = getattr(response, "usage", None)
        log_service.log_llm_call(
            model=self.model,
            caller=caller,
            input_tokens=getattr(usage, "prompt_tokens", 0) or 0,
            output_tokens=getattr(usage, "completion_tokens", 0) or 0,
            duration_ms=elapsed_ms,
        )
        choices = getattr(response, "choices", None) or []
        if not choices:
            return ""
        return getattr(choices[0].message, "content", None) or ""

    async def generate_records(
        self,
        prompt: str,
        schema: dict[str, Any],
        *,
        caller: str = "search",
        name: str = "patent_candidates",
    ) -> list[Any]:
        text = await self._complete(
            caller,
            messages=[{"role": "user", "content": prompt}],
            response_format={
                "type": "json_schema",
                "json_schema": {"name": name, "schema": schema},
            },
        )
        return parse_records(text)

    async def generate_text(self, prompt: str, *, caller: str = "enrichment") -> str:
        return await self._complete(
            caller,
            messages=[{"role": "user", "content": prompt}],
        )
