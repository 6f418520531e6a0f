"""LLM SDK clients and rate-limit handling."""

from __future__ import annotations

import logging
import os
import time
from typing import Any, Protocol

from copy_agent.errors import GenerationError
from copy_agent.io.response_parsing import extract_response_text

logger = logging.getLogger(__name__)


class LLMClient(Protocol):
    """Protocol for LLM client abstraction."""

    def create_completion(
        self,
        model: str,
        messages: list[dict[str, str]],
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> tuple[str, Any]:
        """Create a completion. Returns (text, usage)."""
        ...


class OpenAIClient:
    """OpenAI API client wrapper."""

    def __init__(self, api_key: str):
        from openai import OpenAI

        self._client = OpenAI(api_key=api_key)

    def create_completion(
        self,
        model: str,
        messages: list[dict[str, str]],
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> tuple[str, Any]:
        kwargs: dict[str, Any] = {"model": model, "input": messages}
        if temperature is not None:
            kwargs["temperature"] = temperature
        if max_tokens is not None:
            kwargs["max_output_tokens"] = max_tokens
        response = self._client.responses.create(**kwargs)
        text = getattr(response, "output_text", "") or extract_response_text(response)
        usage = getattr(response, "usage", None)
        return text, usage


class AnthropicClient:
    """Anthropic Claude API client wrapper."""

    def __init__(self, api_key: str):
        from anthropic import Anthropic

        self._client = Anthropic(api_key=api_key, timeout=300.0)

    def create_completion(
        self,
        model: str,
        messages: list[dict[str, str]],
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> tuple[str, Any]:
        # Anthropic takes the system prompt separately
        system_content = ""
        chat_messages = []
        for msg in messages:
            if msg["role"] == "system":
                system_content += msg["content"] + "\n"
            else:
                chat_messages.append({"role": msg["role"], "content": msg["content"]})

        if not chat_messages:
            chat_messages = [{"role": "user", "content": "Generate the requested JSON."}]

        kwargs: dict[str, Any] = {
            "model": model,
            "max_tokens": max_tokens or 8192,
            "messages": chat_messages,
        }
        if temperature is not None:
            kwargs["temperature"] = temperature
        if system_content.strip():
            kwargs["system"] = system_content.strip()

        response = self._client.messages.create(**kwargs)
        text = "".join(getattr(block, "text", "") for block in response.content or [])
        return text, response.usage


def create_llm_client(model: str) -> LLMClient:
    """Create the client for a model name, reading the API key from the environment."""
    if model.startswith("claude"):
        api_key = os.environ.get("ANTHROPIC_API_KEY") or os.environ.get("CLAUDE_API_KEY")
        if not api_key:
            raise GenerationError("ANTHROPIC_API_KEY or CLAUDE_API_KEY is required for Claude models.")
        return AnthropicClient(api_key)
    api_key = os.environ.get("OPENAI_API_KEY")
    if not api_key:
        raise GenerationError("OPENAI_API_KEY is required for OpenAI models.")
    return OpenAIClient(api_key)


class CachedClientFactory:
    """One client per provider family, created on first use."""

    def __init__(self) -> None:
        self._clients: dict[str, LLMClient] = {}

    def __call__(self, model: str) -> LLMClient:
        family = "anthropic" if model.startswith("claude") else "openai"
        if family not in self._clients:
            self._clients[family] = create_llm_client(model)
        return self._clients[family]


def create_completion_with_backoff(
    client: LLMClient,
    *,
    model: str,
    messages: list[dict[str, str]],
    max_retries: int,
    temperature: float | None = None,
    max_tokens: int | None = None,
) -> tuple[str, Any]:
    """Create completion with retry logic for rate limits.

    Raises:
        GenerationError: quota exhausted, retries spent, or any other SDK failure.
    """
    delay_s = 2.0
    max_delay_s = 45.0
    attempts = max(0, int(max_retries))

    for attempt in range(attempts + 1):
        try:
            return client.create_completion(model, messages, temperature=temperature, max_tokens=max_tokens)
        except Exception as exc:
            error_type = classify_api_error(exc)
            if error_type == "insufficient_quota":
                raise GenerationError(
                    "API quota exhausted (insufficient_quota/billing). "
                    "Switch key/project or wait for quota reset."
                ) from exc
            if error_type == "rate_limit" and attempt < attempts:
                retry_after = extract_retry_after_seconds(exc)
                sleep_s = retry_after if retry_after is not None else delay_s
                logger.warning(
                    f"Rate limit hit, retrying in {sleep_s:.1f}s "
                    f"(attempt {attempt + 1}/{attempts})."
                )
                time.sleep(max(0.1, sleep_s))
                if retry_after is None:
                    delay_s = min(max_delay_s, delay_s * 2.0)
                continue
            raise GenerationError(f"Generation call to {model} failed: {exc}") from exc
    raise GenerationError("Unreachable rate-limit retry state.")


def classify_api_error(exc: Exception) -> str:
    """Classify API errors from OpenAI or Anthropic."""
    status_code = extract_status_code(exc)
    message = str(exc).casefold()

    if (
        "insufficient_quota" in message
        or "please check your plan and billing details" in message
        or ("quota" in message and "rate limit" not in message)
        or "credit balance is too low" in message
    ):
        return "insufficient_quota"

    if (
        status_code == 429
        or "rate limit" in message
        or "too many requests" in message
        or "rate_limit_error" in message
    ):
        return "rate_limit"

    return "other"


def extract_status_code(exc: Exception) -> int | None:
    status = getattr(exc, "status_code", None)
    if isinstance(status, int):
        return status
    response = getattr(exc, "response", None)
    response_status = getattr(response, "status_code", None)
    if isinstance(response_status, int):
        return response_status
    return None


def extract_retry_after_seconds(exc: Exception) -> float | None:
    response = getattr(exc, "response", None)
    headers = getattr(response, "headers", None)
    if headers is None or not hasattr(headers, "get"):
        return None
    raw = headers.get("retry-after") or headers.get("Retry-After")
    if raw is None:
        return None
    try:
        value = float(str(raw).strip())
    except ValueError:
        return None
    if value <= 0:
        return None
    return value
