"""Structured generation: prompt in, validated pydantic artifact out."""

from __future__ import annotations

import logging
import time
from typing import Callable, Type, TypeVar

from pydantic import BaseModel, ValidationError

from copy_agent.automation.llm import CachedClientFactory, LLMClient, create_completion_with_backoff
from copy_agent.config import RunConfig
from copy_agent.errors import GenerationError, StructuralParseError
from copy_agent.io.response_parsing import extract_json_object
from copy_agent.io.transcript_logger import TranscriptLogger
from copy_agent.prompts import SYSTEM_PROMPTS, build_repair_prompt, schema_description

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


class GenerationService:
    """Calls the configured model for a step and parses the reply into ``schema``.

    A reply that is not valid JSON for the schema is sent back to the repair
    model up to ``retry_limits.schema_repairs`` times. Transport errors are
    never retried here beyond rate-limit backoff.
    """

    def __init__(
        self,
        config: RunConfig | None = None,
        client_factory: Callable[[str], LLMClient] | None = None,
        transcript: TranscriptLogger | None = None,
    ):
        self.config = config or RunConfig()
        self.client_factory = client_factory or CachedClientFactory()
        self.transcript = transcript

    def generate(self, system: str, prompt: str, schema: Type[ModelT], *, step: str) -> ModelT:
        raw_text = self._call(step, system, prompt, call_type="generate", model_step=step)
        try:
            return _parse(raw_text, schema)
        except (ValueError, ValidationError) as exc:
            last_error: Exception = exc

        repairs = self.config.retry_limits.schema_repairs
        for attempt in range(1, repairs + 1):
            logger.warning(
                f"Step '{step}' returned output that does not match {schema.__name__} "
                f"({_short_error(last_error)}); repair attempt {attempt}/{repairs}."
            )
            repair_prompt = build_repair_prompt(schema_description(schema), raw_text)
            raw_text = self._call(step, SYSTEM_PROMPTS["repair"], repair_prompt, call_type="repair", model_step="repair")
            try:
                return _parse(raw_text, schema)
            except (ValueError, ValidationError) as exc:
                last_error = exc

        raise StructuralParseError(
            f"Step '{step}' did not produce a valid {schema.__name__}: {_short_error(last_error)}",
            schema_name=schema.__name__,
            raw_text=raw_text,
        )

    def _call(self, step: str, system: str, prompt: str, *, call_type: str, model_step: str) -> str:
        settings = self.config.models.for_step(model_step)
        messages = [
            {"role": "system", "content": system},
            {"role": "user", "content": prompt},
        ]
        start_time = time.perf_counter()
        try:
            client = self.client_factory(settings.model)
            text, usage = create_completion_with_backoff(
                client,
                model=settings.model,
                messages=messages,
                max_retries=self.config.retry_limits.rate_limit_retries,
                temperature=settings.temperature,
                max_tokens=settings.max_tokens,
            )
        except GenerationError as exc:
            self._record(call_type, step, settings.model, messages, "", start_time, error=str(exc))
            raise
        self._record(call_type, step, settings.model, messages, text, start_time, usage=usage)
        return text

    def _record(self, call_type, step, model, messages, text, start_time, usage=None, error=None) -> None:
        if self.transcript is None:
            return
        latency_ms = (time.perf_counter() - start_time) * 1000
        self.transcript.record(call_type, step, model, messages, text, latency_ms, usage=usage, error=error)


def _parse(text: str, schema: Type[ModelT]) -> ModelT:
    return schema.model_validate(extract_json_object(text))


def _short_error(exc: Exception) -> str:
    message = str(exc).strip().splitlines()
    return message[0] if message else exc.__class__.__name__
