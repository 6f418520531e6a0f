from __future__ import annotations

from collections import deque
import json
from pathlib import Path
import threading
from types import SimpleNamespace
from typing import Any

from copy_agent.automation.generation import GenerationService
from copy_agent.config import RetryLimits, RunConfig
from copy_agent.io.transcript_logger import TranscriptLogger
from copy_agent.prompts import SYSTEM_PROMPTS
from copy_agent.schemas.artifacts import TaskSpec


CLEAN_FINAL = (
    "Acme Ledger closes your books in 3 days.\n\n"
    "Finance teams at 40 firms cut month-end work by half.\n\n"
    "Book a demo today."
)

SLOPPY_FINAL = "We offer unmatched synergy that will empower your potential."


def write_json(path: Path, payload: dict) -> Path:
    path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
    return path


def sample_task_payload(channel: str = "website", context: str = "") -> dict:
    return {
        "channel": channel,
        "audience": {"who": "Finance leads at 20-200 person firms", "skepticism_level": "high"},
        "goal": "Book demos for the close automation product",
        "inputs": {
            "product_or_topic": "Acme Ledger",
            "offer_or_claim_seed": "Close the books in 3 days",
            "proof_material": [
                {"type": "stat", "content": "40 firms cut month-end work by half"},
            ],
            "must_include": ["3 days"],
            "must_avoid": ["discount"],
            "context": context,
        },
        "voice_profile": "plain, confident",
        "length_budget": {"target": 80, "hard_max": 120},
    }


def sample_task(channel: str = "website", context: str = "") -> TaskSpec:
    return TaskSpec.model_validate(sample_task_payload(channel, context))


def sample_brief() -> dict:
    return {
        "single_job": "Month-end close can take 3 days, not 3 weeks",
        "stance": {"we_assert": "Close speed is a process problem", "confidence_level": "high"},
        "proof_lane": "data",
    }


def sample_architecture() -> dict:
    return {
        "primary_claim": "Acme Ledger closes the books in 3 days",
        "supporting_claims": [{"claim": "40 firms cut month-end work by half", "role": "proof"}],
        "proof_plan": [{"supports": "primary_claim", "proof": "40 firms", "proof_type": "stat"}],
    }


def sample_beatsheet(forbidden_words: list[str] | None = None) -> dict:
    return {
        "total_length": 40,
        "beats": [
            {"id": "b1", "function": "hook", "structure": {"max_words": 15}},
            {"id": "b2", "function": "proof", "structure": {"max_words": 30, "required_elements": ["number"]}},
            {"id": "b3", "function": "cta", "structure": {"max_words": 10}},
        ],
        "writing_constraints": {
            "max_sentence_words": 20,
            "forbidden_words": forbidden_words or ["guarantee"],
        },
    }


def sample_final_package(final: str = CLEAN_FINAL, variants: dict[str, str] | None = None) -> dict:
    return {
        "final": final,
        "variants": variants
        if variants is not None
        else {
            "direct": "Acme Ledger closes books in 3 days. Book a demo.",
            "story_led": "Maria used to lose 3 weeks to month-end. Now it takes 3 days.",
            "conversational": "Tired of month-end? 40 firms now close in 3 days.",
        },
        "extras": {"headlines": ["Books closed in 3 days"], "cta_options": ["Book a demo"]},
        "qa": {"no_forbidden_words": True, "contains_concrete_detail": True},
    }


def phase_replies(final_packages: list[dict] | None = None) -> dict[str, list[Any]]:
    """One scripted reply per phase, keyed by generation step."""
    return {
        "brief": [sample_brief()],
        "architecture": [sample_architecture()],
        "beatsheet": [sample_beatsheet()],
        "draft_v0": [{"draft": "Acme Ledger closes books in 3 days.", "beat_trace": [{"beat_id": "b1"}]}],
        "cohesion": [{"draft_v1": "Acme Ledger closes your books in 3 days."}],
        "rhythm": [{"draft_v2": "Acme Ledger closes your books in 3 days. Fast."}],
        "channel": [{"draft_v3": CLEAN_FINAL}],
        "final_package": final_packages or [sample_final_package()],
    }


class ScriptedLLMClient:
    """LLMClient double returning queued replies and recording every call.

    Replies are matched on the system prompt first (``by_step``), then taken
    from the shared ``replies`` queue. Dicts are sent as JSON, exceptions are
    raised. Safe to share between fan-out threads.
    """

    def __init__(self, replies: list[Any] | None = None, by_step: dict[str, list[Any]] | None = None):
        self.replies: deque[Any] = deque(replies or [])
        self.by_system: dict[str, deque[Any]] = {
            SYSTEM_PROMPTS[step]: deque(items) for step, items in (by_step or {}).items()
        }
        self.calls: list[dict[str, Any]] = []
        self._lock = threading.Lock()

    def create_completion(
        self,
        model: str,
        messages: list[dict[str, str]],
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> tuple[str, Any]:
        with self._lock:
            system = messages[0]["content"]
            self.calls.append({"model": model, "system": system, "prompt": messages[-1]["content"]})
            queue = self.by_system.get(system)
            if not queue:
                queue = self.replies
            if not queue:
                raise RuntimeError(f"No scripted reply left for model {model}")
            reply = queue.popleft()
        if isinstance(reply, Exception):
            raise reply
        if isinstance(reply, (dict, list)):
            reply = json.dumps(reply)
        return reply, SimpleNamespace(input_tokens=10, output_tokens=5)

    def calls_for(self, step: str) -> list[dict[str, Any]]:
        system = SYSTEM_PROMPTS[step]
        return [call for call in self.calls if call["system"] == system]


def build_config(**overrides: Any) -> RunConfig:
    config = RunConfig(retry_limits=RetryLimits(rate_limit_retries=0))
    return config.model_copy(update=overrides) if overrides else config


def make_service(
    client: ScriptedLLMClient,
    config: RunConfig | None = None,
    transcript: TranscriptLogger | None = None,
) -> GenerationService:
    return GenerationService(config or build_config(), client_factory=lambda _model: client, transcript=transcript)
