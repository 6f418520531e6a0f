"""Full transcript logging for generation calls - enables debugging and audit."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from pathlib import Path
import threading
from typing import Any

from copy_agent.io.json_io import dump_canonical_json


@dataclass
class LLMCallRecord:
    """Single generation service call."""

    call_type: str  # "generate", "repair"
    step: str
    model: str
    messages: list[dict[str, str]]
    response_text: str
    tokens_prompt: int | None = None
    tokens_completion: int | None = None
    tokens_total: int | None = None
    latency_ms: float = 0.0
    error: str | None = None
    timestamp_utc: str = ""


@dataclass
class TranscriptEntry:
    """All calls made for one step of a run."""

    run_id: str
    step: str
    calls: list[LLMCallRecord] = field(default_factory=list)
    total_tokens: int = 0
    total_latency_ms: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


class TranscriptLogger:
    """Accumulates call records per step and saves them under the run directory.

    Fan-out branches record from worker threads, so mutation goes through a lock.
    """

    def __init__(self, run_id: str, run_path: Path | None = None):
        self.run_id = run_id
        self.run_path = run_path
        self.entries: dict[str, TranscriptEntry] = {}
        self._lock = threading.Lock()

    def record(
        self,
        call_type: str,
        step: str,
        model: str,
        messages: list[dict[str, str]],
        response_text: str,
        latency_ms: float,
        usage: Any | None = None,
        error: str | None = None,
    ) -> LLMCallRecord:
        tokens = self._extract_usage(usage)
        record = LLMCallRecord(
            call_type=call_type,
            step=step,
            model=model,
            messages=messages,
            response_text=response_text,
            tokens_prompt=tokens.get("prompt"),
            tokens_completion=tokens.get("completion"),
            tokens_total=tokens.get("total"),
            latency_ms=latency_ms,
            error=error,
            timestamp_utc=datetime.now(timezone.utc).isoformat(),
        )
        with self._lock:
            entry = self.entries.setdefault(step, TranscriptEntry(run_id=self.run_id, step=step))
            entry.calls.append(record)
            if record.tokens_total:
                entry.total_tokens += record.tokens_total
            entry.total_latency_ms += latency_ms
        return record

    def calls_for(self, step: str) -> list[LLMCallRecord]:
        with self._lock:
            entry = self.entries.get(step)
            return list(entry.calls) if entry else []

    def save(self) -> list[Path]:
        """Write one transcript file per step. No-op without a run directory."""
        if self.run_path is None:
            return []
        transcripts_dir = self.run_path / "transcripts"
        paths: list[Path] = []
        with self._lock:
            for step, entry in self.entries.items():
                path = transcripts_dir / f"{step}.json"
                dump_canonical_json(path, entry.to_dict())
                paths.append(path)
        return paths

    def _extract_usage(self, usage: Any) -> dict[str, int | None]:
        """Token usage from OpenAI or Anthropic usage objects."""
        if usage is None:
            return {"prompt": None, "completion": None, "total": None}

        prompt = getattr(usage, "input_tokens", None) or getattr(usage, "prompt_tokens", None)
        completion = getattr(usage, "output_tokens", None) or getattr(usage, "completion_tokens", None)
        total = getattr(usage, "total_tokens", None)

        if total is None and prompt is not None and completion is not None:
            total = prompt + completion

        return {"prompt": prompt, "completion": completion, "total": total}
