"""Run state model and file-based run persistence."""

from __future__ import annotations

from datetime import datetime, timezone
import json
from pathlib import Path
from typing import Any
from uuid import uuid4

from pydantic import BaseModel, Field

from copy_agent.constants import PipelinePhase
from copy_agent.io.json_io import dump_canonical_json, dump_model, load_json
from copy_agent.rules.campaigns import CampaignType
from copy_agent.schemas.artifacts import (
    BeatSheet,
    ChannelPassReport,
    CohesionReport,
    CreativeBrief,
    DomainProfile,
    DraftV0,
    FactCheckResult,
    FactInventory,
    FinalPackage,
    MessageArchitecture,
    RhythmReport,
    TaskSpec,
    ValidationResult,
)
from copy_agent.schemas.registry import PHASE_ARTIFACTS


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def build_run_id() -> str:
    stamp = datetime.now(timezone.utc).strftime("%Y%m%d-%H%M%S")
    return f"run-{stamp}-{str(uuid4())[:8]}"


class PipelineState(BaseModel):
    """Everything one generation request has produced so far.

    Transitions build a new state with ``model_copy``; artifacts already in a
    state are never edited.
    """

    run_id: str
    task_spec: TaskSpec
    phase: PipelinePhase = PipelinePhase.BRIEF
    created_at: str = Field(default_factory=utc_now_iso)

    campaign_type: CampaignType | None = None
    fact_inventory: FactInventory | None = None
    domain_profile: DomainProfile | None = None

    brief: CreativeBrief | None = None
    architecture: MessageArchitecture | None = None
    beatsheet: BeatSheet | None = None
    draft_v0: DraftV0 | None = None
    cohesion: CohesionReport | None = None
    rhythm: RhythmReport | None = None
    channel_pass: ChannelPassReport | None = None
    final_package: FinalPackage | None = None

    validation: ValidationResult | None = None
    attempts: int = 0
    best_effort: bool = False
    fact_check: FactCheckResult | None = None
    error: str | None = None

    def artifacts(self) -> dict[str, BaseModel]:
        """Produced artifacts keyed by phase name, in pipeline order."""
        produced: dict[str, BaseModel] = {}
        for phase, entry in PHASE_ARTIFACTS.items():
            value = getattr(self, entry.field)
            if value is not None:
                produced[phase.value] = value
        return produced


class RunStore:
    """Persists runs under ``<base_dir>/runs/<run_id>/``."""

    def __init__(self, base_dir: Path):
        self.base_dir = Path(base_dir)

    def run_dir(self, run_id: str) -> Path:
        return self.base_dir / "runs" / run_id

    def ensure_layout(self, run_id: str) -> Path:
        path = self.run_dir(run_id)
        (path / "transcripts").mkdir(parents=True, exist_ok=True)
        (path / "events.jsonl").touch(exist_ok=True)
        return path

    def save_state(self, state: PipelineState) -> Path:
        path = self.run_dir(state.run_id) / "state.json"
        dump_canonical_json(path, state.model_dump(mode="json"))
        return path

    def load_state(self, run_id: str) -> PipelineState:
        return PipelineState.model_validate(load_json(self.run_dir(run_id) / "state.json"))

    def save_artifact(self, run_id: str, phase: PipelinePhase, artifact: BaseModel) -> Path:
        path = self.run_dir(run_id) / PHASE_ARTIFACTS[phase].filename
        dump_model(path, artifact)
        return path

    def append_event(self, run_id: str, event_type: str, payload: dict[str, Any]) -> None:
        append_event(self.run_dir(run_id), event_type, payload)

    def read_events(self, run_id: str) -> list[dict[str, Any]]:
        events_path = self.run_dir(run_id) / "events.jsonl"
        if not events_path.exists():
            return []
        lines = events_path.read_text(encoding="utf-8").splitlines()
        return [json.loads(line) for line in lines if line.strip()]


def append_event(path: Path, event_type: str, payload: dict[str, Any]) -> None:
    line = {
        "at": utc_now_iso(),
        "event": event_type,
        "payload": payload,
    }
    path.mkdir(parents=True, exist_ok=True)
    events_path = path / "events.jsonl"
    with events_path.open("a", encoding="utf-8") as handle:
        handle.write(json.dumps(line, ensure_ascii=True, sort_keys=True) + "\n")
