"""Artifact registry by pipeline phase."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Type

from pydantic import BaseModel

from copy_agent.constants import PipelinePhase

from .artifacts import (
    BeatSheet,
    ChannelPassReport,
    CohesionReport,
    CreativeBrief,
    DraftV0,
    FinalPackage,
    MessageArchitecture,
    RhythmReport,
)


@dataclass(frozen=True)
class PhaseArtifact:
    model: Type[BaseModel]
    field: str
    filename: str


PHASE_ARTIFACTS: dict[PipelinePhase, PhaseArtifact] = {
    PipelinePhase.BRIEF: PhaseArtifact(CreativeBrief, "brief", "brief.json"),
    PipelinePhase.ARCHITECTURE: PhaseArtifact(MessageArchitecture, "architecture", "architecture.json"),
    PipelinePhase.BEATSHEET: PhaseArtifact(BeatSheet, "beatsheet", "beatsheet.json"),
    PipelinePhase.DRAFT_V0: PhaseArtifact(DraftV0, "draft_v0", "draft_v0.json"),
    PipelinePhase.COHESION: PhaseArtifact(CohesionReport, "cohesion", "cohesion.json"),
    PipelinePhase.RHYTHM: PhaseArtifact(RhythmReport, "rhythm", "rhythm.json"),
    PipelinePhase.CHANNEL: PhaseArtifact(ChannelPassReport, "channel_pass", "channel.json"),
    PipelinePhase.FINAL_PACKAGE: PhaseArtifact(FinalPackage, "final_package", "final_package.json"),
}


def parse_phase_result(phase: str | PipelinePhase, payload: dict[str, Any]) -> BaseModel:
    """Validate a stored payload as the artifact its phase produces."""
    try:
        entry = PHASE_ARTIFACTS[PipelinePhase(phase)]
    except (KeyError, ValueError) as exc:
        raise ValueError(f"Phase '{phase}' does not produce an artifact.") from exc
    return entry.model.model_validate(payload)
