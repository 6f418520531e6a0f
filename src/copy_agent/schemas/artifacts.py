"""Artifact schemas."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from copy_agent.constants import Severity, ViolationKind


# Task input


class Audience(BaseModel):
    model_config = ConfigDict(frozen=True)

    who: str
    context: str = ""
    skepticism_level: Literal["low", "medium", "high"] = "medium"
    prior_knowledge: str = ""


class ProofItem(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: str = "fact"
    content: str


class TaskInputs(BaseModel):
    model_config = ConfigDict(frozen=True)

    product_or_topic: str
    offer_or_claim_seed: str = ""
    proof_material: tuple[ProofItem, ...] = ()
    must_include: tuple[str, ...] = ()
    must_avoid: tuple[str, ...] = ()
    context: str = ""


class LengthBudget(BaseModel):
    model_config = ConfigDict(frozen=True)

    unit: Literal["words"] = "words"
    target: int = Field(gt=0)
    hard_max: int = Field(gt=0)

    @model_validator(mode="after")
    def validate_bounds(self) -> "LengthBudget":
        if self.target > self.hard_max:
            raise ValueError("length_budget.target must not exceed length_budget.hard_max.")
        return self


class TaskSpec(BaseModel):
    """One generation request. Read-only once built."""

    model_config = ConfigDict(frozen=True)

    channel: str
    audience: Audience
    goal: str
    inputs: TaskInputs
    voice_profile: str = ""
    length_budget: LengthBudget

    def context_text(self) -> str:
        """Free text scanned for campaign markers."""
        parts = [self.goal, self.inputs.context, self.inputs.offer_or_claim_seed, self.audience.context]
        return "\n".join(part for part in parts if part)


# Phase artifacts


class Stance(BaseModel):
    we_assert: str
    we_reject: str = ""
    confidence_level: Literal["low", "medium", "high"] = "medium"


class ReaderModel(BaseModel):
    current_belief: str = ""
    desired_belief: str = ""
    primary_objection: str = ""
    emotional_state: str = ""


ProofLane = Literal["data", "mechanism", "authority", "case", "comparison", "constraint"]


class CreativeBrief(BaseModel):
    reader_model: ReaderModel = Field(default_factory=ReaderModel)
    single_job: str
    stance: Stance
    proof_lane: ProofLane
    nonnegotiables: list[str] = Field(default_factory=list)
    success_criteria: list[str] = Field(default_factory=list)
    risk_notes: list[str] = Field(default_factory=list)
    missing_inputs: list[str] = Field(default_factory=list)
    notes: list[str] = Field(default_factory=list)


class SupportingClaim(BaseModel):
    claim: str
    role: str = ""


class ProofPoint(BaseModel):
    supports: str
    proof: str
    proof_type: str = ""


class ObjectionHandler(BaseModel):
    objection: str
    answer: str


class MessageArchitecture(BaseModel):
    throughline: str = ""
    primary_claim: str
    supporting_claims: list[SupportingClaim] = Field(default_factory=list)
    proof_plan: list[ProofPoint] = Field(default_factory=list)
    objection_plan: list[ObjectionHandler] = Field(default_factory=list)
    ordering: list[str] = Field(default_factory=list)
    allowed_claim_strength: Literal["soft", "moderate", "strong"] = "moderate"


class BeatConstraints(BaseModel):
    max_words: int = Field(gt=0)
    required_elements: list[str] = Field(default_factory=list)
    first_word_types: list[str] = Field(default_factory=list)
    forbidden_in_beat: list[str] = Field(default_factory=list)


class Beat(BaseModel):
    id: str
    function: str
    job: str = ""
    key_points: list[str] = Field(default_factory=list)
    must_echo_terms: list[str] = Field(default_factory=list)
    must_include_from_inputs: list[str] = Field(default_factory=list)
    target_length: int = Field(default=0, ge=0)
    structure: BeatConstraints
    handoff: str = ""


class WritingConstraints(BaseModel):
    max_sentence_words: int | None = Field(default=None, gt=0)
    max_adjectives_per_noun: int | None = Field(default=None, ge=0)
    specific_detail_every_n_sentences: int | None = Field(default=None, gt=0)
    forbidden_words: list[str] = Field(default_factory=list)
    forbidden_patterns: list[str] = Field(default_factory=list)


class BeatSheet(BaseModel):
    total_length: int = Field(default=0, ge=0)
    beats: list[Beat] = Field(min_length=1)
    writing_constraints: WritingConstraints = Field(default_factory=WritingConstraints)
    format_rules: list[str] = Field(default_factory=list)
    forbidden_moves: list[str] = Field(default_factory=list)


class BeatTrace(BaseModel):
    beat_id: str
    excerpt: str = ""


class DraftV0(BaseModel):
    draft: str = Field(min_length=1)
    beat_trace: list[BeatTrace] = Field(default_factory=list)
    self_check: list[str] = Field(default_factory=list)


class CohesionReport(BaseModel):
    issues_found: list[str] = Field(default_factory=list)
    edits_made: list[str] = Field(default_factory=list)
    draft_v1: str = Field(min_length=1)


class SentenceStats(BaseModel):
    avg_words: float = Field(default=0.0, ge=0)
    shortest: int = Field(default=0, ge=0)
    longest: int = Field(default=0, ge=0)


class RhythmReport(BaseModel):
    edits_made: list[str] = Field(default_factory=list)
    sentence_stats: SentenceStats = Field(default_factory=SentenceStats)
    draft_v2: str = Field(min_length=1)


class ChannelPassReport(BaseModel):
    channel_adjustments: list[str] = Field(default_factory=list)
    draft_v3: str = Field(min_length=1)


class Extras(BaseModel):
    email_subject_lines: list[str] = Field(default_factory=list)
    preheaders: list[str] = Field(default_factory=list)
    headlines: list[str] = Field(default_factory=list)
    meta_descriptions: list[str] = Field(default_factory=list)
    cta_options: list[str] = Field(default_factory=list)


class QAChecklist(BaseModel):
    matches_single_job: bool = False
    no_new_claims: bool = False
    no_forbidden_words: bool = False
    contains_concrete_detail: bool = False
    length_ok: bool = False
    no_droning: bool = False
    channel_fit: bool = False


class FinalPackage(BaseModel):
    final: str = Field(min_length=1)
    variants: dict[str, str] = Field(default_factory=dict)
    extras: Extras = Field(default_factory=Extras)
    qa: QAChecklist = Field(default_factory=QAChecklist)
    missing_inputs: list[str] = Field(default_factory=list)
    notes: list[str] = Field(default_factory=list)

    @field_validator("variants")
    @classmethod
    def drop_empty_variants(cls, value: dict[str, str]) -> dict[str, str]:
        return {style: text for style, text in value.items() if text and text.strip()}


class VariantText(BaseModel):
    text: str = Field(min_length=1)


# Validation


class Violation(BaseModel):
    kind: ViolationKind
    location: str
    details: str
    severity: Severity


class ValidationResult(BaseModel):
    is_valid: bool
    violations: list[Violation] = Field(default_factory=list)
    score: int = Field(ge=0, le=100)

    @property
    def errors(self) -> list[Violation]:
        return [item for item in self.violations if item.severity == Severity.ERROR]

    @property
    def warnings(self) -> list[Violation]:
        return [item for item in self.violations if item.severity == Severity.WARNING]


# Fact grounding


class FactInventory(BaseModel):
    model_config = ConfigDict(frozen=True)

    personal: tuple[str, ...] = ()
    credentials: tuple[str, ...] = ()
    specializations: tuple[str, ...] = ()
    achievements: tuple[str, ...] = ()
    location: tuple[str, ...] = ()
    all_facts_list: tuple[str, ...] = ()
    unknown_gaps: tuple[str, ...] = ()
    focus_areas: tuple[str, ...] = ()

    @model_validator(mode="before")
    @classmethod
    def collect_all_facts(cls, data: Any) -> Any:
        if not isinstance(data, dict) or data.get("all_facts_list"):
            return data
        merged: list[str] = []
        for key in ("personal", "credentials", "specializations", "achievements", "location"):
            for fact in data.get(key) or ():
                if fact not in merged:
                    merged.append(fact)
        return {**data, "all_facts_list": merged}


class ClaimIssue(BaseModel):
    claim: str
    issue: str


class FactCheckResponse(BaseModel):
    valid: bool
    violations: list[ClaimIssue] = Field(default_factory=list)


class FactCheckResult(BaseModel):
    valid: bool
    violations: list[str] = Field(default_factory=list)


# Slop scoring


class SlopViolation(BaseModel):
    text: str
    kind: Literal["universal", "domain", "pattern", "bad_example"]
    reason: str
    suggestion: str | None = None


class SlopCheckResult(BaseModel):
    passed: bool
    score: int = Field(ge=0, le=100)
    violations: list[SlopViolation] = Field(default_factory=list)
    universal_violations: list[str] = Field(default_factory=list)
    domain_violations: list[str] = Field(default_factory=list)
    external_score: int | None = None


class SlopIssue(BaseModel):
    text: str
    reason: str
    suggestion: str | None = None


class SlopReview(BaseModel):
    score: int = Field(ge=0, le=100)
    issues: list[SlopIssue] = Field(default_factory=list)


class SlopFix(BaseModel):
    fixed_copy: str = Field(min_length=1)
    changes_explained: list[str] = Field(default_factory=list)


# Domain profile


class Terminology(BaseModel):
    terms: list[str] = Field(default_factory=list)
    phrases: list[str] = Field(default_factory=list)
    claim_patterns: list[str] = Field(default_factory=list)
    proof_patterns: list[str] = Field(default_factory=list)


class VoiceInsights(BaseModel):
    relationship: str = ""
    claim_style: str = ""
    proof_style: str = ""
    tone_notes: list[str] = Field(default_factory=list)


class CompetitorRecord(BaseModel):
    url: str
    name: str = ""
    quality: Literal["good", "average", "poor"] = "average"


class DomainProfile(BaseModel):
    industry: str
    sub_niche: str = ""
    location: str | None = None
    terminology: Terminology = Field(default_factory=Terminology)
    forbidden_in_this_niche: list[str] = Field(default_factory=list)
    generic_phrases: list[str] = Field(default_factory=list)
    voice_insights: VoiceInsights = Field(default_factory=VoiceInsights)
    good_examples: list[str] = Field(default_factory=list)
    bad_examples: list[str] = Field(default_factory=list)
    competitors_analyzed: list[CompetitorRecord] = Field(default_factory=list)


class NicheDiscovery(BaseModel):
    industry: str
    sub_niche: str = ""
    location: str | None = None
    search_queries: list[str] = Field(default_factory=list)
