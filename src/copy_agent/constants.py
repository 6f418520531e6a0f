"""Project constants."""

from __future__ import annotations

from enum import StrEnum


class PipelinePhase(StrEnum):
    BRIEF = "brief"
    ARCHITECTURE = "architecture"
    BEATSHEET = "beatsheet"
    DRAFT_V0 = "draft_v0"
    COHESION = "cohesion"
    RHYTHM = "rhythm"
    CHANNEL = "channel"
    FINAL_PACKAGE = "final_package"
    DONE = "done"
    FAILED = "failed"


PHASE_TRANSITIONS: dict[PipelinePhase, PipelinePhase] = {
    PipelinePhase.BRIEF: PipelinePhase.ARCHITECTURE,
    PipelinePhase.ARCHITECTURE: PipelinePhase.BEATSHEET,
    PipelinePhase.BEATSHEET: PipelinePhase.DRAFT_V0,
    PipelinePhase.DRAFT_V0: PipelinePhase.COHESION,
    PipelinePhase.COHESION: PipelinePhase.RHYTHM,
    PipelinePhase.RHYTHM: PipelinePhase.CHANNEL,
    PipelinePhase.CHANNEL: PipelinePhase.FINAL_PACKAGE,
    PipelinePhase.FINAL_PACKAGE: PipelinePhase.DONE,
}


TERMINAL_PHASES = (PipelinePhase.DONE, PipelinePhase.FAILED)


class Channel(StrEnum):
    EMAIL = "email"
    LANDING_PAGE = "landing_page"
    WEBSITE = "website"
    SOCIAL = "social"
    ARTICLE = "article"
    SALES_PAGE = "sales_page"


CHANNEL_ALIASES: dict[str, Channel] = {
    "email_sequence": Channel.EMAIL,
    "landing": Channel.LANDING_PAGE,
    "website_copy": Channel.WEBSITE,
    "social_post": Channel.SOCIAL,
    "blog": Channel.ARTICLE,
    "sales": Channel.SALES_PAGE,
}


class ViolationKind(StrEnum):
    FORBIDDEN_WORD = "forbidden_word"
    FORBIDDEN_PATTERN = "forbidden_pattern"
    EM_DASH = "em_dash"
    SENTENCE_TOO_LONG = "sentence_too_long"
    ADJECTIVE_STACKING = "adjective_stacking"
    BAD_FIRST_WORD = "bad_first_word"
    MISSING_SPECIFICITY = "missing_specificity"


class Severity(StrEnum):
    ERROR = "error"
    WARNING = "warning"


VARIANT_STYLES = ("direct", "story_led", "conversational")


MAX_REGENERATION_ATTEMPTS = 2
