"""Exception types raised by the generation pipeline."""

from __future__ import annotations

from copy_agent.constants import PipelinePhase


class GenerationError(RuntimeError):
    """The generation service could not be reached or returned an error."""


class StructuralParseError(GenerationError):
    """A response did not match the required output structure, even after repair."""

    def __init__(self, message: str, schema_name: str, raw_text: str = ""):
        super().__init__(message)
        self.schema_name = schema_name
        self.raw_text = raw_text


class PipelineError(RuntimeError):
    """A phase failed fatally; no partial result is surfaced."""

    def __init__(self, message: str, phase: PipelinePhase, cause: BaseException | None = None):
        super().__init__(message)
        self.phase = phase
        self.cause = cause


class TransitionError(ValueError):
    """A transition was requested from a state that has no successor."""
