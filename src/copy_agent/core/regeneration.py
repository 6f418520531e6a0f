"""Bounded validate-and-regenerate loop for the final package."""

from __future__ import annotations

from dataclasses import dataclass
import logging

from copy_agent.automation.generation import GenerationService
from copy_agent.constants import MAX_REGENERATION_ATTEMPTS
from copy_agent.core.draft_validator import DraftConstraints, DraftValidator, format_violations_for_prompt
from copy_agent.core.post_processor import post_process_package
from copy_agent.io.json_io import pretty_json
from copy_agent.prompts import SYSTEM_PROMPTS, append_context_blocks, build_final_package_prompt
from copy_agent.rules.catalog import forbidden_terms
from copy_agent.schemas.artifacts import FinalPackage, MessageArchitecture, TaskSpec, ValidationResult

logger = logging.getLogger(__name__)


@dataclass
class RegenerationOutcome:
    package: FinalPackage
    validation: ValidationResult
    attempts: int
    best_effort: bool


class RegenerationController:
    """Generate, validate, feed violations back, repeat.

    Always returns a package: a validation failure on the last attempt yields
    the last candidate flagged as best effort. Only generation errors escape.
    """

    def __init__(
        self,
        service: GenerationService,
        validator: DraftValidator | None = None,
        max_attempts: int = MAX_REGENERATION_ATTEMPTS,
    ):
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1.")
        self.service = service
        self.validator = validator or DraftValidator()
        self.max_attempts = max_attempts

    def produce_final(
        self,
        task_spec: TaskSpec,
        architecture: MessageArchitecture,
        draft_v3: str,
        *,
        constraints: DraftConstraints | None = None,
        extra_context: str = "",
    ) -> RegenerationOutcome:
        forbidden = [*forbidden_terms(task_spec.channel), *(constraints.extra_forbidden_words if constraints else ())]
        base_prompt = build_final_package_prompt(
            pretty_json(task_spec),
            pretty_json(architecture),
            draft_v3,
            forbidden,
            FinalPackage,
        )
        base_prompt = append_context_blocks(base_prompt, extra_context)

        feedback = ""
        candidate: FinalPackage | None = None
        validation: ValidationResult | None = None
        for attempt in range(1, self.max_attempts + 1):
            prompt = append_context_blocks(base_prompt, feedback)
            candidate = self.service.generate(SYSTEM_PROMPTS["final_package"], prompt, FinalPackage, step="final_package")
            validation = self.validator.validate(candidate.final, task_spec.channel, constraints)

            if validation.is_valid:
                logger.info(f"Final package passed validation on attempt {attempt}")
                return RegenerationOutcome(post_process_package(candidate), validation, attempt, best_effort=False)

            logger.warning(
                f"Final package attempt {attempt} has {len(validation.violations)} violations"
            )
            for violation in validation.violations[:3]:
                logger.warning(f"  - {violation.kind.value}: {violation.details}")

            if attempt < self.max_attempts:
                feedback = format_violations_for_prompt(validation.violations)

        logger.warning("Final package still has violations, returning best effort")
        return RegenerationOutcome(post_process_package(candidate), validation, self.max_attempts, best_effort=True)
