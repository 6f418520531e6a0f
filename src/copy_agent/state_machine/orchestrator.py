"""Sequential phase orchestration for one copy generation request."""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Any, Callable

from pydantic import BaseModel

from copy_agent.automation.generation import GenerationService
from copy_agent.automation.variants import VariantWriter
from copy_agent.config import RunConfig
from copy_agent.constants import PHASE_TRANSITIONS, TERMINAL_PHASES, Channel, PipelinePhase
from copy_agent.core.draft_validator import DraftConstraints, DraftValidator
from copy_agent.core.fact_inventory import FactInventoryEngine, format_constraint
from copy_agent.core.regeneration import RegenerationController
from copy_agent.core.slop_scorer import domain_notes
from copy_agent.errors import GenerationError, PipelineError, TransitionError
from copy_agent.io.json_io import pretty_json
from copy_agent.prompts import (
    SYSTEM_PROMPTS,
    append_context_blocks,
    build_architecture_prompt,
    build_beatsheet_prompt,
    build_brief_prompt,
    build_channel_prompt,
    build_cohesion_prompt,
    build_draft_prompt,
    build_rhythm_prompt,
)
from copy_agent.rules.campaigns import (
    build_through_line,
    campaign_forbidden_terms,
    detect_campaign_type,
    get_campaign,
)
from copy_agent.rules.catalog import get_rules, parse_channel
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
from copy_agent.state_machine.state_store import PipelineState, RunStore, build_run_id

logger = logging.getLogger(__name__)


@dataclass
class PipelineResult:
    run_id: str
    final_package: FinalPackage
    artifacts: dict[str, BaseModel]
    validation: ValidationResult
    best_effort: bool
    attempts: int
    fact_check: FactCheckResult | None = None
    campaign_type: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "run_id": self.run_id,
            "final_package": self.final_package.model_dump(mode="json"),
            "validation": self.validation.model_dump(mode="json"),
            "best_effort": self.best_effort,
            "attempts": self.attempts,
            "fact_check": self.fact_check.model_dump(mode="json") if self.fact_check else None,
            "campaign_type": self.campaign_type,
            "phases": list(self.artifacts),
        }


class PhaseOrchestrator:
    """Runs brief -> ... -> final_package one transition at a time.

    Each phase reads the artifacts of earlier phases and contributes exactly
    one new artifact. Generation failures end the run in ``failed`` and
    surface as a single ``PipelineError``.
    """

    def __init__(
        self,
        service: GenerationService,
        config: RunConfig | None = None,
        store: RunStore | None = None,
        fact_engine: FactInventoryEngine | None = None,
        regeneration: RegenerationController | None = None,
        variant_writer: VariantWriter | None = None,
    ):
        self.service = service
        self.config = config or service.config
        self.store = store
        self.fact_engine = fact_engine or FactInventoryEngine(service)
        self.regeneration = regeneration or RegenerationController(
            service,
            DraftValidator(specificity_min_chars=self.config.thresholds.specificity_min_chars),
            max_attempts=self.config.retry_limits.regeneration_attempts,
        )
        if variant_writer is None and self.config.fanout.variants:
            variant_writer = VariantWriter(service, max_workers=self.config.fanout.max_workers)
        self.variant_writer = variant_writer

        self._handlers: dict[PipelinePhase, Callable[[PipelineState], dict[str, Any]]] = {
            PipelinePhase.BRIEF: self._run_brief,
            PipelinePhase.ARCHITECTURE: self._run_architecture,
            PipelinePhase.BEATSHEET: self._run_beatsheet,
            PipelinePhase.DRAFT_V0: self._run_draft,
            PipelinePhase.COHESION: self._run_cohesion,
            PipelinePhase.RHYTHM: self._run_rhythm,
            PipelinePhase.CHANNEL: self._run_channel,
            PipelinePhase.FINAL_PACKAGE: self._run_final_package,
        }

    def start(
        self,
        task_spec: TaskSpec,
        fact_inventory: FactInventory | None = None,
        domain_profile: DomainProfile | None = None,
        run_id: str | None = None,
    ) -> PipelineState:
        state = PipelineState(
            run_id=run_id or build_run_id(),
            task_spec=task_spec,
            fact_inventory=fact_inventory,
            domain_profile=domain_profile,
        )
        if self.store is not None:
            self.store.ensure_layout(state.run_id)

        if parse_channel(task_spec.channel) == Channel.EMAIL:
            campaign_type = detect_campaign_type(task_spec.context_text())
            if campaign_type is not None:
                logger.info(f"Detected email campaign type: {campaign_type.value}")
                state = state.model_copy(update={"campaign_type": campaign_type})
                self._event(state, "campaign_detected", {"campaign_type": campaign_type.value})

        self._save_state(state)
        return state

    def step(self, state: PipelineState) -> PipelineState:
        """Perform exactly one transition and return the new state."""
        if state.phase in TERMINAL_PHASES:
            raise TransitionError(f"Run {state.run_id} is already {state.phase.value}; nothing to advance.")

        phase = state.phase
        logger.info(f"[{state.run_id}] Starting phase {phase.value}")
        self._event(state, "phase_started", {"phase": phase.value})
        try:
            update = self._handlers[phase](state)
        except GenerationError as exc:
            failed = state.model_copy(update={"phase": PipelinePhase.FAILED, "error": str(exc)})
            logger.error(f"[{state.run_id}] Phase {phase.value} failed: {exc}")
            self._event(failed, "phase_failed", {"phase": phase.value, "error": str(exc)})
            self._save_state(failed)
            raise PipelineError(f"Phase '{phase.value}' failed: {exc}", phase=phase, cause=exc) from exc

        next_state = state.model_copy(update={**update, "phase": PHASE_TRANSITIONS[phase]})
        entry = PHASE_ARTIFACTS[phase]
        if self.store is not None:
            self.store.save_artifact(state.run_id, phase, update[entry.field])
        self._event(next_state, "phase_completed", {"phase": phase.value, "next": next_state.phase.value})
        self._save_state(next_state)
        return next_state

    def run(
        self,
        task_spec: TaskSpec,
        fact_inventory: FactInventory | None = None,
        domain_profile: DomainProfile | None = None,
        run_id: str | None = None,
    ) -> PipelineResult:
        state = self.start(task_spec, fact_inventory, domain_profile, run_id=run_id)
        try:
            while state.phase != PipelinePhase.DONE:
                state = self.step(state)
        finally:
            if self.service.transcript is not None:
                self.service.transcript.save()

        self._event(
            state,
            "run_completed",
            {"best_effort": state.best_effort, "attempts": state.attempts, "score": state.validation.score},
        )
        return PipelineResult(
            run_id=state.run_id,
            final_package=state.final_package,
            artifacts=state.artifacts(),
            validation=state.validation,
            best_effort=state.best_effort,
            attempts=state.attempts,
            fact_check=state.fact_check,
            campaign_type=state.campaign_type.value if state.campaign_type else None,
        )

    # Phase handlers

    def _run_brief(self, state: PipelineState) -> dict[str, Any]:
        task = state.task_spec
        prompt = build_brief_prompt(pretty_json(task), get_rules(task.channel).rules_context(), CreativeBrief)
        return {"brief": self._generate(state, "brief", prompt, CreativeBrief)}

    def _run_architecture(self, state: PipelineState) -> dict[str, Any]:
        prompt = build_architecture_prompt(pretty_json(state.task_spec), pretty_json(state.brief), MessageArchitecture)
        return {"architecture": self._generate(state, "architecture", prompt, MessageArchitecture)}

    def _run_beatsheet(self, state: PipelineState) -> dict[str, Any]:
        task = state.task_spec
        campaign_context = None
        through_line = ""
        if state.campaign_type is not None:
            campaign_context = get_campaign(state.campaign_type).prompt_context()
            through_line = build_through_line(state.campaign_type, _through_line_inputs(task))
        prompt = build_beatsheet_prompt(
            pretty_json(task),
            pretty_json(state.architecture),
            get_rules(task.channel).rules_context(),
            BeatSheet,
            campaign_context=campaign_context,
            through_line=through_line,
        )
        return {"beatsheet": self._generate(state, "beatsheet", prompt, BeatSheet)}

    def _run_draft(self, state: PipelineState) -> dict[str, Any]:
        prompt = build_draft_prompt(pretty_json(state.task_spec), pretty_json(state.beatsheet), DraftV0)
        return {"draft_v0": self._generate(state, "draft_v0", prompt, DraftV0)}

    def _run_cohesion(self, state: PipelineState) -> dict[str, Any]:
        prompt = build_cohesion_prompt(
            pretty_json(state.task_spec),
            pretty_json(state.beatsheet),
            pretty_json(state.draft_v0),
            CohesionReport,
        )
        return {"cohesion": self._generate(state, "cohesion", prompt, CohesionReport)}

    def _run_rhythm(self, state: PipelineState) -> dict[str, Any]:
        prompt = build_rhythm_prompt(
            pretty_json(state.task_spec),
            pretty_json(state.beatsheet),
            state.cohesion.draft_v1,
            RhythmReport,
        )
        return {"rhythm": self._generate(state, "rhythm", prompt, RhythmReport)}

    def _run_channel(self, state: PipelineState) -> dict[str, Any]:
        prompt = build_channel_prompt(
            pretty_json(state.task_spec),
            pretty_json(state.beatsheet),
            state.rhythm.draft_v2,
            parse_channel(state.task_spec.channel).value,
            ChannelPassReport,
        )
        return {"channel_pass": self._generate(state, "channel", prompt, ChannelPassReport)}

    def _run_final_package(self, state: PipelineState) -> dict[str, Any]:
        task = state.task_spec
        extra_forbidden = [*task.inputs.must_avoid]
        if state.campaign_type is not None:
            extra_forbidden.extend(campaign_forbidden_terms(state.campaign_type))
        constraints = DraftConstraints.from_beat_sheet(state.beatsheet, extra_forbidden=extra_forbidden)
        extra_context = "\n\n".join(self._context_blocks(state))

        outcome = self.regeneration.produce_final(
            task,
            state.architecture,
            state.channel_pass.draft_v3,
            constraints=constraints,
            extra_context=extra_context,
        )
        if outcome.best_effort:
            self._event(
                state,
                "final_best_effort",
                {
                    "attempts": outcome.attempts,
                    "violations": len(outcome.validation.violations),
                    "score": outcome.validation.score,
                },
            )

        package = outcome.package
        if self.variant_writer is not None:
            package = self.variant_writer.fill_missing(package, extra_context)

        return {
            "final_package": package,
            "validation": outcome.validation,
            "attempts": outcome.attempts,
            "best_effort": outcome.best_effort,
            "fact_check": self._check_facts(package, state.fact_inventory),
        }

    def _check_facts(self, package: FinalPackage, inventory: FactInventory | None) -> FactCheckResult | None:
        """Advisory only: a failed or negative check never blocks delivery."""
        if inventory is None or not inventory.all_facts_list:
            return None
        try:
            return self.fact_engine.validate_against_inventory(package.final, inventory)
        except GenerationError as e:
            logger.warning(f"Fact check skipped: {e}")
            return None

    # Helpers

    def _generate(self, state: PipelineState, step: str, prompt: str, schema):
        prompt = append_context_blocks(prompt, *self._context_blocks(state))
        return self.service.generate(SYSTEM_PROMPTS[step], prompt, schema, step=step)

    def _context_blocks(self, state: PipelineState) -> list[str]:
        blocks: list[str] = []
        if state.fact_inventory is not None:
            blocks.append(format_constraint(state.fact_inventory))
        notes = domain_notes(state.domain_profile)
        if notes:
            blocks.append(notes)
        return blocks

    def _event(self, state: PipelineState, event_type: str, payload: dict[str, Any]) -> None:
        if self.store is not None:
            self.store.append_event(state.run_id, event_type, payload)

    def _save_state(self, state: PipelineState) -> None:
        if self.store is not None:
            self.store.save_state(state)


def _through_line_inputs(task: TaskSpec) -> dict[str, str]:
    return {
        "company_name": task.inputs.product_or_topic,
        "topic": task.inputs.product_or_topic,
        "launch_problem": task.inputs.offer_or_claim_seed,
    }
