"""Fact allow-list: extraction, prompt constraint, and advisory re-check."""

from __future__ import annotations

import logging

from copy_agent.automation.generation import GenerationService
from copy_agent.prompts import SYSTEM_PROMPTS, build_fact_check_prompt, build_fact_extraction_prompt
from copy_agent.schemas.artifacts import FactCheckResponse, FactCheckResult, FactInventory

logger = logging.getLogger(__name__)

RULE = "=" * 63


def format_constraint(inventory: FactInventory) -> str:
    """Render the allow-list for injection into generation prompts.

    Facts are copied verbatim and nothing else is listed as known.
    """
    facts = "\n".join(f"- {fact}" for fact in inventory.all_facts_list) or "- No specific facts provided"
    gaps = "\n".join(f"- {gap}" for gap in inventory.unknown_gaps) or "- None identified"
    focus = "\n".join(f"- {area}" for area in inventory.focus_areas) or "- General expertise and service"
    return f"""{RULE}
FACT CONSTRAINT - YOU MAY ONLY USE THESE FACTS. DO NOT INVENT ANYTHING.
{RULE}

KNOWN FACTS (use these):
{facts}

GAPS - DO NOT FILL THESE IN OR MAKE UP DATA:
{gaps}

WHEN STATS ARE MISSING, FOCUS ON:
{focus}

CRITICAL:
- Never invent numbers, years, client counts, awards or results.
- Never name clients, locations or credentials that are not listed above.
- If a claim needs a fact that is missing, make the point without it.
{RULE}"""


class FactInventoryEngine:
    def __init__(self, service: GenerationService):
        self.service = service

    def extract(self, user_text: str) -> FactInventory:
        """Best-effort: the model may still over-reach, so callers can re-verify output."""
        if not user_text.strip():
            return FactInventory()
        inventory = self.service.generate(
            SYSTEM_PROMPTS["facts"],
            build_fact_extraction_prompt(user_text, FactInventory),
            FactInventory,
            step="facts",
        )
        logger.info(
            f"Extracted {len(inventory.all_facts_list)} facts, {len(inventory.unknown_gaps)} gaps"
        )
        return inventory

    def format_constraint(self, inventory: FactInventory) -> str:
        return format_constraint(inventory)

    def validate_against_inventory(self, text: str, inventory: FactInventory) -> FactCheckResult:
        """Advisory check. Violations are logged, never raised."""
        response = self.service.generate(
            SYSTEM_PROMPTS["fact_check"],
            build_fact_check_prompt(text, format_constraint(inventory), FactCheckResponse),
            FactCheckResponse,
            step="facts",
        )
        violations = [f'"{item.claim}" - {item.issue}' for item in response.violations]
        for violation in violations:
            logger.warning(f"Unsupported claim: {violation}")
        return FactCheckResult(valid=response.valid and not violations, violations=violations)
