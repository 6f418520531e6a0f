"""Layered generic-language scorer.

Layers run cheapest first: universal word and pattern rules, niche phrases from
a domain profile, similarity to known bad examples, then an optional external
review that is only paid for when the rules have not already failed the copy.
"""

from __future__ import annotations

import logging
import math
import re

from copy_agent.automation.generation import GenerationService
from copy_agent.config import Thresholds
from copy_agent.core.draft_validator import find_forbidden_patterns, find_forbidden_words
from copy_agent.prompts import SYSTEM_PROMPTS, build_slop_fix_prompt, build_slop_review_prompt
from copy_agent.rules.catalog import UNIVERSAL_FORBIDDEN, UNIVERSAL_FORBIDDEN_PATTERNS
from copy_agent.schemas.artifacts import (
    DomainProfile,
    SlopCheckResult,
    SlopFix,
    SlopReview,
    SlopViolation,
)

logger = logging.getLogger(__name__)

UNIVERSAL_PENALTY = 5
DOMAIN_PENALTY = 8
BAD_EXAMPLE_PENALTY = 10

SUGGESTIONS: dict[str, str] = {
    "potential": "name the specific outcome",
    "journey": "describe the actual steps",
    "experience": "name what the reader does or gets",
    "solution": "name the product or the fix",
    "leverage": "use",
    "optimize": "say what gets faster, cheaper or better, and by how much",
    "enhance": "say what changes",
    "empower": "say what the reader can now do",
    "streamline": "say which step disappears",
    "unlock": "say what becomes available",
    "seamless": "say what no longer breaks",
    "robust": "say what it withstands",
    "comprehensive": "list what is covered",
    "amazing": "cut it, or give the number that proves it",
    "just": "cut it",
    "very": "cut it or pick a stronger word",
    "really": "cut it",
    "in order to": "to",
}

_WORDS = re.compile(r"[a-z0-9']+")


class SlopScorer:
    def __init__(self, service: GenerationService | None = None, thresholds: Thresholds | None = None):
        self.service = service
        self.thresholds = thresholds or Thresholds()

    def score(
        self,
        text: str,
        domain_profile: DomainProfile | None = None,
        use_external: bool = True,
    ) -> SlopCheckResult:
        universal = universal_violations(text)
        domain = domain_violations(text, domain_profile) if domain_profile else []
        bad_examples = (
            self._bad_example_violations(text, domain_profile.bad_examples) if domain_profile else []
        )

        violations = [*universal, *domain, *bad_examples]
        score = max(
            0,
            100
            - UNIVERSAL_PENALTY * len(universal)
            - DOMAIN_PENALTY * len(domain)
            - BAD_EXAMPLE_PENALTY * len(bad_examples),
        )

        external_score: int | None = None
        if use_external and self.service is not None and score > self.thresholds.slop_external_opinion_min:
            review = self._external_review(text, domain_profile)
            if review is not None:
                external_score = review.score
                score = math.floor(
                    self.thresholds.slop_rule_weight * score
                    + self.thresholds.slop_external_weight * review.score
                    + 0.5
                )
                seen = {item.text.lower() for item in violations}
                for issue in review.issues:
                    if issue.text.lower() in seen:
                        continue
                    seen.add(issue.text.lower())
                    violations.append(
                        SlopViolation(text=issue.text, kind="pattern", reason=issue.reason, suggestion=issue.suggestion)
                    )

        return SlopCheckResult(
            passed=score >= self.thresholds.slop_pass_score,
            score=score,
            violations=violations,
            universal_violations=[item.text for item in universal],
            domain_violations=[item.text for item in domain],
            external_score=external_score,
        )

    def quick_check(self, text: str) -> list[str]:
        """Universal word hits only; never calls the service."""
        return [item.text for item in universal_violations(text) if item.kind == "universal"]

    def fix_slop(
        self,
        text: str,
        violations: list[SlopViolation],
        domain_profile: DomainProfile | None = None,
    ) -> SlopFix:
        """One corrective rewrite. Callers re-score the result and accept it either way."""
        if not violations:
            return SlopFix(fixed_copy=text, changes_explained=[])
        if self.service is None:
            raise ValueError("fix_slop needs a generation service.")
        flagged = [
            f'"{item.text}": {item.reason}' + (f" (try: {item.suggestion})" if item.suggestion else "")
            for item in violations
        ]
        prompt = build_slop_fix_prompt(text, flagged, _domain_notes(domain_profile), SlopFix)
        return self.service.generate(SYSTEM_PROMPTS["slop_fix"], prompt, SlopFix, step="slop_review")

    def _bad_example_violations(self, text: str, bad_examples: list[str]) -> list[SlopViolation]:
        candidate_words = set(_WORDS.findall(text.lower()))
        violations: list[SlopViolation] = []
        for example in bad_examples:
            significant = [
                word
                for word in _WORDS.findall(example.lower())
                if len(word) >= self.thresholds.bad_example_min_word_len
            ]
            if not significant:
                continue
            matches = sum(1 for word in significant if word in candidate_words)
            overlap = matches / len(significant)
            if overlap > self.thresholds.bad_example_overlap and matches >= self.thresholds.bad_example_min_matches:
                violations.append(
                    SlopViolation(
                        text=example,
                        kind="bad_example",
                        reason=f"Reads like a known generic example ({matches}/{len(significant)} key words shared)",
                    )
                )
        return violations

    def _external_review(self, text: str, domain_profile: DomainProfile | None) -> SlopReview | None:
        prompt = build_slop_review_prompt(text, _domain_notes(domain_profile), SlopReview)
        try:
            return self.service.generate(SYSTEM_PROMPTS["slop_review"], prompt, SlopReview, step="slop_review")
        except Exception as e:
            logger.warning(f"External slop review failed, keeping rule score: {e}")
            return None


def universal_violations(text: str) -> list[SlopViolation]:
    violations = [
        SlopViolation(
            text=word,
            kind="universal",
            reason="Generic filler word",
            suggestion=SUGGESTIONS.get(word),
        )
        for word, _matched in find_forbidden_words(text, UNIVERSAL_FORBIDDEN)
    ]
    violations.extend(
        SlopViolation(text=matched, kind="pattern", reason="Formulaic phrasing")
        for _pattern, matched in find_forbidden_patterns(text, UNIVERSAL_FORBIDDEN_PATTERNS)
    )
    return violations


def domain_violations(text: str, profile: DomainProfile) -> list[SlopViolation]:
    lowered = text.lower()
    violations: list[SlopViolation] = []
    for phrase in profile.forbidden_in_this_niche:
        if phrase and phrase.lower() in lowered:
            violations.append(
                SlopViolation(text=phrase, kind="domain", reason=f"Overused in {profile.industry} copy")
            )
    for phrase in profile.generic_phrases:
        if phrase and phrase.lower() in lowered:
            violations.append(
                SlopViolation(text=phrase, kind="domain", reason="Generic phrase any competitor could use")
            )
    return violations


def _domain_notes(profile: DomainProfile | None) -> str:
    if profile is None:
        return ""
    lines = [f"Industry: {profile.industry}"]
    if profile.sub_niche:
        lines.append(f"Sub-niche: {profile.sub_niche}")
    if profile.terminology.terms:
        lines.append(f"Real terminology: {', '.join(profile.terminology.terms[:15])}")
    if profile.forbidden_in_this_niche:
        lines.append(f"Overused here: {', '.join(profile.forbidden_in_this_niche[:15])}")
    if profile.good_examples:
        lines.append("Good examples:\n" + "\n".join(f"- {item}" for item in profile.good_examples[:3]))
    return "\n".join(lines)


def domain_notes(profile: DomainProfile | None) -> str:
    """Domain context block shared with generation prompts."""
    notes = _domain_notes(profile)
    return f"DOMAIN CONTEXT:\n{notes}" if notes else ""
