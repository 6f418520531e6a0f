"""Deterministic rule checks for generated drafts.

Every check is a pure function of the text and the channel rules, so the same
input always produces the same ``ValidationResult``.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
import re
from typing import Iterable, Sequence

from copy_agent.constants import Channel, Severity, ViolationKind
from copy_agent.core.tokenizer import DEFAULT_TOKENIZER, Tokenizer
from copy_agent.rules.catalog import (
    BAD_FIRST_WORDS,
    GENERIC_NOUNS,
    UNIVERSAL_FORBIDDEN_PATTERNS,
    forbidden_terms,
    get_rules,
)
from copy_agent.schemas.artifacts import BeatSheet, ValidationResult, Violation

logger = logging.getLogger(__name__)

ERROR_PENALTY = 15
WARNING_PENALTY = 5

_ADJECTIVE_STACK = re.compile(
    r"(\w+,\s*\w+,\s*\w+)\s+(" + "|".join(GENERIC_NOUNS) + r")",
    re.IGNORECASE,
)
_DIGITS = re.compile(r"\d+")
_MID_SENTENCE_CAPITAL = re.compile(r"\s[A-Z][a-z]+")
_NON_LETTERS = re.compile(r"[^a-z]")


@dataclass(frozen=True)
class DraftConstraints:
    """Per-call limits. They can only tighten the channel defaults; ``None`` keeps the default."""

    max_sentence_words: int | None = None
    max_adjectives_per_noun: int | None = None
    specific_detail_every_n_sentences: int | None = None
    extra_forbidden_words: tuple[str, ...] = ()
    extra_forbidden_patterns: tuple[re.Pattern[str], ...] = ()

    @classmethod
    def from_beat_sheet(cls, beat_sheet: BeatSheet, extra_forbidden: Iterable[str] = ()) -> "DraftConstraints":
        limits = beat_sheet.writing_constraints
        return cls(
            max_sentence_words=limits.max_sentence_words,
            max_adjectives_per_noun=limits.max_adjectives_per_noun,
            specific_detail_every_n_sentences=limits.specific_detail_every_n_sentences,
            extra_forbidden_words=tuple([*limits.forbidden_words, *extra_forbidden]),
            extra_forbidden_patterns=compile_patterns(limits.forbidden_patterns),
        )


def compile_patterns(sources: Iterable[str]) -> tuple[re.Pattern[str], ...]:
    """Case-insensitive patterns; sources that are not valid regexes are skipped."""
    patterns: list[re.Pattern[str]] = []
    for source in sources:
        if not source or not source.strip():
            continue
        try:
            patterns.append(re.compile(source, re.IGNORECASE))
        except re.error as e:
            logger.warning(f"Skipping invalid forbidden pattern {source!r}: {e}")
    return tuple(patterns)


def _tightest(default: int, override: int | None) -> int:
    return default if override is None else min(default, override)


class DraftValidator:
    def __init__(self, tokenizer: Tokenizer | None = None, specificity_min_chars: int = 50):
        self.tokenizer = tokenizer or DEFAULT_TOKENIZER
        self.specificity_min_chars = specificity_min_chars

    def validate(
        self,
        text: str,
        channel: str | Channel,
        constraints: DraftConstraints | None = None,
    ) -> ValidationResult:
        rules = get_rules(channel)
        constraints = constraints or DraftConstraints()
        max_sentence_words = _tightest(rules.max_sentence_words, constraints.max_sentence_words)
        max_adjectives = _tightest(rules.max_adjectives_per_noun, constraints.max_adjectives_per_noun)
        every_n = _tightest(rules.specific_detail_every_n_sentences, constraints.specific_detail_every_n_sentences)
        words = _dedupe_terms([*forbidden_terms(channel), *constraints.extra_forbidden_words])
        patterns = [*UNIVERSAL_FORBIDDEN_PATTERNS, *constraints.extra_forbidden_patterns]

        sentences = self.tokenizer.sentences(text)
        violations: list[Violation] = []
        violations.extend(check_forbidden_words(text, words))
        violations.extend(check_forbidden_patterns(text, patterns))
        violations.extend(check_em_dashes(text))
        violations.extend(self._check_sentence_lengths(sentences, max_sentence_words))
        violations.extend(check_adjective_stacking(text, max_adjectives))
        violations.extend(self._check_first_words(text))
        violations.extend(self._check_specificity(sentences, every_n))
        return build_result(violations)

    def _check_sentence_lengths(self, sentences: Sequence[str], max_words: int) -> list[Violation]:
        violations: list[Violation] = []
        for index, sentence in enumerate(sentences, start=1):
            count = len(self.tokenizer.words(sentence))
            if count > max_words:
                violations.append(
                    Violation(
                        kind=ViolationKind.SENTENCE_TOO_LONG,
                        location=f"Sentence {index}",
                        details=f'Sentence has {count} words but max is {max_words}: "{sentence[:50]}..."',
                        severity=Severity.ERROR,
                    )
                )
        return violations

    def _check_first_words(self, text: str) -> list[Violation]:
        violations: list[Violation] = []
        for index, paragraph in enumerate(self.tokenizer.paragraphs(text), start=1):
            tokens = self.tokenizer.words(paragraph)
            if not tokens:
                continue
            first = _NON_LETTERS.sub("", tokens[0].lower())
            if first in BAD_FIRST_WORDS:
                violations.append(
                    Violation(
                        kind=ViolationKind.BAD_FIRST_WORD,
                        location=f"Paragraph {index}",
                        details=f'Paragraph starts with "{first}", should start with noun, verb, or imperative.',
                        severity=Severity.ERROR,
                    )
                )
        return violations

    def _check_specificity(self, sentences: Sequence[str], every_n: int) -> list[Violation]:
        violations: list[Violation] = []
        for start in range(0, len(sentences), every_n):
            group = " ".join(sentences[start : start + every_n])
            if _DIGITS.search(group) or _MID_SENTENCE_CAPITAL.search(group):
                continue
            if len(group) <= self.specificity_min_chars:
                continue
            end = min(start + every_n, len(sentences))
            violations.append(
                Violation(
                    kind=ViolationKind.MISSING_SPECIFICITY,
                    location=f"Sentences {start + 1}-{end}",
                    details="This section lacks specific details (numbers or proper nouns). Add concrete evidence.",
                    severity=Severity.WARNING,
                )
            )
        return violations


def _dedupe_terms(terms: Iterable[str]) -> list[str]:
    seen: set[str] = set()
    unique: list[str] = []
    for term in terms:
        key = term.strip().lower()
        if key and key not in seen:
            seen.add(key)
            unique.append(term.strip())
    return unique


def find_forbidden_words(text: str, words: Iterable[str]) -> list[tuple[str, str]]:
    """(term, first match) for every term found as a whole word, case-insensitively."""
    found: list[tuple[str, str]] = []
    for word in words:
        match = re.search(rf"\b{re.escape(word.lower())}\b", text, re.IGNORECASE)
        if match:
            found.append((word, match.group(0)))
    return found


def find_forbidden_patterns(
    text: str, patterns: Iterable[re.Pattern[str]]
) -> list[tuple[re.Pattern[str], str]]:
    found: list[tuple[re.Pattern[str], str]] = []
    for pattern in patterns:
        match = pattern.search(text)
        if match:
            found.append((pattern, match.group(0)))
    return found


def check_forbidden_words(text: str, words: Iterable[str]) -> list[Violation]:
    return [
        Violation(
            kind=ViolationKind.FORBIDDEN_WORD,
            location=f'Found "{matched}"',
            details=f'The word "{word}" is forbidden. Remove or replace it.',
            severity=Severity.ERROR,
        )
        for word, matched in find_forbidden_words(text, words)
    ]


def check_forbidden_patterns(text: str, patterns: Iterable[re.Pattern[str]]) -> list[Violation]:
    return [
        Violation(
            kind=ViolationKind.FORBIDDEN_PATTERN,
            location=f'Found "{matched}"',
            details=f'Pattern "{pattern.pattern}" is forbidden. Rewrite this phrase.',
            severity=Severity.ERROR,
        )
        for pattern, matched in find_forbidden_patterns(text, patterns)
    ]


def check_em_dashes(text: str) -> list[Violation]:
    if "—" not in text and "--" not in text:
        return []
    return [
        Violation(
            kind=ViolationKind.EM_DASH,
            location="Em dash found",
            details="Em dashes (—) are forbidden. Use periods or commas instead.",
            severity=Severity.ERROR,
        )
    ]


def check_adjective_stacking(text: str, max_adjectives: int) -> list[Violation]:
    return [
        Violation(
            kind=ViolationKind.ADJECTIVE_STACKING,
            location=f'Found "{match.group(0)}"',
            details=f"Too many adjectives stacked. Max {max_adjectives} per noun.",
            severity=Severity.ERROR,
        )
        for match in _ADJECTIVE_STACK.finditer(text)
    ]


def build_result(violations: list[Violation]) -> ValidationResult:
    errors = sum(1 for item in violations if item.severity == Severity.ERROR)
    warnings = len(violations) - errors
    score = max(0, 100 - ERROR_PENALTY * errors - WARNING_PENALTY * warnings)
    return ValidationResult(is_valid=errors == 0, violations=violations, score=score)


def validate_draft(
    text: str,
    channel: str | Channel,
    constraints: DraftConstraints | None = None,
    tokenizer: Tokenizer | None = None,
) -> ValidationResult:
    return DraftValidator(tokenizer=tokenizer).validate(text, channel, constraints)


def format_violations_for_prompt(violations: Iterable[Violation]) -> str:
    """Corrective feedback appended to the next generation prompt. Errors only."""
    errors = [item for item in violations if item.severity == Severity.ERROR]
    if not errors:
        return ""
    lines = "\n".join(f"- {item.kind.value}: {item.details}" for item in errors)
    return (
        "YOUR DRAFT VIOLATED THESE RULES:\n\n"
        f"{lines}\n\n"
        "REWRITE THE DRAFT WITHOUT THESE VIOLATIONS. Do not just fix them, rewrite the sentences properly."
    )
