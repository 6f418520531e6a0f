from __future__ import annotations

from copy_agent.constants import Severity, ViolationKind
from copy_agent.core.draft_validator import (
    DraftConstraints,
    DraftValidator,
    format_violations_for_prompt,
    validate_draft,
)
from copy_agent.core.tokenizer import RegexTokenizer
from copy_agent.schemas.artifacts import BeatSheet
from tests.helpers import CLEAN_FINAL, SLOPPY_FINAL, sample_beatsheet


def _kinds(result) -> list[ViolationKind]:
    return [item.kind for item in result.violations]


class TestRegexTokenizer:
    def test_sentences_split_on_terminal_punctuation(self) -> None:
        tokenizer = RegexTokenizer()
        assert tokenizer.sentences("One fact. Two facts! Three facts? Four") == [
            "One fact.",
            "Two facts!",
            "Three facts?",
            "Four",
        ]

    def test_text_without_boundary_is_one_sentence(self) -> None:
        tokenizer = RegexTokenizer()
        assert tokenizer.sentences("Acme closes books in 3 days") == ["Acme closes books in 3 days"]
        assert tokenizer.sentences("") == []

    def test_paragraphs_split_on_blank_lines(self) -> None:
        tokenizer = RegexTokenizer()
        assert tokenizer.paragraphs("First.\n\nSecond.\n\n\n\nThird.") == ["First.", "Second.", "Third."]

    def test_words_split_on_whitespace(self) -> None:
        assert RegexTokenizer().words("  Close   the books ") == ["Close", "the", "books"]


def test_generic_copy_fails_with_forbidden_words() -> None:
    result = validate_draft(SLOPPY_FINAL, "website")

    assert result.is_valid is False
    flagged = [item.details for item in result.violations if item.kind == ViolationKind.FORBIDDEN_WORD]
    for word in ("synergy", "empower", "potential"):
        assert any(f'"{word}"' in details for details in flagged)
    assert result.score <= 55


def test_specific_short_sentences_pass_length_and_specificity() -> None:
    text = "Revenue doubled. The team shipped 12 features. Clients reported a 40% drop in support tickets."
    constraints = DraftConstraints(max_sentence_words=20, specific_detail_every_n_sentences=2)

    result = DraftValidator().validate(text, "website", constraints)

    assert ViolationKind.SENTENCE_TOO_LONG not in _kinds(result)
    assert ViolationKind.MISSING_SPECIFICITY not in _kinds(result)
    assert result.is_valid is True


def test_clean_copy_is_valid_with_full_score() -> None:
    result = validate_draft(CLEAN_FINAL, "website")
    assert result.is_valid is True
    assert result.violations == []
    assert result.score == 100


def test_validation_is_deterministic() -> None:
    validator = DraftValidator()
    first = validator.validate(SLOPPY_FINAL, "email")
    second = validator.validate(SLOPPY_FINAL, "email")
    assert first == second


def test_em_dashes_produce_a_single_violation() -> None:
    result = validate_draft("Acme closes books in 3 days — every month — for 40 firms.", "website")
    dash_violations = [item for item in result.violations if item.kind == ViolationKind.EM_DASH]
    assert len(dash_violations) == 1
    assert dash_violations[0].severity == Severity.ERROR


def test_long_sentence_is_reported_with_its_position() -> None:
    long_sentence = " ".join(["Acme"] + ["closes"] * 20) + "."
    result = validate_draft(f"Acme has 3 offices. {long_sentence}", "website")

    too_long = [item for item in result.violations if item.kind == ViolationKind.SENTENCE_TOO_LONG]
    assert len(too_long) == 1
    assert too_long[0].location == "Sentence 2"
    assert "21 words but max is 20" in too_long[0].details


def test_adjective_stacking_before_generic_noun() -> None:
    result = validate_draft("Acme ships a fast, cheap, simple tool for 40 firms.", "website")
    stacked = [item for item in result.violations if item.kind == ViolationKind.ADJECTIVE_STACKING]
    assert len(stacked) == 1
    assert stacked[0].location == 'Found "fast, cheap, simple tool"'


def test_bad_first_word_per_paragraph() -> None:
    text = "Acme closes books in 3 days.\n\nHowever, 40 firms still wait."
    result = validate_draft(text, "website")

    bad_first = [item for item in result.violations if item.kind == ViolationKind.BAD_FIRST_WORD]
    assert len(bad_first) == 1
    assert bad_first[0].location == "Paragraph 2"
    assert 'starts with "however"' in bad_first[0].details


def test_missing_specificity_is_a_warning_only() -> None:
    text = "Our team works hard every single day and cares about the outcome of each task."
    result = validate_draft(text, "website")

    assert _kinds(result) == [ViolationKind.MISSING_SPECIFICITY]
    assert result.is_valid is True
    assert result.score == 95
    assert result.warnings and not result.errors


def test_forbidden_pattern_is_reported() -> None:
    result = validate_draft("Acme allows you to close 3 days sooner.", "website")
    assert ViolationKind.FORBIDDEN_PATTERN in _kinds(result)


def test_extra_forbidden_words_are_merged_without_duplicates() -> None:
    constraints = DraftConstraints(extra_forbidden_words=("guarantee", "Synergy"))
    result = DraftValidator().validate("We guarantee synergy in 3 days.", "website", constraints)

    forbidden = [item for item in result.violations if item.kind == ViolationKind.FORBIDDEN_WORD]
    assert len(forbidden) == 2


def test_constraints_from_beat_sheet() -> None:
    beat_sheet = BeatSheet.model_validate(sample_beatsheet(forbidden_words=["guarantee"]))
    constraints = DraftConstraints.from_beat_sheet(beat_sheet, extra_forbidden=["discount"])

    assert constraints.max_sentence_words == 20
    assert constraints.extra_forbidden_words == ("guarantee", "discount")


def test_score_is_floored_at_zero() -> None:
    text = " ".join(["synergy potential journey leverage empower unlock robust amazing."] * 2)
    assert validate_draft(text, "website").score == 0


def test_feedback_lists_errors_only() -> None:
    result = validate_draft(SLOPPY_FINAL, "website")
    feedback = format_violations_for_prompt(result.violations)

    assert feedback.startswith("YOUR DRAFT VIOLATED THESE RULES:")
    assert "- forbidden_word:" in feedback
    assert "missing_specificity" not in feedback
    assert feedback.endswith("rewrite the sentences properly.")


def test_feedback_is_empty_without_errors() -> None:
    result = validate_draft("Our team works hard every single day and cares about the outcome of each task.", "website")
    assert format_violations_for_prompt(result.violations) == ""


def _beat_sheet_constraints(**writing_constraints) -> DraftConstraints:
    payload = sample_beatsheet()
    payload["writing_constraints"].update(writing_constraints)
    return DraftConstraints.from_beat_sheet(BeatSheet.model_validate(payload))


def test_beat_sheet_cannot_loosen_channel_sentence_limit() -> None:
    constraints = _beat_sheet_constraints(max_sentence_words=40)
    sentence = " ".join(["Acme"] + ["closes"] * 29) + "."

    result = DraftValidator().validate(sentence, "email", constraints)

    too_long = [item for item in result.violations if item.kind == ViolationKind.SENTENCE_TOO_LONG]
    assert len(too_long) == 1
    assert "30 words but max is 15" in too_long[0].details
    assert result.is_valid is False


def test_tighter_limits_still_apply() -> None:
    result = DraftValidator().validate(
        "Acme Ledger closes your books in 3 days.", "website", DraftConstraints(max_sentence_words=5)
    )
    assert ViolationKind.SENTENCE_TOO_LONG in _kinds(result)


def test_beat_sheet_forbidden_patterns_are_enforced() -> None:
    constraints = _beat_sheet_constraints(forbidden_patterns=["close(s)? the books", "(unclosed"])
    assert len(constraints.extra_forbidden_patterns) == 1

    result = DraftValidator().validate("Acme closes the books in 3 days.", "website", constraints)

    patterns = [item for item in result.violations if item.kind == ViolationKind.FORBIDDEN_PATTERN]
    assert len(patterns) == 1
    assert patterns[0].location == 'Found "closes the books"'
    assert result.is_valid is False
