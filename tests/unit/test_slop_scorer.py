from __future__ import annotations

import pytest

from copy_agent.core.slop_scorer import SlopScorer, domain_notes, domain_violations, universal_violations
from copy_agent.prompts import SYSTEM_PROMPTS
from copy_agent.schemas.artifacts import DomainProfile, SlopViolation
from tests.helpers import CLEAN_FINAL, ScriptedLLMClient, make_service


def _profile() -> DomainProfile:
    return DomainProfile(
        industry="accounting",
        sub_niche="outsourced bookkeeping",
        terminology={"terms": ["month-end close", "reconciliation"]},
        forbidden_in_this_niche=["peace of mind"],
        generic_phrases=["trusted partner"],
        good_examples=["We reconcile 14 bank feeds before the 5th."],
        bad_examples=["Your trusted partner for every financial milestone and dream"],
    )


def test_universal_layer_counts_words_and_patterns() -> None:
    violations = universal_violations("We leverage synergy in order to unlock your potential.")

    kinds = [item.kind for item in violations]
    assert kinds.count("universal") == 5
    assert kinds.count("pattern") == 1
    leverage = next(item for item in violations if item.text == "leverage")
    assert leverage.suggestion == "use"


def test_rule_only_score() -> None:
    result = SlopScorer().score("We leverage synergy in order to unlock your potential.")

    assert result.score == 70
    assert result.passed is True
    assert result.external_score is None
    assert "synergy" in result.universal_violations


def test_domain_layer_uses_profile_phrases() -> None:
    text = "Your trusted partner for peace of mind."
    violations = domain_violations(text, _profile())
    assert [item.text for item in violations] == ["peace of mind", "trusted partner"]

    result = SlopScorer().score(text, _profile())
    assert result.domain_violations == ["peace of mind", "trusted partner"]
    assert result.score == 84


def test_bad_example_overlap_is_penalized() -> None:
    text = "A trusted partner for every financial decision in Austin."
    result = SlopScorer().score(text, _profile())

    bad = [item for item in result.violations if item.kind == "bad_example"]
    assert len(bad) == 1
    assert "4/6" in bad[0].reason


def test_low_overlap_is_not_a_bad_example() -> None:
    result = SlopScorer().score("Every financial close in Austin takes 3 days.", _profile())
    assert not [item for item in result.violations if item.kind == "bad_example"]


def test_external_review_is_blended_with_rule_score() -> None:
    client = ScriptedLLMClient(
        replies=[{"score": 40, "issues": [{"text": "closes your books", "reason": "vague", "suggestion": "name the ledger"}]}]
    )
    scorer = SlopScorer(make_service(client))

    result = scorer.score(CLEAN_FINAL)

    assert result.external_score == 40
    assert result.score == 64
    assert result.passed is False
    assert result.violations[-1].text == "closes your books"
    assert client.calls[0]["system"] == SYSTEM_PROMPTS["slop_review"]


def test_external_review_skipped_when_rules_already_fail() -> None:
    client = ScriptedLLMClient()
    scorer = SlopScorer(make_service(client))
    text = "Amazing, incredible, awesome synergy. Leverage the journey to unlock potential. Very seamless, robust."

    result = scorer.score(text)

    assert result.score <= 50
    assert result.external_score is None
    assert client.calls == []


def test_external_review_failure_keeps_rule_score() -> None:
    client = ScriptedLLMClient(replies=[ConnectionError("down")])
    result = SlopScorer(make_service(client)).score(CLEAN_FINAL)

    assert result.score == 100
    assert result.external_score is None


def test_quick_check_never_calls_the_service() -> None:
    client = ScriptedLLMClient()
    scorer = SlopScorer(make_service(client))

    assert scorer.quick_check("Just optimize it. Unlock your team.") == ["optimize", "unlock", "just"]
    assert client.calls == []


def test_fix_slop_without_violations_returns_copy_unchanged() -> None:
    fix = SlopScorer().fix_slop(CLEAN_FINAL, [])
    assert fix.fixed_copy == CLEAN_FINAL
    assert fix.changes_explained == []


def test_fix_slop_requires_service_when_there_is_work() -> None:
    violation = SlopViolation(text="synergy", kind="universal", reason="Generic filler word")
    with pytest.raises(ValueError):
        SlopScorer().fix_slop("Synergy in 3 days.", [violation])


def test_fix_slop_sends_flagged_phrases() -> None:
    client = ScriptedLLMClient(replies=[{"fixed_copy": "Shared ledgers in 3 days.", "changes_explained": ["synergy"]}])
    violation = SlopViolation(text="synergy", kind="universal", reason="Generic filler word", suggestion="cut it")

    fix = SlopScorer(make_service(client)).fix_slop("Synergy in 3 days.", [violation], _profile())

    assert fix.fixed_copy == "Shared ledgers in 3 days."
    assert '- "synergy": Generic filler word (try: cut it)' in client.calls[0]["prompt"]
    assert "Industry: accounting" in client.calls[0]["prompt"]


def test_domain_notes_block() -> None:
    assert domain_notes(None) == ""
    notes = domain_notes(_profile())
    assert notes.startswith("DOMAIN CONTEXT:\nIndustry: accounting")
    assert "Real terminology: month-end close, reconciliation" in notes
