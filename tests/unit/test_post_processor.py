from __future__ import annotations

import pytest

from copy_agent.core.post_processor import (
    clean_artifacts,
    fix_dashes,
    fix_exclamations,
    post_process,
    post_process_package,
)
from copy_agent.schemas.artifacts import FinalPackage
from tests.helpers import sample_final_package


def test_spaced_em_dashes_become_commas() -> None:
    assert post_process("Fast — reliable — simple.") == "Fast, reliable, simple."


def test_dash_before_period_is_dropped() -> None:
    assert fix_dashes("Closed in 3 days—.") == "Closed in 3 days."


def test_double_hyphen_is_treated_as_a_dash() -> None:
    assert fix_dashes("Fast -- reliable") == "Fast, reliable"


def test_only_last_exclamation_survives() -> None:
    assert fix_exclamations("Wow! Fast! Done!") == "Wow. Fast. Done!"
    assert fix_exclamations("Done!") == "Done!"


def test_templated_openers_and_closers_are_removed() -> None:
    assert clean_artifacts("Let me explain how it works. Acme closes books.") == "Acme closes books."
    assert clean_artifacts("Acme closes books. Happy closing!") == "Acme closes books."


@pytest.mark.parametrize(
    "text",
    [
        "Fast — reliable — simple.",
        "Wow!! Really!!!",
        "A —— B -- C --- D —.",
        "Let me tell you something. Here's the thing: it works — mostly!",
        ", , —— ,.",
        "",
    ],
)
def test_post_process_is_idempotent(text: str) -> None:
    once = post_process(text)
    assert post_process(once) == once


def test_package_fields_are_processed_independently() -> None:
    payload = sample_final_package(
        final="Fast — reliable — simple.",
        variants={"direct": "Ship it — now!", "story_led": "", "conversational": "Hi! Hi!"},
    )
    payload["extras"]["headlines"] = ["3 days — not 3 weeks"]
    package = FinalPackage.model_validate(payload)

    cleaned = post_process_package(package)

    assert cleaned.final == "Fast, reliable, simple."
    assert cleaned.variants == {"direct": "Ship it, now!", "conversational": "Hi. Hi!"}
    assert cleaned.extras.headlines == ["3 days, not 3 weeks"]
    assert cleaned.extras.cta_options == ["Book a demo"]
    assert package.final == "Fast — reliable — simple."
    assert post_process_package(cleaned) == cleaned
