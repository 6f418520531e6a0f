from __future__ import annotations

from copy_agent.automation.variants import VariantWriter
from copy_agent.constants import VARIANT_STYLES
from copy_agent.schemas.artifacts import FinalPackage
from tests.helpers import CLEAN_FINAL, ScriptedLLMClient, make_service, sample_final_package


def test_generates_one_variant_per_style() -> None:
    client = ScriptedLLMClient(by_step={"variants": [{"text": "Books closed — in 3 days."}] * 3})
    writer = VariantWriter(make_service(client))

    variants = writer.generate(CLEAN_FINAL, VARIANT_STYLES)

    assert list(variants) == list(VARIANT_STYLES)
    assert set(variants.values()) == {"Books closed, in 3 days."}
    assert len(client.calls_for("variants")) == 3


def test_failed_style_is_omitted() -> None:
    client = ScriptedLLMClient(
        by_step={"variants": [{"text": "Books closed in 3 days."}, ConnectionError("down"), {"text": "Books closed in 3 days."}]}
    )
    writer = VariantWriter(make_service(client))

    variants = writer.generate(CLEAN_FINAL, VARIANT_STYLES)

    assert len(variants) == 2
    assert len(client.calls) == 3


def test_fill_missing_only_requests_absent_styles() -> None:
    client = ScriptedLLMClient(by_step={"variants": [{"text": "Month-end, done in 3 days."}]})
    package = FinalPackage.model_validate(
        sample_final_package(variants={"direct": "Close in 3 days.", "story_led": "Maria closed in 3 days."})
    )

    filled = VariantWriter(make_service(client)).fill_missing(package)

    assert filled.variants["conversational"] == "Month-end, done in 3 days."
    assert filled.variants["direct"] == "Close in 3 days."
    assert len(client.calls) == 1
    assert "Conversational style" in client.calls[0]["prompt"]
    assert "conversational" not in package.variants


def test_fill_missing_is_a_no_op_for_complete_packages() -> None:
    client = ScriptedLLMClient()
    package = FinalPackage.model_validate(sample_final_package())

    assert VariantWriter(make_service(client)).fill_missing(package) is package
    assert client.calls == []


def test_extra_context_reaches_every_variant_prompt() -> None:
    client = ScriptedLLMClient(by_step={"variants": [{"text": "Books closed in 3 days."}] * 3})
    writer = VariantWriter(make_service(client))
    package = FinalPackage.model_validate(sample_final_package(variants={}))

    writer.fill_missing(package, "KNOWN FACTS (use these):\n- 40 firms")

    calls = client.calls_for("variants")
    assert len(calls) == 3
    assert all(call["prompt"].endswith("KNOWN FACTS (use these):\n- 40 firms") for call in calls)
