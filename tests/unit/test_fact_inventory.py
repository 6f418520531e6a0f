from __future__ import annotations

import pytest

from copy_agent.core.fact_inventory import FactInventoryEngine, format_constraint
from copy_agent.prompts import SYSTEM_PROMPTS
from copy_agent.schemas.artifacts import FactInventory
from tests.helpers import ScriptedLLMClient, make_service


def _inventory() -> FactInventory:
    return FactInventory(
        credentials=("Licensed CPA since 2009",),
        achievements=("Closed books for 40 firms",),
        location=("Austin, TX",),
        unknown_gaps=("client count", "revenue figures"),
        focus_areas=("month-end process",),
    )


def test_all_facts_list_is_merged_from_categories() -> None:
    inventory = _inventory()
    assert inventory.all_facts_list == ("Licensed CPA since 2009", "Closed books for 40 firms", "Austin, TX")


def test_explicit_all_facts_list_is_kept() -> None:
    inventory = FactInventory(credentials=("CPA",), all_facts_list=("CPA", "Founded 2012"))
    assert inventory.all_facts_list == ("CPA", "Founded 2012")


def test_constraint_contains_every_fact_verbatim() -> None:
    inventory = _inventory()
    constraint = format_constraint(inventory)

    for fact in inventory.all_facts_list:
        assert f"- {fact}" in constraint
    assert "- client count" in constraint
    assert "- month-end process" in constraint
    assert "FACT CONSTRAINT - YOU MAY ONLY USE THESE FACTS. DO NOT INVENT ANYTHING." in constraint


def test_constraint_lists_no_facts_beyond_inventory() -> None:
    constraint = format_constraint(_inventory())
    known = constraint.split("KNOWN FACTS (use these):\n", 1)[1].split("\n\n", 1)[0]
    assert known.splitlines() == [
        "- Licensed CPA since 2009",
        "- Closed books for 40 firms",
        "- Austin, TX",
    ]


def test_empty_inventory_uses_placeholders() -> None:
    constraint = format_constraint(FactInventory())
    assert "- No specific facts provided" in constraint
    assert "- None identified" in constraint
    assert "- General expertise and service" in constraint


def test_extract_skips_the_service_for_empty_text() -> None:
    client = ScriptedLLMClient()
    engine = FactInventoryEngine(make_service(client))

    assert engine.extract("   ") == FactInventory()
    assert client.calls == []


def test_extract_parses_inventory() -> None:
    client = ScriptedLLMClient(
        replies=[{"credentials": ["CPA"], "achievements": ["40 firms"], "unknown_gaps": ["pricing"]}]
    )
    engine = FactInventoryEngine(make_service(client))

    inventory = engine.extract("I'm a CPA. We've closed books for 40 firms.")

    assert inventory.all_facts_list == ("CPA", "40 firms")
    assert inventory.unknown_gaps == ("pricing",)
    assert client.calls[0]["system"] == SYSTEM_PROMPTS["facts"]


def test_validate_against_inventory_reports_unsupported_claims(caplog: pytest.LogCaptureFixture) -> None:
    client = ScriptedLLMClient(
        replies=[{"valid": False, "violations": [{"claim": "500 clients", "issue": "not in inventory"}]}]
    )
    engine = FactInventoryEngine(make_service(client))

    with caplog.at_level("WARNING"):
        result = engine.validate_against_inventory("We served 500 clients.", _inventory())

    assert result.valid is False
    assert result.violations == ['"500 clients" - not in inventory']
    assert "Unsupported claim" in caplog.text
    assert "- Closed books for 40 firms" in client.calls[0]["prompt"]


def test_validate_against_inventory_accepts_grounded_copy() -> None:
    client = ScriptedLLMClient(replies=[{"valid": True, "violations": []}])
    engine = FactInventoryEngine(make_service(client))

    result = engine.validate_against_inventory("Closed books for 40 firms.", _inventory())

    assert result.valid is True
    assert result.violations == []
