from __future__ import annotations

from dataclasses import FrozenInstanceError

import pytest

from copy_agent.constants import Channel
from copy_agent.rules.campaigns import (
    CampaignType,
    build_through_line,
    campaign_forbidden_terms,
    detect_campaign_type,
    get_campaign,
)
from copy_agent.rules.catalog import (
    CATALOG,
    UNIVERSAL_FORBIDDEN,
    beat_forbidden_terms,
    forbidden_terms,
    get_rules,
    parse_channel,
)


def test_every_channel_has_a_catalog_entry() -> None:
    assert set(CATALOG) == set(Channel)
    for channel, rules in CATALOG.items():
        assert rules.channel == channel
        assert rules.target_words <= rules.max_total_words
        assert rules.required_beat_sequence


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("email", Channel.EMAIL),
        ("Landing-Page", Channel.LANDING_PAGE),
        ("sales page", Channel.SALES_PAGE),
        ("blog", Channel.ARTICLE),
        ("social_post", Channel.SOCIAL),
        ("podcast", Channel.WEBSITE),
    ],
)
def test_parse_channel_resolves_aliases_and_falls_back_to_website(raw: str, expected: Channel) -> None:
    assert parse_channel(raw) == expected


def test_forbidden_terms_combine_universal_and_channel_lists() -> None:
    email_terms = forbidden_terms("email")
    website_terms = forbidden_terms("website")

    assert "synergy" in email_terms
    assert "circling back" in email_terms
    assert "circling back" not in website_terms
    assert website_terms[: len(UNIVERSAL_FORBIDDEN)] == list(UNIVERSAL_FORBIDDEN)


def test_beat_forbidden_terms_add_beat_specific_entries() -> None:
    assert "click here" in beat_forbidden_terms("email", "action")
    assert beat_forbidden_terms("email", "no-such-beat") == forbidden_terms("email")


def test_rules_context_limits_forbidden_terms() -> None:
    context = get_rules("email").rules_context(forbidden_limit=5)

    assert context["type"] == "email"
    assert context["max_sentence_words"] == 15
    assert len(context["forbidden_terms"]) == 5
    assert "hook" in context["beat_structures"]


def test_catalog_entries_are_read_only() -> None:
    rules = get_rules("website")
    with pytest.raises(FrozenInstanceError):
        rules.max_sentence_words = 99  # type: ignore[misc]


class TestCampaignDetection:
    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("campaign type: abandoned cart", CampaignType.ABANDONED_CART),
            ("Campaign=re-engagement", CampaignType.REENGAGEMENT),
            ("Win back lapsed subscribers before renewal", CampaignType.REENGAGEMENT),
            ("Announce the new reporting module", CampaignType.LAUNCH),
            ("Onboarding email for people who just signed up", CampaignType.WELCOME),
            ("A weekly drip of educational tips", CampaignType.NURTURE),
            ("Shoppers who abandoned carts last week", CampaignType.ABANDONED_CART),
        ],
    )
    def test_detects_campaign_type(self, text: str, expected: CampaignType) -> None:
        assert detect_campaign_type(text) == expected

    def test_explicit_marker_wins_over_keywords(self) -> None:
        assert detect_campaign_type("campaign: nurture\nWe just signed up 300 new users") == CampaignType.NURTURE

    def test_keyword_order_breaks_ties(self) -> None:
        assert detect_campaign_type("Welcome back lapsed customers") == CampaignType.REENGAGEMENT

    @pytest.mark.parametrize("text", ["", "Quarterly invoice reminder for accounts payable"])
    def test_returns_none_without_a_match(self, text: str) -> None:
        assert detect_campaign_type(text) is None


def test_campaign_forbidden_terms_are_deduplicated() -> None:
    terms = campaign_forbidden_terms(CampaignType.REENGAGEMENT)
    assert "we need you" in terms
    assert len(terms) == len(set(terms))
    assert campaign_forbidden_terms("not-a-campaign") == []


def test_through_line_fills_placeholders() -> None:
    line = build_through_line(CampaignType.LAUNCH, {"company_name": "Acme Ledger", "launch_problem": "slow closes"})
    assert line == "Acme Ledger solves slow closes, available now"

    fallback = build_through_line("welcome", {})
    assert "[product]" not in fallback
    assert "our product" in fallback


def test_campaign_prompt_context_lists_beats_in_order() -> None:
    campaign = get_campaign(CampaignType.WELCOME)
    context = campaign.prompt_context()

    assert context["campaign_type"] == "welcome"
    assert [beat["id"] for beat in context["beats"]] == [beat.id for beat in campaign.beats]
