"""Email campaign structures and campaign-type detection."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
import re
from typing import Any, Mapping


class CampaignType(StrEnum):
    WELCOME = "welcome"
    NURTURE = "nurture"
    LAUNCH = "launch"
    ABANDONED_CART = "abandoned_cart"
    REENGAGEMENT = "reengagement"


@dataclass(frozen=True)
class CampaignBeat:
    id: str
    function: str
    job: str
    constraint: str
    max_words: int
    required_elements: tuple[str, ...] = ()
    forbidden: tuple[str, ...] = ()


@dataclass(frozen=True)
class CampaignStructure:
    type: CampaignType
    label: str
    through_line_template: str
    through_line_example: str
    beats: tuple[CampaignBeat, ...]
    hook_constraint: str
    action_constraint: str
    additional_forbidden: tuple[str, ...] = ()

    def prompt_context(self) -> dict[str, Any]:
        return {
            "campaign_type": self.type.value,
            "label": self.label,
            "through_line_example": self.through_line_example,
            "hook_constraint": self.hook_constraint,
            "action_constraint": self.action_constraint,
            "beats": [
                {
                    "id": beat.id,
                    "function": beat.function,
                    "job": beat.job,
                    "constraint": beat.constraint,
                    "max_words": beat.max_words,
                    "required_elements": list(beat.required_elements),
                    "forbidden": list(beat.forbidden),
                }
                for beat in self.beats
            ],
        }


EMAIL_CAMPAIGNS: dict[CampaignType, CampaignStructure] = {
    CampaignType.WELCOME: CampaignStructure(
        type=CampaignType.WELCOME,
        label="Welcome/Onboarding",
        through_line_template="Here's what [product] does and your first step",
        through_line_example="You're in. Here's how to get the most out of your trial in the next 10 minutes.",
        beats=(
            CampaignBeat(
                id="confirmation",
                function="hook",
                job="Confirm what they signed up for and make them feel smart about it",
                constraint="Must reference the specific thing they signed up for, not a generic welcome",
                max_words=25,
                required_elements=("proper_noun",),
                forbidden=("welcome to", "thanks for signing up", "we're excited"),
            ),
            CampaignBeat(
                id="value_preview",
                function="tension",
                job="Show them what they now have access to",
                constraint="Must be specific about what they GET, not what you DO",
                max_words=35,
                required_elements=("specific_noun",),
                forbidden=("helping you", "designed to", "allows you to"),
            ),
            CampaignBeat(
                id="first_action",
                function="resolution",
                job="Give them ONE specific first step that drives success",
                constraint="Must be a concrete action they can do in under 2 minutes",
                max_words=30,
                required_elements=("imperative",),
                forbidden=("explore", "check out", "learn more about"),
            ),
            CampaignBeat(
                id="whats_next",
                function="action",
                job="Set expectations for what comes next",
                constraint="Must mention a specific time or trigger for the next email",
                max_words=20,
                forbidden=("stay tuned", "more to come", "keep an eye out"),
            ),
        ),
        hook_constraint="Must reference the specific thing they signed up for",
        action_constraint="Must be a specific first step, not generic CTA",
        additional_forbidden=("welcome aboard", "glad to have you", "journey", "adventure"),
    ),
    CampaignType.NURTURE: CampaignStructure(
        type=CampaignType.NURTURE,
        label="Nurture Sequence",
        through_line_template="Here's one insight that changes how you think about [topic]",
        through_line_example="Most people optimize for the wrong metric. Here's what actually drives retention.",
        beats=(
            CampaignBeat(
                id="insight_hook",
                function="hook",
                job="Open with a surprising or contrarian observation",
                constraint="Must be a specific observation, not a question or greeting",
                max_words=25,
                required_elements=("specific_noun",),
                forbidden=("did you know", "have you ever", "picture this", "imagine"),
            ),
            CampaignBeat(
                id="teaching_moment",
                function="tension",
                job="Develop the insight with a specific example or mechanism",
                constraint="Must teach something useful even if they never buy",
                max_words=45,
                required_elements=("specific_noun",),
                forbidden=("it's important to", "you need to understand"),
            ),
            CampaignBeat(
                id="product_bridge",
                function="resolution",
                job="Connect the insight to how your product embodies it",
                constraint="Product is proof of the insight, not a pitch",
                max_words=35,
                required_elements=("proper_noun",),
                forbidden=("that's why we", "this is where", "introducing"),
            ),
            CampaignBeat(
                id="invitation",
                function="action",
                job="Invite them to take a low-commitment next step",
                constraint="Must match the CTA type specified (soft/medium/hard)",
                max_words=20,
                forbidden=("click here", "don't miss out", "act now"),
            ),
        ),
        hook_constraint="Must open with a surprising or contrarian observation",
        action_constraint="Product is example/proof of the insight, not a pitch",
        additional_forbidden=("valuable insight", "game-changing", "pro tip"),
    ),
    CampaignType.LAUNCH: CampaignStructure(
        type=CampaignType.LAUNCH,
        label="Product Launch",
        through_line_template="[product] solves [problem], available now",
        through_line_example="We rebuilt search from scratch. It's 10x faster and finds what you're looking for.",
        beats=(
            CampaignBeat(
                id="announcement",
                function="hook",
                job="Announce what's new with specificity",
                constraint="Must name the product/feature and what category it's in",
                max_words=20,
                required_elements=("proper_noun",),
                forbidden=("big news", "exciting announcement", "we're thrilled"),
            ),
            CampaignBeat(
                id="what_changed",
                function="tension",
                job="Explain what was broken before and how this fixes it",
                constraint="Must contrast old way vs new way with specifics",
                max_words=40,
                required_elements=("specific_noun", "number"),
                forbidden=("revolutionizes", "transforms", "game-changing"),
            ),
            CampaignBeat(
                id="who_its_for",
                function="resolution",
                job="Make it clear who should care and why",
                constraint="Must describe a specific use case or persona",
                max_words=35,
                required_elements=("specific_noun",),
                forbidden=("perfect for", "ideal for", "designed for everyone"),
            ),
            CampaignBeat(
                id="how_to_get",
                function="action",
                job="Tell them exactly how to get it",
                constraint="Must include specific availability details (price, date, access)",
                max_words=25,
                required_elements=("imperative",),
                forbidden=("learn more", "check it out", "stay tuned"),
            ),
        ),
        hook_constraint="Must name the product/feature explicitly",
        action_constraint="Must include specific availability details",
        additional_forbidden=("groundbreaking", "industry-leading", "best-in-class"),
    ),
    CampaignType.ABANDONED_CART: CampaignStructure(
        type=CampaignType.ABANDONED_CART,
        label="Abandoned Cart",
        through_line_template="You left [item], here's why it's worth coming back",
        through_line_example="Your Starter Kit is still in your cart. Here's what you'd be missing.",
        beats=(
            CampaignBeat(
                id="reminder",
                function="hook",
                job="Remind them what they left without being pushy",
                constraint="Must name the specific product(s) left behind",
                max_words=20,
                required_elements=("proper_noun",),
                forbidden=("oops", "forgot something", "still there"),
            ),
            CampaignBeat(
                id="address_hesitation",
                function="tension",
                job="Acknowledge and address the likely reason they left",
                constraint="Must address the specific hesitation type selected",
                max_words=35,
                required_elements=("specific_noun",),
                forbidden=("we understand", "no pressure", "take your time"),
            ),
            CampaignBeat(
                id="reduce_friction",
                function="resolution",
                job="Remove the barrier or add value to tip the decision",
                constraint="Must offer something concrete (guarantee, bonus, support)",
                max_words=30,
                forbidden=("risk-free", "no-brainer", "you won't regret"),
            ),
            CampaignBeat(
                id="return_path",
                function="action",
                job="Make returning to the cart effortless",
                constraint="Must be a direct link to their cart, not homepage",
                max_words=15,
                required_elements=("imperative",),
                forbidden=("visit our site", "browse our selection"),
            ),
        ),
        hook_constraint="Must name the specific product left behind",
        action_constraint="Must address most likely objection",
        additional_forbidden=("hurry", "running out", "last chance"),
    ),
    CampaignType.REENGAGEMENT: CampaignStructure(
        type=CampaignType.REENGAGEMENT,
        label="Re-engagement",
        through_line_template="We haven't heard from you, here's what you've missed",
        through_line_example="It's been 60 days. We shipped 3 features you asked for.",
        beats=(
            CampaignBeat(
                id="acknowledge_gap",
                function="hook",
                job="Acknowledge the silence without guilt-tripping",
                constraint="Must acknowledge time passed without being needy",
                max_words=20,
                forbidden=("we miss you", "where have you been", "don't forget about us"),
            ),
            CampaignBeat(
                id="new_value",
                function="tension",
                job="Show them what's new or what they've missed",
                constraint="Must list specific improvements or content since they left",
                max_words=40,
                required_elements=("specific_noun", "number"),
                forbidden=("a lot has changed", "so much to share"),
            ),
            CampaignBeat(
                id="easy_reentry",
                function="resolution",
                job="Make coming back feel easy and low-commitment",
                constraint="Must offer a specific, easy first step back",
                max_words=30,
                forbidden=("give us another chance", "we'd love to have you back"),
            ),
            CampaignBeat(
                id="permission_out",
                function="action",
                job="Give them an out if they're truly done",
                constraint="Offer a graceful exit when unsubscribing is requested",
                max_words=25,
                forbidden=("we hate to see you go", "are you sure"),
            ),
        ),
        hook_constraint="Must acknowledge the silence without guilting",
        action_constraint="Include option to unsubscribe gracefully if requested",
        additional_forbidden=("come back", "we need you", "don't leave"),
    ),
}


_EXPLICIT_MARKER = re.compile(r"\bcampaign(?:[ _-]?type)?\s*[:=]\s*([a-z_ -]+)", re.IGNORECASE)

# Checked in order; the first match wins.
_KEYWORD_PATTERNS: tuple[tuple[CampaignType, re.Pattern[str]], ...] = (
    (CampaignType.ABANDONED_CART, re.compile(r"\babandon(?:ed)?[ _-]?carts?\b|\bleft (?:in|behind in) (?:their|the|your) cart\b", re.IGNORECASE)),
    (CampaignType.REENGAGEMENT, re.compile(r"\bre-?engage(?:ment)?\b|\bwin[ -]?back\b|\blapsed\b|\binactive (?:users|customers|subscribers)\b", re.IGNORECASE)),
    (CampaignType.LAUNCH, re.compile(r"\b(?:product )?launch(?:es|ing)?\b|\bannounc(?:e|ing|ement)\b|\bnew release\b", re.IGNORECASE)),
    (CampaignType.WELCOME, re.compile(r"\bwelcome\b|\bonboard(?:ing)?\b|\bsigned up\b|\bnew (?:users|subscribers|signups)\b", re.IGNORECASE)),
    (CampaignType.NURTURE, re.compile(r"\bnurtur(?:e|ing)\b|\bdrip\b|\beducational (?:email|sequence)\b", re.IGNORECASE)),
)


def _normalize_campaign_name(raw: str) -> CampaignType | None:
    key = re.sub(r"[\s-]+", "_", raw.strip().lower())
    key = key.replace("re_engagement", "reengagement")
    for campaign in CampaignType:
        if key.startswith(campaign.value):
            return campaign
    return None


def detect_campaign_type(text: str) -> CampaignType | None:
    """Detect an email campaign type from free-text context using fixed patterns."""
    if not text:
        return None
    marker = _EXPLICIT_MARKER.search(text)
    if marker:
        explicit = _normalize_campaign_name(marker.group(1))
        if explicit is not None:
            return explicit
    for campaign, pattern in _KEYWORD_PATTERNS:
        if pattern.search(text):
            return campaign
    return None


def get_campaign(campaign_type: str | CampaignType) -> CampaignStructure | None:
    try:
        return EMAIL_CAMPAIGNS[CampaignType(campaign_type)]
    except ValueError:
        return None


def campaign_forbidden_terms(campaign_type: str | CampaignType) -> list[str]:
    """Campaign-level and beat-level forbidden terms, de-duplicated in order."""
    campaign = get_campaign(campaign_type)
    if campaign is None:
        return []
    terms: list[str] = []
    for term in [*campaign.additional_forbidden, *(t for beat in campaign.beats for t in beat.forbidden)]:
        if term not in terms:
            terms.append(term)
    return terms


def build_through_line(campaign_type: str | CampaignType, inputs: Mapping[str, str]) -> str:
    campaign = get_campaign(campaign_type)
    if campaign is None:
        return ""
    replacements = {
        "[product]": inputs.get("company_name") or inputs.get("product_name") or "our product",
        "[topic]": inputs.get("teaching_point") or inputs.get("topic") or "this topic",
        "[problem]": inputs.get("launch_problem") or "the problem",
        "[item]": inputs.get("product_left") or "your items",
    }
    through_line = campaign.through_line_template
    for placeholder, value in replacements.items():
        through_line = through_line.replace(placeholder, value)
    return through_line
