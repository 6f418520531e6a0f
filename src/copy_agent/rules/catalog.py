"""Channel-keyed writing rules.

Every table here is static. Lookups return frozen dataclasses so callers can
share them across concurrent requests without copying.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
import re
from typing import Any

from copy_agent.constants import CHANNEL_ALIASES, Channel


UNIVERSAL_FORBIDDEN: tuple[str, ...] = (
    # abstract nouns and hype
    "potential",
    "journey",
    "experience",
    "solution",
    "leverage",
    "synergy",
    "optimize",
    "enhance",
    "empower",
    "revolutionize",
    "transform",
    "elevate",
    "streamline",
    "unlock",
    "cutting-edge",
    "game-changing",
    "next-level",
    "world-class",
    "best-in-class",
    "state-of-the-art",
    "seamless",
    "seamlessly",
    "effortless",
    "effortlessly",
    "robust",
    "comprehensive",
    "holistic",
    # filler phrases
    "in order to",
    "the fact that",
    "it is important to note",
    "it goes without saying",
    "needless to say",
    "at the end of the day",
    "when all is said and done",
    "all things considered",
    "as a matter of fact",
    # hollow enthusiasm
    "amazing",
    "incredible",
    "awesome",
    "fantastic",
    "unbelievable",
    "mind-blowing",
    "super",
    "epic",
    # hedges
    "just",
    "simply",
    "really",
    "very",
    "quite",
    "basically",
    "essentially",
    "actually",
    # false empathy
    "no worries",
    "don't worry",
    "rest assured",
    "we understand",
    # robotic transitions
    "furthermore",
    "moreover",
    "additionally",
    "in conclusion",
    "to summarize",
    # salesy urgency
    "act now",
    "don't miss out",
    "limited time",
    "hurry",
    "before it's too late",
)


UNIVERSAL_FORBIDDEN_PATTERNS: tuple[re.Pattern[str], ...] = tuple(
    re.compile(source, re.IGNORECASE)
    for source in (
        r"you will (be able to|see|notice|experience|feel)",
        r"you can (easily|quickly|simply)",
        r"helps you to",
        r"allows you to",
        r"enables you to",
        r"designed to help",
        r"built to help",
        r"we (believe|think|feel) that",
        r"unlock your",
        r"take your .* to the next level",
        r"supercharge your",
        r"turbocharge your",
    )
)


BAD_FIRST_WORDS = frozenset(
    {
        "additionally",
        "furthermore",
        "moreover",
        "however",
        "therefore",
        "thus",
        "hence",
        "consequently",
        "meanwhile",
        "nevertheless",
        "nonetheless",
        "in",
        "with",
        "by",
        "for",
        "as",
        "when",
        "while",
        "although",
        "because",
        "since",
        "if",
        "unless",
    }
)


GENERIC_NOUNS: tuple[str, ...] = (
    "interface",
    "system",
    "solution",
    "platform",
    "tool",
    "product",
    "feature",
    "experience",
)


@dataclass(frozen=True)
class BeatStructure:
    max_words: int
    required_elements: tuple[str, ...] = ()
    first_word_types: tuple[str, ...] = ("noun", "verb")
    forbidden: tuple[str, ...] = ()


@dataclass(frozen=True)
class ChannelRules:
    channel: Channel
    description: str
    max_beats: int
    max_total_words: int
    target_words: int
    max_sentence_words: int
    max_adjectives_per_noun: int
    specific_detail_every_n_sentences: int
    required_beat_sequence: tuple[str, ...]
    beat_structures: dict[str, BeatStructure]
    additional_forbidden: tuple[str, ...] = ()
    format_rules: tuple[str, ...] = ()

    def rules_context(self, forbidden_limit: int = 40) -> dict[str, Any]:
        """Rule summary embedded in beat-sheet prompts."""
        return {
            "type": self.channel.value,
            "max_beats": self.max_beats,
            "required_beat_sequence": list(self.required_beat_sequence),
            "max_total_words": self.max_total_words,
            "target_words": self.target_words,
            "max_sentence_words": self.max_sentence_words,
            "max_adjectives_per_noun": self.max_adjectives_per_noun,
            "specific_detail_every_n_sentences": self.specific_detail_every_n_sentences,
            "format_rules": list(self.format_rules),
            "beat_structures": {name: asdict(beat) for name, beat in self.beat_structures.items()},
            "forbidden_terms": forbidden_terms(self.channel)[:forbidden_limit],
        }


CATALOG: dict[Channel, ChannelRules] = {
    Channel.EMAIL: ChannelRules(
        channel=Channel.EMAIL,
        description="Transactional or nurture emails",
        max_beats=4,
        max_total_words=120,
        target_words=80,
        max_sentence_words=15,
        max_adjectives_per_noun=1,
        specific_detail_every_n_sentences=2,
        required_beat_sequence=("hook", "tension", "resolution", "action"),
        beat_structures={
            "hook": BeatStructure(
                max_words=20,
                required_elements=("specific_noun",),
                first_word_types=("noun", "verb", "pronoun"),
                forbidden=(
                    "hello",
                    "hi there",
                    "hey there",
                    "dear",
                    "hope this finds",
                    "have you ever",
                    "picture this",
                    "consider this",
                ),
            ),
            "tension": BeatStructure(
                max_words=30,
                required_elements=("specific_noun",),
                first_word_types=("noun", "verb", "pronoun"),
                forbidden=("here are", "there are several", "consider the following"),
            ),
            "resolution": BeatStructure(max_words=35, required_elements=("specific_noun",)),
            "action": BeatStructure(
                max_words=15,
                required_elements=("imperative",),
                first_word_types=("imperative", "verb"),
                forbidden=("click here", "learn more", "check it out", "find out more"),
            ),
        },
        additional_forbidden=(
            "hope this finds you well",
            "reaching out",
            "touching base",
            "circling back",
            "per my last email",
            "frustrated",
            "struggling",
            "overwhelmed",
            "that's where",
            "stands out",
            "why does this matter",
            "curious about",
            "skeptical",
        ),
        format_rules=(
            "Opening line must be statement or imperative, not greeting",
            "Maximum 4 paragraphs total",
            "One point per email, not a blog post",
            "CTA must be single action under 5 words",
        ),
    ),
    Channel.LANDING_PAGE: ChannelRules(
        channel=Channel.LANDING_PAGE,
        description="Website landing page or homepage",
        max_beats=6,
        max_total_words=300,
        target_words=200,
        max_sentence_words=18,
        max_adjectives_per_noun=1,
        specific_detail_every_n_sentences=2,
        required_beat_sequence=("hook", "problem", "solution", "proof", "cta"),
        beat_structures={
            "hook": BeatStructure(
                max_words=12, required_elements=("specific_noun",), forbidden=("welcome to", "introducing")
            ),
            "problem": BeatStructure(max_words=25, required_elements=("specific_noun",)),
            "solution": BeatStructure(max_words=30, required_elements=("specific_noun",)),
            "proof": BeatStructure(max_words=25, required_elements=("number", "proper_noun")),
            "mechanism": BeatStructure(max_words=30, required_elements=("specific_noun",)),
            "cta": BeatStructure(
                max_words=8,
                required_elements=("imperative",),
                first_word_types=("imperative", "verb"),
                forbidden=("get started", "learn more", "sign up now"),
            ),
        },
        additional_forbidden=("helps you", "designed for", "perfect for", "ideal for"),
        format_rules=(
            'First line must state what it does, not what it "helps with"',
            "Every section needs a scannable heading",
            "Front-load paragraphs with the key point",
            "Use specific numbers in proof sections",
        ),
    ),
    Channel.WEBSITE: ChannelRules(
        channel=Channel.WEBSITE,
        description="General website pages (about, features, etc.)",
        max_beats=6,
        max_total_words=350,
        target_words=250,
        max_sentence_words=20,
        max_adjectives_per_noun=1,
        specific_detail_every_n_sentences=3,
        required_beat_sequence=("hook", "problem", "solution", "proof", "cta"),
        beat_structures={
            "hook": BeatStructure(max_words=15, required_elements=("specific_noun",)),
            "problem": BeatStructure(max_words=30, required_elements=("specific_noun",)),
            "solution": BeatStructure(max_words=35, required_elements=("specific_noun",)),
            "proof": BeatStructure(max_words=30, required_elements=("number",)),
            "cta": BeatStructure(
                max_words=10, required_elements=("imperative",), first_word_types=("imperative", "verb")
            ),
        },
        format_rules=(
            "F-pattern optimization: front-load every paragraph",
            "Use subheadings every 100-150 words",
            "Make scannable with bullets for lists of 3+ items",
        ),
    ),
    Channel.SOCIAL: ChannelRules(
        channel=Channel.SOCIAL,
        description="Social media posts (LinkedIn, X, etc.)",
        max_beats=4,
        max_total_words=80,
        target_words=50,
        max_sentence_words=12,
        max_adjectives_per_noun=1,
        specific_detail_every_n_sentences=2,
        required_beat_sequence=("hook", "claim", "proof", "cta"),
        beat_structures={
            "hook": BeatStructure(
                max_words=10,
                first_word_types=("noun", "verb", "question_word"),
                forbidden=("did you know", "hot take"),
            ),
            "claim": BeatStructure(
                max_words=15, required_elements=("specific_noun",), first_word_types=("noun", "verb", "pronoun")
            ),
            "proof": BeatStructure(max_words=20, required_elements=("number",)),
            "cta": BeatStructure(
                max_words=8, first_word_types=("verb", "question_word"), forbidden=("link in bio",)
            ),
        },
        additional_forbidden=("thread", "unpopular opinion", "hear me out", "let that sink in"),
        format_rules=(
            "First line must be complete thought, not teaser",
            "Line breaks are pacing, use them intentionally",
            "Close with implication or invitation, not generic CTA",
        ),
    ),
    Channel.ARTICLE: ChannelRules(
        channel=Channel.ARTICLE,
        description="Blog posts, essays, long-form content",
        max_beats=8,
        max_total_words=800,
        target_words=600,
        max_sentence_words=22,
        max_adjectives_per_noun=2,
        specific_detail_every_n_sentences=3,
        required_beat_sequence=("hook", "nutgraf", "claim", "proof", "kicker"),
        beat_structures={
            "hook": BeatStructure(
                max_words=25, required_elements=("specific_noun",), first_word_types=("noun", "verb", "pronoun")
            ),
            "nutgraf": BeatStructure(max_words=40, required_elements=("specific_noun",)),
            "claim": BeatStructure(max_words=30, required_elements=("specific_noun",)),
            "proof": BeatStructure(max_words=50, required_elements=("number", "proper_noun")),
            "kicker": BeatStructure(max_words=20, first_word_types=("noun", "verb", "pronoun")),
        },
        format_rules=(
            "Nut graf in first 2 paragraphs",
            "Subheads every 250-300 words",
            "Each section must have clear thesis",
        ),
    ),
    Channel.SALES_PAGE: ChannelRules(
        channel=Channel.SALES_PAGE,
        description="Long-form sales letters, VSL scripts",
        max_beats=7,
        max_total_words=500,
        target_words=400,
        max_sentence_words=18,
        max_adjectives_per_noun=1,
        specific_detail_every_n_sentences=2,
        required_beat_sequence=("hook", "problem", "solution", "proof", "objection", "cta"),
        beat_structures={
            "hook": BeatStructure(
                max_words=20,
                required_elements=("specific_noun",),
                first_word_types=("noun", "verb", "question_word"),
            ),
            "problem": BeatStructure(max_words=40, required_elements=("specific_noun",)),
            "solution": BeatStructure(max_words=40, required_elements=("specific_noun", "number")),
            "proof": BeatStructure(max_words=50, required_elements=("number", "proper_noun")),
            "objection": BeatStructure(max_words=30, first_word_types=("noun", "verb", "question_word")),
            "cta": BeatStructure(
                max_words=15, required_elements=("imperative",), first_word_types=("imperative", "verb")
            ),
        },
        format_rules=(
            "Headline stack at top",
            "Proof blocks clearly separated",
            "Each claim followed by proof within 2 sentences",
        ),
    ),
}


DEFAULT_CHANNEL = Channel.WEBSITE


def parse_channel(value: str | Channel) -> Channel:
    """Resolve a channel name or alias; unknown names fall back to website."""
    if isinstance(value, Channel):
        return value
    key = value.strip().lower().replace("-", "_").replace(" ", "_")
    try:
        return Channel(key)
    except ValueError:
        return CHANNEL_ALIASES.get(key, DEFAULT_CHANNEL)


def get_rules(channel: str | Channel) -> ChannelRules:
    return CATALOG[parse_channel(channel)]


def forbidden_terms(channel: str | Channel) -> list[str]:
    rules = get_rules(channel)
    return [*UNIVERSAL_FORBIDDEN, *rules.additional_forbidden]


def beat_forbidden_terms(channel: str | Channel, beat_function: str) -> list[str]:
    rules = get_rules(channel)
    beat = rules.beat_structures.get(beat_function)
    if beat is None:
        return forbidden_terms(channel)
    return [*forbidden_terms(channel), *beat.forbidden]
