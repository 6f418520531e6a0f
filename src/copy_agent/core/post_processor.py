"""Mechanical cleanup applied once to accepted copy."""

from __future__ import annotations

import re

from copy_agent.schemas.artifacts import Extras, FinalPackage


_DASH_RULES: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"\s—\s"), ", "),
    (re.compile(r"—\."), "."),
    (re.compile(r"\s--\s"), ", "),
    (re.compile(r"—|--+"), ", "),
    (re.compile(r",\s*,"), ","),
    (re.compile(r",\s*\."), "."),
)

_ARTIFACT_RULES: tuple[re.Pattern[str], ...] = (
    re.compile(r"^Here'?s (the thing|what|why)[:\s]", re.IGNORECASE),
    re.compile(r"^Let me (tell you|explain|break)[^.]*\.\s*", re.IGNORECASE),
    re.compile(r"\s*Happy \w+ing!?\s*$", re.IGNORECASE),
)


def fix_dashes(text: str) -> str:
    for pattern, replacement in _DASH_RULES:
        text = pattern.sub(replacement, text)
    return text


def fix_exclamations(text: str) -> str:
    """Keep only the last exclamation mark; earlier ones become periods."""
    if text.count("!") <= 1:
        return text
    last = text.rfind("!")
    return text[:last].replace("!", ".") + text[last:]


def clean_artifacts(text: str) -> str:
    for pattern in _ARTIFACT_RULES:
        text = pattern.sub("", text)
    return text.strip()


def _single_pass(text: str) -> str:
    return clean_artifacts(fix_exclamations(fix_dashes(text)))


def post_process(text: str) -> str:
    """Dashes, then exclamations, then templated openers/closers.

    The pass repeats until the text stops changing, so running it on its own
    output is a no-op. Each pass either removes a dash or shortens the text,
    which bounds the loop.
    """
    current = text
    while True:
        cleaned = _single_pass(current)
        if cleaned == current:
            return cleaned
        current = cleaned


def post_process_package(package: FinalPackage) -> FinalPackage:
    extras = package.extras
    cleaned_extras = Extras(
        email_subject_lines=[post_process(item) for item in extras.email_subject_lines],
        preheaders=[post_process(item) for item in extras.preheaders],
        headlines=[post_process(item) for item in extras.headlines],
        meta_descriptions=[post_process(item) for item in extras.meta_descriptions],
        cta_options=[post_process(item) for item in extras.cta_options],
    )
    return package.model_copy(
        update={
            "final": post_process(package.final),
            "variants": {style: post_process(text) for style, text in package.variants.items()},
            "extras": cleaned_extras,
        }
    )
