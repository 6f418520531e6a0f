"""Sentence, word and paragraph splitting used by the rule checks."""

from __future__ import annotations

import re
from typing import Protocol


class Tokenizer(Protocol):
    """Splits text for rule checks. Swap implementations without touching the rules."""

    def sentences(self, text: str) -> list[str]:
        ...

    def words(self, text: str) -> list[str]:
        ...

    def paragraphs(self, text: str) -> list[str]:
        ...


_SENTENCE_BOUNDARY = re.compile(r"(?<=[.!?])\s+")
_PARAGRAPH_BREAK = re.compile(r"\n\n+")


class RegexTokenizer:
    """Punctuation-boundary heuristic.

    A sentence ends at ``.``, ``!`` or ``?`` followed by whitespace. Abbreviations
    such as "e.g." or "Inc." are not guarded against and will split a sentence.
    """

    def sentences(self, text: str) -> list[str]:
        return [part.strip() for part in _SENTENCE_BOUNDARY.split(text) if part.strip()]

    def words(self, text: str) -> list[str]:
        return text.split()

    def paragraphs(self, text: str) -> list[str]:
        return [part for part in _PARAGRAPH_BREAK.split(text) if part.strip()]


DEFAULT_TOKENIZER = RegexTokenizer()
