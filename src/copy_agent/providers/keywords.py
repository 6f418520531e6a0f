"""SerpAPI keyword research and competitor discovery."""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
import os
from typing import Any, Literal

import requests

from copy_agent.config import RunConfig

logger = logging.getLogger(__name__)

SuggestionSource = Literal["autocomplete", "related", "question"]


@dataclass(frozen=True)
class KeywordSuggestion:
    keyword: str
    source: SuggestionSource


@dataclass(frozen=True)
class KeywordResearch:
    suggestions: list[KeywordSuggestion] = field(default_factory=list)
    questions: list[str] = field(default_factory=list)
    related_searches: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "suggestions": [{"keyword": item.keyword, "source": item.source} for item in self.suggestions],
            "questions": list(self.questions),
            "related_searches": list(self.related_searches),
        }


class SerpApiKeywordResearch:
    """Autocomplete, related searches and "people also ask" for a query.

    A missing key or a failed request produces empty results rather than an
    error, so callers continue with less context.
    """

    def __init__(
        self,
        api_key: str | None,
        *,
        base_url: str = "https://serpapi.com/search.json",
        request_timeout_s: float = 30.0,
    ):
        self.api_key = (api_key or "").strip()
        self.base_url = base_url
        self.request_timeout_s = request_timeout_s

    @classmethod
    def from_env(cls, config: RunConfig | None = None) -> "SerpApiKeywordResearch":
        config = config or RunConfig()
        return cls(
            os.getenv("SERPAPI_API_KEY"),
            base_url=config.services.serpapi_base_url,
            request_timeout_s=config.services.http_timeout_s,
        )

    @property
    def enabled(self) -> bool:
        return bool(self.api_key)

    def research(self, query: str) -> KeywordResearch:
        if not self.enabled:
            logger.info("SERPAPI_API_KEY not set, skipping keyword research")
            return KeywordResearch()

        autocomplete = [
            str(item.get("value", ""))
            for item in self._search({"engine": "google_autocomplete", "q": query}).get("suggestions", [])
        ]
        search = self._search({"engine": "google", "q": query, "num": 10})
        related = [str(item.get("query", "")) for item in search.get("related_searches", [])]
        questions = [str(item.get("question", "")) for item in search.get("related_questions", [])]

        candidates: list[KeywordSuggestion] = [
            *(KeywordSuggestion(keyword, "autocomplete") for keyword in autocomplete),
            *(KeywordSuggestion(keyword, "related") for keyword in related),
            *(KeywordSuggestion(keyword, "question") for keyword in questions),
        ]
        seen: set[str] = set()
        suggestions: list[KeywordSuggestion] = []
        for item in candidates:
            key = item.keyword.strip().lower()
            if not key or key in seen:
                continue
            seen.add(key)
            suggestions.append(item)

        return KeywordResearch(
            suggestions=suggestions,
            questions=[item for item in questions if item],
            related_searches=[item for item in related if item],
        )

    def competitor_urls(self, query: str, limit: int = 5) -> list[str]:
        """Organic result links for ``query``, in ranking order."""
        if not self.enabled:
            return []
        body = self._search({"engine": "google", "q": query, "num": limit})
        urls = [str(item["link"]) for item in body.get("organic_results", []) if item.get("link")]
        return urls[:limit]

    def _search(self, params: dict[str, Any]) -> dict[str, Any]:
        try:
            response = requests.get(
                self.base_url,
                params={**params, "api_key": self.api_key},
                timeout=self.request_timeout_s,
            )
            response.raise_for_status()
            body = response.json()
        except (requests.RequestException, ValueError) as e:
            logger.error(f"SerpAPI {params.get('engine')} request failed for '{params.get('q')}': {e}")
            return {}
        if not isinstance(body, dict):
            return {}
        return body
