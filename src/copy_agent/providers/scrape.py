"""Page scrapers: Firecrawl API client and a plain HTML fallback."""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
import os
import re
from typing import Any, Protocol

from bs4 import BeautifulSoup
import requests

from copy_agent.config import RunConfig

logger = logging.getLogger(__name__)

USER_AGENT = "Mozilla/5.0 (compatible; copy-agent/0.1)"
_BLANK_LINES = re.compile(r"\n{3,}")


@dataclass(frozen=True)
class ScrapeResult:
    content: str
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def title(self) -> str:
        return str(self.metadata.get("title") or "")


class Scraper(Protocol):
    def scrape(self, url: str) -> ScrapeResult | None: ...


class FirecrawlScraper:
    """Markdown scrape through the Firecrawl API. Any failure yields ``None``."""

    def __init__(self, api_key: str, *, base_url: str = "https://api.firecrawl.dev/v1", request_timeout_s: float = 30.0):
        if not api_key.strip():
            raise ValueError("api_key must be provided.")
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.request_timeout_s = request_timeout_s

    def scrape(self, url: str) -> ScrapeResult | None:
        headers = {
            "Accept": "application/json",
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        payload = {"url": url, "formats": ["markdown"], "onlyMainContent": True}
        try:
            response = requests.post(
                f"{self.base_url}/scrape",
                headers=headers,
                json=payload,
                timeout=self.request_timeout_s,
            )
            response.raise_for_status()
            body = response.json()
        except (requests.RequestException, ValueError) as e:
            logger.warning(f"Firecrawl scrape failed for {url}: {e}")
            return None

        if not isinstance(body, dict) or not body.get("success", True):
            logger.warning(f"Firecrawl returned an unsuccessful response for {url}")
            return None
        data = body.get("data") or {}
        content = str(data.get("markdown") or "")
        if not content.strip():
            return None
        metadata = data.get("metadata") or {}
        return ScrapeResult(
            content=content,
            metadata={
                "title": metadata.get("title", ""),
                "description": metadata.get("description", ""),
                "url": metadata.get("sourceURL", url),
            },
        )


class HtmlScraper:
    """Fetch a page directly and keep its visible text."""

    def __init__(self, *, request_timeout_s: float = 30.0):
        self.request_timeout_s = request_timeout_s

    def scrape(self, url: str) -> ScrapeResult | None:
        try:
            response = requests.get(url, headers={"User-Agent": USER_AGENT}, timeout=self.request_timeout_s)
            response.raise_for_status()
        except requests.RequestException as e:
            logger.warning(f"HTML scrape failed for {url}: {e}")
            return None
        return parse_html(response.text, url)


def parse_html(html: str, url: str) -> ScrapeResult | None:
    soup = BeautifulSoup(html, "html.parser")
    title = soup.title.get_text(strip=True) if soup.title else ""
    description_tag = soup.find("meta", attrs={"name": "description"})
    description = description_tag.get("content", "") if description_tag else ""

    for tag in soup(["script", "style", "nav", "footer", "noscript"]):
        tag.decompose()

    body = soup.body or soup
    text = body.get_text("\n", strip=True)
    text = _BLANK_LINES.sub("\n\n", text).strip()
    if not text:
        return None
    return ScrapeResult(content=text, metadata={"title": title, "description": description, "url": url})


def create_scraper(config: RunConfig | None = None) -> Scraper:
    """Firecrawl when ``FIRECRAWL_API_KEY`` is set, otherwise the HTML fallback."""
    config = config or RunConfig()
    timeout = config.services.http_timeout_s
    api_key = os.getenv("FIRECRAWL_API_KEY", "").strip()
    if api_key:
        return FirecrawlScraper(api_key, base_url=config.services.firecrawl_base_url, request_timeout_s=timeout)
    logger.info("FIRECRAWL_API_KEY not set, using plain HTML scraping")
    return HtmlScraper(request_timeout_s=timeout)
