"""Domain immersion: scrape a client site and its competitors into a DomainProfile."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor, as_completed
import logging
from pathlib import Path
from threading import Lock
from urllib.parse import urlparse

from copy_agent.automation.generation import GenerationService
from copy_agent.config import ImmersionConfig
from copy_agent.io.hashing import sha256_text
from copy_agent.io.json_io import dump_model, load_json
from copy_agent.prompts import SYSTEM_PROMPTS, build_domain_analysis_prompt, build_niche_discovery_prompt
from copy_agent.providers.keywords import SerpApiKeywordResearch
from copy_agent.providers.scrape import Scraper, ScrapeResult
from copy_agent.schemas.artifacts import CompetitorRecord, DomainProfile, NicheDiscovery

logger = logging.getLogger(__name__)


def hostname(url: str) -> str:
    host = urlparse(url if "//" in url else f"//{url}").hostname or ""
    return host.lower().removeprefix("www.")


def normalize_url(url: str) -> str:
    parsed = urlparse(url.strip() if "//" in url else f"//{url.strip()}")
    host = (parsed.hostname or "").lower().removeprefix("www.")
    path = parsed.path.rstrip("/")
    return f"{host}{path}"


class DomainProfileCache:
    """Profiles keyed by the sha256 of the normalized source URL.

    Cached profiles are returned as-is; ``put`` replaces the entry wholesale.
    With ``cache_dir`` set, entries are also persisted as JSON files.
    """

    def __init__(self, cache_dir: str | Path | None = None):
        self.cache_dir = Path(cache_dir) if cache_dir else None
        self._profiles: dict[str, DomainProfile] = {}
        self._lock = Lock()

    @staticmethod
    def key_for(url: str) -> str:
        return sha256_text(normalize_url(url))

    def get(self, url: str) -> DomainProfile | None:
        key = self.key_for(url)
        with self._lock:
            if key in self._profiles:
                return self._profiles[key]
        if self.cache_dir is None:
            return None
        path = self.cache_dir / f"{key}.json"
        if not path.exists():
            return None
        profile = DomainProfile.model_validate(load_json(path))
        with self._lock:
            self._profiles[key] = profile
        return profile

    def put(self, url: str, profile: DomainProfile) -> None:
        key = self.key_for(url)
        with self._lock:
            self._profiles[key] = profile
        if self.cache_dir is not None:
            dump_model(self.cache_dir / f"{key}.json", profile)


class DomainImmersion:
    def __init__(
        self,
        service: GenerationService,
        scraper: Scraper,
        keywords: SerpApiKeywordResearch,
        config: ImmersionConfig | None = None,
        cache: DomainProfileCache | None = None,
        max_workers: int = 5,
    ):
        self.service = service
        self.scraper = scraper
        self.keywords = keywords
        self.config = config or ImmersionConfig()
        self.cache = cache
        self.max_workers = max_workers

    def immerse(self, client_url: str, *, refresh: bool = False) -> DomainProfile | None:
        """Full research run. Returns ``None`` when the client site yields too little text."""
        if self.cache is not None and not refresh:
            cached = self.cache.get(client_url)
            if cached is not None:
                logger.info(f"Using cached domain profile for {client_url}")
                return cached

        client = self._scrape_client(client_url)
        if client is None:
            return None

        niche = self.service.generate(
            SYSTEM_PROMPTS["niche_discovery"],
            build_niche_discovery_prompt(client_url, client.content, NicheDiscovery),
            NicheDiscovery,
            step="domain",
        )
        logger.info(f"Niche for {client_url}: {niche.industry} / {niche.sub_niche or '-'}")

        urls = self.discover_competitors(client_url, niche.search_queries)
        competitors = self.scrape_competitors(urls)
        profile = self._analyze(client_url, client.content, competitors, niche.industry, niche.sub_niche)
        if niche.location and not profile.location:
            profile = profile.model_copy(update={"location": niche.location})

        if self.cache is not None:
            self.cache.put(client_url, profile)
        return profile

    def quick_immerse(self, client_url: str) -> DomainProfile | None:
        """Client page and a single analysis call, no competitor research."""
        client = self._scrape_client(client_url)
        if client is None:
            return None
        return self._analyze(client_url, client.content, [], "(infer from the client page)", "")

    def discover_competitors(self, client_url: str, search_queries: list[str]) -> list[str]:
        client_domain = hostname(client_url)
        excluded = {domain.lower() for domain in self.config.excluded_domains}
        seen_domains: set[str] = set()
        urls: list[str] = []
        for query in search_queries[: self.config.queries_to_search]:
            for url in self.keywords.competitor_urls(query, self.config.results_per_query):
                domain = hostname(url)
                if not domain or domain == client_domain or domain in seen_domains:
                    continue
                if any(domain == item or domain.endswith(f".{item}") for item in excluded):
                    continue
                seen_domains.add(domain)
                urls.append(url)
        logger.info(f"Found {len(urls)} candidate competitor URLs")
        return urls[: self.config.max_competitor_urls]

    def scrape_competitors(self, urls: list[str]) -> list[tuple[CompetitorRecord, str]]:
        """Parallel scrape; pages that fail or are too thin are dropped."""
        urls = urls[: self.config.max_scraped_competitors]
        if not urls:
            return []
        max_workers = min(self.max_workers, len(urls))
        logger.info(f"Scraping {len(urls)} competitors in parallel (max_workers={max_workers})")

        scraped: dict[str, ScrapeResult] = {}
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            futures = {executor.submit(self.scraper.scrape, url): url for url in urls}
            for future in as_completed(futures):
                url = futures[future]
                try:
                    result = future.result()
                except Exception as e:
                    logger.error(f"Failed to scrape competitor {url}: {e}")
                    continue
                if result is None or len(result.content) <= self.config.min_competitor_chars:
                    logger.info(f"Skipping {url}: not enough content")
                    continue
                scraped[url] = result

        return [
            (CompetitorRecord(url=url, name=scraped[url].title or hostname(url)), scraped[url].content)
            for url in urls
            if url in scraped
        ]

    def _scrape_client(self, client_url: str) -> ScrapeResult | None:
        client = self.scraper.scrape(client_url)
        if client is None or len(client.content) < self.config.min_client_chars:
            logger.warning(f"Could not get enough content from {client_url}, skipping immersion")
            return None
        return client

    def _analyze(
        self,
        client_url: str,
        client_content: str,
        competitors: list[tuple[CompetitorRecord, str]],
        industry: str,
        sub_niche: str,
    ) -> DomainProfile:
        prompt = build_domain_analysis_prompt(
            client_url,
            client_content,
            [(record.url, content) for record, content in competitors],
            industry,
            sub_niche,
            DomainProfile,
        )
        profile = self.service.generate(SYSTEM_PROMPTS["domain_analysis"], prompt, DomainProfile, step="domain")
        if competitors and not profile.competitors_analyzed:
            profile = profile.model_copy(
                update={"competitors_analyzed": [record for record, _content in competitors]}
            )
        return profile
