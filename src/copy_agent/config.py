"""Runtime configuration loading."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, model_validator


class PhaseModel(BaseModel):
    model: str
    temperature: float = Field(default=0.7, ge=0, le=2)
    max_tokens: int = Field(default=4096, ge=1)


def _sonnet(temperature: float, max_tokens: int) -> PhaseModel:
    return PhaseModel(model="claude-sonnet-4-20250514", temperature=temperature, max_tokens=max_tokens)


def _gpt4o(temperature: float, max_tokens: int) -> PhaseModel:
    return PhaseModel(model="gpt-4o", temperature=temperature, max_tokens=max_tokens)


def _gpt4o_mini(temperature: float, max_tokens: int) -> PhaseModel:
    return PhaseModel(model="gpt-4o-mini", temperature=temperature, max_tokens=max_tokens)


class ModelRouting(BaseModel):
    """Which model (and sampling settings) each generation step uses."""

    brief: PhaseModel = Field(default_factory=lambda: _sonnet(0.7, 2000))
    architecture: PhaseModel = Field(default_factory=lambda: _sonnet(0.5, 3000))
    beatsheet: PhaseModel = Field(default_factory=lambda: _sonnet(0.5, 4000))
    draft_v0: PhaseModel = Field(default_factory=lambda: _gpt4o(0.8, 4000))
    cohesion: PhaseModel = Field(default_factory=lambda: _gpt4o_mini(0.3, 4000))
    rhythm: PhaseModel = Field(default_factory=lambda: _gpt4o_mini(0.4, 4000))
    channel: PhaseModel = Field(default_factory=lambda: _gpt4o(0.4, 4000))
    final_package: PhaseModel = Field(default_factory=lambda: _gpt4o(0.5, 6000))
    variants: PhaseModel = Field(default_factory=lambda: _gpt4o(0.8, 2000))
    repair: PhaseModel = Field(default_factory=lambda: _gpt4o_mini(0.0, 4000))
    facts: PhaseModel = Field(default_factory=lambda: _gpt4o(0.0, 2000))
    slop_review: PhaseModel = Field(default_factory=lambda: _gpt4o(0.2, 2000))
    domain: PhaseModel = Field(default_factory=lambda: _sonnet(0.3, 4000))

    def for_step(self, step: str) -> PhaseModel:
        if step not in type(self).model_fields:
            raise ValueError(f"No model routing for step '{step}'.")
        return getattr(self, step)


class Thresholds(BaseModel):
    slop_pass_score: int = Field(default=70, ge=0, le=100)
    slop_external_opinion_min: int = Field(default=50, ge=0, le=100)
    slop_rule_weight: float = Field(default=0.4, ge=0, le=1)
    slop_external_weight: float = Field(default=0.6, ge=0, le=1)

    bad_example_overlap: float = Field(default=0.5, ge=0, le=1)
    bad_example_min_matches: int = Field(default=3, ge=1)
    bad_example_min_word_len: int = Field(default=5, ge=1)

    specificity_min_chars: int = Field(default=50, ge=0)


class RetryLimits(BaseModel):
    regeneration_attempts: int = Field(default=2, ge=1)
    schema_repairs: int = Field(default=1, ge=0)
    rate_limit_retries: int = Field(default=5, ge=0)


class FanoutConfig(BaseModel):
    max_workers: int = Field(default=5, ge=1)
    variants: bool = True


class ServiceConfig(BaseModel):
    firecrawl_base_url: str = "https://api.firecrawl.dev/v1"
    serpapi_base_url: str = "https://serpapi.com/search.json"
    storage_upload_url: str | None = None
    http_timeout_s: float = Field(default=30.0, gt=0)


DEFAULT_EXCLUDED_DOMAINS = [
    "zillow.com",
    "realtor.com",
    "redfin.com",
    "yelp.com",
    "yellowpages.com",
    "linkedin.com",
    "facebook.com",
    "instagram.com",
]


class ImmersionConfig(BaseModel):
    max_competitor_urls: int = Field(default=8, ge=0)
    max_scraped_competitors: int = Field(default=5, ge=0)
    queries_to_search: int = Field(default=3, ge=1)
    results_per_query: int = Field(default=5, ge=1)
    min_client_chars: int = Field(default=200, ge=0)
    min_competitor_chars: int = Field(default=500, ge=0)
    excluded_domains: list[str] = Field(default_factory=lambda: list(DEFAULT_EXCLUDED_DOMAINS))
    cache_dir: str | None = None


class RunConfig(BaseModel):
    project_name: str = "copy-agent"
    models: ModelRouting = Field(default_factory=ModelRouting)
    thresholds: Thresholds = Field(default_factory=Thresholds)
    retry_limits: RetryLimits = Field(default_factory=RetryLimits)
    fanout: FanoutConfig = Field(default_factory=FanoutConfig)
    services: ServiceConfig = Field(default_factory=ServiceConfig)
    immersion: ImmersionConfig = Field(default_factory=ImmersionConfig)

    @model_validator(mode="after")
    def validate_weights(self) -> "RunConfig":
        total = self.thresholds.slop_rule_weight + self.thresholds.slop_external_weight
        if abs(total - 1.0) > 1e-6:
            raise ValueError("slop_rule_weight and slop_external_weight must sum to 1.0.")
        if self.immersion.cache_dir is not None and not self.immersion.cache_dir.strip():
            self.immersion.cache_dir = None
        return self


def load_config(config_path: Path) -> RunConfig:
    """Load and validate YAML config."""
    raw = yaml.safe_load(config_path.read_text(encoding="utf-8")) or {}
    return RunConfig.model_validate(raw)


def config_dict_for_hash(config: RunConfig) -> dict[str, Any]:
    """Stable representation used for config hashing."""
    return config.model_dump(mode="json")
