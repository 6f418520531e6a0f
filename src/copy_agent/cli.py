"""Command line interface."""

from __future__ import annotations

import json
import logging
from pathlib import Path

from dotenv import load_dotenv
import typer

# Load .env file for API keys
load_dotenv()

from copy_agent.automation.generation import GenerationService
from copy_agent.config import RunConfig, config_dict_for_hash, load_config
from copy_agent.core.draft_validator import DraftValidator
from copy_agent.core.fact_inventory import FactInventoryEngine, format_constraint
from copy_agent.core.post_processor import post_process
from copy_agent.core.slop_scorer import SlopScorer
from copy_agent.domain.immersion import DomainImmersion, DomainProfileCache
from copy_agent.errors import GenerationError, PipelineError
from copy_agent.io.hashing import sha256_json
from copy_agent.io.json_io import load_json
from copy_agent.io.transcript_logger import TranscriptLogger
from copy_agent.providers.keywords import SerpApiKeywordResearch
from copy_agent.providers.scrape import create_scraper
from copy_agent.providers.storage import create_storage
from copy_agent.rules.campaigns import detect_campaign_type, get_campaign
from copy_agent.rules.catalog import get_rules
from copy_agent.schemas.artifacts import DomainProfile, TaskSpec
from copy_agent.state_machine.orchestrator import PhaseOrchestrator
from copy_agent.state_machine.state_store import RunStore, build_run_id

app = typer.Typer(help="Constrained marketing copy generation CLI", add_completion=False)


@app.callback()
def main_callback(verbose: bool = typer.Option(False, "--verbose", "-v", help="Log progress to stderr")) -> None:
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
    )


def _base_dir() -> Path:
    return Path.cwd()


def _emit(payload: dict) -> None:
    typer.echo(json.dumps(payload, indent=2, ensure_ascii=True))


def _load_run_config(config: Path | None) -> RunConfig:
    return load_config(config.resolve()) if config else RunConfig()


def _build_immersion(service: GenerationService, config: RunConfig) -> DomainImmersion:
    return DomainImmersion(
        service,
        create_scraper(config),
        SerpApiKeywordResearch.from_env(config),
        config.immersion,
        cache=DomainProfileCache(config.immersion.cache_dir),
        max_workers=config.fanout.max_workers,
    )


@app.command("generate")
def generate(
    task: Path = typer.Option(..., "--task", help="Path to TaskSpec JSON"),
    config: Path | None = typer.Option(None, "--config", help="Path to YAML config"),
    facts_file: Path | None = typer.Option(None, "--facts-file", help="Text file with client facts"),
    domain_url: str | None = typer.Option(None, "--domain-url", help="Client site to research first"),
    out: Path | None = typer.Option(None, "--out", help="Base directory for runs/ (default: cwd)"),
) -> None:
    """Run the full phase pipeline for one TaskSpec."""
    run_config = _load_run_config(config)
    task_spec = TaskSpec.model_validate(load_json(task.resolve()))
    store = RunStore(out.resolve() if out else _base_dir())
    run_id = build_run_id()
    transcript = TranscriptLogger(run_id, store.ensure_layout(run_id))
    service = GenerationService(run_config, transcript=transcript)

    try:
        fact_inventory = None
        if facts_file is not None:
            fact_inventory = FactInventoryEngine(service).extract(facts_file.read_text(encoding="utf-8"))
        domain_profile = None
        if domain_url:
            domain_profile = _build_immersion(service, run_config).immerse(domain_url)
        result = PhaseOrchestrator(service, run_config, store=store).run(
            task_spec, fact_inventory, domain_profile, run_id=run_id
        )
    except (PipelineError, GenerationError) as exc:
        transcript.save()
        _emit({"run_id": run_id, "error": str(exc)})
        raise typer.Exit(code=1)

    payload = result.to_dict()
    payload["path"] = str(store.run_dir(run_id))
    payload["config_hash"] = sha256_json(config_dict_for_hash(run_config))
    storage = create_storage(
        run_config.services.storage_upload_url,
        request_timeout_s=run_config.services.http_timeout_s,
    )
    if storage is not None:
        payload["export_url"] = storage.upload(result.final_package.final.encode("utf-8"), "text/markdown")
    _emit(payload)


@app.command("validate")
def validate(
    file: Path = typer.Option(..., "--file", help="Text file with the draft"),
    channel: str = typer.Option("website", "--channel", help="Channel whose rules apply"),
) -> None:
    """Run the deterministic rule checks on a draft."""
    result = DraftValidator().validate(file.read_text(encoding="utf-8"), channel)
    _emit(result.model_dump(mode="json"))


@app.command("score")
def score(
    file: Path = typer.Option(..., "--file", help="Text file with the copy"),
    domain_profile: Path | None = typer.Option(None, "--domain-profile", help="DomainProfile JSON"),
    external: bool = typer.Option(False, "--external/--no-external", help="Ask a model for a second opinion"),
    config: Path | None = typer.Option(None, "--config", help="Path to YAML config"),
) -> None:
    """Score copy for generic marketing language."""
    run_config = _load_run_config(config)
    profile = DomainProfile.model_validate(load_json(domain_profile.resolve())) if domain_profile else None
    scorer = SlopScorer(GenerationService(run_config) if external else None, run_config.thresholds)
    result = scorer.score(file.read_text(encoding="utf-8"), profile, use_external=external)
    _emit(result.model_dump(mode="json"))


@app.command("post-process")
def post_process_cmd(file: Path = typer.Option(..., "--file", help="Text file to clean")) -> None:
    """Apply the deterministic dash, exclamation and whitespace fixes."""
    _emit({"text": post_process(file.read_text(encoding="utf-8"))})


@app.command("facts")
def facts(
    file: Path = typer.Option(..., "--file", help="Text file with client facts"),
    config: Path | None = typer.Option(None, "--config", help="Path to YAML config"),
) -> None:
    """Extract the fact allow-list and print the prompt constraint built from it."""
    engine = FactInventoryEngine(GenerationService(_load_run_config(config)))
    try:
        inventory = engine.extract(file.read_text(encoding="utf-8"))
    except GenerationError as exc:
        _emit({"error": str(exc)})
        raise typer.Exit(code=1)
    _emit({"inventory": inventory.model_dump(mode="json"), "constraint": format_constraint(inventory)})


@app.command("immerse")
def immerse(
    url: str = typer.Option(..., "--url", help="Client website"),
    quick: bool = typer.Option(False, "--quick", help="Skip competitor research"),
    config: Path | None = typer.Option(None, "--config", help="Path to YAML config"),
) -> None:
    """Build a DomainProfile for a client site."""
    run_config = _load_run_config(config)
    immersion = _build_immersion(GenerationService(run_config), run_config)
    try:
        profile = immersion.quick_immerse(url) if quick else immersion.immerse(url)
    except GenerationError as exc:
        _emit({"error": str(exc)})
        raise typer.Exit(code=1)
    if profile is None:
        _emit({"error": f"Not enough content at {url}"})
        raise typer.Exit(code=1)
    _emit(profile.model_dump(mode="json"))


@app.command("rules")
def rules(channel: str = typer.Option(..., "--channel", help="Channel name or alias")) -> None:
    """Show the rule catalog entry a channel resolves to."""
    _emit(get_rules(channel).rules_context(forbidden_limit=1000))


@app.command("campaign")
def campaign(text: str = typer.Option(..., "--text", help="Brief or context text")) -> None:
    """Detect the email campaign type for a piece of context text."""
    detected = detect_campaign_type(text)
    if detected is None:
        _emit({"campaign_type": None})
        return
    _emit({"campaign_type": detected.value, "structure": get_campaign(detected).prompt_context()})


def main() -> None:
    app()


if __name__ == "__main__":
    main()
