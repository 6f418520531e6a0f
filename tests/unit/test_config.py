from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from copy_agent.config import RunConfig, config_dict_for_hash, load_config
from copy_agent.io.hashing import sha256_json
from copy_agent.schemas.artifacts import TaskSpec
from copy_agent.schemas.registry import PHASE_ARTIFACTS, parse_phase_result
from tests.helpers import sample_architecture, sample_task_payload


def test_defaults_match_pipeline_limits() -> None:
    config = RunConfig()
    assert config.retry_limits.regeneration_attempts == 2
    assert config.retry_limits.schema_repairs == 1
    assert config.thresholds.slop_pass_score == 70
    assert config.fanout.max_workers == 5


def test_load_config_merges_yaml_over_defaults(tmp_path: Path) -> None:
    path = tmp_path / "config.yaml"
    path.write_text(
        "project_name: acme\n"
        "models:\n"
        "  draft_v0:\n"
        "    model: gpt-4o-mini\n"
        "    temperature: 0.9\n"
        "fanout:\n"
        "  variants: false\n"
        "immersion:\n"
        "  cache_dir: '  '\n",
        encoding="utf-8",
    )

    config = load_config(path)

    assert config.project_name == "acme"
    assert config.models.draft_v0.model == "gpt-4o-mini"
    assert config.models.brief.model.startswith("claude")
    assert config.fanout.variants is False
    assert config.immersion.cache_dir is None


def test_empty_yaml_gives_defaults(tmp_path: Path) -> None:
    path = tmp_path / "config.yaml"
    path.write_text("", encoding="utf-8")
    assert load_config(path) == RunConfig()


def test_slop_weights_must_sum_to_one() -> None:
    with pytest.raises(ValidationError, match="must sum to 1.0"):
        RunConfig.model_validate({"thresholds": {"slop_rule_weight": 0.5, "slop_external_weight": 0.6}})


def test_config_hash_is_stable() -> None:
    assert sha256_json(config_dict_for_hash(RunConfig())) == sha256_json(config_dict_for_hash(RunConfig()))


def test_length_budget_target_cannot_exceed_hard_max() -> None:
    payload = sample_task_payload()
    payload["length_budget"] = {"target": 200, "hard_max": 100}
    with pytest.raises(ValidationError):
        TaskSpec.model_validate(payload)


def test_task_spec_is_immutable() -> None:
    task = TaskSpec.model_validate(sample_task_payload())
    with pytest.raises(ValidationError):
        task.goal = "something else"  # type: ignore[misc]


def test_parse_phase_result_uses_registry() -> None:
    architecture = parse_phase_result("architecture", sample_architecture())
    assert architecture.primary_claim == "Acme Ledger closes the books in 3 days"
    assert PHASE_ARTIFACTS["architecture"].filename == "architecture.json"

    with pytest.raises(ValueError, match="does not produce an artifact"):
        parse_phase_result("done", {})
